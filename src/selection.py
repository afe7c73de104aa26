"""
Selection of the source assistants a run processes.
"""

from typing import Iterable, List, Optional

from errors import ConfigurationError
from models import AssistantSnapshot

CLONE_MODES = ("all", "by_id", "by_name")


def check_selection_params(
    mode: str,
    ids: Optional[Iterable[str]] = None,
    name_prefix: Optional[str] = None,
) -> None:
    """
    Validate the parameters a selection mode needs.

    Raises:
        ConfigurationError: Unknown mode, or missing ids / name prefix
    """
    if mode not in CLONE_MODES:
        raise ConfigurationError(
            f"Invalid clone mode: {mode}. Use one of: {', '.join(CLONE_MODES)}"
        )
    if mode == "by_id" and not list(ids or []):
        raise ConfigurationError("CLONE_IDS is required when CLONE_MODE=by_id")
    if mode == "by_name" and not name_prefix:
        raise ConfigurationError("CLONE_NAME_PREFIX is required when CLONE_MODE=by_name")


def select_assistants(
    assistants: List[AssistantSnapshot],
    mode: str,
    ids: Optional[Iterable[str]] = None,
    name_prefix: Optional[str] = None,
) -> List[AssistantSnapshot]:
    """
    Filter the source assistants according to the selection mode.

    ``by_name`` matches the prefix anywhere in the name, ignoring case.
    The relative order of the input is kept.

    Args:
        assistants: Every assistant in the source scope
        mode: "all", "by_id" or "by_name"
        ids: Assistant IDs for by_id
        name_prefix: Name fragment for by_name

    Returns:
        The selected assistants
    """
    if mode == "all":
        return list(assistants)

    if mode == "by_id":
        wanted = set(ids or [])
        return [a for a in assistants if a.id in wanted]

    if mode == "by_name":
        needle = (name_prefix or "").lower()
        return [a for a in assistants if needle in (a.name or "").lower()]

    raise ConfigurationError(f"Invalid clone mode: {mode}")

"""
Configuration management for the Assistant Cloner.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from errors import ConfigurationError
from selection import check_selection_params

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warn", "error")


def _env_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def _split_ids(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class ClonerConfig:
    """Configuration for a clone, plan, export or import run."""

    src_api_key: Optional[str] = None
    dst_api_key: Optional[str] = None
    src_org_id: Optional[str] = None
    dst_org_id: Optional[str] = None
    src_project_id: Optional[str] = None
    dst_project_id: Optional[str] = None
    clone_mode: str = "all"
    clone_ids: List[str] = field(default_factory=list)
    clone_name_prefix: Optional[str] = None
    dry_run: bool = False
    include_file_search: bool = False
    include_code_interpreter: bool = False
    max_concurrency: int = 3
    log_level: str = "info"
    output_dir: str = "./out"

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "ClonerConfig":
        """
        Create configuration from environment variables.

        Args:
            environ: Environment mapping (usually os.environ after load_dotenv)

        Returns:
            ClonerConfig instance

        Raises:
            ConfigurationError: If MAX_CONCURRENCY is not an integer
        """
        raw_concurrency = environ.get("MAX_CONCURRENCY") or "3"
        try:
            max_concurrency = int(raw_concurrency)
        except ValueError:
            raise ConfigurationError(
                f"MAX_CONCURRENCY must be an integer, got {raw_concurrency!r}"
            )

        return cls(
            src_api_key=environ.get("OPENAI_SRC_API_KEY") or None,
            dst_api_key=environ.get("OPENAI_DST_API_KEY") or None,
            src_org_id=environ.get("OPENAI_SRC_ORG_ID") or None,
            dst_org_id=environ.get("OPENAI_DST_ORG_ID") or None,
            src_project_id=environ.get("OPENAI_SRC_PROJECT_ID") or None,
            dst_project_id=environ.get("OPENAI_DST_PROJECT_ID") or None,
            clone_mode=environ.get("CLONE_MODE") or "all",
            clone_ids=_split_ids(environ.get("CLONE_IDS")),
            clone_name_prefix=environ.get("CLONE_NAME_PREFIX") or None,
            dry_run=_env_bool(environ.get("DRY_RUN")),
            include_file_search=_env_bool(environ.get("INCLUDE_FILE_SEARCH")),
            include_code_interpreter=_env_bool(environ.get("INCLUDE_CODE_INTERPRETER")),
            max_concurrency=max_concurrency,
            log_level=(environ.get("LOG_LEVEL") or "info").lower(),
            output_dir=environ.get("OUTPUT_DIR") or "./out",
        )

    @classmethod
    def from_args(cls, args, environ: Mapping[str, str]) -> "ClonerConfig":
        """
        Create configuration from the environment, overridden by CLI flags.

        Flags left at None (or False for switches) keep the environment value.

        Args:
            args: Parsed argparse arguments
            environ: Environment mapping

        Returns:
            ClonerConfig instance
        """
        config = cls.from_env(environ)

        if getattr(args, "mode", None):
            config.clone_mode = args.mode
        if getattr(args, "ids", None):
            config.clone_ids = _split_ids(",".join(args.ids))
        if getattr(args, "name_prefix", None):
            config.clone_name_prefix = args.name_prefix
        if getattr(args, "dry_run", False):
            config.dry_run = True
        if getattr(args, "include_file_search", False):
            config.include_file_search = True
        if getattr(args, "include_code_interpreter", False):
            config.include_code_interpreter = True
        if getattr(args, "max_concurrency", None) is not None:
            config.max_concurrency = args.max_concurrency
        if getattr(args, "output_dir", None):
            config.output_dir = args.output_dir
        if getattr(args, "log_level", None):
            config.log_level = args.log_level.lower()
        if getattr(args, "verbose", False):
            config.log_level = "debug"

        return config

    def validate(
        self, require_source: bool = True, require_destination: bool = True
    ) -> None:
        """
        Check the configuration before any API call is made.

        Args:
            require_source: Source credentials are needed for this run
            require_destination: Destination credentials are needed for this run

        Raises:
            ConfigurationError: If anything required is missing or invalid
        """
        missing = []
        if require_source and not self.src_api_key:
            missing.append("OPENAI_SRC_API_KEY")
        if require_destination and not self.dst_api_key:
            missing.append("OPENAI_DST_API_KEY")
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

        if require_source:
            check_selection_params(
                self.clone_mode, self.clone_ids, self.clone_name_prefix
            )

        if self.max_concurrency < 1:
            raise ConfigurationError(
                f"MAX_CONCURRENCY must be at least 1, got {self.max_concurrency}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL: {self.log_level}. Use one of: {', '.join(LOG_LEVELS)}"
            )

        if self.include_file_search:
            logger.warning(
                "INCLUDE_FILE_SEARCH=true: every vector store file is downloaded and re-uploaded"
            )
        if self.include_code_interpreter:
            logger.warning(
                "INCLUDE_CODE_INTERPRETER=true: every code interpreter file is downloaded and re-uploaded"
            )

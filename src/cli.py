"""Console entry point for the Assistant Cloner CLI."""

from __future__ import annotations

import argparse
import logging
import os
from typing import List

from dotenv import load_dotenv

from clients import OpenAIRestClient
from cloner import AssistantCloner
from config import LOG_LEVELS, ClonerConfig
from errors import ClonerError, ConfigurationError
from log_utils import setup_logging
from reporter import CloneReport, Reporter, print_summary
from selection import CLONE_MODES
from transfer import AssistantImporter, export_assistants, load_export

logger = logging.getLogger(__name__)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dry-run", action="store_true", help="Simulate only")
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        metavar="N",
        help="Assistants processed in parallel (env MAX_CONCURRENCY, default 3)",
    )
    parser.add_argument(
        "--output-dir", default=None, help="Report directory (env OUTPUT_DIR)"
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None)
    parser.add_argument("--verbose", action="store_true")


def _add_selection_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode", choices=CLONE_MODES, default=None, help="Selection mode (env CLONE_MODE)"
    )
    parser.add_argument(
        "--ids", nargs="+", default=None, help="Assistant IDs for --mode by_id"
    )
    parser.add_argument(
        "--name-prefix",
        default=None,
        help=(
            "Name filter for --mode by_name (case-insensitive substring); "
            "also prefixed to the cloned names"
        ),
    )
    parser.add_argument("--include-file-search", action="store_true")
    parser.add_argument("--include-code-interpreter", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="assistant-cloner",
        description="Clone OpenAI Assistants between organizations and projects",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan = subparsers.add_parser("plan", help="Show what would be cloned")
    _add_selection_options(plan)
    _add_common_options(plan)

    apply = subparsers.add_parser("apply", help="Clone assistants")
    _add_selection_options(apply)
    _add_common_options(apply)

    export = subparsers.add_parser("export", help="Export source assistants to JSON")
    _add_common_options(export)

    imp = subparsers.add_parser("import", help="Import assistants from an export file")
    imp.add_argument("file", help="Export file written by the export command")
    _add_common_options(imp)

    return parser


def _run_plan(config: ClonerConfig) -> int:
    outcomes = AssistantCloner(config).plan()
    logger.info("")
    logger.info("CLONE PLAN")
    logger.info("-" * 40)
    for o in outcomes:
        logger.info(f"{o.name} ({o.src_id})")
        logger.info(f"  Operation: {o.operations['assistant']}")
        if o.dst_id:
            logger.info(f"  Existing ID: {o.dst_id}")
        for key in ("file_search", "code_interpreter"):
            verdict = o.operations.get(key, "skipped")
            if verdict != "skipped":
                logger.info(f"  {key}: {verdict}")
    print_summary(outcomes)
    return 0


def _run_apply(config: ClonerConfig) -> int:
    outcomes = AssistantCloner(config).clone()
    Reporter(config.output_dir).generate(CloneReport.from_outcomes(outcomes, config))
    counts = print_summary(outcomes)
    if counts["failed"] > 0:
        logger.warning(
            f"{counts['failed']} assistant(s) failed. See the report for details."
        )
        return 1
    return 0


def _run_export(config: ClonerConfig) -> int:
    provider = OpenAIRestClient(
        config.src_api_key, config.src_org_id, config.src_project_id
    )
    export_assistants(
        provider,
        config.output_dir,
        source={"org_id": config.src_org_id, "project_id": config.src_project_id},
    )
    return 0


def _run_import(config: ClonerConfig, path: str) -> int:
    snapshots = load_export(path)
    logger.info(f"Found {len(snapshots)} assistant(s) in {path}")
    outcomes = AssistantImporter(config).run(snapshots)
    Reporter(config.output_dir).generate(CloneReport.from_outcomes(outcomes, config))
    counts = print_summary(outcomes)
    return 1 if counts["failed"] > 0 else 0


def main(argv: List[str] | None = None) -> int:
    """CLI main for console_scripts entry point."""
    parser = build_parser()
    args = parser.parse_args(args=argv)

    load_dotenv()

    try:
        config = ClonerConfig.from_args(args, os.environ)
    except ConfigurationError as e:
        setup_logging(verbose=args.verbose)
        logger.error(f"Configuration error: {e}")
        return 1

    setup_logging(verbose=args.verbose, level=config.log_level)

    try:
        if args.command == "plan":
            config.validate()
            return _run_plan(config)
        if args.command == "apply":
            config.validate()
            return _run_apply(config)
        if args.command == "export":
            config.validate(require_destination=False)
            return _run_export(config)
        config.validate(require_source=False)
        return _run_import(config, args.file)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except ClonerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

# src/main.py — v2
"""CLI entry point.

Usage:
    binboh -i input.txt -o output.txt -- mycommand -arg1 -arg2

mycommand runs only if input.txt or output.txt changed since its last
successful run with exactly these arguments in this directory.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from binboh.core.errors import BinbohError
from binboh.engine.executor import CommandLaunchError
from binboh.logging.logger import get_logger, setup_logging, setup_logging_from_settings
from binboh.version import __version__

if TYPE_CHECKING:
    from binboh.config.settings import Settings

logger = get_logger("cli")

COMMAND_DELIMITER = "--"
EXIT_INTERNAL_ERROR = 125
EXIT_INTERRUPTED = 130


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    raw_args = sys.argv[1:] if argv is None else list(argv)
    options, command = _split_command(raw_args)

    parser = _build_parser()
    args = parser.parse_args(options)

    if not command:
        parser.print_usage(sys.stderr)
        print(
            f"{parser.prog}: error: no command specified after '{COMMAND_DELIMITER}'",
            file=sys.stderr,
        )
        return EXIT_INTERNAL_ERROR

    try:
        settings = _load_settings(args)
    except (BinbohError, ValidationError) as exc:
        setup_logging(level="ERROR")
        logger.error("Invalid configuration: %s", exc)
        return EXIT_INTERNAL_ERROR

    _setup_logging(args, settings)

    try:
        return asyncio.run(_cmd_run(args, command, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except CommandLaunchError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    except BinbohError as exc:
        logger.error("%s", exc)
        return EXIT_INTERNAL_ERROR
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=True)
        return EXIT_INTERNAL_ERROR


def _split_command(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first delimiter into (options, command)."""
    if COMMAND_DELIMITER not in argv:
        return argv, []
    idx = argv.index(COMMAND_DELIMITER)
    return argv[:idx], argv[idx + 1:]


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser. The command itself is split off beforehand."""
    parser = argparse.ArgumentParser(
        prog="binboh",
        usage="%(prog)s [options] -- COMMAND [ARG ...]",
        description=(
            "Building INcrementally Based On Hashes: run COMMAND only if the "
            "content of its input or output files changed since its last "
            "successful run."
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-i", "--input-files", dest="inputs", nargs="+", action="extend",
        default=[], metavar="FILE",
        help="Input files. Missing files are ignored.",
    )
    parser.add_argument(
        "-o", "--output-files", dest="outputs", nargs="+", action="extend",
        default=[], metavar="FILE",
        help="Output files. Missing files are ignored.",
    )
    parser.add_argument(
        "--cache-dir", type=Path, default=None,
        help="Cache root directory (default: platform user cache dir)",
    )
    parser.add_argument(
        "--backend", choices=["json", "sqlite"], default=None,
        help="Cache record backend (default: json)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Print debug information",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true",
        help="Only report errors",
    )
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    """Merge CLI overrides into environment settings."""
    from binboh.config.settings import load_settings

    overrides: dict[str, object] = {}
    if args.cache_dir is not None:
        overrides["cache_root"] = args.cache_dir
    if args.backend is not None:
        overrides["cache_backend"] = args.backend
    return load_settings(**overrides)


def _setup_logging(args: argparse.Namespace, settings: Settings) -> None:
    """Configure logging for CLI usage."""
    level: str | None = None
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    setup_logging_from_settings(settings, level=level)


async def _cmd_run(
    args: argparse.Namespace, command: list[str], settings: Settings,
) -> int:
    """Memoized execution of the command."""
    from binboh.core.models import Call, Decision
    from binboh.engine.orchestrator import Memoizer

    call = Call(
        working_directory=Path.cwd(),
        inputs=args.inputs,
        outputs=args.outputs,
        command=command,
    )
    memoizer = Memoizer.from_settings(settings)
    try:
        outcome = await memoizer.run(call)
    finally:
        memoizer.store.close()

    if outcome.decision is Decision.SKIP and not args.quiet:
        print(f"Skipped: {call.command_line}")
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())

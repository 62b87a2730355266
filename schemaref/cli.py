"""CLI entrypoints for schemaref commands."""

from __future__ import annotations

import argparse
import locale
import sys
from pathlib import Path

from .config import ConfigError
from .loader import ReflectionLoadError
from .logging import configure_logging, get_logger
from .orchestrator import STDIN_MARKER, Orchestrator, RenderOverrides
from .outputs import UnknownOutputError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemaref",
        description="Render a TypeDoc JSON project as a single categorized schema reference page.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser(
        "render",
        help="Render the reference document to standard output.",
    )
    _add_verbose_option(render_parser, suppress_default=True)
    render_parser.add_argument(
        "project",
        nargs="?",
        default=STDIN_MARKER,
        help="Path to the TypeDoc JSON project (defaults to standard input).",
    )
    render_parser.add_argument(
        "--config",
        default=".",
        help="Path to .schemaref.yml or the directory holding it (defaults to current directory).",
    )
    render_parser.add_argument(
        "--output",
        default=None,
        help="Name of the output to run (defaults to the configured default output).",
    )
    render_parser.add_argument(
        "--exclude-tag",
        dest="exclude_tags",
        action="append",
        default=[],
        metavar="TAG",
        help="Additional block tag to hide from rendered comments (repeatable).",
    )
    render_parser.add_argument(
        "--include-internal",
        action="store_true",
        help="Keep reflections marked @internal.",
    )
    render_parser.add_argument(
        "--sources",
        action="store_true",
        help="Show 'Defined in' source locations for members.",
    )

    outputs_parser = subparsers.add_parser(
        "outputs",
        help="List the registered outputs.",
    )
    _add_verbose_option(outputs_parser, suppress_default=True)

    return parser


def _configure_collation() -> None:
    """Sort declaration names with the user's collation rules."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        get_logger("cli").warning("Falling back to the C collation: %s", exc)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for schemaref commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    verbose = bool(args.verbose)
    configure_logging(verbose=verbose, log_file=args.log_file)
    _configure_collation()

    try:
        orchestrator = Orchestrator()
    except (RuntimeError, TypeError) as exc:
        parser.exit(1, f"schemaref: {exc}\n")

    if args.command == "render":
        overrides = RenderOverrides(
            output=args.output,
            exclude_tags=args.exclude_tags,
            include_internal=bool(args.include_internal),
            enable_sources=bool(args.sources),
        )
        try:
            config = orchestrator.resolve_config(Path(args.config), overrides)
            configure_logging(verbose=verbose, level_name=config.log_level, log_file=args.log_file)
            orchestrator.run_render(args.project, config=config)
        except (ConfigError, ReflectionLoadError, UnknownOutputError) as exc:
            parser.exit(1, f"schemaref render failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"schemaref render failed: {exc}\nRun with --verbose for more details.\n")
    elif args.command == "outputs":
        default = orchestrator.registry.default_output_name
        for name in orchestrator.registry.names():
            marker = " (default)" if name == default else ""
            print(f"{name}{marker}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])

"""CLI entrypoints for aiready commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import FORMATS, POLICIES, ConfigError, load_config
from .engine import AnalysisEngine, exit_code
from .logging import configure_logging, get_logger
from .repo_scanner import find_project_root
from .reporter import render


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


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug logs to this file.",
    )


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aiready",
        description="Pre-session code-health briefing for JavaScript/TypeScript repositories.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan a file or directory and report readiness and risk.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_log_file_option(scan_parser, suppress_default=True)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="File or directory to analyze (defaults to current directory).",
    )
    scan_parser.add_argument(
        "--policy",
        choices=POLICIES,
        default=None,
        help="Output policy: dependency risk briefing or quality score (default from config, else risk).",
    )
    output = scan_parser.add_mutually_exclusive_group()
    output.add_argument(
        "--json",
        action="store_true",
        help="Machine-readable output (same as --format json).",
    )
    output.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="Report format.",
    )
    scan_parser.add_argument(
        "--top",
        type=_non_negative_int,
        default=None,
        help="Show only the N worst files.",
    )
    scan_parser.add_argument(
        "--min-score",
        type=_non_negative_int,
        default=None,
        help="Exit with status 1 when the overall score is below this value (score policy).",
    )
    scan_parser.add_argument(
        "--explain",
        action="store_true",
        help="Show per-axis scores under each file (score policy table).",
    )
    scan_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colours.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port.")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for aiready commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return 0

    target = Path(args.path).expanduser()
    if not target.exists():
        parser.exit(1, f"error: path not found: {target}\n")

    try:
        config = load_config(find_project_root(target))
    except ConfigError as exc:
        parser.exit(1, f"error: {exc}\n")

    policy = args.policy or config.policy
    fmt = "json" if args.json else (args.format or config.report.format)
    top = args.top if args.top is not None else config.report.top
    min_score = args.min_score if args.min_score is not None else config.gate.min_score

    engine = AnalysisEngine.from_config(config)
    try:
        result = engine.run(target, policy=policy)
    except FileNotFoundError as exc:
        parser.exit(1, f"error: {exc}\n")
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.debug("Scan failed", exc_info=True)
        parser.exit(1, f"aiready scan failed: {exc}\nRun with --verbose for more details.\n")

    if not result.files and fmt == "table":
        print(f"no JS/TS files found in {target}")
    else:
        color = not args.no_color and fmt == "table" and sys.stdout.isatty()
        print(render(result.limited(top), fmt, explain=args.explain, color=color))

    return exit_code(result, min_score=min_score)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

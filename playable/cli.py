"""CLI entrypoints for playable commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .errors import BundleError
from .logging import configure_logging, format_size
from .orchestrator import Orchestrator


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the playable workspace holding .playable.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playable",
        description="Bundle a js-web game build into a single self-contained HTML playable ad.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Run the full pipeline and write <title>.html.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "--skip-toolchain",
        action="store_true",
        help="Do not check Java or fetch bob.jar; use the existing build output.",
    )
    build_parser.add_argument(
        "--build-game",
        action="store_true",
        default=None,
        help="Invoke bob.jar to rebuild the js-web bundle before embedding.",
    )
    build_parser.add_argument(
        "--minify-js",
        action="store_true",
        default=None,
        help="Minify inline scripts in the final artifact (off by default).",
    )

    archive_parser = subparsers.add_parser(
        "archive",
        help="Regenerate only the <title>_archive.js module.",
    )
    _add_verbose_option(archive_parser, suppress_default=True)
    _add_path_argument(archive_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Expose builds over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for playable commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()

    if args.command == "build":
        try:
            outcome = orchestrator.run_build(
                args.path,
                skip_toolchain=bool(args.skip_toolchain),
                build_game=args.build_game,
                minify_js=args.minify_js,
            )
        except BundleError as exc:
            parser.exit(1, f"playable build failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Playable written to {_relativize(outcome.artifact)} ({format_size(outcome.size)})")
    elif args.command == "archive":
        try:
            archive = orchestrator.run_archive(args.path)
        except BundleError as exc:
            parser.exit(1, f"playable archive failed: {exc}\n")
        print(f"Archive written to {_relativize(archive)}")
    elif args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

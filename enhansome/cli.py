"""CLI entrypoints for enhansome commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging, get_logger
from .models import SORT_CHOICES
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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="enhansome",
        description="Enrich curated markdown lists with live GitHub repository metadata.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    enhance_parser = subparsers.add_parser(
        "enhance",
        help="Add repository badges to markdown files, optionally sorting lists.",
    )
    _add_verbose_option(enhance_parser, suppress_default=True)
    enhance_parser.add_argument(
        "files",
        nargs="*",
        help="Markdown files to enhance (defaults to the files listed in .enhansome.yml).",
    )
    enhance_parser.add_argument(
        "--config",
        default=".",
        help="Path to .enhansome.yml or the directory containing it.",
    )
    enhance_parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to ENHANSOME_GITHUB_TOKEN or GITHUB_TOKEN).",
    )
    enhance_parser.add_argument(
        "--sort-by",
        choices=SORT_CHOICES,
        default=None,
        help="Reorder qualifying lists by stars or last commit date.",
    )
    enhance_parser.add_argument(
        "--min-links",
        type=int,
        default=None,
        help="Minimum repository links a list needs before it is sorted or exported.",
    )
    enhance_parser.add_argument(
        "--find-and-replace",
        default=None,
        help="Newline-separated literal 'find:::replace' rules applied before parsing.",
    )
    enhance_parser.add_argument(
        "--regex-find-and-replace",
        default=None,
        help="Newline-separated regex 'pattern:::replace' rules applied before parsing.",
    )
    enhance_parser.add_argument(
        "--disable-branding",
        action="store_true",
        default=None,
        help="Do not append ' with stars' to '# Awesome ...' titles.",
    )
    enhance_parser.add_argument(
        "--relative-link-prefix",
        default=None,
        help="Prefix prepended to relative link targets.",
    )
    enhance_parser.add_argument(
        "--write-json",
        action="store_true",
        default=None,
        help="Write a <name>.json export next to each markdown file.",
    )
    enhance_parser.add_argument(
        "--source-repository",
        default=None,
        help="owner/name recorded in the JSON export metadata.",
    )
    enhance_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes without writing files.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing the enhance operation.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for enhansome commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "enhance":
        try:
            config = load_config(Path(args.config))
        except ConfigError as exc:
            parser.exit(1, f"enhansome: {exc}\n")
        files = list(args.files) or [str(config.root / name) for name in config.files]
        if not files:
            parser.exit(1, "No markdown files given and none listed in .enhansome.yml\n")

        orchestrator = Orchestrator(config, token=args.token)
        failures = _enhance_files(orchestrator, files, args)
        if failures:
            parser.exit(1, f"enhansome: {failures} of {len(files)} file(s) failed\n")
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _enhance_files(orchestrator: Orchestrator, files: list[str], args: argparse.Namespace) -> int:
    logger = get_logger("cli")
    dry_run = bool(getattr(args, "dry_run", False))
    failures = 0
    for name in files:
        try:
            outcome = orchestrator.process_file(
                name,
                dry_run=dry_run,
                write_json=args.write_json,
                sort_by=args.sort_by,
                min_links=args.min_links,
                find_and_replace=args.find_and_replace,
                regex_find_and_replace=args.regex_find_and_replace,
                disable_branding=args.disable_branding,
                relative_link_prefix=args.relative_link_prefix,
                source_repository=args.source_repository,
            )
        except (OSError, RuntimeError) as exc:
            failures += 1
            logger.error("Error processing file %s: %s", name, exc)
            continue
        status = "updated" if outcome.changed else "unchanged"
        if outcome.changed and dry_run:
            status = "would change (dry-run)"
        print(f"{_relativize(outcome.path)}: {status}")
    return failures


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

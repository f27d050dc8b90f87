"""Command-line interface for codegen-compare."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler

from compare.dispatch import default_registry
from extract.query import ExtractionError
from report.render import print_diff, render_json
from runner.generator import GeneratorProcessError
from settings.config import (
    GENERATOR_LANGUAGES,
    ConfigurationError,
    build_configuration,
    load_config,
    resolve_paths,
)
from verify.compare import compare_directories, generate_baseline, run_comparison

if TYPE_CHECKING:
    from report.models import DiffNode
    from settings.config import RunConfiguration

OLD_ARGS_FLAG = "--old-args"
NEW_ARGS_FLAG = "--new-args"

# Inline run settings that a --config file already provides.
_INLINE_RUN_OPTIONS = {
    "spec_path": "--spec-path",
    "spec_root_path": "--spec-root-path",
    "output_path": "--output-path",
    "use_existing_output": "--use-existing-output",
    "generator": "--generator",
}


def configure_logging(level: int = logging.INFO) -> None:
    """Send log records to stderr through a Rich handler."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def split_generator_args(argv: list[str]) -> tuple[list[str], list[str], list[str]]:
    """Split off the generator argument segments.

    Everything after ``--old-args`` (or ``--new-args``) up to the other flag
    belongs to that generator run; the rest is for this tool.
    """
    remaining: list[str] = []
    segments: dict[str, list[str]] = {OLD_ARGS_FLAG: [], NEW_ARGS_FLAG: []}
    current: list[str] = remaining
    for arg in argv:
        if arg in segments:
            current = segments[arg]
            continue
        current.append(arg)
    return remaining, segments[OLD_ARGS_FLAG], segments[NEW_ARGS_FLAG]


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Verbose logging (and pass --debug to the generator)",
    )


def _add_format_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format (default: text)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codegen-compare",
        epilog=(
            f"Generator arguments follow {OLD_ARGS_FLAG} and {NEW_ARGS_FLAG} "
            "and must come after all other options."
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare_parser = subparsers.add_parser(
        "compare", help="Generate old and new output and compare them"
    )
    compare_parser.add_argument(
        "--config", default=None, help="TOML run configuration"
    )
    compare_parser.add_argument(
        "--language",
        choices=GENERATOR_LANGUAGES,
        default=None,
        help="Generator language to run",
    )
    compare_parser.add_argument(
        "--spec-path",
        action="append",
        default=None,
        help="Spec to generate from (repeatable)",
    )
    compare_parser.add_argument(
        "--spec-root-path",
        default=None,
        help="Root that spec paths are resolved against",
    )
    compare_parser.add_argument(
        "--output-path",
        default=None,
        help="Directory receiving the old/ and new/ generated output",
    )
    compare_parser.add_argument(
        "--use-existing-output",
        choices=("none", "old", "all"),
        default=None,
        help="Reuse output of an earlier run instead of generating it (default: none)",
    )
    compare_parser.add_argument(
        "--generator",
        default=None,
        help="Generator command (default: autorest)",
    )
    _add_format_option(compare_parser)
    _add_common_options(compare_parser)

    baseline_parser = subparsers.add_parser(
        "baseline", help="Generate old-side output to reuse in later comparisons"
    )
    baseline_parser.add_argument("--config", required=True, help="TOML run configuration")
    baseline_parser.add_argument(
        "--language",
        choices=GENERATOR_LANGUAGES,
        default=None,
        help="Only generate for this language",
    )
    _add_common_options(baseline_parser)

    diff_parser = subparsers.add_parser(
        "diff", help="Compare two existing output directories"
    )
    diff_parser.add_argument("old_dir", help="Output of the old run")
    diff_parser.add_argument("new_dir", help="Output of the new run")
    _add_format_option(diff_parser)
    _add_common_options(diff_parser)

    return parser


def _config_from_args(
    args: argparse.Namespace, old_args: list[str], new_args: list[str]
) -> RunConfiguration:
    if args.language is None:
        msg = (
            "Missing language parameter. Please use one of: "
            f"{', '.join(GENERATOR_LANGUAGES)}"
        )
        raise ConfigurationError(msg)
    if args.output_path is None:
        msg = "An output path must be provided with the --output-path parameter."
        raise ConfigurationError(msg)

    data: dict[str, object] = {
        "debug": args.debug,
        "specs": [
            {
                "spec_root_path": args.spec_root_path,
                "spec_paths": args.spec_path or [],
            }
        ],
        "languages": [
            {
                "language": args.language,
                "output_path": args.output_path,
                "old_args": old_args,
                "new_args": new_args,
                "use_existing_output": args.use_existing_output or "none",
            }
        ],
    }
    if args.generator is not None:
        data["generator"] = args.generator
    return resolve_paths(build_configuration(data), Path.cwd())


def _write_report(diff: DiffNode | None, output_format: str) -> None:
    if output_format == "json":
        sys.stdout.write(render_json(diff).decode("utf8"))
        return
    if diff is None:
        sys.stdout.write("No differences found.\n")
        return
    print_diff(diff)


def _load_config_file(args: argparse.Namespace) -> RunConfiguration:
    config = load_config(Path(args.config).expanduser())
    if args.language is not None:
        config = config.for_language(args.language)
    if args.debug and not config.debug:
        config = config.model_copy(update={"debug": True}).with_debug_args()
    return config


def _handle_compare(
    args: argparse.Namespace, old_args: list[str], new_args: list[str]
) -> int:
    if args.config is not None:
        inline = [flag for dest, flag in _INLINE_RUN_OPTIONS.items() if getattr(args, dest)]
        if old_args or new_args:
            inline.append(f"{OLD_ARGS_FLAG}/{NEW_ARGS_FLAG}")
        if inline:
            msg = f"{', '.join(inline)} cannot be combined with --config"
            raise ConfigurationError(msg)
        config = _load_config_file(args)
    else:
        config = _config_from_args(args, old_args, new_args)

    result = run_comparison(config, default_registry())
    _write_report(result.diff, args.format)
    return result.exit_code


def _handle_baseline(args: argparse.Namespace) -> int:
    config = _load_config_file(args)
    for result in generate_baseline(config):
        sys.stderr.write(f"baseline: {result.output_path}\n")
    return 0


def _handle_diff(args: argparse.Namespace) -> int:
    old_dir = Path(args.old_dir).expanduser().resolve()
    new_dir = Path(args.new_dir).expanduser().resolve()
    diff = compare_directories(old_dir, new_dir, default_registry())
    _write_report(diff, args.format)
    return 0 if diff is None else 1


def main(argv: list[str] | None = None) -> int:
    raw_args = list(sys.argv[1:] if argv is None else argv)
    remaining, old_args, new_args = split_generator_args(raw_args)

    parser = _build_parser()
    args = parser.parse_args(remaining)
    if (old_args or new_args) and args.command != "compare":
        parser.error(f"{OLD_ARGS_FLAG}/{NEW_ARGS_FLAG} only apply to compare")

    configure_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        if args.command == "compare":
            return _handle_compare(args, old_args, new_args)

        if args.command == "baseline":
            return _handle_baseline(args)

        return _handle_diff(args)
    except (ConfigurationError, GeneratorProcessError, ExtractionError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

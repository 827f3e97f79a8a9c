"""Command-line interface for jlindent."""

from __future__ import annotations

import argparse
import difflib
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jlindent.errors import ConfigError

DEFAULT_INDENT_UNIT = 4


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    files: list[Path]
    write: bool
    check: bool
    diff: bool
    indent_unit: int
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="jlindent",
        description="Re-indent Julia source files",
    )
    p.add_argument("files", nargs="*", help="Input .jl files (default: stdin)")
    p.add_argument("-w", "--write", action="store_true", help="Rewrite files in place")
    p.add_argument(
        "--check",
        action="store_true",
        help="Exit with 1 if any file needs re-indenting or has structural problems",
    )
    p.add_argument("--diff", action="store_true", help="Print a unified diff instead of the result")
    p.add_argument(
        "--indent-unit",
        type=int,
        default=None,
        metavar="N",
        help=f"Columns per indentation level (default: {DEFAULT_INDENT_UNIT})",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover jlindent.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump spans and frames to stderr")
    return p


def parse_indent_unit(value: Any) -> int:
    """Validate an indent unit from the config file or command line."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"indent unit must be an integer, got {value!r}")
    if value < 1:
        raise ConfigError(f"indent unit must be at least 1, got {value}")
    return value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "jlindent.toml"

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from exc


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    files = [Path(f) for f in args.files]
    input_dir = files[0].parent if files else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    indent_unit = DEFAULT_INDENT_UNIT
    if "indent-unit" in config:
        indent_unit = parse_indent_unit(config["indent-unit"])
    if args.indent_unit is not None:
        indent_unit = parse_indent_unit(args.indent_unit)

    return CliOptions(
        files=files,
        write=args.write,
        check=args.check,
        diff=args.diff,
        indent_unit=indent_unit,
        debug=args.debug,
    )


def format_source(text: str, options: CliOptions) -> str:
    """Re-indent one source text, dumping the walk first with --debug."""
    from jlindent.debug import dump_source
    from jlindent.indent import reindent

    if options.debug:
        dump_source(text, options.indent_unit, file=sys.stderr)
    return reindent(text, options.indent_unit)


def process(name: str, text: str, options: CliOptions) -> tuple[int, str | None]:
    """Handle one input; return (exit code, text to write back or None)."""
    from jlindent.errors import check

    result = format_source(text, options)

    if options.check:
        code = 0
        for problem in check(text):
            print(problem.format(name), file=sys.stderr)
            if problem.severity == "error":
                code = 1
        if result != text:
            print(f"would reindent {name}", file=sys.stderr)
            code = 1
        return code, None

    if options.diff:
        diff = difflib.unified_diff(
            text.splitlines(keepends=True),
            result.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        )
        sys.stdout.writelines(diff)
        return 0, None

    if options.write:
        return 0, result if result != text else None

    sys.stdout.write(result)
    return 0, None


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (ConfigError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if not options.files:
        if options.write:
            print("error: --write needs at least one file", file=sys.stderr)
            return 2
        code, _ = process("<stdin>", sys.stdin.read(), options)
        return code

    exit_code = 0
    for path in options.files:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            print(f"error: {exc}", file=sys.stderr)
            exit_code = 2
            continue
        code, rewritten = process(str(path), text, options)
        exit_code = max(exit_code, code)
        if rewritten is not None:
            path.write_text(rewritten, encoding="utf-8")
            print(f"reindented {path}", file=sys.stderr)

    return exit_code

#!/usr/bin/env python3
"""anodizer/main.py - CLI entry-point for anodizer.

Usage examples
--------------
    # Generate struct classes for every tagged record
    python -m anodizer generate pkg.sexp --source rtl/pkg.vhd -o structs.py

    # Same, with the compilation order kept in a file
    python -m anodizer generate pkg.sexp --sources-file sources.txt -o structs.py

    # List tagged and discovered records
    python -m anodizer records pkg.sexp

    # Print the synthesized evaluator program without running it
    python -m anodizer oracle pkg.sexp -o constraint_tb.vhd

Exit codes
----------
    0   Success.
    1   Usage or internal-consistency error (bad input, untagged
        subtype, unparseable simulator output, ...).
    2   Infrastructure failure (simulator stage failed or missing,
        unreadable/unwritable file).

The module doubles as ``python -m anodizer`` via the companion
``anodizer/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from anodizer import __version__
from anodizer.config import AnodizerConfig, VhdlStandard
from anodizer.errors import AnodizerError, FileSystemError, LoadError, ToolchainError
from anodizer.extractor import Known, RecordType, extract
from anodizer.loader import load_file
from anodizer.pipeline import anodize_records, build_oracle_program, prepare
from anodizer.printer import expr_to_string

_log = logging.getLogger("anodizer")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``anodizer`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("anodizer")
    root.setLevel(level)
    # Repeated main() calls (tests, embedding) must not stack handlers.
    for old in [h for h in root.handlers if getattr(h, "_anodizer_cli", False)]:
        root.removeHandler(old)
    handler._anodizer_cli = True
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """*dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser()
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        return open(p, "w", encoding="utf-8")
    except OSError as e:
        raise FileSystemError(p, e, action="write") from e


def _load_designs(paths: Sequence[str]):
    designs = []
    for raw in paths:
        designs.extend(load_file(Path(raw).expanduser()))
    return designs


def _read_sources_file(path: str) -> List[str]:
    """One VHDL path per line; blank lines and ``#`` comments are skipped."""
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise LoadError(
            f"sources file is not valid UTF-8 (byte 0x{e.object[e.start]:02x} at offset {e.start})",
            source=str(p),
        ) from e
    except OSError as e:
        raise FileSystemError(p, e, action="read") from e
    sources = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            sources.append(line)
    return sources


def _config_from_args(args: argparse.Namespace) -> AnodizerConfig:
    config = AnodizerConfig(attribute=args.attribute)
    for name in ("stop_time", "nvc", "timeout"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(config, name, value)
    if getattr(args, "build_dir", None) is not None:
        config.build_dir = Path(args.build_dir)
    if getattr(args, "std", None):
        config.standard = VhdlStandard.parse(args.std)
    if getattr(args, "output", None) and args.command == "generate":
        config.output_path = Path(args.output)
    return config


def _describe_field_type(field) -> str:
    if field.range is None:
        return field.subtype or f"<{field.unsupported}>"
    parts = []
    for bound in (field.range.left, field.range.right):
        parts.append(str(bound) if isinstance(bound, Known) else expr_to_string(bound.expr))
    return f"{field.subtype}({parts[0]} {field.range.direction.value} {parts[1]})"


def _print_record(record: RecordType, tagged: bool, stream: TextIO) -> None:
    mark = "*" if tagged else " "
    stream.write(f"{mark} {record.name}  [{record.unit}]\n")
    for field in record.fields:
        stream.write(f"      {field.name} : {_describe_field_type(field)}\n")


# ===========================================================================
# Subcommands
# ===========================================================================

def cmd_generate(args: argparse.Namespace) -> int:
    """Resolve every tagged record and write the struct module."""
    config = _config_from_args(args)
    sources = list(args.source or [])
    if args.sources_file:
        sources.extend(_read_sources_file(args.sources_file))
    designs = _load_designs(args.ast_files)

    _log.info("Generating %s from %d AST file(s)", config.output_path, len(args.ast_files))
    result = anodize_records(designs, sources, config)
    sys.stdout.write(
        f"wrote {len(result.structs)} struct(s) to {result.output_path}"
        f" ({len(result.expressions)} expression(s) evaluated)\n"
    )
    return EXIT_OK


def cmd_records(args: argparse.Namespace) -> int:
    """List records; tagged ones are starred."""
    extractor = extract(_load_designs(args.ast_files), args.attribute)
    for record in extractor.records.values():
        _print_record(record, extractor.is_tagged(record.name), sys.stdout)
    missing = [n for n in extractor.tagged_names if extractor.lookup_record(n) is None]
    for name in missing:
        sys.stdout.write(f"! {name}  [tagged, but no such record]\n")
    return EXIT_ERROR if missing else EXIT_OK


def cmd_oracle(args: argparse.Namespace) -> int:
    """Print the evaluator program for the current tags."""
    config = _config_from_args(args)
    _, classification = prepare(_load_designs(args.ast_files), config)
    program = build_oracle_program(classification, config)
    if not program.expressions:
        _log.warning("No symbolic bounds; the simulator would not be invoked.")
    stream = _open_output(args.output)
    try:
        stream.write(program.render())
    finally:
        if stream is not sys.stdout:
            stream.close()
    return EXIT_OK


# ---------------------------------------------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="anodizer",
        description=(
            "anodizer - bit-exact Python structs from tagged VHDL records.\n\n"
            "Symbolic range bounds are evaluated by running a generated\n"
            "program through the nvc simulator."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              anodizer generate pkg.sexp --source rtl/pkg.vhd -o structs.py
              anodizer records  pkg.sexp
              anodizer oracle   pkg.sexp -o constraint_tb.vhd
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_common_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "ast_files",
            nargs="+",
            metavar="AST",
            help="S-expression AST file(s) produced by the HDL front end.",
        )
        p.add_argument(
            "--attribute",
            default="anodize",
            metavar="NAME",
            help="Marker attribute that tags record types (default: anodize).",
        )

    def _add_toolchain_args(p: argparse.ArgumentParser) -> None:
        g = p.add_argument_group("toolchain")
        g.add_argument(
            "--build-dir",
            default=None,
            metavar="DIR",
            help="Build directory for libraries, logs and the evaluator (default: build).",
        )
        g.add_argument(
            "--std",
            choices=["2008", "2019"],
            default=None,
            help="VHDL standard passed to the simulator (default: 2019).",
        )
        g.add_argument(
            "--stop-time",
            default=None,
            metavar="T",
            help="Simulated time after which the evaluator is stopped (default: 1ns).",
        )
        g.add_argument(
            "--nvc",
            default=None,
            metavar="EXE",
            help="nvc executable (default: nvc on PATH).",
        )
        g.add_argument(
            "--timeout",
            type=float,
            default=None,
            metavar="SECONDS",
            help="Wall-clock limit per simulator stage (default: none).",
        )

    # --- generate ----------------------------------------------------------
    p_generate = subparsers.add_parser(
        "generate",
        help="Generate struct classes for tagged records.",
    )
    _add_common_args(p_generate)
    p_generate.add_argument(
        "--source",
        action="append",
        metavar="FILE",
        help="VHDL source to analyze with the evaluator (repeatable, in order).",
    )
    p_generate.add_argument(
        "--sources-file",
        default=None,
        metavar="LIST",
        help="File listing VHDL sources, one per line, appended after --source.",
    )
    p_generate.add_argument(
        "-o", "--output",
        required=True,
        metavar="PATH",
        help="Path of the generated Python module.",
    )
    _add_toolchain_args(p_generate)
    p_generate.set_defaults(func=cmd_generate)

    # --- records -----------------------------------------------------------
    p_records = subparsers.add_parser(
        "records",
        help="List discovered records (tagged ones starred).",
    )
    _add_common_args(p_records)
    p_records.set_defaults(func=cmd_records)

    # --- oracle ------------------------------------------------------------
    p_oracle = subparsers.add_parser(
        "oracle",
        help="Print the synthesized evaluator program.",
    )
    _add_common_args(p_oracle)
    p_oracle.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_oracle.set_defaults(func=cmd_oracle)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the anodizer CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except (ToolchainError, FileSystemError) as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except AnodizerError as exc:
        _log.error("%s", exc)
        return EXIT_ERROR
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())

"""anodizer - VHDL record types → bit-exact Python struct definitions.

This package turns tagged VHDL record types into Python classes whose
field widths match the hardware layout bit for bit.  Bounds written as
constant expressions are evaluated by the HDL simulator itself: a tiny
program printing every distinct expression is synthesized, analyzed,
elaborated and run, and its output is folded back into the layout.

Submodules
----------
ast
    Frozen-dataclass AST for the subset of VHDL design units the
    compiler reads (units, declarations, subtype indications,
    expressions).

loader
    S-expression interchange format → ``anodizer.ast`` (the external
    front end's output is consumed through ``sexpdata``).

visitor
    ``DesignVisitor`` / ``walk_design_file`` depth-first traversal with
    continue/stop control.

extractor
    ``SymbolExtractor`` - tagged type names, record tables, unit names.

printer
    Expression subtree → VHDL source text.

resolve
    Bound classification, deduplication table, back-patching, widths.

oracle
    Oracle program synthesis and simulator output parsing.

toolchain
    ``ToolchainRunner`` protocol and the ``NvcRunner`` implementation.

codegen
    ``StructDef`` model and ``CodeEmitter``-based Python generation.

runtime
    ``BitField`` / ``Bit`` / ``BitStruct`` used by generated modules.

pipeline
    ``anodize_records`` - the end-to-end driver.

main
    CLI entry-point: ``generate``, ``records``, ``oracle``.

Usage
-----
Command-line::

    python -m anodizer generate pkg.sexp --source rtl/pkg.vhd -o structs.py

Programmatic::

    from anodizer.config import AnodizerConfig
    from anodizer.loader import load_file
    from anodizer.pipeline import anodize_records

    config = AnodizerConfig(output_path="structs.py")
    designs = load_file("pkg.sexp")
    anodize_records(designs, ["rtl/pkg.vhd"], config)
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "ast",
    "codegen",
    "config",
    "errors",
    "extractor",
    "loader",
    "oracle",
    "pipeline",
    "printer",
    "resolve",
    "runtime",
    "toolchain",
    "visitor",
]

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
anodizer/codegen.py
===================

Python code generation for resolved records.

The generator works in two steps so that no string templates leak into
the resolution algorithm:

1. **Model** – ``build_struct_defs`` turns resolved records into a list
   of ``StructDef`` objects, each a list of typed ``StructField``.
2. **Format** – ``generate_module`` renders the list with a
   ``CodeEmitter``; the result is checked with Python's own parser.

Every tagged record becomes one ``BitStruct`` subclass::

    class hdr_t(BitStruct):
        \"\"\"VHDL record eth_pkg.hdr_t (13 bits).\"\"\"

        FIELDS = (
            ("valid", Bit),
            ("length", BitField[12]),
        )

        def __init__(self) -> None:
            self.valid = Bit()
            self.length = BitField[12]()

The output carries no timestamps: identical input gives byte-identical
text.
"""

from __future__ import annotations

import ast as python_ast
import keyword
import re
from dataclasses import dataclass
from io import StringIO
from typing import Any, List, Optional, Sequence, Tuple

from anodizer.errors import CodeGenSyntaxError
from anodizer.resolve import FieldKind, ResolvedRecord

__all__ = [
    "CodeEmitter",
    "StructDef",
    "StructField",
    "build_struct_defs",
    "generate_module",
    "validate_generated",
]

RUNTIME_IMPORT = "from anodizer.runtime import Bit, BitField, BitStruct"


# ═══════════════════════════════════════════════════════════════════════════
# CODE EMITTER
# ═══════════════════════════════════════════════════════════════════════════

class CodeEmitter:
    """Low-level code emission with indentation management."""

    def __init__(self, indent_str: str = "    ") -> None:
        self._buffer = StringIO()
        self._indent_str = indent_str
        self._indent_level = 0

    def emit(self, code: str) -> None:
        """Emit a line of code at the current indentation."""
        if code.strip():
            self._buffer.write(self._indent_str * self._indent_level)
            self._buffer.write(code)
        self._buffer.write("\n")

    def emit_blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._buffer.write("\n")

    def emit_comment(self, text: str) -> None:
        for line in text.split("\n"):
            self.emit(f"# {line}" if line else "#")

    def emit_docstring(self, text: str) -> None:
        lines = text.strip().split("\n")
        if len(lines) == 1:
            self.emit(f'"""{lines[0]}"""')
        else:
            self.emit('"""')
            for line in lines:
                self.emit(line)
            self.emit('"""')

    def indent(self) -> None:
        self._indent_level += 1

    def dedent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    def block(self, header: str) -> "CodeEmitter._BlockContext":
        """Context manager for indented blocks."""
        return self._BlockContext(self, header)

    class _BlockContext:
        def __init__(self, emitter: "CodeEmitter", header: str) -> None:
            self._emitter = emitter
            self._header = header

        def __enter__(self) -> "CodeEmitter":
            self._emitter.emit(self._header)
            self._emitter.indent()
            return self._emitter

        def __exit__(self, *args: Any) -> None:
            self._emitter.dedent()

    def get_code(self) -> str:
        return self._buffer.getvalue()

    @staticmethod
    def make_identifier(name: str) -> str:
        """Convert a VHDL name to a valid Python identifier."""
        result = re.sub(r"[^a-zA-Z0-9_]", "", name)
        if result and result[0].isdigit():
            result = "_" + result
        if keyword.iskeyword(result):
            result = result + "_"
        return result or "_unnamed"


# ═══════════════════════════════════════════════════════════════════════════
# STRUCT MODEL
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StructField:
    name: str
    kind: FieldKind
    width: Optional[int] = None
    nested: Optional[str] = None
    # VHDL text for the field comment, e.g. "std_logic_vector(11 downto 0)".
    vhdl: str = ""

    @property
    def identifier(self) -> str:
        return CodeEmitter.make_identifier(self.name)

    @property
    def type_expr(self) -> str:
        if self.kind is FieldKind.NESTED:
            return CodeEmitter.make_identifier(self.nested or "")
        if self.kind is FieldKind.SCALAR:
            return "Bit"
        return f"BitField[{self.width}]"


@dataclass(frozen=True)
class StructDef:
    name: str
    fields: Tuple[StructField, ...]
    package: Optional[str] = None
    width: int = 0

    @property
    def identifier(self) -> str:
        return CodeEmitter.make_identifier(self.name)

    @property
    def qualified_vhdl_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


def build_struct_defs(records: Sequence[ResolvedRecord]) -> List[StructDef]:
    """Convert fully resolved records (already in emission order)."""
    widths = {}
    structs = []
    for record in records:
        fields = []
        total = 0
        for fld in record.fields:
            if fld.kind is FieldKind.NESTED:
                fields.append(StructField(fld.name, fld.kind, nested=fld.subtype, vhdl=fld.subtype))
                total += widths.get(fld.subtype.lower(), 0)
                continue
            rng = fld.range
            vhdl = fld.subtype
            if fld.kind is FieldKind.VECTOR:
                vhdl += f"({rng.left} {rng.direction.value} {rng.right})"
            fields.append(StructField(fld.name, fld.kind, width=rng.width, vhdl=vhdl))
            total += rng.width
        widths[record.name.lower()] = total
        structs.append(StructDef(record.name, tuple(fields), record.package, total))
    return structs


# ═══════════════════════════════════════════════════════════════════════════
# MODULE RENDERING
# ═══════════════════════════════════════════════════════════════════════════

def _emit_struct(em: CodeEmitter, struct: StructDef) -> None:
    with em.block(f"class {struct.identifier}(BitStruct):"):
        em.emit_docstring(f"VHDL record {struct.qualified_vhdl_name} ({struct.width} bits).")
        em.emit_blank()
        if struct.fields:
            with em.block("FIELDS = ("):
                for fld in struct.fields:
                    em.emit(f'("{fld.identifier}", {fld.type_expr}),  # {fld.vhdl}')
            em.emit(")")
        else:
            em.emit("FIELDS = ()")
        em.emit_blank()
        with em.block("def __init__(self) -> None:"):
            if not struct.fields:
                em.emit("pass")
            for fld in struct.fields:
                em.emit(f"self.{fld.identifier} = {fld.type_expr}()")


def generate_module(structs: Sequence[StructDef]) -> str:
    """Render *structs* as a Python module and check that it parses."""
    em = CodeEmitter()
    em.emit_comment("Generated by anodizer from tagged VHDL records. Do not edit.")
    em.emit_docstring("Bit-exact Python views of tagged VHDL record types.")
    em.emit_blank()
    em.emit(RUNTIME_IMPORT)
    em.emit_blank()
    names = ", ".join(f'"{s.identifier}"' for s in structs)
    em.emit(f"__all__ = [{names}]")
    for struct in structs:
        em.emit_blank(2)
        _emit_struct(em, struct)
    code = em.get_code()
    validate_generated(code)
    return code


def validate_generated(code: str) -> None:
    try:
        python_ast.parse(code, filename="<generated>")
    except SyntaxError as e:
        raise CodeGenSyntaxError(e.msg, e.lineno, cause=e) from e

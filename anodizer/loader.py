"""anodizer/loader.py – S-expression → VHDL AST loader.

The HDL front end is an external program; it hands its parsed design
units over as an S-expression document.  This module converts the
output of ``sexpdata.loads`` (nested Python lists,
:class:`sexpdata.Symbol`, strings, ints, floats) into the typed nodes
of :mod:`anodizer.ast`.

Design principles
-----------------
* **Head-symbol dispatch** – every list ``(tag ...)`` is dispatched on
  ``tag`` to a dedicated ``_load_<tag>`` helper.
* **Fail-fast with context** – ``LoadError`` carries the document name
  and the offending form.
* **Strict units, lenient expressions** – unknown unit or declaration
  forms are errors; unknown expression forms load as
  :class:`~anodizer.ast.UnsupportedExpr` so that printing can degrade
  to a placeholder instead of aborting.

Surface syntax
--------------
::

    ;; Document
    (design-file "<path>" <unit>...)
    (design-files (design-file ...) ...)

    ;; Units
    (package <name> <decl>...)
    (package-body <name> <decl>...)
    (entity <name> <decl>...)
    (architecture <name> <entity> <decl>...)
    (package-instance <name> <uninstantiated-name>)
    (context <name>)
    (configuration <name> <entity>)

    ;; Declarations
    (type <name> (record (element <name-or-names> <subtype>)...))
    (type <name> (enum <literal>...))
    (type <name> (<other-kind> ...))
    (subtype <name> <subtype>)
    (constant <name-or-names> <subtype> [<expr>])   ;; also signal, variable,
                                                    ;; shared-variable
    (component <name>)
    (attribute <name> <type-mark>)
    (attribute-spec <attr> <entity-class> <entity-name | all | others> <expr>)
    (function <name>) (procedure <name>)
    (function-body <name> <decl>...) (procedure-body <name> <decl>...)
    (function-instance <name> <uninstantiated>)
    (procedure-instance <name> <uninstantiated>)
    (use <name>...)

    ;; Subtype indications
    <type-mark>
    (subtype-ind <type-mark> <constraint>)
        <constraint> ::= (array <discrete-range>...)
                       | (range <expr> to|downto <expr>)
                       | (record-constraint (<element> <constraint>)...)
        <discrete-range> ::= (range <expr> to|downto <expr>)
                           | (discrete <type-mark>)
                           | (range-attr <name>)

    ;; Expressions
    42  1.5  "text"  null  WIDTH  work.pkg.WIDTH
    (char "a") (bitstring "x" "FF" [<length>]) (physical 10 ns)
    (name <id>) (selected <prefix> <suffix>) (all <prefix>)
    (call <name> <arg>...) (attribute <prefix> <attr>)
    (unary <op> <x>) (binary <op> <l> <r>) (<op> <x>) (<op> <l> <r>)
    (paren <x>)

Any list may end with ``(loc <line> <col>)`` to record a source position.

Public API
----------
``load_text(text, *, source="<string>") -> list[DesignFile]``
``load_file(path) -> list[DesignFile]``
``load_expression(text) -> Expression``
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import sexpdata
from sexpdata import Symbol

from anodizer import ast as A
from anodizer.errors import FileSystemError, LoadError

__all__ = ["load_expression", "load_file", "load_text"]

logger = logging.getLogger(__name__)

Sexp = Any  # Union[list, Symbol, str, int, float]


class _Ctx:
    """Per-document loading state (document name for locations & errors)."""

    def __init__(self, source: str) -> None:
        self.source = source

    def error(self, message: str, form: Sexp = None) -> LoadError:
        return LoadError(message, source=self.source, form=form)

    def loc(self, line: int = 0, col: int = 0, file: Optional[str] = None) -> A.SourceLoc:
        return A.SourceLoc(file=file or self.source, line=line, col=col)


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════


def _is_symbol(s: Sexp) -> bool:
    return isinstance(s, Symbol)


def _sym_name(s: Sexp) -> str:
    # sexpdata < 1.0 wraps the name; newer releases subclass ``str``.
    value = getattr(s, "value", None)
    if callable(value):
        return value()
    return str(s)


def _as_ident(ctx: _Ctx, s: Sexp, what: str = "identifier") -> str:
    if _is_symbol(s):
        return _sym_name(s)
    if isinstance(s, str):
        return s
    raise ctx.error(f"Expected {what}, got {type(s).__name__}", s)


def _head(s: Sexp) -> Optional[str]:
    if isinstance(s, list) and s and _is_symbol(s[0]):
        return _sym_name(s[0]).lower()
    return None


def _split_loc(ctx: _Ctx, lst: list, file: Optional[str] = None) -> Tuple[list, A.SourceLoc]:
    """Strip a trailing ``(loc LINE COL)`` form, returning (items, location)."""
    if lst and _head(lst[-1]) == "loc":
        form = lst[-1]
        if len(form) != 3 or not all(isinstance(v, int) for v in form[1:]):
            raise ctx.error("Malformed (loc LINE COL) form", form)
        return lst[:-1], ctx.loc(form[1], form[2], file)
    return lst, ctx.loc(file=file)


def _expect_list(ctx: _Ctx, s: Sexp, *, min_len: int = 1, tag: Optional[str] = None) -> list:
    if not isinstance(s, list):
        raise ctx.error(
            f"Expected list{f' ({tag} ...)' if tag else ''}, got {type(s).__name__}", s
        )
    if len(s) < min_len:
        raise ctx.error(f"Form too short: expected at least {min_len} elements", s)
    if tag is not None and _head(s) != tag:
        raise ctx.error(f"Expected ({tag} ...)", s)
    return s


def _names(ctx: _Ctx, s: Sexp) -> Tuple[str, ...]:
    """A single identifier or a list of identifiers."""
    if isinstance(s, list):
        if not s:
            raise ctx.error("Empty identifier list", s)
        return tuple(_as_ident(ctx, item) for item in s)
    return (_as_ident(ctx, s),)


# ═══════════════════════════════════════════════════════════════════════
#  Expressions & names
# ═══════════════════════════════════════════════════════════════════════


def _name_from_dotted(ctx: _Ctx, text: str, loc: A.SourceLoc) -> A.Name:
    parts = text.split(".")
    if any(part == "" for part in parts):
        raise ctx.error(f"Malformed dotted name {text!r}")
    name: A.Name = A.SimpleName(parts[0], loc=loc)
    for part in parts[1:]:
        if part.lower() == "all":
            name = A.SelectedAllName(name, loc=loc)
        else:
            name = A.SelectedName(name, part, loc=loc)
    return name


def _load_name(ctx: _Ctx, s: Sexp) -> A.Name:
    """Load a form that must be a name (type marks, callees, prefixes)."""
    if _is_symbol(s):
        return _name_from_dotted(ctx, _sym_name(s), ctx.loc())
    if isinstance(s, list):
        expr = _load_expr(ctx, s)
        if isinstance(
            expr,
            (A.SimpleName, A.SelectedName, A.SelectedAllName, A.CallName, A.AttributeName),
        ):
            return expr
    raise ctx.error("Expected a name", s)


def _load_expr(ctx: _Ctx, s: Sexp) -> A.Expression:
    if isinstance(s, bool):
        return A.SimpleName("true" if s else "false", loc=ctx.loc())
    if isinstance(s, int):
        return A.IntegerLiteral(s, loc=ctx.loc())
    if isinstance(s, float):
        return A.RealLiteral(s, loc=ctx.loc())
    if _is_symbol(s):
        text = _sym_name(s)
        if text.lower() == "null":
            return A.NullLiteral(loc=ctx.loc())
        return _name_from_dotted(ctx, text, ctx.loc())
    if isinstance(s, str):
        return A.StringLiteral(s, loc=ctx.loc())
    if not isinstance(s, list):
        return A.UnsupportedExpr(type(s).__name__, loc=ctx.loc())
    if not s:
        raise ctx.error("Empty expression form", s)

    items, loc = _split_loc(ctx, s)
    head = _head(items)
    if head is None:
        return A.UnsupportedExpr("list", loc=loc)

    loader = _EXPR_LOADERS.get(head)
    if loader is not None:
        return loader(ctx, items, loc)

    op = A.Operator.from_spelling(head)
    if op is not None:
        if len(items) == 2:
            return _unary(ctx, op, items[1], items, loc)
        if len(items) == 3:
            return A.BinaryExpr(op, _load_expr(ctx, items[1]), _load_expr(ctx, items[2]), loc=loc)
        raise ctx.error(f"Operator '{op.value}' takes one or two operands", s)

    return A.UnsupportedExpr(head, loc=loc)


def _unary(ctx: _Ctx, op: A.Operator, operand: Sexp, form: list, loc: A.SourceLoc) -> A.UnaryExpr:
    if op not in A.UNARY_OPERATORS:
        raise ctx.error(f"'{op.value}' is not a unary operator", form)
    return A.UnaryExpr(op, _load_expr(ctx, operand), loc=loc)


def _operator(ctx: _Ctx, s: Sexp) -> A.Operator:
    text = _as_ident(ctx, s, "operator")
    op = A.Operator.from_spelling(text)
    if op is None:
        raise ctx.error(f"Unknown operator {text!r}", s)
    return op


def _expr_name(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=2)
    return A.SimpleName(_as_ident(ctx, items[1]), loc=loc)


def _expr_selected(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=3)
    return A.SelectedName(_load_name(ctx, items[1]), _as_ident(ctx, items[2]), loc=loc)


def _expr_all(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=2)
    return A.SelectedAllName(_load_name(ctx, items[1]), loc=loc)


def _expr_call(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=2)
    args = tuple(_load_expr(ctx, a) for a in items[2:])
    return A.CallName(_load_name(ctx, items[1]), args, loc=loc)


def _expr_attribute(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=3)
    return A.AttributeName(_load_name(ctx, items[1]), _as_ident(ctx, items[2]), loc=loc)


def _expr_char(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=2)
    value = _as_ident(ctx, items[1], "character")
    if len(value) != 1:
        raise ctx.error("Character literal must be exactly one character", items)
    return A.CharacterLiteral(value, loc=loc)


def _expr_bitstring(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=3)
    length = None
    if len(items) > 3:
        if not isinstance(items[3], int):
            raise ctx.error("Bit-string length must be an integer", items)
        length = items[3]
    return A.BitStringLiteral(
        _as_ident(ctx, items[1], "base"), _as_ident(ctx, items[2], "digits"), length, loc=loc
    )


def _expr_physical(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=3)
    value = items[1]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ctx.error("Physical literal needs a numeric value", items)
    return A.PhysicalLiteral(value, _as_ident(ctx, items[2], "unit"), loc=loc)


def _expr_unary(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=3)
    return _unary(ctx, _operator(ctx, items[1]), items[2], items, loc)


def _expr_binary(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=4)
    return A.BinaryExpr(
        _operator(ctx, items[1]),
        _load_expr(ctx, items[2]),
        _load_expr(ctx, items[3]),
        loc=loc,
    )


def _expr_paren(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Expression:
    _expect_list(ctx, items, min_len=2)
    return A.ParenthesizedExpr(_load_expr(ctx, items[1]), loc=loc)


_EXPR_LOADERS: Dict[str, Callable[[_Ctx, list, A.SourceLoc], A.Expression]] = {
    "name": _expr_name,
    "selected": _expr_selected,
    "all": _expr_all,
    "call": _expr_call,
    "attribute": _expr_attribute,
    "char": _expr_char,
    "bitstring": _expr_bitstring,
    "physical": _expr_physical,
    "unary": _expr_unary,
    "binary": _expr_binary,
    "paren": _expr_paren,
}


# ═══════════════════════════════════════════════════════════════════════
#  Subtype indications
# ═══════════════════════════════════════════════════════════════════════


def _load_direction(ctx: _Ctx, s: Sexp) -> A.Direction:
    text = _as_ident(ctx, s, "direction").lower()
    try:
        return A.Direction(text)
    except ValueError:
        raise ctx.error(f"Expected 'to' or 'downto', got {text!r}", s) from None


def _load_range(ctx: _Ctx, s: Sexp) -> A.RangeConstraint:
    items, loc = _split_loc(ctx, _expect_list(ctx, s, min_len=4, tag="range"))
    return A.RangeConstraint(
        _load_expr(ctx, items[1]),
        _load_direction(ctx, items[2]),
        _load_expr(ctx, items[3]),
        loc=loc,
    )


def _load_discrete_range(ctx: _Ctx, s: Sexp) -> A.DiscreteRange:
    head = _head(s)
    if head == "range":
        return _load_range(ctx, s)
    items, loc = _split_loc(ctx, _expect_list(ctx, s, min_len=2))
    if head == "discrete":
        return A.DiscreteSubtypeRange(_load_name(ctx, items[1]), loc=loc)
    if head == "range-attr":
        return A.AttributeRange(_load_name(ctx, items[1]), loc=loc)
    raise ctx.error("Expected (range ...), (discrete ...) or (range-attr ...)", s)


def _load_constraint(ctx: _Ctx, s: Sexp) -> A.Constraint:
    head = _head(s)
    if head == "array":
        items, loc = _split_loc(ctx, _expect_list(ctx, s, min_len=2))
        return A.ArrayConstraint(tuple(_load_discrete_range(ctx, r) for r in items[1:]), loc=loc)
    if head == "range":
        rng = _load_range(ctx, s)
        return A.ScalarRangeConstraint(rng, loc=rng.loc)
    if head == "record-constraint":
        items, loc = _split_loc(ctx, s)
        elements = []
        for entry in items[1:]:
            entry = _expect_list(ctx, entry, min_len=2)
            elements.append((_as_ident(ctx, entry[0]), _load_constraint(ctx, entry[1])))
        return A.RecordElementConstraint(tuple(elements), loc=loc)
    raise ctx.error("Unknown constraint form", s)


def _load_subtype(ctx: _Ctx, s: Sexp) -> A.SubtypeIndication:
    if _head(s) == "subtype-ind":
        items, loc = _split_loc(ctx, _expect_list(ctx, s, min_len=2))
        constraint = _load_constraint(ctx, items[2]) if len(items) > 2 else None
        return A.SubtypeIndication(_load_name(ctx, items[1]), constraint, loc=loc)
    mark = _load_name(ctx, s)
    return A.SubtypeIndication(mark, loc=getattr(mark, "loc", ctx.loc()))


# ═══════════════════════════════════════════════════════════════════════
#  Declarations
# ═══════════════════════════════════════════════════════════════════════


def _load_element(ctx: _Ctx, s: Sexp) -> A.ElementDeclaration:
    items, loc = _split_loc(ctx, _expect_list(ctx, s, min_len=3, tag="element"))
    return A.ElementDeclaration(_names(ctx, items[1]), _load_subtype(ctx, items[2]), loc=loc)


def _load_type_definition(ctx: _Ctx, s: Sexp) -> A.TypeDefinition:
    if _is_symbol(s):
        return A.OtherTypeDefinition(_sym_name(s).lower(), loc=ctx.loc())
    items, loc = _split_loc(ctx, _expect_list(ctx, s))
    head = _head(items)
    if head == "record":
        return A.RecordDefinition(tuple(_load_element(ctx, e) for e in items[1:]), loc=loc)
    if head == "enum":
        return A.EnumDefinition(tuple(_as_ident(ctx, lit) for lit in items[1:]), loc=loc)
    if head is None:
        raise ctx.error("Type definition must start with a kind symbol", s)
    return A.OtherTypeDefinition(head, loc=loc)


def _decl_type(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
    _expect_list(ctx, items, min_len=3)
    return A.TypeDeclaration(_as_ident(ctx, items[1]), _load_type_definition(ctx, items[2]), loc=loc)


def _decl_subtype(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
    _expect_list(ctx, items, min_len=3)
    return A.SubtypeDeclaration(_as_ident(ctx, items[1]), _load_subtype(ctx, items[2]), loc=loc)


def _decl_object(object_class: A.ObjectClass) -> Callable[[_Ctx, list, A.SourceLoc], A.Declaration]:
    def load(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
        _expect_list(ctx, items, min_len=3)
        value = _load_expr(ctx, items[3]) if len(items) > 3 else None
        return A.ObjectDeclaration(
            object_class, _names(ctx, items[1]), _load_subtype(ctx, items[2]), value, loc=loc
        )

    return load


def _decl_component(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
    _expect_list(ctx, items, min_len=2)
    return A.ComponentDeclaration(_as_ident(ctx, items[1]), loc=loc)


def _decl_attribute(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
    _expect_list(ctx, items, min_len=3)
    return A.AttributeDeclaration(_as_ident(ctx, items[1]), _load_name(ctx, items[2]), loc=loc)


def _decl_attribute_spec(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
    _expect_list(ctx, items, min_len=5)
    class_text = _as_ident(ctx, items[2], "entity class").lower()
    try:
        entity_class = A.EntityClass(class_text)
    except ValueError:
        raise ctx.error(f"Unknown entity class {class_text!r}", items) from None
    target = _as_ident(ctx, items[3], "entity name")
    kind = {"all": A.EntityNameKind.ALL, "others": A.EntityNameKind.OTHERS}.get(
        target.lower(), A.EntityNameKind.NAME
    )
    designator = A.EntityDesignator(
        kind, target if kind is A.EntityNameKind.NAME else None, loc=loc
    )
    return A.AttributeSpecification(
        _as_ident(ctx, items[1]), entity_class, designator, _load_expr(ctx, items[4]), loc=loc
    )


def _decl_subprogram(kind: A.SubprogramKind) -> Callable[[_Ctx, list, A.SourceLoc], A.Declaration]:
    def load(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
        _expect_list(ctx, items, min_len=2)
        return A.SubprogramDeclaration(kind, _as_ident(ctx, items[1]), loc=loc)

    return load


def _decl_subprogram_body(kind: A.SubprogramKind) -> Callable[[_Ctx, list, A.SourceLoc], A.Declaration]:
    def load(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
        _expect_list(ctx, items, min_len=2)
        return A.SubprogramBody(
            kind, _as_ident(ctx, items[1]), _load_declarations(ctx, items[2:]), loc=loc
        )

    return load


def _decl_subprogram_instance(kind: A.SubprogramKind) -> Callable[[_Ctx, list, A.SourceLoc], A.Declaration]:
    def load(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
        _expect_list(ctx, items, min_len=3)
        return A.SubprogramInstantiation(
            kind, _as_ident(ctx, items[1]), _load_name(ctx, items[2]), loc=loc
        )

    return load


def _decl_use(ctx: _Ctx, items: list, loc: A.SourceLoc) -> A.Declaration:
    _expect_list(ctx, items, min_len=2)
    return A.UseClause(tuple(_load_name(ctx, n) for n in items[1:]), loc=loc)


_DECL_LOADERS: Dict[str, Callable[[_Ctx, list, A.SourceLoc], A.Declaration]] = {
    "type": _decl_type,
    "subtype": _decl_subtype,
    "constant": _decl_object(A.ObjectClass.CONSTANT),
    "signal": _decl_object(A.ObjectClass.SIGNAL),
    "variable": _decl_object(A.ObjectClass.VARIABLE),
    "shared-variable": _decl_object(A.ObjectClass.SHARED_VARIABLE),
    "component": _decl_component,
    "attribute": _decl_attribute,
    "attribute-spec": _decl_attribute_spec,
    "function": _decl_subprogram(A.SubprogramKind.FUNCTION),
    "procedure": _decl_subprogram(A.SubprogramKind.PROCEDURE),
    "function-body": _decl_subprogram_body(A.SubprogramKind.FUNCTION),
    "procedure-body": _decl_subprogram_body(A.SubprogramKind.PROCEDURE),
    "function-instance": _decl_subprogram_instance(A.SubprogramKind.FUNCTION),
    "procedure-instance": _decl_subprogram_instance(A.SubprogramKind.PROCEDURE),
    "use": _decl_use,
}


def _load_declaration(ctx: _Ctx, s: Sexp) -> A.Declaration:
    items, loc = _split_loc(ctx, _expect_list(ctx, s))
    head = _head(items)
    loader = _DECL_LOADERS.get(head or "")
    if loader is None:
        raise ctx.error(f"Unknown declaration form ({head} ...)", s)
    return loader(ctx, items, loc)


def _load_declarations(ctx: _Ctx, forms: list) -> Tuple[A.Declaration, ...]:
    return tuple(_load_declaration(ctx, f) for f in forms)


# ═══════════════════════════════════════════════════════════════════════
#  Design units & files
# ═══════════════════════════════════════════════════════════════════════


def _load_unit(ctx: _Ctx, s: Sexp) -> A.DesignUnit:
    items, loc = _split_loc(ctx, _expect_list(ctx, s, min_len=2))
    head = _head(items)
    name = _as_ident(ctx, items[1])
    if head == "package":
        return A.PackageDeclaration(name, _load_declarations(ctx, items[2:]), loc=loc)
    if head == "package-body":
        return A.PackageBody(name, _load_declarations(ctx, items[2:]), loc=loc)
    if head == "entity":
        return A.EntityDeclaration(name, _load_declarations(ctx, items[2:]), loc=loc)
    if head == "architecture":
        _expect_list(ctx, items, min_len=3)
        return A.ArchitectureBody(
            name, _as_ident(ctx, items[2]), _load_declarations(ctx, items[3:]), loc=loc
        )
    if head == "package-instance":
        _expect_list(ctx, items, min_len=3)
        return A.PackageInstantiation(name, _load_name(ctx, items[2]), loc=loc)
    if head == "context":
        return A.ContextDeclaration(name, loc=loc)
    if head == "configuration":
        _expect_list(ctx, items, min_len=3)
        return A.ConfigurationDeclaration(name, _as_ident(ctx, items[2]), loc=loc)
    raise ctx.error(f"Unknown design unit form ({head} ...)", s)


def _load_design_file(ctx: _Ctx, s: Sexp) -> A.DesignFile:
    lst = _expect_list(ctx, s, min_len=2, tag="design-file")
    if not isinstance(lst[1], str) or _is_symbol(lst[1]):
        raise ctx.error("design-file needs a quoted path", s)
    path = lst[1]
    file_ctx = _Ctx(path)
    units = tuple(_load_unit(file_ctx, u) for u in lst[2:])
    return A.DesignFile(path, units, loc=A.SourceLoc(file=path))


def _load_document(ctx: _Ctx, raw: Sexp) -> List[A.DesignFile]:
    head = _head(raw)
    if head == "design-file":
        return [_load_design_file(ctx, raw)]
    if head == "design-files":
        return [_load_design_file(ctx, f) for f in raw[1:]]
    raise ctx.error("Expected (design-file ...) or (design-files ...)", raw)


def _read_sexp(ctx: _Ctx, text: str) -> Sexp:
    # Keep nil / t / false as plain symbols; they are VHDL identifiers here.
    try:
        return sexpdata.loads(text, nil=None, true=None, false=None)
    except Exception as e:
        raise ctx.error(f"S-expression syntax error: {e}") from e


def load_text(text: str, *, source: str = "<string>") -> List[A.DesignFile]:
    """Load an AST interchange document into design files.

    Parameters
    ----------
    text:
        The S-expression document produced by the HDL front end.
    source:
        Name used in error messages.

    Raises
    ------
    LoadError
        If the text is not well-formed or contains forms the contract
        does not define.

    Example
    -------
    >>> files = load_text('''
    ... (design-file "pkg.vhd"
    ...   (package eth_pkg
    ...     (type hdr_t (record (element valid std_logic)))))
    ... ''')
    >>> files[0].units[0].name
    'eth_pkg'
    """
    ctx = _Ctx(source)
    files = _load_document(ctx, _read_sexp(ctx, text))
    logger.debug(
        "loaded %d design file(s) with %d unit(s) from %s",
        len(files),
        sum(len(f.units) for f in files),
        source,
    )
    return files


def load_file(path: Union[str, Path]) -> List[A.DesignFile]:
    """Read and load an AST interchange file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise LoadError(
            f"not valid UTF-8 (byte 0x{e.object[e.start]:02x} at offset {e.start})",
            source=str(p),
        ) from e
    except OSError as e:
        raise FileSystemError(p, e, action="read") from e
    return load_text(text, source=str(p))


def load_expression(text: str) -> A.Expression:
    """Load a single expression form – handy for tests and the REPL.

    >>> load_expression("(- WIDTH 1)").op
    <Operator.MINUS: '-'>
    """
    ctx = _Ctx("<expression>")
    return _load_expr(ctx, _read_sexp(ctx, text))

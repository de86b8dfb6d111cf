"""anodizer/printer.py – render expression subtrees back to VHDL text.

The oracle program embeds every symbolic bound verbatim, so the text
produced here must be valid VHDL for everything the AST models in
detail.  Shapes with no faithful rendering become a placeholder
identifier (``complex_name`` / ``complex_expr``) and a warning; the
simulator then rejects the program at analysis time with a diagnosable
message.  Printing never raises.
"""

from __future__ import annotations

import logging

from anodizer import ast as A

__all__ = ["COMPLEX_EXPR", "COMPLEX_NAME", "expr_to_string", "range_to_string"]

logger = logging.getLogger(__name__)

COMPLEX_EXPR = "complex_expr"
COMPLEX_NAME = "complex_name"


def expr_to_string(expr: A.Expression) -> str:
    """Print *expr* as VHDL source text.

    >>> from anodizer.loader import load_expression
    >>> expr_to_string(load_expression("(- (* 2 WIDTH) 1)"))
    '2 * WIDTH - 1'
    """
    if isinstance(expr, A.BinaryExpr):
        return f"{expr_to_string(expr.left)} {expr.op.value} {expr_to_string(expr.right)}"
    if isinstance(expr, A.UnaryExpr):
        return _unary(expr)
    if isinstance(expr, A.ParenthesizedExpr):
        return f"({expr_to_string(expr.inner)})"
    if isinstance(expr, (A.SimpleName, A.SelectedName, A.SelectedAllName, A.CallName, A.AttributeName)):
        return name_to_string(expr)
    if isinstance(expr, A.UnsupportedExpr):
        logger.warning("%s: cannot print %s expression, using %r", expr.loc, expr.kind, COMPLEX_EXPR)
        return COMPLEX_EXPR
    return _literal(expr)


def name_to_string(name: A.Name) -> str:
    if isinstance(name, A.SimpleName):
        return name.identifier
    if isinstance(name, A.SelectedName):
        return f"{name_to_string(name.prefix)}.{name.suffix}"
    if isinstance(name, A.SelectedAllName):
        return f"{name_to_string(name.prefix)}.all"
    if isinstance(name, A.CallName):
        # Only the callee survives; arguments are dropped.
        return name_to_string(name.callee)
    logger.warning(
        "%s: cannot print %s, using %r",
        getattr(name, "loc", A.NO_LOC),
        type(name).__name__,
        COMPLEX_NAME,
    )
    return COMPLEX_NAME


def range_to_string(rng: A.RangeConstraint) -> str:
    return f"{expr_to_string(rng.left)} {rng.direction.value} {expr_to_string(rng.right)}"


def _unary(expr: A.UnaryExpr) -> str:
    operand = expr_to_string(expr.operand)
    if expr.op in (A.Operator.PLUS, A.Operator.MINUS):
        return f"{expr.op.value}{operand}"
    return f"{expr.op.value} {operand}"


def _literal(lit: A.Expression) -> str:
    if isinstance(lit, A.IntegerLiteral):
        return str(lit.value)
    if isinstance(lit, A.RealLiteral):
        return _real(lit.value)
    if isinstance(lit, A.StringLiteral):
        return '"' + lit.value.replace('"', '""') + '"'
    if isinstance(lit, A.CharacterLiteral):
        return f"'{lit.value}'"
    if isinstance(lit, A.BitStringLiteral):
        length = "" if lit.length is None else str(lit.length)
        return f'{length}{lit.base}"{lit.digits}"'
    if isinstance(lit, A.PhysicalLiteral):
        return f"{_abstract(lit.value)} {lit.unit}"
    if isinstance(lit, A.NullLiteral):
        return "null"
    logger.warning("cannot print %s, using %r", type(lit).__name__, COMPLEX_EXPR)
    return COMPLEX_EXPR


def _abstract(value) -> str:
    return _real(value) if isinstance(value, float) else str(value)


def _real(value: float) -> str:
    # VHDL real literals need a fractional part and take no '+' in the exponent.
    text = repr(value)
    mantissa, sep, exponent = text.partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    if sep:
        return f"{mantissa}e{exponent.lstrip('+')}"
    return mantissa

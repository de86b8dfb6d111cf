"""anodizer/ast.py – AST definitions for parsed VHDL design units.

The HDL front end is an external service; this module is the contract
between it and the compiler.  Only the parts of VHDL the compiler ever
reads are modelled in detail (design units, declarations, subtype
indications and expressions); everything else collapses into a small
number of opaque catch-all nodes.

Design invariants
-----------------
* Every AST node is a frozen dataclass (immutable after construction).
* Nodes that carry children use tuples, never lists.
* Every node records its source location (``SourceLoc``) for diagnostics.
* Identifiers keep the spelling written in the source; comparisons are
  the caller's job (VHDL identifiers are case-insensitive).

Module layout
-------------
§1  Source location
§2  Expressions – literals, names, operators
§3  Subtype indications & constraints
§4  Declarations
§5  Design units & files
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

# ════════════════════════════════════════════════════════════════════════
# §1  Source location
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SourceLoc:
    """Points back to a position in a VHDL source file."""

    file: str = "<unknown>"
    line: int = 0
    col: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.col}"


#: Sentinel for nodes with no known source position.
NO_LOC = SourceLoc()


# ════════════════════════════════════════════════════════════════════════
# §2  Expressions
# ════════════════════════════════════════════════════════════════════════


class Operator(Enum):
    """VHDL operators, valued by their source spelling."""

    # logical
    AND = "and"
    OR = "or"
    NAND = "nand"
    NOR = "nor"
    XOR = "xor"
    XNOR = "xnor"
    NOT = "not"
    # relational
    EQ = "="
    NE = "/="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    # matching (don't-care) relational
    QUE_EQ = "?="
    QUE_NE = "?/="
    QUE_LT = "?<"
    QUE_LTE = "?<="
    QUE_GT = "?>"
    QUE_GTE = "?>="
    QUE_QUE = "??"
    # shift
    SLL = "sll"
    SRL = "srl"
    SLA = "sla"
    SRA = "sra"
    ROL = "rol"
    ROR = "ror"
    # adding / concatenation
    PLUS = "+"
    MINUS = "-"
    CONCAT = "&"
    # multiplying
    TIMES = "*"
    DIV = "/"
    MOD = "mod"
    REM = "rem"
    # miscellaneous
    POW = "**"
    ABS = "abs"

    @property
    def is_word(self) -> bool:
        """True for operators spelled as reserved words (``mod``, ``and`` ...)."""
        return self.value.isalpha()

    @classmethod
    def from_spelling(cls, text: str) -> Optional["Operator"]:
        return _OPERATORS_BY_SPELLING.get(text.lower())


_OPERATORS_BY_SPELLING = {op.value: op for op in Operator}

#: Operators that may appear in unary position.
UNARY_OPERATORS = frozenset({
    Operator.PLUS,
    Operator.MINUS,
    Operator.NOT,
    Operator.ABS,
    Operator.QUE_QUE,
    # VHDL-2008 unary reduction operators
    Operator.AND,
    Operator.OR,
    Operator.NAND,
    Operator.NOR,
    Operator.XOR,
    Operator.XNOR,
})


# --- Literals ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IntegerLiteral:
    value: int
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class RealLiteral:
    value: float
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class StringLiteral:
    value: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class CharacterLiteral:
    value: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class BitStringLiteral:
    """``[length] base "digits"`` – e.g. ``x"FF"`` or ``12ux"F"``."""

    base: str
    digits: str
    length: Optional[int] = None
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class PhysicalLiteral:
    value: Union[int, float]
    unit: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class NullLiteral:
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


Literal = Union[
    IntegerLiteral,
    RealLiteral,
    StringLiteral,
    CharacterLiteral,
    BitStringLiteral,
    PhysicalLiteral,
    NullLiteral,
]


# --- Names ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SimpleName:
    identifier: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class SelectedName:
    """``prefix.suffix`` – e.g. ``work.pkg.WIDTH``."""

    prefix: "Name"
    suffix: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class SelectedAllName:
    """``prefix.all``."""

    prefix: "Name"
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class CallName:
    """Function call or indexed name – the front end cannot tell them apart."""

    callee: "Name"
    args: Tuple["Expression", ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class AttributeName:
    """``prefix'attribute`` – e.g. ``data'length``."""

    prefix: "Name"
    attribute: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


Name = Union[SimpleName, SelectedName, SelectedAllName, CallName, AttributeName]


# --- Operators --------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnaryExpr:
    op: Operator
    operand: "Expression"
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class BinaryExpr:
    op: Operator
    left: "Expression"
    right: "Expression"
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ParenthesizedExpr:
    inner: "Expression"
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class UnsupportedExpr:
    """An expression shape the contract does not model (aggregates, qualified
    expressions, allocators ...).  ``kind`` names the front end's form."""

    kind: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


Expression = Union[
    Literal,
    Name,
    UnaryExpr,
    BinaryExpr,
    ParenthesizedExpr,
    UnsupportedExpr,
]


# ════════════════════════════════════════════════════════════════════════
# §3  Subtype indications & constraints
# ════════════════════════════════════════════════════════════════════════


class Direction(Enum):
    TO = "to"
    DOWNTO = "downto"


@dataclass(frozen=True, slots=True)
class RangeConstraint:
    """An explicit ``left to|downto right`` range."""

    left: Expression
    direction: Direction
    right: Expression
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class DiscreteSubtypeRange:
    """A discrete range given by a type mark – ``(natural)``."""

    type_mark: Name
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class AttributeRange:
    """A discrete range given by a range attribute – ``(x'range)``."""

    name: Name
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


DiscreteRange = Union[RangeConstraint, DiscreteSubtypeRange, AttributeRange]


@dataclass(frozen=True, slots=True)
class ArrayConstraint:
    """Index constraint of an array subtype – one range per dimension."""

    ranges: Tuple[DiscreteRange, ...]
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ScalarRangeConstraint:
    """``integer range 0 to 7`` style constraint on a scalar type."""

    range: DiscreteRange
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class RecordElementConstraint:
    """Element constraints on a record subtype (VHDL-2008)."""

    elements: Tuple[Tuple[str, "Constraint"], ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


Constraint = Union[ArrayConstraint, ScalarRangeConstraint, RecordElementConstraint]


@dataclass(frozen=True, slots=True)
class SubtypeIndication:
    type_mark: Name
    constraint: Optional[Constraint] = None
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


# ════════════════════════════════════════════════════════════════════════
# §4  Declarations
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ElementDeclaration:
    """``a, b : subtype_indication;`` inside a record definition."""

    names: Tuple[str, ...]
    subtype: SubtypeIndication
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class RecordDefinition:
    elements: Tuple[ElementDeclaration, ...]
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class EnumDefinition:
    literals: Tuple[str, ...]
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class OtherTypeDefinition:
    """Array, access, file, physical ... – never inspected."""

    kind: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


TypeDefinition = Union[RecordDefinition, EnumDefinition, OtherTypeDefinition]


@dataclass(frozen=True, slots=True)
class TypeDeclaration:
    name: str
    definition: TypeDefinition
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class SubtypeDeclaration:
    name: str
    subtype: SubtypeIndication
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


class ObjectClass(Enum):
    CONSTANT = "constant"
    SIGNAL = "signal"
    VARIABLE = "variable"
    SHARED_VARIABLE = "shared-variable"


@dataclass(frozen=True, slots=True)
class ObjectDeclaration:
    object_class: ObjectClass
    names: Tuple[str, ...]
    subtype: SubtypeIndication
    value: Optional[Expression] = None
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ComponentDeclaration:
    name: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class AttributeDeclaration:
    """``attribute name : type_mark;``"""

    name: str
    type_mark: Name
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


class EntityClass(Enum):
    ENTITY = "entity"
    ARCHITECTURE = "architecture"
    CONFIGURATION = "configuration"
    PACKAGE = "package"
    PROCEDURE = "procedure"
    FUNCTION = "function"
    TYPE = "type"
    SUBTYPE = "subtype"
    CONSTANT = "constant"
    SIGNAL = "signal"
    VARIABLE = "variable"
    COMPONENT = "component"
    LABEL = "label"
    LITERAL = "literal"
    UNITS = "units"
    GROUP = "group"
    FILE = "file"
    PROPERTY = "property"
    SEQUENCE = "sequence"


class EntityNameKind(Enum):
    NAME = "name"
    ALL = "all"
    OTHERS = "others"


@dataclass(frozen=True, slots=True)
class EntityDesignator:
    """Target list entry of an attribute specification."""

    kind: EntityNameKind
    designator: Optional[str] = None
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class AttributeSpecification:
    """``attribute name of entity_name : entity_class is value;``"""

    name: str
    entity_class: EntityClass
    entity_name: EntityDesignator
    value: Expression
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


class SubprogramKind(Enum):
    FUNCTION = "function"
    PROCEDURE = "procedure"


@dataclass(frozen=True, slots=True)
class SubprogramDeclaration:
    kind: SubprogramKind
    name: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class SubprogramBody:
    kind: SubprogramKind
    name: str
    declarations: Tuple["Declaration", ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class SubprogramInstantiation:
    kind: SubprogramKind
    name: str
    uninstantiated: Name
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class UseClause:
    names: Tuple[Name, ...]
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


Declaration = Union[
    TypeDeclaration,
    SubtypeDeclaration,
    ObjectDeclaration,
    ComponentDeclaration,
    AttributeDeclaration,
    AttributeSpecification,
    SubprogramDeclaration,
    SubprogramBody,
    SubprogramInstantiation,
    UseClause,
]


# ════════════════════════════════════════════════════════════════════════
# §5  Design units & files
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EntityDeclaration:
    name: str
    declarations: Tuple[Declaration, ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class PackageDeclaration:
    name: str
    declarations: Tuple[Declaration, ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class PackageInstantiation:
    name: str
    uninstantiated: Name
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ContextDeclaration:
    name: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ConfigurationDeclaration:
    name: str
    entity_name: str
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ArchitectureBody:
    name: str
    entity_name: str
    declarations: Tuple[Declaration, ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class PackageBody:
    name: str
    declarations: Tuple[Declaration, ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


PrimaryUnit = Union[
    EntityDeclaration,
    PackageDeclaration,
    PackageInstantiation,
    ContextDeclaration,
    ConfigurationDeclaration,
]
SecondaryUnit = Union[ArchitectureBody, PackageBody]
DesignUnit = Union[PrimaryUnit, SecondaryUnit]


@dataclass(frozen=True, slots=True)
class DesignFile:
    path: str
    units: Tuple[DesignUnit, ...] = ()
    loc: SourceLoc = field(default=NO_LOC, repr=False, compare=False)


def unit_kind(unit: DesignUnit) -> str:
    """Short human-readable kind of a design unit (for messages)."""
    return _UNIT_KINDS.get(type(unit), type(unit).__name__)


_UNIT_KINDS = {
    EntityDeclaration: "entity",
    PackageDeclaration: "package",
    PackageInstantiation: "package instance",
    ContextDeclaration: "context",
    ConfigurationDeclaration: "configuration",
    ArchitectureBody: "architecture",
    PackageBody: "package body",
}

"""anodizer/extractor.py – collect tags, records and unit names.

``SymbolExtractor`` is a :class:`~anodizer.visitor.DesignVisitor` that
makes one pass over every design file and fills three tables:

* ``tagged_names`` – type names carrying the marker attribute
  (``attribute anodize of hdr_t : type is true;``), first-seen order;
* ``records`` – every record type declared anywhere, tagged or not,
  keyed by lower-cased name;
* ``symbols`` – entity and package names in source order.

Bounds are only split into "plain integer literal" (:class:`Known`) and
"anything else" (:class:`Symbolic`); nothing is evaluated here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from anodizer import ast as A
from anodizer.errors import UnknownTaggedTypeError
from anodizer.visitor import CONTINUE, DesignVisitor, VisitResult, walk_design_files

__all__ = [
    "Bound",
    "Field",
    "Known",
    "RangeBound",
    "RecordType",
    "SymbolExtractor",
    "Symbolic",
    "UnitRef",
    "UnitSymbol",
    "extract",
]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
#  Record tables
# ═══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Known:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Symbolic:
    """A bound the compiler cannot evaluate; the oracle will."""
    expr: A.Expression


Bound = Union[Known, Symbolic]


@dataclass(frozen=True)
class RangeBound:
    """``left to|downto right`` as written in the field's constraint."""
    left: Bound
    direction: A.Direction
    right: Bound

    @property
    def high(self) -> Bound:
        return self.left if self.direction is A.Direction.DOWNTO else self.right

    @property
    def low(self) -> Bound:
        return self.right if self.direction is A.Direction.DOWNTO else self.left

    @property
    def is_known(self) -> bool:
        return isinstance(self.left, Known) and isinstance(self.right, Known)


@dataclass(frozen=True)
class Field:
    name: str
    subtype: str
    range: Optional[RangeBound] = None
    # Set when the subtype indication has a shape no field can represent.
    unsupported: Optional[str] = None
    loc: A.SourceLoc = field(default=A.NO_LOC, repr=False, compare=False)


@dataclass(frozen=True)
class UnitRef:
    """The design unit a declaration lives in."""
    kind: str
    name: str

    @property
    def package(self) -> Optional[str]:
        """Package name for declarations in a package or package body."""
        return self.name if self.kind in ("package", "package body") else None

    def __str__(self) -> str:
        return f"{self.kind} {self.name}"


@dataclass(frozen=True)
class RecordType:
    name: str
    fields: Tuple[Field, ...]
    unit: UnitRef
    loc: A.SourceLoc = field(default=A.NO_LOC, repr=False, compare=False)

    @property
    def package(self) -> Optional[str]:
        return self.unit.package


@dataclass(frozen=True)
class UnitSymbol:
    kind: str
    name: str
    file: str


# ═══════════════════════════════════════════════════════════════════════
#  Field extraction
# ═══════════════════════════════════════════════════════════════════════


def _bound(expr: A.Expression) -> Bound:
    if isinstance(expr, A.IntegerLiteral):
        return Known(expr.value)
    return Symbolic(expr)


def _type_mark_name(mark: A.Name) -> Optional[str]:
    if isinstance(mark, A.SimpleName):
        return mark.identifier
    if isinstance(mark, A.SelectedName):
        return mark.suffix
    return None


def _range_of(constraint: Optional[A.Constraint]) -> Tuple[Optional[RangeBound], Optional[str]]:
    """Return ``(range, unsupported_shape)`` for a subtype constraint."""
    if constraint is None:
        return None, None
    if not isinstance(constraint, A.ArrayConstraint):
        return None, type(constraint).__name__
    if len(constraint.ranges) != 1:
        return None, f"{len(constraint.ranges)}-dimensional array constraint"
    rng = constraint.ranges[0]
    if not isinstance(rng, A.RangeConstraint):
        return None, f"array constraint over {type(rng).__name__}"
    return RangeBound(_bound(rng.left), rng.direction, _bound(rng.right)), None


def fields_of(record: A.RecordDefinition) -> Tuple[Field, ...]:
    """Flatten element declarations into one :class:`Field` per identifier."""
    fields: List[Field] = []
    for element in record.elements:
        subtype = _type_mark_name(element.subtype.type_mark)
        rng, unsupported = _range_of(element.subtype.constraint)
        if subtype is None:
            subtype = ""
            unsupported = f"type mark {type(element.subtype.type_mark).__name__}"
        for name in element.names:
            fields.append(Field(name, subtype, rng, unsupported, loc=element.loc))
    return tuple(fields)


# ═══════════════════════════════════════════════════════════════════════
#  Visitor
# ═══════════════════════════════════════════════════════════════════════


class SymbolExtractor(DesignVisitor):
    """Single-pass collector of tags, records and unit names.

    Usage::

        extractor = SymbolExtractor(attribute="anodize")
        extractor.extract(design_files)
        for record in extractor.tagged_records():
            ...
    """

    def __init__(self, attribute: str = "anodize") -> None:
        self.attribute = attribute.lower()
        self.tagged_names: List[str] = []
        self.records: Dict[str, RecordType] = {}
        self.symbols: List[UnitSymbol] = []
        self._tag_keys: set = set()
        self._file = "<unknown>"

    def extract(self, files: Iterable[A.DesignFile]) -> "SymbolExtractor":
        walk_design_files(self, files)
        logger.debug(
            "extracted %d tag(s), %d record(s), %d unit symbol(s)",
            len(self.tagged_names),
            len(self.records),
            len(self.symbols),
        )
        return self

    # --- Queries ---

    def lookup_record(self, name: str) -> Optional[RecordType]:
        return self.records.get(name.lower())

    def is_tagged(self, name: str) -> bool:
        return name.lower() in self._tag_keys

    def tagged_records(self) -> List[RecordType]:
        """Tagged records in tag order; an unknown tag is a usage error."""
        result = []
        for name in self.tagged_names:
            record = self.lookup_record(name)
            if record is None:
                raise UnknownTaggedTypeError(name)
            result.append(record)
        return result

    # --- Hooks ---

    def visit_design_file(self, file: A.DesignFile) -> VisitResult:
        self._file = file.path
        return CONTINUE

    def visit_entity(self, unit: A.EntityDeclaration) -> VisitResult:
        self.symbols.append(UnitSymbol("entity", unit.name, self._file))
        return CONTINUE

    def visit_package(self, unit: A.PackageDeclaration) -> VisitResult:
        self.symbols.append(UnitSymbol("package", unit.name, self._file))
        return CONTINUE

    def visit_attribute_specification(
        self, decl: A.AttributeSpecification, unit: A.DesignUnit
    ) -> VisitResult:
        if decl.name.lower() != self.attribute:
            return CONTINUE
        if decl.entity_class is not A.EntityClass.TYPE:
            return CONTINUE
        if decl.entity_name.kind is not A.EntityNameKind.NAME or not decl.entity_name.designator:
            return CONTINUE
        name = decl.entity_name.designator
        if name.lower() not in self._tag_keys:
            self._tag_keys.add(name.lower())
            self.tagged_names.append(name)
            logger.debug("%s: tagged type %s", decl.loc, name)
        return CONTINUE

    def visit_type_declaration(self, decl: A.TypeDeclaration, unit: A.DesignUnit) -> VisitResult:
        if not isinstance(decl.definition, A.RecordDefinition):
            return CONTINUE
        key = decl.name.lower()
        if key in self.records:
            logger.warning(
                "%s: record %s already declared in %s; keeping the first declaration",
                decl.loc,
                decl.name,
                self.records[key].unit,
            )
            return CONTINUE
        self.records[key] = RecordType(
            decl.name,
            fields_of(decl.definition),
            UnitRef(A.unit_kind(unit), unit.name),
            loc=decl.loc,
        )
        return CONTINUE


def extract(files: Iterable[A.DesignFile], attribute: str = "anodize") -> SymbolExtractor:
    return SymbolExtractor(attribute).extract(files)

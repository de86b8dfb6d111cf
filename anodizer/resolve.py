"""
anodizer/resolve.py
===================

Bound classification, expression deduplication and back-patching.

Every field of every tagged record falls into one of three kinds:

* **scalar** (``std_logic`` ...) – a fixed ``0 downto 0`` range, width 1;
* **vector** (``std_logic_vector`` ...) – must carry a range; literal
  sides are known at once, every other side is printed to text and
  registered under that text in the :class:`ResolutionTable`;
* **nested** – the subtype names another tagged record.

The table maps each distinct expression text (the *expression key*) to
every ``(record, field, side)`` waiting for it.  Its key order is the
index order of the oracle program, so answer ``EXPR_<i>`` belongs to
``table.keys[i]`` and is applied to all of that key's targets at once.

``finalize`` then checks that nothing is left unresolved, rejects
reversed ranges and ``emission_order`` sorts records so nested types
come first.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from anodizer import ast as A
from anodizer.config import AnodizerConfig
from anodizer.errors import (
    DuplicateAnswerError,
    NullRangeError,
    OracleOutputError,
    RecordNotInPackageError,
    RecursiveRecordError,
    UnconstrainedFieldError,
    UnresolvedBoundError,
    UnsupportedConstraintError,
    UntaggedSubtypeError,
)
from anodizer.extractor import Known, RecordType, SymbolExtractor
from anodizer.printer import expr_to_string

__all__ = [
    "Classification",
    "FieldKind",
    "ResolutionTable",
    "ResolutionTarget",
    "ResolvedField",
    "ResolvedRange",
    "ResolvedRecord",
    "Side",
    "apply_answers",
    "classify",
    "emission_order",
    "finalize",
]

logger = logging.getLogger(__name__)


class Side(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


class FieldKind(enum.Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    NESTED = "nested"


@dataclass(frozen=True)
class ResolutionTarget:
    """One bound awaiting an oracle answer."""
    record_index: int
    field_index: int
    side: Side


class ResolutionTable:
    """Expression key → resolution targets, in first-registration order."""

    def __init__(self) -> None:
        self._targets: Dict[str, List[ResolutionTarget]] = {}

    def register(self, key: str, target: ResolutionTarget) -> None:
        self._targets.setdefault(key, []).append(target)

    @property
    def keys(self) -> List[str]:
        return list(self._targets)

    def key_at(self, index: int) -> str:
        return self.keys[index]

    def targets(self, key: str) -> List[ResolutionTarget]:
        return list(self._targets.get(key, ()))

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __contains__(self, key: object) -> bool:
        return key in self._targets


# ═══════════════════════════════════════════════════════════════════════
#  Resolved layout
# ═══════════════════════════════════════════════════════════════════════


@dataclass
class ResolvedRange:
    direction: A.Direction
    left: Optional[int] = None
    right: Optional[int] = None

    def get(self, side: Side) -> Optional[int]:
        return self.left if side is Side.LEFT else self.right

    def set(self, side: Side, value: int) -> None:
        if side is Side.LEFT:
            self.left = value
        else:
            self.right = value

    @property
    def is_resolved(self) -> bool:
        return self.left is not None and self.right is not None

    @property
    def high(self) -> int:
        return self.left if self.direction is A.Direction.DOWNTO else self.right

    @property
    def low(self) -> int:
        return self.right if self.direction is A.Direction.DOWNTO else self.left

    @property
    def width(self) -> int:
        return self.high - self.low + 1


@dataclass
class ResolvedField:
    name: str
    subtype: str
    kind: FieldKind
    range: Optional[ResolvedRange] = None
    loc: A.SourceLoc = field(default=A.NO_LOC, repr=False, compare=False)

    @property
    def width(self) -> Optional[int]:
        return self.range.width if self.range is not None else None


@dataclass
class ResolvedRecord:
    name: str
    fields: List[ResolvedField] = field(default_factory=list)
    package: Optional[str] = None

    def nested_types(self) -> List[str]:
        return [f.subtype for f in self.fields if f.kind is FieldKind.NESTED]


@dataclass
class Classification:
    """Output of :func:`classify`: partly resolved records plus work to do."""
    records: List[ResolvedRecord]
    table: ResolutionTable
    packages: List[str]

    @property
    def needs_oracle(self) -> bool:
        return len(self.table) > 0


# ═══════════════════════════════════════════════════════════════════════
#  Classification
# ═══════════════════════════════════════════════════════════════════════


def classify(extractor: SymbolExtractor, config: Optional[AnodizerConfig] = None) -> Classification:
    """Classify every field of every tagged record.

    Raises the usage errors that can be detected without the simulator:
    unknown tags, unconstrained vector fields, references to untagged
    subtypes and records outside packages that need evaluation.
    """
    config = config or AnodizerConfig()
    table = ResolutionTable()
    records: List[ResolvedRecord] = []
    packages: List[str] = []
    seen_packages = set()

    for i, record in enumerate(extractor.tagged_records()):
        resolved = ResolvedRecord(record.name, package=record.package)
        symbolic = False
        for j, fld in enumerate(record.fields):
            if fld.unsupported:
                raise UnsupportedConstraintError(record.name, fld.name, fld.unsupported, loc=fld.loc)
            subtype = fld.subtype.lower()
            if subtype in config.scalar_subtypes:
                resolved.fields.append(ResolvedField(
                    fld.name, fld.subtype, FieldKind.SCALAR,
                    ResolvedRange(A.Direction.DOWNTO, 0, 0), loc=fld.loc,
                ))
            elif subtype in config.vector_subtypes:
                if fld.range is None:
                    raise UnconstrainedFieldError(record.name, fld.name, loc=fld.loc)
                rng = ResolvedRange(fld.range.direction)
                for side, bound in ((Side.LEFT, fld.range.left), (Side.RIGHT, fld.range.right)):
                    if isinstance(bound, Known):
                        rng.set(side, bound.value)
                    else:
                        table.register(expr_to_string(bound.expr), ResolutionTarget(i, j, side))
                        symbolic = True
                resolved.fields.append(
                    ResolvedField(fld.name, fld.subtype, FieldKind.VECTOR, rng, loc=fld.loc)
                )
            else:
                nested = _tagged_record(extractor, fld.subtype)
                if nested is None:
                    raise UntaggedSubtypeError(fld.subtype, record.name, fld.name, loc=fld.loc)
                resolved.fields.append(
                    ResolvedField(fld.name, nested.name, FieldKind.NESTED, loc=fld.loc)
                )
        if symbolic:
            if record.package is None:
                raise RecordNotInPackageError(record.name, str(record.unit), loc=record.loc)
            if record.package.lower() not in seen_packages:
                seen_packages.add(record.package.lower())
                packages.append(record.package)
        records.append(resolved)

    logger.info(
        "classified %d tagged record(s); %d distinct expression(s) need evaluation",
        len(records),
        len(table),
    )
    return Classification(records, table, packages)


def _tagged_record(extractor: SymbolExtractor, name: str) -> Optional[RecordType]:
    if not extractor.is_tagged(name):
        return None
    return extractor.lookup_record(name)


# ═══════════════════════════════════════════════════════════════════════
#  Back-patching
# ═══════════════════════════════════════════════════════════════════════


def apply_answers(
    records: Sequence[ResolvedRecord],
    table: ResolutionTable,
    answers: Mapping[int, int],
) -> int:
    """Apply each oracle answer to every target registered under its key.

    Returns the number of bounds patched.
    """
    keys = table.keys
    patched = 0
    for index, value in answers.items():
        if not 0 <= index < len(keys):
            raise OracleOutputError(0, f"EXPR_{index}: {value}", f"index out of range 0..{len(keys) - 1}")
        key = keys[index]
        logger.debug("EXPR_%d (%s) = %d", index, key, value)
        for target in table.targets(key):
            rng = records[target.record_index].fields[target.field_index].range
            if rng is None:
                raise UnresolvedBoundError(
                    records[target.record_index].name,
                    records[target.record_index].fields[target.field_index].name,
                    target.side.value,
                )
            if rng.get(target.side) is not None:
                raise DuplicateAnswerError(index, key)
            rng.set(target.side, value)
            patched += 1
    return patched


def finalize(records: Sequence[ResolvedRecord]) -> List[ResolvedRecord]:
    """Check every bound is known and every range is non-null."""
    for record in records:
        for fld in record.fields:
            if fld.range is None:
                continue
            for side in Side:
                if fld.range.get(side) is None:
                    raise UnresolvedBoundError(record.name, fld.name, side.value, loc=fld.loc)
            if fld.range.high < fld.range.low:
                raise NullRangeError(
                    record.name,
                    fld.name,
                    fld.range.left,
                    fld.range.direction.value,
                    fld.range.right,
                    loc=fld.loc,
                )
    return list(records)


def emission_order(records: Sequence[ResolvedRecord]) -> List[ResolvedRecord]:
    """Order records so every nested type precedes the records using it.

    Depth-first over the given order; a record that contains itself,
    directly or through other records, raises ``RecursiveRecordError``.
    """
    by_name = {r.name.lower(): r for r in records}
    ordered: List[ResolvedRecord] = []
    done = set()
    stack: List[str] = []

    def visit(record: ResolvedRecord) -> None:
        key = record.name.lower()
        if key in done:
            return
        if key in stack:
            cycle = [by_name[k].name for k in stack[stack.index(key):]] + [record.name]
            raise RecursiveRecordError(cycle)
        stack.append(key)
        for nested in record.nested_types():
            target = by_name.get(nested.lower())
            if target is not None:
                visit(target)
        stack.pop()
        done.add(key)
        ordered.append(record)

    for record in records:
        visit(record)
    return ordered

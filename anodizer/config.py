"""
anodizer/config.py
==================

Configuration for one anodizer invocation.

``AnodizerConfig`` collects every knob the pipeline reads: the marker
attribute, the VHDL standard handed to the simulator, the working
directory layout, the simulator command and the scalar/vector subtype
vocabularies.  ``validate()`` reports problems instead of raising so the
CLI can show all of them at once.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List, Optional

__all__ = [
    "AnodizerConfig",
    "DEFAULT_SCALAR_SUBTYPES",
    "DEFAULT_VECTOR_SUBTYPES",
    "VhdlStandard",
]


class VhdlStandard(enum.Enum):
    VHDL2008 = "2008"
    VHDL2019 = "2019"

    @classmethod
    def parse(cls, text: str) -> "VhdlStandard":
        """Accept ``2008``, ``08``, ``vhdl2008`` and the like."""
        digits = re.sub(r"\D", "", text)
        for std in cls:
            if digits in (std.value, std.value[2:]):
                return std
        raise ValueError(f"unsupported VHDL standard {text!r} (expected 2008 or 2019)")


DEFAULT_SCALAR_SUBTYPES: FrozenSet[str] = frozenset({"std_logic", "std_ulogic", "bit"})
DEFAULT_VECTOR_SUBTYPES: FrozenSet[str] = frozenset({
    "std_logic_vector",
    "std_ulogic_vector",
    "bit_vector",
    "unsigned",
    "signed",
})

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_TIME = re.compile(r"^\d+\s*(fs|ps|ns|us|ms|sec|s)$")
_HEAP = re.compile(r"^\d+[kmgKMG]?$")


@dataclass
class AnodizerConfig:
    """Tuning knobs for struct generation and the oracle round-trip."""
    attribute: str = "anodize"
    standard: VhdlStandard = VhdlStandard.VHDL2019
    build_dir: Path = Path("build")
    generate_dir: str = "anodizer"
    library: str = "generated"
    top_unit: str = "constraint_evaluator"
    program_file: str = "constraint_tb.vhd"
    output_path: Path = Path("anodized.py")
    # The oracle process never ends its own simulation.
    stop_time: str = "1ns"
    heap_size: str = "256m"
    nvc: str = "nvc"
    timeout: Optional[float] = None
    scalar_subtypes: FrozenSet[str] = DEFAULT_SCALAR_SUBTYPES
    vector_subtypes: FrozenSet[str] = DEFAULT_VECTOR_SUBTYPES

    def __post_init__(self) -> None:
        self.build_dir = Path(self.build_dir)
        self.output_path = Path(self.output_path)
        self.scalar_subtypes = frozenset(s.lower() for s in self.scalar_subtypes)
        self.vector_subtypes = frozenset(s.lower() for s in self.vector_subtypes)

    @property
    def work_dir(self) -> Path:
        """Directory holding the oracle program and the stage logs."""
        return self.build_dir / self.generate_dir

    @property
    def program_path(self) -> Path:
        return self.work_dir / self.program_file

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty if valid)."""
        problems: List[str] = []
        for label, value in (
            ("attribute", self.attribute),
            ("library", self.library),
            ("top_unit", self.top_unit),
        ):
            if not _IDENTIFIER.match(value):
                problems.append(f"{label} must be a VHDL identifier, got {value!r}")
        if not self.generate_dir or Path(self.generate_dir).is_absolute():
            problems.append("generate_dir must be a relative directory name")
        if not self.program_file.endswith((".vhd", ".vhdl")):
            problems.append("program_file must end in .vhd or .vhdl")
        if not _TIME.match(self.stop_time.strip()):
            problems.append(f"stop_time must look like '1ns', got {self.stop_time!r}")
        if not _HEAP.match(self.heap_size):
            problems.append(f"heap_size must look like '256m', got {self.heap_size!r}")
        if not self.nvc:
            problems.append("nvc executable must not be empty")
        if self.timeout is not None and self.timeout <= 0:
            problems.append("timeout must be positive when set")
        overlap = self.scalar_subtypes & self.vector_subtypes
        if overlap:
            problems.append(
                "subtypes cannot be both scalar and vector: " + ", ".join(sorted(overlap))
            )
        if self.output_path.suffix != ".py":
            problems.append(f"output_path must be a .py file, got {str(self.output_path)!r}")
        return problems

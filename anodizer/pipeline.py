"""
anodizer/pipeline.py
====================

End-to-end driver: design files in, generated struct module out.

    extract → classify → (oracle round-trip) → finalize → codegen → write

The simulator is only started when at least one tagged field has a
symbolic bound.  Every failure aborts the whole invocation, and the
output file is replaced atomically after everything else succeeded, so
a failed run never leaves partial output behind.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from anodizer import ast as A
from anodizer.codegen import StructDef, build_struct_defs, generate_module
from anodizer.config import AnodizerConfig
from anodizer.errors import ConfigError, FileSystemError
from anodizer.extractor import SymbolExtractor, extract
from anodizer.oracle import OracleProgram, run_oracle
from anodizer.resolve import (
    Classification,
    apply_answers,
    classify,
    emission_order,
    finalize,
)
from anodizer.toolchain import NvcRunner, ToolchainRunner

__all__ = [
    "AnodizeResult",
    "anodize_records",
    "build_oracle_program",
    "prepare",
    "write_atomic",
]

logger = logging.getLogger(__name__)


@dataclass
class AnodizeResult:
    output_path: Path
    code: str
    structs: List[StructDef]
    expressions: List[str] = field(default_factory=list)
    answers: Dict[int, int] = field(default_factory=dict)

    @property
    def oracle_invoked(self) -> bool:
        return bool(self.expressions)


def _check_config(config: AnodizerConfig) -> None:
    problems = config.validate()
    if problems:
        raise ConfigError(problems)


def prepare(
    designs: Iterable[A.DesignFile], config: AnodizerConfig
) -> Tuple[SymbolExtractor, Classification]:
    """Extract and classify; everything that needs no simulator."""
    extractor = extract(designs, config.attribute)
    if not extractor.tagged_names:
        logger.warning("no type is tagged with attribute '%s'", config.attribute)
    else:
        logger.info(
            "found %d tagged type(s): %s",
            len(extractor.tagged_names),
            ", ".join(extractor.tagged_names),
        )
    classification = classify(extractor, config)
    # Rejects self-containing records before the simulator runs.
    emission_order(classification.records)
    return extractor, classification


def build_oracle_program(classification: Classification, config: AnodizerConfig) -> OracleProgram:
    return OracleProgram(
        tuple(classification.table.keys),
        tuple(classification.packages),
        config.top_unit,
    )


def anodize_records(
    designs: Iterable[A.DesignFile],
    reference_sources: Sequence[Union[str, Path]],
    config: Optional[AnodizerConfig] = None,
    runner: Optional[ToolchainRunner] = None,
) -> AnodizeResult:
    """Generate the struct module for every tagged record in *designs*.

    Parameters
    ----------
    designs:
        Parsed design files to scan for tags and records.
    reference_sources:
        VHDL files, in compilation order, that the oracle program is
        analyzed together with (the packages declaring the records and
        everything they depend on).
    config:
        Invocation settings; ``AnodizerConfig()`` when omitted.
    runner:
        Toolchain to drive; an :class:`NvcRunner` built from *config*
        when omitted.
    """
    config = config or AnodizerConfig()
    _check_config(config)
    _, classification = prepare(designs, config)

    expressions = classification.table.keys
    answers: Dict[int, int] = {}
    if classification.needs_oracle:
        program = build_oracle_program(classification, config)
        runner = runner or NvcRunner.from_config(config)
        answers = run_oracle(program, reference_sources, config, runner)
        patched = apply_answers(classification.records, classification.table, answers)
        logger.info("applied %d answer(s) to %d bound(s)", len(answers), patched)
    else:
        logger.info("every bound is a literal; the simulator is not needed")

    records = emission_order(finalize(classification.records))
    structs = build_struct_defs(records)
    code = generate_module(structs)
    write_atomic(config.output_path, code)
    logger.info("wrote %d struct(s) to %s", len(structs), config.output_path)
    return AnodizeResult(config.output_path, code, structs, expressions, answers)


def write_atomic(path: Path, text: str) -> None:
    """Write *text* to *path* through a temporary file and a rename."""
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FileSystemError(path, e, action="write") from e


def _target_mode(path: Path) -> int:
    """Mode of the file being replaced, else what ``open()`` would create."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask

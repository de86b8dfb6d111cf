"""
anodizer/oracle.py
==================

The simulator as a constant-expression oracle.

``OracleProgram`` renders a minimal VHDL design unit whose single
process prints every expression key, in table order, as::

    EXPR_<index>: <integer value>

and then suspends forever.  ``run_oracle`` writes the program into the
working directory, drives the three toolchain stages strictly in
sequence (each stage's stdout/stderr is saved as ``<stage>.out`` /
``<stage>.err`` before its status is checked) and parses the run
stage's output with ``parse_oracle_output``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

from anodizer.config import AnodizerConfig
from anodizer.errors import DuplicateAnswerError, FileSystemError, OracleOutputError
from anodizer.toolchain import StageResult, ToolchainRunner

__all__ = ["OracleProgram", "parse_oracle_output", "run_oracle"]

logger = logging.getLogger(__name__)

_HEADER = (
    "-- Generated by anodizer: evaluates the constant expressions that size",
    "-- tagged record fields. Safe to delete; regenerated on every run.",
    "library ieee;",
    "use ieee.std_logic_1164.all;",
    "use ieee.numeric_std.all;",
    "",
    "library std;",
    "use std.textio.all;",
)

_ANSWER = re.compile(r"^EXPR_(\d+):\s*([+-]?\d+)$")


@dataclass(frozen=True)
class OracleProgram:
    """Synthesized evaluator for a fixed, ordered list of expression keys."""
    expressions: Tuple[str, ...]
    packages: Tuple[str, ...] = ()
    top_unit: str = "constraint_evaluator"

    def render(self) -> str:
        lines: List[str] = list(_HEADER)
        lines.extend(f"use work.{pkg}.all;" for pkg in self.packages)
        lines += [
            "",
            f"entity {self.top_unit} is",
            f"end entity {self.top_unit};",
            "",
            f"architecture behavior of {self.top_unit} is",
            "begin",
            "    process",
            "        variable l : line;",
            "    begin",
            "        wait for 0 ns;",
        ]
        for index, expr in enumerate(self.expressions):
            lines += [
                f"        write(l, string'(\"EXPR_{index}: \"));",
                f"        write(l, integer'image({expr}));",
                "        writeline(output, l);",
            ]
        lines += [
            "        wait;",
            "    end process;",
            "end architecture behavior;",
        ]
        return "\n".join(lines) + "\n"

    def write(self, path: Path) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.render(), encoding="utf-8")
        except OSError as e:
            raise FileSystemError(path, e, action="write") from e
        logger.debug("wrote oracle program with %d expression(s) to %s", len(self.expressions), path)
        return path


def parse_oracle_output(stdout: str, expected: int) -> Dict[int, int]:
    """Parse ``EXPR_<i>: <value>`` lines into ``{i: value}``.

    Blank lines are skipped.  Anything else that does not match, an
    index outside ``0 .. expected-1`` and an index seen twice are
    internal-consistency errors.

    >>> parse_oracle_output("EXPR_0: 7\\nEXPR_1: -3\\n", 2)
    {0: 7, 1: -3}
    """
    answers: Dict[int, int] = {}
    for number, raw in enumerate(stdout.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        match = _ANSWER.match(line)
        if match is None:
            raise OracleOutputError(number, raw, "expected 'EXPR_<index>: <integer>'")
        index, value = int(match.group(1)), int(match.group(2))
        if index >= expected:
            raise OracleOutputError(number, raw, f"only {expected} expression(s) were requested")
        if index in answers:
            raise DuplicateAnswerError(index, f"EXPR_{index}")
        answers[index] = value
    return answers


def run_oracle(
    program: OracleProgram,
    reference_sources: Sequence[Union[str, Path]],
    config: AnodizerConfig,
    runner: ToolchainRunner,
) -> Dict[int, int]:
    """Analyze, elaborate and run *program*; return its parsed answers.

    The first failing stage raises its ``ToolchainError``; later stages
    never start.
    """
    work_dir = config.work_dir
    program_path = program.write(config.program_path)
    files = [*(str(s) for s in reference_sources), str(program_path)]

    logger.info("analyzing %d file(s) into library %s", len(files), config.library)
    _finish(runner.analyze(config.standard, config.build_dir, config.library, files), work_dir, config)

    logger.info("elaborating %s", program.top_unit)
    _finish(
        runner.elaborate(config.standard, config.build_dir, config.library, program.top_unit),
        work_dir,
        config,
    )

    logger.info("running %s", program.top_unit)
    result = _finish(
        runner.run(config.standard, config.build_dir, config.library, program.top_unit),
        work_dir,
        config,
    )
    return parse_oracle_output(result.stdout, len(program.expressions))


def _finish(result: StageResult, work_dir: Path, config: AnodizerConfig) -> StageResult:
    result.write_logs(work_dir)
    result.raise_for_status(config.library)
    logger.info("%s succeeded", result.stage.value)
    return result

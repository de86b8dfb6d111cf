"""
anodizer/toolchain.py
=====================

Simulator toolchain contract and the nvc implementation.

The oracle pipeline needs exactly three operations from a simulator:

* ``analyze(standard, build_dir, library, files)``
* ``elaborate(standard, build_dir, library, unit)``
* ``run(standard, build_dir, library, unit)``

Each returns a :class:`StageResult` holding the command line, the exit
status and the captured output.  A runner does not decide what a
non-zero exit means: the caller writes the stage logs first and then
raises the stage-specific :class:`~anodizer.errors.ToolchainError`.
Only a simulator that cannot be launched at all raises here
(:class:`~anodizer.errors.ToolNotFoundError`).

All three stages share the library directory ``<build_dir>/<library>``
and search ``<build_dir>`` for other libraries, so later stages see the
artifacts of earlier ones.
"""

from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Type, Union

from anodizer.config import AnodizerConfig, VhdlStandard
from anodizer.errors import (
    AnalysisError,
    ElaborationError,
    FileSystemError,
    SimulationError,
    ToolchainError,
    ToolNotFoundError,
)

__all__ = ["NvcRunner", "Stage", "StageResult", "ToolchainRunner"]

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Stage(enum.Enum):
    ANALYZE = "analyze"
    ELABORATE = "elaborate"
    RUN = "run"

    @property
    def log_stem(self) -> str:
        """Base name of the stage's ``.out`` / ``.err`` logs."""
        return _LOG_STEMS[self]

    @property
    def error_class(self) -> Type[ToolchainError]:
        return _STAGE_ERRORS[self]


_LOG_STEMS = {Stage.ANALYZE: "analysis", Stage.ELABORATE: "elab", Stage.RUN: "sim"}
_STAGE_ERRORS = {
    Stage.ANALYZE: AnalysisError,
    Stage.ELABORATE: ElaborationError,
    Stage.RUN: SimulationError,
}


@dataclass(frozen=True)
class StageResult:
    """Outcome of one toolchain stage."""
    stage: Stage
    command: Tuple[str, ...]
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def write_logs(self, directory: Path) -> Tuple[Path, Path]:
        """Write ``<stem>.out`` / ``<stem>.err`` into *directory*."""
        out = directory / f"{self.stage.log_stem}.out"
        err = directory / f"{self.stage.log_stem}.err"
        for path, text in ((out, self.stdout), (err, self.stderr)):
            try:
                path.write_text(text, encoding="utf-8")
            except OSError as e:
                raise FileSystemError(path, e, action="write") from e
        return out, err

    def raise_for_status(self, library: str) -> None:
        """Raise the stage's :class:`ToolchainError` unless the stage succeeded."""
        if self.ok:
            return
        error_class = self.stage.error_class
        raise error_class(
            self.command,
            stdout=self.stdout,
            stderr=self.stderr,
            returncode=self.returncode,
            message=f"{error_class.stage_label} failed for library '{library}'",
        )


class ToolchainRunner(Protocol):
    """The three-stage contract the oracle pipeline drives."""

    def analyze(
        self,
        standard: VhdlStandard,
        build_dir: Path,
        library: str,
        files: Sequence[PathLike],
    ) -> StageResult: ...

    def elaborate(
        self, standard: VhdlStandard, build_dir: Path, library: str, unit: str
    ) -> StageResult: ...

    def run(
        self, standard: VhdlStandard, build_dir: Path, library: str, unit: str
    ) -> StageResult: ...


class NvcRunner:
    """Runs the nvc simulator as a subprocess.

    Example
    -------
    >>> runner = NvcRunner()
    >>> runner.base_args(VhdlStandard.VHDL2019, Path("build"), "generated")
    ['--std=2019', '--work=build/generated', '-M', '256m', '-L', 'build']
    """

    def __init__(
        self,
        executable: str = "nvc",
        heap_size: str = "256m",
        stop_time: str = "1ns",
        timeout: Optional[float] = None,
    ) -> None:
        self.executable = executable
        self.heap_size = heap_size
        self.stop_time = stop_time
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: AnodizerConfig) -> "NvcRunner":
        return cls(
            executable=config.nvc,
            heap_size=config.heap_size,
            stop_time=config.stop_time,
            timeout=config.timeout,
        )

    def base_args(self, standard: VhdlStandard, build_dir: Path, library: str) -> List[str]:
        build = Path(build_dir)
        return [
            f"--std={standard.value}",
            f"--work={(build / library).as_posix()}",
            "-M",
            self.heap_size,
            "-L",
            build.as_posix(),
        ]

    def analyze(
        self,
        standard: VhdlStandard,
        build_dir: Path,
        library: str,
        files: Sequence[PathLike],
    ) -> StageResult:
        args = self.base_args(standard, build_dir, library) + ["-a"]
        args.extend(str(f) for f in files)
        return self._execute(Stage.ANALYZE, args)

    def elaborate(
        self, standard: VhdlStandard, build_dir: Path, library: str, unit: str
    ) -> StageResult:
        args = self.base_args(standard, build_dir, library) + ["-e", unit]
        return self._execute(Stage.ELABORATE, args)

    def run(
        self, standard: VhdlStandard, build_dir: Path, library: str, unit: str
    ) -> StageResult:
        args = self.base_args(standard, build_dir, library)
        args += ["-r", unit, f"--stop-time={self.stop_time}"]
        return self._execute(Stage.RUN, args)

    def _execute(self, stage: Stage, args: List[str]) -> StageResult:
        command = (self.executable, *args)
        logger.debug("%s: %s", stage.value, " ".join(command))
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.error("%s timed out after %ss", stage.value, self.timeout)
            return StageResult(
                stage,
                command,
                None,
                stdout=_text(e.stdout),
                stderr=_text(e.stderr) + f"\n{stage.value} timed out after {self.timeout}s\n",
            )
        except OSError as e:
            raise ToolNotFoundError(
                command,
                message=f"could not run '{self.executable}': {e.strerror or e}",
                cause=e,
            ) from e
        return StageResult(stage, command, proc.returncode, proc.stdout, proc.stderr)


def _text(data: Union[str, bytes, None]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data

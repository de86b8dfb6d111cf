# anodizer/errors.py
"""
Error types for the anodizer pipeline.

Every failure aborts the current invocation; nothing is retried.  The
hierarchy separates caller mistakes from toolchain failures and from
defects in the pipeline itself, so the message alone says who has to
act.

Error Hierarchy:
────────────────
    AnodizerError (base)
    ├── UsageError                 - caller mistakes (bad tags, bad records)
    │   ├── UnknownTaggedTypeError
    │   ├── UntaggedSubtypeError
    │   ├── UnconstrainedFieldError
    │   ├── RecordNotInPackageError
    │   ├── RecursiveRecordError
    │   ├── NullRangeError
    │   └── ConfigError
    ├── ToolchainError             - analyze / elaborate / run failures
    │   ├── AnalysisError
    │   ├── ElaborationError
    │   ├── SimulationError
    │   └── ToolNotFoundError
    ├── InternalConsistencyError   - pipeline defects
    │   ├── UnsupportedConstraintError
    │   ├── OracleOutputError
    │   ├── DuplicateAnswerError
    │   └── UnresolvedBoundError
    ├── FileSystemError            - wrapped OSError
    ├── CodeGenSyntaxError         - generated module does not parse
    └── LoadError                  - malformed AST interchange input

Error Codes:
────────────
Codes follow ``ANZ-NNNN``:
  - 1000-1999: Usage errors
  - 2000-2999: Toolchain errors
  - 3000-3999: Internal-consistency errors
  - 4000-4999: Filesystem errors
  - 5000-5999: Code generation errors
  - 6000-6999: Input loading errors
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, List, Optional, Sequence

from anodizer.ast import NO_LOC, SourceLoc


@unique
class ErrorPhase(Enum):
    """Pipeline phase where the error occurred."""

    LOAD = "load"
    EXTRACT = "extract"
    CLASSIFY = "classify"
    TOOLCHAIN = "toolchain"
    RESOLVE = "resolve"
    CODEGEN = "codegen"
    IO = "io"
    CONFIG = "config"


class ErrorCode:
    """Structured ``ANZ-NNNN`` error code."""

    __slots__ = ("number", "phase", "summary")

    PREFIX = "ANZ"

    def __init__(self, number: int, phase: ErrorPhase, summary: str) -> None:
        self.number = number
        self.phase = phase
        self.summary = summary

    @property
    def code(self) -> str:
        return f"{self.PREFIX}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.summary!r})"

    def __hash__(self) -> int:
        return hash(self.number)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ErrorCodes:
    """Predefined error codes."""

    # USAGE (1000-1999)
    UNKNOWN_TAGGED_TYPE = ErrorCode(1001, ErrorPhase.CLASSIFY, "unknown tagged type")
    UNTAGGED_SUBTYPE = ErrorCode(1002, ErrorPhase.CLASSIFY, "untagged subtype reference")
    UNCONSTRAINED_FIELD = ErrorCode(1003, ErrorPhase.CLASSIFY, "unconstrained vector field")
    RECORD_NOT_IN_PACKAGE = ErrorCode(1004, ErrorPhase.CLASSIFY, "record outside a package")
    RECURSIVE_RECORD = ErrorCode(1005, ErrorPhase.CODEGEN, "record contains itself")
    NULL_RANGE = ErrorCode(1006, ErrorPhase.RESOLVE, "null or reversed range")
    INVALID_CONFIG = ErrorCode(1100, ErrorPhase.CONFIG, "invalid configuration")

    # TOOLCHAIN (2000-2999)
    ANALYSIS_FAILED = ErrorCode(2001, ErrorPhase.TOOLCHAIN, "analysis failed")
    ELABORATION_FAILED = ErrorCode(2002, ErrorPhase.TOOLCHAIN, "elaboration failed")
    SIMULATION_FAILED = ErrorCode(2003, ErrorPhase.TOOLCHAIN, "simulation failed")
    TOOL_NOT_FOUND = ErrorCode(2004, ErrorPhase.TOOLCHAIN, "simulator not runnable")

    # INTERNAL (3000-3999)
    UNSUPPORTED_CONSTRAINT = ErrorCode(3001, ErrorPhase.EXTRACT, "unsupported constraint shape")
    ORACLE_OUTPUT = ErrorCode(3002, ErrorPhase.RESOLVE, "unparseable oracle output")
    DUPLICATE_ANSWER = ErrorCode(3003, ErrorPhase.RESOLVE, "expression answered twice")
    UNRESOLVED_BOUND = ErrorCode(3004, ErrorPhase.RESOLVE, "bound left unresolved")

    # FILESYSTEM (4000-4999)
    FILESYSTEM = ErrorCode(4001, ErrorPhase.IO, "filesystem error")

    # CODEGEN (5000-5999)
    CODEGEN_SYNTAX = ErrorCode(5001, ErrorPhase.CODEGEN, "generated code does not parse")

    # LOAD (6000-6999)
    MALFORMED_INPUT = ErrorCode(6001, ErrorPhase.LOAD, "malformed AST input")


@dataclass
class ErrorNote:
    """Additional context attached to an error."""

    message: str
    label: str = "note"

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════


class AnodizerError(Exception):
    """Base exception for all anodizer errors."""

    default_code: ErrorCode = ErrorCodes.UNRESOLVED_BOUND

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        loc: Optional[SourceLoc] = None,
        notes: Optional[List[ErrorNote]] = None,
        hint: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.loc = loc if loc is not None else NO_LOC
        self.notes: List[ErrorNote] = list(notes or [])
        self.hint = hint
        self.cause = cause

    @property
    def phase(self) -> ErrorPhase:
        return self.code.phase

    def add_note(self, message: str, label: str = "note") -> "AnodizerError":
        self.notes.append(ErrorNote(message, label))
        return self

    def with_hint(self, hint: str) -> "AnodizerError":
        self.hint = hint
        return self

    def __str__(self) -> str:
        head = f"[{self.code}] {self.message}"
        if self.loc != NO_LOC:
            head = f"{self.loc}: {head}"
        lines = [head]
        lines.extend(f"  {note}" for note in self.notes)
        if self.hint:
            lines.append(f"  hint: {self.hint}")
        return "\n".join(lines)


# ───────────────────────────────────────────────────────────────────────────────
# USAGE ERRORS
# ───────────────────────────────────────────────────────────────────────────────


class UsageError(AnodizerError):
    """The caller asked for something that cannot be generated."""

    default_code = ErrorCodes.INVALID_CONFIG


class UnknownTaggedTypeError(UsageError):
    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(
            f"Tagged type '{name}' is not a record declared in the scanned sources",
            code=ErrorCodes.UNKNOWN_TAGGED_TYPE,
            **kwargs,
        )
        self.name = name


class UntaggedSubtypeError(UsageError):
    def __init__(self, subtype: str, record: str, field_name: str, **kwargs: Any) -> None:
        super().__init__(
            f"Subtype '{subtype}' of field '{field_name}' in record '{record}' "
            f"is not tagged for serialization",
            code=ErrorCodes.UNTAGGED_SUBTYPE,
            hint=f"Tag '{subtype}' with the marker attribute",
            **kwargs,
        )
        self.subtype = subtype
        self.record = record
        self.field_name = field_name


class UnconstrainedFieldError(UsageError):
    def __init__(self, record: str, field_name: str, **kwargs: Any) -> None:
        super().__init__(
            f"All vector fields in serialized records must be constrained; "
            f"found unconstrained field '{field_name}' in record '{record}'",
            code=ErrorCodes.UNCONSTRAINED_FIELD,
            **kwargs,
        )
        self.record = record
        self.field_name = field_name


class RecordNotInPackageError(UsageError):
    def __init__(self, record: str, unit: str, **kwargs: Any) -> None:
        super().__init__(
            f"Record '{record}' needs simulator evaluation but is declared in "
            f"{unit}, not in a package",
            code=ErrorCodes.RECORD_NOT_IN_PACKAGE,
            hint="Move the record into a package so the evaluator can use it",
            **kwargs,
        )
        self.record = record


class RecursiveRecordError(UsageError):
    def __init__(self, cycle: Sequence[str], **kwargs: Any) -> None:
        super().__init__(
            f"Record contains itself: {' -> '.join(cycle)}",
            code=ErrorCodes.RECURSIVE_RECORD,
            **kwargs,
        )
        self.cycle = list(cycle)


class NullRangeError(UsageError):
    def __init__(
        self, record: str, field_name: str, left: int, direction: str, right: int,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Field '{field_name}' in record '{record}' resolves to the null "
            f"range ({left} {direction} {right})",
            code=ErrorCodes.NULL_RANGE,
            **kwargs,
        )
        self.record = record
        self.field_name = field_name


class ConfigError(UsageError):
    def __init__(self, problems: Sequence[str], **kwargs: Any) -> None:
        super().__init__(
            "Invalid configuration: " + "; ".join(problems),
            code=ErrorCodes.INVALID_CONFIG,
            **kwargs,
        )
        self.problems = list(problems)


# ───────────────────────────────────────────────────────────────────────────────
# TOOLCHAIN ERRORS
# ───────────────────────────────────────────────────────────────────────────────


class ToolchainError(AnodizerError):
    """An external toolchain stage failed; carries the captured output."""

    default_code = ErrorCodes.TOOL_NOT_FOUND
    stage_label = "toolchain"

    def __init__(
        self,
        command: Sequence[str],
        stdout: str = "",
        stderr: str = "",
        returncode: Optional[int] = None,
        message: str = "",
        **kwargs: Any,
    ) -> None:
        self.command = list(command)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        text = message or f"{self.stage_label} failed"
        if returncode is not None:
            text += f" (exit status {returncode})"
        super().__init__(text, **kwargs)
        self.add_note(self.command_line, label="command")
        if stderr.strip():
            self.add_note(stderr.rstrip(), label="stderr")
        if stdout.strip():
            self.add_note(stdout.rstrip(), label="stdout")

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class AnalysisError(ToolchainError):
    default_code = ErrorCodes.ANALYSIS_FAILED
    stage_label = "analysis"


class ElaborationError(ToolchainError):
    default_code = ErrorCodes.ELABORATION_FAILED
    stage_label = "elaboration"


class SimulationError(ToolchainError):
    default_code = ErrorCodes.SIMULATION_FAILED
    stage_label = "simulation"


class ToolNotFoundError(ToolchainError):
    default_code = ErrorCodes.TOOL_NOT_FOUND
    stage_label = "simulator launch"


# ───────────────────────────────────────────────────────────────────────────────
# INTERNAL-CONSISTENCY ERRORS
# ───────────────────────────────────────────────────────────────────────────────


class InternalConsistencyError(AnodizerError):
    """A pipeline invariant was broken.  These are bugs, not user errors."""

    default_code = ErrorCodes.UNRESOLVED_BOUND


class UnsupportedConstraintError(InternalConsistencyError):
    def __init__(self, record: str, field_name: str, shape: str, **kwargs: Any) -> None:
        super().__init__(
            f"Field '{field_name}' in record '{record}' uses an unsupported "
            f"constraint shape: {shape}",
            code=ErrorCodes.UNSUPPORTED_CONSTRAINT,
            **kwargs,
        )
        self.record = record
        self.field_name = field_name


class OracleOutputError(InternalConsistencyError):
    def __init__(self, line_number: int, line: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Unparseable simulation output at line {line_number}: {line!r} ({reason})",
            code=ErrorCodes.ORACLE_OUTPUT,
            hint="Look at sim.out in the generate directory",
            **kwargs,
        )
        self.line_number = line_number
        self.line = line


class DuplicateAnswerError(InternalConsistencyError):
    def __init__(self, index: int, expression: str, **kwargs: Any) -> None:
        super().__init__(
            f"Expression {index} ({expression}) was answered more than once",
            code=ErrorCodes.DUPLICATE_ANSWER,
            **kwargs,
        )
        self.index = index


class UnresolvedBoundError(InternalConsistencyError):
    def __init__(self, record: str, field_name: str, side: str, **kwargs: Any) -> None:
        super().__init__(
            f"The {side} bound of field '{field_name}' in record '{record}' "
            f"was never resolved",
            code=ErrorCodes.UNRESOLVED_BOUND,
            **kwargs,
        )
        self.record = record
        self.field_name = field_name


# ───────────────────────────────────────────────────────────────────────────────
# FILESYSTEM / CODEGEN / LOAD
# ───────────────────────────────────────────────────────────────────────────────


class FileSystemError(AnodizerError):
    default_code = ErrorCodes.FILESYSTEM

    def __init__(self, path: Any, cause: OSError, action: str = "access") -> None:
        super().__init__(
            f"Could not {action} {path}: {cause.strerror or cause}",
            cause=cause,
        )
        self.path = path


class CodeGenSyntaxError(AnodizerError):
    default_code = ErrorCodes.CODEGEN_SYNTAX

    def __init__(self, detail: str, lineno: Optional[int] = None, **kwargs: Any) -> None:
        where = f" at generated line {lineno}" if lineno else ""
        super().__init__(f"Failed to parse generated code{where}: {detail}", **kwargs)
        self.lineno = lineno


class LoadError(AnodizerError):
    default_code = ErrorCodes.MALFORMED_INPUT

    def __init__(self, message: str, source: str = "<string>", form: Any = None, **kwargs: Any) -> None:
        super().__init__(f"{source}: {message}", **kwargs)
        self.source = source
        if form is not None:
            self.add_note(_short(form), label="form")


def _short(form: Any, limit: int = 120) -> str:
    text = repr(form)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


__all__ = [
    "AnalysisError",
    "AnodizerError",
    "CodeGenSyntaxError",
    "ConfigError",
    "DuplicateAnswerError",
    "ElaborationError",
    "ErrorCode",
    "ErrorCodes",
    "ErrorNote",
    "ErrorPhase",
    "FileSystemError",
    "InternalConsistencyError",
    "LoadError",
    "NullRangeError",
    "OracleOutputError",
    "RecordNotInPackageError",
    "RecursiveRecordError",
    "SimulationError",
    "ToolNotFoundError",
    "ToolchainError",
    "UnconstrainedFieldError",
    "UnknownTaggedTypeError",
    "UnresolvedBoundError",
    "UnsupportedConstraintError",
    "UntaggedSubtypeError",
    "UsageError",
]

# tests/conftest.py
"""
Shared fixtures for the anodizer test-suite: S-expression design files
as the HDL front end would emit them, and a scripted toolchain runner
that evaluates the generated program from a lookup table instead of
running a simulator.
"""

import logging
import re
from pathlib import Path

import pytest

from anodizer.config import AnodizerConfig
from anodizer.loader import load_text
from anodizer.toolchain import Stage, StageResult


# ---------------------------------------------------------------------------
# Design files
# ---------------------------------------------------------------------------

# flags_t is all scalar; hdr_t and pkt_t share the expression WIDTH - 1,
# pkt_t embeds hdr_t and adds a second expression.
ETH_PKG_SEXP = """
(design-file "rtl/eth_pkg.vhd"
  (package eth_pkg
    (constant WIDTH integer 16)
    (attribute anodize boolean)
    (type flags_t (record
      (element valid std_logic)
      (element (ready err) std_logic)))
    (type hdr_t (record
      (element kind (subtype-ind std_logic_vector (array (range 3 downto 0))))
      (element length (subtype-ind std_logic_vector (array (range (- WIDTH 1) downto 0))))
      (element flags flags_t)))
    (type pkt_t (record
      (element hdr hdr_t)
      (element crc (subtype-ind std_logic_vector (array (range (- WIDTH 1) downto 0))))
      (element tag (subtype-ind unsigned (array (range (- (* 2 WIDTH) 1) downto 0))))))
    (type untagged_t (record
      (element x std_logic)))
    (attribute-spec anodize type flags_t true)
    (attribute-spec anodize type hdr_t true)
    (attribute-spec anodize type pkt_t true)))
"""

# Oracle answers for ETH_PKG_SEXP, keyed by printed expression text.
ETH_VALUES = {"WIDTH - 1": 15, "2 * WIDTH - 1": 31}

LITERAL_ONLY_SEXP = """
(design-file "rtl/regs_pkg.vhd"
  (package regs_pkg
    (type ctrl_t (record
      (element enable std_logic)
      (element mode (subtype-ind std_logic_vector (array (range 2 downto 0))))
      (element count (subtype-ind unsigned (array (range 0 to 7))))))
    (attribute-spec anodize type ctrl_t true))
  (entity regs
    (signal ctrl ctrl_t)))
"""

UNCONSTRAINED_SEXP = """
(design-file "rtl/bad_pkg.vhd"
  (package bad_pkg
    (type bad_t (record
      (element ok std_logic)
      (element data std_logic_vector)))
    (attribute-spec anodize type bad_t true)))
"""

UNTAGGED_SUBTYPE_SEXP = """
(design-file "rtl/bad_pkg.vhd"
  (package bad_pkg
    (type inner_t (record
      (element x std_logic)))
    (type outer_t (record
      (element inner inner_t)))
    (attribute-spec anodize type outer_t true)))
"""

ARCHITECTURE_RECORD_SEXP = """
(design-file "rtl/top.vhd"
  (entity top)
  (architecture rtl top
    (constant N integer 4)
    (type local_t (record
      (element data (subtype-ind std_logic_vector (array (range (- N 1) downto 0))))))
    (attribute-spec anodize type local_t true)))
"""

UNKNOWN_TAG_SEXP = """
(design-file "rtl/pkg.vhd"
  (package pkg
    (attribute-spec anodize type missing_t true)))
"""


# ---------------------------------------------------------------------------
# Fake toolchain
# ---------------------------------------------------------------------------

_IMAGE = re.compile(r"integer'image\((.*)\)\);$", re.MULTILINE)


class FakeRunner:
    """Scripted stand-in for ``NvcRunner``.

    The run stage prints ``EXPR_<i>: <value>`` for every expression in
    the analyzed program, looking values up in *values* by expression
    text.  *stdout* overrides the run output verbatim; *fail* makes that
    stage exit with status 1.
    """

    def __init__(self, values=None, *, stdout=None, fail=None):
        self.values = dict(values or {})
        self.stdout = stdout
        self.fail = fail
        self.calls = []
        self.files = []
        self.program_text = ""

    def _result(self, stage, command, stdout=""):
        self.calls.append(stage)
        if stage is self.fail:
            return StageResult(stage, command, 1, "", f"** Fatal: {stage.value} went wrong\n")
        return StageResult(stage, command, 0, stdout, "")

    def analyze(self, standard, build_dir, library, files):
        self.files = [str(f) for f in files]
        self.program_text = Path(self.files[-1]).read_text(encoding="utf-8")
        return self._result(Stage.ANALYZE, ("nvc", "-a", *self.files))

    def elaborate(self, standard, build_dir, library, unit):
        return self._result(Stage.ELABORATE, ("nvc", "-e", unit))

    def run(self, standard, build_dir, library, unit):
        stdout = self.stdout if self.stdout is not None else self.evaluate()
        return self._result(Stage.RUN, ("nvc", "-r", unit), stdout)

    def expressions(self):
        return _IMAGE.findall(self.program_text)

    def evaluate(self):
        lines = [f"EXPR_{i}: {self.values[expr]}" for i, expr in enumerate(self.expressions())]
        return "".join(line + "\n" for line in lines)


class ExplodingRunner:
    """A runner that must never be used."""

    def analyze(self, *args):
        raise AssertionError("the toolchain must not be invoked")

    elaborate = run = analyze


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_anodizer_logger():
    yield
    logger = logging.getLogger("anodizer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config(tmp_path):
    return AnodizerConfig(
        build_dir=tmp_path / "build",
        output_path=tmp_path / "out" / "structs.py",
    )


@pytest.fixture
def eth_designs():
    return load_text(ETH_PKG_SEXP, source="eth_pkg.sexp")


@pytest.fixture
def literal_designs():
    return load_text(LITERAL_ONLY_SEXP, source="regs_pkg.sexp")


@pytest.fixture
def fake_runner():
    return FakeRunner(ETH_VALUES)


def load_generated(code):
    """Execute a generated module and return its namespace."""
    namespace = {}
    exec(compile(code, "<generated>", "exec"), namespace)
    return namespace

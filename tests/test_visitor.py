# tests/test_visitor.py
"""
Tests for the pre-order design-tree walker.
"""

from anodizer import ast as A
from anodizer.loader import load_text
from anodizer.visitor import (
    DesignVisitor,
    VisitResult,
    walk_design_file,
    walk_design_files,
)
from tests.conftest import ETH_PKG_SEXP, LITERAL_ONLY_SEXP


NESTED_SEXP = """
(design-file "rtl/p.vhd"
  (package p
    (constant A integer 1)
    (function-body f
      (constant B integer 2)
      (procedure-body g
        (constant C integer 3)))
    (constant D integer 4))
  (package-body p
    (constant E integer 5)))
"""


class Recorder(DesignVisitor):
    """Records every hook call as ``(hook, label)``."""

    def __init__(self, stop_at=None):
        self.events = []
        self.stop_at = stop_at

    def _record(self, hook, label):
        self.events.append((hook, label))
        if label == self.stop_at:
            return VisitResult.STOP
        return VisitResult.CONTINUE

    def visit_design_file(self, file):
        return self._record("file", file.path)

    def visit_package(self, unit):
        return self._record("package", unit.name)

    def visit_package_body(self, unit):
        return self._record("package body", unit.name)

    def visit_entity(self, unit):
        return self._record("entity", unit.name)

    def visit_object_declaration(self, decl, unit):
        return self._record("object", decl.names[0])

    def visit_subprogram_body(self, decl, unit):
        return self._record("body", decl.name)


class TestVisitResult:

    def test_should_continue(self):
        assert VisitResult.CONTINUE.should_continue
        assert not VisitResult.STOP.should_continue


class TestWalkOrder:

    def test_preorder_with_subprogram_bodies(self):
        rec = Recorder()
        result = walk_design_file(rec, load_text(NESTED_SEXP)[0])
        assert result is VisitResult.CONTINUE
        assert rec.events == [
            ("file", "rtl/p.vhd"),
            ("package", "p"),
            ("object", "A"),
            ("body", "f"),
            ("object", "B"),
            ("body", "g"),
            ("object", "C"),
            ("object", "D"),
            ("package body", "p"),
            ("object", "E"),
        ]

    def test_generic_hook_runs_before_specific(self):
        calls = []

        class V(DesignVisitor):
            def visit_declaration(self, decl, unit):
                calls.append(("any", type(decl).__name__))
                return VisitResult.CONTINUE

            def visit_type_declaration(self, decl, unit):
                calls.append(("type", decl.name))
                return VisitResult.CONTINUE

        walk_design_files(V(), load_text(LITERAL_ONLY_SEXP))
        assert calls[:2] == [("any", "TypeDeclaration"), ("type", "ctrl_t")]
        assert ("any", "AttributeSpecification") in calls

    def test_unit_receives_enclosing_unit(self):
        seen = []

        class V(DesignVisitor):
            def visit_object_declaration(self, decl, unit):
                seen.append((decl.names[0], type(unit).__name__))
                return VisitResult.CONTINUE

        walk_design_files(V(), load_text(NESTED_SEXP))
        assert ("C", "PackageDeclaration") in seen
        assert ("E", "PackageBody") in seen

    def test_visits_every_file(self):
        rec = Recorder()
        files = load_text(ETH_PKG_SEXP) + load_text(LITERAL_ONLY_SEXP)
        walk_design_files(rec, files)
        assert [e for e in rec.events if e[0] == "file"] == [
            ("file", "rtl/eth_pkg.vhd"),
            ("file", "rtl/regs_pkg.vhd"),
        ]
        assert ("entity", "regs") in rec.events


class TestEarlyStop:

    def test_stop_inside_nested_body(self):
        rec = Recorder(stop_at="B")
        result = walk_design_file(rec, load_text(NESTED_SEXP)[0])
        assert result is VisitResult.STOP
        assert rec.events[-1] == ("object", "B")
        assert ("object", "D") not in rec.events
        assert ("package body", "p") not in rec.events

    def test_stop_at_unit_skips_declarations(self):
        rec = Recorder(stop_at="p")
        walk_design_file(rec, load_text(NESTED_SEXP)[0])
        assert rec.events == [("file", "rtl/p.vhd"), ("package", "p")]

    def test_stop_skips_later_files(self):
        rec = Recorder(stop_at="rtl/eth_pkg.vhd")
        files = load_text(ETH_PKG_SEXP) + load_text(LITERAL_ONLY_SEXP)
        assert walk_design_files(rec, files) is VisitResult.STOP
        assert rec.events == [("file", "rtl/eth_pkg.vhd")]

    def test_default_visitor_walks_everything(self):
        files = load_text(ETH_PKG_SEXP)
        assert walk_design_files(DesignVisitor(), files) is VisitResult.CONTINUE
        assert isinstance(files[0].units[0], A.PackageDeclaration)

# tests/test_loader.py
"""
Tests for the S-expression loader: interchange text → AST nodes.
"""

import pytest

from anodizer import ast as A
from anodizer.errors import FileSystemError, LoadError
from anodizer.loader import load_expression, load_file, load_text
from tests.conftest import ETH_PKG_SEXP, LITERAL_ONLY_SEXP


def _single_unit(body):
    files = load_text(f'(design-file "x.vhd" {body})')
    assert len(files) == 1
    assert len(files[0].units) == 1
    return files[0].units[0]


def _single_decl(decl):
    unit = _single_unit(f"(package p {decl})")
    assert len(unit.declarations) == 1
    return unit.declarations[0]


class TestLoadDocument:

    def test_design_file_path(self):
        files = load_text(ETH_PKG_SEXP)
        assert files[0].path == "rtl/eth_pkg.vhd"

    def test_design_files_wrapper(self):
        text = '(design-files (design-file "a.vhd") (design-file "b.vhd" (context c)))'
        files = load_text(text)
        assert [f.path for f in files] == ["a.vhd", "b.vhd"]
        assert files[1].units == (A.ContextDeclaration("c"),)

    def test_comments_are_ignored(self):
        files = load_text('; front end v1\n(design-file "a.vhd" ; nothing\n)')
        assert files[0].units == ()

    def test_load_file(self, tmp_path):
        path = tmp_path / "regs.sexp"
        path.write_text(LITERAL_ONLY_SEXP, encoding="utf-8")
        files = load_file(path)
        assert files[0].units[0].name == "regs_pkg"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileSystemError):
            load_file(tmp_path / "nope.sexp")

    def test_load_non_utf8_file(self, tmp_path):
        path = tmp_path / "latin1.sexp"
        path.write_bytes(b'(design-file "x\xff.vhd")')
        with pytest.raises(LoadError, match=r"latin1\.sexp: not valid UTF-8 \(byte 0xff at offset 15\)"):
            load_file(path)

    def test_location_form(self):
        unit = _single_unit("(package p (loc 3 1))")
        assert unit.loc.line == 3
        assert unit.loc.col == 1
        assert unit.loc.file == "x.vhd"


class TestLoadUnits:

    def test_package(self):
        unit = _single_unit("(package eth_pkg)")
        assert isinstance(unit, A.PackageDeclaration)
        assert unit.name == "eth_pkg"

    def test_package_body(self):
        unit = _single_unit("(package-body eth_pkg (constant C integer 1))")
        assert isinstance(unit, A.PackageBody)
        assert len(unit.declarations) == 1

    def test_entity(self):
        unit = _single_unit("(entity top)")
        assert unit == A.EntityDeclaration("top")

    def test_architecture(self):
        unit = _single_unit("(architecture rtl top (signal s std_logic))")
        assert isinstance(unit, A.ArchitectureBody)
        assert unit.entity_name == "top"
        assert unit.declarations[0].object_class is A.ObjectClass.SIGNAL

    def test_package_instance(self):
        unit = _single_unit("(package-instance fifo8 work.fifo_generic)")
        assert unit.uninstantiated == A.SelectedName(A.SimpleName("work"), "fifo_generic")

    def test_configuration(self):
        unit = _single_unit("(configuration cfg top)")
        assert unit == A.ConfigurationDeclaration("cfg", "top")


class TestLoadDeclarations:

    def test_record_type(self):
        files = load_text(ETH_PKG_SEXP)
        decl = files[0].units[0].declarations[2]
        assert isinstance(decl, A.TypeDeclaration)
        assert decl.name == "flags_t"
        elements = decl.definition.elements
        assert elements[0].names == ("valid",)
        assert elements[1].names == ("ready", "err")

    def test_constrained_element(self):
        decl = _single_decl(
            "(type t (record (element d (subtype-ind std_logic_vector"
            " (array (range 7 downto 0))))))"
        )
        subtype = decl.definition.elements[0].subtype
        assert subtype.type_mark == A.SimpleName("std_logic_vector")
        (rng,) = subtype.constraint.ranges
        assert rng == A.RangeConstraint(A.IntegerLiteral(7), A.Direction.DOWNTO, A.IntegerLiteral(0))

    def test_other_range_shapes(self):
        decl = _single_decl(
            "(type t (record (element d (subtype-ind std_logic_vector"
            " (array (discrete byte_range) (range-attr (attribute v range)))))))"
        )
        ranges = decl.definition.elements[0].subtype.constraint.ranges
        assert isinstance(ranges[0], A.DiscreteSubtypeRange)
        assert isinstance(ranges[1], A.AttributeRange)

    def test_scalar_range_constraint(self):
        decl = _single_decl("(subtype small_t (subtype-ind integer (range 0 to 7)))")
        assert isinstance(decl, A.SubtypeDeclaration)
        assert isinstance(decl.subtype.constraint, A.ScalarRangeConstraint)
        assert decl.subtype.constraint.range.direction is A.Direction.TO

    def test_enum_and_other_types(self):
        unit = _single_unit("(package p (type state_t (enum idle busy)) (type mem_t (array)))")
        assert unit.declarations[0].definition == A.EnumDefinition(("idle", "busy"))
        assert unit.declarations[1].definition == A.OtherTypeDefinition("array")

    def test_constant_with_value(self):
        decl = _single_decl("(constant (A B) integer (+ 1 2))")
        assert decl.names == ("A", "B")
        assert decl.value == A.BinaryExpr(A.Operator.PLUS, A.IntegerLiteral(1), A.IntegerLiteral(2))

    def test_attribute_specification(self):
        decl = _single_decl("(attribute-spec anodize type hdr_t true)")
        assert decl.name == "anodize"
        assert decl.entity_class is A.EntityClass.TYPE
        assert decl.entity_name == A.EntityDesignator(A.EntityNameKind.NAME, "hdr_t")
        assert decl.value == A.SimpleName("true")

    @pytest.mark.parametrize("target, kind", [
        ("all", A.EntityNameKind.ALL),
        ("others", A.EntityNameKind.OTHERS),
    ])
    def test_attribute_specification_all_others(self, target, kind):
        decl = _single_decl(f"(attribute-spec anodize type {target} true)")
        assert decl.entity_name.kind is kind
        assert decl.entity_name.designator is None

    def test_subprogram_body_nests_declarations(self):
        decl = _single_decl("(function-body f (constant K integer 3) (use work.p.all))")
        assert isinstance(decl, A.SubprogramBody)
        assert decl.kind is A.SubprogramKind.FUNCTION
        assert isinstance(decl.declarations[1], A.UseClause)
        assert decl.declarations[1].names == (
            A.SelectedAllName(A.SelectedName(A.SimpleName("work"), "p")),
        )

    def test_misc_declarations(self):
        unit = _single_unit(
            "(package p (component c) (attribute a boolean) (procedure pr)"
            " (function-instance f2 work.generic_f) (shared-variable sv integer))"
        )
        kinds = [type(d) for d in unit.declarations]
        assert kinds == [
            A.ComponentDeclaration,
            A.AttributeDeclaration,
            A.SubprogramDeclaration,
            A.SubprogramInstantiation,
            A.ObjectDeclaration,
        ]
        assert unit.declarations[4].object_class is A.ObjectClass.SHARED_VARIABLE


class TestLoadExpressions:

    @pytest.mark.parametrize("text, expected", [
        ("42", A.IntegerLiteral(42)),
        ("-3", A.IntegerLiteral(-3)),
        ("1.5", A.RealLiteral(1.5)),
        ('"abc"', A.StringLiteral("abc")),
        ('(char "x")', A.CharacterLiteral("x")),
        ('(bitstring "x" "FF" 8)', A.BitStringLiteral("x", "FF", 8)),
        ('(bitstring "b" "0101")', A.BitStringLiteral("b", "0101")),
        ("(physical 10 ns)", A.PhysicalLiteral(10, "ns")),
        ("null", A.NullLiteral()),
        ("WIDTH", A.SimpleName("WIDTH")),
        ("(name WIDTH)", A.SimpleName("WIDTH")),
    ])
    def test_atoms(self, text, expected):
        assert load_expression(text) == expected

    def test_dotted_name(self):
        assert load_expression("work.pkg.WIDTH") == A.SelectedName(
            A.SelectedName(A.SimpleName("work"), "pkg"), "WIDTH"
        )

    def test_selected_and_all_forms(self):
        assert load_expression("(selected pkg W)") == A.SelectedName(A.SimpleName("pkg"), "W")
        assert load_expression("(all work.pkg)") == A.SelectedAllName(
            A.SelectedName(A.SimpleName("work"), "pkg")
        )

    def test_call(self):
        expr = load_expression("(call log2 DEPTH)")
        assert expr == A.CallName(A.SimpleName("log2"), (A.SimpleName("DEPTH"),))

    def test_attribute_name(self):
        expr = load_expression("(attribute data length)")
        assert expr == A.AttributeName(A.SimpleName("data"), "length")

    def test_binary_shorthand_and_long_form_agree(self):
        assert load_expression("(- WIDTH 1)") == load_expression("(binary - WIDTH 1)")

    def test_word_operators(self):
        expr = load_expression("(mod N 8)")
        assert expr.op is A.Operator.MOD

    def test_unary(self):
        assert load_expression("(- N)") == A.UnaryExpr(A.Operator.MINUS, A.SimpleName("N"))
        assert load_expression("(unary abs N)") == A.UnaryExpr(A.Operator.ABS, A.SimpleName("N"))

    def test_parenthesized(self):
        expr = load_expression("(paren (+ A B))")
        assert isinstance(expr, A.ParenthesizedExpr)
        assert isinstance(expr.inner, A.BinaryExpr)

    def test_unknown_form_is_unsupported(self):
        assert load_expression("(aggregate 1 2)") == A.UnsupportedExpr("aggregate")


class TestLoadErrors:

    def test_unbalanced_text(self):
        with pytest.raises(LoadError):
            load_text('(design-file "x.vhd"')

    def test_not_a_design_file(self):
        with pytest.raises(LoadError, match="design-file"):
            load_text("(package p)")

    def test_unknown_unit(self):
        with pytest.raises(LoadError, match="Unknown design unit"):
            load_text('(design-file "x.vhd" (module m))')

    def test_unknown_declaration(self):
        with pytest.raises(LoadError, match="Unknown declaration"):
            load_text('(design-file "x.vhd" (package p (process x)))')

    def test_bad_direction(self):
        with pytest.raises(LoadError, match="downto"):
            load_text(
                '(design-file "x.vhd" (package p (subtype s'
                ' (subtype-ind integer (range 0 upto 7)))))'
            )

    def test_non_unary_operator(self):
        with pytest.raises(LoadError, match="not a unary operator"):
            load_expression("(* N)")

    def test_unknown_operator_in_long_form(self):
        with pytest.raises(LoadError, match="Unknown operator"):
            load_expression("(binary ^ A B)")

    def test_error_names_the_source(self):
        with pytest.raises(LoadError) as info:
            load_text('(design-file "x.vhd" (module m))', source="front.sexp")
        assert "x.vhd" in str(info.value)
        assert info.value.code.code == "ANZ-6001"

# tests/test_resolve.py
"""
Tests for bound classification, expression deduplication, back-patching
and emission order.
"""

import pytest

from anodizer import ast as A
from anodizer.config import AnodizerConfig
from anodizer.errors import (
    DuplicateAnswerError,
    NullRangeError,
    OracleOutputError,
    RecordNotInPackageError,
    RecursiveRecordError,
    UnconstrainedFieldError,
    UnknownTaggedTypeError,
    UnresolvedBoundError,
    UnsupportedConstraintError,
    UntaggedSubtypeError,
)
from anodizer.extractor import extract
from anodizer.loader import load_text
from anodizer.resolve import (
    FieldKind,
    ResolutionTable,
    ResolutionTarget,
    ResolvedField,
    ResolvedRange,
    ResolvedRecord,
    Side,
    apply_answers,
    classify,
    emission_order,
    finalize,
)
from tests.conftest import (
    ARCHITECTURE_RECORD_SEXP,
    ETH_PKG_SEXP,
    LITERAL_ONLY_SEXP,
    UNCONSTRAINED_SEXP,
    UNKNOWN_TAG_SEXP,
    UNTAGGED_SUBTYPE_SEXP,
)


def _classify(text, config=None):
    return classify(extract(load_text(text)), config)


def _eth_resolved():
    c = _classify(ETH_PKG_SEXP)
    apply_answers(c.records, c.table, {0: 15, 1: 31})
    return finalize(c.records)


class TestResolutionTable:

    def test_first_registration_order(self):
        table = ResolutionTable()
        table.register("B", ResolutionTarget(0, 0, Side.LEFT))
        table.register("A", ResolutionTarget(0, 1, Side.LEFT))
        table.register("B", ResolutionTarget(1, 0, Side.RIGHT))
        assert table.keys == ["B", "A"]
        assert table.key_at(1) == "A"
        assert len(table) == 2
        assert "A" in table and "C" not in table
        assert table.targets("B") == [
            ResolutionTarget(0, 0, Side.LEFT),
            ResolutionTarget(1, 0, Side.RIGHT),
        ]
        assert table.targets("C") == []


class TestClassify:

    def test_kinds(self):
        c = _classify(ETH_PKG_SEXP)
        flags, hdr, pkt = c.records
        assert [f.kind for f in flags.fields] == [FieldKind.SCALAR] * 3
        assert [f.kind for f in hdr.fields] == [
            FieldKind.VECTOR, FieldKind.VECTOR, FieldKind.NESTED,
        ]
        assert [f.kind for f in pkt.fields] == [
            FieldKind.NESTED, FieldKind.VECTOR, FieldKind.VECTOR,
        ]

    def test_scalar_range_is_single_bit(self):
        flags = _classify(ETH_PKG_SEXP).records[0]
        rng = flags.fields[0].range
        assert (rng.direction, rng.left, rng.right) == (A.Direction.DOWNTO, 0, 0)
        assert flags.fields[0].width == 1

    def test_nested_field_has_no_range(self):
        hdr = _classify(ETH_PKG_SEXP).records[1]
        assert hdr.fields[2].range is None
        assert hdr.fields[2].width is None
        assert hdr.nested_types() == ["flags_t"]

    def test_identical_expressions_share_a_key(self):
        c = _classify(ETH_PKG_SEXP)
        assert c.table.keys == ["WIDTH - 1", "2 * WIDTH - 1"]
        assert c.table.targets("WIDTH - 1") == [
            ResolutionTarget(1, 1, Side.LEFT),
            ResolutionTarget(2, 1, Side.LEFT),
        ]

    def test_known_sides_are_set_immediately(self):
        hdr = _classify(ETH_PKG_SEXP).records[1]
        assert hdr.fields[0].range.left == 3
        assert hdr.fields[1].range.left is None
        assert hdr.fields[1].range.right == 0

    def test_packages_deduplicated(self):
        c = _classify(ETH_PKG_SEXP)
        assert c.packages == ["eth_pkg"]
        assert c.needs_oracle

    def test_literal_only_needs_no_oracle(self):
        c = _classify(LITERAL_ONLY_SEXP)
        assert len(c.table) == 0
        assert not c.needs_oracle
        assert c.packages == []

    def test_untagged_records_are_skipped(self):
        c = _classify(ETH_PKG_SEXP)
        assert "untagged_t" not in [r.name for r in c.records]

    def test_nested_name_is_canonical(self):
        c = _classify("""
        (design-file "p.vhd"
          (package p
            (type inner_t (record (element x std_logic)))
            (type outer_t (record (element i INNER_T)))
            (attribute-spec anodize type inner_t true)
            (attribute-spec anodize type outer_t true)))
        """)
        assert c.records[1].fields[0].subtype == "inner_t"

    def test_custom_vector_subtypes(self):
        text = """
        (design-file "p.vhd"
          (package p
            (type a_t (record
              (element w (subtype-ind word_t (array (range 15 downto 0))))))
            (attribute-spec anodize type a_t true)))
        """
        config = AnodizerConfig(vector_subtypes=frozenset({"word_t"}))
        c = _classify(text, config)
        assert c.records[0].fields[0].kind is FieldKind.VECTOR
        assert c.records[0].fields[0].width == 16


class TestClassifyErrors:

    def test_unconstrained_vector(self):
        with pytest.raises(UnconstrainedFieldError, match="data") as info:
            _classify(UNCONSTRAINED_SEXP)
        assert info.value.record == "bad_t"

    def test_untagged_subtype(self):
        with pytest.raises(UntaggedSubtypeError) as info:
            _classify(UNTAGGED_SUBTYPE_SEXP)
        assert info.value.subtype == "inner_t"
        assert info.value.record == "outer_t"
        assert info.value.field_name == "inner"

    def test_unknown_tag(self):
        with pytest.raises(UnknownTaggedTypeError):
            _classify(UNKNOWN_TAG_SEXP)

    def test_symbolic_record_outside_package(self):
        with pytest.raises(RecordNotInPackageError, match="architecture rtl"):
            _classify(ARCHITECTURE_RECORD_SEXP)

    def test_literal_record_outside_package_is_fine(self):
        c = _classify("""
        (design-file "top.vhd"
          (architecture rtl top
            (type local_t (record
              (element d (subtype-ind std_logic_vector (array (range 3 downto 0))))))
            (attribute-spec anodize type local_t true)))
        """)
        assert c.records[0].package is None
        assert not c.needs_oracle

    def test_unsupported_shape_on_tagged_record(self):
        text = """
        (design-file "p.vhd"
          (package p
            (type a_t (record (element n (subtype-ind integer (range 0 to 7)))))
            (attribute-spec anodize type a_t true)))
        """
        with pytest.raises(UnsupportedConstraintError, match="ScalarRangeConstraint"):
            _classify(text)

    def test_unsupported_shape_on_untagged_record_is_ignored(self):
        text = """
        (design-file "p.vhd"
          (package p
            (type a_t (record (element n (subtype-ind integer (range 0 to 7)))))
            (type b_t (record (element x std_logic)))
            (attribute-spec anodize type b_t true)))
        """
        assert [r.name for r in _classify(text).records] == ["b_t"]


class TestApplyAnswers:

    def test_answer_patches_every_target(self):
        c = _classify(ETH_PKG_SEXP)
        patched = apply_answers(c.records, c.table, {0: 15, 1: 31})
        assert patched == 3
        assert c.records[1].fields[1].range.left == 15
        assert c.records[2].fields[1].range.left == 15
        assert c.records[2].fields[2].range.left == 31

    def test_index_out_of_range(self):
        c = _classify(ETH_PKG_SEXP)
        with pytest.raises(OracleOutputError, match="out of range"):
            apply_answers(c.records, c.table, {5: 1})

    def test_side_already_set(self):
        c = _classify(ETH_PKG_SEXP)
        apply_answers(c.records, c.table, {0: 15})
        with pytest.raises(DuplicateAnswerError):
            apply_answers(c.records, c.table, {0: 15})


class TestFinalize:

    def test_widths_after_resolution(self):
        flags, hdr, pkt = _eth_resolved()
        assert [f.width for f in hdr.fields[:2]] == [4, 16]
        assert [f.width for f in pkt.fields[1:]] == [16, 32]

    def test_missing_answer(self):
        c = _classify(ETH_PKG_SEXP)
        apply_answers(c.records, c.table, {0: 15})
        with pytest.raises(UnresolvedBoundError, match="tag"):
            finalize(c.records)

    def test_reversed_downto_range(self):
        c = _classify(ETH_PKG_SEXP)
        apply_answers(c.records, c.table, {0: -1, 1: 31})
        with pytest.raises(NullRangeError, match="length"):
            finalize(c.records)

    def test_reversed_to_range(self):
        record = ResolvedRecord("r_t", [
            ResolvedField("v", "unsigned", FieldKind.VECTOR, ResolvedRange(A.Direction.TO, 7, 0)),
        ])
        with pytest.raises(NullRangeError):
            finalize([record])

    def test_ascending_range_width(self):
        rng = ResolvedRange(A.Direction.TO, 0, 7)
        assert (rng.high, rng.low, rng.width) == (7, 0, 8)


class TestEmissionOrder:

    def test_nested_first(self):
        flags, hdr, pkt = _eth_resolved()
        ordered = emission_order([pkt, hdr, flags])
        assert [r.name for r in ordered] == ["flags_t", "hdr_t", "pkt_t"]

    def test_independent_records_keep_order(self):
        a = ResolvedRecord("a_t")
        b = ResolvedRecord("b_t")
        assert emission_order([b, a]) == [b, a]

    def test_self_containing_record(self):
        loop = ResolvedRecord("loop_t", [ResolvedField("me", "loop_t", FieldKind.NESTED)])
        with pytest.raises(RecursiveRecordError, match="loop_t -> loop_t"):
            emission_order([loop])

    def test_indirect_cycle(self):
        a = ResolvedRecord("a_t", [ResolvedField("b", "b_t", FieldKind.NESTED)])
        b = ResolvedRecord("b_t", [ResolvedField("a", "a_t", FieldKind.NESTED)])
        with pytest.raises(RecursiveRecordError) as info:
            emission_order([a, b])
        assert info.value.cycle == ["a_t", "b_t", "a_t"]

# tests/test_runtime.py
"""
Tests for the runtime support classes used by generated modules.
"""

import pytest

from anodizer.runtime import Bit, BitField, BitStruct


class Flags(BitStruct):
    FIELDS = (("valid", Bit), ("ready", Bit), ("err", Bit))

    def __init__(self):
        self.valid = Bit()
        self.ready = Bit()
        self.err = Bit()


class Header(BitStruct):
    FIELDS = (("kind", BitField[4]), ("flags", Flags))

    def __init__(self):
        self.kind = BitField[4]()
        self.flags = Flags()


class TestBitField:

    def test_specializations_are_cached(self):
        assert BitField[8] is BitField[8]
        assert BitField[8] is not BitField[9]
        assert Bit is BitField[1]

    def test_width_and_max(self):
        assert BitField[12].width() == 12
        assert BitField[12].max_value() == 0xFFF

    @pytest.mark.parametrize("width", [0, -1, True, "8", 2.0])
    def test_bad_width(self, width):
        with pytest.raises(TypeError):
            BitField[width]

    def test_unspecialized_cannot_be_built(self):
        with pytest.raises(TypeError):
            BitField()

    def test_range_checks(self):
        f = BitField[4](15)
        assert int(f) == 15
        with pytest.raises(ValueError):
            f.value = 16
        with pytest.raises(ValueError):
            BitField[4](-1)
        with pytest.raises(TypeError):
            BitField[4](1.0)
        with pytest.raises(TypeError):
            Bit(True)

    def test_equality(self):
        assert BitField[4](3) == 3
        assert BitField[4](3) == BitField[4](3)
        assert BitField[4](3) != BitField[5](3)

    def test_index(self):
        assert hex(BitField[8](255)) == "0xff"

    def test_repr(self):
        assert repr(BitField[8](10)) == "BitField[8](0x0a)"
        assert repr(Bit(1)) == "BitField[1](0x1)"


class TestBitStruct:

    def test_width(self):
        assert Flags.width() == 3
        assert Header.width() == 7
        assert Header.byte_length() == 1

    def test_int_assignment_is_wrapped(self):
        h = Header()
        h.kind = 9
        assert isinstance(h.kind, BitField[4])
        assert h.kind == 9

    def test_assignment_is_range_checked(self):
        h = Header()
        with pytest.raises(ValueError):
            h.kind = 16

    def test_nested_type_checked(self):
        h = Header()
        with pytest.raises(TypeError):
            h.flags = 3

    def test_first_field_is_most_significant(self):
        h = Header()
        h.kind = 0b1010
        h.flags.valid = 1
        h.flags.err = 1
        assert h.to_int() == 0b1010_101

    def test_from_int(self):
        h = Header.from_int(0b0110_010)
        assert h.kind == 0b0110
        assert h.flags.ready == 1
        assert h.flags.valid == 0

    def test_from_int_too_wide(self):
        with pytest.raises(ValueError):
            Header.from_int(1 << 7)
        with pytest.raises(ValueError):
            Header.from_int(-1)

    def test_bytes(self):
        h = Header()
        h.kind = 0xF
        assert h.to_bytes() == bytes([0b1111_000])
        assert Header.from_bytes(bytes([0b1111_000])) == h

    def test_from_bytes_length_checked(self):
        with pytest.raises(ValueError, match="1 byte"):
            Header.from_bytes(b"\x00\x00")

    def test_equality_and_repr(self):
        a, b = Flags(), Flags()
        assert a == b
        b.ready = 1
        assert a != b
        assert repr(b) == (
            "Flags(valid=BitField[1](0x0), ready=BitField[1](0x1), err=BitField[1](0x0))"
        )

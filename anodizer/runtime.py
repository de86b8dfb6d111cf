"""
anodizer/runtime.py
===================

Runtime support imported by generated struct modules.

* ``BitField[N]`` – an unsigned value exactly ``N`` bits wide.  Each
  width is a distinct, cached subclass, so ``BitField[8] is BitField[8]``.
* ``Bit`` – ``BitField[1]``, used for scalar (``std_logic``) fields.
* ``BitStruct`` – base class of generated records.  Subclasses list
  their layout in ``FIELDS`` as ``(name, type)`` pairs in declaration
  order; the first field occupies the most significant bits, matching
  a VHDL record flattened with ``&`` in element order.

Example::

    class hdr_t(BitStruct):
        FIELDS = (("valid", Bit), ("length", BitField[12]))

        def __init__(self) -> None:
            self.valid = Bit()
            self.length = BitField[12]()

    h = hdr_t()
    h.length = 0x123          # plain ints are wrapped and range-checked
    assert h.to_int() == 0x123
    assert hdr_t.width() == 13
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Tuple, Type

__all__ = ["Bit", "BitField", "BitStruct"]


class BitField:
    """Fixed-width unsigned bit container; specialize with ``BitField[N]``."""

    WIDTH: ClassVar[int] = 0
    _specialized: ClassVar[Dict[int, Type["BitField"]]] = {}

    __slots__ = ("_value",)

    def __class_getitem__(cls, width: int) -> Type["BitField"]:
        if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
            raise TypeError(f"BitField width must be a positive int, got {width!r}")
        try:
            return BitField._specialized[width]
        except KeyError:
            sub = type(f"BitField[{width}]", (BitField,), {"WIDTH": width, "__slots__": ()})
            sub.__module__ = __name__
            BitField._specialized[width] = sub
            return sub

    def __init__(self, value: int = 0) -> None:
        if self.WIDTH <= 0:
            raise TypeError("BitField needs a width: use BitField[N]()")
        self.value = value

    @classmethod
    def width(cls) -> int:
        return cls.WIDTH

    @classmethod
    def max_value(cls) -> int:
        return (1 << cls.WIDTH) - 1

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{type(self).__name__} value must be an int, got {type(value).__name__}")
        if not 0 <= value <= self.max_value():
            raise ValueError(
                f"{value} does not fit in {self.WIDTH} bit(s) (0..{self.max_value()})"
            )
        self._value = value

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BitField):
            return self.WIDTH == other.WIDTH and self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        digits = max(1, (self.WIDTH + 3) // 4)
        return f"{type(self).__name__}(0x{self._value:0{digits}x})"


Bit = BitField[1]


class BitStruct:
    """Base class of generated records; packs fields MSB-first."""

    FIELDS: ClassVar[Tuple[Tuple[str, type], ...]] = ()

    @classmethod
    def _field_types(cls) -> Dict[str, type]:
        cache = cls.__dict__.get("_field_type_cache")
        if cache is None:
            cache = dict(cls.FIELDS)
            cls._field_type_cache = cache
        return cache

    @classmethod
    def width(cls) -> int:
        """Total width in bits, nested records included."""
        return sum(typ.width() for _, typ in cls.FIELDS)

    @classmethod
    def byte_length(cls) -> int:
        return (cls.width() + 7) // 8

    def __setattr__(self, name: str, value: Any) -> None:
        typ = self._field_types().get(name)
        if typ is not None and isinstance(typ, type) and issubclass(typ, BitField):
            if not isinstance(value, typ):
                value = typ(int(value) if isinstance(value, BitField) else value)
        elif typ is not None and not isinstance(value, typ):
            raise TypeError(f"{type(self).__name__}.{name} must be {typ.__name__}")
        object.__setattr__(self, name, value)

    # --- Packing ---

    def to_int(self) -> int:
        packed = 0
        for name, typ in self.FIELDS:
            value = getattr(self, name)
            bits = value.to_int() if isinstance(value, BitStruct) else int(value)
            packed = (packed << typ.width()) | bits
        return packed

    @classmethod
    def from_int(cls, packed: int) -> "BitStruct":
        if packed < 0 or packed >> cls.width():
            raise ValueError(f"{packed:#x} does not fit in {cls.width()} bit(s)")
        obj = cls()
        for name, typ in reversed(cls.FIELDS):
            w = typ.width()
            chunk = packed & ((1 << w) - 1)
            packed >>= w
            setattr(obj, name, typ.from_int(chunk) if issubclass(typ, BitStruct) else typ(chunk))
        return obj

    def to_bytes(self, byteorder: str = "big") -> bytes:
        return self.to_int().to_bytes(self.byte_length(), byteorder)

    @classmethod
    def from_bytes(cls, data: bytes, byteorder: str = "big") -> "BitStruct":
        if len(data) != cls.byte_length():
            raise ValueError(
                f"{cls.__name__} needs {cls.byte_length()} byte(s), got {len(data)}"
            )
        return cls.from_int(int.from_bytes(data, byteorder))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_int() == other.to_int()

    __hash__ = None

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}={getattr(self, name)!r}" for name, _ in self.FIELDS)
        return f"{type(self).__name__}({inner})"

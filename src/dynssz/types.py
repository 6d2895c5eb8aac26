"""
SSZ Type Vocabulary

Python has a single unbounded ``int`` and no fixed-length array type, so the
SSZ kinds that need a width or a length are expressed with the small set of
types defined here:

- ``uint8`` .. ``uint256``: ``int`` subclasses carrying their byte width
- ``Vector[T, N]``: fixed-length array of ``N`` elements of type ``T``

Everything else uses plain Python annotations: ``bool`` for booleans,
``List[T]`` for variable-length sequences, ``bytes`` for variable-length
byte sequences and ``@dataclass`` classes for composites.

Examples:
    >>> @dataclass
    ... class Checkpoint:
    ...     epoch: uint64
    ...     root: Bytes32
"""

from functools import lru_cache
from typing import Any


class uint(int):
    """
    Base class for fixed-width unsigned integers.

    Subclasses set ``byte_length``; construction rejects values that do not
    fit into that many little-endian bytes.
    """

    byte_length = 0

    def __new__(cls, value: int = 0):
        if cls.byte_length == 0:
            raise TypeError("uint is abstract, use one of uint8..uint256")
        value = int(value)
        if value < 0:
            raise ValueError(f"{cls.__name__} values must be non-negative")
        if value >= 1 << (cls.byte_length * 8):
            raise OverflowError(f"Value too large for {cls.__name__}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class uint8(uint):
    byte_length = 1


class uint16(uint):
    byte_length = 2


class uint32(uint):
    byte_length = 4


class uint64(uint):
    byte_length = 8


class uint128(uint):
    byte_length = 16


class uint256(uint):
    byte_length = 32


class Vector:
    """
    Fixed-length array kind, parameterized as ``Vector[element_type, length]``.

    Subscripting returns a cached subclass carrying ``element_type`` and
    ``length``; the subclass is only used as an annotation. Values are
    ordinary lists (``bytes`` when the element type is ``uint8``).
    """

    element_type: Any = None
    length: int = 0

    def __class_getitem__(cls, params):
        if not isinstance(params, tuple) or len(params) != 2:
            raise TypeError("Vector[...] expects an element type and a length")
        element_type, length = params
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise TypeError(f"Vector length must be a positive int, got {length!r}")
        return _vector_type(element_type, length)


@lru_cache(maxsize=None)
def _vector_type(element_type: Any, length: int) -> type:
    element_name = getattr(element_type, "__name__", repr(element_type))
    name = f"Vector[{element_name}, {length}]"
    return type(name, (Vector,), {"element_type": element_type, "length": length})


# Common byte vectors
Bytes4 = Vector[uint8, 4]
Bytes20 = Vector[uint8, 20]
Bytes32 = Vector[uint8, 32]
Bytes48 = Vector[uint8, 48]
Bytes96 = Vector[uint8, 96]
Bytes256 = Vector[uint8, 256]

"""
SSZ Basic Serialization Functions

This module implements the leaf-level SSZ encoding rules used by the dynamic
marshal and unmarshal engines: fixed-width little-endian integers, booleans
and the 4-byte offsets stored in a composite's fixed region.

References:
- SSZ Specification: https://github.com/ethereum/consensus-specs/blob/dev/ssz/simple-serialize.md
"""

from .constants import BYTES_PER_LENGTH_OFFSET, MAX_OFFSET
from .errors import InvalidValueError, OffsetRangeError


def serialize_uint(value: int, byte_length: int) -> bytes:
    """
    Serialize an unsigned integer to SSZ format.

    SSZ Rule: Integers are serialized as little-endian byte arrays
    of their respective byte length.

    Args:
        value: Integer value (0 <= value < 2^(8*byte_length))
        byte_length: Width of the integer in bytes

    Returns:
        Little-endian representation of exactly byte_length bytes

    Raises:
        InvalidValueError: If the value is not an int or does not fit

    Examples:
        >>> serialize_uint(1234567890, 8)
        b'\\xd2\\x02\\x96\\x49\\x00\\x00\\x00\\x00'
        >>> serialize_uint(817482215, 4)
        b'\\xe7\\xc9\\xb9\\x30'
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidValueError(f"expected an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidValueError(f"uint{byte_length * 8} values must be non-negative")
    if value >= 1 << (byte_length * 8):
        raise InvalidValueError(f"value {value} too large for uint{byte_length * 8}")

    return value.to_bytes(byte_length, "little")


def deserialize_uint(data: bytes, byte_length: int) -> int:
    """
    Deserialize an unsigned integer from SSZ format.

    Args:
        data: Little-endian byte array
        byte_length: Expected width in bytes

    Returns:
        Integer value

    Raises:
        InvalidValueError: If data is not exactly byte_length bytes
    """
    if len(data) != byte_length:
        raise InvalidValueError(
            f"expected {byte_length} bytes for uint{byte_length * 8}, got {len(data)}"
        )

    return int.from_bytes(data, "little")


def serialize_bool(value: bool) -> bytes:
    """
    Serialize a boolean value to SSZ format.

    SSZ Rule: Booleans are serialized as a single byte,
    0x00 for False, 0x01 for True.

    Examples:
        >>> serialize_bool(True)
        b'\\x01'
    """
    if not isinstance(value, bool):
        raise InvalidValueError(f"expected a bool, got {type(value).__name__}")
    return b"\x01" if value else b"\x00"


def deserialize_bool(data: bytes) -> bool:
    """
    Deserialize a boolean from SSZ format.

    Raises:
        InvalidValueError: If data is not exactly 1 byte or not 0x00/0x01
    """
    if len(data) != 1:
        raise InvalidValueError(f"expected 1 byte for boolean, got {len(data)}")

    if data[0] == 0:
        return False
    elif data[0] == 1:
        return True
    else:
        raise InvalidValueError(f"invalid boolean byte: {data[0]:02x}")


def serialize_offset(offset: int) -> bytes:
    """Serialize a fixed-region offset as a 4-byte little-endian integer."""
    if offset > MAX_OFFSET:
        raise OffsetRangeError(f"offset {offset} exceeds the 32-bit offset range")
    return offset.to_bytes(BYTES_PER_LENGTH_OFFSET, "little")


def deserialize_offset(data: bytes, position: int) -> int:
    """
    Read the 4-byte offset stored at ``position`` of ``data``.

    Raises:
        OffsetRangeError: If the offset itself lies beyond the buffer
    """
    end = position + BYTES_PER_LENGTH_OFFSET
    if end > len(data):
        raise OffsetRangeError(f"offset at position {position} exceeds buffer of {len(data)} bytes")
    return int.from_bytes(data[position:end], "little")

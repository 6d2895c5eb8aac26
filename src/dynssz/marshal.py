"""
Marshal Engine

Encodes values into SSZ by walking their type descriptor. Containers and
custom codecs are handed to their fixed-layout codec whenever the engine
reports the fast path as eligible; everything else is laid out here:

- containers: fixed fields in place, a 4-byte offset placeholder for every
  dynamic field, then the dynamic payloads in order with their offsets
  patched to the position (relative to the container start) they land at
- vectors and lists of fixed-size elements: plain concatenation
- vectors and lists of dynamic elements: an offset table followed by the
  element payloads
"""

from collections.abc import Mapping
from typing import Any, List

from .compat import Operation
from .constants import BYTES_PER_LENGTH_OFFSET
from .descriptor import Kind, TypeDescriptor
from .errors import InvalidValueError, LengthMismatchError, SszError, UnsupportedTypeError
from .serialization import serialize_bool, serialize_offset, serialize_uint

_BYTES_LIKE = (bytes, bytearray, memoryview)


def marshal_value(ctx, descriptor: TypeDescriptor, value: Any, buf: bytearray) -> None:
    """
    Append the SSZ encoding of ``value`` to ``buf``.

    Args:
        ctx: Engine deciding fast-path eligibility (``use_fastssz``)
        descriptor: Resolved layout of the value's type
        value: Value to encode
        buf: Output buffer, extended in place
    """
    kind = descriptor.kind
    if kind is Kind.BOOLEAN:
        _encode_leaf(descriptor, serialize_bool, value, buf)
    elif kind is Kind.UINT:
        _encode_leaf(descriptor, lambda v: serialize_uint(v, descriptor.fixed_size), value, buf)
    elif kind is Kind.CONTAINER or kind is Kind.CUSTOM:
        _check_instance(descriptor, value)
        if ctx.use_fastssz(descriptor, Operation.MARSHAL):
            _marshal_fastssz(descriptor, value, buf)
        elif kind is Kind.CUSTOM:
            raise UnsupportedTypeError("custom codec does not implement marshal_ssz_to", descriptor.type_name)
        else:
            _marshal_container(ctx, descriptor, value, buf)
    elif kind is Kind.VECTOR:
        items = sequence_items(descriptor, value)
        if len(items) != descriptor.length:
            raise LengthMismatchError(
                f"expected {descriptor.length} elements, got {len(items)}", descriptor.type_name
            )
        marshal_elements(ctx, descriptor.element, items, buf)
    elif kind is Kind.LIST:
        items = sequence_items(descriptor, value)
        if descriptor.limit is not None and len(items) > descriptor.limit:
            raise LengthMismatchError(
                f"list length {len(items)} exceeds maximum {descriptor.limit}", descriptor.type_name
            )
        marshal_elements(ctx, descriptor.element, items, buf)
    else:
        raise UnsupportedTypeError(f"cannot marshal kind {kind}", descriptor.type_name)


def marshal_elements(ctx, element: TypeDescriptor, items: Any, buf: bytearray) -> None:
    """Append sequence elements, with an offset table for dynamic elements."""
    if isinstance(items, bytes):
        buf += items
        return

    if element.is_fixed_size:
        for index, item in enumerate(items):
            try:
                marshal_value(ctx, element, item, buf)
            except SszError as e:
                raise e.add_path(f"[{index}]")
        return

    start = len(buf)
    buf += b"\x00" * (BYTES_PER_LENGTH_OFFSET * len(items))
    for index, item in enumerate(items):
        slot = start + index * BYTES_PER_LENGTH_OFFSET
        buf[slot:slot + BYTES_PER_LENGTH_OFFSET] = serialize_offset(len(buf) - start)
        try:
            marshal_value(ctx, element, item, buf)
        except SszError as e:
            raise e.add_path(f"[{index}]")


def sequence_items(descriptor: TypeDescriptor, value: Any):
    """
    Normalize a sequence value for encoding.

    Returns ``bytes`` for byte-like values of ``uint8`` sequences so they can
    be copied in one step, a list otherwise.
    """
    element = descriptor.element
    if isinstance(value, _BYTES_LIKE):
        if element.kind is Kind.UINT and element.fixed_size == 1:
            return bytes(value)
        raise InvalidValueError("byte string given for a non-byte sequence", descriptor.type_name)
    if isinstance(value, (str, Mapping)) or value is None:
        raise InvalidValueError(f"expected a sequence, got {type(value).__name__}", descriptor.type_name)
    try:
        return list(value)
    except TypeError:
        raise InvalidValueError(f"expected a sequence, got {type(value).__name__}", descriptor.type_name)


def _marshal_container(ctx, descriptor: TypeDescriptor, value: Any, buf: bytearray) -> None:
    start = len(buf)
    pending: List = []

    for fd in descriptor.fields:
        field_value = getattr(value, fd.name)
        if fd.descriptor.is_fixed_size:
            try:
                marshal_value(ctx, fd.descriptor, field_value, buf)
            except SszError as e:
                raise e.add_path(fd.name)
        else:
            pending.append((fd, field_value, len(buf)))
            buf += b"\x00" * BYTES_PER_LENGTH_OFFSET

    for fd, field_value, slot in pending:
        buf[slot:slot + BYTES_PER_LENGTH_OFFSET] = serialize_offset(len(buf) - start)
        try:
            marshal_value(ctx, fd.descriptor, field_value, buf)
        except SszError as e:
            raise e.add_path(fd.name)


def _marshal_fastssz(descriptor: TypeDescriptor, value: Any, buf: bytearray) -> None:
    encoded = value.marshal_ssz_to(bytearray())
    if descriptor.is_fixed_size and len(encoded) != descriptor.fixed_size:
        raise LengthMismatchError(
            f"fixed-layout codec produced {len(encoded)} bytes, expected {descriptor.fixed_size}",
            descriptor.type_name,
        )
    buf += encoded


def _encode_leaf(descriptor: TypeDescriptor, encode, value: Any, buf: bytearray) -> None:
    try:
        buf += encode(value)
    except SszError as e:
        e.type_name = descriptor.type_name
        raise


def _check_instance(descriptor: TypeDescriptor, value: Any) -> None:
    if not isinstance(value, descriptor.python_type):
        raise InvalidValueError(
            f"expected an instance of {descriptor.type_name}, got {type(value).__name__}",
            descriptor.type_name,
        )

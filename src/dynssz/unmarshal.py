"""
Unmarshal Engine

Decodes SSZ by walking a type descriptor over a buffer slice that holds
exactly one value: fixed-size types get exactly their size, dynamic types
get the span between their offset and the next one (or the end of the
enclosing value).

Offsets are validated before any dynamic payload is decoded: the first must
equal the length of the fixed region, they must never decrease and none may
point past the end of the buffer.
"""

from typing import Any, Dict, List, Optional, Tuple

from .compat import Operation
from .constants import BYTES_PER_LENGTH_OFFSET
from .descriptor import Kind, TypeDescriptor
from .errors import (
    BufferTooShortError,
    LengthMismatchError,
    OffsetOrderError,
    OffsetRangeError,
    SszError,
    UnsupportedTypeError,
)
from .serialization import deserialize_bool, deserialize_offset, deserialize_uint


def unmarshal_value(ctx, descriptor: TypeDescriptor, data: memoryview, target: Optional[Any] = None) -> Any:
    """
    Decode one value from ``data``, which must span exactly that value.

    Args:
        ctx: Engine deciding fast-path eligibility (``use_fastssz``)
        descriptor: Resolved layout of the expected type
        data: Encoded bytes of the value
        target: Existing container instance to fill instead of creating one

    Returns:
        The decoded value (``target`` itself when given)
    """
    kind = descriptor.kind
    if kind is Kind.BOOLEAN:
        return _decode_leaf(descriptor, deserialize_bool, data)
    if kind is Kind.UINT:
        raw = _decode_leaf(descriptor, lambda d: deserialize_uint(d, descriptor.fixed_size), data)
        return descriptor.python_type(raw)
    if kind is Kind.CONTAINER or kind is Kind.CUSTOM:
        if ctx.use_fastssz(descriptor, Operation.UNMARSHAL):
            return _unmarshal_fastssz(descriptor, data, target)
        if kind is Kind.CUSTOM:
            raise UnsupportedTypeError("custom codec does not implement unmarshal_ssz", descriptor.type_name)
        return _unmarshal_container(ctx, descriptor, data, target)
    if kind is Kind.VECTOR:
        return _unmarshal_vector(ctx, descriptor, data)
    if kind is Kind.LIST:
        return _unmarshal_list(ctx, descriptor, data)
    raise UnsupportedTypeError(f"cannot unmarshal kind {kind}", descriptor.type_name)


def _unmarshal_container(ctx, descriptor: TypeDescriptor, data: memoryview, target: Optional[Any]) -> Any:
    fixed_end = descriptor.fixed_size
    if len(data) < fixed_end:
        raise BufferTooShortError(
            f"need at least {fixed_end} bytes, got {len(data)}", descriptor.type_name
        )

    values: Dict[str, Any] = {}
    dynamic_fields = []
    offsets = []
    cursor = 0
    for fd in descriptor.fields:
        field_descriptor = fd.descriptor
        if field_descriptor.is_fixed_size:
            end = cursor + field_descriptor.fixed_size
            try:
                values[fd.name] = unmarshal_value(ctx, field_descriptor, data[cursor:end])
            except SszError as e:
                raise e.add_path(fd.name)
            cursor = end
        else:
            dynamic_fields.append(fd)
            offsets.append(deserialize_offset(data, cursor))
            cursor += BYTES_PER_LENGTH_OFFSET

    if dynamic_fields:
        spans = offset_spans(descriptor, offsets, fixed_end, len(data))
        for fd, (start, end) in zip(dynamic_fields, spans):
            try:
                values[fd.name] = unmarshal_value(ctx, fd.descriptor, data[start:end])
            except SszError as e:
                raise e.add_path(fd.name)

    return build_container(descriptor, values, target)


def _unmarshal_vector(ctx, descriptor: TypeDescriptor, data: memoryview) -> Any:
    element = descriptor.element
    if descriptor.as_bytes:
        if len(data) != descriptor.length:
            raise LengthMismatchError(
                f"expected {descriptor.length} bytes, got {len(data)}", descriptor.type_name
            )
        return bytes(data)

    if element.is_fixed_size:
        return _unmarshal_fixed_elements(ctx, element, data, descriptor.length)

    fixed_end = BYTES_PER_LENGTH_OFFSET * descriptor.length
    if len(data) < fixed_end:
        raise BufferTooShortError(
            f"need at least {fixed_end} bytes for the offset table, got {len(data)}",
            descriptor.type_name,
        )
    offsets = [deserialize_offset(data, i * BYTES_PER_LENGTH_OFFSET) for i in range(descriptor.length)]
    return _unmarshal_dynamic_elements(ctx, descriptor, data, offsets, fixed_end)


def _unmarshal_list(ctx, descriptor: TypeDescriptor, data: memoryview) -> Any:
    element = descriptor.element
    limit = descriptor.limit

    if element.is_fixed_size:
        if len(data) % element.fixed_size != 0:
            raise LengthMismatchError(
                f"{len(data)} bytes is not a multiple of the element size {element.fixed_size}",
                descriptor.type_name,
            )
        count = len(data) // element.fixed_size
        _check_limit(descriptor, count, limit)
        if descriptor.as_bytes:
            return bytes(data)
        return _unmarshal_fixed_elements(ctx, element, data, count)

    if len(data) == 0:
        return b"" if descriptor.as_bytes else []

    first_offset = deserialize_offset(data, 0)
    if first_offset == 0 or first_offset % BYTES_PER_LENGTH_OFFSET != 0:
        raise OffsetRangeError(f"invalid first offset {first_offset}", descriptor.type_name)
    if first_offset > len(data):
        raise OffsetRangeError(
            f"first offset {first_offset} exceeds buffer of {len(data)} bytes", descriptor.type_name
        )
    count = first_offset // BYTES_PER_LENGTH_OFFSET
    _check_limit(descriptor, count, limit)
    offsets = [deserialize_offset(data, i * BYTES_PER_LENGTH_OFFSET) for i in range(count)]
    return _unmarshal_dynamic_elements(ctx, descriptor, data, offsets, first_offset)


def _unmarshal_fixed_elements(ctx, element: TypeDescriptor, data: memoryview, count: int) -> List[Any]:
    size = element.fixed_size
    items = []
    for index in range(count):
        try:
            items.append(unmarshal_value(ctx, element, data[index * size:(index + 1) * size]))
        except SszError as e:
            raise e.add_path(f"[{index}]")
    return items


def _unmarshal_dynamic_elements(ctx, descriptor, data, offsets, fixed_end) -> List[Any]:
    items = []
    for index, (start, end) in enumerate(offset_spans(descriptor, offsets, fixed_end, len(data))):
        try:
            items.append(unmarshal_value(ctx, descriptor.element, data[start:end]))
        except SszError as e:
            raise e.add_path(f"[{index}]")
    return items


def offset_spans(descriptor: TypeDescriptor, offsets: List[int], fixed_end: int, total: int) -> List[Tuple[int, int]]:
    """
    Validate an offset table and turn it into (start, end) payload spans.

    Raises:
        OffsetRangeError: If the first offset does not close the fixed region
            or an offset points past the buffer
        OffsetOrderError: If offsets decrease
    """
    if offsets and offsets[0] != fixed_end:
        raise OffsetRangeError(
            f"first offset {offsets[0]} does not match fixed region length {fixed_end}",
            descriptor.type_name,
        )

    previous = fixed_end
    for index, offset in enumerate(offsets):
        if offset > total:
            raise OffsetRangeError(
                f"offset {index} ({offset}) exceeds buffer of {total} bytes", descriptor.type_name
            )
        if offset < previous:
            raise OffsetOrderError(
                f"offset {index} ({offset}) is lower than the previous offset {previous}",
                descriptor.type_name,
            )
        previous = offset

    ends = offsets[1:] + [total]
    return list(zip(offsets, ends))


def _unmarshal_fastssz(descriptor: TypeDescriptor, data: memoryview, target: Optional[Any]) -> Any:
    cls = descriptor.python_type
    instance = target if target is not None else cls.__new__(cls)
    instance.unmarshal_ssz(bytes(data))
    return instance


def build_container(descriptor: TypeDescriptor, values: Dict[str, Any], target: Optional[Any] = None) -> Any:
    """
    Create (or fill ``target`` with) a container from decoded field values.

    Fields excluded from ``__init__`` are set after construction.
    """
    if target is not None:
        for name, value in values.items():
            setattr(target, name, value)
        return target

    init_args = {fd.name: values[fd.name] for fd in descriptor.fields if fd.init}
    instance = descriptor.python_type(**init_args)
    for fd in descriptor.fields:
        if not fd.init:
            object.__setattr__(instance, fd.name, values[fd.name])
    return instance


def _check_limit(descriptor: TypeDescriptor, count: int, limit: Optional[int]) -> None:
    if limit is not None and count > limit:
        raise LengthMismatchError(f"list length {count} exceeds maximum {limit}", descriptor.type_name)


def _decode_leaf(descriptor: TypeDescriptor, decode, data: memoryview) -> Any:
    try:
        return decode(data)
    except SszError as e:
        e.type_name = descriptor.type_name
        raise

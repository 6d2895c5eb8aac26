"""
Size Engine

Computes the encoded length of a value without encoding it. For every valid
value ``size_value(...) == len(marshal)``, including the offset tables of
dynamic containers and sequences.
"""

from typing import Any

from .compat import Operation
from .constants import BYTES_PER_LENGTH_OFFSET
from .descriptor import Kind, TypeDescriptor
from .errors import LengthMismatchError, SszError, UnsupportedTypeError
from .marshal import sequence_items


def size_value(ctx, descriptor: TypeDescriptor, value: Any) -> int:
    """Return the SSZ-encoded size of ``value`` in bytes."""
    kind = descriptor.kind
    if (kind is Kind.CONTAINER or kind is Kind.CUSTOM) and ctx.use_fastssz(descriptor, Operation.SIZE):
        return value.size_ssz()

    if kind is Kind.CUSTOM:
        if descriptor.is_fixed_size:
            return descriptor.fixed_size
        raise UnsupportedTypeError("custom codec does not implement size_ssz", descriptor.type_name)

    if kind is Kind.VECTOR:
        items = sequence_items(descriptor, value)
        if len(items) != descriptor.length:
            raise LengthMismatchError(
                f"expected {descriptor.length} elements, got {len(items)}", descriptor.type_name
            )
        if descriptor.is_fixed_size:
            return descriptor.fixed_size
        return descriptor.fixed_size + _payload_size(ctx, descriptor.element, items)

    if descriptor.is_fixed_size:
        return descriptor.fixed_size

    if kind is Kind.CONTAINER:
        size = descriptor.fixed_size
        for fd in descriptor.fields:
            if not fd.descriptor.is_fixed_size:
                try:
                    size += size_value(ctx, fd.descriptor, getattr(value, fd.name))
                except SszError as e:
                    raise e.add_path(fd.name)
        return size

    if kind is Kind.LIST:
        items = sequence_items(descriptor, value)
        if descriptor.limit is not None and len(items) > descriptor.limit:
            raise LengthMismatchError(
                f"list length {len(items)} exceeds maximum {descriptor.limit}", descriptor.type_name
            )
        element = descriptor.element
        if element.is_fixed_size:
            return element.fixed_size * len(items)
        return BYTES_PER_LENGTH_OFFSET * len(items) + _payload_size(ctx, element, items)

    raise UnsupportedTypeError(f"cannot size kind {kind}", descriptor.type_name)


def _payload_size(ctx, element: TypeDescriptor, items) -> int:
    size = 0
    for index, item in enumerate(items):
        try:
            size += size_value(ctx, element, item)
        except SszError as e:
            raise e.add_path(f"[{index}]")
    return size

"""
Hash-Tree-Root Engine

Computes SSZ hash tree roots by walking a type descriptor:

- basic values are serialized and right-padded into a single chunk
- vectors and lists of basic values pack their serialized elements, several
  per chunk; other sequences contribute one root per element
- containers merkleize the roots of their fields
- lists additionally mix in their actual length

The merkleization limit of a list comes from its max hint; without one the
chunks are padded to the next power of two of their own count.

References:
- SSZ Merkleization: https://github.com/ethereum/consensus-specs/blob/dev/ssz/simple-serialize.md#merkleization
"""

from typing import Any, List

from .compat import Operation
from .constants import BYTES_PER_CHUNK
from .descriptor import Kind, TypeDescriptor
from .errors import InvalidValueError, LengthMismatchError, SszError, UnsupportedTypeError
from .marshal import marshal_elements, marshal_value, sequence_items
from .merkle import chunk_count, merkleize_chunks, mix_in_length, pack_bytes


def hash_tree_root_value(ctx, descriptor: TypeDescriptor, value: Any) -> bytes:
    """Return the 32-byte hash tree root of ``value``."""
    kind = descriptor.kind
    if descriptor.is_basic:
        buf = bytearray()
        marshal_value(ctx, descriptor, value, buf)
        return bytes(buf).ljust(BYTES_PER_CHUNK, b"\x00")

    if kind is Kind.CONTAINER or kind is Kind.CUSTOM:
        if ctx.use_fastssz(descriptor, Operation.HASH_ROOT):
            root = bytes(value.hash_tree_root())
            if len(root) != BYTES_PER_CHUNK:
                raise InvalidValueError(
                    f"fixed-layout codec returned a {len(root)}-byte root", descriptor.type_name
                )
            return root
        if kind is Kind.CUSTOM:
            raise UnsupportedTypeError("custom codec does not implement hash_tree_root", descriptor.type_name)
        return _hash_container(ctx, descriptor, value)

    if kind is Kind.VECTOR:
        items = sequence_items(descriptor, value)
        if len(items) != descriptor.length:
            raise LengthMismatchError(
                f"expected {descriptor.length} elements, got {len(items)}", descriptor.type_name
            )
        return _hash_elements(ctx, descriptor, items, descriptor.length)

    if kind is Kind.LIST:
        items = sequence_items(descriptor, value)
        if descriptor.limit is not None and len(items) > descriptor.limit:
            raise LengthMismatchError(
                f"list length {len(items)} exceeds maximum {descriptor.limit}", descriptor.type_name
            )
        root = _hash_elements(ctx, descriptor, items, descriptor.limit)
        return mix_in_length(root, len(items))

    raise UnsupportedTypeError(f"cannot hash kind {kind}", descriptor.type_name)


def _hash_container(ctx, descriptor: TypeDescriptor, value: Any) -> bytes:
    roots = []
    for fd in descriptor.fields:
        try:
            roots.append(hash_tree_root_value(ctx, fd.descriptor, getattr(value, fd.name)))
        except SszError as e:
            raise e.add_path(fd.name)
    return merkleize_chunks(roots)


def _hash_elements(ctx, descriptor: TypeDescriptor, items, capacity) -> bytes:
    element = descriptor.element
    if element.is_basic:
        buf = bytearray()
        marshal_elements(ctx, element, items, buf)
        limit = None if capacity is None else chunk_count(capacity, element.fixed_size)
        return merkleize_chunks(pack_bytes(bytes(buf)), limit)

    roots: List[bytes] = []
    for index, item in enumerate(items):
        try:
            roots.append(hash_tree_root_value(ctx, element, item))
        except SszError as e:
            raise e.add_path(f"[{index}]")
    return merkleize_chunks(roots, capacity)

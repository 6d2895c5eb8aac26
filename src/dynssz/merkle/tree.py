"""
Merkle Tree Building Utilities

This module provides the chunk-level building blocks of SSZ merkleization:
packing serialized data into 32-byte chunks, merkleizing a chunk sequence
padded to a (possibly much larger) power-of-two limit, and mixing in the
length of variable-length sequences.
"""

from hashlib import sha256
from typing import List, Optional

from ..constants import BYTES_PER_CHUNK, MAX_TREE_DEPTH, ZERO_HASHES
from ..errors import InvalidValueError, LengthMismatchError


def pack_bytes(data: bytes) -> List[bytes]:
    """
    SSZ-pack serialized basic values into 32-byte chunks.

    The data is right-padded with zero bytes to a multiple of 32 and split.
    Empty input yields no chunks.

    Examples:
        >>> pack_bytes(b'\\x01\\x02')  # One chunk: 0102 followed by 30 zero bytes
    """
    if len(data) % BYTES_PER_CHUNK != 0:
        data += b"\x00" * (BYTES_PER_CHUNK - (len(data) % BYTES_PER_CHUNK))

    return [data[i : i + BYTES_PER_CHUNK] for i in range(0, len(data), BYTES_PER_CHUNK)]


def chunk_count(element_count: int, element_size: int) -> int:
    """Number of chunks needed to pack element_count basic values."""
    return (element_count * element_size + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


def get_tree_depth(capacity: int) -> int:
    """
    Calculate the depth of a merkle tree for given capacity.

    Args:
        capacity: Number of leaves (must be power of two)

    Returns:
        Tree depth (number of levels from leaves to root)

    Examples:
        >>> get_tree_depth(1024)  # Returns 10
        >>> get_tree_depth(8)     # Returns 3
    """
    if capacity <= 0 or capacity & (capacity - 1) != 0:
        raise ValueError("Capacity must be a power of two")

    return capacity.bit_length() - 1


def merkleize_chunks(chunks: List[bytes], limit: Optional[int] = None) -> bytes:
    """
    Merkle-root a list of 32-byte chunks padded out to ``limit`` leaves.

    Without a limit the chunks are padded to the next power of two of their
    own count. Padding beyond the actual data uses precomputed zero hashes,
    so large limits (e.g. 2^40 validators) cost one hash per tree level.

    Args:
        chunks: List of 32-byte chunks (actual data)
        limit: Maximum number of chunks the type can hold

    Returns:
        32-byte merkle root

    Raises:
        LengthMismatchError: If there are more chunks than the limit allows

    Examples:
        >>> merkleize_chunks([b'\\x01'*32, b'\\x02'*32])  # sha256(01..01 || 02..02)
        >>> merkleize_chunks([], 1024)  # ZERO_HASHES[10]
    """
    n = len(chunks)
    if limit is None:
        limit = n
    if n > limit:
        raise LengthMismatchError(f"Too many chunks: {n} > {limit}")

    depth = get_tree_depth(next_power_of_two(limit))
    if depth > MAX_TREE_DEPTH:
        raise InvalidValueError(f"merkle tree depth {depth} exceeds {MAX_TREE_DEPTH}")
    if n == 0:
        return ZERO_HASHES[depth]

    layer = list(chunks)
    for level in range(depth):
        if len(layer) % 2 == 1:
            layer.append(ZERO_HASHES[level])
        layer = [sha256(layer[i] + layer[i + 1]).digest() for i in range(0, len(layer), 2)]

    return layer[0]


def mix_in_length(root: bytes, length: int) -> bytes:
    """
    Mix the length of a variable-length sequence into its merkle root.

    root = sha256(root || length as 32-byte little-endian)
    """
    return sha256(root + length.to_bytes(BYTES_PER_CHUNK, "little")).digest()

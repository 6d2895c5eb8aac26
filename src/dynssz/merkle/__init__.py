"""
SSZ Merkle Tree Operations

Chunk packing, limit-aware merkleization and length mixing used by the
hash-tree-root engine.
"""

from .tree import (
    chunk_count,
    get_tree_depth,
    merkleize_chunks,
    mix_in_length,
    next_power_of_two,
    pack_bytes,
)

__all__ = [
    "chunk_count",
    "get_tree_depth",
    "merkleize_chunks",
    "mix_in_length",
    "next_power_of_two",
    "pack_bytes",
]

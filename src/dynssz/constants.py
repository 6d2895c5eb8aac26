"""
SSZ Constants

This module contains the constants shared by the dynamic SSZ codec engines:
chunk and offset widths, precomputed zero hashes for Merkle padding, and the
dataclass metadata keys used to annotate fields with size hints.

References:
- SSZ Specification: https://github.com/ethereum/consensus-specs/blob/dev/ssz/simple-serialize.md
"""

from hashlib import sha256

# ====================
# Wire Format Constants
# ====================

# Size of a merkleization chunk (and of a hash tree root)
BYTES_PER_CHUNK = 32

# Offsets in a composite's fixed region are little-endian uint32
BYTES_PER_LENGTH_OFFSET = 4

# Largest offset representable in the fixed region
MAX_OFFSET = 2**32 - 1

# ====================
# Cryptographic Constants
# ====================

# Deepest Merkle tree supported when padding to a declared limit
MAX_TREE_DEPTH = 64

# Precomputed zero node hashes for Merkle tree padding
# Each level i contains: SHA256(ZERO_HASHES[i-1] || ZERO_HASHES[i-1])
ZERO_HASHES = [b"\0" * BYTES_PER_CHUNK]
for _ in range(MAX_TREE_DEPTH):
    ZERO_HASHES.append(sha256(ZERO_HASHES[-1] + ZERO_HASHES[-1]).digest())

# ====================
# Field Annotation Keys
# ====================

# Built-in fixed length per nesting level ("?" = no constraint)
SSZ_SIZE_KEY = "ssz_size"

# Built-in upper bound per nesting level
SSZ_MAX_KEY = "ssz_max"

# Registry reference overriding the fixed length per nesting level
DYNSSZ_SIZE_KEY = "dynssz_size"

# Registry reference overriding the upper bound per nesting level
DYNSSZ_MAX_KEY = "dynssz_max"

# Placeholder meaning "natural default at this nesting level"
HINT_WILDCARD = "?"

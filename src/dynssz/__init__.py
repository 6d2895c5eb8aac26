"""
Dynamic SSZ (Simple Serialize) Library

Encodes, decodes and merkleizes values of application-defined dataclasses in
the SSZ format used by Ethereum consensus clients, honoring specification
presets that change collection lengths at runtime (mainnet vs. minimal, or
custom networks).

Types that ship a precompiled fixed-layout codec (``marshal_ssz_to``,
``unmarshal_ssz``, ``size_ssz``, ``hash_tree_root`` methods) keep using it as
long as the active specification leaves their layout untouched; everything
else goes through a generic engine driven by a cached type descriptor.

Modules:
- types: uint8..uint256 and Vector[T, N] annotations
- specs: specification registry
- descriptor: type descriptor resolver
- compat: fast-path compatibility cache
- marshal / unmarshal / sizing / hashing: the codec engines
- engine: the DynSsz facade
- merkle: chunk packing and merkleization
- config: environment and preset loading
"""

from .compat import FastSszCompatibility, Operation
from .descriptor import FieldDescriptor, Kind, TypeDescriptor
from .engine import DynSsz
from .errors import (
    BufferTooShortError,
    ConfigurationError,
    HintMismatchError,
    InvalidValueError,
    LengthMismatchError,
    OffsetOrderError,
    OffsetRangeError,
    SszError,
    TrailingDataError,
    UnsupportedTypeError,
)
from .hints import MaxHint, SizeHint
from .specs import SpecificationRegistry
from .types import (
    Bytes4,
    Bytes20,
    Bytes32,
    Bytes48,
    Bytes96,
    Bytes256,
    Vector,
    uint8,
    uint16,
    uint32,
    uint64,
    uint128,
    uint256,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    'DynSsz',
    'SpecificationRegistry',

    # Descriptors
    'TypeDescriptor',
    'FieldDescriptor',
    'Kind',
    'SizeHint',
    'MaxHint',
    'FastSszCompatibility',
    'Operation',

    # Types
    'uint8',
    'uint16',
    'uint32',
    'uint64',
    'uint128',
    'uint256',
    'Vector',
    'Bytes4',
    'Bytes20',
    'Bytes32',
    'Bytes48',
    'Bytes96',
    'Bytes256',

    # Errors
    'SszError',
    'ConfigurationError',
    'UnsupportedTypeError',
    'HintMismatchError',
    'LengthMismatchError',
    'OffsetOrderError',
    'OffsetRangeError',
    'BufferTooShortError',
    'TrailingDataError',
    'InvalidValueError',
]

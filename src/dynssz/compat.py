"""
Fast-Path Compatibility Cache

Decides per type whether the precompiled fixed-layout codec (the
``marshal_ssz_to`` / ``unmarshal_ssz`` / ``size_ssz`` / ``hash_tree_root``
methods of a class) may be used instead of the generic descriptor walk.

A type qualifies for an operation only if its class provides that method and
no node of its type tree was resized by the specification registry: the
precompiled codec bakes in the default lengths, so any override would make
it produce a different layout.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from .descriptor import TypeResolver

logger = logging.getLogger(__name__)


class Operation(Enum):
    MARSHAL = "marshal_ssz_to"
    UNMARSHAL = "unmarshal_ssz"
    SIZE = "size_ssz"
    HASH_ROOT = "hash_tree_root"


@dataclass(frozen=True)
class FastSszCompatibility:
    """
    Capability flags of a type with respect to the fixed-layout codec.

    Attributes:
        is_marshaler: The class implements ``marshal_ssz_to``
        is_unmarshaler: The class implements ``unmarshal_ssz``
        is_sizer: The class implements ``size_ssz``
        is_hash_root: The class implements ``hash_tree_root``
        has_dynamic_spec_values: Some node of the type tree was resized by
            the specification registry
    """
    is_marshaler: bool
    is_unmarshaler: bool
    is_sizer: bool
    is_hash_root: bool
    has_dynamic_spec_values: bool

    def supports(self, operation: Operation) -> bool:
        """Whether the fixed-layout codec may perform ``operation``."""
        if self.has_dynamic_spec_values:
            return False
        if operation is Operation.MARSHAL:
            return self.is_marshaler
        if operation is Operation.UNMARSHAL:
            return self.is_unmarshaler
        if operation is Operation.SIZE:
            return self.is_sizer
        return self.is_hash_root


class FastSszCompatCache:
    """Per-engine cache of compatibility decisions, populated on first use."""

    def __init__(self, resolver: TypeResolver):
        self._resolver = resolver
        self._cache: Dict[Any, FastSszCompatibility] = {}
        self._lock = threading.Lock()

    def get(self, ssz_type: Any) -> FastSszCompatibility:
        cached = self._cache.get(ssz_type)
        if cached is not None:
            return cached

        descriptor = self._resolver.resolve(ssz_type)
        compatibility = FastSszCompatibility(
            is_marshaler=_implements(ssz_type, Operation.MARSHAL),
            is_unmarshaler=_implements(ssz_type, Operation.UNMARSHAL),
            is_sizer=_implements(ssz_type, Operation.SIZE),
            is_hash_root=_implements(ssz_type, Operation.HASH_ROOT),
            has_dynamic_spec_values=descriptor.has_spec_override,
        )
        logger.debug(f"Fast-path compatibility for {descriptor.type_name}: {compatibility}")

        with self._lock:
            return self._cache.setdefault(ssz_type, compatibility)


def _implements(ssz_type: Any, operation: Operation) -> bool:
    return callable(getattr(ssz_type, operation.value, None))

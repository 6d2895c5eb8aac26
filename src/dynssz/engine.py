"""
Dynamic SSZ Engine

``DynSsz`` is the caller-facing entry point. It owns one specification
registry plus the descriptor and fast-path caches derived from it, and
routes every operation either to a type's precompiled fixed-layout codec or
to the generic descriptor-driven engines.

Examples:
    >>> engine = DynSsz([{"SLOTS_PER_HISTORICAL_ROOT": 64}])
    >>> data = engine.marshal_ssz(state)
    >>> root = engine.hash_tree_root(state)
    >>> decoded = engine.unmarshal_ssz(BeaconState, data)
"""

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence

from .compat import FastSszCompatCache, FastSszCompatibility, Operation
from .descriptor import Kind, TypeDescriptor, TypeResolver, has_fastssz_methods
from .errors import BufferTooShortError, TrailingDataError, UnsupportedTypeError
from .hashing import hash_tree_root_value
from .marshal import marshal_value
from .sizing import size_value
from .specs import SpecEntry, build_registry
from .unmarshal import unmarshal_value

logger = logging.getLogger(__name__)


class DynSsz:
    """
    SSZ codec honoring a caller-supplied specification.

    Args:
        specs: Ordered list of override mappings; later entries win on name
            collision. A single mapping is accepted as a one-entry list.
        no_fast_ssz: Force the generic path for every type that has one,
            e.g. to verify it against the fixed-layout codecs.

    Engines never share cache storage; build one per specification and reuse
    it, since descriptors are resolved once per type and engine.
    """

    def __init__(self, specs: Optional[Sequence[SpecEntry]] = None, no_fast_ssz: bool = False):
        if isinstance(specs, Mapping):
            specs = [specs]
        self.registry = build_registry(specs)
        self.no_fast_ssz = no_fast_ssz
        self._resolver = TypeResolver(self.registry)
        self._compat = FastSszCompatCache(self._resolver)
        logger.debug(
            f"Initialized DynSsz with {len(self.registry)} specification values "
            f"(no_fast_ssz={no_fast_ssz})"
        )

    def get_type_descriptor(self, ssz_type: Any) -> TypeDescriptor:
        """Resolve (and cache) the layout descriptor of a type."""
        return self._resolver.resolve(ssz_type)

    def get_fastssz_compatibility(self, ssz_type: Any) -> FastSszCompatibility:
        """Return the cached fast-path capability flags of a type."""
        return self._compat.get(ssz_type)

    def use_fastssz(self, descriptor: TypeDescriptor, operation: Operation) -> bool:
        """
        Whether ``operation`` on values of ``descriptor`` goes to the
        fixed-layout codec.

        Custom codecs have no generic path, so they are delegated to even
        when ``no_fast_ssz`` is set.
        """
        if descriptor.kind is Kind.CUSTOM:
            return self._compat.get(descriptor.python_type).supports(operation)
        if descriptor.kind is not Kind.CONTAINER or self.no_fast_ssz:
            return False
        return self._compat.get(descriptor.python_type).supports(operation)

    def marshal_ssz(self, value: Any, ssz_type: Any = None) -> bytes:
        """
        Encode a value to SSZ.

        Args:
            value: Value to encode
            ssz_type: Annotation describing the value; defaults to its class

        Returns:
            The SSZ encoding
        """
        return bytes(self.marshal_ssz_to(value, bytearray(), ssz_type))

    def marshal_ssz_to(self, value: Any, buf: bytearray, ssz_type: Any = None) -> bytearray:
        """
        Append the SSZ encoding of a value to ``buf``.

        On error ``buf`` is truncated back to its original length before the
        exception propagates.
        """
        descriptor = self._descriptor_for(value, ssz_type)
        start = len(buf)
        try:
            marshal_value(self, descriptor, value, buf)
        except Exception:
            del buf[start:]
            raise
        return buf

    def unmarshal_ssz(self, target: Any, data: bytes) -> Any:
        """
        Decode SSZ data.

        Args:
            target: Either a type / annotation to construct, or an existing
                container instance to fill in place
            data: Encoded bytes; a fixed-size type must consume them exactly,
                a dynamic type consumes the whole buffer

        Returns:
            The decoded value (``target`` itself when an instance was given)

        Raises:
            BufferTooShortError: If data is shorter than the fixed size
            TrailingDataError: If bytes remain after a fixed-size value
        """
        instance = None
        ssz_type = target
        if _is_instance_target(target):
            instance = target
            ssz_type = type(target)

        descriptor = self._resolver.resolve(ssz_type)
        view = memoryview(bytes(data))
        if len(view) < descriptor.min_size:
            raise BufferTooShortError(
                f"need at least {descriptor.min_size} bytes, got {len(view)}", descriptor.type_name
            )
        if descriptor.is_fixed_size and len(view) > descriptor.fixed_size:
            raise TrailingDataError(
                f"{len(view) - descriptor.fixed_size} unconsumed bytes after {descriptor.fixed_size}-byte value",
                descriptor.type_name,
            )
        return unmarshal_value(self, descriptor, view, instance)

    def size_ssz(self, value: Any, ssz_type: Any = None) -> int:
        """Return the length of the SSZ encoding of a value."""
        return size_value(self, self._descriptor_for(value, ssz_type), value)

    def hash_tree_root(self, value: Any, ssz_type: Any = None) -> bytes:
        """Return the 32-byte SSZ hash tree root of a value."""
        return hash_tree_root_value(self, self._descriptor_for(value, ssz_type), value)

    def _descriptor_for(self, value: Any, ssz_type: Any) -> TypeDescriptor:
        if ssz_type is None:
            ssz_type = type(value)
            if ssz_type in (int, list, tuple):
                raise UnsupportedTypeError(
                    "cannot infer the SSZ type of this value, pass ssz_type explicitly",
                    ssz_type.__name__,
                )
        return self._resolver.resolve(ssz_type)


def _is_instance_target(target: Any) -> bool:
    if isinstance(target, type):
        return False
    return dataclasses.is_dataclass(target) or has_fastssz_methods(type(target))

"""
Type Descriptor Resolver

Inspects a Python type on first use and builds the SSZ layout descriptor the
dynamic engines walk: a closed tree of boolean, uint, vector, list, container
and custom-codec nodes carrying fixed/dynamic size information and whether
any node below was resized by the specification registry.

Resolution rules:
- ``bool`` / ``uint8`` .. ``uint256``: fixed size per natural width
- ``Vector[T, N]``: fixed iff ``T`` is fixed; ``N`` may be replaced by a
  registry override, which marks the descriptor as overridden
- ``List[T]`` / ``bytes``: dynamic with an optional upper bound, unless a
  fixed size hint reinterprets it as a vector
- dataclasses: fields in declaration order, fixed iff every field is fixed
- other classes exposing codec methods: opaque custom codecs

Descriptors are cached per resolver (one resolver per engine) keyed by the
type and the hints applied to it.
"""

import dataclasses
import logging
import threading
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .constants import BYTES_PER_LENGTH_OFFSET
from .errors import HintMismatchError, SszError, UnsupportedTypeError
from .hints import MaxHint, MaxHints, SizeHint, SizeHints, parse_max_hints, parse_size_hints
from .specs import SpecificationRegistry
from .types import Vector, uint, uint8

logger = logging.getLogger(__name__)

# Methods of the precompiled fixed-layout codec
FASTSSZ_METHODS = ("marshal_ssz_to", "unmarshal_ssz", "size_ssz", "hash_tree_root")


class Kind(Enum):
    BOOLEAN = "boolean"
    UINT = "uint"
    VECTOR = "vector"
    LIST = "list"
    CONTAINER = "container"
    CUSTOM = "custom"


@dataclass(frozen=True, eq=False)
class FieldDescriptor:
    """A container field: its name, layout and whether ``__init__`` takes it."""
    name: str
    descriptor: "TypeDescriptor"
    init: bool = True


@dataclass(frozen=True, eq=False)
class TypeDescriptor:
    """
    Resolved SSZ layout of a type.

    Attributes:
        kind: Variant of the node
        python_type: Annotation the node was resolved from
        type_name: Human readable name used in errors
        is_fixed_size: Whether every value encodes to the same length
        fixed_size: Encoded length for fixed types, fixed-region length otherwise
        has_spec_override: Whether this node or any node below was resized
            by the specification registry
        element: Element descriptor for vectors and lists
        length: Element count for vectors
        limit: Upper bound for lists, None when unbounded
        fields: Ordered field descriptors for containers
        as_bytes: Whether values are represented as ``bytes``
    """
    kind: Kind
    python_type: Any
    type_name: str
    is_fixed_size: bool
    fixed_size: int = 0
    has_spec_override: bool = False
    element: Optional["TypeDescriptor"] = None
    length: int = 0
    limit: Optional[int] = None
    fields: Tuple[FieldDescriptor, ...] = ()
    as_bytes: bool = False

    @property
    def is_basic(self) -> bool:
        return self.kind in (Kind.BOOLEAN, Kind.UINT)

    @property
    def min_size(self) -> int:
        """Smallest valid encoding: the fixed size or the fixed region."""
        return self.fixed_size


def type_name(ssz_type: Any) -> str:
    """Best-effort readable name of an annotation."""
    if isinstance(ssz_type, type):
        return ssz_type.__name__
    return str(ssz_type).replace("typing.", "")


def has_fastssz_methods(ssz_type: Any) -> bool:
    return any(callable(getattr(ssz_type, name, None)) for name in FASTSSZ_METHODS)


class TypeResolver:
    """
    Builds and caches type descriptors for one specification registry.

    Lookups are lock-free dict reads; only the insertion of a freshly built
    descriptor takes the lock, so two threads resolving the same type at once
    may both compute it but always get back the single stored instance.
    """

    def __init__(self, registry: SpecificationRegistry):
        self.registry = registry
        self._cache: Dict[Any, TypeDescriptor] = {}
        self._lock = threading.Lock()
        # Containers currently being built by this thread
        self._local = threading.local()

    def resolve(self, ssz_type: Any, size_hints: SizeHints = (), max_hints: MaxHints = ()) -> TypeDescriptor:
        """
        Resolve the descriptor of a type under the given per-level hints.

        Raises:
            UnsupportedTypeError: If the type has no SSZ representation
            HintMismatchError: If a hint cannot apply to the type's kind
        """
        key = (ssz_type, size_hints, max_hints)
        try:
            cached = self._cache.get(key)
        except TypeError:
            raise UnsupportedTypeError("type is not hashable", type_name(ssz_type))
        if cached is not None:
            return cached

        descriptor = self._build(ssz_type, size_hints, max_hints)
        with self._lock:
            return self._cache.setdefault(key, descriptor)

    def _build(self, ssz_type: Any, size_hints: SizeHints, max_hints: MaxHints) -> TypeDescriptor:
        size_hint = size_hints[0] if size_hints else None
        max_hint = max_hints[0] if max_hints else None
        inner_sizes, inner_maxes = size_hints[1:], max_hints[1:]
        name = type_name(ssz_type)

        # Parameterized aliases first: list[T] passes isinstance(..., type) before 3.11
        if typing.get_origin(ssz_type) is list:
            args = typing.get_args(ssz_type)
            if len(args) != 1:
                raise UnsupportedTypeError("list annotations need exactly one element type", name)
            try:
                element = self.resolve(args[0], inner_sizes, inner_maxes)
            except SszError as e:
                raise e.add_path("[]")
            name = f"List[{element.type_name}]"
            descriptor = self._build_sequence(ssz_type, name, element, size_hint, max_hint, as_bytes=False)
        elif typing.get_origin(ssz_type) is not None:
            raise UnsupportedTypeError("no SSZ representation for this type", name)
        elif ssz_type is bool:
            _reject_hints(name, size_hint, max_hint)
            descriptor = TypeDescriptor(Kind.BOOLEAN, bool, "bool", True, 1)
        elif isinstance(ssz_type, type) and issubclass(ssz_type, uint) and ssz_type.byte_length:
            _reject_hints(name, size_hint, max_hint)
            descriptor = TypeDescriptor(Kind.UINT, ssz_type, name, True, ssz_type.byte_length)
        elif isinstance(ssz_type, type) and issubclass(ssz_type, Vector) and ssz_type is not Vector:
            descriptor = self._build_vector(ssz_type, name, size_hint, max_hint, inner_sizes, inner_maxes)
        elif ssz_type is bytes:
            element = self.resolve(uint8, inner_sizes, inner_maxes)
            descriptor = self._build_sequence(ssz_type, name, element, size_hint, max_hint, as_bytes=True)
        elif isinstance(ssz_type, type) and dataclasses.is_dataclass(ssz_type):
            _reject_hints(name, size_hint, max_hint)
            descriptor = self._build_container(ssz_type, name)
        elif isinstance(ssz_type, type) and has_fastssz_methods(ssz_type):
            _reject_hints(name, size_hint, max_hint)
            fixed_size = getattr(ssz_type, "ssz_fixed_size", None)
            descriptor = TypeDescriptor(
                Kind.CUSTOM, ssz_type, name,
                is_fixed_size=fixed_size is not None,
                fixed_size=fixed_size or 0,
            )
        else:
            raise UnsupportedTypeError("no SSZ representation for this type", name)

        logger.debug(
            f"Resolved {descriptor.type_name}: kind={descriptor.kind.value} "
            f"fixed={descriptor.is_fixed_size} size={descriptor.fixed_size} "
            f"override={descriptor.has_spec_override}"
        )
        return descriptor

    def _build_vector(self, ssz_type, name, size_hint, max_hint, inner_sizes, inner_maxes) -> TypeDescriptor:
        length = ssz_type.length
        overridden = False
        if size_hint is not None and not size_hint.dynamic:
            if size_hint.spec_override:
                length = size_hint.size
                overridden = True
            elif size_hint.size != length:
                raise HintMismatchError(
                    f"size hint {size_hint.size} conflicts with declared length {length}", name
                )
        if max_hint is not None and max_hint.limit is not None:
            raise HintMismatchError("max hint cannot apply to a fixed-length array", name)
        if length == 0:
            if overridden:
                raise HintMismatchError("size override resolves to an empty fixed-length array", name)
            raise UnsupportedTypeError("fixed-length arrays need at least one element", name)

        try:
            element = self.resolve(ssz_type.element_type, inner_sizes, inner_maxes)
        except SszError as e:
            raise e.add_path("[]")
        as_bytes = element.kind is Kind.UINT and element.fixed_size == 1
        return _vector_descriptor(ssz_type, name, element, length, overridden, as_bytes)

    def _build_sequence(self, ssz_type, name, element, size_hint, max_hint, as_bytes) -> TypeDescriptor:
        if size_hint is not None and not size_hint.dynamic:
            if size_hint.size == 0:
                raise HintMismatchError("size hint 0 would make an empty fixed-length array", name)
            return _vector_descriptor(
                ssz_type, name, element, size_hint.size, size_hint.spec_override, as_bytes
            )

        limit = max_hint.limit if max_hint is not None else None
        overridden = element.has_spec_override or (max_hint is not None and max_hint.spec_override)
        return TypeDescriptor(
            Kind.LIST, ssz_type, name,
            is_fixed_size=False,
            has_spec_override=overridden,
            element=element,
            limit=limit,
            as_bytes=as_bytes,
        )

    def _build_container(self, ssz_type, name) -> TypeDescriptor:
        resolving = getattr(self._local, "resolving", None)
        if resolving is None:
            resolving = self._local.resolving = set()
        if ssz_type in resolving:
            raise UnsupportedTypeError("recursive types are not supported", name)
        resolving.add(ssz_type)
        try:
            return self._build_container_fields(ssz_type, name)
        finally:
            resolving.discard(ssz_type)

    def _build_container_fields(self, ssz_type, name) -> TypeDescriptor:
        try:
            annotations = typing.get_type_hints(ssz_type)
        except Exception as e:
            raise UnsupportedTypeError(f"cannot evaluate field annotations: {e}", name)

        fields = []
        for f in dataclasses.fields(ssz_type):
            try:
                size_hints = parse_size_hints(f.metadata, self.registry)
                max_hints = parse_max_hints(f.metadata, self.registry)
                field_descriptor = self.resolve(annotations.get(f.name, f.type), size_hints, max_hints)
            except SszError as e:
                if e.type_name is None:
                    e.type_name = name
                raise e.add_path(f.name)
            fields.append(FieldDescriptor(f.name, field_descriptor, f.init))

        if not fields:
            raise UnsupportedTypeError("containers must have at least one field", name)

        is_fixed = all(fd.descriptor.is_fixed_size for fd in fields)
        fixed_size = sum(
            fd.descriptor.fixed_size if fd.descriptor.is_fixed_size else BYTES_PER_LENGTH_OFFSET
            for fd in fields
        )
        return TypeDescriptor(
            Kind.CONTAINER, ssz_type, name,
            is_fixed_size=is_fixed,
            fixed_size=fixed_size,
            has_spec_override=any(fd.descriptor.has_spec_override for fd in fields),
            fields=tuple(fields),
        )


def _vector_descriptor(ssz_type, name, element, length, overridden, as_bytes) -> TypeDescriptor:
    if element.is_fixed_size:
        fixed_size = element.fixed_size * length
    else:
        fixed_size = BYTES_PER_LENGTH_OFFSET * length
    return TypeDescriptor(
        Kind.VECTOR, ssz_type, name,
        is_fixed_size=element.is_fixed_size,
        fixed_size=fixed_size,
        has_spec_override=overridden or element.has_spec_override,
        element=element,
        length=length,
        as_bytes=as_bytes,
    )


def _reject_hints(name: str, size_hint: Optional[SizeHint], max_hint: Optional[MaxHint]) -> None:
    if size_hint is not None and not size_hint.dynamic:
        raise HintMismatchError(f"size hint {size_hint.size} cannot apply to this kind", name)
    if max_hint is not None and max_hint.limit is not None:
        raise HintMismatchError(f"max hint {max_hint.limit} cannot apply to this kind", name)

"""
Field Size Hints

Parses the per-field annotations attached through dataclass field metadata
into ordered per-nesting-level hints:

    validators: List[Validator] = field(metadata={
        "ssz_max": "1099511627776",
        "dynssz_max": "VALIDATOR_REGISTRY_LIMIT",
    })
    aggregation_bits: List[List[uint8]] = field(metadata={"ssz_size": "?,32"})

Each comma-separated entry applies to one nesting level, outermost first;
``?`` leaves that level at its natural default.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from .constants import (
    DYNSSZ_MAX_KEY,
    DYNSSZ_SIZE_KEY,
    HINT_WILDCARD,
    SSZ_MAX_KEY,
    SSZ_SIZE_KEY,
)
from .errors import ConfigurationError
from .specs import SpecificationRegistry


@dataclass(frozen=True)
class SizeHint:
    """Length constraint for one nesting level."""
    size: int = 0
    dynamic: bool = True
    spec_override: bool = False


@dataclass(frozen=True)
class MaxHint:
    """Upper bound for one nesting level."""
    limit: Optional[int] = None
    spec_override: bool = False


SizeHints = Tuple[SizeHint, ...]
MaxHints = Tuple[MaxHint, ...]


def _split(annotation: Optional[str]) -> List[str]:
    if annotation is None:
        return []
    return [part.strip() for part in str(annotation).split(",")]


def _parse_int(text: str, key: str) -> Optional[int]:
    if text == HINT_WILDCARD or text == "":
        return None
    try:
        value = int(text)
    except ValueError:
        raise ConfigurationError(f"invalid {key} annotation entry {text!r}")
    if value < 0:
        raise ConfigurationError(f"negative {key} annotation entry {text!r}")
    return value


def parse_size_hints(metadata: Mapping, registry: SpecificationRegistry) -> SizeHints:
    """
    Build the per-level size hints of a field.

    A registry value only counts as an override when it resolves and differs
    from the built-in ``ssz_size`` entry of the same level.
    """
    static = _split(metadata.get(SSZ_SIZE_KEY))
    dynamic = _split(metadata.get(DYNSSZ_SIZE_KEY))

    hints = []
    for level in range(max(len(static), len(dynamic))):
        default = _parse_int(static[level], SSZ_SIZE_KEY) if level < len(static) else None
        hint = SizeHint() if default is None else SizeHint(size=default, dynamic=False)

        expression = dynamic[level] if level < len(dynamic) else HINT_WILDCARD
        if expression not in (HINT_WILDCARD, ""):
            value, found = registry.resolve(expression)
            if found and (default is None or value != default):
                hint = SizeHint(size=value, dynamic=False, spec_override=True)
        hints.append(hint)

    return tuple(hints)


def parse_max_hints(metadata: Mapping, registry: SpecificationRegistry) -> MaxHints:
    """Build the per-level upper-bound hints of a field."""
    static = _split(metadata.get(SSZ_MAX_KEY))
    dynamic = _split(metadata.get(DYNSSZ_MAX_KEY))

    hints = []
    for level in range(max(len(static), len(dynamic))):
        default = _parse_int(static[level], SSZ_MAX_KEY) if level < len(static) else None
        hint = MaxHint(limit=default)

        expression = dynamic[level] if level < len(dynamic) else HINT_WILDCARD
        if expression not in (HINT_WILDCARD, ""):
            value, found = registry.resolve(expression)
            if found and value != default:
                hint = MaxHint(limit=value, spec_override=True)
        hints.append(hint)

    return tuple(hints)
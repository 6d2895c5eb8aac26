"""
SSZ Error Taxonomy

Every failure raised by the dynamic codec engines derives from SszError and
carries the name of the type being processed plus the field path leading to
it. The path is extended while the exception propagates out of nested
containers and sequences, so the final message points at the exact location
of the problem, e.g. ``LengthMismatchError: Vector[uint8, 32] at
BeaconBlock.body.randao_reveal: expected 32 elements, got 31``.
"""

from typing import List, Optional


class SszError(Exception):
    """Base exception for all SSZ encoding, decoding and resolution errors."""

    def __init__(self, message: str, type_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.type_name = type_name
        self.path: List[str] = []

    def add_path(self, segment: str) -> "SszError":
        """
        Prepend a path segment (field name or ``[index]``) while unwinding.

        Args:
            segment: Field name or index marker of the enclosing level

        Returns:
            The same exception, for use in ``raise`` statements
        """
        self.path.insert(0, segment)
        return self

    @property
    def field_path(self) -> str:
        """Dotted field path, with index markers attached to their parent."""
        rendered = ""
        for segment in self.path:
            if segment.startswith("[") or not rendered:
                rendered += segment
            else:
                rendered += "." + segment
        return rendered

    def __str__(self) -> str:
        location = self.type_name or "<unknown>"
        if self.path:
            location = f"{location} at {self.field_path}"
        return f"{location}: {self.message}"


class ConfigurationError(SszError):
    """Raised for malformed specification registries or presets."""
    pass


class UnsupportedTypeError(SszError, TypeError):
    """Raised when a type (or value) has no SSZ representation."""
    pass


class HintMismatchError(SszError):
    """Raised when a size/max hint cannot apply to the annotated kind."""
    pass


class LengthMismatchError(SszError, ValueError):
    """Raised when a runtime length disagrees with the type's descriptor."""
    pass


class OffsetOrderError(SszError, ValueError):
    """Raised when dynamic-field offsets are not non-decreasing."""
    pass


class OffsetRangeError(SszError, ValueError):
    """Raised when an offset points outside the buffer or fixed region."""
    pass


class BufferTooShortError(SszError, ValueError):
    """Raised when the input is shorter than the minimum fixed size."""
    pass


class TrailingDataError(SszError, ValueError):
    """Raised when bytes remain after decoding a fixed-size value."""
    pass


class InvalidValueError(SszError, ValueError):
    """Raised for leaf values that cannot be encoded or decoded."""
    pass

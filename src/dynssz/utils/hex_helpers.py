"""
Hex String and Naming Convention Utilities

This module provides utilities for handling hex strings and converting between
the naming conventions used in JSON payloads and Python dataclass fields.
"""

import re
from typing import Optional


def normalize_hex(hex_str: str, expected_bytes: Optional[int] = None) -> str:
    """
    Normalize a hex string to ensure proper formatting.

    Args:
        hex_str: The hex string to normalize (should start with '0x')
        expected_bytes: Optional expected byte length for validation

    Returns:
        Normalized hex string with proper padding

    Raises:
        ValueError: If the hex string contains invalid characters

    Examples:
        >>> normalize_hex("0x123")
        "0x0123"
        >>> normalize_hex("0x1234")
        "0x1234"
    """
    if not isinstance(hex_str, str) or not hex_str.startswith("0x"):
        return hex_str

    hex_part = hex_str[2:]

    # Validate hex characters
    if not all(c in "0123456789abcdefABCDEF" for c in hex_part):
        raise ValueError(f"Invalid hex string: {hex_str}")

    # Pad to even length
    if len(hex_part) % 2 == 1:
        hex_part = "0" + hex_part

    if expected_bytes is not None and len(hex_part) // 2 != expected_bytes:
        raise ValueError(f"Expected {expected_bytes} bytes, got {len(hex_part) // 2} bytes")

    return "0x" + hex_part


def camel_to_snake(name: str) -> str:
    """
    Convert camelCase naming to snake_case naming.

    Examples:
        >>> camel_to_snake("parentRoot")
        "parent_root"
        >>> camel_to_snake("snake_case")
        "snake_case"
    """
    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def hex_to_bytes(hex_str: str) -> bytes:
    """
    Convert a hex string (with or without '0x' prefix) to bytes.

    Examples:
        >>> hex_to_bytes("0x1234")
        b'\\x12\\x34'
    """
    hex_str = hex_str.strip()
    if hex_str.startswith("0x"):
        hex_str = hex_str[2:]

    # Pad to even length
    if len(hex_str) % 2 == 1:
        hex_str = "0" + hex_str

    return bytes.fromhex(hex_str)


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    """
    Convert bytes to a hex string.

    Examples:
        >>> bytes_to_hex(b'\\x12\\x34')
        "0x1234"
        >>> bytes_to_hex(b'\\x12\\x34', prefix=False)
        "1234"
    """
    hex_str = bytes(data).hex()
    return f"0x{hex_str}" if prefix else hex_str

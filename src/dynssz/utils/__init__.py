"""
SSZ Utility Functions

This package provides utility functions for hex string handling, naming
conventions and JSON conversion of decoded values.
"""

from .hex_helpers import (
    bytes_to_hex,
    camel_to_snake,
    hex_to_bytes,
    normalize_hex,
)
from .json_helpers import json_to_value, value_to_json

__all__ = [
    'bytes_to_hex',
    'camel_to_snake',
    'hex_to_bytes',
    'json_to_value',
    'normalize_hex',
    'value_to_json',
]

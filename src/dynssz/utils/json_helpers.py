"""
JSON Conversion Utilities

Converts between decoded SSZ values and the JSON shape used by beacon-node
APIs: byte strings as 0x-prefixed hex, integers as decimal strings or
numbers, containers as objects keyed by field name (camelCase keys are
accepted on input).
"""

from typing import Any, Dict

from ..descriptor import Kind, TypeDescriptor
from ..errors import InvalidValueError, SszError
from ..types import uint
from ..unmarshal import build_container
from .hex_helpers import bytes_to_hex, camel_to_snake, hex_to_bytes, normalize_hex


def value_to_json(value: Any) -> Any:
    """
    Convert a decoded value into JSON-compatible data.

    Examples:
        >>> value_to_json(Checkpoint(epoch=uint64(3), root=b"\\x00" * 32))
        {"epoch": 3, "root": "0x0000..."}
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes_to_hex(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, uint):
        return int(value)
    if isinstance(value, (list, tuple)):
        return [value_to_json(item) for item in value]
    fields = getattr(value, "__dataclass_fields__", None)
    if fields is not None:
        return {name: value_to_json(getattr(value, name)) for name in fields}
    return value


def json_to_value(descriptor: TypeDescriptor, data: Any) -> Any:
    """
    Build a value of the descriptor's type from JSON-compatible data.

    Raises:
        InvalidValueError: If the data does not fit the descriptor
    """
    kind = descriptor.kind
    if kind is Kind.BOOLEAN:
        if not isinstance(data, bool):
            raise InvalidValueError(f"expected a boolean, got {data!r}", descriptor.type_name)
        return data

    if kind is Kind.UINT:
        try:
            if isinstance(data, str):
                data = int(data, 16) if data.startswith("0x") else int(data)
            return descriptor.python_type(data)
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidValueError(str(e), descriptor.type_name)

    if kind is Kind.VECTOR or kind is Kind.LIST:
        if descriptor.as_bytes or (descriptor.element.kind is Kind.UINT and isinstance(data, str)):
            if not isinstance(data, str):
                raise InvalidValueError(f"expected a hex string, got {data!r}", descriptor.type_name)
            try:
                raw = hex_to_bytes(normalize_hex(data))
            except ValueError as e:
                raise InvalidValueError(str(e), descriptor.type_name)
            return raw if descriptor.as_bytes else [descriptor.element.python_type(b) for b in raw]
        if not isinstance(data, list):
            raise InvalidValueError(f"expected a list, got {data!r}", descriptor.type_name)
        items = []
        for index, item in enumerate(data):
            try:
                items.append(json_to_value(descriptor.element, item))
            except SszError as e:
                raise e.add_path(f"[{index}]")
        return items

    if kind is Kind.CONTAINER:
        if not isinstance(data, dict):
            raise InvalidValueError(f"expected an object, got {data!r}", descriptor.type_name)
        processed: Dict[str, Any] = {camel_to_snake(key): value for key, value in data.items()}
        values = {}
        for fd in descriptor.fields:
            if fd.name not in processed:
                raise InvalidValueError(f"missing field {fd.name}", descriptor.type_name)
            try:
                values[fd.name] = json_to_value(fd.descriptor, processed[fd.name])
            except SszError as e:
                raise e.add_path(fd.name)
        return build_container(descriptor, values)

    raise InvalidValueError("cannot build this kind from JSON", descriptor.type_name)

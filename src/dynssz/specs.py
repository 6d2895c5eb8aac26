"""
Specification Registry

Holds the resolved specification values (``SLOTS_PER_HISTORICAL_ROOT``,
``MAX_VALIDATORS_PER_COMMITTEE``, ...) that override the built-in lengths
baked into annotated types. A registry is built once per engine from an
ordered list of override mappings and is read-only afterwards.

Size annotations may reference a single name or an arithmetic expression
over names, e.g. ``"SYNC_COMMITTEE_SIZE//8"`` or
``"MAX_VALIDATORS_PER_COMMITTEE*MAX_COMMITTEES_PER_SLOT"``.
"""

import ast
import logging
import operator
import re
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SpecEntry = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.floordiv,
    ast.FloorDiv: operator.floordiv,
}


class _MissingName(Exception):
    pass


class SpecificationRegistry(Mapping):
    """
    Immutable mapping of specification names to integer values.

    Later entries win on name collision. A mapping entry can never hold the
    same name twice; a pair-sequence entry that does is rejected.
    """

    def __init__(self, *entries: SpecEntry):
        values: Dict[str, int] = {}
        for index, entry in enumerate(entries):
            for name, value in _iter_entry(entry, index):
                values[name] = _coerce_value(name, value)
        self._values = MappingProxyType(values)
        logger.debug(f"Built specification registry with {len(values)} values")

    def __getitem__(self, name: str) -> int:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SpecificationRegistry({dict(self._values)!r})"

    def lookup(self, name: str) -> Tuple[int, bool]:
        """
        Look up a single specification value.

        Returns:
            Tuple of (value, found); value is 0 when the name is missing
        """
        value = self._values.get(name)
        if value is None:
            return 0, False
        return value, True

    def resolve(self, expression: str) -> Tuple[int, bool]:
        """
        Evaluate a name or arithmetic expression against the registry.

        Args:
            expression: e.g. ``"MAX_ATTESTATIONS"`` or ``"SYNC_COMMITTEE_SIZE/8"``

        Returns:
            Tuple of (value, found); found is False if any referenced name is
            missing, in which case the caller keeps its built-in default

        Raises:
            ConfigurationError: If the expression is not valid arithmetic
        """
        expression = expression.strip()
        if _NAME_PATTERN.match(expression):
            return self.lookup(expression)

        try:
            tree = ast.parse(expression, mode="eval")
        except SyntaxError as e:
            raise ConfigurationError(f"invalid specification expression {expression!r}: {e}")

        try:
            value = self._evaluate(tree.body, expression)
        except _MissingName:
            return 0, False
        if value < 0:
            raise ConfigurationError(f"specification expression {expression!r} is negative")
        return value, True

    def _evaluate(self, node: ast.AST, expression: str) -> int:
        if isinstance(node, ast.Constant) and isinstance(node.value, int) and not isinstance(node.value, bool):
            return node.value
        if isinstance(node, ast.Name):
            value, found = self.lookup(node.id)
            if not found:
                raise _MissingName(node.id)
            return value
        if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
            left = self._evaluate(node.left, expression)
            right = self._evaluate(node.right, expression)
            if isinstance(node.op, (ast.Div, ast.FloorDiv)) and right == 0:
                raise ConfigurationError(f"division by zero in specification expression {expression!r}")
            return _BINARY_OPERATORS[type(node.op)](left, right)
        raise ConfigurationError(f"unsupported construct in specification expression {expression!r}")


def _iter_entry(entry: SpecEntry, index: int) -> Iterator[Tuple[str, Any]]:
    if isinstance(entry, Mapping):
        items: Iterable = entry.items()
        check_duplicates = False
    else:
        try:
            items = list(entry)
        except TypeError:
            raise ConfigurationError(f"specification entry {index} is not a mapping or pair sequence")
        check_duplicates = True

    seen = set()
    for item in items:
        try:
            name, value = item
        except (TypeError, ValueError):
            raise ConfigurationError(f"specification entry {index} contains a malformed pair: {item!r}")
        if not isinstance(name, str) or not _NAME_PATTERN.match(name):
            raise ConfigurationError(f"malformed specification name {name!r} in entry {index}")
        if check_duplicates and name in seen:
            raise ConfigurationError(f"duplicate specification name {name!r} in entry {index}")
        seen.add(name)
        yield name, value


def _coerce_value(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"specification value for {name} must be an integer, got bool")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            raise ConfigurationError(f"specification value for {name} is not numeric: {value!r}")
    if not isinstance(value, int):
        raise ConfigurationError(
            f"specification value for {name} must be an integer, got {type(value).__name__}"
        )
    if value < 0:
        raise ConfigurationError(f"specification value for {name} must be non-negative")
    return value


def build_registry(specs: Optional[Sequence[SpecEntry]] = None) -> SpecificationRegistry:
    """Build a registry from an optional ordered list of override entries."""
    return SpecificationRegistry(*(specs or ()))

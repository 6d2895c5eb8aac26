"""
Specification Registry Tests

Covers construction from ordered override entries, lookups, expression
resolution and the validation failures surfaced as ConfigurationError.
"""

import os
import sys
import unittest

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from dynssz import ConfigurationError, SpecificationRegistry
from dynssz.hints import MaxHint, SizeHint, parse_max_hints, parse_size_hints


class TestSpecificationRegistry(unittest.TestCase):

    def test_empty_registry(self):
        """An empty registry finds nothing"""
        registry = SpecificationRegistry()
        self.assertEqual(len(registry), 0)
        self.assertEqual(registry.lookup("SLOTS_PER_EPOCH"), (0, False))

    def test_later_entries_win(self):
        """Later mappings override earlier ones on name collision"""
        registry = SpecificationRegistry(
            {"SLOTS_PER_EPOCH": 32, "MAX_ATTESTATIONS": 128},
            {"SLOTS_PER_EPOCH": 8},
        )
        self.assertEqual(registry.lookup("SLOTS_PER_EPOCH"), (8, True))
        self.assertEqual(registry.lookup("MAX_ATTESTATIONS"), (128, True))

    def test_pair_sequence_entry(self):
        """Entries may be sequences of (name, value) pairs"""
        registry = SpecificationRegistry([("A", 1), ("B", 2)])
        self.assertEqual(dict(registry), {"A": 1, "B": 2})

    def test_duplicate_names_rejected(self):
        """A pair sequence may not name the same value twice"""
        with self.assertRaises(ConfigurationError):
            SpecificationRegistry([("A", 1), ("A", 2)])

    def test_malformed_names_rejected(self):
        """Names must be identifiers"""
        for name in ("1ABC", "A-B", "", "WITH SPACE"):
            with self.subTest(name=name):
                with self.assertRaises(ConfigurationError):
                    SpecificationRegistry({name: 1})

    def test_invalid_values_rejected(self):
        """Values must be non-negative integers"""
        for value in (-1, True, 1.5, "abc", None):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError):
                    SpecificationRegistry({"A": value})

    def test_numeric_strings_accepted(self):
        """Decimal and hex strings are converted"""
        registry = SpecificationRegistry({"A": "32", "B": "0x20"})
        self.assertEqual(registry["A"], 32)
        self.assertEqual(registry["B"], 32)

    def test_registry_is_read_only(self):
        """Registries cannot be modified after construction"""
        registry = SpecificationRegistry({"A": 1})
        with self.assertRaises(TypeError):
            registry["A"] = 2

    def test_resolve_expressions(self):
        """Expressions over names are evaluated with integer arithmetic"""
        registry = SpecificationRegistry({"SYNC_COMMITTEE_SIZE": 512, "A": 3, "B": 4})
        self.assertEqual(registry.resolve("SYNC_COMMITTEE_SIZE"), (512, True))
        self.assertEqual(registry.resolve("SYNC_COMMITTEE_SIZE/8"), (64, True))
        self.assertEqual(registry.resolve("SYNC_COMMITTEE_SIZE // 8"), (64, True))
        self.assertEqual(registry.resolve("A*B"), (12, True))
        self.assertEqual(registry.resolve("(A+B)*2-1"), (13, True))

    def test_resolve_missing_name(self):
        """Any missing name makes the whole expression unresolved"""
        registry = SpecificationRegistry({"A": 3})
        self.assertEqual(registry.resolve("MISSING"), (0, False))
        self.assertEqual(registry.resolve("A*MISSING"), (0, False))

    def test_resolve_rejects_other_constructs(self):
        """Only + - * / // over names and integers are allowed"""
        registry = SpecificationRegistry({"A": 3})
        for expression in ("A**2", "A(1)", "A if A else 1", "A/0", "A-"):
            with self.subTest(expression=expression):
                with self.assertRaises(ConfigurationError):
                    registry.resolve(expression)


class TestFieldHints(unittest.TestCase):

    def setUp(self):
        self.registry = SpecificationRegistry({"SLOTS": 64, "DEFAULT": 8})

    def test_static_hints(self):
        """ssz_size entries become per-level fixed or dynamic hints"""
        hints = parse_size_hints({"ssz_size": "?,32"}, self.registry)
        self.assertEqual(hints, (SizeHint(), SizeHint(size=32, dynamic=False)))

    def test_override_differs_from_default(self):
        """A resolved value that differs from the default is an override"""
        hints = parse_size_hints({"ssz_size": "8", "dynssz_size": "SLOTS"}, self.registry)
        self.assertEqual(hints, (SizeHint(size=64, dynamic=False, spec_override=True),))

    def test_override_equal_to_default(self):
        """A resolved value equal to the default is not an override"""
        hints = parse_size_hints({"ssz_size": "8", "dynssz_size": "DEFAULT"}, self.registry)
        self.assertEqual(hints, (SizeHint(size=8, dynamic=False),))

    def test_missing_override_keeps_default(self):
        """Unresolved names fall back to the built-in default"""
        hints = parse_size_hints({"ssz_size": "8", "dynssz_size": "UNKNOWN"}, self.registry)
        self.assertEqual(hints, (SizeHint(size=8, dynamic=False),))

    def test_max_hints(self):
        """ssz_max and dynssz_max combine the same way"""
        hints = parse_max_hints({"ssz_max": "4,16", "dynssz_max": "?,SLOTS"}, self.registry)
        self.assertEqual(hints, (MaxHint(limit=4), MaxHint(limit=64, spec_override=True)))

    def test_invalid_static_hint(self):
        """Non-numeric ssz_size entries are configuration errors"""
        with self.assertRaises(ConfigurationError):
            parse_size_hints({"ssz_size": "abc"}, self.registry)


if __name__ == '__main__':
    unittest.main()

"""
Fast-Path Delegation Tests

Types with a precompiled fixed-layout codec must produce identical results
through the codec and through the generic engine, and the codec must only be
used while the specification registry leaves the type's layout untouched.
"""

import os
import sys
import unittest
from hashlib import sha256

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from dynssz import DynSsz, LengthMismatchError, Operation, uint16, uint64
from ssz_fixtures import (
    Checkpoint,
    CheckpointHistory,
    Envelope,
    ForkInfo,
    HistoricalRoots,
    PrimitiveStruct,
    Version,
    merkle_root_of,
    reset_calls,
    uint_chunk,
)


def sample_roots(count):
    return [bytes([i + 1]) * 32 for i in range(count)]


class TestFastPathEquivalence(unittest.TestCase):
    """The fixed-layout codec and the generic engine agree byte for byte."""

    def setUp(self):
        reset_calls()
        self.fast = DynSsz()
        self.generic = DynSsz(no_fast_ssz=True)
        self.values = [
            Checkpoint(uint64(7), b"\x11" * 32),
            Envelope(uint16(1), b"hello"),
            Envelope(uint16(2), b""),
            HistoricalRoots(uint64(3), sample_roots(8)),
        ]

    def test_marshal(self):
        for value in self.values:
            with self.subTest(value=value):
                self.assertEqual(self.fast.marshal_ssz(value), self.generic.marshal_ssz(value))

    def test_unmarshal(self):
        for value in self.values:
            with self.subTest(value=value):
                encoded = self.generic.marshal_ssz(value)
                self.assertEqual(self.fast.unmarshal_ssz(type(value), encoded), value)
                self.assertEqual(self.generic.unmarshal_ssz(type(value), encoded), value)

    def test_size(self):
        for value in self.values:
            with self.subTest(value=value):
                self.assertEqual(self.fast.size_ssz(value), self.generic.size_ssz(value))

    def test_hash_tree_root(self):
        for value in self.values:
            with self.subTest(value=value):
                self.assertEqual(self.fast.hash_tree_root(value), self.generic.hash_tree_root(value))

    def test_codec_usage(self):
        """Only the default engine calls into the codec"""
        value = Checkpoint(uint64(7), b"\x11" * 32)
        self.generic.marshal_ssz(value)
        self.generic.hash_tree_root(value)
        self.assertEqual(Checkpoint.calls, [])

        self.fast.marshal_ssz(value)
        self.fast.hash_tree_root(value)
        self.fast.size_ssz(value)
        self.fast.unmarshal_ssz(Checkpoint, self.generic.marshal_ssz(value))
        self.assertEqual(Checkpoint.calls, ["marshal", "hash_root", "size", "unmarshal"])


class TestSpecOverrideDisablesFastPath(unittest.TestCase):

    def setUp(self):
        reset_calls()

    def test_equal_value_keeps_fast_path(self):
        engine = DynSsz({"SLOTS_PER_HISTORICAL_ROOT": 8})
        engine.marshal_ssz(HistoricalRoots(uint64(1), sample_roots(8)))
        self.assertEqual(HistoricalRoots.calls, ["marshal"])

    def test_resized_type_uses_generic_path(self):
        """A resized vector bypasses the codec and uses the new length"""
        engine = DynSsz({"SLOTS_PER_HISTORICAL_ROOT": 4})
        value = HistoricalRoots(uint64(3), sample_roots(4))

        encoded = engine.marshal_ssz(value)
        self.assertEqual(len(encoded), 8 + 4 * 32)
        self.assertEqual(engine.size_ssz(value), len(encoded))
        self.assertEqual(engine.unmarshal_ssz(HistoricalRoots, encoded), value)
        self.assertEqual(
            engine.hash_tree_root(value),
            sha256(uint_chunk(3) + merkle_root_of(sample_roots(4))).digest(),
        )
        self.assertEqual(HistoricalRoots.calls, [])

        with self.assertRaises(LengthMismatchError):
            engine.marshal_ssz(HistoricalRoots(uint64(3), sample_roots(8)))

    def test_compatibility_flags(self):
        flags = DynSsz().get_fastssz_compatibility(HistoricalRoots)
        self.assertTrue(flags.is_marshaler and flags.is_unmarshaler and flags.is_sizer and flags.is_hash_root)
        self.assertFalse(flags.has_dynamic_spec_values)
        self.assertTrue(flags.supports(Operation.MARSHAL))

        flags = DynSsz({"SLOTS_PER_HISTORICAL_ROOT": 4}).get_fastssz_compatibility(HistoricalRoots)
        self.assertTrue(flags.is_marshaler)
        self.assertTrue(flags.has_dynamic_spec_values)
        self.assertFalse(flags.supports(Operation.MARSHAL))

        flags = DynSsz().get_fastssz_compatibility(PrimitiveStruct)
        self.assertFalse(flags.is_marshaler or flags.is_unmarshaler or flags.is_sizer or flags.is_hash_root)


class TestPartialDelegation(unittest.TestCase):
    """An overridden parent still delegates its unaffected children."""

    def setUp(self):
        reset_calls()
        self.engine = DynSsz({"MAX_HISTORY": 2})
        self.value = CheckpointHistory(
            Checkpoint(uint64(2), b"\x02" * 32),
            [Checkpoint(uint64(1), b"\x01" * 32)],
        )

    def test_children_use_codec(self):
        encoded = self.engine.marshal_ssz(self.value)
        self.assertEqual(len(encoded), 40 + 4 + 40)
        self.assertEqual(Checkpoint.calls, ["marshal", "marshal"])
        self.assertEqual(encoded, DynSsz({"MAX_HISTORY": 2}, no_fast_ssz=True).marshal_ssz(self.value))

    def test_parent_is_overridden(self):
        flags = self.engine.get_fastssz_compatibility(CheckpointHistory)
        self.assertTrue(flags.has_dynamic_spec_values)
        self.assertFalse(self.engine.get_fastssz_compatibility(Checkpoint).has_dynamic_spec_values)

    def test_overridden_limit_applies(self):
        """The registry limit replaces the declared maximum"""
        value = CheckpointHistory(
            Checkpoint(uint64(4), b"\x04" * 32),
            [Checkpoint(uint64(i), bytes([i]) * 32) for i in range(3)],
        )
        with self.assertRaises(LengthMismatchError):
            self.engine.marshal_ssz(value)
        DynSsz().marshal_ssz(value)

    def test_hash_tree_root(self):
        root = self.engine.hash_tree_root(self.value)
        self.assertIn("hash_root", Checkpoint.calls)
        generic = DynSsz({"MAX_HISTORY": 2}, no_fast_ssz=True).hash_tree_root(self.value)
        self.assertEqual(root, generic)

        current_root = sha256(uint_chunk(2) + b"\x02" * 32).digest()
        previous_root = sha256(
            sha256(sha256(uint_chunk(1) + b"\x01" * 32).digest() + b"\x00" * 32).digest() + uint_chunk(1)
        ).digest()
        self.assertEqual(root, sha256(current_root + previous_root).digest())

    def test_round_trip(self):
        encoded = self.engine.marshal_ssz(self.value)
        self.assertEqual(self.engine.unmarshal_ssz(CheckpointHistory, encoded), self.value)
        self.assertIn("unmarshal", Checkpoint.calls)


class TestCustomCodec(unittest.TestCase):
    """Custom codecs have no generic path and are always delegated to."""

    def setUp(self):
        self.engine = DynSsz(no_fast_ssz=True)
        self.value = ForkInfo(Version(b"\x01\x02\x03\x04"), uint64(5))

    def test_marshal(self):
        self.assertEqual(self.engine.marshal_ssz(self.value).hex(), "010203040500000000000000")

    def test_unmarshal(self):
        decoded = self.engine.unmarshal_ssz(ForkInfo, bytes.fromhex("010203040500000000000000"))
        self.assertEqual(decoded, self.value)

    def test_size_and_root(self):
        self.assertEqual(self.engine.size_ssz(self.value), 12)
        expected = sha256(b"\x01\x02\x03\x04".ljust(32, b"\x00") + uint_chunk(5)).digest()
        self.assertEqual(self.engine.hash_tree_root(self.value), expected)


if __name__ == '__main__':
    unittest.main()

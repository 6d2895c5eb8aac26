"""
CLI Tests

Drives the dynssz command group through click's test runner using the
shared test types (importable as ``ssz_fixtures``).
"""

import json
import os
import sys
import tempfile
import unittest
from dataclasses import dataclass, field
from unittest.mock import patch

from click.testing import CliRunner

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from dynssz import DynSsz, uint8, uint16, uint64
from dynssz.cli import cli, load_type
from dynssz.utils import json_to_value, value_to_json
from ssz_fixtures import Checkpoint

PRIMITIVE_HEX = "0x01010200030000000400000000000000"


@dataclass
class Tagged:
    value: uint16
    tag: uint8 = field(default=uint8(0), init=False)


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self.env = patch.dict(os.environ, {}, clear=False)
        self.env.start()
        for name in ("DYNSSZ_NO_FASTSSZ", "DYNSSZ_SPEC_FILE", "DYNSSZ_LOG_LEVEL"):
            os.environ.pop(name, None)

    def tearDown(self):
        self.env.stop()

    def test_encode(self):
        data = json.dumps({"f1": True, "f2": 1, "f3": 2, "f4": "3", "f5": 4})
        result = self.runner.invoke(cli, ["encode", "ssz_fixtures:PrimitiveStruct", data])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), PRIMITIVE_HEX)

    def test_decode_json(self):
        result = self.runner.invoke(cli, ["decode", "ssz_fixtures:PrimitiveStruct", PRIMITIVE_HEX])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"f1": true', result.output)
        self.assertIn('"f5": 4', result.output)

    def test_decode_table(self):
        result = self.runner.invoke(
            cli, ["decode", "ssz_fixtures:PrimitiveStruct", PRIMITIVE_HEX, "--format", "table"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("f3", result.output)

    def test_hash_root(self):
        value = Checkpoint(uint64(9), b"\x09" * 32)
        engine = DynSsz()
        encoded = engine.marshal_ssz(value).hex()
        result = self.runner.invoke(cli, ["hash-root", "ssz_fixtures:Checkpoint", encoded])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), "0x" + engine.hash_tree_root(value).hex())

    def test_inspect(self):
        result = self.runner.invoke(cli, ["inspect", "ssz_fixtures:Checkpoint"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("epoch", result.output)
        self.assertIn("marshal=True", result.output)
        self.assertIn("spec_overrides=False", result.output)

    def test_inspect_with_preset(self):
        """--spec presets resize types and disable their fast path"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "preset.json")
            with open(path, "w") as f:
                json.dump({"SLOTS_PER_HISTORICAL_ROOT": 4}, f)
            result = self.runner.invoke(cli, ["--spec", path, "inspect", "ssz_fixtures:HistoricalRoots"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("spec_overrides=True", result.output)

    def test_decode_error(self):
        result = self.runner.invoke(cli, ["decode", "ssz_fixtures:PrimitiveStruct", "0x0101"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("need at least 16 bytes", result.output)

    def test_bad_type_reference(self):
        result = self.runner.invoke(cli, ["inspect", "ssz_fixtures.PrimitiveStruct"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("module.path:QualName", result.output)

    def test_load_type(self):
        self.assertIs(load_type("ssz_fixtures:Checkpoint"), Checkpoint)


class TestJsonHelpers(unittest.TestCase):

    def setUp(self):
        self.engine = DynSsz()

    def test_non_init_field_from_json(self):
        """Fields excluded from __init__ are filled the same way as when decoding"""
        descriptor = self.engine.get_type_descriptor(Tagged)
        value = json_to_value(descriptor, {"value": 5, "tag": 7})
        self.assertEqual(value.value, 5)
        self.assertEqual(value.tag, 7)

        decoded = self.engine.unmarshal_ssz(Tagged, self.engine.marshal_ssz(value))
        self.assertEqual(decoded.tag, 7)
        self.assertEqual(value_to_json(decoded), {"value": 5, "tag": 7})


if __name__ == '__main__':
    unittest.main()

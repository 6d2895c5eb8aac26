"""
Configuration Tests

Covers preset file loading, environment settings and engine construction.
"""

import json
import os
import sys
import tempfile
import unittest
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from dynssz import ConfigurationError
from dynssz.config import EngineSettings, SpecPreset, create_engine, load_settings, load_spec_file
from ssz_fixtures import HistoricalRoots


class TestSpecFiles(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w") as f:
            f.write(content if isinstance(content, str) else json.dumps(content))
        return path

    def test_flat_preset(self):
        """Numeric values are kept, other config entries are skipped"""
        path = self.write("flat.json", {
            "SLOTS_PER_EPOCH": 8,
            "MAX_VALIDATORS_PER_COMMITTEE": "2048",
            "GENESIS_FORK_VERSION": "0x00000001",
            "CONFIG_NAME": "minimal",
        })
        self.assertEqual(load_spec_file(path), {"SLOTS_PER_EPOCH": 8, "MAX_VALIDATORS_PER_COMMITTEE": 2048})

    def test_named_preset(self):
        path = self.write("minimal.json", {"preset": "minimal", "values": {"SLOTS_PER_HISTORICAL_ROOT": 64}})
        self.assertEqual(load_spec_file(path), {"SLOTS_PER_HISTORICAL_ROOT": 64})

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_spec_file(os.path.join(self.tmpdir.name, "missing.json"))

    def test_invalid_json(self):
        with self.assertRaises(ConfigurationError):
            load_spec_file(self.write("broken.json", "{not json"))

    def test_non_object(self):
        with self.assertRaises(ConfigurationError):
            load_spec_file(self.write("list.json", [1, 2, 3]))

    def test_preset_model(self):
        preset = SpecPreset(preset="custom", values={"A": "16", "B": True, "C": 4})
        self.assertEqual(preset.values, {"A": 16, "C": 4})


class TestEngineSettings(unittest.TestCase):

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()
        self.assertFalse(settings.no_fast_ssz)
        self.assertEqual(settings.spec_files, [])
        self.assertEqual(settings.log_level, "WARNING")

    def test_environment(self):
        env = {
            "DYNSSZ_NO_FASTSSZ": "true",
            "DYNSSZ_SPEC_FILE": os.pathsep.join(["base.json", "override.json"]),
            "DYNSSZ_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            settings = load_settings()
        self.assertTrue(settings.no_fast_ssz)
        self.assertEqual(settings.spec_files, ["base.json", "override.json"])
        self.assertEqual(settings.log_level, "DEBUG")

    def test_invalid_log_level(self):
        with patch.dict(os.environ, {"DYNSSZ_LOG_LEVEL": "LOUD"}):
            with self.assertRaises(ConfigurationError):
                load_settings()


class TestCreateEngine(unittest.TestCase):

    def test_files_then_extra_specs(self):
        """Later preset files and extra entries override earlier ones"""
        with tempfile.TemporaryDirectory() as tmpdir:
            base = os.path.join(tmpdir, "base.json")
            override = os.path.join(tmpdir, "override.json")
            with open(base, "w") as f:
                json.dump({"SLOTS_PER_HISTORICAL_ROOT": 8192, "MAX_HISTORY": 4}, f)
            with open(override, "w") as f:
                json.dump({"SLOTS_PER_HISTORICAL_ROOT": 64}, f)

            engine = create_engine(
                EngineSettings(spec_files=[base, override], no_fast_ssz=True),
                extra_specs=[{"MAX_HISTORY": 2}],
            )

        self.assertTrue(engine.no_fast_ssz)
        self.assertEqual(engine.registry.lookup("SLOTS_PER_HISTORICAL_ROOT"), (64, True))
        self.assertEqual(engine.registry.lookup("MAX_HISTORY"), (2, True))
        self.assertEqual(engine.get_type_descriptor(HistoricalRoots).fixed_size, 8 + 64 * 32)

    def test_invalid_file_surfaces_as_configuration_error(self):
        settings = EngineSettings(spec_files=[os.path.join(tempfile.gettempdir(), "no-such-preset.json")])
        with self.assertRaises(ConfigurationError):
            create_engine(settings)


if __name__ == '__main__':
    unittest.main()

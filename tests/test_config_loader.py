"""
Unit Tests for the engine config loader

Tests YAML loading, mtime-based caching and validation.
"""

import sys
import os
import time
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wallgeom import config_loader
from wallgeom.config_loader import EngineConfig, load_engine_config
from wallgeom.errors import InputContractError


class TestEngineConfig(unittest.TestCase):
    """Test EngineConfig validation and conversion."""

    def test_defaults(self):
        cfg = EngineConfig()
        self.assertEqual(cfg.min_scale, 1.0)
        self.assertEqual(cfg.max_scale, 4.0)
        self.assertEqual(cfg.cover_factor, 0.9)
        self.assertEqual(cfg.circle_segments, 12)

    def test_from_sectioned_dict(self):
        cfg = EngineConfig.from_dict({
            "viewport": {"max_scale": 6.0},
            "hit_test": {"min_pixel_radius": 15},
        })
        self.assertEqual(cfg.max_scale, 6.0)
        self.assertEqual(cfg.min_pixel_radius, 15)

    def test_from_flat_dict_roundtrip(self):
        cfg = EngineConfig(overscroll=25.0)
        self.assertEqual(EngineConfig.from_dict(cfg.to_dict()), cfg)

    def test_unknown_key(self):
        with self.assertRaises(InputContractError):
            EngineConfig.from_dict({"viewport": {"zoom_speed": 2}})

    def test_invalid_scale_bounds(self):
        with self.assertRaises(InputContractError):
            EngineConfig(min_scale=3.0, max_scale=2.0)
        with self.assertRaises(InputContractError):
            EngineConfig(min_scale=0.0)

    def test_invalid_hold_radii(self):
        with self.assertRaises(InputContractError):
            EngineConfig(default_hold_radius=0.5)


class TestLoadEngineConfig(unittest.TestCase):
    """Test load_engine_config."""

    def setUp(self):
        config_loader.clear_cache()

    def test_packaged_defaults(self):
        self.assertEqual(load_engine_config(), EngineConfig())

    def test_missing_file_uses_defaults(self):
        self.assertEqual(load_engine_config("/nonexistent/engine.yaml"), EngineConfig())

    def test_cached_until_mtime_changes(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("viewport:\n  max_scale: 5.0\n")
            temp_path = f.name

        try:
            first = load_engine_config(temp_path)
            self.assertEqual(first.max_scale, 5.0)
            self.assertIs(load_engine_config(temp_path), first)

            with open(temp_path, 'w') as f:
                f.write("viewport:\n  max_scale: 8.0\n")
            future = time.time() + 10
            os.utime(temp_path, (future, future))

            reloaded = load_engine_config(temp_path)
            self.assertEqual(reloaded.max_scale, 8.0)
        finally:
            os.unlink(temp_path)

    def test_empty_file_gives_defaults(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            temp_path = f.name

        try:
            self.assertEqual(load_engine_config(temp_path), EngineConfig())
        finally:
            os.unlink(temp_path)


if __name__ == '__main__':
    unittest.main(verbosity=2)

"""
Engine configuration with mtime-based Hot-Reload.
src/wallgeom/config_loader.py

Loads viewport, hit-test, outline and hold limits from a YAML file
(default: the packaged config/engine_config.yaml). Caches by file mtime;
the file is re-parsed only when it changes on disk.
"""

import os
import logging
from dataclasses import dataclass, asdict, fields

import yaml

from .errors import InputContractError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config", "engine_config.yaml")


@dataclass(frozen=True)
class EngineConfig:
    """Tunable numbers for the geometry engine."""
    min_scale: float = 1.0
    max_scale: float = 4.0
    cover_factor: float = 0.9
    overscroll: float = 0.0
    min_pixel_radius: float = 12.0
    hull_point_radius: float = 0.02
    two_point_thickness: float = 0.01
    circle_segments: int = 12
    default_hold_radius: float = 0.02
    min_hold_radius: float = 0.005
    max_hold_radius: float = 0.1

    def __post_init__(self):
        if self.min_scale <= 0 or self.max_scale < self.min_scale:
            raise InputContractError(
                f"Invalid scale bounds: min_scale={self.min_scale}, max_scale={self.max_scale}")
        if self.cover_factor <= 0:
            raise InputContractError(f"cover_factor must be > 0, got {self.cover_factor}")
        if self.overscroll < 0 or self.min_pixel_radius < 0:
            raise InputContractError("overscroll and min_pixel_radius must be >= 0")
        if self.hull_point_radius <= 0 or self.two_point_thickness <= 0:
            raise InputContractError("hull_point_radius and two_point_thickness must be > 0")
        if self.circle_segments < 3:
            raise InputContractError(f"circle_segments must be >= 3, got {self.circle_segments}")
        if not (0 < self.min_hold_radius <= self.default_hold_radius <= self.max_hold_radius):
            raise InputContractError(
                "Hold radii must satisfy 0 < min_hold_radius <= default_hold_radius <= max_hold_radius")

    @classmethod
    def from_dict(cls, data: dict) -> 'EngineConfig':
        """Build from a flat dict or the sectioned YAML layout."""
        flat = {}
        for key, value in (data or {}).items():
            if isinstance(value, dict):
                flat.update(value)
            else:
                flat[key] = value

        known = {f.name for f in fields(cls)}
        unknown = set(flat) - known
        if unknown:
            raise InputContractError(f"Unknown config keys: {sorted(unknown)}")

        if "circle_segments" in flat:
            flat["circle_segments"] = int(flat["circle_segments"])
        return cls(**flat)

    def to_dict(self) -> dict:
        return asdict(self)


# ─────────────────────────────────────────────────────────────────────────────
# Cache storage
# ─────────────────────────────────────────────────────────────────────────────

_cache = {}  # path → { "mtime": float, "config": EngineConfig }


def load_engine_config(path=None):
    """
    Load EngineConfig from a YAML file, reusing the cached value while the
    file's mtime is unchanged.

    A missing file falls back to defaults. Invalid contents raise
    InputContractError.
    """
    filepath = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(filepath):
        logger.error(f"[ConfigLoader] File not found: {filepath}, using defaults")
        return EngineConfig()

    mtime = os.path.getmtime(filepath)
    cached = _cache.get(filepath)

    if cached and cached["mtime"] == mtime:
        return cached["config"]

    with open(filepath, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    config = EngineConfig.from_dict(data)

    basename = os.path.basename(filepath)
    if cached:
        logger.info(f"[ConfigLoader] Reloaded: {basename}")
    else:
        logger.info(f"[ConfigLoader] Loaded: {basename}")

    _cache[filepath] = {"mtime": mtime, "config": config}
    return config


def clear_cache():
    """Force cache invalidation. Next load re-reads from disk."""
    _cache.clear()

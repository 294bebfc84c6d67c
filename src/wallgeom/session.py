"""
Wall Session — one editing/viewing session over a wall image.

Explicit per-session object: constructed by the screen that shows a wall,
passed to whatever needs the viewport, discarded on unmount. It holds no hold
data of its own; holds come in from the persistence layer and placement/move
results go back out as plain {x, y, radius} dicts for the caller to store.

Gesture events are plain dicts:
    {"type": "pan",   "deltaX": ..., "deltaY": ...}
    {"type": "pinch", "scale": ..., "focalX": ..., "focalY": ...}
    {"type": "tap",   "screenX": ..., "screenY": ...}
"""

import logging
from typing import Dict, List, Optional, Sequence

from .config_loader import EngineConfig
from .coordinate_mapper import ViewportState, normalized_to_screen, screen_to_normalized
from .errors import InputContractError
from .hit_test import closest_hold, get_holds_at_point
from .holds import HOLD_ROLE_COLORS, Hold, HoldRole, as_hold
from .primitives import Size, Vec2, as_vec2, clamp, clamp01
from .viewport import ViewportTransform

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    "pan": ("deltaX", "deltaY"),
    "pinch": ("scale", "focalX", "focalY"),
    "tap": ("screenX", "screenY"),
}


class WallSession:
    """Viewport + hold geometry queries for one wall view."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 container_size=None, content_size=None):
        self.config = config or EngineConfig()
        self.viewport = ViewportTransform(self.config, container_size, content_size)

    @property
    def state(self) -> ViewportState:
        return self.viewport.state

    @property
    def _content(self) -> Size:
        # Before layout, normalized coordinates map 1:1 onto content
        return self.viewport.content_size if self.viewport.has_layout else Size(1.0, 1.0)

    # ─────────────────────────────────────────────────────────────────────
    # Gesture events
    # ─────────────────────────────────────────────────────────────────────

    def handle_event(self, event: Dict, holds: Sequence = ()):
        """
        Apply one gesture event.

        Returns:
            pan / pinch: the updated ViewportState
            tap: list of holds under the tap, in input order
        """
        kind = event.get("type")
        if kind not in REQUIRED_FIELDS:
            raise InputContractError(f"Unknown gesture event type: {kind!r}")
        missing = [k for k in REQUIRED_FIELDS[kind] if event.get(k) is None]
        if missing:
            raise InputContractError(f"'{kind}' event missing fields: {missing}")

        if kind == "pan":
            return self.viewport.pan(float(event["deltaX"]), float(event["deltaY"]))
        if kind == "pinch":
            return self.viewport.zoom(float(event["scale"]),
                                      float(event["focalX"]), float(event["focalY"]))
        return self.holds_at(Vec2(float(event["screenX"]), float(event["screenY"])), holds)

    def handle_events(self, events: Sequence[Dict]) -> ViewportState:
        """
        Apply one gesture frame's pan / pinch events in order.

        A failure restores the pre-frame state. Taps are queries, not state
        updates, and go through handle_event() with the hold list instead.
        """
        taps = [i for i, e in enumerate(events) if e.get("type") == "tap"]
        if taps:
            raise InputContractError(f"Tap events cannot be batched in a gesture frame (index {taps})")

        self.viewport.begin_gesture()
        try:
            for event in events:
                self.handle_event(event)
        except Exception:
            self.viewport.cancel_gesture()
            raise
        return self.viewport.end_gesture()

    # ─────────────────────────────────────────────────────────────────────
    # Hold queries
    # ─────────────────────────────────────────────────────────────────────

    def holds_at(self, screen_point, holds: Sequence) -> List:
        return get_holds_at_point(screen_point, holds, self.state,
                                  self.config.min_pixel_radius, self._content)

    def select_hold(self, screen_point, holds: Sequence):
        """Closest hold under the point, or None."""
        return closest_hold(screen_point, holds, self.state,
                            self.config.min_pixel_radius, self._content)

    def place_hold(self, screen_point, role: str = HoldRole.ANY) -> Optional[Dict]:
        """
        Placement for a new hold at a screen point.

        Returns None when the point is outside the wall image.
        """
        p = screen_to_normalized(as_vec2(screen_point), self.state, self._content)
        if not (0.0 <= p.x <= 1.0 and 0.0 <= p.y <= 1.0):
            logger.warning(f"[WallSession] Hold position out of bounds: ({p.x:.3f}, {p.y:.3f})")
            return None
        return {
            "x": p.x,
            "y": p.y,
            "radius": self.config.default_hold_radius,
            "role": role,
            "color": HOLD_ROLE_COLORS.get(role),
        }

    def move_hold(self, hold: Hold, screen_point, radius: Optional[float] = None) -> Dict:
        """New {x, y, radius} for a dragged/resized hold, clamped to the wall."""
        p = screen_to_normalized(as_vec2(screen_point), self.state, self._content)
        r = as_hold(hold).radius if radius is None else radius
        return {
            "x": clamp01(p.x),
            "y": clamp01(p.y),
            "radius": clamp(r, self.config.min_hold_radius, self.config.max_hold_radius),
        }

    def hold_screen_position(self, hold: Hold) -> Vec2:
        return normalized_to_screen(as_hold(hold).center, self.state, self._content)

    def hold_screen_radius(self, hold: Hold) -> float:
        return self.viewport.screen_radius(as_hold(hold).radius)

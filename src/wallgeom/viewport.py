"""
Viewport Transform — interactive pan / zoom state for one wall view.

Owns a single ViewportState {scale, tx, ty} mapping content pixels to screen
pixels. Three kinds of interaction drive it:
- fit:  seed scale/offset from container and content sizes
- pan:  translate, then clamp
- zoom: scale about a screen-space focal point, then clamp

The state is replaced as a whole on every update, so a reader always sees a
consistent triple even in the middle of a multi-event gesture.
"""

import logging
from typing import Optional

from .config_loader import EngineConfig
from .coordinate_mapper import (
    ViewportState,
    canonical_to_screen,
    screen_to_canonical,
)
from .errors import InputContractError
from .hit_test import screen_radius
from .primitives import Size, Vec2, as_size, clamp

logger = logging.getLogger(__name__)

FIT_MODES = ("fit", "cover")


def compute_fit(container, content, cover_factor: float = 0.9, mode: str = "fit") -> ViewportState:
    """
    Scale and center content inside a container.

    Args:
        container: container Size (or (w, h) / mapping)
        content: content Size
        cover_factor: multiplier on the natural scale (0.9 = 10% margin)
        mode: "fit" uses min(ratio_x, ratio_y), "cover" uses max(...)

    Returns:
        ViewportState with content centered

    Raises:
        InputContractError: on empty sizes or unknown mode
    """
    container = as_size(container)
    content = as_size(content)
    if container.is_empty or content.is_empty:
        raise InputContractError(
            f"Sizes must be positive: container={container.to_dict()}, content={content.to_dict()}")
    if mode not in FIT_MODES:
        raise InputContractError(f"Unknown fit mode '{mode}', expected one of {FIT_MODES}")

    ratio_x = container.width / content.width
    ratio_y = container.height / content.height
    natural = min(ratio_x, ratio_y) if mode == "fit" else max(ratio_x, ratio_y)
    scale = natural * cover_factor

    return ViewportState(
        scale=scale,
        tx=(container.width - content.width * scale) / 2,
        ty=(container.height - content.height * scale) / 2,
    )


def _clamp_axis(offset: float, container: float, scaled: float, overscroll: float) -> float:
    """
    Clamp one translation axis so content and container always overlap.

    Allowed range is centered on the "content centered" offset with half-width
    |scaled - container| / 2, i.e. [container - scaled, 0] when the content is
    larger and [0, container - scaled] when it is smaller. Overscroll widens the
    range but is capped at half the smaller extent.
    """
    center = (container - scaled) / 2
    slack = abs(scaled - container) / 2
    margin = min(overscroll, 0.5 * min(scaled, container))
    return clamp(offset, center - slack - margin, center + slack + margin)


class ViewportTransform:
    """
    Pan/zoom state machine for one wall-viewing session.

    Scale bounds come from EngineConfig (min_scale..max_scale). After a fit the
    fit scale widens those bounds when it falls outside them, until the next
    resize.
    """

    def __init__(self,
                 config: Optional[EngineConfig] = None,
                 container_size=None,
                 content_size=None,
                 fit_mode: str = "fit"):
        self.config = config or EngineConfig()
        self.fit_mode = fit_mode
        self._state = ViewportState.identity()
        self._container = Size(0.0, 0.0)
        self._content = Size(0.0, 0.0)
        self._fit_scale = None
        self._gesture_snapshot = None

        if container_size is not None and content_size is not None:
            self.fit_to_container(container_size, content_size)
        elif container_size is not None:
            self._container = as_size(container_size)
        elif content_size is not None:
            self._content = as_size(content_size)

    # ─────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ViewportState:
        return self._state

    @property
    def container_size(self) -> Size:
        return self._container

    @property
    def content_size(self) -> Size:
        return self._content

    @property
    def has_layout(self) -> bool:
        return not (self._container.is_empty or self._content.is_empty)

    @property
    def effective_min_scale(self) -> float:
        if self._fit_scale is None:
            return self.config.min_scale
        return min(self.config.min_scale, self._fit_scale)

    @property
    def effective_max_scale(self) -> float:
        if self._fit_scale is None:
            return self.config.max_scale
        return max(self.config.max_scale, self._fit_scale)

    # ─────────────────────────────────────────────────────────────────────
    # Fit / resize
    # ─────────────────────────────────────────────────────────────────────

    def fit_to_container(self, container_size, content_size) -> ViewportState:
        """
        Re-seed the state so the content is centered in the container.

        Zero or negative sizes (common while a view is mounting) reset to the
        identity state instead of raising.
        """
        self._container = as_size(container_size)
        self._content = as_size(content_size)

        if not self.has_layout:
            logger.warning(
                f"[Viewport] Empty layout (container={self._container.to_dict()}, "
                f"content={self._content.to_dict()}), resetting to identity")
            self._fit_scale = None
            self._state = ViewportState.identity()
            return self._state

        self._state = compute_fit(self._container, self._content,
                                  self.config.cover_factor, self.fit_mode)
        self._fit_scale = self._state.scale
        logger.debug(f"[Viewport] Fit: {self._state.to_dict()}")
        return self._state

    def set_container_size(self, container_size) -> ViewportState:
        return self.fit_to_container(container_size, self._content)

    def set_content_size(self, content_size) -> ViewportState:
        return self.fit_to_container(self._container, content_size)

    def reset_transform(self) -> ViewportState:
        """Fit again with the last known sizes."""
        return self.fit_to_container(self._container, self._content)

    # ─────────────────────────────────────────────────────────────────────
    # Pan / zoom
    # ─────────────────────────────────────────────────────────────────────

    def pan(self, delta_x: float, delta_y: float) -> ViewportState:
        s = self._state
        self._state = self._clamped(s.merged(tx=s.tx + delta_x, ty=s.ty + delta_y))
        return self._state

    def zoom(self, scale_factor: float, focal_x: float, focal_y: float) -> ViewportState:
        """
        Zoom by scale_factor keeping the screen point (focal_x, focal_y) fixed.

        No-op when the clamped scale equals the current scale.
        """
        if scale_factor <= 0:
            raise InputContractError(f"scale_factor must be > 0, got {scale_factor}")

        s = self._state
        new_scale = clamp(s.scale * scale_factor, self.effective_min_scale, self.effective_max_scale)
        if new_scale == s.scale:
            return s

        ratio = new_scale / s.scale
        self._state = self._clamped(ViewportState(
            scale=new_scale,
            tx=focal_x - (focal_x - s.tx) * ratio,
            ty=focal_y - (focal_y - s.ty) * ratio,
        ))
        return self._state

    def set_state(self, scale: Optional[float] = None,
                  tx: Optional[float] = None,
                  ty: Optional[float] = None) -> ViewportState:
        """Merge the given fields into the state, then clamp scale and offset."""
        s = self._state
        new_scale = s.scale if scale is None else scale
        new_scale = clamp(new_scale, self.effective_min_scale, self.effective_max_scale)
        self._state = self._clamped(ViewportState(
            scale=new_scale,
            tx=s.tx if tx is None else tx,
            ty=s.ty if ty is None else ty,
        ))
        return self._state

    def clamp_state(self, state: ViewportState) -> ViewportState:
        """Bounds clamp: the visible container always intersects the content."""
        return self._clamped(state)

    def _clamped(self, state: ViewportState) -> ViewportState:
        if not self.has_layout:
            return state
        overscroll = self.config.overscroll
        return state.merged(
            tx=_clamp_axis(state.tx, self._container.width,
                           self._content.width * state.scale, overscroll),
            ty=_clamp_axis(state.ty, self._container.height,
                           self._content.height * state.scale, overscroll),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Gesture frames
    # ─────────────────────────────────────────────────────────────────────

    @property
    def in_gesture(self) -> bool:
        return self._gesture_snapshot is not None

    def begin_gesture(self) -> None:
        if self.in_gesture:
            raise InputContractError("Gesture already in progress")
        self._gesture_snapshot = self._state
        logger.debug(f"[Viewport] Gesture begin at {self._state.to_dict()}")

    def end_gesture(self) -> ViewportState:
        self._gesture_snapshot = None
        logger.debug(f"[Viewport] Gesture end at {self._state.to_dict()}")
        return self._state

    def cancel_gesture(self) -> ViewportState:
        """Restore the state captured by begin_gesture()."""
        if self._gesture_snapshot is not None:
            self._state = self._gesture_snapshot
            self._gesture_snapshot = None
            logger.debug("[Viewport] Gesture cancelled")
        return self._state

    # ─────────────────────────────────────────────────────────────────────
    # Conversions
    # ─────────────────────────────────────────────────────────────────────

    def screen_to_canonical(self, p: Vec2) -> Vec2:
        return screen_to_canonical(p, self._state)

    def canonical_to_screen(self, p: Vec2) -> Vec2:
        return canonical_to_screen(p, self._state)

    def screen_radius(self, radius: float) -> float:
        """Tap/render radius in pixels for a normalized hold radius."""
        content_width = self._content.width if self.has_layout else 1.0
        return screen_radius(radius, self._state.scale, self.config.min_pixel_radius, content_width)

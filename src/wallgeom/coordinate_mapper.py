"""
Coordinate Mapper

Converts between:
- Screen pixels (what the gesture layer reports)
- Content pixels (the wall image, before scaling)
- Normalized canonical coordinates (0-1 on both axes, where holds live)

The viewport is an affine map: screen = content * scale + (tx, ty).
"""

from dataclasses import dataclass, replace
from typing import Dict

from .primitives import Vec2, Size, clamp01


@dataclass(frozen=True)
class ViewportState:
    """Immutable {scale, tx, ty} triple."""
    scale: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def identity(cls) -> 'ViewportState':
        return cls(1.0, 0.0, 0.0)

    def merged(self, **changes) -> 'ViewportState':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return {"scale": self.scale, "tx": self.tx, "ty": self.ty}


def screen_to_canonical(p: Vec2, v: ViewportState) -> Vec2:
    """Screen pixels → content coordinates. Caller guarantees v.scale > 0."""
    return Vec2((p.x - v.tx) / v.scale, (p.y - v.ty) / v.scale)


def canonical_to_screen(p: Vec2, v: ViewportState) -> Vec2:
    """Content coordinates → screen pixels."""
    return Vec2(p.x * v.scale + v.tx, p.y * v.scale + v.ty)


def normalize(p: Vec2, content: Size) -> Vec2:
    """Content pixels → normalized 0-1 coordinates."""
    return Vec2(p.x / content.width, p.y / content.height)


def denormalize(p: Vec2, content: Size) -> Vec2:
    """Normalized 0-1 coordinates → content pixels."""
    return Vec2(p.x * content.width, p.y * content.height)


def normalized_to_screen(p: Vec2, v: ViewportState, content: Size) -> Vec2:
    return canonical_to_screen(denormalize(p, content), v)


def screen_to_normalized(p: Vec2, v: ViewportState, content: Size) -> Vec2:
    return normalize(screen_to_canonical(p, v), content)


def interpolate_state(a: ViewportState, b: ViewportState, progress: float) -> ViewportState:
    """Linear blend between two states, used to animate reset/fit transitions."""
    t = clamp01(progress)
    return ViewportState(
        scale=a.scale + (b.scale - a.scale) * t,
        tx=a.tx + (b.tx - a.tx) * t,
        ty=a.ty + (b.ty - a.ty) * t,
    )


def content_bounds(content: Size, v: ViewportState) -> Dict[str, float]:
    """On-screen rectangle covered by the scaled content."""
    return {
        "x": v.tx,
        "y": v.ty,
        "width": content.width * v.scale,
        "height": content.height * v.scale,
    }


def visible_content_rect(v: ViewportState, container: Size, content: Size) -> Dict[str, float]:
    """
    Part of the content (in content pixels) currently visible in the container.

    Width/height are 0 when the content is entirely off-screen.
    """
    left = max(0.0, -v.tx / v.scale)
    top = max(0.0, -v.ty / v.scale)
    right = min(content.width, (container.width - v.tx) / v.scale)
    bottom = min(content.height, (container.height - v.ty) / v.scale)

    return {
        "x": left,
        "y": top,
        "width": max(0.0, right - left),
        "height": max(0.0, bottom - top),
    }

"""
Hold records as read from the persistence layer.

The engine only reads id/position/radius; any move or resize is returned as a
new value for the caller to persist.
"""

from dataclasses import dataclass, replace, asdict
from typing import Mapping, Optional

from .errors import InputContractError
from .primitives import Vec2


class HoldRole:
    START = "start"
    FINISH = "finish"
    HAND = "hand"
    FOOT = "foot"
    ANY = "any"

    ALL = (START, FINISH, HAND, FOOT, ANY)


HOLD_ROLE_COLORS = {
    HoldRole.START: "#22c55e",
    HoldRole.FINISH: "#ef4444",
    HoldRole.HAND: "#3b82f6",
    HoldRole.FOOT: "#eab308",
    HoldRole.ANY: "#a855f7",
}


@dataclass(frozen=True)
class Hold:
    """A climbing hold in normalized wall coordinates."""
    id: str
    x: float  # 0-1
    y: float  # 0-1
    radius: float  # fraction of canonical width
    role: str = HoldRole.ANY
    color: Optional[str] = None
    cluster_id: Optional[str] = None

    @property
    def center(self) -> Vec2:
        return Vec2(self.x, self.y)

    @classmethod
    def from_dict(cls, data: dict) -> 'Hold':
        """Accepts stored records using either 'radius' or 'size', 'clusterId' or 'cluster_id'."""
        role = data.get("role", HoldRole.ANY)
        radius = data.get("radius", data.get("size"))
        return cls(
            id=str(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            radius=float(radius) if radius is not None else 0.0,
            role=role,
            color=data.get("color", HOLD_ROLE_COLORS.get(role)),
            cluster_id=data.get("clusterId", data.get("cluster_id")),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def with_position(self, x: float, y: float, radius: Optional[float] = None) -> 'Hold':
        return replace(self, x=x, y=y, radius=self.radius if radius is None else radius)


def as_hold(hold) -> Hold:
    """Accept a Hold or a stored record (mapping) as read from persistence."""
    if isinstance(hold, Hold):
        return hold
    if isinstance(hold, Mapping):
        return Hold.from_dict(hold)
    raise InputContractError(f"Expected a Hold or a mapping, got {type(hold).__name__}")

# Error types for the wall geometry engine.
# All errors are local to a single call and never leave a ViewportTransform
# in a partially updated state.


class WallGeometryError(ValueError):
    """Base class for every error raised by wallgeom."""


class GeometryError(WallGeometryError):
    """Degenerate geometry: singular matrix, collinear correspondences,
    or a point mapped to infinity."""


class InputContractError(WallGeometryError):
    """Caller passed input that violates an operation's contract
    (wrong point count, non-positive sizes, malformed events)."""

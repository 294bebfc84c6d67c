"""
Wall Geometry Engine for climbing-wall maps

This package provides:
- Vec2 / Size / Matrix3x3 primitives
- Coordinate mapping between screen pixels and canonical wall coordinates
- ViewportTransform: pan / focal-point zoom / fit with bounds clamping
- Homography: 4-point DLT solve, apply, invert, wall rectification
- Hold outlines: convex hull with degenerate-set shapes
- Hit testing of holds under a tap
- WallSession: per-view session object consuming gesture events
"""

_EXPORTS = {
    'Vec2': 'primitives',
    'Size': 'primitives',
    'GeometryError': 'errors',
    'InputContractError': 'errors',
    'WallGeometryError': 'errors',
    'EngineConfig': 'config_loader',
    'load_engine_config': 'config_loader',
    'ViewportState': 'coordinate_mapper',
    'screen_to_canonical': 'coordinate_mapper',
    'canonical_to_screen': 'coordinate_mapper',
    'ViewportTransform': 'viewport',
    'compute_fit': 'viewport',
    'Homography': 'homography',
    'compute_homography': 'homography',
    'apply_homography': 'homography',
    'invert_homography': 'homography',
    'create_rectify_homography': 'homography',
    'convex_hull': 'outline',
    'create_hold_outline': 'outline',
    'create_cluster_outline': 'outline',
    'Hold': 'holds',
    'HoldRole': 'holds',
    'get_holds_at_point': 'hit_test',
    'WallSession': 'session',
}


# Lazy imports so numpy is only loaded when the homography engine is used
def __getattr__(name):
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'wallgeom' has no attribute '{name}'")
    from importlib import import_module
    module = import_module(f".{module_name}", __name__)
    return getattr(module, name)


__all__ = list(_EXPORTS)

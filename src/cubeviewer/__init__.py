"""
cubeviewer - Interactive slice and spectrum viewer for 3D data cubes
(FITS, HDF5 or numpy arrays).
"""

__version__ = "0.1.0"
__license__ = "MIT"


import importlib

from .geometry import (
    extract_slice,
    extract_spectrum,
    slice_coord_to_voxel,
    voxel_to_slice_coord,
)
from .utils import (
    ScaleMode,
    apply_scale,
    build_frames,
    robust_extrema,
)

__submodules__ = {
    "geometry",
    "utils",
    "limits",
    "session",
    "parameters",
    "io",
    "simulation",
    "plot",
    "export",
    "interactive",
}

__lazy_attributes__ = {
    # classes
    "ColorLimitsPolicy": "limits",
    "LimitsParseFailure": "limits",
    "ViewerSession": "session",
    "SessionSnapshot": "session",
    "AnimationExporter": "export",
    "Viewer": "interactive",
    # functions
    "load_cube": "io",
    "update_plot_params": "plot",
}
__all__ = [
    "extract_slice", "extract_spectrum", "slice_coord_to_voxel",
    "voxel_to_slice_coord", "ScaleMode", "apply_scale", "build_frames",
    "robust_extrema"
]
__all__ += list(__submodules__) + list(__lazy_attributes__)


def __getattr__(name):
    if name in __submodules__:
        return importlib.import_module(f"{__name__}.{name}")

    # classes and functions come with their submodule, on first access
    if name in __lazy_attributes__:
        module = importlib.import_module(
            f"{__name__}.{__lazy_attributes__[name]}"
        )
        return getattr(module, name)

    raise AttributeError(f"module {__name__} has no attribute {name}.")

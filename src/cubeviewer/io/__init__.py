from .loader import (
    cube_name,
    load_cube,
    load_fits,
    load_h5,
    load_npy,
    write_fits,
)

__all__ = [
    "cube_name",
    "load_cube",
    "load_fits",
    "load_h5",
    "load_npy",
    "write_fits",
]

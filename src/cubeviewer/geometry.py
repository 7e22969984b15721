"""
Mapping between the 3D voxel space of a cube and the 2D space of the
slice currently displayed, plus the slice and spectrum extraction built
on top of it.

All indices handled here are 1-based: axis in {1, 2, 3}, slice index in
[1, extent], voxel components in [1, n_dim]. Conversion to numpy's
0-based indexing only happens when the array is accessed.
"""

import numpy as np

VALID_AXES = (1, 2, 3)

# display dtype of every extracted array
DISPLAY_DTYPE = np.float32

# Planes are given with the indexing convention: for a slice taken
# along "axis", the (u, v) coordinates are the voxel components listed
# in "plane" (1-based dims), u being the row and v the column.
SLICE_PLANE_PARAMETERS = {
    1: {"plane": (2, 3), "label": "dim1 (x)"},
    2: {"plane": (1, 3), "label": "dim2 (y)"},
    3: {"plane": (1, 2), "label": "dim3 (z)"},
}


class InvalidAxisError(ValueError):
    """Raised when a slice axis is not one of 1, 2 or 3."""


class IndexOutOfRangeError(IndexError):
    """Raised when a slice or voxel index falls outside the cube."""


def check_axis(axis: int) -> int:
    """
    Make sure the provided axis is a valid slicing axis.

    Args:
        axis (int): the axis to check.

    Raises:
        InvalidAxisError: if axis is not 1, 2 or 3.

    Returns:
        int: the axis as a python int.
    """
    if isinstance(axis, bool) or axis not in VALID_AXES:
        raise InvalidAxisError(
            f"Invalid slice axis ({axis}), must be one of {VALID_AXES}."
        )
    return int(axis)


def clamp_index(index: int, extent: int) -> int:
    """Clamp a 1-based index into [1, extent]."""
    return int(min(max(int(index), 1), extent))


def clamp_voxel(voxel: tuple, shape: tuple) -> tuple[int, int, int]:
    """Clamp each voxel component into the corresponding cube dim."""
    return tuple(clamp_index(c, n) for c, n in zip(voxel, shape))


def voxel_to_slice_coord(
        i: int, j: int, k: int, axis: int
) -> tuple[int, int]:
    """
    Map 3D voxel indices to the (row, column) position in the slice
    taken along the given axis.

    Args:
        i (int): voxel index along dim 1.
        j (int): voxel index along dim 2.
        k (int): voxel index along dim 3.
        axis (int): the slicing axis (assumed valid).

    Returns:
        tuple[int, int]: the (u, v) slice coordinates.
    """
    if axis == 1:
        return j, k
    if axis == 2:
        return i, k
    return i, j


def slice_coord_to_voxel(
        u: int, v: int, axis: int, index: int
) -> tuple[int, int, int]:
    """
    Inverse of voxel_to_slice_coord: slice coordinates plus the slice
    index give back the voxel.

    Args:
        u (int): row in the slice.
        v (int): column in the slice.
        axis (int): the slicing axis (assumed valid).
        index (int): the slice index along axis.

    Returns:
        tuple[int, int, int]: the (i, j, k) voxel indices.
    """
    if axis == 1:
        return index, u, v
    if axis == 2:
        return u, index, v
    return u, v, index


def voxel_component(voxel: tuple, axis: int) -> int:
    """Return the component of the voxel along the slicing axis."""
    return voxel[axis - 1]


def _check_cube(cube: np.ndarray) -> None:
    if np.ndim(cube) != 3:
        raise ValueError(
            f"A 3D cube is required, got {np.ndim(cube)} dimension(s)."
        )


def _check_index(index: int, extent: int, name: str = "index") -> int:
    if not 1 <= index <= extent:
        raise IndexOutOfRangeError(
            f"{name} ({index}) out of range [1, {extent}]."
        )
    return int(index)


def extract_slice(cube: np.ndarray, axis: int, index: int) -> np.ndarray:
    """
    Extract the 2D slice of the cube at the given index along axis. The
    returned array rows and columns follow the (u, v) ordering of
    voxel_to_slice_coord for the same axis.

    Args:
        cube (np.ndarray): the 3D cube.
        axis (int): the slicing axis, 1, 2 or 3.
        index (int): the 1-based slice index. The caller is expected to
            clamp it beforehand (see clamp_index).

    Raises:
        InvalidAxisError: if axis is not 1, 2 or 3.
        IndexOutOfRangeError: if index is not in [1, extent].

    Returns:
        np.ndarray: a float32 copy of the slice.
    """
    _check_cube(cube)
    axis = check_axis(axis)
    index = _check_index(index, cube.shape[axis - 1], "slice index")
    return np.take(cube, index - 1, axis=axis - 1).astype(DISPLAY_DTYPE)


def extract_spectrum(
        cube: np.ndarray, voxel: tuple, axis: int
) -> tuple[np.ndarray, np.ndarray]:
    """
    Extract the 1D trace going through the voxel along the slicing axis.

    Args:
        cube (np.ndarray): the 3D cube.
        voxel (tuple): the 1-based (i, j, k) voxel.
        axis (int): the slicing axis, 1, 2 or 3.

    Raises:
        InvalidAxisError: if axis is not 1, 2 or 3.
        IndexOutOfRangeError: if a voxel component is out of the cube.

    Returns:
        tuple[np.ndarray, np.ndarray]: the positions (1 to extent) and
            the float32 values of the trace.
    """
    _check_cube(cube)
    axis = check_axis(axis)
    i, j, k = (
        _check_index(c, n, f"voxel dim{d + 1}")
        for d, (c, n) in enumerate(zip(voxel, cube.shape))
    )
    if axis == 1:
        values = cube[:, j - 1, k - 1]
    elif axis == 2:
        values = cube[i - 1, :, k - 1]
    else:
        values = cube[i - 1, j - 1, :]
    positions = np.arange(1, cube.shape[axis - 1] + 1)
    return positions, np.asarray(values, dtype=DISPLAY_DTYPE)

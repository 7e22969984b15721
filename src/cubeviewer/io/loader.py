"""
Loading of 3D cubes from FITS, HDF5/CXI and NumPy files.

FITS axes are returned in FITS order, i.e. dim 1 is NAXIS1 (x), dim 2
is NAXIS2 (y) and dim 3 is NAXIS3 (z, often the spectral axis). Since
astropy hands data in C order (NAXIS3, NAXIS2, NAXIS1), the array is
transposed on reading and writing.
"""

import os

import h5py
import numpy as np
from astropy.io import fits

FITS_EXTENSIONS = (".fits", ".fit", ".fts", ".fits.gz", ".fit.gz")
HDF5_EXTENSIONS = (".h5", ".hdf5", ".cxi", ".nxs")
NUMPY_EXTENSIONS = (".npy", ".npz")


def cube_name(path: str) -> str:
    """File name without directory nor cube extension."""
    name = os.path.basename(path)
    for ext in FITS_EXTENSIONS + HDF5_EXTENSIONS + NUMPY_EXTENSIONS:
        if name.lower().endswith(ext):
            return name[: -len(ext)]
    return os.path.splitext(name)[0]


def _check_3d(data: np.ndarray, path: str) -> np.ndarray:
    if data is None or np.ndim(data) != 3:
        raise ValueError(
            f"Not a 3D cube in {path} "
            f"(got {None if data is None else np.ndim(data)} dimensions)."
        )
    return data


def load_fits(path: str, hdu: int = None) -> np.ndarray:
    """
    Load a cube from a FITS file.

    Args:
        path (str): the FITS file path.
        hdu (int, optional): the HDU to read. If None, the first HDU
            holding 3D data is used. Defaults to None.

    Returns:
        np.ndarray: the cube in (NAXIS1, NAXIS2, NAXIS3) order.
    """
    with fits.open(path) as hdul:
        if hdu is not None:
            data = hdul[hdu].data
        else:
            data = next(
                (h.data for h in hdul if h.data is not None
                 and np.ndim(h.data) == 3),
                hdul[0].data
            )
        data = _check_3d(data, path)
        return np.array(data.T)


def find_3d_dataset(file: h5py.File) -> str | None:
    """Path of the first 3D dataset of an HDF5 file."""
    found = []

    def visitor(name, obj):
        if not found and isinstance(obj, h5py.Dataset) and obj.ndim == 3:
            found.append(name)

    file.visititems(visitor)
    return found[0] if found else None


def load_h5(path: str, dataset: str = None) -> np.ndarray:
    """
    Load a cube from an HDF5 (or CXI) file.

    Args:
        path (str): the file path.
        dataset (str, optional): the dataset path in the file. If None,
            the first 3D dataset found is used. Defaults to None.

    Returns:
        np.ndarray: the cube.
    """
    with h5py.File(path, "r") as file:
        if dataset is None:
            dataset = find_3d_dataset(file)
            if dataset is None:
                raise ValueError(f"No 3D dataset found in {path}.")
        return _check_3d(file[dataset][()], path)


def load_npy(path: str, key: str = None) -> np.ndarray:
    """Load a cube from a .npy or .npz file."""
    if path.lower().endswith(".npz"):
        with np.load(path) as npz:
            if key is None:
                key = next(
                    (k for k in npz.files if npz[k].ndim == 3), npz.files[0]
                )
            return _check_3d(npz[key], path)
    return _check_3d(np.load(path), path)


def load_cube(path: str, hdu: int = None, dataset: str = None) -> np.ndarray:
    """
    Load a 3D cube, the reader being chosen from the file extension.

    Args:
        path (str): the file path.
        hdu (int, optional): FITS HDU to read. Defaults to None.
        dataset (str, optional): HDF5 dataset path or npz key. Defaults
            to None.

    Raises:
        ValueError: if the extension is not supported or the data is
            not 3D.

    Returns:
        np.ndarray: the cube.
    """
    path = str(path)
    lower = path.lower()
    if lower.endswith(FITS_EXTENSIONS):
        return load_fits(path, hdu)
    if lower.endswith(HDF5_EXTENSIONS):
        return load_h5(path, dataset)
    if lower.endswith(NUMPY_EXTENSIONS):
        return load_npy(path, dataset)
    raise ValueError(
        f"Unsupported file format ({path}), supported extensions are "
        f"{FITS_EXTENSIONS + HDF5_EXTENSIONS + NUMPY_EXTENSIONS}."
    )


def write_fits(path: str, cube: np.ndarray, overwrite: bool = True) -> str:
    """Write a cube given in (NAXIS1, NAXIS2, NAXIS3) order to FITS."""
    cube = _check_3d(np.asarray(cube), path)
    fits.PrimaryHDU(np.ascontiguousarray(cube.T)).writeto(
        path, overwrite=overwrite
    )
    return path

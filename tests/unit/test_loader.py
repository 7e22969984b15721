"""
Unit tests for the cube loaders in cubeviewer.io module.
"""

import h5py
import numpy as np
import pytest
from astropy.io import fits

from cubeviewer.io import (
    cube_name,
    load_cube,
    load_fits,
    load_h5,
    write_fits,
)


@pytest.fixture
def cube():
    return np.arange(2 * 3 * 4, dtype=np.float32).reshape(2, 3, 4)


@pytest.mark.unit
class TestLoaders:
    """Test reading cubes from the supported file formats."""

    def test_npy(self, tmp_path, cube):
        path = str(tmp_path / "cube.npy")
        np.save(path, cube)
        np.testing.assert_array_equal(load_cube(path), cube)

    def test_npz_first_3d_array(self, tmp_path, cube):
        path = str(tmp_path / "cube.npz")
        np.savez(path, flat=np.ones(3), data=cube)
        np.testing.assert_array_equal(load_cube(path), cube)
        np.testing.assert_array_equal(
            load_cube(path, dataset="data"), cube
        )

    def test_h5_first_3d_dataset(self, tmp_path, cube):
        path = str(tmp_path / "cube.h5")
        with h5py.File(path, "w") as file:
            file.create_dataset("entry/flat", data=np.ones((2, 2)))
            file.create_dataset("entry/data/cube", data=cube)
        np.testing.assert_array_equal(load_cube(path), cube)
        np.testing.assert_array_equal(
            load_h5(path, "entry/data/cube"), cube
        )

    def test_h5_without_cube(self, tmp_path):
        path = str(tmp_path / "flat.h5")
        with h5py.File(path, "w") as file:
            file.create_dataset("flat", data=np.ones((2, 2)))
        with pytest.raises(ValueError):
            load_cube(path)

    def test_fits_axes_order(self, tmp_path, cube):
        """Test that dim 1 of the loaded cube is NAXIS1."""
        path = str(tmp_path / "cube.fits")
        write_fits(path, cube)

        with fits.open(path) as hdul:
            assert hdul[0].header["NAXIS1"] == 2
            assert hdul[0].header["NAXIS3"] == 4
            # astropy data is in (NAXIS3, NAXIS2, NAXIS1) order
            assert hdul[0].data.shape == (4, 3, 2)

        loaded = load_fits(path)
        assert loaded.shape == (2, 3, 4)
        np.testing.assert_array_equal(loaded, cube)

    def test_fits_first_3d_hdu(self, tmp_path, cube):
        path = str(tmp_path / "cube.fits")
        fits.HDUList(
            [fits.PrimaryHDU(), fits.ImageHDU(np.ascontiguousarray(cube.T))]
        ).writeto(path)
        np.testing.assert_array_equal(load_cube(path), cube)
        np.testing.assert_array_equal(load_cube(path, hdu=1), cube)

    def test_not_3d(self, tmp_path):
        path = str(tmp_path / "image.npy")
        np.save(path, np.ones((4, 4)))
        with pytest.raises(ValueError):
            load_cube(path)

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(ValueError):
            load_cube(str(tmp_path / "cube.tiff"))

    def test_cube_name(self):
        assert cube_name("/data/ngc1068.fits") == "ngc1068"
        assert cube_name("/data/ngc1068.fits.gz") == "ngc1068"
        assert cube_name("scan_12.cxi") == "scan_12"
        assert cube_name("cube.npy") == "cube"

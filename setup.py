# CUBEVIEWER: Interactive slice and spectrum viewer for 3D data cubes

import setuptools

setuptools.setup(
      name="cubeviewer",
      version="0.1.0",
      description=(
            "An interactive slice and spectrum viewer for 3D data cubes "
            "(FITS, HDF5, NumPy)"
      ),
      package_dir={"": "src"},
      packages=setuptools.find_packages("src"),
      include_package_data=True,
      python_requires=">=3.10",
      install_requires=[
            "astropy>=5.0",
            "colorcet>=3.0.0",
            "h5py>=3.6.0",
            "imageio>=2.28",
            "matplotlib>=3.7",
            "numpy>=1.23.5",
            "PyYAML>=6.0",
            "scipy>=1.8.0",
      ],
      extras_require={
            "test": ["pytest>=7.0"],
      },
      entry_points={
            "console_scripts": [
                  "cubeviewer=cubeviewer.scripts.view_cube:main",
            ],
      },
)

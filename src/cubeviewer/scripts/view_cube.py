"""
Open a 3D cube (FITS, HDF5 or NumPy file) in the interactive slice and
spectrum viewer.
"""

import argparse
import os
import tempfile

from cubeviewer.interactive import Viewer
from cubeviewer.io import cube_name, load_cube, write_fits
from cubeviewer.parameters import load_params
from cubeviewer.plot import update_plot_params
from cubeviewer.session import ViewerSession
from cubeviewer.simulation import create_synthetic_cube


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cubeviewer",
        description="Interactive slice and spectrum viewer for 3D cubes.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=str,
        help="The cube file (.fits, .h5, .cxi, .npy, .npz).",
    )
    parser.add_argument(
        "--cmap", type=str, default=None, help="Colormap name."
    )
    parser.add_argument(
        "--vmin", type=float, default=None, help="Lower colour limit."
    )
    parser.add_argument(
        "--vmax", type=float, default=None, help="Upper colour limit."
    )
    parser.add_argument(
        "--invert",
        default=False,
        action="store_true",
        help="Invert the colormap.",
    )
    parser.add_argument(
        "--fullscreen",
        default=False,
        action="store_true",
        help="Size the window to the screen.",
    )
    parser.add_argument(
        "--size",
        type=int,
        nargs=2,
        metavar=("W", "H"),
        default=None,
        help="Window size in pixels.",
    )
    parser.add_argument(
        "--axis",
        type=int,
        choices=(1, 2, 3),
        default=None,
        help="Initial slicing axis.",
    )
    parser.add_argument(
        "--params",
        type=str,
        default=None,
        help="YAML file holding the viewer parameters.",
    )
    parser.add_argument(
        "--demo",
        type=int,
        nargs=3,
        metavar=("NX", "NY", "NZ"),
        default=None,
        help="Write a synthetic cube to a temporary FITS file and open it.",
    )
    return parser


def params_from_args(args: argparse.Namespace) -> dict:
    """Parameters from the YAML file, overridden by the command line."""
    params = load_params(args.params) if args.params else {}
    if args.cmap is not None:
        params["cmap"] = args.cmap
    if args.vmin is not None and args.vmax is not None:
        params["vmin"], params["vmax"] = args.vmin, args.vmax
    if args.invert:
        params["invert_cmap"] = True
    if args.fullscreen:
        params["fullscreen"] = True
    if args.size is not None:
        params["figsize"] = tuple(args.size)
    if args.axis is not None:
        params["axis"] = args.axis
    return params


def main(argv: list[str] = None) -> None:
    helptext = "try -h or --help to see usage."
    parser = make_parser()
    args = parser.parse_args(argv)
    if (args.vmin is None) != (args.vmax is None):
        parser.error(
            "--vmin and --vmax must be given together to set manual "
            "colour limits, " + helptext
        )

    path = args.path
    if args.demo is not None:
        path = os.path.join(tempfile.mkdtemp(), "synthetic_cube.fits")
        write_fits(path, create_synthetic_cube(*args.demo))
        print(f"Synthetic cube written to {path}.")
    if path is None:
        parser.error("a cube path or --demo is required, " + helptext)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File {path} does not exist.\n" + helptext)

    update_plot_params()
    session = ViewerSession(
        load_cube(path), params_from_args(args), name=cube_name(path)
    )
    viewer = Viewer(session)
    viewer.show()
    viewer.close()


if __name__ == "__main__":
    main()

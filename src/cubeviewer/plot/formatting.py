from enum import Enum
import math
import warnings

import colorcet  # noqa: F401, registers the cet_ colormaps
import matplotlib
import matplotlib.pyplot as plt
from mpl_toolkits.axes_grid1 import make_axes_locatable

# figure sizes are given in pixels
DEFAULT_FIGURE_SIZE = (1800, 900)
FULLSCREEN_FALLBACK_SIZE = (1920, 1080)

IMAGE_XLABEL = r"$\mathrm{pixel}\ x$"
IMAGE_YLABEL = r"$\mathrm{pixel}\ y$"
INTENSITY_LABEL = r"$\mathrm{intensity\ (scaled)}$"
SPECTRUM_XLABEL = r"$\mathrm{index\ along\ slice\ axis}$"
SPECTRUM_TITLE = r"$\mathrm{Spectrum\ at\ selected\ pixel}$"


class ExportFormat(Enum):
    """File formats the figures can be saved in."""

    PNG = "png"
    PDF = "pdf"

    @classmethod
    def from_value(cls, fmt: "str | ExportFormat") -> "ExportFormat":
        if isinstance(fmt, cls):
            return fmt
        try:
            return cls(str(fmt).strip().lower().lstrip("."))
        except ValueError:
            raise ValueError(
                f"Unsupported export format ({fmt}), must be one of "
                f"{[f.value for f in cls]}."
            ) from None


def update_plot_params(**kwargs) -> None:
    """Update the matplotlib plot parameters to the viewer style."""
    parameters = {
        "lines.linewidth": 1,
        "lines.markersize": 4,
        "figure.titlesize": 12,
        "font.size": 10,
        "svg.fonttype": "none",
        "axes.titlesize": 11,
        "axes.labelsize": 10,
        "xtick.labelsize": 8,
        "ytick.labelsize": 8,
        "legend.fontsize": 8,
        "image.interpolation": "none",
        "image.origin": "upper",
        "font.family": "sans-serif",
        "font.sans-serif": ["DejaVu Sans", "Liberation Sans"],
        "figure.dpi": 100,
        "legend.frameon": False,
        "pdf.fonttype": 42,
    }
    plt.rcParams.update(parameters)
    plt.rcParams.update(**kwargs)


def _screen_size() -> tuple[int, int]:
    # only Tk exposes the screen size without a shown window
    import tkinter

    root = tkinter.Tk()
    root.withdraw()
    try:
        return root.winfo_screenwidth(), root.winfo_screenheight()
    finally:
        root.destroy()


def pick_figure_size(
        fullscreen: bool = False, size: tuple | list = None
) -> tuple[int, int]:
    """
    Decide the figure size, in pixels, from an explicit size or the
    primary screen.

    Args:
        fullscreen (bool, optional): whether to fill the screen.
            Defaults to False.
        size (tuple | list, optional): explicit (width, height),
            overrides fullscreen. Defaults to None.

    Returns:
        tuple[int, int]: the (width, height) of the figure.
    """
    if size is not None:
        return tuple(int(s) for s in size)
    if fullscreen:
        try:
            return _screen_size()
        except Exception as e:  # no display, no Tk...
            warnings.warn(
                f"Could not get the screen size ({e}), using "
                f"{FULLSCREEN_FALLBACK_SIZE}."
            )
            return FULLSCREEN_FALLBACK_SIZE
    return DEFAULT_FIGURE_SIZE


def pixels_to_inches(size: tuple, dpi: float = None) -> tuple:
    """Convert a pixel size to a matplotlib figsize."""
    dpi = dpi or plt.rcParams["figure.dpi"]
    return size[0] / dpi, size[1] / dpi


def to_cmap(
        name: str, invert: bool = False
) -> matplotlib.colors.Colormap:
    """
    Resolve a matplotlib or colorcet colormap from its name.

    Raises:
        ValueError: if the colormap is unknown.
    """
    if name not in plt.colormaps():
        raise ValueError(
            f"Colormap '{name}' not found in matplotlib/colorcet "
            "colormaps."
        )
    cmap = matplotlib.colormaps[name]
    return cmap.reversed() if invert else cmap


def add_colorbar(
    ax: plt.Axes,
    mappable: matplotlib.cm.ScalarMappable = None,
    loc: str = "right",
    size: str = "5%",
    pad: float = 0.05,
    label: str = None,
    label_size: int = 8,
    **kwargs,
) -> matplotlib.colorbar.Colorbar:
    """
    Add a colorbar to the given axes.

    Args:
        ax (plt.Axes): the axes to which the colorbar will
            be added.
        mappable (matplotlib.cm.ScalarMappable, optional): the mappable
            object that the colorbar will be based on. If None, will
            take ax.images[0]. Defaults to None.
        loc (str, optional): the location where the colorbar will be
            placed. Defaults to "right".
        size (str, optional): the size of the colorbar. Defaults to
            "5%".
        pad (float, optional): the padding between the colorbar and the
            axes. Defaults to 0.05.
        label (str, optional): the colorbar label. Defaults to None.
        label_size (int, optional): the size of the colorbar labels.
            Defaults to 8.

    Returns:
        matplotlib.colorbar.Colorbar: the colorbar object.
    """
    if mappable is None:
        if not ax.images:
            raise ValueError(
                "mappable is None and no images found in ax! Provide "
                "mappable or ax on which an image has been drawn."
            )
        mappable = ax.images[0]

    fig = ax.get_figure()
    cax = make_axes_locatable(ax).append_axes(loc, size=size, pad=pad)
    cax.tick_params(labelsize=label_size)
    cbar = fig.colorbar(mappable, cax=cax, **kwargs)
    if label is not None:
        cbar.set_label(label, size=label_size)
    return cbar


def save_fig(fig: plt.Figure, path: str, **kwargs) -> None:
    """
    Save a figure, the format being deduced from the file extension.
    PDF output is vectorial.
    """
    default_params = {"bbox_inches": "tight", "dpi": 200}
    default_params.update(kwargs)
    fig.savefig(path, **default_params)


def _format_value(value: float) -> str:
    if value is None or math.isnan(value):
        return "NaN"
    return f"{round(float(value), 4):g}"


# Label helpers: inline mathtext only, never any line break.
def make_info_text(
        i: int, j: int, k: int, u: int, v: int, value: float
) -> str:
    """Status line for the selected voxel."""
    return (
        rf"$\mathrm{{pixel}}\ (i,j,k) = ({i},{j},{k})\,;\ "
        rf"\mathrm{{slice}}\ (\mathrm{{row}},\mathrm{{col}}) = ({u},{v})"
        rf"\,;\ \mathrm{{value}} = {_format_value(value)}$"
    )


def make_status_text(axis: int, index: int) -> str:
    return rf"$\mathrm{{axis}}\ {axis},\,\mathrm{{index}}\ {index}$"


def make_sigma_text(sigma: float) -> str:
    return rf"$\sigma = {round(float(sigma), 2):g}\,\mathrm{{px}}$"


def make_slice_title(name: str, axis: int, index: int) -> str:
    """Title of the saved slice figures."""
    name = _escape(name)
    return (
        rf"$\mathrm{{{name}}}\,\mathrm{{\ -\ slice\ axis}}\ {axis},"
        rf"\,\mathrm{{index}}\ {index}$"
    )


def make_spec_title(i: int, j: int, k: int) -> str:
    """Title of the saved spectrum figures."""
    return rf"$\mathrm{{Spectrum\ at\ pixel}}\ (i,j,k) = ({i},{j},{k})$"


def make_name_title(name: str) -> str:
    return rf"$\mathrm{{{_escape(name)}}}$"


def _escape(text: str) -> str:
    """Escape the mathtext special characters of a file name."""
    for char in ("_", "$", "{", "}", "#", "%", "&"):
        text = text.replace(char, "\\" + char)
    return text.replace(" ", r"\ ")

import matplotlib.pyplot as plt

from cubeviewer.plot.formatting import (
    IMAGE_XLABEL,
    IMAGE_YLABEL,
    INTENSITY_LABEL,
    SPECTRUM_XLABEL,
    add_colorbar,
    make_slice_title,
    make_spec_title,
)
from cubeviewer.session import SessionSnapshot


def plot_slice(
    snapshot: SessionSnapshot,
    index: int = None,
    ax: plt.Axes = None,
    figsize: tuple | list = (7, 5.6),
    show_marker: bool = True,
    **plot_params,
) -> tuple[plt.Figure, plt.Axes]:
    """
    Plot the displayed slice of a snapshot with its colourbar.

    Args:
        snapshot (SessionSnapshot): the session state to plot.
        index (int, optional): the slice index, by default the snapshot
            one. Defaults to None.
        ax (plt.Axes, optional): the axes to draw in. A new figure is
            created if None. Defaults to None.
        figsize (tuple | list, optional): the size of the new figure in
            inches. Defaults to (7, 5.6).
        show_marker (bool, optional): whether to mark the selected
            pixel. Defaults to True.
        **plot_params: additional plot params that will be parsed into
            the matplotlib imshow() function.

    Returns:
        tuple[plt.Figure, plt.Axes]: the figure and axes.
    """
    index = snapshot.index if index is None else index
    if ax is None:
        figure, ax = plt.subplots(layout="tight", figsize=figsize)
    else:
        figure = ax.get_figure()

    displayed = snapshot.render_slice(index)
    vmin, vmax = snapshot.color_range_for(displayed)
    _plot_params = {
        "cmap": snapshot.colormap(),
        "vmin": vmin,
        "vmax": vmax,
        "origin": "upper",
        "interpolation": "none",
    }
    _plot_params.update(plot_params)

    # rows are u, columns are v
    extent = (
        0.5, displayed.shape[1] + 0.5, displayed.shape[0] + 0.5, 0.5
    )
    im = ax.imshow(displayed, extent=extent, **_plot_params)
    if show_marker:
        u, v = snapshot.slice_coord
        ax.plot(v, u, marker="o", color="w", markeredgecolor="k", ms=6)
    add_colorbar(ax, im, label=INTENSITY_LABEL)
    ax.set_aspect("equal")
    ax.set_xlabel(IMAGE_XLABEL)
    ax.set_ylabel(IMAGE_YLABEL)
    ax.set_title(make_slice_title(snapshot.name, snapshot.axis, index))
    return figure, ax


def plot_spectrum(
    snapshot: SessionSnapshot,
    index: int = None,
    ax: plt.Axes = None,
    figsize: tuple | list = (6, 4),
    **plot_params,
) -> tuple[plt.Figure, plt.Axes]:
    """
    Plot the displayed spectrum through the selected voxel. The
    vertical range is pinned to the manual limits if any.

    Returns:
        tuple[plt.Figure, plt.Axes]: the figure and axes.
    """
    index = snapshot.index if index is None else index
    if ax is None:
        figure, ax = plt.subplots(layout="tight", figsize=figsize)
    else:
        figure = ax.get_figure()

    positions, values, ylim = snapshot.spectrum_at(index)
    ax.plot(positions, values, **plot_params)
    ax.set_ylim(ylim)
    ax.set_xlim(positions[0] - 0.5, positions[-1] + 0.5)
    ax.set_xlabel(SPECTRUM_XLABEL)
    ax.set_ylabel(INTENSITY_LABEL)
    ax.set_title(make_spec_title(*snapshot.voxel_at(index)))
    return figure, ax


def plot_slice_and_spectrum(
    snapshot: SessionSnapshot,
    index: int = None,
    figsize: tuple | list = (12, 5),
) -> plt.Figure:
    """Side by side slice and spectrum, used for animation frames."""
    figure, (ax_img, ax_spec) = plt.subplots(
        1, 2, figsize=figsize, layout="tight",
        gridspec_kw={"width_ratios": [1, 1]}
    )
    plot_slice(snapshot, index, ax=ax_img)
    plot_spectrum(snapshot, index, ax=ax_spec)
    return figure

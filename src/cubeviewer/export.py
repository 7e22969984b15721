"""
Saving of figures and animated GIF export.

Exports only read a SessionSnapshot taken when they are requested, so
they can run in a background thread while the session keeps changing.
Figures are drawn on Agg canvases without pyplot, which is not thread
safe.
"""

import concurrent.futures
import logging
import os

import imageio.v3 as iio
import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from cubeviewer.plot.formatting import ExportFormat, save_fig
from cubeviewer.plot.slice import plot_slice, plot_spectrum
from cubeviewer.session import LOGGER_NAME, SessionSnapshot

logger = logging.getLogger(LOGGER_NAME)


def make_file_name(
        snapshot: SessionSnapshot,
        base: str = None,
        ext: str | ExportFormat = ExportFormat.PNG,
) -> str:
    """
    File name describing the state of the view, e.g.
    cube_axis3_idx1_i1_j1_k1_imglin_speclin.png.
    """
    ext = ExportFormat.from_value(ext).value
    base = base or snapshot.name
    i, j, k = snapshot.voxel
    return (
        f"{base}_axis{snapshot.axis}_idx{snapshot.index}"
        f"_i{i}_j{j}_k{k}"
        f"_img{snapshot.image_scale.value}"
        f"_spec{snapshot.spectrum_scale.value}.{ext}"
    )


def animation_file_name(
        snapshot: SessionSnapshot,
        frames: list[int],
        fps: int,
        base: str = None,
) -> str:
    base = base or snapshot.name
    return (
        f"{base}_axis{snapshot.axis}_{frames[0]}to{frames[-1]}"
        f"_fps{fps}_{snapshot.image_scale.value}.gif"
    )


def new_figure(figsize: tuple) -> Figure:
    """A figure bound to an Agg canvas, independent from pyplot."""
    figure = Figure(figsize=figsize, layout="tight")
    FigureCanvasAgg(figure)
    return figure


def save_figure(figure: Figure, path: str) -> str:
    """Save a figure, as vector graphics if path ends with .pdf."""
    ExportFormat.from_value(os.path.splitext(path)[1])
    save_fig(figure, path)
    logger.info(f"Saved figure: {path}")
    return path


def save_slice_and_spectrum(
        snapshot: SessionSnapshot,
        save_dir: str,
        base: str = None,
        fmt: str | ExportFormat = ExportFormat.PNG,
) -> list[str]:
    """
    Save the slice and the spectrum as two separate figures. A failure
    on one of them is logged and does not prevent saving the other.

    Args:
        snapshot (SessionSnapshot): the state to save.
        save_dir (str): the output directory.
        base (str, optional): the file name base, the cube name if
            None. Defaults to None.
        fmt (str | ExportFormat, optional): "png" or "pdf". Defaults to
            ExportFormat.PNG.

    Returns:
        list[str]: the paths of the files actually saved.
    """
    base = base or snapshot.name
    saved = []
    for suffix, plot, figsize in (
            ("_slice", plot_slice, (7, 5.6)),
            ("_spectrum", plot_spectrum, (6, 4)),
    ):
        path = os.path.join(
            save_dir, make_file_name(snapshot, base + suffix, fmt)
        )
        try:
            figure = new_figure(figsize)
            plot(snapshot, ax=figure.add_subplot())
            saved.append(save_figure(figure, path))
        except Exception as e:
            logger.error(f"Failed to save {path}: {e}")
    return saved


def render_frame(
        snapshot: SessionSnapshot,
        index: int,
        figsize: tuple = (12, 5),
        dpi: int = 100,
) -> np.ndarray:
    """
    Render the slice and spectrum at a given slice index to an RGB
    image.
    """
    figure = new_figure(figsize)
    figure.set_dpi(dpi)
    ax_img, ax_spec = figure.subplots(1, 2)
    plot_slice(snapshot, index, ax=ax_img)
    plot_spectrum(snapshot, index, ax=ax_spec)
    figure.canvas.draw()
    return np.asarray(figure.canvas.buffer_rgba())[..., :3].copy()


def export_animation(
        snapshot: SessionSnapshot,
        frames: list[int],
        path: str,
        fps: int = 12,
        figsize: tuple = (12, 5),
        dpi: int = 100,
) -> str:
    """
    Export an animated GIF going through the slices listed in frames.

    Args:
        snapshot (SessionSnapshot): the state to animate, only the slice
            index changes from one frame to the other.
        frames (list[int]): the slice indices, see build_frames.
        path (str): the output GIF path.
        fps (int, optional): frames per second. Defaults to 12.
        figsize (tuple, optional): frame size in inches. Defaults to
            (12, 5).
        dpi (int, optional): frame resolution. Defaults to 100.

    Raises:
        ValueError: if frames is empty.

    Returns:
        str: the output path.
    """
    if len(frames) == 0:
        raise ValueError("No frame to export.")
    images = [
        render_frame(snapshot, index, figsize=figsize, dpi=dpi)
        for index in frames
    ]
    iio.imwrite(
        path,
        np.stack(images),
        extension=".gif",
        duration=1000 / max(int(fps), 1),
        loop=0,
    )
    logger.info(f"Animation saved: {path}")
    return path


class AnimationExporter:
    """
    Run exports in a background thread. Every job works on the
    snapshot it was given, the session is never touched.
    """

    def __init__(self, max_workers: int = 1) -> None:
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cubeviewer-export"
        )

    def _run(self, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Export failed: {e}")
            raise

    def submit_animation(
            self,
            snapshot: SessionSnapshot,
            frames: list[int],
            path: str,
            fps: int = 12,
            **kwargs,
    ) -> concurrent.futures.Future:
        """Export a GIF in the background, see export_animation."""
        return self._executor.submit(
            self._run, export_animation, snapshot, list(frames), path, fps,
            **kwargs
        )

    def submit_figures(
            self,
            snapshot: SessionSnapshot,
            save_dir: str,
            base: str = None,
            fmt: str | ExportFormat = ExportFormat.PNG,
    ) -> concurrent.futures.Future:
        """Save the slice and spectrum figures in the background."""
        return self._executor.submit(
            self._run, save_slice_and_spectrum, snapshot, save_dir, base, fmt
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "AnimationExporter":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

"""
Viewer session: the mutable state of one viewing session and the
explicit pipeline deriving the displayed views from it.

After every state change the derived views are recomputed in a fixed
order:

1. clamp the slice index and the voxel into the cube;
2. voxel -> (u, v) slice coordinates;
3. slice extraction;
4. optional gaussian smoothing;
5. display scale of the slice;
6. colour range (automatic or manual limits);
7. spectrum extraction, display scale and vertical range;
8. status and info texts.
"""

import logging

import numpy as np

from cubeviewer.geometry import (
    check_axis,
    clamp_index,
    clamp_voxel,
    extract_slice,
    extract_spectrum,
    slice_coord_to_voxel,
    voxel_component,
    voxel_to_slice_coord,
)
from cubeviewer.limits import ColorLimitsPolicy, LimitsParseFailure
from cubeviewer.parameters import validate_and_fill_params
from cubeviewer.plot.formatting import (
    make_info_text,
    make_status_text,
    to_cmap,
)
from cubeviewer.utils import ScaleMode, apply_scale, gaussian_smooth

LOGGER_NAME = "cubeviewer"

# keyboard navigation, as (du, dv) moves in the slice
MOVES = {
    "left": (0, -1),
    "right": (0, 1),
    "up": (-1, 0),
    "down": (1, 0),
}


def init_logger() -> logging.Logger:
    """Get the package logger, with a console handler set up once."""
    logger = logging.getLogger(LOGGER_NAME)

    # Check if the logger already has handlers to avoid adding
    # multiple.
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_formatter = logging.Formatter(
            fmt="[%(levelname)s] %(message)s",
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


class SessionSnapshot:
    """
    Copy of what an export needs from a session, taken when the export
    is submitted. The session never updates it afterwards and exports
    only read it.
    """

    def __init__(
            self,
            cube: np.ndarray,
            name: str,
            axis: int,
            index: int,
            voxel: tuple,
            slice_coord: tuple,
            image_scale: ScaleMode,
            spectrum_scale: ScaleMode,
            smooth: bool,
            sigma: float,
            cmap: str,
            invert_cmap: bool,
            limits: tuple | None,
            color_range: tuple,
    ) -> None:
        self.cube = cube
        self.name = name
        self.axis = axis
        self.index = index
        self.voxel = tuple(voxel)
        self.slice_coord = tuple(slice_coord)
        self.image_scale = image_scale
        self.spectrum_scale = spectrum_scale
        self.smooth = smooth
        self.sigma = sigma
        self.cmap = cmap
        self.invert_cmap = invert_cmap
        self.limits = limits
        self.color_range = color_range

    @property
    def extent(self) -> int:
        """Number of slices along the snapshot axis."""
        return self.cube.shape[self.axis - 1]

    def colormap(self):
        return to_cmap(self.cmap, self.invert_cmap)

    def render_slice(self, index: int = None) -> np.ndarray:
        """
        Run the display pipeline (extraction, smoothing, scale) for
        a slice index, by default the snapshot one.
        """
        index = self.index if index is None else index
        data = extract_slice(self.cube, self.axis, index)
        if self.smooth:
            data = gaussian_smooth(data, self.sigma)
        return apply_scale(data, self.image_scale)

    def limits_policy(self) -> ColorLimitsPolicy:
        """A policy in the state the session limits were in."""
        if self.limits is None:
            return ColorLimitsPolicy()
        return ColorLimitsPolicy(*self.limits)

    def color_range_for(self, displayed: np.ndarray) -> tuple:
        """Colour range of a displayed slice under the snapshot limits."""
        return self.limits_policy().effective_range(displayed)

    def spectrum_at(self, index: int = None) -> tuple:
        """
        The displayed spectrum through the voxel of the given slice,
        along with its vertical range.
        """
        index = self.index if index is None else index
        positions, values = extract_spectrum(
            self.cube, self.voxel_at(index), self.axis
        )
        values = apply_scale(values, self.spectrum_scale)
        return (
            positions, values, self.limits_policy().spectrum_range(values)
        )

    def voxel_at(self, index: int) -> tuple:
        return clamp_voxel(
            slice_coord_to_voxel(*self.slice_coord, self.axis, index),
            self.cube.shape
        )


class ViewerSession:
    """
    State of a viewing session over a read-only 3D cube.

    Every public operation updates the state, then runs the refresh
    pipeline so that all derived views are consistent when it returns.
    """

    def __init__(
            self,
            cube: np.ndarray,
            params: dict = None,
            name: str = None,
            **overrides,
    ) -> None:
        """
        Initialise the session.

        Args:
            cube (np.ndarray): the 3D cube. It is never modified.
            params (dict, optional): the viewer parameters, missing
                ones are taken from DEFAULT_VIEWER_PARAMS. Defaults to
                None.
            name (str, optional): the name of the cube, used for titles
                and file names. Defaults to "cube".
            **overrides: parameters overriding those of params.

        Raises:
            ValueError: if cube is not 3D or the initial limits are
                invalid.
        """
        if np.ndim(cube) != 3:
            raise ValueError(
                f"A 3D cube is required, got {np.ndim(cube)} dimension(s)."
            )
        # read-only view, the cube is shared with every consumer
        self.cube = np.asarray(cube).view()
        self.cube.flags.writeable = False
        self.shape = self.cube.shape
        self.name = name or "cube"

        params = dict(params or {})
        params.update(overrides)
        self.params = validate_and_fill_params(params)

        self.logger = init_logger()

        self.axis = check_axis(self.params["axis"])
        self.index = 1
        self.voxel = (1, 1, 1)
        self.slice_coord = (1, 1)
        self.image_scale = ScaleMode.from_value(self.params["image_scale"])
        self.spectrum_scale = ScaleMode.from_value(
            self.params["spectrum_scale"]
        )
        self.smooth = bool(self.params["smooth"])
        self.sigma = float(self.params["gaussian_sigma"])
        self.cmap = self.params["cmap"]
        to_cmap(self.cmap)  # fail early on unknown colormaps
        self.invert_cmap = bool(self.params["invert_cmap"])
        self.limits_policy = ColorLimitsPolicy(
            self.params["vmin"], self.params["vmax"]
        )

        # caches, invalidated by _refresh
        self._raw_slice_key = None
        self._raw_slice = None
        self.displayed_slice = None
        self.color_range = None
        self.spectrum = None
        self.spectrum_ylim = None
        self.voxel_value = None
        self.info_text = None
        self.status_text = None

        self._refresh()

    @property
    def extent(self) -> int:
        """Number of slices along the current axis."""
        return self.shape[self.axis - 1]

    @property
    def slice_shape(self) -> tuple[int, int]:
        plane = [d for d in range(3) if d != self.axis - 1]
        return self.shape[plane[0]], self.shape[plane[1]]

    @property
    def marker(self) -> tuple[int, int]:
        """The selected pixel as (x, y) = (column, row) for plotting."""
        return self.slice_coord[1], self.slice_coord[0]

    @property
    def limits(self) -> tuple | None:
        return self.limits_policy.limits

    @property
    def is_manual(self) -> bool:
        return self.limits_policy.is_manual

    # ------------------------------------------------------------------
    # Refresh pipeline
    # ------------------------------------------------------------------
    def _refresh(self) -> None:
        self.index = clamp_index(self.index, self.extent)
        self.voxel = clamp_voxel(self.voxel, self.shape)
        self.slice_coord = voxel_to_slice_coord(*self.voxel, self.axis)
        self._refresh_slice()
        self._refresh_spectrum()
        self._refresh_texts()

    def _refresh_slice(self) -> None:
        key = (self.axis, self.index)
        if key != self._raw_slice_key:
            self._raw_slice = extract_slice(self.cube, *key)
            self._raw_slice_key = key
        processed = self._raw_slice
        if self.smooth and self.sigma > 0:
            processed = gaussian_smooth(processed, self.sigma)
        self.displayed_slice = apply_scale(processed, self.image_scale)
        self.color_range = self.limits_policy.effective_range(
            self.displayed_slice
        )

    def _refresh_spectrum(self) -> None:
        positions, values = extract_spectrum(self.cube, self.voxel, self.axis)
        values = apply_scale(values, self.spectrum_scale)
        self.spectrum = (positions, values)
        self._refresh_spectrum_range()

    def _refresh_spectrum_range(self) -> None:
        self.spectrum_ylim = self.limits_policy.spectrum_range(
            self.spectrum[1]
        )

    def _refresh_texts(self) -> None:
        i, j, k = self.voxel
        self.voxel_value = float(self.cube[i - 1, j - 1, k - 1])
        self.info_text = make_info_text(
            i, j, k, *self.slice_coord, self.voxel_value
        )
        self.status_text = make_status_text(self.axis, self.index)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _move_to_slice_coord(self, u: int, v: int) -> None:
        u = clamp_index(u, self.slice_shape[0])
        v = clamp_index(v, self.slice_shape[1])
        self.voxel = clamp_voxel(
            slice_coord_to_voxel(u, v, self.axis, self.index), self.shape
        )

    def set_axis(self, axis: int) -> None:
        """
        Change the slicing axis. The slice index is clamped to the new
        axis and the (u, v) position is kept.

        Raises:
            InvalidAxisError: if axis is not 1, 2 or 3.
        """
        axis = check_axis(axis)
        u, v = self.slice_coord
        self.axis = axis
        self.index = clamp_index(self.index, self.extent)
        self._move_to_slice_coord(u, v)
        self._refresh()

    def set_slice_index(self, index: int) -> None:
        """Move to another slice, keeping the (u, v) position."""
        self.index = clamp_index(round(index), self.extent)
        self._move_to_slice_coord(*self.slice_coord)
        self._refresh()

    def select_voxel(self, i: int, j: int, k: int) -> None:
        """
        Select a voxel. The displayed slice follows the voxel component
        along the current axis.
        """
        self.voxel = clamp_voxel((i, j, k), self.shape)
        self.index = voxel_component(self.voxel, self.axis)
        self._refresh()

    def select_slice_coord(self, u: float, v: float) -> None:
        """Select a pixel of the current slice (e.g. a mouse click)."""
        self._move_to_slice_coord(int(round(u)), int(round(v)))
        self._refresh()

    def move(self, direction: str) -> None:
        """
        Move the selected pixel by one in the slice.

        Args:
            direction (str): "left", "right", "up" or "down".

        Raises:
            ValueError: if direction is unknown.
        """
        if direction not in MOVES:
            raise ValueError(
                f"Unknown direction ({direction}), must be one of "
                f"{list(MOVES)}."
            )
        du, dv = MOVES[direction]
        u, v = self.slice_coord
        self._move_to_slice_coord(u + du, v + dv)
        self._refresh()

    # ------------------------------------------------------------------
    # Display settings
    # ------------------------------------------------------------------
    def set_image_scale(self, mode: str | ScaleMode) -> None:
        self.image_scale = ScaleMode.from_value(mode)
        self._refresh_slice()

    def set_spectrum_scale(self, mode: str | ScaleMode) -> None:
        """
        Change the spectrum scale. Manual limits, if any, stay pinned
        on the spectrum.
        """
        self.spectrum_scale = ScaleMode.from_value(mode)
        self._refresh_spectrum()

    def set_smoothing(self, enabled: bool) -> None:
        self.smooth = bool(enabled)
        self._refresh_slice()

    def set_sigma(self, sigma: float) -> None:
        self.sigma = max(float(sigma), 0.0)
        self._refresh_slice()

    def set_colormap(self, name: str) -> None:
        to_cmap(name)
        self.cmap = name

    def set_colormap_inverted(self, inverted: bool) -> None:
        self.invert_cmap = bool(inverted)

    def toggle_invert(self) -> None:
        self.invert_cmap = not self.invert_cmap

    def colormap(self):
        return to_cmap(self.cmap, self.invert_cmap)

    def apply_limits(
            self, low_text: str | None, high_text: str | None
    ) -> bool:
        """
        Apply the colour limits text fields. Malformed input is logged
        and leaves the display unchanged.

        Returns:
            bool: whether the limits were accepted.
        """
        try:
            self.limits_policy.apply(low_text, high_text)
        except LimitsParseFailure as e:
            self.logger.warning(str(e))
            return False
        self.color_range = self.limits_policy.effective_range(
            self.displayed_slice
        )
        self._refresh_spectrum_range()
        return True

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            cube=self.cube,
            name=self.name,
            axis=self.axis,
            index=self.index,
            voxel=self.voxel,
            slice_coord=self.slice_coord,
            image_scale=self.image_scale,
            spectrum_scale=self.spectrum_scale,
            smooth=self.smooth and self.sigma > 0,
            sigma=self.sigma,
            cmap=self.cmap,
            invert_cmap=self.invert_cmap,
            limits=self.limits,
            color_range=self.color_range,
        )

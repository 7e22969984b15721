from enum import Enum

import numpy as np
from scipy.ndimage import gaussian_filter

DEFAULT_FPS = 12

# fallback colour range when nothing can be displayed
FALLBACK_RANGE = (0.0, 1.0)

# largest magnitude a displayed (float32) value can take
DISPLAY_MAX = float(np.finfo(np.float32).max)


class ScaleMode(Enum):
    """Display scale applied elementwise before rendering."""

    LINEAR = "lin"
    LOG10 = "log10"
    LN = "ln"

    @classmethod
    def from_value(cls, mode: "str | ScaleMode") -> "ScaleMode":
        """
        Get the ScaleMode matching a member or its string tag.

        Raises:
            ValueError: if the tag is unknown.
        """
        if isinstance(mode, cls):
            return mode
        try:
            return cls(str(mode).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown scale mode ({mode}), must be one of "
                f"{[m.value for m in cls]}."
            ) from None


def apply_scale(values, mode: str | ScaleMode) -> np.ndarray:
    """
    Scale data for display. Non-positive values become NaN for the
    logarithmic modes, they never produce -inf.

    Args:
        values (array-like): the values to scale.
        mode (str | ScaleMode): "lin", "log10" or "ln".

    Returns:
        np.ndarray: float32 array with the same shape as values.
    """
    mode = ScaleMode.from_value(mode)
    values = np.asarray(values, dtype=np.float32)
    if mode is ScaleMode.LINEAR:
        return values.copy()

    # computed in float64 so that powers of ten give exact integers
    log = np.log10 if mode is ScaleMode.LOG10 else np.log
    positive = values > 0  # NaN compares False
    scaled = np.full(values.shape, np.nan)
    log(values.astype(np.float64), out=scaled, where=positive)
    return scaled.astype(np.float32)


def robust_extrema(values) -> tuple[float, float]:
    """
    Compute NaN-safe extrema for a colour range.

    NaNs are discarded. If nothing remains, (0, 1) is returned. A
    zero-width range is widened to the adjacent float32 values so that
    low < high always holds.

    Args:
        values (array-like): the values to get the extrema from.

    Returns:
        tuple[float, float]: the (low, high) range.
    """
    values = np.asarray(values, dtype=np.float32).ravel()
    values = values[~np.isnan(values)]
    if values.size == 0:
        return FALLBACK_RANGE
    low, high = values.min(), values.max()
    if low == high:
        return widen_range(low, high)
    return float(low), float(high)


def widen_range(low: float, high: float) -> tuple[float, float]:
    """
    Move equal bounds apart by one float32 step on each side. A side
    that would leave the float32 range stays where it is, so the result
    is finite for any finite float32 input.
    """
    low, high = np.float32(low), np.float32(high)
    if low == high:
        below = np.nextafter(low, np.float32(-np.inf))
        above = np.nextafter(high, np.float32(np.inf))
        if np.isfinite(below):
            low = below
        if np.isfinite(above):
            high = above
    return float(low), float(high)


def build_frames(
        start: int,
        stop: int,
        step: int,
        ping_pong: bool = False,
        extent: int = None,
) -> list[int]:
    """
    Build the ordered slice indices of an animation.

    start and stop are clamped into [1, extent] (only floored at 1 if
    extent is None) and step is floored at 1. The sequence runs from
    start to stop inclusive. If start > stop, the sequence is empty. In
    ping-pong mode, the sequence is played back without repeating its
    two ends, e.g. [1, 2, 3, 4] -> [1, 2, 3, 4, 3, 2].

    Args:
        start (int): first slice index.
        stop (int): last slice index (inclusive).
        step (int): the stride.
        ping_pong (bool, optional): whether to go back and forth.
            Defaults to False.
        extent (int, optional): the number of slices along the axis.
            Defaults to None.

    Returns:
        list[int]: the frame indices.
    """
    upper = extent if extent is not None else max(start, stop, 1)
    start = min(max(int(start), 1), upper)
    stop = min(max(int(stop), 1), upper)
    step = max(int(step), 1)

    frames = list(range(start, stop + 1, step))
    if ping_pong and len(frames) >= 2:
        frames += frames[-2:0:-1]
    return frames


def clean_text(text: str | None) -> str:
    """Return the stripped content of a text field, '' for None."""
    if text is None:
        return ""
    return str(text).strip()


def parse_int(text: str | None, default: int) -> int:
    """Parse an integer text field, falling back to default."""
    text = clean_text(text)
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return default


def parse_frame_request(
        start_text: str | None,
        stop_text: str | None,
        step_text: str | None,
        fps_text: str | None,
        extent: int,
) -> tuple[int, int, int, int]:
    """
    Read the animation export fields. Blank or unparsable fields fall
    back to the full axis range, a step of 1 and DEFAULT_FPS.

    Returns:
        tuple[int, int, int, int]: start, stop, step and fps, clamped.
    """
    start = min(max(parse_int(start_text, 1), 1), extent)
    stop = min(max(parse_int(stop_text, extent), 1), extent)
    step = max(1, parse_int(step_text, 1))
    fps = max(1, parse_int(fps_text, DEFAULT_FPS))
    return start, stop, step, fps


def gaussian_smooth(data: np.ndarray, sigma: float) -> np.ndarray:
    """
    Smooth a 2D slice with an isotropic gaussian kernel. Returns a
    float32 copy of the data if sigma is not strictly positive.
    """
    data = np.asarray(data, dtype=np.float32)
    if sigma is None or sigma <= 0:
        return data.copy()
    return gaussian_filter(data, sigma=float(sigma)).astype(np.float32)


def is_blank(*texts: str | None) -> bool:
    """Whether any of the provided text fields is empty."""
    return any(not clean_text(t) for t in texts)

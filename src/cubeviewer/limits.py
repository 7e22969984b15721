"""
Manual or automatic colour limits shared by the image and the spectrum.

In automatic mode the colour range follows the displayed slice and the
spectrum vertical range is fitted to the spectrum itself. In manual mode
both are pinned to the same (low, high) bounds.
"""

import math

import numpy as np

from cubeviewer.utils import (
    DISPLAY_MAX,
    clean_text,
    is_blank,
    robust_extrema,
    widen_range,
)


class LimitsParseFailure(ValueError):
    """Raised when manual limits can't be read as two finite numbers."""


class LimitsUpdate:
    """
    Result of a limits request.

    Attributes:
        limits (tuple | None): the manual (low, high) bounds, None in
            automatic mode.
        spectrum_ylim (tuple | None): the vertical range the spectrum
            plot must be pinned to, None meaning it must be auto-fitted
            to its own trace.
    """

    def __init__(self, limits: tuple | None) -> None:
        self.limits = limits
        self.spectrum_ylim = limits

    @property
    def is_manual(self) -> bool:
        return self.limits is not None

    def __repr__(self) -> str:
        mode = f"Manual{self.limits}" if self.is_manual else "Auto"
        return f"LimitsUpdate({mode})"


def _parse_bound(text: str) -> float:
    value = float(text)  # ValueError handled by the caller
    if not math.isfinite(value):
        raise ValueError(f"Non finite bound ({text}).")
    return value


class ColorLimitsPolicy:
    """
    Two-state machine deciding the colour range: Auto or Manual(low,
    high), with low < high strictly.
    """

    def __init__(self, vmin: float = None, vmax: float = None) -> None:
        """
        Initialise the policy. It starts in manual mode only if both
        bounds are given.

        Args:
            vmin (float, optional): lower bound. Defaults to None.
            vmax (float, optional): upper bound. Defaults to None.

        Raises:
            ValueError: if both bounds are given but vmin > vmax or they
                are not finite.
        """
        self._limits = None
        if vmin is not None and vmax is not None:
            self._limits = self._checked_limits(float(vmin), float(vmax))

    @staticmethod
    def _checked_limits(low: float, high: float) -> tuple[float, float]:
        if not (math.isfinite(low) and math.isfinite(high)):
            raise LimitsParseFailure(
                f"Colour limits must be finite, got ({low}, {high})."
            )
        if max(abs(low), abs(high)) > DISPLAY_MAX:
            raise LimitsParseFailure(
                f"Colour limits ({low}, {high}) exceed the displayable "
                f"range (+/-{DISPLAY_MAX:.4g})."
            )
        if low > high:
            raise LimitsParseFailure(
                f"Lower colour limit ({low}) is greater than the upper "
                f"one ({high})."
            )
        return widen_range(low, high) if low == high else (low, high)

    @property
    def limits(self) -> tuple[float, float] | None:
        """The manual bounds, None in automatic mode."""
        return self._limits

    @property
    def is_manual(self) -> bool:
        return self._limits is not None

    def reset(self) -> LimitsUpdate:
        """Go back to automatic mode."""
        self._limits = None
        return LimitsUpdate(None)

    def apply(
            self, low_text: str | None, high_text: str | None
    ) -> LimitsUpdate:
        """
        Apply the content of the limits text fields.

        If either field is blank, the policy goes back to automatic
        mode. Otherwise both fields must hold finite numbers, equal
        bounds being widened.

        Args:
            low_text (str | None): the lower bound text.
            high_text (str | None): the upper bound text.

        Raises:
            LimitsParseFailure: if a field does not parse as a finite
                number, exceeds the float32 range or low > high. The
                state is left unchanged.

        Returns:
            LimitsUpdate: the new state and the spectrum directive.
        """
        if is_blank(low_text, high_text):
            return self.reset()
        low_text, high_text = clean_text(low_text), clean_text(high_text)
        try:
            low, high = _parse_bound(low_text), _parse_bound(high_text)
        except ValueError:
            raise LimitsParseFailure(
                f"Could not parse colour limits from '{low_text}' "
                f"'{high_text}'."
            ) from None
        self._limits = self._checked_limits(low, high)
        return LimitsUpdate(self._limits)

    def effective_range(self, displayed: np.ndarray) -> tuple[float, float]:
        """
        The colour range for the displayed (smoothed and scaled) slice.
        """
        if self.is_manual:
            return self._limits
        return robust_extrema(displayed)

    def spectrum_range(self, trace: np.ndarray) -> tuple[float, float]:
        """
        The vertical range of the spectrum plot: the manual bounds, or
        the extrema of the displayed trace itself.
        """
        if self.is_manual:
            return self._limits
        return robust_extrema(trace)

    def as_text(self) -> tuple[str, str]:
        """Strings to fill the limits text fields with."""
        if not self.is_manual:
            return "", ""
        return str(self._limits[0]), str(self._limits[1])

    def __repr__(self) -> str:
        mode = f"Manual{self._limits}" if self.is_manual else "Auto"
        return f"ColorLimitsPolicy({mode})"

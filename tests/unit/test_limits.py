"""
Unit tests for the colour limits policy in cubeviewer.limits module.
"""

import numpy as np
import pytest

from cubeviewer.limits import (
    ColorLimitsPolicy,
    LimitsParseFailure,
    LimitsUpdate,
)


@pytest.mark.unit
class TestColorLimitsPolicy:
    """Test the Auto/Manual colour limits state machine."""

    def test_starts_in_auto(self):
        policy = ColorLimitsPolicy()
        assert not policy.is_manual
        assert policy.limits is None
        assert policy.as_text() == ("", "")

    def test_init_with_limits(self):
        policy = ColorLimitsPolicy(vmin=2, vmax=8)
        assert policy.is_manual
        assert policy.limits == (2.0, 8.0)

        # a single bound is not enough for manual mode
        assert not ColorLimitsPolicy(vmin=2).is_manual

        with pytest.raises(ValueError):
            ColorLimitsPolicy(vmin=8, vmax=2)

    def test_apply_manual(self):
        policy = ColorLimitsPolicy()
        update = policy.apply(" 2 ", "8")

        assert isinstance(update, LimitsUpdate)
        assert update.is_manual
        assert update.limits == (2.0, 8.0)
        assert update.spectrum_ylim == (2.0, 8.0)
        assert policy.as_text() == ("2.0", "8.0")

    def test_equal_bounds_are_widened(self):
        """Test that "5"/"5" gives a strictly increasing range."""
        policy = ColorLimitsPolicy()
        low, high = policy.apply("5", "5").limits
        assert low < 5 < high

    def test_malformed_input_leaves_state(self):
        """Test that a failed parse keeps the previous state."""
        policy = ColorLimitsPolicy()
        with pytest.raises(LimitsParseFailure):
            policy.apply("abc", "10")
        assert not policy.is_manual

        policy.apply("1", "3")
        for low, high in (("abc", "10"), ("1", "nan"), ("inf", "2"),
                          ("9", "3")):
            with pytest.raises(LimitsParseFailure):
                policy.apply(low, high)
            assert policy.limits == (1.0, 3.0)

    def test_bounds_beyond_float32_are_rejected(self):
        """Test that bounds the display can't hold never get stored."""
        policy = ColorLimitsPolicy()
        for low, high in (("1e39", "1e39"), ("-1e39", "1"), ("0", "1e39")):
            with pytest.raises(LimitsParseFailure):
                policy.apply(low, high)
            assert not policy.is_manual

    def test_equal_bounds_at_float32_max(self):
        """Test that widening stays finite at the edge of float32."""
        top = repr(float(np.finfo(np.float32).max))
        low, high = ColorLimitsPolicy().apply(top, top).limits
        assert np.isfinite([low, high]).all()
        assert low < high

        low, high = ColorLimitsPolicy().apply("-" + top, "-" + top).limits
        assert np.isfinite([low, high]).all()
        assert low < high

    def test_init_with_equal_limits(self):
        """Test that equal initial bounds are widened."""
        low, high = ColorLimitsPolicy(vmin=5, vmax=5).limits
        assert low < 5 < high

    def test_parse_failure_is_a_value_error(self):
        with pytest.raises(ValueError):
            ColorLimitsPolicy().apply("1", "x")

    @pytest.mark.parametrize(
        "low, high", [("", "10"), ("2", ""), (None, None), ("  ", "4")]
    )
    def test_blank_resets_to_auto(self, low, high):
        policy = ColorLimitsPolicy(1, 2)
        update = policy.apply(low, high)
        assert not update.is_manual
        assert update.spectrum_ylim is None
        assert not policy.is_manual

    def test_reset(self):
        policy = ColorLimitsPolicy(1, 2)
        assert not policy.reset().is_manual
        assert policy.limits is None


@pytest.mark.unit
class TestEffectiveRanges:
    """Test the colour and spectrum ranges derived from the policy."""

    image = np.array([[0.5, 3.0], [np.nan, 12.0]])
    trace = np.array([10.0, 40.0, 25.0])

    def test_auto_follows_the_image(self):
        assert ColorLimitsPolicy().effective_range(self.image) == (0.5, 12.0)

    def test_manual_overrides_the_image(self):
        policy = ColorLimitsPolicy()
        policy.apply("2", "8")
        assert policy.effective_range(self.image) == (2.0, 8.0)

    def test_manual_pins_the_spectrum(self):
        """Test that manual (2, 8) pins the spectrum vertical range."""
        policy = ColorLimitsPolicy()
        policy.apply("2", "8")
        assert policy.spectrum_range(self.trace) == (2.0, 8.0)

    def test_auto_spectrum_independent_of_image(self):
        """Test that in Auto the spectrum range comes from its trace."""
        policy = ColorLimitsPolicy()
        image_range = policy.effective_range(self.image)
        spectrum_range = policy.spectrum_range(self.trace)
        assert spectrum_range == (10.0, 40.0)
        assert spectrum_range != image_range

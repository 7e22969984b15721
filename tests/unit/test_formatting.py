"""
Unit tests for the plot helpers in cubeviewer.plot module.
"""

import matplotlib
import matplotlib.pyplot as plt
import pytest

from cubeviewer.plot import (
    ExportFormat,
    add_colorbar,
    make_slice_title,
    pick_figure_size,
    to_cmap,
)
from cubeviewer.plot.formatting import (
    DEFAULT_FIGURE_SIZE,
    FULLSCREEN_FALLBACK_SIZE,
    make_info_text,
    pixels_to_inches,
)


@pytest.mark.unit
class TestFigureSize:
    """Test the choice of the window size."""

    def test_explicit_size_wins(self):
        assert pick_figure_size(True, (800, 600)) == (800, 600)

    def test_default_size(self):
        assert pick_figure_size() == DEFAULT_FIGURE_SIZE == (1800, 900)

    def test_fullscreen_fallback(self, monkeypatch):
        """Test the fallback when the screen can't be queried."""
        def no_screen():
            raise RuntimeError("no display")

        monkeypatch.setattr(
            "cubeviewer.plot.formatting._screen_size", no_screen
        )
        with pytest.warns(UserWarning):
            size = pick_figure_size(fullscreen=True)
        assert size == FULLSCREEN_FALLBACK_SIZE == (1920, 1080)

    def test_pixels_to_inches(self):
        assert pixels_to_inches((800, 600), dpi=100) == (8, 6)


@pytest.mark.unit
class TestColormaps:
    """Test resolving colormaps by name."""

    def test_matplotlib_and_colorcet(self):
        assert to_cmap("magma").name == "magma"
        assert isinstance(to_cmap("cet_fire"), matplotlib.colors.Colormap)

    def test_inverted(self):
        assert to_cmap("magma", invert=True).name == "magma_r"

    def test_unknown(self):
        with pytest.raises(ValueError):
            to_cmap("not_a_colormap")


@pytest.mark.unit
class TestFormatting:
    """Test labels and the export format enum."""

    def test_export_format(self):
        assert ExportFormat.from_value(".PDF") is ExportFormat.PDF
        assert ExportFormat.from_value("png") is ExportFormat.PNG
        with pytest.raises(ValueError):
            ExportFormat.from_value("gif")

    def test_labels_are_single_line(self):
        for text in (
                make_info_text(1, 2, 3, 2, 3, float("nan")),
                make_slice_title("my_cube 1", 3, 4),
        ):
            assert "\n" not in text
            assert text.startswith("$") and text.endswith("$")

    def test_name_is_escaped(self):
        assert r"my\_cube\ 1" in make_slice_title("my_cube 1", 3, 4)

    def test_info_text_value(self):
        assert "NaN" in make_info_text(1, 1, 1, 1, 1, float("nan"))
        assert "3.1416" in make_info_text(1, 1, 1, 1, 1, 3.14159265)

    def test_labels_render(self, tmp_path):
        """Test that matplotlib can typeset the labels."""
        fig, ax = plt.subplots()
        ax.imshow([[0, 1], [2, 3]])
        add_colorbar(ax, label="intensity")
        ax.set_title(make_slice_title("my_cube 1", 3, 4))
        ax.set_xlabel(make_info_text(1, 2, 3, 2, 3, 12.5))
        fig.savefig(tmp_path / "labels.png")
        plt.close(fig)

    def test_colorbar_needs_an_image(self):
        fig, ax = plt.subplots()
        with pytest.raises(ValueError):
            add_colorbar(ax)
        plt.close(fig)

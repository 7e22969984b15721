import os
from types import SimpleNamespace

import imageio.v3 as iio
import pytest

from cubeviewer.interactive import Viewer
from cubeviewer.interactive.viewer import AXIS_LABELS
from cubeviewer.session import ViewerSession


@pytest.fixture
def viewer(synthetic_cube, tmp_path):
    session = ViewerSession(synthetic_cube, name="synth")
    viewer = Viewer(session, save_dir=str(tmp_path))
    yield viewer
    viewer.close()


class TestViewerCallbacks:
    """Test that the widgets drive the session"""

    def test_initial_display(self, viewer):
        session = viewer.session
        assert viewer.image.get_array().shape == session.slice_shape
        assert viewer.image.get_clim() == session.color_range
        assert viewer.ax_spec.get_ylim() == pytest.approx(
            session.spectrum_ylim
        )

    def test_axis_radio(self, viewer):
        viewer.axis_radio.set_active(0)
        assert viewer.session.axis == 1
        assert viewer.image.get_array().shape == (12, 8)
        assert viewer.slice_slider.valmax == 16

        # unknown labels are ignored
        viewer.on_axis("dim4")
        assert viewer.session.axis == 1

    def test_slice_slider(self, viewer):
        viewer.slice_slider.set_val(5)
        assert viewer.session.index == 5
        assert viewer.session.voxel[2] == 5

    def test_scales(self, viewer):
        viewer.img_scale_radio.set_active(1)
        assert viewer.session.image_scale.value == "log10"
        viewer.spec_scale_radio.set_active(2)
        assert viewer.session.spectrum_scale.value == "ln"

    def test_options(self, viewer):
        viewer.options_check.set_active(0)
        assert viewer.session.invert_cmap
        assert viewer.image.get_cmap().name.endswith("_r")

        viewer.options_check.set_active(1)
        assert viewer.session.smooth

        assert not viewer.ping_pong
        viewer.options_check.set_active(2)
        assert viewer.ping_pong

    def test_sigma_slider(self, viewer):
        viewer.sigma_slider.set_val(3)
        assert viewer.session.sigma == 3

    def test_apply_limits(self, viewer):
        viewer.vmin_box.set_val("100")
        viewer.vmax_box.set_val("200")
        assert viewer.on_apply_limits()
        assert viewer.image.get_clim() == (100.0, 200.0)
        assert viewer.ax_spec.get_ylim() == (100.0, 200.0)

        # malformed input leaves the display as it is
        viewer.vmin_box.set_val("abc")
        assert not viewer.on_apply_limits()
        assert viewer.image.get_clim() == (100.0, 200.0)

        viewer.vmin_box.set_val("")
        assert viewer.on_apply_limits()
        assert not viewer.session.is_manual

    def test_limits_beyond_float32(self, viewer):
        """Test that huge limits are refused without breaking redraw."""
        clim = viewer.image.get_clim()
        viewer.vmin_box.set_val("1e39")
        viewer.vmax_box.set_val("1e39")
        assert not viewer.on_apply_limits()
        assert viewer.image.get_clim() == clim
        viewer.redraw()

    def test_keys(self, viewer):
        viewer.session.select_slice_coord(5, 5)
        viewer.on_key(SimpleNamespace(key="down"))
        viewer.on_key(SimpleNamespace(key="right"))
        assert viewer.session.slice_coord == (6, 6)

        viewer.on_key(SimpleNamespace(key="i"))
        assert viewer.session.invert_cmap
        # other keys do nothing
        viewer.on_key(SimpleNamespace(key="q"))
        assert viewer.session.slice_coord == (6, 6)

    def test_click(self, viewer):
        viewer.on_click(SimpleNamespace(
            inaxes=viewer.ax_img, button=1, xdata=2.2, ydata=3.7
        ))
        assert viewer.session.slice_coord == (4, 2)
        x, y = viewer.marker.get_data()
        assert (list(x), list(y)) == ([2], [4])

        # clicks outside the image are ignored
        viewer.on_click(SimpleNamespace(
            inaxes=viewer.ax_spec, button=1, xdata=1, ydata=1
        ))
        assert viewer.session.slice_coord == (4, 2)

    def test_labels(self):
        assert len(AXIS_LABELS) == 3


class TestViewerSaving:
    """Test the save and export buttons"""

    def test_save_figure(self, viewer, tmp_path):
        viewer.name_box.set_val("run")
        path = viewer.on_save_figure()
        assert os.path.basename(path) == (
            "run_axis3_idx1_i1_j1_k1_imglin_speclin.png"
        )
        assert os.path.isfile(path)

    def test_save_both(self, viewer, tmp_path):
        viewer.format_radio.set_active(1)
        paths = viewer.on_save_both().result(timeout=60)
        assert len(paths) == 2
        assert all(p.endswith(".pdf") for p in paths)

    def test_export_animation(self, viewer, tmp_path):
        viewer.start_box.set_val("2")
        viewer.stop_box.set_val("4")
        viewer.fps_box.set_val("8")
        viewer.options_check.set_active(2)
        viewer.session.params["export"]["dpi"] = 20

        path = viewer.on_export_animation().result(timeout=120)
        assert os.path.basename(path) == "synth_axis3_2to3_fps8_lin.gif"
        assert iio.imread(path, index=None).shape[0] == 4

    def test_finished_exports_are_forgotten(self, viewer):
        futures = [viewer.on_save_both(), viewer.on_save_both()]
        assert len(viewer.futures) <= 2
        # callbacks have run once the worker has stopped
        viewer.exporter.shutdown()
        assert all(f.done() for f in futures)
        assert viewer.futures == []

    def test_export_nothing(self, viewer):
        viewer.start_box.set_val("6")
        viewer.stop_box.set_val("2")
        assert viewer.on_export_animation() is None

"""
Matplotlib window showing a slice of the cube, its colourbar and the
spectrum through the selected voxel, with widgets to drive a
ViewerSession.

The window only translates events into session operations and redraws
from the session derived views, it holds no state of its own apart from
the widgets.
"""

import os

import matplotlib.pyplot as plt
from matplotlib.widgets import Button, CheckButtons, RadioButtons, Slider
from matplotlib.widgets import TextBox

from cubeviewer.export import (
    AnimationExporter,
    animation_file_name,
    make_file_name,
    save_figure,
)
from cubeviewer.geometry import SLICE_PLANE_PARAMETERS
from cubeviewer.parameters import default_save_dir
from cubeviewer.plot.formatting import (
    IMAGE_XLABEL,
    IMAGE_YLABEL,
    INTENSITY_LABEL,
    SPECTRUM_TITLE,
    SPECTRUM_XLABEL,
    ExportFormat,
    add_colorbar,
    make_name_title,
    make_sigma_text,
    pick_figure_size,
    pixels_to_inches,
)
from cubeviewer.session import MOVES, ViewerSession
from cubeviewer.utils import (
    ScaleMode,
    build_frames,
    clean_text,
    parse_frame_request,
)

AXIS_LABELS = [SLICE_PLANE_PARAMETERS[a]["label"] for a in (1, 2, 3)]
SCALE_LABELS = [m.value for m in ScaleMode]
FORMAT_LABELS = [f.value for f in ExportFormat]


class Viewer:
    """
    Interactive slice and spectrum viewer.

    Args:
        session (ViewerSession): the session to display and drive.
        save_dir (str, optional): where figures and animations are
            saved. Defaults to the "save_dir" parameter of the session,
            or the Desktop/current directory.
    """

    def __init__(self, session: ViewerSession, save_dir: str = None) -> None:
        self.session = session
        self.save_dir = (
            save_dir or session.params["save_dir"] or default_save_dir()
        )
        self.exporter = AnimationExporter()
        self.futures = []
        self._syncing = False

        size = pick_figure_size(
            session.params["fullscreen"], session.params["figsize"]
        )
        self.figure = plt.figure(figsize=pixels_to_inches(size))
        self._build_plots()
        self._build_widgets()
        self._connect_events()
        self.redraw()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _build_plots(self) -> None:
        session = self.session
        self.ax_img = self.figure.add_axes((0.04, 0.40, 0.42, 0.55))
        self.image = self.ax_img.imshow(
            session.displayed_slice,
            cmap=session.colormap(),
            origin="upper",
            interpolation="none",
            extent=self._image_extent(),
        )
        (self.marker,) = self.ax_img.plot(
            *session.marker, marker="o", color="w", markeredgecolor="k",
            ms=6
        )
        self.colorbar = add_colorbar(
            self.ax_img, self.image, label=INTENSITY_LABEL
        )
        self.ax_img.set_title(make_name_title(session.name))
        self.ax_img.set_xlabel(IMAGE_XLABEL)
        self.ax_img.set_ylabel(IMAGE_YLABEL)

        self.info = self.figure.text(0.55, 0.96, "", ha="left", va="top")
        self.ax_spec = self.figure.add_axes((0.55, 0.45, 0.42, 0.45))
        (self.spectrum_line,) = self.ax_spec.plot(*session.spectrum)
        self.ax_spec.set_title(SPECTRUM_TITLE)
        self.ax_spec.set_xlabel(SPECTRUM_XLABEL)
        self.ax_spec.set_ylabel(INTENSITY_LABEL)

    def _widget_ax(self, rect: tuple) -> plt.Axes:
        return self.figure.add_axes(rect)

    def _build_widgets(self) -> None:
        session = self.session
        fig = self.figure

        # image controls
        fig.text(0.04, 0.30, "Image scale")
        self.img_scale_radio = RadioButtons(
            self._widget_ax((0.04, 0.20, 0.06, 0.09)), SCALE_LABELS,
            active=SCALE_LABELS.index(session.image_scale.value)
        )
        fig.text(0.11, 0.30, "Spectrum scale")
        self.spec_scale_radio = RadioButtons(
            self._widget_ax((0.11, 0.20, 0.06, 0.09)), SCALE_LABELS,
            active=SCALE_LABELS.index(session.spectrum_scale.value)
        )
        self.options_check = CheckButtons(
            self._widget_ax((0.18, 0.20, 0.10, 0.09)),
            ["Invert colormap", "Gaussian filter", "Back-and-forth"],
            [session.invert_cmap, session.smooth,
             session.params["export"]["ping_pong"]],
        )

        fig.text(0.30, 0.30, "Colorbar limits")
        low_text, high_text = session.limits_policy.as_text()
        self.vmin_box = TextBox(
            self._widget_ax((0.30, 0.25, 0.06, 0.04)), "", low_text
        )
        self.vmax_box = TextBox(
            self._widget_ax((0.37, 0.25, 0.06, 0.04)), "", high_text
        )
        self.apply_button = Button(
            self._widget_ax((0.44, 0.25, 0.05, 0.04)), "Apply"
        )

        # saving
        fig.text(0.04, 0.15, "Save")
        self.format_radio = RadioButtons(
            self._widget_ax((0.04, 0.07, 0.06, 0.07)), FORMAT_LABELS,
            active=FORMAT_LABELS.index(
                ExportFormat.from_value(
                    session.params["export"]["format"]
                ).value
            )
        )
        self.name_box = TextBox(
            self._widget_ax((0.11, 0.10, 0.12, 0.04)), "",
            session.params["export"]["file_name_base"] or ""
        )
        self.save_fig_button = Button(
            self._widget_ax((0.24, 0.10, 0.07, 0.04)), "Save fig"
        )
        self.save_both_button = Button(
            self._widget_ax((0.32, 0.10, 0.10, 0.04)), "Save slice+spec"
        )

        # animation
        fig.text(0.04, 0.03, "GIF indices")
        self.start_box = TextBox(
            self._widget_ax((0.11, 0.02, 0.05, 0.04)), "", ""
        )
        self.stop_box = TextBox(
            self._widget_ax((0.17, 0.02, 0.05, 0.04)), "", ""
        )
        self.step_box = TextBox(
            self._widget_ax((0.23, 0.02, 0.05, 0.04)), "", ""
        )
        self.fps_box = TextBox(
            self._widget_ax((0.29, 0.02, 0.05, 0.04)), "",
            str(session.params["export"]["fps"])
        )
        self.anim_button = Button(
            self._widget_ax((0.35, 0.02, 0.07, 0.04)), "Export GIF"
        )

        # spectrum / slicing controls
        fig.text(0.55, 0.30, "Slice axis")
        self.axis_radio = RadioButtons(
            self._widget_ax((0.55, 0.18, 0.08, 0.11)), AXIS_LABELS,
            active=session.axis - 1
        )
        self.status = fig.text(0.65, 0.30, "")
        self.slice_slider = Slider(
            self._widget_ax((0.70, 0.24, 0.22, 0.03)), "Index",
            1, max(session.extent, 2), valinit=session.index, valstep=1
        )
        self.sigma_label = fig.text(0.65, 0.12, "")
        self.sigma_slider = Slider(
            self._widget_ax((0.70, 0.12, 0.22, 0.03)), "Sigma",
            0, 10, valinit=session.sigma, valstep=0.1
        )

    def _connect_events(self) -> None:
        self.img_scale_radio.on_clicked(self.on_image_scale)
        self.spec_scale_radio.on_clicked(self.on_spectrum_scale)
        self.options_check.on_clicked(self.on_option)
        self.apply_button.on_clicked(self.on_apply_limits)
        self.save_fig_button.on_clicked(self.on_save_figure)
        self.save_both_button.on_clicked(self.on_save_both)
        self.anim_button.on_clicked(self.on_export_animation)
        self.axis_radio.on_clicked(self.on_axis)
        self.slice_slider.on_changed(self.on_slice)
        self.sigma_slider.on_changed(self.on_sigma)
        self.figure.canvas.mpl_connect("key_press_event", self.on_key)
        self.figure.canvas.mpl_connect("button_press_event", self.on_click)

    def _image_extent(self) -> tuple:
        rows, cols = self.session.slice_shape
        return 0.5, cols + 0.5, rows + 0.5, 0.5

    # ------------------------------------------------------------------
    # Redraw from the session
    # ------------------------------------------------------------------
    def redraw(self) -> None:
        session = self.session
        self.image.set_data(session.displayed_slice)
        self.image.set_extent(self._image_extent())
        self.image.set_cmap(session.colormap())
        self.image.set_clim(*session.color_range)
        self.ax_img.set_xlim(self._image_extent()[:2])
        self.ax_img.set_ylim(self._image_extent()[2:])
        self.marker.set_data([session.marker[0]], [session.marker[1]])

        positions, values = session.spectrum
        self.spectrum_line.set_data(positions, values)
        self.ax_spec.set_xlim(positions[0] - 0.5, positions[-1] + 0.5)
        self.ax_spec.set_ylim(*session.spectrum_ylim)

        self.info.set_text(session.info_text)
        self.status.set_text(session.status_text)
        self.sigma_label.set_text(make_sigma_text(session.sigma))
        self._sync_slider()
        self.figure.canvas.draw_idle()

    def _sync_slider(self) -> None:
        extent = self.session.extent
        self._syncing = True
        try:
            self.slice_slider.valmax = max(extent, 2)
            self.slice_slider.ax.set_xlim(1, max(extent, 2))
            if self.slice_slider.val != self.session.index:
                self.slice_slider.set_val(self.session.index)
        finally:
            self._syncing = False

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def on_axis(self, label: str) -> None:
        if label not in AXIS_LABELS:
            return
        self.session.set_axis(AXIS_LABELS.index(label) + 1)
        self.redraw()

    def on_slice(self, value: float) -> None:
        if self._syncing:
            return
        self.session.set_slice_index(value)
        self.redraw()

    def on_image_scale(self, label: str) -> None:
        self.session.set_image_scale(label)
        self.redraw()

    def on_spectrum_scale(self, label: str) -> None:
        self.session.set_spectrum_scale(label)
        self.redraw()

    def on_option(self, label: str) -> None:
        invert, smooth, _ = self.options_check.get_status()
        if label == "Invert colormap":
            self.session.set_colormap_inverted(invert)
        elif label == "Gaussian filter":
            self.session.set_smoothing(smooth)
        self.redraw()

    @property
    def ping_pong(self) -> bool:
        return self.options_check.get_status()[2]

    def on_sigma(self, value: float) -> None:
        self.session.set_sigma(value)
        self.redraw()

    def on_apply_limits(self, event=None) -> bool:
        accepted = self.session.apply_limits(
            self.vmin_box.text, self.vmax_box.text
        )
        if accepted:
            self.redraw()
        return accepted

    def on_key(self, event) -> None:
        if event.key == "i":
            self.session.toggle_invert()
        elif event.key in MOVES:
            self.session.move(event.key)
        else:
            return
        self.redraw()

    def on_click(self, event) -> None:
        if event.inaxes is not self.ax_img or event.button != 1:
            return
        if event.xdata is None or event.ydata is None:
            return
        self.session.select_slice_coord(event.ydata, event.xdata)
        self.redraw()

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    @property
    def export_format(self) -> ExportFormat:
        return ExportFormat.from_value(self.format_radio.value_selected)

    @property
    def file_name_base(self) -> str | None:
        return clean_text(self.name_box.text) or None

    def on_save_figure(self, event=None) -> str | None:
        snapshot = self.session.snapshot()
        path = os.path.join(
            self.save_dir,
            make_file_name(snapshot, self.file_name_base, self.export_format)
        )
        try:
            return save_figure(self.figure, path)
        except Exception as e:
            self.session.logger.error(f"Failed to save {path}: {e}")
            return None

    def _track(self, future) -> None:
        """Keep pending exports until they are done."""
        self.futures.append(future)
        future.add_done_callback(self._forget)

    def _forget(self, future) -> None:
        if future in self.futures:
            self.futures.remove(future)

    def on_save_both(self, event=None):
        future = self.exporter.submit_figures(
            self.session.snapshot(),
            self.save_dir,
            self.file_name_base,
            self.export_format,
        )
        self._track(future)
        return future

    def on_export_animation(self, event=None):
        snapshot = self.session.snapshot()
        start, stop, step, fps = parse_frame_request(
            self.start_box.text,
            self.stop_box.text,
            self.step_box.text,
            self.fps_box.text,
            snapshot.extent,
        )
        frames = build_frames(
            start, stop, step, self.ping_pong, snapshot.extent
        )
        if not frames:
            self.session.logger.warning(
                f"No frame to export (start {start} > stop {stop})."
            )
            return None
        path = os.path.join(
            self.save_dir,
            animation_file_name(snapshot, frames, fps, self.file_name_base)
        )
        future = self.exporter.submit_animation(
            snapshot, frames, path, fps,
            dpi=self.session.params["export"]["dpi"]
        )
        self._track(future)
        return future

    def show(self) -> None:
        plt.show()

    def close(self) -> None:
        self.exporter.shutdown()
        plt.close(self.figure)

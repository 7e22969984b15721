import importlib

from .formatting import (
    ExportFormat,
    add_colorbar,
    make_info_text,
    make_slice_title,
    make_spec_title,
    make_status_text,
    pick_figure_size,
    save_fig,
    to_cmap,
    update_plot_params,
)

__submodules__ = {"slice"}

__class_func_submodules__ = {
    "plot_slice": "slice",
    "plot_spectrum": "slice",
    "plot_slice_and_spectrum": "slice",
}

__all__ = [
    "ExportFormat",
    "add_colorbar",
    "make_info_text",
    "make_slice_title",
    "make_spec_title",
    "make_status_text",
    "pick_figure_size",
    "save_fig",
    "to_cmap",
    "update_plot_params",
]
__all__ += list(__submodules__) + list(__class_func_submodules__)


def __getattr__(name):
    if name in __submodules__:
        return importlib.import_module(f"{__name__}.{name}")

    if name in __class_func_submodules__:
        submodule = importlib.import_module(
            f"{__name__}.{__class_func_submodules__[name]}"
        )
        return getattr(submodule, name)
    raise AttributeError(f"module {__name__} has no attribute {name}.")

from collections.abc import Mapping
import os
import warnings

import numpy as np
import yaml

DEFAULT_VIEWER_PARAMS = {
    "cmap": "viridis",
    "invert_cmap": False,
    "vmin": None,
    "vmax": None,
    "axis": 3,
    "image_scale": "lin",
    "spectrum_scale": "lin",
    "smooth": False,
    "gaussian_sigma": 1.5,
    "fullscreen": False,
    "figsize": None,  # (width, height) in pixels
    "save_dir": None,
    "export": {
        "format": "png",
        "file_name_base": None,
        "fps": 12,
        "ping_pong": False,
        "dpi": 100,
    },
}


def validate_and_fill_params(
        user_params: dict,
        defaults: dict = DEFAULT_VIEWER_PARAMS
) -> dict:
    """
    Complete the viewer parameters given by the user (YAML file, command
    line, ViewerSession keywords) with DEFAULT_VIEWER_PARAMS.

    A None value counts as missing, so "vmin: null" in a YAML file
    keeps automatic colour limits. The "export" section is completed
    key by key. Keys the viewer does not know about (e.g. a misspelt
    "colour_map") are dropped with a UserWarning.

    Args:
        user_params (dict): the viewer parameters set by the user.
        defaults (dict, optional): the reference parameters, nested
            sections included. Defaults to DEFAULT_VIEWER_PARAMS.

    Returns:
        dict: a complete parameter dictionary, user_params and defaults
            are left untouched.
    """
    user_params = user_params or {}
    for key in user_params.keys() - defaults.keys():
        warnings.warn(
            f"Viewer parameter '{key}' is unknown and will be ignored.",
            UserWarning
        )

    filled_params = {}
    for key, default in defaults.items():
        value = user_params.get(key)
        if isinstance(default, Mapping):  # e.g. the "export" section
            filled_params[key] = validate_and_fill_params(value, default)
        else:
            filled_params[key] = default if value is None else value
    return filled_params


def default_save_dir() -> str:
    """The user's Desktop if it exists, the current directory otherwise."""
    desktop = os.path.join(os.path.expanduser("~"), "Desktop")
    if os.path.isdir(desktop):
        return desktop
    return os.getcwd()


def load_params(path: str) -> dict:
    """
    Load the viewer parameters from a YAML file and fill in defaults.

    Args:
        path (str): path to the YAML file.

    Returns:
        dict: the validated parameters.
    """
    with open(path, "r") as file:
        params = yaml.safe_load(file)
    return validate_and_fill_params(params or {})


def convert_np_arrays(**data) -> dict:
    """
    Recursively converts numpy types, arrays and tuples in a dictionary
    to standard Python types for safe YAML serialization.
    """
    def convert_value(value):
        if isinstance(value, np.ndarray):
            if value.size == 1:
                return convert_value(value.item())
            return [convert_value(v) for v in value]
        if isinstance(value, (np.bool_, bool)):
            return bool(value)
        if isinstance(value, np.integer):
            return int(value)
        if isinstance(value, np.floating):
            return float(value)
        if isinstance(value, (list, tuple)):
            return [convert_value(v) for v in value]
        if isinstance(value, dict):
            return convert_np_arrays(**value)
        return value

    return {key: convert_value(value) for key, value in data.items()}


def dump_params(params: dict, path: str) -> None:
    """Write the viewer parameters to a YAML file."""
    with open(path, "w") as file:
        yaml.dump(convert_np_arrays(**params), file, sort_keys=False)

import numpy as np


def create_synthetic_cube(
        nx: int = 64, ny: int = 48, nz: int = 32
) -> np.ndarray:
    """
    Create a non-negative synthetic cube: a ramp increasing along every
    axis plus a sinusoidal ripple in the (x, y) plane. Values are kept
    non-negative so that the logarithmic scales stay finite.

    Args:
        nx (int, optional): size along dim 1. Defaults to 64.
        ny (int, optional): size along dim 2. Defaults to 48.
        nz (int, optional): size along dim 3. Defaults to 32.

    Returns:
        np.ndarray: float32 cube of shape (nx, ny, nz).
    """
    i, j, k = np.meshgrid(
        np.arange(1, nx + 1, dtype=np.float32),
        np.arange(1, ny + 1, dtype=np.float32),
        np.arange(1, nz + 1, dtype=np.float32),
        indexing="ij",
    )
    base = 0.8 * (i + 8 * j + 64 * k)
    ripple = 40 * np.sin(2 * np.pi * i / nx) * np.cos(2 * np.pi * j / ny)
    return np.maximum(base + ripple, 0).astype(np.float32)

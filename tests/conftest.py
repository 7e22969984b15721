"""
Pytest configuration and fixtures for cubeviewer tests.

This module provides shared cubes, sessions and configuration for
testing the cubeviewer package.
"""

import matplotlib
import numpy as np
import pytest

# use non-interactive backend for tests (prevents plot windows in CI)
matplotlib.use("Agg")

from cubeviewer.session import ViewerSession  # noqa: E402
from cubeviewer.simulation import create_synthetic_cube  # noqa: E402


@pytest.fixture
def small_cube():
    """
    A (7, 5, 4) cube whose value encodes its 1-based position:
    cube[i-1, j-1, k-1] == 100 * i + 10 * j + k.
    """
    i, j, k = np.meshgrid(
        np.arange(1, 8), np.arange(1, 6), np.arange(1, 5), indexing="ij"
    )
    return (100 * i + 10 * j + k).astype(np.float64)


@pytest.fixture
def synthetic_cube():
    """A small synthetic cube with a non trivial intensity pattern."""
    return create_synthetic_cube(16, 12, 8)


@pytest.fixture
def session(small_cube):
    """A session over the small cube, named 'test'."""
    return ViewerSession(small_cube, name="test")


def pytest_configure(config):
    """
    Pytest hook for configuration.

    This adds custom markers and configures the test environment.
    """
    config.addinivalue_line(
        "markers", "unit: fast tests of isolated functions and classes"
    )

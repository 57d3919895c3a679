"""
Pytest fixtures and configuration for Black Hole Renderer tests.

This module provides shared scenes, photon builders and assertion helpers.
"""

import dataclasses

import numpy as np
import pytest

from blackhole_renders.photons import PhotonBatch
from blackhole_renders.scene import BlackHole, Camera, Scene, Settings


@pytest.fixture
def scene():
    """The reference scene."""
    return Scene.default()


@pytest.fixture
def axis_scene():
    """
    Camera at (0, 0, 10) looking down -z at the black hole.

    Camera space: x_cam = -x, y_cam = y, z_cam = 10 - z.
    """
    camera = Camera.look_at(np.array([0.0, 0.0, 10.0]), np.array([0.0, 0.0, -1.0]))
    return Scene(black_hole=BlackHole(), camera=camera, settings=Settings())


@pytest.fixture
def massless_scene(axis_scene):
    """Same geometry as axis_scene with gravity switched off."""
    return dataclasses.replace(axis_scene, black_hole=BlackHole(mass=0.0))


def with_iterations(scene, iterations):
    """Copy of `scene` with a different step budget."""
    return dataclasses.replace(scene, settings=dataclasses.replace(scene.settings, iterations=iterations))


def make_photons(positions, directions, wavelength=580.0, normalize=True):
    """Build a PhotonBatch from lists of positions and directions."""
    positions = np.atleast_2d(np.asarray(positions, dtype=np.float64))
    directions = np.atleast_2d(np.asarray(directions, dtype=np.float64))
    if normalize:
        directions = directions / np.linalg.norm(directions, axis=1, keepdims=True)
    return PhotonBatch(position=positions, direction=directions,
                       wavelength=np.full(positions.shape[0], wavelength))


def assert_unit_length(vectors, atol=1e-12, err_msg=""):
    """Assert every row of an (N, 3) array has length 1."""
    lengths = np.sqrt(np.sum(vectors**2, axis=1))
    np.testing.assert_allclose(lengths, 1.0, rtol=0, atol=atol,
                               err_msg=f"Direction not normalized: {err_msg}")


def assert_results_identical(a, b):
    """Assert two IntersectionBatches are bit-identical (NaN matches NaN)."""
    np.testing.assert_array_equal(a.outcome, b.outcome)
    np.testing.assert_array_equal(a.steps, b.steps)
    np.testing.assert_array_equal(a.screen, b.screen)
    np.testing.assert_array_equal(a.photons.position, b.photons.position)
    np.testing.assert_array_equal(a.photons.direction, b.photons.direction)
    np.testing.assert_array_equal(a.photons.wavelength, b.photons.wavelength)

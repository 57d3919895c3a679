import numpy as np
import pytest

pytest.importorskip("gradio")

from blackhole_renders.ui import build_scene


def test_build_scene_looks_at_black_hole():
    scene = build_scene(log_mass=26.0, distance=3.0, elevation_deg=30.0, iterations=200)

    np.testing.assert_allclose(np.linalg.norm(scene.camera.position), 3.0)
    np.testing.assert_allclose(scene.camera.forward, -scene.camera.position / 3.0, atol=1e-12)
    assert scene.black_hole.mass == pytest.approx(1.0e26)
    assert scene.settings.iterations == 200


def test_build_scene_elevation():
    level = build_scene(log_mass=26.0, distance=2.0, elevation_deg=0.0, iterations=100)
    np.testing.assert_allclose(level.camera.position, [0.0, 0.0, 2.0], atol=1e-12)

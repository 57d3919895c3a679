import numpy as np
import pytest

from conftest import assert_results_identical, with_iterations
from blackhole_renders.dispatch import chunk_bounds, dispatch
from blackhole_renders.integrator import integrate
from blackhole_renders.photons import PhotonBatch
from blackhole_renders.sampling import photons_towards, random_photons


def test_chunk_bounds_cover_range():
    assert chunk_bounds(10, 4) == [(0, 4), (4, 8), (8, 10)]
    assert chunk_bounds(8, 4) == [(0, 4), (4, 8)]
    assert chunk_bounds(0, 4) == []


def test_chunk_bounds_rejects_non_positive_size():
    with pytest.raises(ValueError):
        chunk_bounds(10, 0)


@pytest.mark.parametrize("workers,chunk_size", [(1, 16), (4, 16), (4, 7), (3, 1000)])
def test_dispatch_matches_single_integration(scene, workers, chunk_size):
    """Slicing the batch across workers never changes any photon's result."""
    scene = with_iterations(scene, 200)
    origins = scene.camera.position[None, :] + 0.5 * scene.camera.forward[None, :]
    aimed = photons_towards(scene.camera, origins + np.linspace(-0.05, 0.05, 9)[:, None] * [1.0, 0.0, 0.0])
    photons = PhotonBatch.concatenate([random_photons(91, rng=17), aimed])

    expected = integrate(photons, scene)
    result = dispatch(photons, scene, workers=workers, chunk_size=chunk_size)

    assert len(result) == len(photons)
    assert np.sum(result.intersects) >= 9
    assert_results_identical(result, expected)


def test_dispatch_keeps_recorded_paths(scene):
    scene = with_iterations(scene, 50)
    photons = random_photons(40, rng=1)
    result = dispatch(photons, scene, workers=2, chunk_size=16, record_paths=True)

    assert result.paths.shape == (40, 51, 3)
    np.testing.assert_array_equal(result.paths[:, 0], photons.position)


def test_dispatch_empty_batch(scene):
    result = dispatch(PhotonBatch.empty(), scene, workers=4)
    assert len(result) == 0

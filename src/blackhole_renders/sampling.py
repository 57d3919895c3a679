"""
Photon sources.
"""
import numpy as np

from blackhole_renders import constants
from blackhole_renders.photons import PhotonBatch
from blackhole_renders.utils import normalize


def random_photons(count, rng=None, extent=constants.SOURCE_EXTENT,
                   wavelength=constants.DEFAULT_WAVELENGTH_NM):
    """
    Photons emitted from random points of a box centred on the origin.

    Positions are uniform inside the box; directions are drawn uniformly from
    the cube [-1, 1]^3 and normalized, so they favour the diagonals slightly.

    Args:
        count: Number of photons
        rng: numpy Generator or seed (None for fresh entropy)
        extent: (3,) full box size along x, y, z
        wavelength: Emitted wavelength in nm

    Returns:
        PhotonBatch
    """
    rng = np.random.default_rng(rng)
    extent = np.asarray(extent, dtype=np.float64)

    position = (rng.random((count, 3)) - 0.5) * extent[None, :]
    direction = normalize(rng.random((count, 3)) * 2.0 - 1.0)
    return PhotonBatch(position=position, direction=direction,
                       wavelength=np.full(count, float(wavelength)))


def photons_towards(camera, origins, wavelength=constants.DEFAULT_WAVELENGTH_NM):
    """
    Photons at `origins` (N, 3) aimed straight at the aperture centre.

    Useful for calibration: without gravity each one lands on the sensor at
    a position given purely by its angle of arrival.
    """
    origins = np.atleast_2d(np.asarray(origins, dtype=np.float64))
    direction = normalize(camera.position[None, :] - origins)
    return PhotonBatch(position=origins, direction=direction,
                       wavelength=np.full(origins.shape[0], float(wavelength)))

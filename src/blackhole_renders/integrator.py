"""
Photon path integration and sensor intersection.

Each photon is stepped with fixed-step explicit Euler under a Newtonian
analog of gravitational deflection, and tested against the camera aperture
before every step. A photon's simulation ends when it hits the sensor, falls
inside the Schwarzschild radius, moves too far from the camera to return
within its remaining budget, or runs out of iterations.

Photons are processed together as arrays, but nothing couples them: every
operation is elementwise, finished photons are dropped from the working set,
and each one's result is exactly what it would be if integrated alone.
"""
import logging

import numpy as np

from blackhole_renders.photons import IntersectionBatch, Outcome, PhotonBatch
from blackhole_renders.utils import distance, norm, normalize

logger = logging.getLogger(__name__)


def sensor_intersection(camera, settings, positions, directions):
    """
    Vectorized test of photons against the camera aperture and sensor.

    Args:
        camera: Camera
        settings: Settings (tolerances and magnification)
        positions: (N, 3) world positions
        directions: (N, 3) world directions

    Returns:
        tuple: (hit_mask, screen) where screen is (N, 2) normalized sensor
        coordinates, NaN where there is no hit
    """
    n = positions.shape[0]
    screen = np.full((n, 2), np.nan)

    mapped = camera.project_points(positions)
    mapped_dir = camera.to_camera_space(directions)

    # Rejections are phrased as "exceeds" so non-finite state is not rejected
    off_plane = np.abs(mapped[:, 2]) > settings.plane_tolerance
    outside_aperture = (mapped[:, 0] * mapped[:, 0] + mapped[:, 1] * mapped[:, 1]
                        > camera.aperture * camera.aperture)
    # Guards the divide below
    not_incoming = mapped_dir[:, 2] > -settings.velocity_tolerance

    candidate = ~(off_plane | outside_aperture | not_incoming)
    if not np.any(candidate):
        return candidate, screen

    m = mapped[candidate]
    md = mapped_dir[candidate]
    scale = camera.focal_length * settings.magnification
    x = m[:, 0] + md[:, 0] / -md[:, 2] * scale
    y = m[:, 1] + md[:, 1] / -md[:, 2] * scale

    sensor_width = camera.sensor_width
    sensor_height = camera.sensor_height
    off_sensor = (np.abs(x) > sensor_width / 2.0) | (np.abs(y) > sensor_height / 2.0)

    hit = candidate.copy()
    hit[candidate] = ~off_sensor

    on_sensor = ~off_sensor
    screen[hit, 0] = -x[on_sensor] / sensor_width + 0.5
    screen[hit, 1] = -y[on_sensor] / sensor_height + 0.5
    return hit, screen


def integrate(photons, scene, record_paths=False):
    """
    Simulate every photon in the batch until it terminates.

    The input batch is not modified.

    Args:
        photons: PhotonBatch of initial states
        scene: Scene (black hole, camera, settings)
        record_paths: Also record per-step positions and directions

    Returns:
        IntersectionBatch with one entry per input photon
    """
    settings = scene.settings
    camera = scene.camera
    iterations = settings.iterations
    time_scale = settings.time_scale
    c_squared = settings.c_squared
    bh_pos = scene.black_hole.position
    gm = settings.g * scene.black_hole.mass
    horizon = scene.horizon_radius

    n = len(photons)
    final = photons.copy()
    outcome = np.full(n, Outcome.EXHAUSTED.value, dtype=object)
    screen = np.full((n, 2), np.nan)
    steps = np.full(n, iterations, dtype=np.int64)

    paths = None
    path_directions = None
    if record_paths:
        paths = np.full((n, iterations + 1, 3), np.nan)
        path_directions = np.full((n, iterations + 1, 3), np.nan)
        paths[:, 0] = photons.position
        path_directions[:, 0] = photons.direction

    # Working set: indices of live photons and their compacted state
    active = np.arange(n)
    pos = photons.position.copy()
    direction = photons.direction.copy()
    wavelength = photons.wavelength.copy()

    def finish(mask, kind, step_count):
        idx = active[mask]
        outcome[idx] = kind.value
        steps[idx] = step_count
        final.position[idx] = pos[mask]
        final.direction[idx] = direction[mask]
        final.wavelength[idx] = wavelength[mask]

    for i in range(iterations):
        if active.size == 0:
            break

        # 1. Sensor test on the pre-step state
        hit, coords = sensor_intersection(camera, settings, pos, direction)
        if np.any(hit):
            finish(hit, Outcome.HIT, i)
            screen[active[hit]] = coords[hit]
            keep = ~hit
            active, pos, direction, wavelength = active[keep], pos[keep], direction[keep], wavelength[keep]
            if active.size == 0:
                break

        # 2. Euler step
        bh_dist_before = distance(pos, bh_pos)
        pos = pos + direction * time_scale

        if record_paths:
            paths[active, i + 1] = pos

        # 3. Cannot make it back before the budget runs out
        escaped = distance(pos, camera.position) > (iterations - i) * time_scale

        # 4. Inside the horizon
        bh_dist = distance(pos, bh_pos)
        captured = ~escaped & (bh_dist < horizon)

        done = escaped | captured
        if np.any(done):
            finish(escaped, Outcome.ESCAPED, i + 1)
            finish(captured, Outcome.CAPTURED, i + 1)
            keep = ~done
            active, pos, direction, wavelength = active[keep], pos[keep], direction[keep], wavelength[keep]
            bh_dist_before, bh_dist = bh_dist_before[keep], bh_dist[keep]

        # 5. Deflection towards the black hole
        with np.errstate(divide='ignore', invalid='ignore'):
            bh_dir = (bh_pos[None, :] - pos) / bh_dist[:, None]
            accel = gm / (bh_dist * bh_dist)
        wavelength = wavelength + wavelength * accel * (bh_dist - bh_dist_before) / c_squared
        direction = direction + bh_dir * accel[:, None] / c_squared * time_scale
        direction = normalize(direction)

        if record_paths:
            path_directions[active, i + 1] = direction

    if active.size:
        finish(np.ones(active.size, dtype=bool), Outcome.EXHAUSTED, iterations)

    result = IntersectionBatch(outcome=outcome, screen=screen, photons=final, steps=steps,
                               paths=paths, path_directions=path_directions)

    degenerate = ~np.isfinite(norm(final.direction))
    if np.any(degenerate):
        logger.warning("%d of %d photons ended with a non-finite direction", int(np.sum(degenerate)), n)
    logger.debug("Integrated %d photons: %s", n, result.counts())
    return result


def integrate_photon(photon, scene):
    """Integrate a single Photon and return its IntersectionRecord."""
    batch = PhotonBatch(photon.position, photon.direction, photon.wavelength)
    return integrate(batch, scene).record(0)

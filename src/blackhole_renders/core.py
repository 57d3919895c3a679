import dataclasses
import functools
import logging

import numpy as np

from blackhole_renders.dispatch import DEFAULT_CHUNK_SIZE, dispatch
from blackhole_renders.image import SensorImage
from blackhole_renders.sampling import random_photons
from blackhole_renders.scene import Scene

logger = logging.getLogger(__name__)


class Renderer:
    def __init__(self, mass=None, iterations=None, aspect=None, scene=None):
        """
        Initialize the black hole renderer.

        Coordinate System (World):
        - Origin (0,0,0): The black hole.
        - Camera: at (0, 1.5, 2.5) looking at the origin, +y up.
        - Photons are emitted from a flat box around the black hole and
          counted when they cross the camera aperture.

        Args:
            mass: Black hole mass in kg (defaults to constants.DEFAULT_MASS_KG)
            iterations: Step budget per photon
            aspect: Sensor width / height
            scene: A complete Scene, overriding the other arguments
        """
        if scene is None:
            scene = Scene.default(aspect=aspect, mass=mass, iterations=iterations)
        self.scene = scene

    @property
    def black_hole(self):
        return self.scene.black_hole

    @property
    def camera(self):
        return self.scene.camera

    @property
    def schwarzschild_radius(self):
        return self.scene.horizon_radius

    def scene_for(self, width, height):
        """The scene with its sensor reshaped to a width x height image."""
        camera = dataclasses.replace(self.scene.camera, aspect=width / height)
        return dataclasses.replace(self.scene, camera=camera)

    def trace(self, photons, scene=None, workers=None, chunk_size=DEFAULT_CHUNK_SIZE,
              record_paths=False):
        """
        Integrate a batch of photons against the scene.

        Returns:
            IntersectionBatch in input order
        """
        return dispatch(photons, scene or self.scene, workers=workers,
                        chunk_size=chunk_size, record_paths=record_paths)

    def accumulate(self, image, passes, batch_size, rng, scene=None, workers=None):
        """
        Sample, trace and blend `passes` batches of photons into `image`.

        Returns:
            Number of photons that reached the sensor
        """
        hits = 0
        for k in range(passes):
            photons = random_photons(batch_size, rng)
            result = self.trace(photons, scene=scene, workers=workers)
            hits += image.blend(result)
            logger.info("Pass %d/%d: %s", k + 1, passes, result.counts())
        return hits

    @functools.lru_cache(maxsize=32)
    def _render_cached(self, width, height, passes, batch_size, seed, workers):
        """
        Internal cached render call using hashable arguments.
        """
        image = SensorImage(width, height)
        rng = np.random.default_rng(seed)
        hits = self.accumulate(image, passes, batch_size, rng,
                               scene=self.scene_for(width, height), workers=workers)
        logger.info("Render complete: %d of %d photons reached the sensor",
                    hits, passes * batch_size)
        return image.to_uint8()

    def render(self, width=320, height=240, passes=4, batch_size=65536,
               seed=0, workers=None):
        """
        Render an image by brute-force photon sampling.

        The sensor aspect follows width / height. The same arguments always
        produce the same image, so results are cached.

        Returns:
            (height, width, 3) uint8 image
        """
        return self._render_cached(width, height, passes, batch_size, seed, workers)

"""
Image assembly from sensor hits.

Photons that reach the sensor are coloured by wavelength and averaged into
the pixel they land on. Accumulation is cumulative across calls to `blend`,
so an image converges as more batches are dispatched.
"""
import logging

import numpy as np
import PIL.Image

from blackhole_renders import constants

logger = logging.getLogger(__name__)


def wavelength_to_rgb(wavelengths):
    """
    Approximate RGB colour of monochromatic light.

    Args:
        wavelengths: (N,) wavelengths in nm

    Returns:
        (N, 3) RGB in [0, 1]; black outside 380-780 nm
    """
    wl = np.atleast_1d(np.asarray(wavelengths, dtype=np.float64))
    rgb = np.zeros(wl.shape + (3,))
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]

    # Violet: fades in from the UV edge
    m = (wl >= 380.0) & (wl < 440.0)
    attenuation = 0.3 + 0.7 * (wl[m] - 380.0) / (440.0 - 380.0)
    r[m] = -(wl[m] - 440.0) / (440.0 - 380.0) * attenuation
    b[m] = 1.0 * attenuation

    m = (wl >= 440.0) & (wl < 490.0)
    g[m] = (wl[m] - 440.0) / (490.0 - 440.0)
    b[m] = 1.0

    m = (wl >= 490.0) & (wl < 510.0)
    g[m] = 1.0
    b[m] = -(wl[m] - 510.0) / (510.0 - 490.0)

    m = (wl >= 510.0) & (wl < 580.0)
    r[m] = (wl[m] - 510.0) / (580.0 - 510.0)
    g[m] = 1.0

    m = (wl >= 580.0) & (wl < 645.0)
    r[m] = 1.0
    g[m] = -(wl[m] - 645.0) / (645.0 - 580.0)

    # Red: fades out towards the IR edge
    m = (wl >= 645.0) & (wl <= constants.VISIBLE_MAX_NM)
    r[m] = 1.0 * (0.3 + 0.7 * (constants.VISIBLE_MAX_NM - wl[m]) / (constants.VISIBLE_MAX_NM - 645.0))

    return np.power(np.maximum(rgb, 0.0), constants.SPECTRUM_GAMMA)


class SensorImage:
    """
    Running average of photon colours per pixel.
    """

    def __init__(self, width, height):
        if width < 1 or height < 1:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.sums = np.zeros((height, width, 3))
        self.counts = np.zeros((height, width), dtype=np.int64)

    @property
    def samples(self):
        """Total number of photons blended so far."""
        return int(self.counts.sum())

    def blend(self, result):
        """
        Add the hits of an IntersectionBatch to the image.

        Args:
            result: IntersectionBatch

        Returns:
            Number of photons blended
        """
        hits = result.intersects
        coords = result.screen[hits]
        colors = wavelength_to_rgb(result.photons.wavelength[hits])

        # Round half away from zero on non-negative coordinates
        with np.errstate(invalid='ignore'):
            px = np.floor(coords[:, 0] * (self.width - 1) + 0.5)
            py = np.floor(coords[:, 1] * (self.height - 1) + 0.5)
        in_bounds = ((px >= 0) & (px < self.width) & (py >= 0) & (py < self.height))

        n_out = int(np.sum(~in_bounds))
        if n_out:
            logger.warning("Skipped %d photons outside the %dx%d image", n_out, self.width, self.height)

        x = px[in_bounds].astype(np.int64)
        y = py[in_bounds].astype(np.int64)
        np.add.at(self.sums, (y, x), colors[in_bounds])
        np.add.at(self.counts, (y, x), 1)

        n_blended = int(np.sum(in_bounds))
        logger.debug("Rays blended: %d", n_blended)
        return n_blended

    @property
    def image(self):
        """(H, W, 3) float image; unlit pixels are black."""
        return self.sums / np.maximum(self.counts, 1)[:, :, None]

    def to_uint8(self):
        return (np.clip(self.image, 0.0, 1.0) * 255).astype(np.uint8)

    def save(self, path):
        PIL.Image.fromarray(self.to_uint8()).save(path)

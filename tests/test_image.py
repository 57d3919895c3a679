import logging

import numpy as np
import PIL.Image
import pytest

from blackhole_renders.image import SensorImage, wavelength_to_rgb
from blackhole_renders.photons import IntersectionBatch, Outcome, PhotonBatch


def make_hits(screen, wavelengths, outcomes=None):
    """IntersectionBatch with the given screen coordinates and wavelengths."""
    screen = np.asarray(screen, dtype=np.float64)
    n = screen.shape[0]
    if outcomes is None:
        outcomes = [Outcome.HIT] * n
    photons = PhotonBatch(np.zeros((n, 3)), np.tile([0.0, 0.0, 1.0], (n, 1)),
                          np.asarray(wavelengths, dtype=np.float64))
    return IntersectionBatch(outcome=np.array([o.value for o in outcomes], dtype=object),
                             screen=screen, photons=photons, steps=np.zeros(n, dtype=np.int64))


@pytest.mark.parametrize("wavelength,expected", [
    (580.0, [1.0, 1.0, 0.0]),   # Yellow
    (440.0, [0.0, 0.0, 1.0]),   # Blue
    (510.0, [0.0, 1.0, 0.0]),   # Green
    (645.0, [1.0, 0.0, 0.0]),   # Red
    (300.0, [0.0, 0.0, 0.0]),   # UV
    (800.0, [0.0, 0.0, 0.0]),   # IR
])
def test_wavelength_to_rgb(wavelength, expected):
    np.testing.assert_allclose(wavelength_to_rgb([wavelength])[0], expected, atol=1e-12)


def test_wavelength_to_rgb_dims_at_the_edges():
    violet, red = wavelength_to_rgb([380.0, 780.0])
    np.testing.assert_allclose(violet, [0.3 ** 0.8, 0.0, 0.3 ** 0.8])
    np.testing.assert_allclose(red, [0.3 ** 0.8, 0.0, 0.0])


def test_wavelength_to_rgb_range():
    rgb = wavelength_to_rgb(np.linspace(300.0, 850.0, 1000))
    assert rgb.shape == (1000, 3)
    assert np.all(rgb >= 0.0)
    assert np.all(rgb <= 1.0)


def test_invalid_size():
    with pytest.raises(ValueError):
        SensorImage(0, 10)


def test_blend_centre_pixel():
    image = SensorImage(17, 13)
    assert image.blend(make_hits([[0.5, 0.5]], [580.0])) == 1

    # u * 16 -> column 8, v * 12 -> row 6
    assert image.counts[6, 8] == 1
    np.testing.assert_allclose(image.image[6, 8], [1.0, 1.0, 0.0])
    assert image.samples == 1


def test_blend_averages_and_accumulates():
    image = SensorImage(17, 13)
    image.blend(make_hits([[0.5, 0.5]], [580.0]))
    image.blend(make_hits([[0.5, 0.5]], [440.0]))

    assert image.counts[6, 8] == 2
    np.testing.assert_allclose(image.image[6, 8], [0.5, 0.5, 0.5])


def test_blend_corners():
    image = SensorImage(17, 13)
    image.blend(make_hits([[0.0, 0.0], [1.0, 1.0]], [580.0, 580.0]))
    assert image.counts[0, 0] == 1
    assert image.counts[12, 16] == 1


def test_blend_ignores_non_hits():
    image = SensorImage(8, 6)
    result = make_hits([[0.5, 0.5], [np.nan, np.nan]], [580.0, 580.0],
                       outcomes=[Outcome.ESCAPED, Outcome.CAPTURED])
    assert image.blend(result) == 0
    assert image.samples == 0


def test_blend_skips_out_of_bounds_and_nan(caplog):
    image = SensorImage(17, 13)
    result = make_hits([[1.2, 0.5], [np.nan, np.nan], [0.5, 0.5]], [580.0, 580.0, 580.0])

    with caplog.at_level(logging.WARNING, logger="blackhole_renders.image"):
        blended = image.blend(result)

    assert blended == 1
    assert image.samples == 1
    assert "Skipped 2 photons" in caplog.text


def test_unlit_pixels_are_black():
    image = SensorImage(4, 3)
    np.testing.assert_array_equal(image.image, 0.0)
    assert image.to_uint8().dtype == np.uint8


def test_save(tmp_path):
    image = SensorImage(17, 13)
    image.blend(make_hits([[0.5, 0.5]], [580.0]))
    path = tmp_path / "sensor.png"
    image.save(path)

    with PIL.Image.open(path) as saved:
        assert saved.size == (17, 13)
        assert saved.getpixel((8, 6)) == (255, 255, 0)

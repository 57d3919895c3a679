import logging
import os

import numpy as np
import matplotlib.pyplot as plt

from blackhole_renders import constants
from blackhole_renders.core import Renderer
from blackhole_renders.sampling import photons_towards

logger = logging.getLogger(__name__)


def fan_sources(n_photons, distance=3.0, spread=1.5):
    """
    Emitters on a vertical line behind the black hole, in the camera's
    x = 0 plane of symmetry.
    """
    heights = np.linspace(-spread, spread, n_photons)
    return np.stack([np.zeros(n_photons), heights, np.full(n_photons, -distance)], axis=1)


def plot_paths(result, scene, ax=None):
    """
    Side view (z horizontal, y vertical) of recorded photon paths.

    Args:
        result: IntersectionBatch traced with record_paths=True
        scene: Scene the photons were traced in
        ax: Matplotlib axes (a new figure is made if None)

    Returns:
        The axes
    """
    if result.paths is None:
        raise ValueError("result has no recorded paths; trace with record_paths=True")
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 6))

    ax.set_title("Photon Paths (Side View)")
    ax.set_aspect('equal')
    ax.set_xlabel("z")
    ax.set_ylabel("y")

    # Paths, coloured by how they ended
    for path, outcome in zip(result.paths, result.outcome):
        valid = np.isfinite(path[:, 0])
        ax.plot(path[valid, 2], path[valid, 1], color=constants.OUTCOME_COLORS[outcome],
                linewidth=0.8, alpha=0.8)

    # Horizon
    bh = scene.black_hole.position
    horizon = plt.Circle((bh[2], bh[1]), scene.horizon_radius, color='black', zorder=5)
    ax.add_patch(horizon)

    # Camera and its viewing direction
    cam = scene.camera.position
    fwd = scene.camera.forward
    ax.plot(cam[2], cam[1], 'ro', markersize=6, zorder=10)
    ax.annotate("", xy=(cam[2] + 0.5 * fwd[2], cam[1] + 0.5 * fwd[1]), xytext=(cam[2], cam[1]),
                arrowprops=dict(arrowstyle="->", color='red'))

    # Legend from outcome colours
    for name, col in constants.OUTCOME_COLORS.items():
        ax.plot([], [], color=col, label=name)
    ax.legend(loc='upper left')
    return ax


def create_visualization(renderer=None, n_photons=25, path="output/photon_paths.png"):
    """Trace a fan of photons through the scene and save a plot of their paths."""
    renderer = renderer or Renderer()
    photons = photons_towards(renderer.camera, fan_sources(n_photons))
    result = renderer.trace(photons, workers=1, record_paths=True)
    logger.info("Traced %d photons: %s", n_photons, result.counts())

    ax = plot_paths(result, renderer.scene)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    ax.figure.savefig(path, dpi=150)
    plt.close(ax.figure)
    logger.info("Saved %s", path)
    return path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_visualization()

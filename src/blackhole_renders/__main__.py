import argparse
import logging
import os
import sys
import time

import numpy as np
import PIL.Image

from blackhole_renders.core import Renderer
from blackhole_renders.photons import Outcome, PhotonBatch
from blackhole_renders.sampling import photons_towards

logger = logging.getLogger("blackhole_renders")


def configure_logging(level=logging.INFO):
    """Configure root logger for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def generate_render(renderer, resolution=320, passes=4, batch_size=65536, seed=0,
                    workers=None, output="output"):
    """Render the scene to a PNG."""
    os.makedirs(output, exist_ok=True)
    width, height = resolution, resolution * 3 // 4
    logger.info("Rendering %dx%d, %d passes of %d photons...", width, height, passes, batch_size)

    t0 = time.time()
    img = renderer.render(width=width, height=height, passes=passes, batch_size=batch_size,
                          seed=seed, workers=workers)
    logger.info("Complete in %.2fs", time.time() - t0)

    path = os.path.join(output, f"blackhole_{width}x{height}.png")
    PIL.Image.fromarray(img).save(path)
    logger.info("Saved %s", path)
    return path


def run_physical_verification(renderer):
    """
    Run physical consistency checks.

    Returns:
        True when every check passes
    """
    logger.info("--- Physical Verification ---")
    camera = renderer.camera
    rs = renderer.schwarzschild_radius
    ok = True

    # Light arriving along the optical axis lands on the sensor centre
    on_axis = photons_towards(camera, camera.position[None, :] + 1.5 * camera.forward[None, :])
    record = renderer.trace(on_axis, workers=1).record(0)
    centred = record.intersects and np.allclose(record.screen, (0.5, 0.5), atol=1e-6)
    logger.info("On-axis photon: %s at %s (expected hit at (0.5, 0.5))",
                record.outcome.value, record.screen)
    ok &= centred

    # Light starting inside the horizon never leaves
    inside = PhotonBatch(
        position=np.tile(0.5 * rs * np.array([1.0, 0.0, 0.0]), (3, 1)),
        direction=np.eye(3),
        wavelength=np.full(3, 580.0),
    )
    result = renderer.trace(inside, workers=1)
    captured = bool(np.all(result.outcome == Outcome.CAPTURED.value))
    logger.info("Horizon capture: %s (r_s = %.4f)", result.counts(), rs)
    ok &= captured

    # Light heading away from everything is pruned early
    away = PhotonBatch(position=2.0 * camera.forward, direction=camera.forward,
                       wavelength=580.0)
    record = renderer.trace(away, workers=1).record(0)
    budget = renderer.scene.settings.iterations
    logger.info("Outbound photon: %s after %d of %d steps", record.outcome.value, record.steps, budget)
    ok &= record.outcome is Outcome.ESCAPED and record.steps < budget

    logger.info("Verification %s", "passed" if ok else "FAILED")
    return bool(ok)


def main():
    parser = argparse.ArgumentParser(description="Black Hole Lensing Renderer CLI")
    parser.add_argument("--ui", action="store_true", help="Launch the interactive Gradio UI")
    parser.add_argument("--render", action="store_true", help="Render the reference scene to a PNG")
    parser.add_argument("--verify", action="store_true", help="Run physical consistency checks")
    parser.add_argument("--paths", action="store_true", help="Plot a fan of photon paths")
    parser.add_argument("--res", type=int, default=320, help="Image width in pixels (height is 3/4)")
    parser.add_argument("--passes", type=int, default=4, help="Number of photon batches to accumulate")
    parser.add_argument("--batch", type=int, default=65536, help="Photons per batch")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for photon sampling")
    parser.add_argument("--mass", type=float, default=None, help="Black hole mass in kg")
    parser.add_argument("--iterations", type=int, default=None, help="Step budget per photon")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    parser.add_argument("--output", default="output", help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    renderer = Renderer(mass=args.mass, iterations=args.iterations)

    if args.ui:
        from blackhole_renders.ui import CSS, create_ui
        logger.info("Launching UI...")
        demo = create_ui()
        demo.launch(css=CSS)
    elif args.render:
        generate_render(renderer, args.res, args.passes, args.batch, args.seed,
                        args.workers, args.output)
    elif args.verify:
        if not run_physical_verification(renderer):
            sys.exit(1)
    elif args.paths:
        from blackhole_renders.tools.visualize_paths import create_visualization
        create_visualization(renderer, path=os.path.join(args.output, "photon_paths.png"))
    else:
        parser.print_help()


def run_ui():
    """Entry point for blackhole-ui command."""
    sys.argv = [sys.argv[0], "--ui"]
    main()


def run_verify():
    """Entry point for blackhole-verify command."""
    sys.argv = [sys.argv[0], "--verify"]
    main()


def run_render():
    """Entry point for blackhole-render command."""
    sys.argv = [sys.argv[0], "--render"] + sys.argv[1:]
    main()


if __name__ == "__main__":
    main()

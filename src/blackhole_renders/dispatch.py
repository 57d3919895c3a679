"""
Data-parallel dispatch of photon batches.

A batch is cut into contiguous slices, each slice is integrated on a worker
thread, and the results are put back in input order. NumPy releases the GIL
inside its array loops, so threads give real parallelism on large slices
without pickling the scene.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed

from blackhole_renders.integrator import integrate
from blackhole_renders.photons import IntersectionBatch

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 16384


def chunk_bounds(n, chunk_size):
    """(start, stop) pairs covering range(n) in slices of at most chunk_size."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [(start, min(start + chunk_size, n)) for start in range(0, n, chunk_size)]


def dispatch(photons, scene, workers=None, chunk_size=DEFAULT_CHUNK_SIZE, record_paths=False):
    """
    Integrate a photon batch across a pool of worker threads.

    Returns only once every slice has finished. The result is identical to
    `integrate(photons, scene)`.

    Args:
        photons: PhotonBatch
        scene: Scene shared read-only by all workers
        workers: Thread count (defaults to the CPU count); 1 runs inline
        chunk_size: Photons per task
        record_paths: Forwarded to `integrate`

    Returns:
        IntersectionBatch in input order
    """
    bounds = chunk_bounds(len(photons), chunk_size)
    if workers is None:
        workers = os.cpu_count() or 1

    if workers <= 1 or len(bounds) <= 1:
        return integrate(photons, scene, record_paths=record_paths)

    results = [None] * len(bounds)
    with ThreadPoolExecutor(max_workers=min(workers, len(bounds))) as executor:
        futures = {
            executor.submit(integrate, photons.take(slice(start, stop)), scene, record_paths): k
            for k, (start, stop) in enumerate(bounds)
        }
        for future in as_completed(futures):
            results[futures[future]] = future.result()

    logger.debug("Dispatched %d photons in %d slices on %d workers",
                 len(photons), len(bounds), workers)
    return IntersectionBatch.concatenate(results)

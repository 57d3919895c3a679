"""
Utility functions for Black Hole Renderer.

This module provides vector helpers shared by the scene, the integrator and
the image pipeline. Norms and rotations are spelled out per component so
that every photon row is computed with the same sequence of operations no
matter how many rows share the array.
"""

import numpy as np


def ensure_batch(arr, width=3):
    """
    Ensure an array is in batch format.

    Single vectors (ndim=1 with `width` components) get a leading batch axis;
    scalars become a batch of one. Arrays already in batch format are
    returned unchanged.

    Args:
        arr: Array-like input
        width: Number of components of a single vector (None for scalars)

    Returns:
        Batched float64 array
    """
    arr = np.asarray(arr, dtype=np.float64)
    if width is None:
        return np.atleast_1d(arr)
    if arr.ndim == 1 and arr.shape[0] == width:
        return arr[None, :]
    return arr


def norm(vectors):
    """Euclidean length of each row of an (N, 3) array."""
    x, y, z = vectors[:, 0], vectors[:, 1], vectors[:, 2]
    return np.sqrt(x * x + y * y + z * z)


def distance(points, point):
    """Distance from each row of `points` (N, 3) to a single `point` (3,)."""
    return norm(points - point[None, :])


def normalize(vectors):
    """
    Scale each row of an (N, 3) array to unit length.

    Zero rows are not guarded: they become NaN, and the caller decides what
    that means.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        return vectors / norm(vectors)[:, None]


def rotate(matrix, vectors):
    """
    Apply a 3x3 matrix to each row of an (N, 3) array.

    Equivalent to `vectors @ matrix.T`, written out so the result of a row
    does not depend on the batch size (BLAS may pick different kernels).
    """
    x, y, z = vectors[:, 0], vectors[:, 1], vectors[:, 2]
    out = np.empty(vectors.shape, dtype=np.float64)
    for row in range(3):
        out[:, row] = matrix[row, 0] * x + matrix[row, 1] * y + matrix[row, 2] * z
    return out


def frozen_vector(values, shape=(3,)):
    """Return a read-only float64 copy of `values` with the given shape."""
    arr = np.array(values, dtype=np.float64)
    if arr.shape != shape:
        raise ValueError(f"expected shape {shape}, got {arr.shape}")
    arr.flags.writeable = False
    return arr

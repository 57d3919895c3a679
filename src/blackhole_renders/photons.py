"""
Data structures for photon state and intersection results.
"""
from dataclasses import dataclass
from enum import Enum

import numpy as np

from blackhole_renders.utils import ensure_batch


class Outcome(Enum):
    """Enumeration of the ways a photon's simulation can end."""
    HIT = "hit"
    CAPTURED = "captured"
    ESCAPED = "escaped"
    EXHAUSTED = "exhausted"


@dataclass
class Photon:
    """State of a single photon."""
    position: np.ndarray  # (3,)
    direction: np.ndarray  # (3,) unit vector
    wavelength: float  # nm


@dataclass
class PhotonBatch:
    """
    State of N photons, stored as parallel arrays.

    Attributes:
        position: (N, 3) world positions
        direction: (N, 3) unit directions of travel
        wavelength: (N,) wavelengths in nanometres
    """
    position: np.ndarray
    direction: np.ndarray
    wavelength: np.ndarray

    def __post_init__(self):
        """Promote single photons to a batch and validate array shapes."""
        self.position = ensure_batch(self.position)
        self.direction = ensure_batch(self.direction)
        self.wavelength = ensure_batch(self.wavelength, width=None)

        if self.position.ndim != 2 or self.position.shape[1] != 3:
            raise ValueError(f"position must be (N,3) array, got shape {self.position.shape}")
        if self.direction.ndim != 2 or self.direction.shape[1] != 3:
            raise ValueError(f"direction must be (N,3) array, got shape {self.direction.shape}")
        if self.wavelength.ndim != 1:
            raise ValueError(f"wavelength must be 1D array, got shape {self.wavelength.shape}")

        n_photons = self.position.shape[0]
        if self.direction.shape[0] != n_photons:
            raise ValueError(f"direction shape {self.direction.shape} doesn't match position shape {self.position.shape}")
        if self.wavelength.shape[0] != n_photons:
            raise ValueError(f"wavelength shape {self.wavelength.shape} doesn't match position shape {self.position.shape}")

    def __len__(self):
        return self.position.shape[0]

    @classmethod
    def empty(cls):
        return cls(np.zeros((0, 3)), np.zeros((0, 3)), np.zeros(0))

    @classmethod
    def concatenate(cls, batches):
        batches = list(batches)
        if not batches:
            return cls.empty()
        return cls(
            position=np.concatenate([b.position for b in batches]),
            direction=np.concatenate([b.direction for b in batches]),
            wavelength=np.concatenate([b.wavelength for b in batches]),
        )

    def take(self, indices):
        """Sub-batch of the photons at `indices` (index array, slice or mask)."""
        return PhotonBatch(
            position=self.position[indices],
            direction=self.direction[indices],
            wavelength=self.wavelength[indices],
        )

    def copy(self):
        return PhotonBatch(self.position.copy(), self.direction.copy(), self.wavelength.copy())

    def photon(self, i):
        return Photon(
            position=self.position[i].copy(),
            direction=self.direction[i].copy(),
            wavelength=float(self.wavelength[i]),
        )


@dataclass
class IntersectionRecord:
    """
    Terminal state of one photon.

    `screen` holds normalized (u, v) sensor coordinates and is only set when
    the outcome is a hit.
    """
    outcome: Outcome
    photon: Photon
    steps: int
    screen: tuple[float, float] | None = None

    @property
    def intersects(self):
        return self.outcome is Outcome.HIT


@dataclass
class IntersectionBatch:
    """
    Result of integrating a photon batch, one entry per input photon.

    Attributes:
        outcome: (N,) Outcome values
        screen: (N, 2) normalized sensor coordinates, NaN unless hit
        photons: Final photon state, always written
        steps: (N,) number of position updates each photon made
        paths: (N, S+1, 3) recorded positions, NaN after termination (optional)
        path_directions: (N, S+1, 3) recorded directions (optional)
    """
    outcome: np.ndarray
    screen: np.ndarray
    photons: PhotonBatch
    steps: np.ndarray
    paths: np.ndarray | None = None
    path_directions: np.ndarray | None = None

    def __post_init__(self):
        """Validate array shapes and outcome values."""
        if self.outcome.ndim != 1:
            raise ValueError(f"outcome must be 1D array, got shape {self.outcome.shape}")
        if self.screen.ndim != 2 or self.screen.shape[1] != 2:
            raise ValueError(f"screen must be (N,2) array, got shape {self.screen.shape}")

        n_photons = self.outcome.shape[0]
        if self.screen.shape[0] != n_photons:
            raise ValueError(f"screen shape {self.screen.shape} doesn't match outcome shape {self.outcome.shape}")
        if len(self.photons) != n_photons:
            raise ValueError(f"{len(self.photons)} photons don't match outcome shape {self.outcome.shape}")
        if self.steps.shape != (n_photons,):
            raise ValueError(f"steps shape {self.steps.shape} doesn't match outcome shape {self.outcome.shape}")

        valid_outcomes = {o.value for o in Outcome}
        invalid = set(self.outcome) - valid_outcomes
        if invalid:
            raise ValueError(f"Invalid outcomes: {invalid}. Valid outcomes: {valid_outcomes}")

    def __len__(self):
        return self.outcome.shape[0]

    def __iter__(self):
        for i in range(len(self)):
            yield self.record(i)

    @property
    def intersects(self):
        """Boolean hit flag per photon."""
        return self.outcome == Outcome.HIT.value

    def record(self, i):
        outcome = Outcome(self.outcome[i])
        screen = None
        if outcome is Outcome.HIT:
            screen = (float(self.screen[i, 0]), float(self.screen[i, 1]))
        return IntersectionRecord(outcome=outcome, photon=self.photons.photon(i),
                                  steps=int(self.steps[i]), screen=screen)

    def counts(self):
        """Number of photons per outcome, keyed by outcome value."""
        return {o.value: int(np.sum(self.outcome == o.value)) for o in Outcome}

    @classmethod
    def concatenate(cls, batches):
        batches = list(batches)
        paths = None
        path_directions = None
        if batches and all(b.paths is not None for b in batches):
            paths = np.concatenate([b.paths for b in batches])
            path_directions = np.concatenate([b.path_directions for b in batches])
        return cls(
            outcome=np.concatenate([b.outcome for b in batches]) if batches else np.zeros(0, dtype=object),
            screen=np.concatenate([b.screen for b in batches]) if batches else np.zeros((0, 2)),
            photons=PhotonBatch.concatenate(b.photons for b in batches),
            steps=np.concatenate([b.steps for b in batches]) if batches else np.zeros(0, dtype=np.int64),
            paths=paths,
            path_directions=path_directions,
        )

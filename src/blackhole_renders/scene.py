"""
Scene description for the Black Hole renderer.

Everything here is read-only during a dispatch: the black hole, the camera
and the integration settings are frozen dataclasses, and the arrays they hold
are copied and locked on construction. Variants are made with
`dataclasses.replace`.

Coordinate System (World):
- Origin (0,0,0): The black hole.
- Camera space: +z is the viewing direction, +y the camera's up, +x its
  right. Photons arriving at the camera travel towards -z.
"""
from dataclasses import dataclass, field

import numpy as np

from blackhole_renders import constants
from blackhole_renders.utils import frozen_vector, rotate


@dataclass(frozen=True, eq=False)
class BlackHole:
    """A non-rotating point mass."""
    mass: float = constants.DEFAULT_MASS_KG
    position: np.ndarray = field(default_factory=lambda: np.array(constants.BLACK_HOLE_POSITION))

    def __post_init__(self):
        if self.mass < 0.0:
            raise ValueError(f"mass must be non-negative, got {self.mass}")
        object.__setattr__(self, "position", frozen_vector(self.position))

    def schwarzschild_radius(self, g=constants.GRAVITATIONAL_CONSTANT,
                             c=constants.SPEED_OF_LIGHT):
        """Event horizon radius r_s = 2GM/c^2."""
        return 2.0 * g * self.mass / (c * c)


@dataclass(frozen=True, eq=False)
class Camera:
    """
    Pinhole camera with a circular aperture and a rectangular sensor.

    Attributes:
        position: (3,) world position of the aperture centre
        orientation: (3, 3) rotation taking world vectors into camera space
        aperture: Aperture radius
        focal_length: Distance from aperture to sensor
        aspect: Sensor width / height
        sensor_width: Physical sensor width
    """
    position: np.ndarray
    orientation: np.ndarray
    aperture: float = constants.APERTURE_RADIUS
    focal_length: float = constants.FOCAL_LENGTH
    aspect: float = constants.DEFAULT_ASPECT
    sensor_width: float = constants.SENSOR_WIDTH

    def __post_init__(self):
        object.__setattr__(self, "position", frozen_vector(self.position))
        object.__setattr__(self, "orientation", frozen_vector(self.orientation, shape=(3, 3)))

        if not np.allclose(self.orientation @ self.orientation.T, np.eye(3), atol=1e-9):
            raise ValueError("orientation must be an orthonormal rotation matrix")
        if self.aperture <= 0.0:
            raise ValueError(f"aperture must be positive, got {self.aperture}")
        if self.aspect <= 0.0 or self.sensor_width <= 0.0:
            raise ValueError(f"invalid sensor geometry: width={self.sensor_width}, aspect={self.aspect}")

    @classmethod
    def look_at(cls, position, direction, up=constants.CAMERA_UP, **kwargs):
        """
        Build a camera at `position` viewing along `direction`.

        The orientation rows are the camera's right, up and forward axes, so
        the forward axis maps to +z. `up` only needs to be roughly up; it is
        re-orthogonalised against the viewing direction.
        """
        forward = np.asarray(direction, dtype=np.float64)
        forward = forward / np.linalg.norm(forward)

        right = np.cross(np.asarray(up, dtype=np.float64), forward)
        right_len = np.linalg.norm(right)
        if right_len < 1e-12:
            raise ValueError("up vector must not be parallel to the viewing direction")
        right = right / right_len
        true_up = np.cross(forward, right)

        orientation = np.stack([right, true_up, forward])
        return cls(position=position, orientation=orientation, **kwargs)

    @property
    def forward(self):
        """Viewing direction in world space."""
        return self.orientation[2]

    @property
    def sensor_height(self):
        return self.sensor_width / self.aspect

    def to_camera_space(self, vectors):
        """Rotate world-space vectors (N, 3) into camera space."""
        return rotate(self.orientation, vectors)

    def project_points(self, points):
        """Camera-space coordinates of world-space points (N, 3)."""
        return self.to_camera_space(points - self.position[None, :])


@dataclass(frozen=True)
class Settings:
    """Integration constants, fixed for the duration of a dispatch."""
    iterations: int = constants.ITERATIONS
    time_scale: float = constants.TIME_SCALE
    g: float = constants.GRAVITATIONAL_CONSTANT
    c: float = constants.SPEED_OF_LIGHT
    plane_tolerance: float = constants.PLANE_TOLERANCE
    velocity_tolerance: float = constants.VELOCITY_TOLERANCE
    magnification: float = constants.MAGNIFICATION

    def __post_init__(self):
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")
        if self.time_scale <= 0.0:
            raise ValueError(f"time_scale must be positive, got {self.time_scale}")

    @property
    def c_squared(self):
        return self.c * self.c


@dataclass(frozen=True, eq=False)
class Scene:
    """The black hole, the camera and the integration settings."""
    black_hole: BlackHole
    camera: Camera
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def default(cls, aspect=None, mass=None, iterations=None):
        """
        The reference scene: a 2e26 kg black hole at the origin viewed from
        (0, 1.5, 2.5).
        """
        black_hole = BlackHole(mass=mass if mass is not None else constants.DEFAULT_MASS_KG)
        camera = Camera.look_at(
            constants.CAMERA_POSITION,
            constants.CAMERA_DIRECTION,
            aspect=aspect if aspect is not None else constants.DEFAULT_ASPECT,
        )
        settings = Settings(iterations=iterations if iterations is not None else constants.ITERATIONS)
        return cls(black_hole=black_hole, camera=camera, settings=settings)

    @property
    def horizon_radius(self):
        return self.black_hole.schwarzschild_radius(self.settings.g, self.settings.c)

"""
Physical constants and configuration for the Black Hole Renderer.
"""

# Physics (SI)
GRAVITATIONAL_CONSTANT = 6.67e-11
SPEED_OF_LIGHT = 3e8

# Black Hole
DEFAULT_MASS_KG = 2.0e26
BLACK_HOLE_POSITION = (0.0, 0.0, 0.0)

# Camera (world units)
CAMERA_POSITION = (0.0, 1.5, 2.5)
CAMERA_DIRECTION = (0.0, -1.5, -2.5)  # Looking at the black hole
CAMERA_UP = (0.0, 1.0, 0.0)
APERTURE_RADIUS = 0.02
FOCAL_LENGTH = 1.0
SENSOR_WIDTH = 5.0
DEFAULT_ASPECT = 4.0 / 3.0

# Integration
ITERATIONS = 1500
TIME_SCALE = 0.015
PLANE_TOLERANCE = 0.08  # Half-thickness of the aperture slab
VELOCITY_TOLERANCE = 1e-4  # Minimum speed towards the camera
MAGNIFICATION = 2.0

# Photon Source
DEFAULT_WAVELENGTH_NM = 580.0
# Emission volume, 12 x 1 x 12 chunks of 8 voxels at 0.1 units
SOURCE_EXTENT = (9.6, 0.8, 9.6)

# Visible spectrum (nm)
VISIBLE_MIN_NM = 380.0
VISIBLE_MAX_NM = 780.0
SPECTRUM_GAMMA = 0.8

# Outcome colours for diagnostics
OUTCOME_COLORS = {
    "hit": [1.0, 0.8, 0.2],      # Amber
    "captured": [0.1, 0.1, 0.1],  # Black
    "escaped": [0.2, 0.4, 1.0],   # Blue
    "exhausted": [0.8, 0.2, 0.8]  # Magenta
}

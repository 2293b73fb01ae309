"""
The `constants` module defines the mathematical, physical and telemetry timing
constants used by the ancillary processing chain.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert arcseconds to radians. Equal to 2pi/(360*3600). Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

"""
Constant to convert radians to arcseconds. Equal to (360*3600)/(2pi). Units: *as/rad*
"""
RAD2AS = 360.0 * 3600.0 / PI / 2.0

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Seconds in one day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

# Earth Constants
"""
Earth's equatorial radius. [m]

References:

1. GGM05s Gravity Model
"""
R_EARTH = 6.378136300e6  # [m] GGM05s Value

"""
Earth's Gravitational constant [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_EARTH = 3.986004415e14  # [m^3/s^2] GGM05s Value

"""
Earth's first zonal harmonic. [dimensionless]

References:

1. GGM05s Gravity Model.
"""
J2_EARTH = 0.0010826358191967  # [] GGM05s value

"""
Earth axial rotation rate. [rad/s]

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5  # [rad/s] Taken from Vallado 4th Ed page 222

# Telemetry Constants
"""
Nominal spacing between consecutive gyro (IMU) samples. Units: *s*
"""
IMU_SAMPLE_PERIOD = 0.02

"""
Nominal spacing between consecutive attitude quaternion samples. Units: *s*
"""
QUATERNION_SAMPLE_PERIOD = 0.02

"""
Number of IMU and quaternion samples carried by one L0R telemetry record.
"""
SAMPLES_PER_RECORD = 50

"""
Tolerance on the quaternion sample spacing when searching for a nominal
window edge. Units: *s*
"""
QUATERNION_TIME_TOLERANCE = 1.0e-4

"""
Nominal spacing of the resampled ephemeris grid. Units: *s*
"""
EPHEMERIS_SAMPLE_PERIOD = 1.0

"""
Number of support points used by every Lagrange interpolation.
"""
LAGRANGE_POINTS = 4

"""
Percentage of invalid attitude points above which a warning is issued.
"""
BAD_ATTITUDE_PERCENT_THRESHOLD = 5.0

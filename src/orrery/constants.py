"""
Physical constants and unit conversions.

All values are SI: metres, kilograms, seconds. Epochs are Julian dates, and
the Kepler solver converts day differences to seconds with DAY_SECONDS.
"""

# Gravitational constant [m^3 kg^-1 s^-2]
G = 6.674e-11

# Masses [kg]
MSOL = 1.98855e30
MEARTH = 5.9722e24

# Lengths [m]
AU = 149597870700.0
RSOL = 6.957e8
REARTH = 6.371e6

# Julian day to seconds, used at the epoch/time boundary
DAY_SECONDS = 86400.0

# Reference epochs [JD]
J2000 = 2451545.0
UNIX_EPOCH_JD = 2440587.5


def unix_from_julian(jd):
    """Convert a Julian date to seconds since the Unix epoch."""
    return (jd - UNIX_EPOCH_JD) * DAY_SECONDS


def julian_from_unix(seconds):
    """Convert seconds since the Unix epoch to a Julian date."""
    return seconds / DAY_SECONDS + UNIX_EPOCH_JD

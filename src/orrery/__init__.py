"""
Orrery: Gravitational N-body Systems from Orbital Elements

A Python package that places a star and its planets from osculating
orbital elements and steps them forward under mutual Newtonian gravity.
"""

# Core classes
from .orbital_elements import OrbitalElements, OrbitalElements as OE
from .orbital_elements import solve_kepler, solve_hyperbolic_kepler
from .integrator import KinematicState, advance
from .system import Body, Snapshot, System, gravity
from .builder import build_system
from .loader import (
    SystemConfig, CentralBodyConfig, OrbitingBodyConfig,
    load_config, parse_config
)

# Errors
from .errors import (
    OrreryError, ConfigurationError, NonConvergentError, DegenerateGeometryError
)

# Configuration
from .config import config, temp_config

# Commonly-used constants
from .constants import G, AU, MSOL, MEARTH, RSOL, REARTH, J2000

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from orrery import *"
__all__ = [
    # Classes
    "OrbitalElements",
    "KinematicState",
    "Body",
    "Snapshot",
    "System",
    "SystemConfig",
    "CentralBodyConfig",
    "OrbitingBodyConfig",
    # Abbreviations
    "OE",
    # Functions
    "solve_kepler",
    "solve_hyperbolic_kepler",
    "advance",
    "gravity",
    "build_system",
    "load_config",
    "parse_config",
    # Errors
    "OrreryError",
    "ConfigurationError",
    "NonConvergentError",
    "DegenerateGeometryError",
    # Configuration
    "config",
    "temp_config",
    # Constants
    "G",
    "AU",
    "MSOL",
    "MEARTH",
    "RSOL",
    "REARTH",
    "J2000",
]

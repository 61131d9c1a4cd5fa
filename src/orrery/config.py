"""
Global Configuration for Orrery Package
=======================================

This module provides package-wide configuration settings that users can modify
to control solver tolerances, trail recording and default plotting
options.

Examples
--------
View current configuration:

>>> import orrery
>>> print(orrery.config)

Modify settings:

>>> orrery.config.KEPLER_TOLERANCE = 1e-12  # Stricter anomaly solving
>>> orrery.config.TRAIL_SIZE = 200  # Longer trails for new bodies

Reset to defaults:

>>> orrery.config.reset()

Temporarily modify settings:

>>> with orrery.temp_config(KEPLER_MAX_ITERATIONS=50):
...     # Tighter iteration cap for this block only
...     orbit.state_vectors(gm)

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset. Trail settings are
read when a Body or System is constructed, so changing them does not resize
trails that already exist.
"""

from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class OrreryConfig:
    """
    Global configuration for Orrery package.

    Attributes
    ----------
    KEPLER_TOLERANCE : float
        Convergence threshold between successive anomaly estimates [rad].
        Default: 1e-10
    KEPLER_MAX_ITERATIONS : int
        Iteration cap for the anomaly solvers. Reaching it raises
        NonConvergentError instead of looping forever on near-parabolic
        input. This is a policy choice, not a physical limit.
        Default: 100000
    MIN_SEPARATION : float
        Two bodies closer than this [m] are treated as coincident and
        gravity evaluation raises DegenerateGeometryError.
        Default: 1e-9
    TRAIL_SIZE : int
        Number of past positions kept per body.
        Default: 80
    TRAIL_TICK : int
        Number of integration steps between two trail samples.
        Default: 100
    DEFAULT_TIMESTEP : float
        Integration step used by the command-line runner [s].
        Default: 60.0
    DEFAULT_BODY_COLOR : str
        Display tag given to orbiting bodies without a color.
        Default: 'lightblue'
    DEFAULT_STAR_COLOR : str
        Display tag given to the central body.
        Default: 'yellow'
    DEFAULT_BODY_OPACITY : float
        Default opacity for body markers in plots (0.0 to 1.0).
        Default: 0.9
    DEFAULT_TRAIL_OPACITY : float
        Default opacity for trail lines in plots (0.0 to 1.0).
        Default: 0.5
    """

    # Kepler solver
    KEPLER_TOLERANCE: float = 1e-10
    KEPLER_MAX_ITERATIONS: int = 100_000

    # Gravity evaluation
    MIN_SEPARATION: float = 1e-9

    # Trail recording
    TRAIL_SIZE: int = 80
    TRAIL_TICK: int = 100

    # Stepping
    DEFAULT_TIMESTEP: float = 60.0

    # Plotting defaults
    DEFAULT_BODY_COLOR: str = 'lightblue'
    DEFAULT_STAR_COLOR: str = 'yellow'
    DEFAULT_BODY_OPACITY: float = 0.9
    DEFAULT_TRAIL_OPACITY: float = 0.5

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import orrery
        >>> orrery.config.TRAIL_TICK = 10  # Modify
        >>> orrery.config.reset()  # Back to defaults
        >>> orrery.config.TRAIL_TICK
        100
        """
        defaults = OrreryConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["OrreryConfig:"]
        lines.append("  Kepler Solver:")
        lines.append(f"    KEPLER_TOLERANCE = {self.KEPLER_TOLERANCE}")
        lines.append(f"    KEPLER_MAX_ITERATIONS = {self.KEPLER_MAX_ITERATIONS}")
        lines.append("  Gravity:")
        lines.append(f"    MIN_SEPARATION = {self.MIN_SEPARATION}")
        lines.append("  Trails:")
        lines.append(f"    TRAIL_SIZE = {self.TRAIL_SIZE}")
        lines.append(f"    TRAIL_TICK = {self.TRAIL_TICK}")
        lines.append("  Stepping:")
        lines.append(f"    DEFAULT_TIMESTEP = {self.DEFAULT_TIMESTEP}")
        lines.append("  Plotting:")
        lines.append(f"    DEFAULT_BODY_COLOR = '{self.DEFAULT_BODY_COLOR}'")
        lines.append(f"    DEFAULT_STAR_COLOR = '{self.DEFAULT_STAR_COLOR}'")
        lines.append(f"    DEFAULT_BODY_OPACITY = {self.DEFAULT_BODY_OPACITY}")
        lines.append(f"    DEFAULT_TRAIL_OPACITY = {self.DEFAULT_TRAIL_OPACITY}")
        return "\n".join(lines)


# Global configuration instance
config = OrreryConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import orrery
    >>> with orrery.temp_config(TRAIL_TICK=1, TRAIL_SIZE=500):
    ...     system = orrery.build_system(cfg)  # trails sampled every step
    >>> # Original config restored here
    >>> orrery.config.TRAIL_TICK
    100

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    for key in kwargs:
        if not hasattr(config, key):
            raise AttributeError(
                f"OrreryConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )

    old_values = {}
    for key, value in kwargs.items():
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)

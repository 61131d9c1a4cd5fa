"""
Exception types raised by the Orrery package.

Each error also derives from the builtin exception a caller would naturally
catch, so ``except ValueError`` keeps working for configuration and
geometry problems.
"""


class OrreryError(Exception):
    """Base class for all Orrery errors."""


class ConfigurationError(OrreryError, ValueError):
    """A system description is missing required sections or is unreadable."""


class NonConvergentError(OrreryError, RuntimeError):
    """An anomaly solver did not converge within the configured cap."""


class DegenerateGeometryError(OrreryError, ValueError):
    """A zero-length vector was about to be normalized (coincident bodies)."""

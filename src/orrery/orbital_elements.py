'''Keplerian orbital elements and the state vector solver
OrbitalElements class definition

Converts an osculating element set into position and velocity vectors in the
inertial frame of the central body, for elliptical and hyperbolic orbits.'''

import logging
from dataclasses import dataclass, fields, replace
import numpy as np
from .config import config
from .constants import AU, DAY_SECONDS, J2000
from .errors import NonConvergentError

logger = logging.getLogger(__name__)


# ========== ANOMALY SOLVERS ==========
def solve_kepler(M, e, tol=None, max_iter=None):
    """
    Solve Kepler's equation E = M + e*sin(E) by fixed-point iteration.

    Parameters
    ----------
    M : float
        Mean anomaly [rad]
    e : float
        Eccentricity, 0 <= e < 1
    tol : float, optional
        Convergence threshold between successive estimates.
        Defaults to config.KEPLER_TOLERANCE
    max_iter : int, optional
        Iteration cap. Defaults to config.KEPLER_MAX_ITERATIONS

    Returns
    -------
    float
        Eccentric anomaly [rad]

    Raises
    ------
    NonConvergentError
        If successive estimates still differ by ``tol`` or more after
        ``max_iter`` iterations
    """
    if tol is None:
        tol = config.KEPLER_TOLERANCE
    if max_iter is None:
        max_iter = config.KEPLER_MAX_ITERATIONS

    E = M + e * np.sin(M)
    for _ in range(max_iter):
        E_next = M + e * np.sin(E)
        if abs(E_next - E) < tol:
            return float(E_next)
        E = E_next

    raise NonConvergentError(
        f"Kepler's equation did not converge after {max_iter} iterations "
        f"(M={M}, e={e}). Near-parabolic orbits converge slowly, consider "
        f"raising config.KEPLER_MAX_ITERATIONS."
    )


def solve_hyperbolic_kepler(M, e, tol=None, max_iter=None):
    """
    Solve the hyperbolic Kepler equation M = e*sinh(H) - H with Newton steps.

    Starts from sign(M)*ln(2|M|/e + 1.8), which lies close to the root for
    any M.

    Parameters
    ----------
    M : float
        Hyperbolic mean anomaly [rad]
    e : float
        Eccentricity, e > 1
    tol : float, optional
        Convergence threshold. Defaults to config.KEPLER_TOLERANCE
    max_iter : int, optional
        Iteration cap. Defaults to config.KEPLER_MAX_ITERATIONS

    Returns
    -------
    float
        Hyperbolic anomaly [rad]

    Raises
    ------
    NonConvergentError
        If the iteration does not settle within ``max_iter`` steps
    """
    if tol is None:
        tol = config.KEPLER_TOLERANCE
    if max_iter is None:
        max_iter = config.KEPLER_MAX_ITERATIONS

    # starting at H = M overflows sinh/cosh once |M| exceeds ~710
    H = np.sign(M) * np.log(2.0 * abs(M) / e + 1.8)
    for _ in range(max_iter):
        H_next = H + (M - e * np.sinh(H) + H) / (e * np.cosh(H) - 1.0)
        if abs(H - H_next) < tol:
            return float(H_next)
        H = H_next

    raise NonConvergentError(
        f"Hyperbolic Kepler equation did not converge after {max_iter} "
        f"iterations (M={M}, e={e})."
    )


# define basic orbital element class
@dataclass(frozen=True)
class OrbitalElements:
    """
    Osculating Keplerian elements of a body relative to its central mass.

    Attributes
    ----------
    a : float
        Semi-major axis [m]. Negative for hyperbolic trajectories.
    e : float
        Eccentricity (>= 0). Above 1 the trajectory is hyperbolic.
    i : float
        Inclination [rad]
    arg : float
        Argument of periapsis [rad]
    raan : float
        Right ascension of the ascending node [rad]
    m : float
        Mean anomaly at epoch [rad]
    epoch : float
        Epoch of the elements [JD], defaults to J2000

    Notes
    -----
    OrbitalElements is immutable. Unset fields default to zero, build a
    modified copy with ``with_()`` or use ``from_degrees()`` for the angle
    convention of configuration files.
    """
    a: float = 0.0
    e: float = 0.0
    i: float = 0.0
    arg: float = 0.0
    raan: float = 0.0
    m: float = 0.0
    epoch: float = J2000

    # ========== CONSTRUCTION ==========
    def __post_init__(self):
        for f in fields(self):
            value = float(getattr(self, f.name))
            if not np.isfinite(value):
                raise ValueError(f"Orbital element '{f.name}' must be finite, "
                                 f"got {value}")
            # frozen dataclass, bypass __setattr__ to store the coerced float
            object.__setattr__(self, f.name, value)
        if self.e < 0:
            raise ValueError(f"Eccentricity must be non-negative, got {self.e}")

    @classmethod
    def from_degrees(cls, a=0.0, e=0.0, i=0.0, arg=0.0, raan=0.0, m=0.0,
                     epoch=J2000):
        """
        Create orbital elements from angles given in degrees.

        Parameters
        ----------
        a : float
            Semi-major axis [m]
        e : float
            Eccentricity
        i, arg, raan, m : float
            Inclination, argument of periapsis, right ascension of the
            ascending node and mean anomaly at epoch [deg]
        epoch : float
            Epoch [JD]

        Returns
        -------
        OrbitalElements
        """
        return cls(a=a, e=e,
                   i=np.radians(i),
                   arg=np.radians(arg),
                   raan=np.radians(raan),
                   m=np.radians(m),
                   epoch=epoch)

    def with_(self, **changes):
        """Return a copy with the given elements replaced."""
        return replace(self, **changes)

    # ========== PROPERTY ACCESS ==========
    @property
    def T(self):
        """Epoch of the elements [JD] (alias of ``epoch``)"""
        return self.epoch

    @property
    def is_hyperbolic(self):
        """True when the hyperbolic solver branch applies (e > 1 or a <= 0)"""
        return self.e > 1.0 or self.a <= 0

    @property
    def semi_latus_rectum(self):
        """Semi-latus rectum p = |a|*|1 - e^2| [m]"""
        return abs(self.a) * abs(1.0 - self.e**2)

    @property
    def periapsis(self):
        """Periapsis distance [m]"""
        return self.semi_latus_rectum / (1.0 + self.e)

    @property
    def apoapsis(self):
        """Apoapsis distance [m] (infinite for open orbits)"""
        if self.is_hyperbolic:
            return np.inf
        return self.a * (1.0 + self.e)

    # ========== ORBITAL PROPERTIES ==========
    def mean_motion(self, gm):
        """
        Calculate mean motion n = sqrt(GM/|a|^3)

        Parameters
        ----------
        gm : float
            Gravitational parameter [m^3/s^2]

        Returns
        -------
        float
            Mean motion [rad/s]
        """
        self._check_semi_major_axis()
        a = abs(self.a)
        return np.sqrt(gm / (a * a * a))

    def orbital_period(self, gm):
        """Orbital period [s] (only for elliptic orbits)"""
        if self.is_hyperbolic:
            raise ValueError("Orbital period undefined for hyperbolic orbits")
        return 2 * np.pi / self.mean_motion(gm)

    def mean_anomaly_at(self, gm, t=J2000):
        """Mean anomaly [rad] at Julian date ``t``"""
        return self.m + self.mean_motion(gm) * ((t - self.epoch) * DAY_SECONDS)

    def anomaly_at(self, gm, t=J2000):
        """
        Eccentric anomaly (elliptic) or hyperbolic anomaly [rad] at ``t``.
        """
        self._check_solvable()
        M = self.mean_anomaly_at(gm, t)
        if self.is_hyperbolic:
            return solve_hyperbolic_kepler(M, self.e)
        return solve_kepler(M, self.e)

    def true_anomaly_at(self, gm, t=J2000):
        """True anomaly [rad] at Julian date ``t``"""
        anomaly = self.anomaly_at(gm, t)
        e = self.e
        if self.is_hyperbolic:
            return 2 * np.arctan(np.sqrt((e + 1.0) / (e - 1.0)) * np.tanh(anomaly / 2.0))
        return 2 * np.arctan(np.sqrt((1.0 + e) / (1.0 - e)) * np.tan(anomaly / 2.0))

    # ========== STATE VECTORS ==========
    def state_vectors(self, gm, t=J2000):
        """
        Compute position and velocity in the inertial frame at time ``t``.

        Parameters
        ----------
        gm : float
            Gravitational parameter [m^3/s^2]. G*(M_central + M_body) for a
            two-body estimate, G*M_total once the whole system is known.
        t : float, optional
            Evaluation epoch [JD], defaults to J2000

        Returns
        -------
        position, velocity : np.ndarray
            3-vectors [m] and [m/s]

        Raises
        ------
        NonConvergentError
            If e == 1 (parabolic) or the anomaly solver hits its cap
        ValueError
            If a <= 0 with e < 1
        """
        v = self.true_anomaly_at(gm, t)
        e = self.e
        # hyperbolic orbits carry a negative semi-major axis
        a = -abs(self.a) if self.is_hyperbolic else self.a

        p = a * (1.0 - e * e)
        r = p / (1.0 + e * np.cos(v))
        h = np.sqrt(gm * p)

        cos_raan, sin_raan = np.cos(self.raan), np.sin(self.raan)
        cos_u, sin_u = np.cos(self.arg + v), np.sin(self.arg + v)
        cos_i, sin_i = np.cos(self.i), np.sin(self.i)

        pos = r * np.array([
            cos_raan * cos_u - sin_raan * sin_u * cos_i,
            sin_raan * cos_u + cos_raan * sin_u * cos_i,
            sin_i * sin_u,
        ])

        radial = (h * e / (r * p)) * np.sin(v)
        vel = np.array([
            pos[0] * radial - (h / r) * (cos_raan * sin_u + sin_raan * cos_u * cos_i),
            pos[1] * radial - (h / r) * (sin_raan * sin_u - cos_raan * cos_u * cos_i),
            pos[2] * radial + (h / r) * (cos_u * sin_i),
        ])
        logger.debug("state vectors at JD %.5f: r=%.6e m, |v|=%.6e m/s",
                     t, r, np.linalg.norm(vel))
        return pos, vel

    # ========== VALIDATION ==========
    def _check_semi_major_axis(self):
        if self.a == 0:
            raise ValueError("Semi-major axis must be non-zero")

    def _check_solvable(self):
        """Reject element sets that neither solver branch can handle."""
        self._check_semi_major_axis()
        if self.e == 1.0:
            raise NonConvergentError(
                "Parabolic orbit (e=1) is not supported by either the "
                "elliptic or the hyperbolic solver"
            )
        if self.a < 0 and self.e < 1.0:
            raise ValueError(f"Elliptic orbit (e={self.e}) "
                             f"requires positive semi-major axis, got a={self.a}")

    # ========== SPECIAL METHODS ==========
    def __str__(self):
        #Human-readable representation
        return (f"Keplerian Elements:\n"
                f"  a     = {self.a / AU:12.6f} AU\n"
                f"  e     = {self.e:12.6f}\n"
                f"  i     = {np.degrees(self.i):12.4f}°\n"
                f"  RAAN  = {np.degrees(self.raan):12.4f}°\n"
                f"  ω     = {np.degrees(self.arg):12.4f}°\n"
                f"  M     = {np.degrees(self.m):12.4f}°\n"
                f"  epoch = {self.epoch:12.4f} JD")

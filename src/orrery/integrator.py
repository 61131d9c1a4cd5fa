'''Fixed-step integrator for a single body
KinematicState class definition

The integrator only sees one body at a time. Whatever it needs to know about
the rest of the system comes through the acceleration callback.'''

from dataclasses import dataclass, field, fields, replace
from typing import Callable
import numpy as np


def _frozen_vector(value):
    """Copy ``value`` into a read-only float 3-vector."""
    vector = np.array(value, dtype=float)
    if vector.shape != (3,):
        raise ValueError(f"State vectors must have shape (3,), got {vector.shape}")
    vector.flags.writeable = False
    return vector


@dataclass(frozen=True, eq=False)
class KinematicState:
    """
    Immutable kinematic state of a body at one instant.

    Attributes
    ----------
    position : np.ndarray
        Position [m] in the inertial frame
    velocity : np.ndarray
        Velocity [m/s]
    acceleration : np.ndarray
        Acceleration [m/s^2] cached from the last integration step. It is
        derived from the position of the other bodies, never authoritative.
    """
    position: np.ndarray
    velocity: np.ndarray
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        # Ensure immutability of every vector
        for f in fields(self):
            object.__setattr__(self, f.name, _frozen_vector(getattr(self, f.name)))

    def with_(self, **changes):
        """Return a copy with the given vectors replaced."""
        return replace(self, **changes)

    def __eq__(self, other):
        if not isinstance(other, KinematicState):
            return NotImplemented
        return (np.array_equal(self.position, other.position) and
                np.array_equal(self.velocity, other.velocity) and
                np.array_equal(self.acceleration, other.acceleration))

    __hash__ = None

    def __repr__(self):
        return (f"KinematicState(position={self.position.tolist()}, "
                f"velocity={self.velocity.tolist()}, "
                f"acceleration={self.acceleration.tolist()})")


# A function returning the acceleration vector of a body in a given state.
Accelerator = Callable[[KinematicState, float], np.ndarray]


def advance(state: KinematicState, mass: float,
            accelerate: Accelerator, dt: float) -> KinematicState:
    """
    Return the state of a body at t+dt from its state at t.

    The position moves with the current velocity and cached acceleration,
    then the velocity is kicked by half of the old acceleration and half of
    the acceleration re-evaluated at the new position.

    Parameters
    ----------
    state : KinematicState
        State at time t. It is not modified.
    mass : float
        Mass of the body [kg], passed through to ``accelerate``
    accelerate : callable
        ``accelerate(state, mass)`` returning the acceleration [m/s^2] for
        a trial state
    dt : float
        Time increment [s]. Negative values integrate backwards.

    Returns
    -------
    KinematicState
        State at time t+dt with a freshly evaluated acceleration
    """
    halfdt = 0.5 * dt

    position = state.position + state.velocity * dt + state.acceleration * halfdt * dt
    velocity = state.velocity + state.acceleration * halfdt
    trial = KinematicState(position, velocity, state.acceleration)

    acceleration = np.asarray(accelerate(trial, mass), dtype=float)
    velocity = velocity + acceleration * halfdt
    return KinematicState(position, velocity, acceleration)

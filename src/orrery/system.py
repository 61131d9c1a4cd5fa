'''Multi-body gravitational system
Body, Snapshot and System class definitions

The System owns an ordered list of bodies (index 0 is the central mass) and
advances all of them together on one global clock.'''

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterator, List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from . import integrator
from .config import config
from .constants import AU, DAY_SECONDS, G, J2000
from .errors import DegenerateGeometryError
from .integrator import KinematicState

logger = logging.getLogger(__name__)


def gravity(position1, mass1, position2, mass2):
    """
    Magnitude of the Newtonian attraction between two point masses [N].

    Raises
    ------
    DegenerateGeometryError
        If the two positions coincide (within config.MIN_SEPARATION)
    """
    radius = np.linalg.norm(np.asarray(position1) - np.asarray(position2))
    if not radius > config.MIN_SEPARATION:
        raise DegenerateGeometryError(
            f"Cannot compute gravity between coincident positions "
            f"(separation {radius} m)"
        )
    return G * ((mass1 * mass2) / (radius * radius))


@dataclass(eq=False)
class Body:
    """
    A massive body of the system.

    Attributes
    ----------
    name : str
        Identifier of the body
    color : str
        Display tag, opaque to the physics and only read by renderers
    state : KinematicState
        Current position, velocity and cached acceleration
    mass : float
        Mass [kg], must be positive
    radius : float
        Physical radius [m], used for display only
    trail_size : int
        Capacity of the trail, fixed at construction
    trail : deque of np.ndarray
        Past positions, most recent first. The oldest sample is evicted
        once the trail is full.
    """
    name: str
    color: str
    state: KinematicState
    mass: float
    radius: float = 0.0
    trail_size: int = field(default_factory=lambda: config.TRAIL_SIZE)
    trail: Deque[np.ndarray] = field(init=False, repr=False)

    def __post_init__(self):
        if not self.mass > 0:
            raise ValueError(f"Mass of '{self.name}' must be positive, got {self.mass}")
        if self.radius < 0:
            raise ValueError(f"Radius of '{self.name}' must be non-negative, "
                             f"got {self.radius}")
        if self.trail_size < 1:
            raise ValueError(f"Trail size must be at least 1, got {self.trail_size}")
        self.mass = float(self.mass)
        self.radius = float(self.radius)
        self.trail = deque(maxlen=self.trail_size)

    @property
    def position(self) -> np.ndarray:
        return self.state.position

    @property
    def velocity(self) -> np.ndarray:
        return self.state.velocity

    @property
    def acceleration(self) -> np.ndarray:
        return self.state.acceleration

    @property
    def momentum(self) -> np.ndarray:
        """Linear momentum [kg m/s]"""
        return self.mass * self.state.velocity

    @property
    def kinetic_energy(self) -> float:
        """Kinetic energy [J]"""
        return 0.5 * self.mass * float(np.dot(self.velocity, self.velocity))

    def record_trail(self):
        """Push the current position to the front of the trail."""
        self.trail.appendleft(self.state.position)


class Snapshot:
    """
    Frozen copy of every body's position and mass at the start of a step.

    All accelerations evaluated during one step read from the same snapshot,
    so the result does not depend on the order in which bodies are updated.
    """

    def __init__(self, bodies: Sequence[Body]):
        positions = np.array([body.position for body in bodies], dtype=float)
        masses = np.array([body.mass for body in bodies], dtype=float)
        self._positions = positions.reshape(len(bodies), 3)
        self._masses = masses
        self._positions.flags.writeable = False
        self._masses.flags.writeable = False

    @property
    def positions(self) -> np.ndarray:
        """Positions of all bodies, shape (n, 3) (read-only)"""
        return self._positions

    @property
    def masses(self) -> np.ndarray:
        """Masses of all bodies, shape (n,) (read-only)"""
        return self._masses

    def __len__(self):
        return len(self._masses)

    def acceleration_on(self, position, mass, exclude: int) -> np.ndarray:
        """
        Gravitational acceleration at ``position`` from every snapshot body
        except the one at index ``exclude``.

        Parameters
        ----------
        position : array-like
            Position of the accelerated body [m]
        mass : float
            Mass of the accelerated body [kg]
        exclude : int
            Index of the accelerated body in the snapshot

        Returns
        -------
        np.ndarray
            Acceleration [m/s^2]

        Raises
        ------
        DegenerateGeometryError
            If another body sits at ``position``
        """
        others = np.arange(len(self._masses)) != exclude
        rays = self._positions[others] - np.asarray(position, dtype=float)
        distances = np.linalg.norm(rays, axis=1)
        if np.any(~(distances > config.MIN_SEPARATION)):
            raise DegenerateGeometryError(
                f"Body {exclude} coincides with another body "
                f"(closest separation {distances.min()} m)"
            )
        forces = G * ((mass * self._masses[others]) / (distances * distances))
        units = rays / distances[:, np.newaxis]
        return (units * forces[:, np.newaxis]).sum(axis=0) / mass


class System:
    """
    Ordered set of gravitationally interacting bodies on a shared clock.

    Parameters
    ----------
    bodies : sequence of Body
        Bodies of the system, index 0 is the central mass by convention
    epoch : float, optional
        Julian date of the initial state (default: J2000)
    trail_tick : int, optional
        Integration steps between two trail samples
        (default: config.TRAIL_TICK)
    prime : bool, optional
        Evaluate every body's acceleration from the initial state so the
        first step starts from a consistent cached acceleration
        (default: True)

    Notes
    -----
    - The System is mutated in place by ``advance()``; bodies are never
      added or removed after construction.
    - Zero total momentum and a centroid at the origin are imposed once by
      the builder, gravity then conserves them to within integration error.
    """

    # ========== CONSTRUCTION ==========
    def __init__(
        self,
        bodies: Sequence[Body],
        epoch: float = J2000,
        trail_tick: Optional[int] = None,
        prime: bool = True
    ):
        if trail_tick is None:
            trail_tick = config.TRAIL_TICK
        if trail_tick < 1:
            raise ValueError(f"Trail tick must be at least 1, got {trail_tick}")

        self._bodies: List[Body] = list(bodies)
        self._epoch = float(epoch)
        self._elapsed = 0.0
        self._trail_tick = int(trail_tick)
        self._ticks_to_trail = 0
        self._next_body = 1

        if prime:
            self._prime_accelerations()

    def _prime_accelerations(self):
        """Replace cached accelerations with ones evaluated from the current state."""
        snapshot = Snapshot(self._bodies)
        for index, body in enumerate(self._bodies):
            acceleration = snapshot.acceleration_on(body.position, body.mass, index)
            body.state = body.state.with_(acceleration=acceleration)

    # ========== STEPPING ==========
    def advance(self, iterations: int, dt: float) -> float:
        """
        Advance every body by ``iterations`` steps of ``dt`` seconds.

        Each step first freezes a Snapshot of the whole system, then
        integrates every body against that snapshot. Trails are sampled on
        the first step and every ``trail_tick`` steps after it, counting
        across calls.

        Parameters
        ----------
        iterations : int
            Number of fixed-size steps (>= 0)
        dt : float
            Step size [s]. Negative values run the clock backwards.

        Returns
        -------
        float
            Simulated time covered by the call, ``iterations * dt`` [s]
        """
        if iterations < 0:
            raise ValueError(f"Iterations must be non-negative, got {iterations}")

        for _ in range(iterations):
            self.step(dt)

        return dt * iterations

    def step(self, dt: float):
        """Advance the system by a single step of ``dt`` seconds."""
        previous = Snapshot(self._bodies)
        for index, body in enumerate(self._bodies):
            body.state = integrator.advance(body.state,
                                            body.mass,
                                            self._accelerator(previous, index),
                                            dt)
        self._elapsed += dt

        if self._ticks_to_trail == 0:
            self._ticks_to_trail = self._trail_tick
            for body in self._bodies:
                body.record_trail()
        self._ticks_to_trail -= 1

    @staticmethod
    def _accelerator(snapshot: Snapshot, index: int):
        """Acceleration callback bound to one snapshot and one body index."""
        def accelerate(state: KinematicState, mass: float) -> np.ndarray:
            return snapshot.acceleration_on(state.position, mass, index)
        return accelerate

    # ========== PROPERTY ACCESS ==========
    @property
    def bodies(self) -> Tuple[Body, ...]:
        """Bodies of the system, central mass first."""
        return tuple(self._bodies)

    @property
    def central_body(self) -> Body:
        """The central mass (index 0)."""
        if not self._bodies:
            raise IndexError("System has no bodies")
        return self._bodies[0]

    @property
    def names(self) -> List[str]:
        return [body.name for body in self._bodies]

    @property
    def epoch(self) -> float:
        """Julian date of the initial state."""
        return self._epoch

    @property
    def elapsed(self) -> float:
        """Simulated time since the initial state [s]."""
        return self._elapsed

    @property
    def julian_date(self) -> float:
        """Current simulated Julian date."""
        return self._epoch + self._elapsed / DAY_SECONDS

    @property
    def trail_tick(self) -> int:
        return self._trail_tick

    @property
    def total_mass(self) -> float:
        """Total mass of the system [kg]."""
        return float(sum(body.mass for body in self._bodies))

    def max_extent(self) -> float:
        """
        Twice the largest distance of a body from the origin [m].

        Used to scale displays. Returns 0 when every body sits at the origin.
        """
        radius = 0.0
        for body in self._bodies:
            distance = float(np.linalg.norm(body.position))
            if distance <= 0:
                continue
            radius = max(radius, distance)
        return radius * 2

    def next_body(self) -> Optional[Body]:
        """
        Return bodies in round-robin order, starting after the central mass.

        Renderers use this to cycle the camera focus through the system.
        """
        if not self._bodies:
            return None
        index = self._next_body % len(self._bodies)
        self._next_body = (index + 1) % len(self._bodies)
        return self._bodies[index]

    # ========== DIAGNOSTICS ==========
    def barycenter(self) -> np.ndarray:
        """Mass-weighted centroid of all bodies [m]."""
        if not self._bodies:
            return np.zeros(3)
        weighted = sum(body.mass * body.position for body in self._bodies)
        return weighted / self.total_mass

    def total_momentum(self) -> np.ndarray:
        """Total linear momentum [kg m/s]."""
        return sum((body.momentum for body in self._bodies), np.zeros(3))

    def total_energy(self) -> float:
        """
        Kinetic plus gravitational potential energy of the system [J].

        Raises
        ------
        DegenerateGeometryError
            If two bodies coincide
        """
        kinetic = sum(body.kinetic_energy for body in self._bodies)
        potential = 0.0
        for i, first in enumerate(self._bodies):
            for second in self._bodies[i + 1:]:
                distance = np.linalg.norm(first.position - second.position)
                potential -= gravity(first.position, first.mass,
                                     second.position, second.mass) * distance
        return float(kinetic + potential)

    def summary(self):
        """Print a summary of the system state."""
        print(f"System at JD {self.julian_date:.5f} "
              f"({self._elapsed:.1f} s after JD {self._epoch:.5f})")
        print(f"Bodies: {len(self._bodies)}, total mass = {self.total_mass:.6e} kg")
        for body in self._bodies:
            r = np.linalg.norm(body.position)
            v = np.linalg.norm(body.velocity)
            print(f"  {body.name:<16} m = {body.mass:.4e} kg, "
                  f"|r| = {r / AU:10.6f} AU, |v| = {v:12.3f} m/s, "
                  f"trail = {len(body.trail)}/{body.trail_size}")
        momentum = np.linalg.norm(self.total_momentum())
        print(f"|p_total| = {momentum:.6e} kg m/s")

    # ========== EXPORT ==========
    def to_dataframe(self) -> pd.DataFrame:
        """
        Export the current state to a pandas DataFrame, one row per body.

        Returns
        -------
        pd.DataFrame
            Columns name, color, mass, radius, x, y, z, vx, vy, vz, ax, ay, az
        """
        if not self._bodies:
            return pd.DataFrame()

        positions = np.array([body.position for body in self._bodies])
        velocities = np.array([body.velocity for body in self._bodies])
        accelerations = np.array([body.acceleration for body in self._bodies])
        data = {
            'name': self.names,
            'color': [body.color for body in self._bodies],
            'mass': [body.mass for body in self._bodies],
            'radius': [body.radius for body in self._bodies],
            'x': positions[:, 0],
            'y': positions[:, 1],
            'z': positions[:, 2],
            'vx': velocities[:, 0],
            'vy': velocities[:, 1],
            'vz': velocities[:, 2],
            'ax': accelerations[:, 0],
            'ay': accelerations[:, 1],
            'az': accelerations[:, 2],
        }
        return pd.DataFrame(data)

    def trail_dataframe(self) -> pd.DataFrame:
        """
        Export every body's trail to a long-format DataFrame.

        Returns
        -------
        pd.DataFrame
            Columns name, sample (0 is the most recent), x, y, z
        """
        rows = []
        for body in self._bodies:
            for sample, position in enumerate(body.trail):
                rows.append((body.name, sample, *position))
        return pd.DataFrame(rows, columns=['name', 'sample', 'x', 'y', 'z'])

    # ========== PLOTTING ==========
    # stand-in until a renderer consumes the body list directly
    def plot_3d(self, show_trails: bool = True,
                body_opacity: Optional[float] = None,
                trail_opacity: Optional[float] = None) -> go.Figure:
        """
        Create a 3D plot of the bodies and their trails in AU.

        Parameters:
            show_trails: Whether to draw each body's trail (default: True)
            body_opacity: Opacity of body markers
                          (default: config.DEFAULT_BODY_OPACITY)
            trail_opacity: Opacity of trail lines
                           (default: config.DEFAULT_TRAIL_OPACITY)

        Returns:
            Plotly Figure object
        """
        from .defaults import display_color

        if body_opacity is None:
            body_opacity = config.DEFAULT_BODY_OPACITY
        if trail_opacity is None:
            trail_opacity = config.DEFAULT_TRAIL_OPACITY

        fig = go.Figure()
        for body in self._bodies:
            color = display_color(body.color)
            if show_trails and body.trail:
                trail = np.vstack([body.position, *body.trail]) / AU
                fig.add_trace(go.Scatter3d(
                    x=trail[:, 0],
                    y=trail[:, 1],
                    z=trail[:, 2],
                    mode='lines',
                    line=dict(color=color, width=2),
                    opacity=trail_opacity,
                    name=f'{body.name} trail',
                    showlegend=False,
                    hoverinfo='skip'
                ))
            position = body.position / AU
            fig.add_trace(go.Scatter3d(
                x=[position[0]],
                y=[position[1]],
                z=[position[2]],
                mode='markers+text',
                marker=dict(color=color, size=8 if body is self._bodies[0] else 4),
                opacity=body_opacity,
                text=[body.name],
                name=body.name,
                hovertemplate='x: %{x:.6f}<br>y: %{y:.6f}<br>z: %{z:.6f}<extra></extra>'
            ))

        fig.update_layout(
            scene=dict(
                xaxis_title='X [AU]',
                yaxis_title='Y [AU]',
                zaxis_title='Z [AU]',
                aspectmode='data'
            ),
            title=f'System at JD {self.julian_date:.2f}',
            showlegend=True
        )
        return fig

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __getitem__(self, key: Union[int, str]) -> Body:
        """Look up a body by index or by name."""
        if isinstance(key, str):
            for body in self._bodies:
                if body.name == key:
                    return body
            raise KeyError(f"No body named '{key}'")
        return self._bodies[key]

    def __repr__(self):
        return (f"System(bodies={self.names}, "
                f"julian_date={self.julian_date:.5f}, elapsed={self._elapsed})")

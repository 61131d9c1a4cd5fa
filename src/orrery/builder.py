"""
System construction from orbital elements.

A body's state vectors depend on the total mass of the system, which is only
known once every body has been read. Construction therefore runs in passes:

1. place each body with the two-body parameter G*(M_star + m),
2. accumulate the total mass (and the approximate barycenter),
3. recompute every state with G*M_total,
4. move the centroid to the origin and remove the net momentum.
"""
import logging
from typing import Any, Mapping, Optional, Union
import numpy as np
from .config import config
from .constants import G, J2000
from .integrator import KinematicState
from .loader import SystemConfig, parse_config
from .system import Body, System

logger = logging.getLogger(__name__)


def build_system(
    system_config: Union[SystemConfig, Mapping[str, Any]],
    start_epoch: float = J2000,
    trail_size: Optional[int] = None,
    trail_tick: Optional[int] = None
) -> System:
    """
    Build a self-consistent System at ``start_epoch``.

    Parameters
    ----------
    system_config : SystemConfig or mapping
        Decoded description, or a raw JSON mapping which is decoded first
    start_epoch : float, optional
        Julian date of the initial state (default: J2000)
    trail_size : int, optional
        Trail capacity of every body (default: config.TRAIL_SIZE)
    trail_tick : int, optional
        Steps between trail samples (default: config.TRAIL_TICK)

    Returns
    -------
    System
        Bodies with zero total momentum and their centroid at the origin

    Raises
    ------
    ConfigurationError
        If a raw mapping misses its ``star`` or ``bodies`` section
    NonConvergentError
        If an orbit cannot be solved (e.g. e == 1)
    """
    if not isinstance(system_config, SystemConfig):
        system_config = parse_config(system_config)
    if trail_size is None:
        trail_size = config.TRAIL_SIZE

    star = system_config.star
    bodies = [Body(
        name=star.name,
        color=star.color,
        state=KinematicState(np.zeros(3), np.zeros(3)),
        mass=star.mass,
        radius=star.radius,
        trail_size=trail_size,
    )]

    # Pass 1: two-body estimate, only good enough to locate the barycenter
    for entry in system_config.bodies:
        position, velocity = entry.orbit.state_vectors(
            G * (star.mass + entry.mass), start_epoch)
        bodies.append(Body(
            name=entry.name,
            color=entry.color,
            state=KinematicState(position, velocity),
            mass=entry.mass,
            radius=entry.radius,
            trail_size=trail_size,
        ))

    mass = sum(body.mass for body in bodies)
    estimate = sum(body.mass * body.position for body in bodies) / mass
    logger.debug("Pass 1 barycenter estimate: %s m", estimate)

    # Pass 2: exact states with the total system mass
    for body, entry in zip(bodies[1:], system_config.bodies):
        position, velocity = entry.orbit.state_vectors(G * mass, start_epoch)
        body.state = KinematicState(position, velocity)

    barycenter = sum(body.mass * body.position for body in bodies) / mass
    momentum = sum(body.mass * body.velocity for body in bodies) / mass

    for body in bodies:
        body.state = KinematicState(body.position - barycenter,
                                    body.velocity - momentum)

    logger.info("Built system '%s' with %d bodies at JD %.5f",
                star.name, len(bodies), start_epoch)
    return System(bodies, epoch=start_epoch, trail_tick=trail_tick)

"""
System description loading.

A system description is a JSON document with one central body and a list of
orbiting bodies:

{
  "star": {"name": "TRAPPIST-1", "mass": 0.089, "radius": 0.121},
  "bodies": [
    {
      "name": "b",
      "color": "pastel_blue",
      "mass": 1.017,        # Earth masses
      "radius": 1.121,      # Earth radii
      "sma": 0.01154,       # AU
      "ecc": 0.00622,
      "inc": 89.728,        # degrees
      "arg": 336.86,        # degrees
      "raan": 0.0,          # degrees
      "ma": 0.0,            # degrees
      "epoch": 2457322.51736
    }
  ]
}

Every field is optional: masses and radii default to 1.0, angles and
eccentricity to 0, ``sma`` to 1 AU and ``epoch`` to J2000. The ``star`` and
``bodies`` sections themselves are required.
"""
import json
import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Tuple, Union
from .config import config
from .constants import AU, J2000, MEARTH, MSOL, REARTH, RSOL
from .errors import ConfigurationError
from .orbital_elements import OrbitalElements

logger = logging.getLogger(__name__)

STAR_KEYS = frozenset(("name", "mass", "radius", "color"))
BODY_KEYS = frozenset(("name", "color", "mass", "radius", "sma", "ecc",
                       "inc", "arg", "raan", "ma", "epoch"))


@dataclass(frozen=True)
class CentralBodyConfig:
    """
    Decoded central body.

    Attributes
    ----------
    name : str
    mass : float
        Mass [kg]
    radius : float
        Radius [m]
    color : str
        Display tag
    """
    name: str = "SYSTEM a"
    mass: float = MSOL
    radius: float = RSOL
    color: str = field(default_factory=lambda: config.DEFAULT_STAR_COLOR)


@dataclass(frozen=True)
class OrbitingBodyConfig:
    """
    Decoded orbiting body.

    Attributes
    ----------
    name : str
    mass : float
        Mass [kg]
    radius : float
        Radius [m]
    color : str
        Display tag
    orbit : OrbitalElements
        Elements relative to the central body (SI units, radians)
    """
    name: str
    mass: float = MEARTH
    radius: float = REARTH
    color: str = field(default_factory=lambda: config.DEFAULT_BODY_COLOR)
    orbit: OrbitalElements = field(default_factory=lambda: OrbitalElements(a=AU))


@dataclass(frozen=True)
class SystemConfig:
    """A complete decoded system description."""
    star: CentralBodyConfig
    bodies: Tuple[OrbitingBodyConfig, ...] = ()


def _number(section: Mapping[str, Any], key: str, fallback: float, where: str) -> float:
    """Read an optional numeric field."""
    value = section.get(key, fallback)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(
            f"{where}: field '{key}' must be a number, got {value!r}"
        )
    return float(value)


def _warn_unknown(section: Mapping[str, Any], known, where: str):
    unknown = sorted(set(section) - known)
    if unknown:
        warnings.warn(f"{where}: ignoring unknown fields {unknown}",
                      UserWarning, stacklevel=3)


def _check_physical(mass: float, radius: float, where: str):
    if not mass > 0:
        raise ConfigurationError(f"{where}: mass must be positive, got {mass}")
    if not radius >= 0:
        raise ConfigurationError(f"{where}: radius must be non-negative, got {radius}")


def parse_star(section: Mapping[str, Any]) -> CentralBodyConfig:
    """Decode the ``star`` section (solar masses, solar radii)."""
    if not isinstance(section, Mapping):
        raise ConfigurationError("'star' entry must be an object")
    _warn_unknown(section, STAR_KEYS, "star")
    name = str(section.get("name", "SYSTEM a"))
    mass = _number(section, "mass", 1.0, "star") * MSOL
    radius = _number(section, "radius", 1.0, "star") * RSOL
    _check_physical(mass, radius, f"star '{name}'")
    return CentralBodyConfig(
        name=name,
        mass=mass,
        radius=radius,
        color=str(section.get("color", config.DEFAULT_STAR_COLOR)),
    )


def parse_body(section: Mapping[str, Any], default_name: str) -> OrbitingBodyConfig:
    """Decode one entry of the ``bodies`` list (Earth units, AU, degrees)."""
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"body '{default_name}' must be an object")
    name = str(section.get("name", default_name))
    where = f"body '{name}'"
    _warn_unknown(section, BODY_KEYS, where)

    mass = _number(section, "mass", 1.0, where) * MEARTH
    radius = _number(section, "radius", 1.0, where) * REARTH
    _check_physical(mass, radius, where)

    try:
        orbit = OrbitalElements.from_degrees(
            a=_number(section, "sma", 1.0, where) * AU,
            e=_number(section, "ecc", 0.0, where),
            i=_number(section, "inc", 0.0, where),
            arg=_number(section, "arg", 0.0, where),
            raan=_number(section, "raan", 0.0, where),
            m=_number(section, "ma", 0.0, where),
            epoch=_number(section, "epoch", J2000, where),
        )
    except ValueError as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(f"{where}: {e}") from e

    return OrbitingBodyConfig(
        name=name,
        mass=mass,
        radius=radius,
        color=str(section.get("color", config.DEFAULT_BODY_COLOR)),
        orbit=orbit,
    )


def parse_config(data: Mapping[str, Any]) -> SystemConfig:
    """
    Decode a system description that has already been read from JSON.

    Parameters
    ----------
    data : mapping
        Document with ``star`` and ``bodies`` sections

    Returns
    -------
    SystemConfig

    Raises
    ------
    ConfigurationError
        If a required section is missing or malformed
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("System description must be a JSON object")
    if "star" not in data:
        raise ConfigurationError("No star entry in solar system file")
    if "bodies" not in data:
        raise ConfigurationError("No bodies entry in solar system file")
    if not isinstance(data["bodies"], list):
        raise ConfigurationError("'bodies' entry must be a list")

    star = parse_star(data["star"])
    bodies = []
    for index, section in enumerate(data["bodies"]):
        # unnamed bodies follow the star's name: "<star> b", "<star> c", ...
        default_name = f"{star.name} {chr(ord('b') + index)}"
        bodies.append(parse_body(section, default_name))

    logger.info("Loaded system '%s' with %d orbiting bodies", star.name, len(bodies))
    return SystemConfig(star=star, bodies=tuple(bodies))


def load_config(path: Union[str, Path]) -> SystemConfig:
    """
    Read and decode a JSON system description.

    Raises
    ------
    ConfigurationError
        If the file cannot be read, is not valid JSON, or misses sections
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot open '{path}' for reading: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"'{path}' is not valid JSON: {e}") from e
    logger.debug("Read system description from %s", path)
    return parse_config(data)

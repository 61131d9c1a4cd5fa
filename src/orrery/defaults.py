"""
Default Systems and Display Colors
==================================

Predefined system descriptions and the table of display tags understood by
the plotting helpers.

Factory functions return decoded SystemConfig objects, ready to hand to
``build_system``. The raw descriptions are kept as plain mappings in the
same format as a JSON system file.

Examples
--------
>>> from orrery import build_system
>>> from orrery.defaults import sun_earth, trappist_1
>>> system = build_system(sun_earth())
>>> system = build_system(trappist_1(), start_epoch=2457322.51736)
"""
from .config import config
from .loader import SystemConfig, parse_config

"""
Display tags and their RGB values, as hex strings usable by plotly.
Tags are matched case-insensitively.
"""
COLORS = {
    'white': '#ffffff',
    'black': '#000000',
    'darkgrey': '#141414',
    'pastel_blue': '#6446c8',
    'purple': '#c02898',
    'pink': '#e65470',
    'pastel_yellow': '#e2c96e',
    'kaki': '#9c9a28',
    'pastel_green': '#007c35',
    'turquoise': '#00b09c',
    'lightblue': '#53d0f1',
    'yellow': '#ffff00',
    'red': '#ff0000',
    'green': '#00ff00',
    'blue': '#0000ff',
}


def display_color(tag):
    """
    Resolve a display tag to a hex color.

    Unknown tags fall back to config.DEFAULT_BODY_COLOR.
    """
    key = str(tag).lower()
    if key in COLORS:
        return COLORS[key]
    return COLORS.get(config.DEFAULT_BODY_COLOR.lower(), COLORS['lightblue'])


"""
Predefined system descriptions.
Units follow the JSON file format: solar masses and radii for the star,
Earth masses and radii, AU and degrees for the bodies.
"""
SUN_EARTH = {
    "star": {"name": "Sun", "mass": 1.0, "radius": 1.0},
    "bodies": [
        {"name": "Earth", "color": "lightblue", "mass": 1.0, "radius": 1.0,
         "sma": 1.0, "ecc": 0.0},
    ],
}

# TRAPPIST-1 planets, masses and radii after Agol et al. (2021)
TRAPPIST_1 = {
    "star": {"name": "TRAPPIST-1", "mass": 0.0898, "radius": 0.1192},
    "bodies": [
        {"name": "b", "color": "pastel_blue", "mass": 1.374, "radius": 1.116,
         "sma": 0.01154, "ecc": 0.00622, "inc": 89.728, "arg": 336.86,
         "epoch": 2457322.51736},
        {"name": "c", "color": "pink", "mass": 1.308, "radius": 1.097,
         "sma": 0.01580, "ecc": 0.00654, "inc": 89.778, "arg": 282.45,
         "epoch": 2457282.80728},
        {"name": "d", "color": "kaki", "mass": 0.388, "radius": 0.788,
         "sma": 0.02227, "ecc": 0.00837, "inc": 89.896, "arg": -8.73,
         "epoch": 2457670.14165},
        {"name": "e", "color": "turquoise", "mass": 0.692, "radius": 0.920,
         "sma": 0.02925, "ecc": 0.00510, "inc": 89.793, "arg": 108.37,
         "epoch": 2457660.37859},
        {"name": "f", "color": "pastel_green", "mass": 1.039, "radius": 1.045,
         "sma": 0.03849, "ecc": 0.01007, "inc": 89.740, "arg": 368.81,
         "epoch": 2457671.39767},
        {"name": "g", "color": "purple", "mass": 1.321, "radius": 1.129,
         "sma": 0.04683, "ecc": 0.00208, "inc": 89.742, "arg": 191.34,
         "epoch": 2457665.34937},
        {"name": "h", "color": "pastel_yellow", "mass": 0.326, "radius": 0.755,
         "sma": 0.06189, "ecc": 0.00567, "inc": 89.805, "arg": 338.92,
         "epoch": 2457662.55463},
    ],
}

PRESETS = {
    "sun-earth": SUN_EARTH,
    "trappist-1": TRAPPIST_1,
}


def sun_earth() -> SystemConfig:
    """One solar-mass star with an Earth-mass body on a circular 1 AU orbit."""
    return parse_config(SUN_EARTH)


def trappist_1() -> SystemConfig:
    """The seven planets of TRAPPIST-1."""
    return parse_config(TRAPPIST_1)


def preset(name) -> SystemConfig:
    """Decode a predefined system by name (see PRESETS)."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Use: {list(PRESETS)}")
    return parse_config(PRESETS[name])

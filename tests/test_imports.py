"""Smoke tests to verify package imports work."""

def test_package_imports():
    """Test that all main classes can be imported."""
    from orrery import OrbitalElements, KinematicState, Body, System
    assert OrbitalElements is not None
    assert KinematicState is not None
    assert Body is not None
    assert System is not None

def test_version_exists():
    """Test that version is defined."""
    import orrery
    assert hasattr(orrery, '__version__')
    assert orrery.__version__ == "0.1.0"

def test_can_create_orbital_elements():
    """Test basic OrbitalElements creation."""
    from orrery import OrbitalElements, AU
    oe = OrbitalElements(a=AU, e=0.0167)
    assert oe.a == AU

def test_can_build_system():
    """Test basic System construction from a preset."""
    from orrery import build_system
    from orrery.defaults import sun_earth
    system = build_system(sun_earth())
    assert system.names == ["Sun", "Earth"]

def test_errors_exported():
    """Test that error types are reachable from the package."""
    from orrery import NonConvergentError, DegenerateGeometryError, OrreryError
    assert issubclass(NonConvergentError, OrreryError)
    assert issubclass(DegenerateGeometryError, OrreryError)

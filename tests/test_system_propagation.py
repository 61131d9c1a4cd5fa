"""
Test suite for System stepping.

Tests cover:
- Clock bookkeeping and argument validation
- Snapshot semantics (order independence, exact step composition)
- Accuracy on a circular two-body orbit
- Conservation of energy and momentum
- Trail cadence and capacity
- Display helpers (max_extent, next_body) and exports
"""

import pytest
import numpy as np

from orrery import (
    build_system, integrator, Body, KinematicState, Snapshot, System,
    G, AU, MSOL, MEARTH
)
from orrery.defaults import sun_earth, trappist_1

# Sun-Earth mean motion [rad/s]
OMEGA = np.sqrt(G * (MSOL + MEARTH) / AU**3)


def clone(body):
    return Body(body.name, body.color, body.state, body.mass,
                body.radius, body.trail_size)


def relative_position(system):
    return system["Earth"].position - system["Sun"].position


def rotate_z(vector, angle):
    c, s = np.cos(angle), np.sin(angle)
    return np.array([c * vector[0] - s * vector[1],
                     s * vector[0] + c * vector[1],
                     vector[2]])


class TestClock:
    """Test elapsed time and argument validation."""

    def test_advance_returns_covered_time(self):
        system = build_system(sun_earth())
        assert system.advance(10, 60.0) == 600.0
        assert system.elapsed == 600.0

    def test_julian_date_follows_elapsed(self):
        system = build_system(sun_earth(), start_epoch=2460000.5)
        system.advance(1440, 60.0)
        assert system.julian_date == pytest.approx(2460001.5, abs=1e-9)

    def test_zero_iterations(self):
        """advance(0) leaves the system untouched."""
        system = build_system(sun_earth())
        before = [body.state for body in system]
        assert system.advance(0, 60.0) == 0.0
        assert system.elapsed == 0.0
        assert [body.state for body in system] == before
        assert all(len(body.trail) == 0 for body in system)

    def test_negative_iterations_raise(self):
        system = build_system(sun_earth())
        with pytest.raises(ValueError, match="non-negative"):
            system.advance(-1, 60.0)

    def test_step_accumulates(self):
        system = build_system(sun_earth())
        system.step(30.0)
        system.step(30.0)
        assert system.elapsed == 60.0


class TestSnapshotSemantics:
    """Test that a step reads every acceleration from one frozen snapshot."""

    def test_step_matches_snapshot_integration(self):
        """A step equals integrating each body against the pre-step snapshot."""
        system = build_system(trappist_1())
        dt = 120.0
        snapshot = Snapshot(system.bodies)
        expected = [
            integrator.advance(
                body.state, body.mass,
                lambda state, mass, index=index: snapshot.acceleration_on(
                    state.position, mass, index),
                dt)
            for index, body in enumerate(system)
        ]
        system.step(dt)
        for body, state in zip(system, expected):
            np.testing.assert_array_equal(body.position, state.position)
            np.testing.assert_array_equal(body.velocity, state.velocity)
            np.testing.assert_array_equal(body.acceleration, state.acceleration)

    def test_order_independent(self):
        """Reordering the bodies does not change their trajectories."""
        forward = build_system(trappist_1())
        backward = System([clone(body) for body in reversed(forward.bodies)],
                          epoch=forward.epoch)
        forward.advance(200, 60.0)
        backward.advance(200, 60.0)
        for body in forward:
            other = backward[body.name]
            np.testing.assert_allclose(other.position, body.position,
                                       rtol=1e-10, atol=1e-6)
            np.testing.assert_allclose(other.velocity, body.velocity,
                                       rtol=1e-10, atol=1e-9)

    def test_deterministic(self):
        first = build_system(trappist_1())
        second = build_system(trappist_1())
        first.advance(100, 60.0)
        second.advance(100, 60.0)
        for a, b in zip(first, second):
            np.testing.assert_array_equal(a.position, b.position)
            np.testing.assert_array_equal(a.velocity, b.velocity)


class TestAccuracy:
    """Test the integrated Sun-Earth orbit against the circular solution."""

    def _closure(self, dt, orbits=1.0):
        system = build_system(sun_earth())
        start = relative_position(system)
        steps = int(round(orbits * 2 * np.pi / OMEGA / dt))
        system.advance(steps, dt)
        expected = rotate_z(start, OMEGA * steps * dt)
        return np.linalg.norm(relative_position(system) - expected)

    def test_circular_orbit_hourly_steps(self):
        """One year with one-hour steps stays on the circular solution."""
        assert self._closure(3600.0) < 1e-4 * AU

    def test_radius_preserved(self):
        """Separation stays at 1 AU through a quarter orbit."""
        system = build_system(sun_earth())
        for _ in range(20):
            system.advance(100, 3600.0)
            radius = np.linalg.norm(relative_position(system))
            assert radius == pytest.approx(AU, rel=1e-5)

    @pytest.mark.slow
    def test_circular_orbit_minute_steps(self):
        """One year with one-minute steps returns close to the start."""
        assert self._closure(60.0) < 1e-6 * AU

    def test_backward_integration(self):
        """Running the clock backwards returns to the initial state."""
        system = build_system(sun_earth())
        start = [(body.position, body.velocity) for body in system]
        system.advance(200, 60.0)
        system.advance(200, -60.0)
        assert system.elapsed == 0.0
        assert system.julian_date == system.epoch
        for body, (position, velocity) in zip(system, start):
            np.testing.assert_allclose(body.position, position, atol=1.0)
            np.testing.assert_allclose(body.velocity, velocity, atol=1e-6)


class TestConservation:
    """Test conserved quantities over many steps."""

    def test_energy(self):
        system = build_system(sun_earth())
        e0 = system.total_energy()
        system.advance(10000, 60.0)
        assert abs(system.total_energy() - e0) < 1e-8 * abs(e0)

    def test_energy_trappist(self):
        system = build_system(trappist_1())
        e0 = system.total_energy()
        system.advance(2000, 10.0)
        assert abs(system.total_energy() - e0) < 1e-5 * abs(e0)

    def test_momentum(self):
        """Total momentum stays small compared to a single body's momentum."""
        system = build_system(sun_earth())
        scale = np.linalg.norm(system["Earth"].momentum)
        system.advance(1000, 60.0)
        assert np.linalg.norm(system.total_momentum()) < 1e-5 * scale

    def test_barycenter_stays_put(self):
        system = build_system(sun_earth())
        system.advance(1000, 60.0)
        assert np.linalg.norm(system.barycenter()) < 1e-6 * AU


class TestTrails:
    """Test trail sampling cadence and capacity."""

    def test_first_sample_on_first_step(self):
        system = build_system(sun_earth(), trail_size=5, trail_tick=10)
        system.advance(1, 60.0)
        assert all(len(body.trail) == 1 for body in system)

    def test_sampled_every_tick(self):
        """Samples land on steps 1, 11, 21, ... with a tick of 10."""
        system = build_system(sun_earth(), trail_size=5, trail_tick=10)
        lengths = []
        for _ in range(21):
            system.step(60.0)
            lengths.append(len(system["Earth"].trail))
        assert lengths[:10] == [1] * 10
        assert lengths[10:20] == [2] * 10
        assert lengths[20] == 3

    def test_cadence_spans_calls(self):
        """Splitting the stepping across calls keeps the cadence."""
        whole = build_system(sun_earth(), trail_tick=10)
        split = build_system(sun_earth(), trail_tick=10)
        whole.advance(25, 60.0)
        split.advance(1, 60.0)
        split.advance(9, 60.0)
        split.advance(15, 60.0)
        assert len(whole["Earth"].trail) == len(split["Earth"].trail) == 3

    def test_most_recent_first(self):
        system = build_system(sun_earth(), trail_size=5, trail_tick=10)
        system.advance(1, 60.0)
        first = system["Earth"].position
        system.advance(10, 60.0)
        trail = system["Earth"].trail
        np.testing.assert_array_equal(trail[0], system["Earth"].position)
        np.testing.assert_array_equal(trail[1], first)

    def test_oldest_evicted(self):
        system = build_system(sun_earth(), trail_size=3, trail_tick=1)
        history = []
        for _ in range(5):
            system.step(60.0)
            history.append(system["Earth"].position)
        trail = list(system["Earth"].trail)
        assert len(trail) == 3
        for sample, position in zip(trail, reversed(history[2:])):
            np.testing.assert_array_equal(sample, position)

    def test_bounded_by_default_size(self):
        system = build_system(sun_earth(), trail_tick=1)
        system.advance(100, 60.0)
        assert all(len(body.trail) == 80 for body in system)

    def test_default_tick(self):
        """With the default tick, 201 steps give three samples."""
        system = build_system(sun_earth())
        system.advance(201, 60.0)
        assert len(system["Earth"].trail) == 3


class TestDisplayHelpers:
    """Test max_extent and next_body."""

    def _system(self, *positions):
        bodies = [Body(f"body{index}", "white",
                       KinematicState(position, np.zeros(3)), 1.0)
                  for index, position in enumerate(positions)]
        return System(bodies)

    def test_max_extent_all_at_origin(self):
        assert self._system([0, 0, 0]).max_extent() == 0.0

    def test_max_extent_is_twice_farthest(self):
        system = self._system([0, 0, 0], [3, 4, 0], [1, 0, 0])
        assert system.max_extent() == pytest.approx(10.0)

    def test_max_extent_empty(self):
        assert System([]).max_extent() == 0.0

    def test_max_extent_sun_earth(self):
        system = build_system(sun_earth())
        expected = 2 * np.linalg.norm(system["Earth"].position)
        assert system.max_extent() == pytest.approx(expected)

    def test_next_body_cycles(self):
        """Cycling starts after the central body and wraps around."""
        system = build_system(sun_earth())
        names = [system.next_body().name for _ in range(4)]
        assert names == ["Earth", "Sun", "Earth", "Sun"]

    def test_next_body_trappist(self):
        system = build_system(trappist_1())
        names = [system.next_body().name for _ in range(9)]
        assert names == ["b", "c", "d", "e", "f", "g", "h", "TRAPPIST-1", "b"]

    def test_next_body_single(self):
        system = self._system([0, 0, 0])
        assert system.next_body() is system[0]
        assert system.next_body() is system[0]

    def test_next_body_empty(self):
        assert System([]).next_body() is None


class TestExport:
    """Test DataFrame export and plotting."""

    def test_to_dataframe(self):
        system = build_system(trappist_1())
        df = system.to_dataframe()
        assert len(df) == 8
        assert list(df.columns) == ['name', 'color', 'mass', 'radius',
                                    'x', 'y', 'z', 'vx', 'vy', 'vz',
                                    'ax', 'ay', 'az']
        assert df['name'].tolist() == system.names
        assert df.loc[1, 'x'] == system["b"].position[0]

    def test_to_dataframe_empty(self):
        assert System([]).to_dataframe().empty

    def test_trail_dataframe(self):
        system = build_system(sun_earth(), trail_size=3, trail_tick=1)
        system.advance(5, 60.0)
        df = system.trail_dataframe()
        assert len(df) == 6
        assert list(df.columns) == ['name', 'sample', 'x', 'y', 'z']
        latest = df[(df['name'] == 'Earth') & (df['sample'] == 0)]
        assert latest['x'].iloc[0] == system["Earth"].position[0]

    def test_trail_dataframe_before_stepping(self):
        assert build_system(sun_earth()).trail_dataframe().empty

    def test_plot_without_trails(self):
        """One marker per body before any trail exists."""
        fig = build_system(sun_earth()).plot_3d()
        assert len(fig.data) == 2

    def test_plot_with_trails(self):
        system = build_system(sun_earth(), trail_tick=1)
        system.advance(3, 60.0)
        assert len(system.plot_3d().data) == 4
        assert len(system.plot_3d(show_trails=False).data) == 2

    def test_plot_in_au(self):
        system = build_system(sun_earth())
        fig = system.plot_3d()
        earth = [trace for trace in fig.data if trace.name == "Earth"][0]
        assert earth.x[0] == pytest.approx(system["Earth"].position[0] / AU)

    def test_summary(self, capsys):
        system = build_system(sun_earth())
        system.advance(10, 60.0)
        system.summary()
        out = capsys.readouterr().out
        assert "Earth" in out
        assert "Bodies: 2" in out

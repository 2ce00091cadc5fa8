"""
Tests for the particle system state machine
===========================================
"""

from __future__ import annotations

import numpy as np
import pytest

from gesture_fireworks.config import EngineConfig
from gesture_fireworks.engine import FireworkState, ParticleSystem
from gesture_fireworks.palettes import PALETTES
from gesture_fireworks.shapes import TargetShape

DT = 0.016


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def system(small_shape: TargetShape, rng: np.random.Generator, engine_config: EngineConfig) -> ParticleSystem:
    return ParticleSystem.launch(small_shape, 3.0, 5.0, PALETTES[1], rng, engine_config)


def run_until(system: ParticleSystem, rng: np.random.Generator, state: FireworkState, max_ticks: int = 1000) -> int:
    """Step the system until it enters `state`, returning the number of ticks it took."""
    for tick in range(1, max_ticks + 1):
        system.step(DT, rng)
        if system.state == state:
            return tick
    raise AssertionError(f"{system!r} never reached {state}")


class TestLaunch:
    def test_initial_state(self, system: ParticleSystem, small_shape: TargetShape) -> None:
        assert system.state == FireworkState.ROCKET
        assert system.timer == 0
        assert system.opacity == 1.0
        assert system.particle_count == len(small_shape) == 20
        np.testing.assert_array_equal(system.positions, np.tile([3.0, -60.0, 0.0], (20, 1)))
        np.testing.assert_array_equal(system.rocket_position, [3.0, -60.0, 0.0])

    def test_rocket_speed_range(self, small_shape: TargetShape, rng: np.random.Generator) -> None:
        config = EngineConfig()
        for _ in range(50):
            system = ParticleSystem.launch(small_shape, 0, 0, PALETTES[0], rng, config)
            assert 0.8 <= system.rocket_velocity[1] <= 1.2
            assert system.rocket_velocity[0] == system.rocket_velocity[2] == 0

    def test_colors_come_from_palette(self, system: ParticleSystem) -> None:
        palette_colors = {tuple(color) for color in PALETTES[1].rgb.tolist()}
        assert all(tuple(color) in palette_colors for color in system.base_colors.tolist())

    def test_target_offsets_include_spawn_position(self, system: ParticleSystem, small_shape: TargetShape) -> None:
        np.testing.assert_allclose(system.target_offsets, small_shape.points + np.array([3.0, 5.0, 0.0]))

    def test_buffers_are_flat(self, system: ParticleSystem) -> None:
        buffers = system.buffers()
        assert buffers.positions.shape == (60,)
        assert buffers.colors.shape == (60,)
        assert buffers.opacity == 1.0
        assert buffers.point_size == pytest.approx(0.25)

    def test_mismatched_buffers(self, small_shape: TargetShape, engine_config: EngineConfig) -> None:
        with pytest.raises(ValueError):
            ParticleSystem(small_shape, 0, 0, np.zeros((3, 3)), np.zeros((20, 3)), 1.0, engine_config)


class TestRocket:
    def test_rocket_rises_by_its_velocity(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        speed = system.rocket_velocity[1]
        system.step(DT, rng)
        assert system.rocket_position[1] == pytest.approx(-60 + speed)

    def test_trail_is_below_the_head(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        system.step(DT, rng)
        head_y = system.rocket_position[1]
        assert np.all(system.positions[:, 1] <= head_y + 1e-5)
        assert np.all(system.positions[:, 1] >= head_y - 8.0 - 1e-5)
        assert np.all(np.abs(system.positions[:, 0] - 3.0) <= 0.225 + 1e-5)

    def test_trail_colors_never_exceed_white(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        system.step(DT, rng)
        assert np.all((system.colors >= 0) & (system.colors <= 1))

    def test_trail_head_is_white_and_tail_is_dimmed(
        self, system: ParticleSystem, rng: np.random.Generator, engine_config: EngineConfig
    ) -> None:
        system.step(DT, rng)
        # Each particle lags `lag * trail_length` below the head
        lag = (system.rocket_position[1] - system.positions[:, 1]) / engine_config.trail_length
        head = lag < 0.02 - 1e-3
        tail = lag > 0.02 + 1e-3
        assert head.any() and tail.any()

        np.testing.assert_allclose(system.colors[head], 1.0)
        expected = system.base_colors[tail] * (0.6 * (1 - lag[tail]))[:, np.newaxis]
        np.testing.assert_allclose(system.colors[tail], expected, atol=1e-4)

    def test_explodes_at_target_height(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        while system.state == FireworkState.ROCKET:
            previous_y = system.rocket_position[1]
            system.step(DT, rng)
        assert previous_y < system.target_y <= system.rocket_position[1]
        assert system.state == FireworkState.EXPLODING
        assert system.timer == 0
        assert system.point_size == pytest.approx(0.18)
        np.testing.assert_array_equal(system.colors, system.base_colors)


class TestExploding:
    def test_velocities_are_damped(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        run_until(system, rng, FireworkState.EXPLODING)
        velocities = system.velocities.copy()
        positions = system.positions.copy()

        system.step(DT, rng)
        np.testing.assert_allclose(system.positions, positions + velocities, rtol=1e-5)
        np.testing.assert_allclose(system.velocities, velocities * 0.9, rtol=1e-5)

    def test_lasts_explode_duration(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        run_until(system, rng, FireworkState.EXPLODING)
        ticks = run_until(system, rng, FireworkState.WEAVING)
        # Leaves the state on the first tick where the timer exceeds 0.6s
        assert ticks == int(0.6 / DT) + 1
        assert system.timer == 0


class TestWeaving:
    def test_particles_converge_to_target(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        run_until(system, rng, FireworkState.WEAVING)
        start_error = np.abs(system.positions - system.target_offsets).mean()
        run_until(system, rng, FireworkState.FADING)
        end_error = np.abs(system.positions - system.target_offsets).mean()
        assert end_error < start_error

    def test_opacity_ramp(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        run_until(system, rng, FireworkState.WEAVING)
        opacities = []
        while system.state == FireworkState.WEAVING:
            progress = min((system.timer + DT) / 2.4, 1.0)
            system.step(DT, rng)
            opacities.append((progress, system.opacity))

        for progress, opacity in opacities:
            if progress <= 0.6:
                assert opacity == 1.0
        assert all(later <= earlier for (_, earlier), (_, later) in zip(opacities, opacities[1:]))
        # The last weave tick ran at full progress
        assert opacities[-1][0] == 1.0
        assert system.opacity == pytest.approx(0.5)
        # Entering FADING does not reset the timer
        assert system.timer > 2.4


class TestFading:
    def test_opacity_decreases_until_finished(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        run_until(system, rng, FireworkState.FADING)
        opacity = system.opacity
        y = system.positions[:, 1].mean()

        system.step(DT, rng)
        assert system.opacity == pytest.approx(opacity - 0.02)
        assert system.positions[:, 1].mean() == pytest.approx(y - 0.05, abs=1e-4)

        while not system.is_finished:
            system.step(DT, rng)
        assert system.opacity <= 0

    def test_finished_system_does_not_move(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        while not system.is_finished:
            system.step(DT, rng)
        positions = system.positions.copy()
        system.step(DT, rng)
        np.testing.assert_array_equal(system.positions, positions)


class TestLifecycle:
    @pytest.mark.parametrize("target", [(0.0, 0.0), (-30.0, 15.0), (40.0, -20.0)])
    def test_state_sequence(
        self, small_shape: TargetShape, rng: np.random.Generator, engine_config: EngineConfig, target: tuple
    ) -> None:
        system = ParticleSystem.launch(small_shape, *target, PALETTES[3], rng, engine_config)
        states = [system.state]
        while not system.is_finished:
            system.step(DT, rng)
            assert system.particle_count == len(system.positions) == 20
            if system.state != states[-1]:
                states.append(system.state)

        assert states == [
            FireworkState.ROCKET,
            FireworkState.EXPLODING,
            FireworkState.WEAVING,
            FireworkState.FADING,
        ]

    def test_release_only_once(self, system: ParticleSystem, rng: np.random.Generator) -> None:
        system.release()
        assert system.released
        with pytest.raises(RuntimeError):
            system.release()
        with pytest.raises(RuntimeError):
            system.step(DT, rng)

    def test_target_shape_is_never_modified(
        self, system: ParticleSystem, small_shape: TargetShape, rng: np.random.Generator
    ) -> None:
        original = small_shape.points.copy()
        while not system.is_finished:
            system.step(DT, rng)
        np.testing.assert_array_equal(small_shape.points, original)

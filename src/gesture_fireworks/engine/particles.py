from __future__ import annotations

import enum
import itertools
from math import pi
from typing import Any, ClassVar, NamedTuple

import numpy as np

from ..config import EngineConfig
from ..palettes import Palette
from ..shapes import TargetShape


class FireworkState(str, enum.Enum):
    ROCKET = "rocket"  # Rising trail toward the requested height
    EXPLODING = "exploding"  # Radial burst with damped velocities
    WEAVING = "weaving"  # Particles pulled into the target shape
    FADING = "fading"  # Shape dissolving until fully transparent


class RenderBuffers(NamedTuple):
    """What a renderer needs for one system on one tick."""

    positions: np.ndarray  # 3 x N floats, x/y/z per particle
    colors: np.ndarray  # 3 x N floats, r/g/b per particle
    opacity: float
    point_size: float


class ParticleSystem:
    """One firework: a fixed number of particles going through the four states, never backward."""

    _ids: ClassVar[itertools.count[int]] = itertools.count(1)

    def __init__(
        self,
        target: TargetShape,
        target_x: float,
        target_y: float,
        base_colors: np.ndarray,
        velocities: np.ndarray,
        rocket_speed: float,
        config: EngineConfig,
    ) -> None:
        count = len(target)
        if base_colors.shape != (count, 3) or velocities.shape != (count, 3):
            raise ValueError(f"Colors and velocities must be ({count}, 3) arrays")

        self.id = next(self._ids)
        self.config = config
        self.target = target
        self.target_x = target_x
        self.target_y = target_y
        self.particle_count = count

        self.positions = np.empty((count, 3), dtype=np.float32)
        self.positions[:] = (target_x, config.launch_y, 0.0)
        self.velocities = np.array(velocities, dtype=np.float32)
        self.base_colors = np.array(base_colors, dtype=np.float32)
        self.colors = self.base_colors.copy()
        # Kept apart from the live positions so the targets are never overwritten
        self.target_offsets = target.points + np.array((target_x, target_y, 0.0), dtype=np.float32)

        self.state = FireworkState.ROCKET
        self.timer = 0.0
        self.rocket_position = np.array((target_x, config.launch_y, 0.0))
        self.rocket_velocity = np.array((0.0, rocket_speed, 0.0))
        self.opacity = 1.0
        self.point_size = config.rocket_point_size
        self.released = False

    @classmethod
    def launch(
        cls,
        target: TargetShape,
        target_x: float,
        target_y: float,
        palette: Palette,
        rng: np.random.Generator,
        config: EngineConfig,
    ) -> ParticleSystem:
        """Create a system with random burst velocities, palette colors and rocket speed."""
        count = len(target)
        theta = rng.random(count) * 2 * pi
        phi = rng.random(count) * pi
        speed = config.burst_speed_min + rng.random(count) * (config.burst_speed_max - config.burst_speed_min)
        velocities = np.column_stack(
            (
                speed * np.sin(phi) * np.cos(theta),
                speed * np.sin(phi) * np.sin(theta),
                speed * np.cos(phi),
            )
        )
        rocket_speed = config.rocket_speed_min + rng.random() * (config.rocket_speed_max - config.rocket_speed_min)
        return cls(
            target=target,
            target_x=target_x,
            target_y=target_y,
            base_colors=palette.pick(count, rng),
            velocities=velocities,
            rocket_speed=rocket_speed,
            config=config,
        )

    def __repr__(self) -> str:
        return (
            f"<ParticleSystem #{self.id} {self.target.key.name!r} {self.state.name} "
            f"particles={self.particle_count} opacity={self.opacity:.2f}>"
        )

    @property
    def is_finished(self) -> bool:
        return self.state == FireworkState.FADING and self.opacity <= 0

    def step(self, dt: float, rng: np.random.Generator) -> None:
        """Advance the system by one render tick of `dt` seconds."""
        if self.released:
            raise RuntimeError(f"{self!r} was released and cannot be advanced")
        if self.is_finished:
            return

        self.timer += dt
        if self.state == FireworkState.ROCKET:
            self._step_rocket(rng)
        elif self.state == FireworkState.EXPLODING:
            self._step_exploding()
        elif self.state == FireworkState.WEAVING:
            self._step_weaving(rng)
        else:
            self._step_fading(rng)

    def _enter(self, state: FireworkState) -> None:
        self.state = state
        self.timer = 0.0

    def _step_rocket(self, rng: np.random.Generator) -> None:
        config = self.config
        self.rocket_position += self.rocket_velocity

        # Positions are recomputed, not integrated: a dense head and a sparse tail below it
        count = self.particle_count
        lag_curve = rng.random(count) ** config.trail_lag_exponent
        spread = config.trail_head_spread + lag_curve * config.trail_tail_spread
        rx, ry, rz = self.rocket_position
        self.positions[:, 0] = rx + (rng.random(count) - 0.5) * spread
        self.positions[:, 1] = ry - lag_curve * config.trail_length
        self.positions[:, 2] = rz + (rng.random(count) - 0.5) * spread

        dim = (config.trail_dim_factor * (1.0 - lag_curve))[:, np.newaxis]
        self.colors[:] = np.where(
            (lag_curve < config.trail_white_threshold)[:, np.newaxis], 1.0, self.base_colors * dim
        )

        if self.rocket_position[1] >= self.target_y:
            self._enter(FireworkState.EXPLODING)
            self.point_size = config.burst_point_size
            self.colors[:] = self.base_colors

    def _step_exploding(self) -> None:
        self.positions += self.velocities
        self.velocities *= self.config.burst_damping

        if self.timer > self.config.explode_duration:
            self._enter(FireworkState.WEAVING)

    def _step_weaving(self, rng: np.random.Generator) -> None:
        config = self.config
        progress = min(self.timer / config.weave_duration, 1.0)
        move_factor = config.weave_pull * (1.0 - progress**2)
        spread = config.weave_jitter_base + progress * config.weave_jitter_growth

        if progress > config.weave_fade_start:
            fade_progress = (progress - config.weave_fade_start) / (1.0 - config.weave_fade_start)
            self.opacity = 1.0 - fade_progress * (1.0 - config.weave_end_opacity)
        else:
            self.opacity = 1.0

        self.positions += (self.target_offsets - self.positions) * move_factor
        self.positions += (rng.random((self.particle_count, 3)) - 0.5) * spread

        if self.timer > config.weave_duration:
            # Timer keeps running, fading only depends on the opacity
            self.state = FireworkState.FADING

    def _step_fading(self, rng: np.random.Generator) -> None:
        config = self.config
        self.opacity = max(self.opacity - config.fade_step, 0.0)
        self.positions[:, 1] -= config.fade_drift
        self.positions[:, 0::2] += (rng.random((self.particle_count, 2)) - 0.5) * config.fade_jitter

    def buffers(self) -> RenderBuffers:
        return RenderBuffers(
            positions=self.positions.reshape(-1),
            colors=self.colors.reshape(-1),
            opacity=self.opacity,
            point_size=self.point_size,
        )

    def release(self) -> None:
        """Drop the particle buffers. Must be called exactly once, when the system is removed."""
        if self.released:
            raise RuntimeError(f"{self!r} was already released")
        self.released = True
        empty = np.empty((0, 3), dtype=np.float32)
        self.positions = self.velocities = self.colors = self.base_colors = self.target_offsets = empty

    def to_dict(self) -> dict[str, Any]:
        """Export system state as a dictionary."""
        return {
            "id": self.id,
            "shape": self.target.key.name,
            "state": self.state.value,
            "timer": self.timer,
            "particles": self.particle_count,
            "opacity": self.opacity,
            "target": (self.target_x, self.target_y),
        }

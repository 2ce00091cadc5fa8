from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import ExitStack

import numpy as np

from ..config import EngineConfig
from ..gestures import Shapes
from ..palettes import Palette
from ..shapes import ShapeRasterizer
from .particles import ParticleSystem

logger = logging.getLogger(__name__)

SystemCallback = Callable[[ParticleSystem], None]


class ParticleSystemRegistry:
    """Owns the live particle systems: spawns them, advances them and removes the finished ones.

    Renderers register `on_spawn` / `on_release` callbacks to create and free their own resources,
    `on_release` being called exactly once per system, right before its buffers are released.
    """

    def __init__(
        self,
        rasterizer: ShapeRasterizer,
        rng: np.random.Generator,
        config: EngineConfig | None = None,
    ) -> None:
        self.rasterizer = rasterizer
        self.rng = rng
        self.config = config or EngineConfig()
        self.systems: list[ParticleSystem] = []
        self.on_spawn: list[SystemCallback] = []
        self.on_release: list[SystemCallback] = []

    def __len__(self) -> int:
        return len(self.systems)

    def __iter__(self) -> Iterator[ParticleSystem]:
        return iter(self.systems)

    @property
    def particle_count(self) -> int:
        return sum(system.particle_count for system in self.systems)

    def spawn(
        self,
        key: str,
        scale: float,
        target_x: float,
        target_y: float,
        palette: Palette,
        shape_kind: Shapes | str | None = None,
    ) -> ParticleSystem | None:
        """Launch a firework weaving into the text `key` (or the named shape) at `(target_x, target_y)`.

        Returns `None`, without creating anything, if the target shape has no points.
        """
        target = self.rasterizer.get(key, scale, shape_kind)
        if target.is_empty:
            logger.debug("Dropping spawn of %r: empty target shape", key)
            return None

        system = ParticleSystem.launch(target, target_x, target_y, palette, self.rng, self.config)
        self.systems.append(system)
        logger.debug("Spawned %r at (%.1f, %.1f)", system, target_x, target_y)
        for callback in self.on_spawn:
            callback(system)
        return system

    def tick(self, dt: float | None = None) -> None:
        """Advance every system by one tick and remove the ones that finished fading."""
        if dt is None:
            dt = self.config.tick_seconds
        # Iterate backward so removals do not shift the systems still to be advanced
        for index in range(len(self.systems) - 1, -1, -1):
            system = self.systems[index]
            system.step(dt, self.rng)
            if system.is_finished:
                del self.systems[index]
                self._release(system)

    def clear(self) -> None:
        """Remove and release every live system."""
        systems, self.systems = self.systems, []
        # Unwound in reverse, every system is released even if an observer raises
        with ExitStack() as stack:
            for system in reversed(systems):
                stack.callback(self._release, system)

    def _release(self, system: ParticleSystem) -> None:
        # The system is already out of `systems`: its buffers are released even if an observer fails
        try:
            for callback in self.on_release:
                callback(system)
        finally:
            system.release()
            logger.debug("Removed %r", system)

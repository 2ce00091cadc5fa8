"""The firework show: one controller owning all the mutable state, advanced by an explicit tick."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np

from .config import Config
from .engine import ParticleSystem, ParticleSystemRegistry
from .gestures import Gestures, Shapes
from .interaction import Actions, InteractionMapper, ShowSequencer, SpawnRequest, SpawnScheduler
from .models.hand_state import HandState
from .palettes import PALETTES, Palette
from .shapes import ShapeRasterizer
from .viewport import Viewport

logger = logging.getLogger(__name__)

CURSOR_COLOR = (0.0, 1.0, 1.0)
CURSOR_PAUSED_COLOR = (1.0, 0.0, 0.0)


class ShowMode(str, enum.Enum):
    WAITING = "waiting"  # Before `start_show`
    SHOW = "show"  # Scripted phrases running


class Cursor(NamedTuple):
    position: tuple[float, float, float]
    visible: bool
    color: tuple[float, float, float]


@dataclass
class EngineContext:
    """Everything that changes while the show runs. Owned by exactly one `FireworkShow`."""

    config: Config
    rng: np.random.Generator
    registry: ParticleSystemRegistry
    viewport: Viewport
    palette_index: int = 0
    paused: bool = False
    mode: ShowMode = ShowMode.WAITING
    last_trigger_time: float | None = None
    hand_state: HandState = field(default_factory=HandState)
    current_action: Actions = Actions.WAITING

    @property
    def palette(self) -> Palette:
        return PALETTES[self.palette_index]


class FireworkShow:
    """Control surface for the hosting application.

    The host calls `tick` once per rendered frame and `apply_hand_state` (or `update_hand`) whenever
    a new detection is available; both happen on the same thread, the detection thread only
    producing `HandState` snapshots.
    """

    def __init__(self, config: Config | None = None, rng: np.random.Generator | None = None) -> None:
        self.config = config = config or Config()
        if rng is None:
            rng = np.random.default_rng(config.show.seed)

        self.rasterizer = ShapeRasterizer(config.shapes, rng)
        self.context = EngineContext(
            config=config,
            rng=rng,
            registry=ParticleSystemRegistry(self.rasterizer, rng, config.engine),
            viewport=Viewport(config.interaction),
            palette_index=config.show.initial_palette % len(PALETTES),
        )
        self.interaction = InteractionMapper(self, config.interaction)
        self.sequencer = ShowSequencer(config.show.phrases, config.show.display_duration)
        self.scheduler = SpawnScheduler()

    @property
    def registry(self) -> ParticleSystemRegistry:
        return self.context.registry

    @property
    def hand_state(self) -> HandState:
        return self.context.hand_state

    @property
    def current_action(self) -> str:
        return self.context.current_action.value

    @property
    def current_theme(self) -> str:
        return self.context.palette.name

    @property
    def is_paused(self) -> bool:
        return self.context.paused

    # Show control

    def start_show(self) -> None:
        """Start the scripted phrases loop. Calling it again while running does nothing."""
        if not self.sequencer.start():
            return
        self.context.mode = ShowMode.SHOW
        self.context.current_action = Actions.SHOW_STARTED
        logger.info("Show started")

    def stop_show(self) -> None:
        self.sequencer.stop()
        self.context.mode = ShowMode.WAITING

    def set_paused(self, paused: bool) -> None:
        if paused != self.context.paused:
            self.context.paused = paused
            logger.info("Show %s", "paused" if paused else "resumed")

    def toggle_pause(self) -> bool:
        self.set_paused(not self.context.paused)
        return self.context.paused

    def cycle_palette(self) -> Palette:
        """Switch to a random palette other than the current one, for fireworks spawned from now on."""
        if len(PALETTES) > 1:
            current = self.context.palette_index
            choices = [index for index in range(len(PALETTES)) if index != current]
            self.context.palette_index = int(self.context.rng.choice(choices))
            logger.info("Theme changed to %s", self.current_theme)
        return self.context.palette

    # Hand input

    def apply_hand_state(self, state: HandState, now: float | None = None) -> None:
        """Feed the latest classified hand, `now` being a monotonic timestamp in seconds."""
        self.interaction.handle_hand_state(state, time.monotonic() if now is None else now)

    def update_hand(
        self, x: float, y: float, gesture: Gestures, is_present: bool, now: float | None = None
    ) -> None:
        state = HandState(gesture=gesture if is_present else Gestures.IDLE, x=x, y=y, is_present=is_present)
        self.apply_hand_state(state, now)

    @property
    def cursor(self) -> Cursor:
        """Where the pointer hits the z = 0 plane, and how to display it."""
        viewport = self.context.viewport
        state = self.context.hand_state
        position = viewport.unproject(*viewport.pointer_to_ndc(state.x, state.y))
        color = CURSOR_PAUSED_COLOR if self.context.paused else CURSOR_COLOR
        return Cursor(position=position, visible=state.is_present, color=color)

    # Spawning

    def spawn_firework(
        self,
        text: str,
        scale: float,
        target_x: float = 0.0,
        target_y: float = 0.0,
        shape_kind: Shapes | str | None = None,
    ) -> ParticleSystem | None:
        return self.registry.spawn(text, scale, target_x, target_y, self.context.palette, shape_kind)

    def spawn_special_shape(self, kind: Shapes | str) -> ParticleSystem | None:
        """Launch a named shape at the center of the scene."""
        kind = Shapes(kind)
        return self.spawn_firework(kind.value, self.config.interaction.special_shape_scale, 0, 0, kind)

    def random_spawn_request(self) -> SpawnRequest:
        config = self.config.interaction
        rng = self.context.rng
        return SpawnRequest(
            text=str(rng.choice(config.finale_texts)),
            scale=config.finale_scale,
            target_x=float((rng.random() - 0.5) * config.finale_spread_x),
            target_y=float((rng.random() - 0.5) * config.finale_spread_y),
        )

    def trigger_finale(self) -> None:
        """Schedule a staggered burst of randomly placed fireworks."""
        config = self.config.interaction
        for index in range(config.finale_count):
            self.scheduler.schedule(index * config.finale_stagger, self.random_spawn_request())

    def phrase_scale(self, phrase: str) -> float:
        show_config = self.config.show
        if len(phrase) > show_config.short_phrase_length:
            return show_config.long_phrase_scale
        return show_config.short_phrase_scale

    # Render loop

    def tick(self, dt: float | None = None) -> None:
        """Advance the show by one rendered frame of `dt` seconds.

        Zoom from continuous gestures always applies; spawning timers and particle physics are
        frozen while paused.
        """
        if dt is None:
            dt = self.config.engine.tick_seconds

        self.interaction.apply_continuous()

        if self.context.paused:
            return

        for request in self.scheduler.advance(dt):
            self.spawn_firework(
                request.text, request.scale, request.target_x, request.target_y, request.shape_kind
            )

        if (phrase := self.sequencer.advance(dt)) is not None:
            self.spawn_firework(phrase, self.phrase_scale(phrase))

        self.registry.tick(dt)

    def to_dict(self) -> dict[str, Any]:
        """Export the show status as a dictionary."""
        return {
            "mode": self.context.mode.value,
            "paused": self.context.paused,
            "action": self.current_action,
            "theme": self.current_theme,
            "camera_distance": self.context.viewport.distance,
            "hand": self.hand_state.to_dict(),
            "systems": [system.to_dict() for system in self.registry],
        }

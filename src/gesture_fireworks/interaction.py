"""Mapping of classified gestures to show actions, and the tick driven timers of the show."""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import InteractionConfig
from .gestures import CONTINUOUS_GESTURES, Gestures, Shapes
from .models.hand_state import HandState

if TYPE_CHECKING:
    from .show import FireworkShow

logger = logging.getLogger(__name__)


class Actions(str, enum.Enum):
    """Human readable labels of what the show is currently doing."""

    WAITING = "WAITING"
    READY = "READY"
    SHOW_STARTED = "SHOW STARTED"
    NO_SIGNAL = "NO SIGNAL"
    LOVE = "LOVE (V-SIGN)"
    FINALE = "FINALE (OK)"
    ZOOM_IN = "ZOOM IN (PINCH)"
    ZOOM_OUT = "ZOOM OUT (PALM)"


class InteractionMapper:
    """Turns hand states into show actions.

    Discrete gestures (V_SIGN, OK_SIGN) fire once, then are throttled by a cooldown measured from
    the last discrete trigger, whatever its gesture. Continuous gestures (PINCH, OPEN_PALM) zoom the
    camera a little on every render tick while they persist.
    """

    def __init__(self, show: FireworkShow, config: InteractionConfig | None = None) -> None:
        self.show = show
        self.config = config or InteractionConfig()

    def _cooldown_elapsed(self, now: float, cooldown: float) -> bool:
        last_trigger_time = self.show.context.last_trigger_time
        return last_trigger_time is None or now - last_trigger_time > cooldown

    def handle_hand_state(self, state: HandState, now: float) -> None:
        """React to a freshly classified hand, `now` being a timestamp in seconds."""
        context = self.show.context
        context.hand_state = state

        if not state.is_present:
            context.current_action = Actions.NO_SIGNAL
            return

        gesture = state.gesture
        if gesture == Gestures.V_SIGN:
            if self._cooldown_elapsed(now, self.config.heart_cooldown):
                context.last_trigger_time = now
                self.show.spawn_special_shape(Shapes.HEART)
                context.current_action = Actions.LOVE
                logger.info("V-sign: heart launched")
        elif gesture == Gestures.OK_SIGN:
            if self._cooldown_elapsed(now, self.config.finale_cooldown):
                context.last_trigger_time = now
                self.show.trigger_finale()
                context.current_action = Actions.FINALE
                logger.info("OK sign: finale launched")
        elif gesture in CONTINUOUS_GESTURES:
            # Applied on every tick by `apply_continuous`
            pass
        else:
            context.current_action = Actions.READY

    def apply_continuous(self) -> None:
        """Apply the continuous gesture of the latest hand state, called once per render tick."""
        context = self.show.context
        state = context.hand_state
        if not state.is_present:
            return

        if state.gesture == Gestures.PINCH:
            context.viewport.zoom_in()
            context.current_action = Actions.ZOOM_IN
        elif state.gesture == Gestures.OPEN_PALM:
            context.viewport.zoom_out()
            context.current_action = Actions.ZOOM_OUT


@dataclass
class SpawnRequest:
    text: str
    scale: float
    target_x: float
    target_y: float
    shape_kind: Shapes | None = None


@dataclass
class _ScheduledSpawn:
    remaining: float
    request: SpawnRequest


class SpawnScheduler:
    """Delays spawn requests by an amount of ticked time, not wall-clock time."""

    def __init__(self) -> None:
        self._pending: list[_ScheduledSpawn] = []

    def __len__(self) -> int:
        return len(self._pending)

    def schedule(self, delay: float, request: SpawnRequest) -> None:
        self._pending.append(_ScheduledSpawn(delay, request))

    def advance(self, dt: float) -> list[SpawnRequest]:
        """Return the requests due after `dt` more seconds, in scheduling order."""
        due: list[SpawnRequest] = []
        still_pending: list[_ScheduledSpawn] = []
        for scheduled in self._pending:
            scheduled.remaining -= dt
            if scheduled.remaining <= 0:
                due.append(scheduled.request)
            else:
                still_pending.append(scheduled)
        self._pending = still_pending
        return due

    def clear(self) -> None:
        self._pending.clear()


class ShowSequencer:
    """Scripted loop over the phrases, one phrase every `display_duration` seconds of ticked time.

    Only the ticks it receives make it progress, so not advancing it while paused keeps its
    position and its elapsed time untouched.
    """

    def __init__(self, phrases: Sequence[str], display_duration: float) -> None:
        self.phrases = list(phrases)
        self.display_duration = display_duration
        self.index = 0
        self.elapsed = 0.0
        self.is_running = False
        self._spawn_pending = False

    @property
    def current_phrase(self) -> str | None:
        return self.phrases[self.index] if self.phrases else None

    def start(self) -> bool:
        """Start the loop from its current position. Returns False if it was already running."""
        if self.is_running:
            return False
        self.is_running = True
        self._spawn_pending = bool(self.phrases)
        self.elapsed = 0.0
        return True

    def stop(self) -> None:
        self.is_running = False
        self._spawn_pending = False

    def advance(self, dt: float) -> str | None:
        """Advance the loop by `dt` seconds and return the phrase to launch now, if any."""
        if not self.is_running or not self.phrases:
            return None

        if self._spawn_pending:
            self._spawn_pending = False
            self.elapsed = 0.0
            return self.phrases[self.index]

        self.elapsed += dt
        if self.elapsed < self.display_duration:
            return None

        self.elapsed -= self.display_duration
        self.index = (self.index + 1) % len(self.phrases)
        return self.phrases[self.index]

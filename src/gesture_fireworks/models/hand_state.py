from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..gestures import Gestures


@dataclass(frozen=True)
class HandState:
    """Snapshot of the classified hand, replaced as a whole on every detection."""

    gesture: Gestures = Gestures.IDLE
    x: float = 0.5
    y: float = 0.5
    z: float = 0.0
    is_present: bool = False

    @classmethod
    def absent(cls, pointer: tuple[float, float, float] = (0.5, 0.5, 0.0)) -> HandState:
        """State reported when no hand is in the frame."""
        x, y, z = pointer
        return cls(gesture=Gestures.IDLE, x=x, y=y, z=z, is_present=False)

    @property
    def pointer(self) -> tuple[float, float, float]:
        return self.x, self.y, self.z

    def to_dict(self) -> dict[str, Any]:
        """Export hand state as a dictionary."""
        return {
            "gesture": self.gesture.value,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "is_present": self.is_present,
        }

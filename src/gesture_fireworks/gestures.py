from __future__ import annotations

from enum import Enum


class Gestures(str, Enum):
    IDLE = "IDLE"
    PINCH = "PINCH"  # Thumb tip and index tip touching
    OPEN_PALM = "OPEN_PALM"
    V_SIGN = "V_SIGN"  # Index and middle up, pinky down
    OK_SIGN = "OK_SIGN"  # Pinch with middle, ring and pinky extended
    FIST = "FIST"  # All four fingers folded, thumb ignored


# Gestures applied on every render tick while they persist
CONTINUOUS_GESTURES: set[Gestures] = {Gestures.PINCH, Gestures.OPEN_PALM}


class Shapes(str, Enum):
    """Named parametric shapes that can be spawned without rasterizing text."""

    HEART = "HEART"
    STAR = "STAR"

"""Shared fixtures: synthetic hands, seeded random generators and small target shapes."""

from __future__ import annotations

import numpy as np
import pytest

from gesture_fireworks.config import Config
from gesture_fireworks.models.landmarks import HandLandmark, Landmark
from gesture_fireworks.shapes import ShapeKey, TargetShape
from gesture_fireworks.show import FireworkShow

WRIST = (0.5, 0.8)

# Horizontal position of each finger column, from index to pinky
FINGER_COLUMNS = {"index": 0.44, "middle": 0.48, "ring": 0.52, "pinky": 0.56}

# Height above the wrist of MCP, PIP, DIP and TIP joints
EXTENDED_HEIGHTS = (0.2, 0.3, 0.38, 0.45)
CURLED_HEIGHTS = (0.2, 0.24, 0.2, 0.17)


def make_hand(
    index: bool = False,
    middle: bool = False,
    ring: bool = False,
    pinky: bool = False,
    pinch: bool = False,
    scale: float = 1.0,
) -> tuple[Landmark, ...]:
    """Build the 21 landmarks of an upright hand with the given fingers extended.

    With `pinch`, the thumb tip is placed right next to the index tip, otherwise it sits far on the side.
    `scale` shrinks or grows the whole hand around the wrist.
    """
    wrist_x, wrist_y = WRIST
    points: list[tuple[float, float]] = [(wrist_x, wrist_y)]

    # Thumb CMC, MCP, IP, TIP going out to the left
    points += [(wrist_x - 0.06, wrist_y - 0.05), (wrist_x - 0.11, wrist_y - 0.09), (wrist_x - 0.15, wrist_y - 0.12)]
    points.append((wrist_x - 0.2, wrist_y - 0.15))

    states = {"index": index, "middle": middle, "ring": ring, "pinky": pinky}
    for finger, column in FINGER_COLUMNS.items():
        heights = EXTENDED_HEIGHTS if states[finger] else CURLED_HEIGHTS
        points += [(column, wrist_y - height) for height in heights]

    if pinch:
        index_tip_x, index_tip_y = points[HandLandmark.INDEX_FINGER_TIP]
        points[HandLandmark.THUMB_TIP] = (index_tip_x + 0.01, index_tip_y + 0.01)

    return tuple(
        Landmark(wrist_x + (x - wrist_x) * scale, wrist_y + (y - wrist_y) * scale, 0.0) for x, y in points
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def show(config: Config, rng: np.random.Generator) -> FireworkShow:
    return FireworkShow(config, rng)


@pytest.fixture
def small_shape() -> TargetShape:
    """A 5x4 grid of points, much faster to simulate than rendered text."""
    xs, ys = np.meshgrid(np.arange(5, dtype=np.float32), np.arange(4, dtype=np.float32))
    points = np.column_stack((xs.ravel(), ys.ravel(), np.zeros(xs.size, dtype=np.float32)))
    return TargetShape.from_points(ShapeKey("grid", 1.0), points)

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import IntEnum
from math import sqrt
from typing import NamedTuple, Protocol, TypeAlias

LANDMARKS_COUNT = 21


class HandLandmark(IntEnum):
    """MediaPipe hand landmark indices."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# Tips of the four fingers checked for extension, the thumb is never checked
FINGER_TIPS: tuple[HandLandmark, ...] = (
    HandLandmark.INDEX_FINGER_TIP,
    HandLandmark.MIDDLE_FINGER_TIP,
    HandLandmark.RING_FINGER_TIP,
    HandLandmark.PINKY_TIP,
)

# Offset from a finger tip to its knuckle (MCP) joint
TIP_TO_KNUCKLE = 3

HAND_CONNECTIONS: tuple[tuple[HandLandmark, HandLandmark], ...] = (
    # Palm
    (HandLandmark.WRIST, HandLandmark.THUMB_CMC),
    (HandLandmark.WRIST, HandLandmark.INDEX_FINGER_MCP),
    (HandLandmark.INDEX_FINGER_MCP, HandLandmark.MIDDLE_FINGER_MCP),
    (HandLandmark.MIDDLE_FINGER_MCP, HandLandmark.RING_FINGER_MCP),
    (HandLandmark.RING_FINGER_MCP, HandLandmark.PINKY_MCP),
    (HandLandmark.WRIST, HandLandmark.PINKY_MCP),
    # Thumb
    (HandLandmark.THUMB_CMC, HandLandmark.THUMB_MCP),
    (HandLandmark.THUMB_MCP, HandLandmark.THUMB_IP),
    (HandLandmark.THUMB_IP, HandLandmark.THUMB_TIP),
    # Index
    (HandLandmark.INDEX_FINGER_MCP, HandLandmark.INDEX_FINGER_PIP),
    (HandLandmark.INDEX_FINGER_PIP, HandLandmark.INDEX_FINGER_DIP),
    (HandLandmark.INDEX_FINGER_DIP, HandLandmark.INDEX_FINGER_TIP),
    # Middle
    (HandLandmark.MIDDLE_FINGER_MCP, HandLandmark.MIDDLE_FINGER_PIP),
    (HandLandmark.MIDDLE_FINGER_PIP, HandLandmark.MIDDLE_FINGER_DIP),
    (HandLandmark.MIDDLE_FINGER_DIP, HandLandmark.MIDDLE_FINGER_TIP),
    # Ring
    (HandLandmark.RING_FINGER_MCP, HandLandmark.RING_FINGER_PIP),
    (HandLandmark.RING_FINGER_PIP, HandLandmark.RING_FINGER_DIP),
    (HandLandmark.RING_FINGER_DIP, HandLandmark.RING_FINGER_TIP),
    # Pinky
    (HandLandmark.PINKY_MCP, HandLandmark.PINKY_PIP),
    (HandLandmark.PINKY_PIP, HandLandmark.PINKY_DIP),
    (HandLandmark.PINKY_DIP, HandLandmark.PINKY_TIP),
)


class PointLike(Protocol):
    x: float
    y: float
    z: float


class Landmark(NamedTuple):
    """A hand landmark in MediaPipe normalized coordinates.

    Attributes:
        x: X coordinate, 0 to 1 from the left of the image
        y: Y coordinate, 0 to 1 from the top of the image
        z: Depth relative to the wrist, arbitrary scale
    """

    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_point(cls, point: PointLike | Sequence[float]) -> Landmark:
        """Create a Landmark from a MediaPipe landmark or a `(x, y[, z])` sequence."""
        if isinstance(point, Sequence):
            return cls(*(float(value) for value in point))
        return cls(float(point.x), float(point.y), float(point.z or 0.0))

    def distance_to(self, other: Landmark) -> float:
        """Euclidean distance to another landmark, depth included."""
        return sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2)


HandLandmarks: TypeAlias = tuple[Landmark, ...]


def to_hand_landmarks(points: Iterable[PointLike | Sequence[float]]) -> HandLandmarks:
    """Convert the points of one detected hand to landmarks.

    Raises:
        ValueError: If the hand does not have exactly 21 points.
    """
    landmarks = tuple(Landmark.from_point(point) for point in points)
    if len(landmarks) != LANDMARKS_COUNT:
        raise ValueError(f"Expected {LANDMARKS_COUNT} hand landmarks, got {len(landmarks)}")
    return landmarks

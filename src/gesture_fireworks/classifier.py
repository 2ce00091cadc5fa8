"""Rule based classification of one hand's landmarks into a gesture and a pointer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from math import isfinite

from .config import ClassifierConfig
from .gestures import Gestures
from .models.hand_state import HandState
from .models.landmarks import (
    FINGER_TIPS,
    LANDMARKS_COUNT,
    TIP_TO_KNUCKLE,
    HandLandmark,
    HandLandmarks,
    Landmark,
    PointLike,
    to_hand_landmarks,
)

logger = logging.getLogger(__name__)


class DegenerateHandError(ValueError):
    """Raised when the landmarks geometry does not allow to decide a finger state."""


class GestureClassifier:
    """Stateless classifier: the same landmarks always give the same `HandState`."""

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        self.config = config or ClassifierConfig()

    def classify(self, landmarks: HandLandmarks | None) -> HandState:
        """Classify the landmarks of one hand, or `None` when no hand is detected."""
        if not landmarks:
            return HandState.absent(self.config.default_pointer)

        if len(landmarks) != LANDMARKS_COUNT:
            logger.debug("Cannot classify hand: expected %d landmarks, got %d", LANDMARKS_COUNT, len(landmarks))
            x, y, z = self.config.default_pointer
            return HandState(gesture=Gestures.IDLE, x=x, y=y, z=z, is_present=True)

        index_tip = landmarks[HandLandmark.INDEX_FINGER_TIP]
        try:
            gesture = self.detect_gesture(landmarks)
        except DegenerateHandError as exc:
            logger.debug("Cannot classify hand: %s", exc)
            gesture = Gestures.IDLE

        if not _is_finite(index_tip):
            x, y, z = self.config.default_pointer
            return HandState(gesture=gesture, x=x, y=y, z=z, is_present=True)

        # Mirror X so the pointer follows the user's hand on a mirrored feed
        return HandState(gesture=gesture, x=1 - index_tip.x, y=index_tip.y, z=index_tip.z, is_present=True)

    def detect_gesture(self, landmarks: HandLandmarks) -> Gestures:
        """Apply the gesture rules in priority order, the first matching one wins."""
        pinch_distance = self.pinch_distance(landmarks)
        index, middle, ring, pinky = (self.is_finger_extended(landmarks, tip) for tip in FINGER_TIPS)

        if not (index or middle or ring or pinky):
            return Gestures.FIST
        if pinch_distance < self.config.pinch_threshold:
            return Gestures.OK_SIGN if middle and ring and pinky else Gestures.PINCH
        if index and middle and not pinky:
            return Gestures.V_SIGN
        if index and middle and ring and pinky:
            return Gestures.OPEN_PALM
        return Gestures.IDLE

    @staticmethod
    def pinch_distance(landmarks: HandLandmarks) -> float:
        thumb_tip = landmarks[HandLandmark.THUMB_TIP]
        index_tip = landmarks[HandLandmark.INDEX_FINGER_TIP]
        _check_finite(thumb_tip, index_tip)
        return thumb_tip.distance_to(index_tip)

    def is_finger_extended(self, landmarks: HandLandmarks, tip_index: int) -> bool:
        """A finger is extended when its tip is clearly farther from the wrist than its knuckle.

        Comparing two distances from the wrist makes the test independent of the hand size and of
        its distance to the camera.
        """
        wrist = landmarks[HandLandmark.WRIST]
        tip = landmarks[tip_index]
        knuckle = landmarks[tip_index - TIP_TO_KNUCKLE]
        _check_finite(wrist, tip, knuckle)

        knuckle_distance = wrist.distance_to(knuckle)
        if knuckle_distance == 0:
            raise DegenerateHandError(f"Knuckle of finger tip {tip_index} is on the wrist")
        return wrist.distance_to(tip) > knuckle_distance * self.config.extension_ratio


def _is_finite(landmark: Landmark) -> bool:
    return isfinite(landmark.x) and isfinite(landmark.y) and isfinite(landmark.z)


def _check_finite(*landmarks: Landmark) -> None:
    for landmark in landmarks:
        if not _is_finite(landmark):
            raise DegenerateHandError(f"Invalid landmark coordinates {tuple(landmark)}")


def classify_hand(
    landmarks: Sequence[PointLike | Sequence[float]] | None, config: ClassifierConfig | None = None
) -> HandState:
    """Shortcut to classify landmarks with a one-off classifier.

    Raises:
        ValueError: If the hand does not have exactly 21 points.
    """
    return GestureClassifier(config).classify(to_hand_landmarks(landmarks) if landmarks else None)

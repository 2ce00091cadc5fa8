from .hand_state import HandState
from .landmarks import (
    FINGER_TIPS,
    HAND_CONNECTIONS,
    LANDMARKS_COUNT,
    HandLandmark,
    HandLandmarks,
    Landmark,
    to_hand_landmarks,
)

__all__ = [
    "FINGER_TIPS",
    "HAND_CONNECTIONS",
    "LANDMARKS_COUNT",
    "HandLandmark",
    "HandLandmarks",
    "HandState",
    "Landmark",
    "to_hand_landmarks",
]

from __future__ import annotations

import logging
import os
import time
import urllib.request
from typing import ClassVar, NamedTuple, TypeAlias

import cv2  # type: ignore[import-untyped]

from .classifier import GestureClassifier
from .config import ClassifierConfig
from .mediapipe import (
    BaseOptions,
    HandLandmarker,
    HandLandmarkerOptions,
    HandLandmarkerResult,
    RunningMode,
    mp,
)
from .models.hand_state import HandState
from .models.landmarks import HandLandmarks, to_hand_landmarks

logger = logging.getLogger(__name__)

OpenCVImage: TypeAlias = cv2.typing.MatLike  # Type alias for images (numpy arrays)


class TrackingResult(NamedTuple):
    state: HandState
    landmarks: HandLandmarks | None  # Raw landmarks of the tracked hand, for the skeleton overlay
    timestamp: float  # Seconds since the tracker started


class HandTracker:
    """Runs the MediaPipe hand landmarker on camera frames and classifies the hand it finds.

    Detection runs asynchronously: MediaPipe calls `save_result` from its own thread, which replaces
    `last_result` as a whole. Readers only ever see a complete snapshot, possibly one detection old.
    """

    model_url: ClassVar[str] = (
        "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
    )

    def __init__(
        self,
        model_path: str,
        classifier_config: ClassifierConfig | None = None,
        use_gpu: bool = False,
        min_confidence: float = 0.6,
    ) -> None:
        self.classifier = GestureClassifier(classifier_config)
        self.last_result = TrackingResult(HandState.absent(self.classifier.config.default_pointer), None, 0.0)
        self.start_time = time.perf_counter()

        self.check_model(model_path)

        self.landmarker: HandLandmarker | None = HandLandmarker.create_from_options(
            HandLandmarkerOptions(
                base_options=BaseOptions(
                    model_asset_path=model_path,
                    delegate=BaseOptions.Delegate.GPU if use_gpu else BaseOptions.Delegate.CPU,
                ),
                running_mode=RunningMode.LIVE_STREAM,
                num_hands=1,
                min_hand_detection_confidence=min_confidence,
                min_hand_presence_confidence=min_confidence,
                min_tracking_confidence=min_confidence,
                result_callback=self.save_result,
            )
        )
        self._last_timestamp_ms = -1

    def check_model(self, model_path: str) -> None:
        if not os.path.exists(model_path):
            logger.info("Model file '%s' not found. Downloading...", model_path)
            try:
                urllib.request.urlretrieve(self.model_url, model_path)
            except OSError as exc:
                raise RuntimeError(f"Could not download model from {self.model_url}: {exc}") from exc
            logger.info("Successfully downloaded model to '%s'", model_path)

    @property
    def hand_state(self) -> HandState:
        return self.last_result.state

    def track_frame(self, frame: OpenCVImage) -> None:
        """Send an OpenCV (BGR) frame to the landmarker. The result arrives later in `last_result`."""
        if self.landmarker is None:
            raise RuntimeError("Hand tracker is closed")
        # MediaPipe requires strictly increasing timestamps
        timestamp_ms = max(int((time.perf_counter() - self.start_time) * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        self.landmarker.detect_async(mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame), timestamp_ms)

    def save_result(self, result: HandLandmarkerResult, input_image: mp.Image, timestamp_ms: int) -> None:
        """Classify the first detected hand and publish the new snapshot."""
        landmarks: HandLandmarks | None = None
        if result.hand_landmarks:
            try:
                landmarks = to_hand_landmarks(result.hand_landmarks[0])
            except ValueError as exc:
                logger.warning("Ignoring hand: %s", exc)
        self.last_result = TrackingResult(self.classifier.classify(landmarks), landmarks, timestamp_ms / 1000)

    def close(self) -> None:
        """Close the landmarker and release resources."""
        if self.landmarker:
            self.landmarker.close()
            self.landmarker = None

    def __enter__(self) -> HandTracker:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

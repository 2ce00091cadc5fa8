from __future__ import annotations

import logging
import os

import cv2  # type: ignore[import-untyped]
import typer

from ..config import Config

app = typer.Typer()

DEFAULT_USER_CONFIG_PATH = Config.get_user_path()

logger = logging.getLogger("gesture_fireworks.cli")


def setup_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root = logging.getLogger("gesture_fireworks")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
    root.propagate = False  # Don't propagate to root logger


def init_camera_capture(device_index: int, desired_size: int) -> cv2.VideoCapture | None:
    """Open the camera and ask for a 4:3 capture whose largest side is `desired_size`."""
    cap = cv2.VideoCapture(device_index)

    if not cap.isOpened():
        logger.error("Could not open camera %d", device_index)
        return None

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, desired_size)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, int(desired_size * 3 / 4))
    cap.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter.fourcc(*"MJPG"))  # Use MJPEG for better performance
    cap.set(cv2.CAP_PROP_FPS, 30)

    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    logger.info("Camera %d opened at %dx%d with FPS: %.2f", device_index, width, height, cap.get(cv2.CAP_PROP_FPS))
    return cap


def determine_gpu_usage(gpu: bool | None) -> bool:
    """Determine whether to use GPU based on the CLI argument, then the environment variable.

    Priority order:
    1. CLI arguments (--gpu / --no-gpu)
    2. Environment variable (GESTURE_FIREWORKS_USE_GPU)
    3. Default (False)
    """
    if gpu is not None:
        return gpu
    env_gpu = os.getenv("GESTURE_FIREWORKS_USE_GPU", "").strip().lower()
    return env_gpu in ("true", "1", "yes")


def get_model_path() -> str:
    return os.getenv("GESTURE_FIREWORKS_MODEL_PATH", "").strip() or "hand_landmarker.task"

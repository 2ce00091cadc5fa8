from __future__ import annotations

import time
from contextlib import ExitStack
from pathlib import Path

import cv2  # type: ignore[import-untyped]
import typer

from ..config import Config
from ..drawing import PreviewRenderer
from ..gestures import Shapes
from ..recognizer import HandTracker
from ..show import FireworkShow
from .common import (
    DEFAULT_USER_CONFIG_PATH,
    app,
    determine_gpu_usage,
    get_model_path,
    init_camera_capture,
    logger,
    setup_logging,
)

WINDOW_NAME = "Gesture Fireworks"


def handle_key(show: FireworkShow, key: int) -> bool:
    """Apply a keyboard shortcut. Returns False when the user asked to quit."""
    if key in (ord("q"), 27):  # 'q' or ESC
        return False
    if key == ord(" "):
        show.toggle_pause()
    elif key == ord("h"):
        show.spawn_special_shape(Shapes.HEART)
    elif key == ord("s"):
        show.spawn_special_shape(Shapes.STAR)
    elif key == ord("t"):
        show.cycle_palette()
    return True


def run_show(config: Config, use_camera: bool, camera: int, desired_size: int, use_gpu: bool) -> None:
    """Run the show in an OpenCV window, driven by the hand seen by the camera if enabled."""
    show = FireworkShow(config)
    renderer = PreviewRenderer(show, config.cli.window_width, config.cli.window_height)
    frame_duration = config.engine.tick_seconds

    with ExitStack() as stack:
        cap = None
        tracker = None
        if use_camera:
            cap = init_camera_capture(camera, desired_size)
            if cap is None:
                return
            stack.callback(cap.release)
            logger.info("Loading hand landmarker model...")
            tracker = stack.enter_context(HandTracker(get_model_path(), config.classifier, use_gpu=use_gpu))

        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
        stack.callback(cv2.destroyAllWindows)
        stack.callback(show.registry.clear)
        print("Keys: space pause/resume, h heart, s star, t theme, q or ESC quit")

        show.start_show()
        last_detection: float | None = None

        while True:
            tick_start = time.perf_counter()
            frame = None
            landmarks = None

            if cap is not None and tracker is not None:
                ret, frame = cap.read()
                if not ret:
                    logger.error("Failed to capture frame")
                    break
                tracker.track_frame(frame)
                # Only feed new detections, the tracker may lag behind the render loop
                result = tracker.last_result
                if result.timestamp != last_detection:
                    last_detection = result.timestamp
                    show.apply_hand_state(result.state)
                landmarks = result.landmarks

            show.tick(frame_duration)
            cv2.imshow(WINDOW_NAME, renderer.render(frame, landmarks))

            wait_ms = max(1, int((frame_duration - (time.perf_counter() - tick_start)) * 1000))
            if not handle_key(show, cv2.waitKey(wait_ms) & 0xFF):
                break

            # Check if window was closed
            try:
                if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                    break
            except cv2.error:
                # Window was closed
                break


@app.callback(invoke_without_command=True)
def run_show_cmd(
    ctx: typer.Context,
    use_camera: bool = typer.Option(True, "--camera/--watch", help="Drive the show with hand gestures, or just watch"),
    camera: int | None = typer.Option(None, "--device", "-d", help="OpenCV index of the camera"),
    size: int | None = typer.Option(None, "--size", "-s", help="Maximum dimension of the camera capture"),
    gpu: bool | None = typer.Option(None, "--gpu/--no-gpu", help="Force GPU acceleration (overrides environment variable)"),
    config_path: Path | None = typer.Option(  # noqa: B008
        None, "--config", "-c", help=f"Path to config file. Default: {DEFAULT_USER_CONFIG_PATH}"
    ),
) -> None:
    """Run the firework show.

    The default config location is platform-specific, use `init-config` to create it.
    """
    # If a subcommand is being invoked, don't run the default behavior
    if ctx.invoked_subcommand is not None:
        return

    config = Config.load(config_path)
    setup_logging(config.cli.log_level)

    # Use config values as defaults, but CLI options take precedence
    final_camera = camera if camera is not None else config.cli.camera
    final_size = size if size is not None else config.cli.size

    run_show(config, use_camera, final_camera, final_size, determine_gpu_usage(gpu))

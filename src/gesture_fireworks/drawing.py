"""OpenCV preview of the show: projected particles, cursor, HUD labels and hand skeleton."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeAlias

import cv2  # type: ignore[import-untyped]
import numpy as np

from .engine import ParticleSystem
from .models.landmarks import HAND_CONNECTIONS, HandLandmarks

if TYPE_CHECKING:
    from .show import FireworkShow

logger = logging.getLogger(__name__)

OpenCVImage: TypeAlias = cv2.typing.MatLike  # Type alias for images (numpy arrays)

# Colors in BGR format for OpenCV
BACKGROUND_COLOR = (16, 5, 5)
HUD_COLOR = (255, 255, 0)
TEXT_COLOR = (200, 200, 200)
SKELETON_COLOR = (255, 255, 0)
JOINT_COLOR = (255, 255, 255)

THUMBNAIL_WIDTH = 160
THUMBNAIL_HEIGHT = 120


def to_bgr(rgb: tuple[float, float, float]) -> tuple[int, int, int]:
    r, g, b = rgb
    return int(b * 255), int(g * 255), int(r * 255)


def ascii_label(text: str) -> str:
    """OpenCV Hershey fonts only draw ASCII."""
    return text.encode("ascii", "ignore").decode().strip()


class PreviewRenderer:
    """Renders a `FireworkShow` into OpenCV images.

    Each live particle system gets a color buffer allocated when it spawns and freed when the
    registry removes it; the registry guarantees both happen exactly once.
    """

    def __init__(self, show: FireworkShow, width: int, height: int) -> None:
        self.show = show
        self.width = width
        self.height = height
        self.color_buffers: dict[int, np.ndarray] = {}
        show.context.viewport.aspect = width / height
        for system in show.registry:
            self.create_resources(system)
        show.registry.on_spawn.append(self.create_resources)
        show.registry.on_release.append(self.release_resources)

    def create_resources(self, system: ParticleSystem) -> None:
        self.color_buffers[system.id] = np.zeros((system.particle_count, 3), dtype=np.uint8)

    def release_resources(self, system: ParticleSystem) -> None:
        if self.color_buffers.pop(system.id, None) is None:
            raise RuntimeError(f"No preview resources for {system!r}")

    def render(self, camera_frame: OpenCVImage | None = None, landmarks: HandLandmarks | None = None) -> OpenCVImage:
        image = np.empty((self.height, self.width, 3), dtype=np.uint8)
        image[:] = BACKGROUND_COLOR

        for system in self.show.registry:
            self.draw_system(image, system)

        cursor = self.show.cursor
        if cursor.visible:
            pixels, visible = self.show.context.viewport.project(np.array([cursor.position]), self.width, self.height)
            if visible[0]:
                cv2.circle(image, (int(pixels[0, 0]), int(pixels[0, 1])), 8, to_bgr(cursor.color), 2, cv2.LINE_AA)

        self.draw_hud(image)
        if camera_frame is not None or landmarks is not None:
            self.draw_thumbnail(image, camera_frame, landmarks)
        return image

    def draw_system(self, image: OpenCVImage, system: ParticleSystem) -> None:
        colors = self.color_buffers.get(system.id)
        if colors is None:
            return

        pixels, visible = self.show.context.viewport.project(system.positions, self.width, self.height)
        inside = (
            visible
            & (pixels[:, 0] >= 0)
            & (pixels[:, 0] < self.width)
            & (pixels[:, 1] >= 0)
            & (pixels[:, 1] < self.height)
        )
        # RGB floats to BGR bytes, dimmed by the system opacity
        np.multiply(system.colors[:, ::-1], 255 * system.opacity, out=colors, casting="unsafe")
        xs, ys = pixels[inside, 0], pixels[inside, 1]
        image[ys, xs] = np.maximum(image[ys, xs], colors[inside])

    def draw_hud(self, image: OpenCVImage) -> None:
        show = self.show
        lines = [
            (show.current_action, HUD_COLOR),
            (f"THEME: {ascii_label(show.current_theme)}", TEXT_COLOR),
            (f"HAND: {show.hand_state.gesture.value}" if show.hand_state.is_present else "HAND: -", TEXT_COLOR),
            (f"ZOOM: {show.context.viewport.distance:.1f}", TEXT_COLOR),
        ]
        if show.is_paused:
            lines.append(("PAUSED", (0, 0, 255)))

        y = self.height - 15 * len(lines)
        for text, color in lines:
            (text_width, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.45, 1)
            cv2.putText(
                image,
                text,
                (self.width - text_width - 10, y),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.45,
                color,
                1,
                cv2.LINE_AA,
            )
            y += 15

    def draw_thumbnail(
        self, image: OpenCVImage, camera_frame: OpenCVImage | None, landmarks: HandLandmarks | None
    ) -> None:
        """Small camera view in the bottom left corner with the hand skeleton over it."""
        if camera_frame is not None:
            thumbnail = cv2.resize(camera_frame, (THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT)) // 2
        else:
            thumbnail = np.zeros((THUMBNAIL_HEIGHT, THUMBNAIL_WIDTH, 3), dtype=np.uint8)
        if landmarks:
            draw_hand_skeleton(thumbnail, landmarks)
        if self.show.config.cli.mirror:
            thumbnail = cv2.flip(thumbnail, 1)

        top = self.height - THUMBNAIL_HEIGHT - 10
        image[top : top + THUMBNAIL_HEIGHT, 10 : 10 + THUMBNAIL_WIDTH] = thumbnail
        cv2.rectangle(image, (10, top), (10 + THUMBNAIL_WIDTH, top + THUMBNAIL_HEIGHT), HUD_COLOR, 1)


def draw_hand_skeleton(image: OpenCVImage, landmarks: HandLandmarks) -> OpenCVImage:
    """Draw the hand connections and joints, landmarks being in normalized image coordinates."""
    height, width = image.shape[:2]
    points = [(int(round(landmark.x * width)), int(round(landmark.y * height))) for landmark in landmarks]

    for start, end in HAND_CONNECTIONS:
        cv2.line(image, points[start], points[end], SKELETON_COLOR, 1, cv2.LINE_AA)
    for point in points:
        cv2.circle(image, point, 2, JOINT_COLOR, -1)
    return image

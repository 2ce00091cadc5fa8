from __future__ import annotations

from math import radians, tan

import numpy as np

from .config import InteractionConfig

NEAR_PLANE = 0.1


class Viewport:
    """Perspective camera on the z axis looking at the origin, only its distance can change.

    The distance is the continuous zoom parameter, always kept within the configured bounds.
    """

    def __init__(self, config: InteractionConfig | None = None, aspect: float = 16 / 9) -> None:
        self.config = config or InteractionConfig()
        self.distance = self._clamp(self.config.initial_distance)
        self.aspect = aspect

    def _clamp(self, distance: float) -> float:
        return min(max(distance, self.config.min_distance), self.config.max_distance)

    def zoom_in(self) -> float:
        self.distance = self._clamp(self.distance - self.config.zoom_step)
        return self.distance

    def zoom_out(self) -> float:
        self.distance = self._clamp(self.distance + self.config.zoom_step)
        return self.distance

    @property
    def half_height_factor(self) -> float:
        """Half of the visible height at one unit from the camera."""
        return tan(radians(self.config.fov_degrees) / 2)

    @staticmethod
    def pointer_to_ndc(x: float, y: float) -> tuple[float, float]:
        """Map a `[0, 1]` pointer (y going down) to normalized device coordinates (y going up)."""
        return x * 2 - 1, -(y * 2) + 1

    def unproject(self, ndc_x: float, ndc_y: float) -> tuple[float, float, float]:
        """Point of the z = 0 plane seen at the given normalized device coordinates."""
        half_height = self.distance * self.half_height_factor
        return ndc_x * half_height * self.aspect, ndc_y * half_height, 0.0

    def project(self, points: np.ndarray, width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
        """Project `(N, 3)` world points to pixel coordinates.

        Returns:
            The `(N, 2)` integer pixel coordinates, and the mask of points in front of the camera.
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        depth = self.distance - points[:, 2]
        visible = depth > NEAR_PLANE
        depth = np.where(visible, depth, NEAR_PLANE)

        half_height = depth * self.half_height_factor
        ndc_x = points[:, 0] / (half_height * self.aspect)
        ndc_y = points[:, 1] / half_height

        pixels = np.empty((len(points), 2), dtype=np.int32)
        pixels[:, 0] = np.round((ndc_x + 1) / 2 * width)
        pixels[:, 1] = np.round((1 - ndc_y) / 2 * height)
        return pixels, visible

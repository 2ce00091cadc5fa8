"""Target shapes: the point clouds fireworks weave into.

Text is rendered with Pillow to an off-screen bitmap, every opaque enough pixel becoming one point.
Named shapes are sampled from closed-form curves. Both are cached by key and scale, and the cached
arrays are read-only so every firework spawned with the same key shares them safely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from math import ceil, pi
from typing import NamedTuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .config import ShapesConfig
from .gestures import Shapes

logger = logging.getLogger(__name__)


class ShapeKey(NamedTuple):
    name: str  # The text, or the name of the parametric shape
    scale: float
    kind: Shapes | None = None


@dataclass(frozen=True, eq=False)
class TargetShape:
    """Immutable `(N, 3)` point cloud a firework assembles into."""

    key: ShapeKey
    points: np.ndarray

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @classmethod
    def from_points(cls, key: ShapeKey, points: np.ndarray) -> TargetShape:
        points = np.ascontiguousarray(points, dtype=np.float32).reshape(-1, 3)
        points.flags.writeable = False
        return cls(key=key, points=points)


class ShapeRasterizer:
    def __init__(self, config: ShapesConfig | None = None, rng: np.random.Generator | None = None) -> None:
        self.config = config or ShapesConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._cache: dict[ShapeKey, TargetShape] = {}

    def get(self, text: str, scale: float, kind: Shapes | str | None = None) -> TargetShape:
        """Get the target shape for a text, or for a named shape if `kind` is given.

        The shape is computed on the first request for a key and scale, then reused as is.
        """
        if kind is not None:
            kind = Shapes(kind)
            key = ShapeKey(kind.value, scale, kind)
        else:
            key = ShapeKey(text, scale)

        if (shape := self._cache.get(key)) is not None:
            return shape

        points = self._parametric_points(kind, scale) if kind is not None else self.rasterize_text(text, scale)
        shape = TargetShape.from_points(key, points)
        self._cache[key] = shape
        logger.debug("Cached target shape %r with %d points", key, len(shape))
        return shape

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()

    @cached_property
    def font(self) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        size = self.config.font_size
        for font_path in self.config.fonts:
            try:
                font = ImageFont.truetype(font_path, size)
            except OSError:
                logger.debug("Font %s not available", font_path)
                continue
            logger.info("Using font %s to render texts", font_path)
            return font
        logger.warning("None of the configured fonts is available, using the default font")
        return ImageFont.load_default(size=size)

    def rasterize_text(self, text: str, scale: float) -> np.ndarray:
        """Render the text centered in a bitmap and convert each opaque pixel to a point.

        Pixel `(px, py)` becomes `((px - width / 2) * scale, -(py - height / 2) * scale, z)` with a
        small random `z` so the glyph is not perfectly flat.
        """
        if not text:
            return np.empty((0, 3), dtype=np.float32)

        font = self.font
        probe = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
        width = ceil(probe.textlength(text, font=font))
        height = int(self.config.font_size * self.config.line_height)
        if width <= 0 or height <= 0:
            return np.empty((0, 3), dtype=np.float32)

        image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(image)
        draw.text((width / 2, height / 2), text, font=font, fill=(255, 255, 255, 255), anchor="mm")

        alpha = np.asarray(image)[:, :, 3]
        # Row-major scan, same order as reading the bitmap line by line
        ys, xs = np.nonzero(alpha > self.config.alpha_threshold)

        points = np.empty((len(xs), 3), dtype=np.float32)
        points[:, 0] = (xs - width / 2) * scale
        points[:, 1] = -(ys - height / 2) * scale
        points[:, 2] = (self.rng.random(len(xs)) - 0.5) * self.config.z_jitter
        return points

    def _parametric_points(self, kind: Shapes, scale: float) -> np.ndarray:
        if kind == Shapes.HEART:
            return self.heart_points(scale)
        if kind == Shapes.STAR:
            return self.star_points(scale)
        raise ValueError(f"Unknown shape {kind}")

    def heart_points(self, scale: float = 1.0) -> np.ndarray:
        count = self.config.parametric_points
        t = np.arange(count) / count * 2 * pi
        points = np.zeros((count, 3), dtype=np.float32)
        points[:, 0] = 16 * np.sin(t) ** 3
        points[:, 1] = 13 * np.cos(t) - 5 * np.cos(2 * t) - 2 * np.cos(3 * t) - np.cos(4 * t)
        points[:, :2] *= self.config.heart_scale * scale
        return points

    def star_points(self, scale: float = 1.0, tips: int = 5) -> np.ndarray:
        """Sample the outline of a star uniformly along its perimeter, first tip pointing up."""
        count = self.config.parametric_points
        angles = pi / 2 + np.arange(tips * 2 + 1) * pi / tips
        radii = np.where(np.arange(tips * 2 + 1) % 2 == 0, self.config.star_outer_radius, self.config.star_inner_radius)
        corners_x = radii * np.cos(angles)
        corners_y = radii * np.sin(angles)

        lengths = np.hypot(np.diff(corners_x), np.diff(corners_y))
        along = np.concatenate(([0.0], np.cumsum(lengths)))
        samples = np.arange(count) / count * along[-1]

        points = np.zeros((count, 3), dtype=np.float32)
        points[:, 0] = np.interp(samples, along, corners_x) * scale
        points[:, 1] = np.interp(samples, along, corners_y) * scale
        return points

"""
Tests for the shape rasterizer
==============================
"""

from __future__ import annotations

import numpy as np
import pytest

from gesture_fireworks.config import ShapesConfig
from gesture_fireworks.gestures import Shapes
from gesture_fireworks.shapes import ShapeRasterizer


@pytest.fixture
def rasterizer(rng: np.random.Generator) -> ShapeRasterizer:
    return ShapeRasterizer(ShapesConfig(), rng)


class TestText:
    def test_text_produces_points(self, rasterizer: ShapeRasterizer) -> None:
        shape = rasterizer.get("2026", 0.35)
        assert len(shape) > 0
        assert shape.points.shape == (len(shape), 3)

    def test_points_are_centered_and_scaled(self, rasterizer: ShapeRasterizer) -> None:
        config = rasterizer.config
        shape = rasterizer.get("2026", 0.35)
        half_height = config.font_size * config.line_height / 2 * 0.35

        assert np.all(np.abs(shape.points[:, 1]) <= half_height)
        assert shape.points[:, 0].min() < 0 < shape.points[:, 0].max()

    def test_depth_jitter_range(self, rasterizer: ShapeRasterizer) -> None:
        z = rasterizer.get("2026", 0.35).points[:, 2]
        assert np.all((z >= -0.5) & (z <= 0.5))
        assert z.std() > 0

    def test_scale_is_applied(self, rasterizer: ShapeRasterizer) -> None:
        small = rasterizer.get("2026", 0.25)
        large = rasterizer.get("2026", 0.5)
        assert len(small) == len(large)
        np.testing.assert_allclose(large.points[:, :2], small.points[:, :2] * 2, rtol=1e-5)

    def test_empty_text_has_no_points(self, rasterizer: ShapeRasterizer) -> None:
        shape = rasterizer.get("", 0.35)
        assert shape.is_empty
        assert len(shape) == 0

    def test_blank_text_has_no_points(self, rasterizer: ShapeRasterizer) -> None:
        assert rasterizer.get("   ", 0.35).is_empty


class TestParametricShapes:
    def test_heart(self, rasterizer: ShapeRasterizer) -> None:
        shape = rasterizer.get("anything", 1.0, Shapes.HEART)
        assert len(shape) == 3000
        assert np.all(shape.points[:, 2] == 0)
        # Top of the lobes at t = pi / 2: x = 16 * 1.2, y = 4 * 1.2
        assert shape.points[750, 0] == pytest.approx(16 * 1.2, rel=1e-4)
        assert shape.points[750, 1] == pytest.approx(4 * 1.2, rel=1e-4)

    def test_heart_by_name(self, rasterizer: ShapeRasterizer) -> None:
        assert rasterizer.get("HEART", 1.0, "HEART") is rasterizer.get("HEART", 1.0, Shapes.HEART)

    def test_star(self, rasterizer: ShapeRasterizer) -> None:
        shape = rasterizer.get("STAR", 1.0, Shapes.STAR)
        radii = np.hypot(shape.points[:, 0], shape.points[:, 1])
        assert len(shape) == 3000
        assert radii.max() == pytest.approx(20.0, rel=1e-3)
        assert radii.min() >= 8.0 * np.cos(np.pi / 5) - 1e-3
        # First sample is the top tip
        assert shape.points[0, 1] == pytest.approx(20.0, rel=1e-4)

    def test_unknown_shape(self, rasterizer: ShapeRasterizer) -> None:
        with pytest.raises(ValueError):
            rasterizer.get("CIRCLE", 1.0, "CIRCLE")


class TestCache:
    def test_same_request_reuses_cached_shape(self, rasterizer: ShapeRasterizer) -> None:
        first = rasterizer.get("2026", 0.35)
        second = rasterizer.get("2026", 0.35)
        assert second is first
        assert len(rasterizer) == 1

    def test_cached_points_are_read_only(self, rasterizer: ShapeRasterizer) -> None:
        shape = rasterizer.get("2026", 0.35)
        with pytest.raises(ValueError):
            shape.points[0, 0] = 1.0

    def test_scale_is_part_of_the_key(self, rasterizer: ShapeRasterizer) -> None:
        assert rasterizer.get("2026", 0.35) is not rasterizer.get("2026", 0.25)
        assert len(rasterizer) == 2

    def test_text_and_shape_keys_do_not_collide(self, rasterizer: ShapeRasterizer) -> None:
        text = rasterizer.get("HEART", 1.0)
        heart = rasterizer.get("HEART", 1.0, Shapes.HEART)
        assert text is not heart

    def test_clear(self, rasterizer: ShapeRasterizer) -> None:
        rasterizer.get("2026", 0.35)
        rasterizer.clear()
        assert len(rasterizer) == 0

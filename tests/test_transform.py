"""Tests for imgfit.transform module."""

import math

import pytest

from imgfit.geometry import GeometryPlan
from imgfit.orientation import NO_METADATA, Orientation
from imgfit.transform import TransformPlan, plan_transform

GEOMETRY = GeometryPlan(0, 0, 4000, 3000, 800, 600)


class TestPlanTransform:
    def test_rotate_90_cw(self):
        plan = plan_transform(6, GEOMETRY)
        assert plan.canvas_width == 600
        assert plan.canvas_height == 800
        assert plan.rotation == math.pi / 2
        assert (plan.translate_x, plan.translate_y) == (0, -600)

    def test_rotate_180(self):
        plan = plan_transform(3, GEOMETRY)
        assert plan.canvas_size == (800, 600)
        assert plan.rotation == math.pi
        assert (plan.translate_x, plan.translate_y) == (-800, -600)

    def test_rotate_90_ccw(self):
        plan = plan_transform(8, GEOMETRY)
        assert plan.canvas_size == (600, 800)
        assert plan.rotation == -math.pi / 2
        assert (plan.translate_x, plan.translate_y) == (-800, 0)

    @pytest.mark.parametrize("code", [-2, -1, 1, 2, 4])
    def test_identity_keeps_canvas(self, code):
        plan = plan_transform(code, GEOMETRY)
        assert plan == TransformPlan(800, 600)
        assert plan.is_identity

    @pytest.mark.parametrize("code", [5, 7])
    def test_mirrored_quarter_turns_swap_canvas_only(self, code):
        plan = plan_transform(code, GEOMETRY)
        assert plan == TransformPlan(600, 800)
        assert plan.is_identity

    def test_accepts_orientation_objects(self):
        assert plan_transform(Orientation.from_code(6), GEOMETRY) == plan_transform(6, GEOMETRY)
        assert plan_transform(NO_METADATA, GEOMETRY) == TransformPlan(800, 600)

    def test_repeatable(self):
        assert plan_transform(8, GEOMETRY) == plan_transform(8, GEOMETRY)


class TestAffineCoefficients:
    def test_identity(self):
        assert TransformPlan(10, 20).affine_coefficients() == (1.0, 0.0, 0, -0.0, 1.0, 0)

    def test_rotate_90_cw_maps_canvas_to_source(self):
        # Canvas (u, v) reads the drawn image at (v, height - u)
        a, b, c, d, e, f = plan_transform(6, GEOMETRY).affine_coefficients()
        u, v = 100.5, 700.5
        assert (a * u + b * v + c, d * u + e * v + f) == (700.5, 499.5)

    def test_rotate_180_maps_canvas_to_source(self):
        a, b, c, d, e, f = plan_transform(3, GEOMETRY).affine_coefficients()
        u, v = 0.5, 0.5
        assert (a * u + b * v + c, d * u + e * v + f) == (799.5, 599.5)

    def test_rotate_90_ccw_maps_canvas_to_source(self):
        # Canvas (u, v) reads the drawn image at (width - v, u)
        a, b, c, d, e, f = plan_transform(8, GEOMETRY).affine_coefficients()
        u, v = 0.5, 0.5
        assert (a * u + b * v + c, d * u + e * v + f) == (799.5, 0.5)

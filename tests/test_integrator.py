"""Tests for the Whitted integrator.

This module tests the shading engine including:
- Render target setup and management
- Depth limit and background color
- Direct lighting with the ambient floor and hard shadows
- Mirror reflection
- Refraction with both blend modes and total internal reflection

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run, so module-level
imports of modules containing ti.field() declarations would fail.
"""

import math

import pytest

GRAY = (0.5, 0.5, 0.5)

# Floor triangle in the y = 0 plane, normal +Y
FLOOR = ((-10.0, 0.0, -10.0), (0.0, 0.0, 10.0), (10.0, 0.0, -10.0))


def _scene(*primitives, light=(0.0, 0.0, -5.0)):
    from whitted.scene.graph import Group, Scene

    root = Group()
    for primitive in primitives:
        root.add(primitive)
    return Scene(root=root, light=light)


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_render_target_sets_dimensions(self):
        from whitted.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(64, 48)

        assert get_image_dimensions() == (64, 48)

    def test_setup_render_target_rejects_oversized(self):
        from whitted.core.integrator import setup_render_target

        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(4096, 100)

        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(100, 4096)

    def test_image_shape_and_clear(self):
        from whitted.core.integrator import get_image_numpy, setup_render_target

        setup_render_target(8, 4)
        image = get_image_numpy()

        assert image.shape == (4, 8, 3)
        assert image.max() == 0.0

    def test_setup_light(self):
        from whitted.core.integrator import get_light_position, setup_light

        setup_light((1.0, 2.0, 3.0))

        assert get_light_position() == pytest.approx((1.0, 2.0, 3.0))


class TestTraceRayBasics:
    """Tests for depth limits and misses."""

    def test_depth_zero_is_black(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere

        scene = _scene(Sphere((0, 0, 0), 1.0, Material(color=GRAY)))

        assert trace_ray(scene, (0, 0, -5), (0, 0, 1), depth=0) == (0.0, 0.0, 0.0)

    def test_miss_is_black(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere

        scene = _scene(Sphere((0, 0, 0), 1.0, Material(color=GRAY)))

        assert trace_ray(scene, (0, 0, -5), (0, 1, 0), depth=3) == (0.0, 0.0, 0.0)

    def test_direction_is_normalized(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere

        scene = _scene(Sphere((0, 0, 0), 1.0, Material(color=GRAY)))

        a = trace_ray(scene, (0, 0, -5), (0, 0, 1), depth=1)
        b = trace_ray(scene, (0, 0, -5), (0, 0, 40), depth=1)
        assert a == pytest.approx(b, abs=1e-6)


class TestDirectLighting:
    """Tests for the local shading term."""

    def test_light_along_normal_gives_full_color(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere

        scene = _scene(Sphere((0, 0, 0), 1.0, Material(color=GRAY)), light=(0, 0, -5))

        color = trace_ray(scene, (0, 0, -5), (0, 0, 1), depth=1)

        # 0.5 * (0.3 + 0.7 * 1)
        assert color == pytest.approx(GRAY, abs=1e-5)

    def test_grazing_light_gives_ambient_floor(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere

        scene = _scene(Sphere((0, 0, 0), 1.0, Material(color=GRAY)), light=(0, 5, -1))

        color = trace_ray(scene, (0, 0, -5), (0, 0, 1), depth=1)

        assert color == pytest.approx((0.15, 0.15, 0.15), abs=1e-5)

    def test_shadowed_point_gets_ambient_only(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere, Triangle

        light = (0.0, 4.0, 0.0)
        floor = Triangle(*FLOOR, Material(color=GRAY))
        lit_scene = _scene(floor, light=light)

        lit = trace_ray(lit_scene, (0.5, 1.0, 0.0), (0, -1, 0), depth=1)

        n_dot_l = 4.0 / math.hypot(0.5, 4.0)
        assert lit == pytest.approx([0.5 * (0.3 + 0.7 * n_dot_l)] * 3, abs=1e-5)

        # A small sphere halfway along the shadow ray
        occluder = Sphere((0.25, 2.0, 0.0), 0.3, Material(color=(1.0, 0.0, 0.0)))
        shadow_scene = _scene(Triangle(*FLOOR, Material(color=GRAY)), occluder, light=light)

        shadowed = trace_ray(shadow_scene, (0.5, 1.0, 0.0), (0, -1, 0), depth=1)

        assert shadowed == pytest.approx((0.1, 0.1, 0.1), abs=1e-5)
        assert sum(lit) > sum(shadowed)

    def test_occluder_beyond_light_casts_no_shadow(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.graph import Material, Sphere, Triangle

        light = (0.0, 4.0, 0.0)
        beyond = Sphere((-0.5, 8.0, 0.0), 0.5, Material(color=(1.0, 0.0, 0.0)))
        with_beyond = _scene(Triangle(*FLOOR, Material(color=GRAY)), beyond, light=light)
        plain = _scene(Triangle(*FLOOR, Material(color=GRAY)), light=light)

        a = trace_ray(with_beyond, (0.5, 1.0, 0.0), (0, -1, 0), depth=1)
        b = trace_ray(plain, (0.5, 1.0, 0.0), (0, -1, 0), depth=1)

        assert a == pytest.approx(b, abs=1e-6)


class TestReflection:
    """Tests for the mirror-reflection term."""

    def _mirror_scene(self):
        from whitted.scene.graph import Material, Sphere, Triangle

        mirror = Triangle(*FLOOR, Material(color=(0.0, 0.0, 0.0), reflectivity=1.0))
        ball = Sphere((0.5, 3.0, 0.0), 0.5, Material(color=(0.4, 0.4, 0.4)))
        return _scene(mirror, ball, light=(0.5, 1.5, 0.0))

    def test_black_mirror_shows_reflected_object(self):
        from whitted.core.integrator import trace_ray

        color = trace_ray(self._mirror_scene(), (0.5, 1.0, 0.0), (0, -1, 0), depth=2)

        # The ball is hit at its bottom, lit head-on
        assert color == pytest.approx((0.4, 0.4, 0.4), abs=1e-5)

    def test_depth_one_stops_before_reflection(self):
        from whitted.core.integrator import trace_ray

        color = trace_ray(self._mirror_scene(), (0.5, 1.0, 0.0), (0, -1, 0), depth=1)

        assert color == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)


class TestRefraction:
    """Tests for the refraction term and both blend modes."""

    def _glass_scene(self):
        from whitted.scene.graph import Material, Triangle

        # A thin pane at z = 0 with index 1 (no bending) in front of a wall
        pane = Triangle(
            (-10, -10, 0),
            (10, -10, 0),
            (0, 10, 0),
            Material(color=(0.2, 0.2, 0.2), transparency=0.5, refraction_index=1.0),
        )
        wall = Triangle((-10, -10, 2), (10, -10, 2), (0, 10, 2), Material(color=GRAY))
        return _scene(pane, wall, light=(0.0, 0.0, -5.0))

    def test_additive_blend(self):
        from whitted.core.config import RefractionBlend
        from whitted.core.integrator import trace_ray

        color = trace_ray(
            self._glass_scene(), (0, 0, -5), (0, 0, 1), depth=2, blend=RefractionBlend.ADDITIVE
        )

        # (2 - k) * 0.2 + k * (wall in the pane's shadow: 0.2 * 0.5)
        assert color == pytest.approx((0.35, 0.35, 0.35), abs=1e-5)

    def test_linear_blend(self):
        from whitted.core.config import RefractionBlend
        from whitted.core.integrator import trace_ray

        color = trace_ray(
            self._glass_scene(), (0, 0, -5), (0, 0, 1), depth=2, blend=RefractionBlend.LINEAR
        )

        # (1 - k) * 0.2 + k * 0.1
        assert color == pytest.approx((0.15, 0.15, 0.15), abs=1e-5)

    def test_surface_blend_applies_at_last_level(self):
        """With no depth left for the refracted ray, only the local blend remains."""
        from whitted.core.integrator import trace_ray

        color = trace_ray(self._glass_scene(), (0, 0, -5), (0, 0, 1), depth=1)

        assert color == pytest.approx((0.3, 0.3, 0.3), abs=1e-5)

    def _glass_ball(self, transparency):
        from whitted.scene.graph import Material, Sphere

        material = Material(color=GRAY, transparency=transparency, refraction_index=0.5)
        return _scene(Sphere((0, 0, 0), 1.0, material), light=(0.0, 0.0, -5.0))

    def test_total_internal_reflection_skips_refraction(self):
        """A grazing ray into a medium with index 0.5 cannot refract."""
        from whitted.core.integrator import trace_ray

        glass = trace_ray(self._glass_ball(0.9), (0.95, 0, -5), (0, 0, 1), depth=3)
        opaque = trace_ray(self._glass_ball(0.0), (0.95, 0, -5), (0, 0, 1), depth=3)

        assert glass == pytest.approx(opaque, abs=1e-6)

    def test_head_on_ray_refracts(self):
        from whitted.core.integrator import trace_ray

        glass = trace_ray(self._glass_ball(0.9), (0, 0, -5), (0, 0, 1), depth=3)

        # (2 - 0.9) * local; the refracted ray starts inside and escapes
        assert glass == pytest.approx((0.55, 0.55, 0.55), abs=1e-5)


class TestRenderRows:
    """Tests for the band render kernel."""

    def test_render_rows_requires_target(self):
        from whitted.core import integrator

        integrator._render_target_initialized[None] = 0
        with pytest.raises(RuntimeError, match="not set up"):
            integrator.render_rows(0, 1, 1, 1)

    def test_rows_outside_band_stay_black(self):
        from whitted.core.integrator import (
            get_image_numpy,
            render_rows,
            setup_render_target,
            setup_scene,
        )
        from whitted.scene.cornell_box import create_reference_scene

        setup_render_target(8, 8)
        setup_scene(create_reference_scene(include_objects=False))
        render_rows(2, 4, 1, 1)
        image = get_image_numpy()

        assert image[:2].max() == 0.0
        assert image[4:].max() == 0.0
        assert image[2:4].max(axis=2).min() > 0.0

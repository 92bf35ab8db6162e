"""Unit tests for the metal material module.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Absorption when the reflection points into the surface
- Fuzzy reflection stays within the fuzz sphere
- Material registry operations and fuzz clamping
"""

import math

import pytest
import taichi as ti

NUM_SAMPLES = 500


def _scatter_once(direction, normal, fuzz):
    """Scatter one ray off a metal at the origin; return (did_scatter, attenuation, dir)."""
    from src.pathtracer.core.ray import Ray
    from src.pathtracer.core.vector import vec3
    from src.pathtracer.materials.metal import scatter_metal
    from src.pathtracer.scene.hittable import HitRecord

    did_scatter = ti.field(dtype=ti.i32, shape=())
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
    scattered_dir = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(d: vec3, n: vec3, f: ti.f32):
        ray_in = Ray(origin=vec3(0.0, 0.0, 0.0) - d, direction=d)
        rec = HitRecord(
            hit=1,
            t=1.0,
            point=vec3(0.0, 0.0, 0.0),
            normal=n,
            front_face=1,
            material_id=0,
        )
        s, a, scattered = scatter_metal(vec3(0.8, 0.6, 0.2), f, ray_in, rec)
        did_scatter[None] = s
        attenuation[None] = a
        scattered_dir[None] = scattered.direction

    test_kernel(vec3(*direction), vec3(*normal), fuzz)
    a = attenuation[None]
    r = scattered_dir[None]
    return (
        did_scatter[None],
        (float(a[0]), float(a[1]), float(a[2])),
        (float(r[0]), float(r[1]), float(r[2])),
    )


class TestMetalScatter:
    """Tests for metal scattering."""

    def test_mirror_reflection(self):
        """Test a perfect mirror reflects about the normal, normalized."""
        did_scatter, attenuation, direction = _scatter_once((1.0, -1.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert did_scatter == 1
        assert attenuation == pytest.approx((0.8, 0.6, 0.2), abs=1e-6)
        s = 1.0 / math.sqrt(2.0)
        assert direction == pytest.approx((s, s, 0.0), abs=1e-5)

    def test_head_on_reflection(self):
        """Test a ray hitting head on bounces straight back."""
        did_scatter, _, direction = _scatter_once((0.0, 0.0, -2.0), (0.0, 0.0, 1.0), 0.0)
        assert did_scatter == 1
        assert direction == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_reflection_into_surface_is_absorbed(self):
        """Test a reflection pointing below the surface is absorbed."""
        did_scatter, _, _ = _scatter_once((0.0, 1.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert did_scatter == 0

    def test_fuzz_stays_within_fuzz_sphere(self):
        """Test fuzzed directions lie within fuzz of the mirror direction."""
        from src.pathtracer.core.ray import Ray
        from src.pathtracer.core.vector import length, vec3
        from src.pathtracer.materials.metal import scatter_metal
        from src.pathtracer.scene.hittable import HitRecord

        offsets = ti.field(dtype=ti.f32, shape=NUM_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(NUM_SAMPLES):
                ray_in = Ray(origin=vec3(0.0, 0.0, 1.0), direction=vec3(0.0, 0.0, -1.0))
                rec = HitRecord(
                    hit=1,
                    t=1.0,
                    point=vec3(0.0, 0.0, 0.0),
                    normal=vec3(0.0, 0.0, 1.0),
                    front_face=1,
                    material_id=0,
                )
                _, _, scattered = scatter_metal(vec3(1.0, 1.0, 1.0), 0.3, ray_in, rec)
                offsets[i] = length(scattered.direction - vec3(0.0, 0.0, 1.0))

        test_kernel()
        values = offsets.to_numpy()
        assert values.max() <= 0.3 + 1e-5
        assert values.min() >= 0.3 - 1e-5


class TestMetalRegistry:
    """Tests for metal material registry."""

    def test_add_material(self):
        """Test adding a metal material stores albedo and fuzz."""
        from src.pathtracer.materials.metal import (
            add_metal_material,
            get_metal_material_count,
            metal_albedos,
            metal_fuzzes,
        )

        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
        assert idx == 0
        assert get_metal_material_count() == 1
        assert abs(metal_albedos[idx][0] - 0.8) < 1e-6
        assert abs(metal_fuzzes[idx] - 0.3) < 1e-6

    @pytest.mark.parametrize(("fuzz", "expected"), [(2.0, 1.0), (-0.5, 0.0), (0.5, 0.5)])
    def test_fuzz_is_clamped(self, fuzz, expected):
        """Test fuzz is clamped into [0, 1]."""
        from src.pathtracer.materials.metal import add_metal_material, metal_fuzzes

        idx = add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)
        assert abs(metal_fuzzes[idx] - expected) < 1e-6

    def test_clear_materials(self):
        """Test clearing the registry."""
        from src.pathtracer.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5))
        clear_metal_materials()
        assert get_metal_material_count() == 0

    def test_albedo_outside_unit_range_rejected(self):
        """Test an albedo component above 1 is rejected."""
        from src.pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="outside"):
            add_metal_material((1.2, 0.5, 0.5))

"""Unit tests for the dielectric material module.

Tests cover:
- Index ratio on entering and leaving the material
- Total internal reflection detection
- Scatter: white attenuation, reflect/refract split at normal incidence
- Material registry operations and validation
"""

import pytest
import taichi as ti

NUM_SAMPLES = 4000


class TestIndexRatio:
    """Tests for the effective ratio of refractive indices."""

    def test_front_face_inverts_index(self):
        """Test entering the material uses 1 / index, leaving uses the index."""
        from src.pathtracer.materials.dielectric import effective_index_ratio

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = effective_index_ratio(1.5, 1)
            result[1] = effective_index_ratio(1.5, 0)

        test_kernel()
        assert abs(result[0] - 1.0 / 1.5) < 1e-6
        assert abs(result[1] - 1.5) < 1e-6


class TestTotalInternalReflection:
    """Tests for cannot_refract."""

    def test_grazing_exit_cannot_refract(self):
        """Test leaving glass at a steep angle is total internal reflection."""
        from src.pathtracer.core.vector import vec3
        from src.pathtracer.materials.dielectric import cannot_refract

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            # sin(theta) = 0.8: 1.5 * 0.8 > 1 leaving, 0.8 / 1.5 < 1 entering
            direction = vec3(0.8, -0.6, 0.0)
            result[0] = cannot_refract(1.5, direction, normal)
            result[1] = cannot_refract(1.0 / 1.5, direction, normal)

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0


class TestDielectricScatter:
    """Tests for dielectric scattering."""

    def test_total_internal_reflection_reflects(self):
        """Test a ray that cannot refract is mirrored with white attenuation."""
        from src.pathtracer.core.ray import Ray
        from src.pathtracer.core.vector import vec3
        from src.pathtracer.materials.dielectric import scatter_dielectric
        from src.pathtracer.scene.hittable import HitRecord

        did_scatter = ti.field(dtype=ti.i32, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray_in = Ray(origin=vec3(-0.8, 0.6, 0.0), direction=vec3(0.8, -0.6, 0.0))
            # Leaving the glass: back face, normal flipped against the ray
            rec = HitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                front_face=0,
                material_id=0,
            )
            s, a, scattered = scatter_dielectric(1.5, ray_in, rec)
            did_scatter[None] = s
            attenuation[None] = a
            direction[None] = scattered.direction

        test_kernel()
        assert did_scatter[None] == 1
        a = attenuation[None]
        assert abs(a[0] - 1.0) < 1e-6 and abs(a[1] - 1.0) < 1e-6 and abs(a[2] - 1.0) < 1e-6
        d = direction[None]
        assert abs(d[0] - 0.8) < 1e-5
        assert abs(d[1] - 0.6) < 1e-5
        assert abs(d[2]) < 1e-6

    def test_normal_incidence_mostly_refracts(self):
        """Test head-on rays reflect with the Schlick probability r0 = 0.04."""
        from src.pathtracer.core.ray import Ray
        from src.pathtracer.core.vector import vec3
        from src.pathtracer.materials.dielectric import scatter_dielectric
        from src.pathtracer.scene.hittable import HitRecord

        directions = ti.Vector.field(3, dtype=ti.f32, shape=NUM_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(NUM_SAMPLES):
                ray_in = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(0.0, -1.0, 0.0))
                rec = HitRecord(
                    hit=1,
                    t=1.0,
                    point=vec3(0.0, 0.0, 0.0),
                    normal=vec3(0.0, 1.0, 0.0),
                    front_face=1,
                    material_id=0,
                )
                _, _, scattered = scatter_dielectric(1.5, ray_in, rec)
                directions[i] = scattered.direction

        test_kernel()
        d = directions.to_numpy()
        # Every ray goes straight through or straight back
        assert abs(d[:, 0]).max() < 1e-5
        assert abs(d[:, 2]).max() < 1e-5
        assert (abs(abs(d[:, 1]) - 1.0) < 1e-5).all()

        reflected_fraction = (d[:, 1] > 0.0).mean()
        assert 0.01 < reflected_fraction < 0.08

    def test_oblique_entry_bends_toward_normal(self):
        """Test refracted rays entering glass bend toward the normal."""
        from src.pathtracer.core.ray import Ray
        from src.pathtracer.core.vector import vec3
        from src.pathtracer.materials.dielectric import scatter_dielectric
        from src.pathtracer.scene.hittable import HitRecord

        directions = ti.Vector.field(3, dtype=ti.f32, shape=NUM_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(NUM_SAMPLES):
                ray_in = Ray(origin=vec3(-0.6, 0.8, 0.0), direction=vec3(0.6, -0.8, 0.0))
                rec = HitRecord(
                    hit=1,
                    t=1.0,
                    point=vec3(0.0, 0.0, 0.0),
                    normal=vec3(0.0, 1.0, 0.0),
                    front_face=1,
                    material_id=0,
                )
                _, _, scattered = scatter_dielectric(1.5, ray_in, rec)
                directions[i] = scattered.direction

        test_kernel()
        d = directions.to_numpy()
        refracted = d[d[:, 1] < 0.0]
        assert len(refracted) > NUM_SAMPLES // 2
        # sin(theta_out) = sin(theta_in) / 1.5 = 0.4
        sines = refracted[:, 0] / ((refracted**2).sum(axis=1) ** 0.5)
        assert abs(sines - 0.4).max() < 1e-4


class TestDielectricRegistry:
    """Tests for dielectric material registry."""

    def test_add_material(self):
        """Test adding a dielectric material."""
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            dielectric_indices,
            get_dielectric_material_count,
        )

        idx = add_dielectric_material(1.33)
        assert idx == 0
        assert get_dielectric_material_count() == 1
        assert abs(dielectric_indices[idx] - 1.33) < 1e-6

    def test_default_is_glass(self):
        """Test the default refractive index is 1.5."""
        from src.pathtracer.materials.dielectric import add_dielectric_material, dielectric_indices

        idx = add_dielectric_material()
        assert abs(dielectric_indices[idx] - 1.5) < 1e-6

    def test_index_below_one_allowed(self):
        """Test a ratio below 1 (a bubble of thinner medium) is accepted."""
        from src.pathtracer.materials.dielectric import add_dielectric_material

        assert add_dielectric_material(1.0 / 1.5) == 0

    @pytest.mark.parametrize("refraction_index", [0.0, -1.5])
    def test_non_positive_index_rejected(self, refraction_index):
        """Test a non-positive refractive index is rejected."""
        from src.pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="positive"):
            add_dielectric_material(refraction_index)

    def test_clear_materials(self):
        """Test clearing the registry."""
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            clear_dielectric_materials,
            get_dielectric_material_count,
        )

        add_dielectric_material(1.5)
        clear_dielectric_materials()
        assert get_dielectric_material_count() == 0

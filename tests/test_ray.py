"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- make_ray helper
"""

import taichi as ti


def _as_tuple(v):
    return (float(v[0]), float(v[1]), float(v[2]))


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from src.pathtracer.core.ray import Ray, ray_at
        from src.pathtracer.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from src.pathtracer.core.ray import Ray, ray_at
        from src.pathtracer.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_ray_at_unnormalized_direction(self):
        """Test ray_at scales a non-unit direction by t."""
        from src.pathtracer.core.ray import Ray, ray_at
        from src.pathtracer.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        assert abs(result[None][2] + 3.0) < 1e-6

    def test_ray_at_negative_t(self):
        """Test ray_at handles negative t (behind origin)."""
        from src.pathtracer.core.ray import Ray, ray_at
        from src.pathtracer.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 1.0, 0.0))
            result[None] = ray_at(ray, -2.0)

        test_kernel()
        assert abs(result[None][1] + 2.0) < 1e-6

    def test_make_ray(self):
        """Test make_ray stores origin and direction unchanged."""
        from src.pathtracer.core.ray import make_ray
        from src.pathtracer.core.vector import vec3

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 2.0, 0.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert _as_tuple(origin[None]) == (1.0, 2.0, 3.0)
        assert _as_tuple(direction[None]) == (0.0, 2.0, 0.0)

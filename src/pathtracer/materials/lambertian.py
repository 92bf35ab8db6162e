"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters toward hit normal + a random unit vector. The
endpoint of that sum is uniform on a unit sphere tangent to the surface,
which gives a cosine-weighted distribution of directions around the normal
without building a local frame.

The scattered ray always leaves the surface, tinted by the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered = scatter_lambertian(albedo, ray_in, rec)
"""

import taichi as ti

from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import near_zero, random_unit_vector, vec3
from src.pathtracer.scene.hittable import HitRecord


@ti.func
def scatter_lambertian(albedo: vec3, ray_in: Ray, rec: HitRecord):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray_in: The incoming ray (its direction does not matter here).
        rec: The hit record of the intersection.

    Returns:
        A tuple of (did_scatter, attenuation, scattered) where:
        - did_scatter: Always 1; diffuse surfaces never absorb outright.
        - attenuation: The albedo.
        - scattered: Ray from the hit point along normal + random unit vector.
    """
    scatter_direction = rec.normal + random_unit_vector()

    # The random vector can nearly cancel the normal
    if near_zero(scatter_direction):
        scatter_direction = rec.normal

    scattered = Ray(origin=rec.point, direction=scatter_direction)
    return 1, albedo, scattered


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component should be in [0, 1] for energy conservation.

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(type_index: ti.i32) -> vec3:
    """Get the albedo of a Lambertian material by type-local index."""
    return lambertian_albedos[type_index]

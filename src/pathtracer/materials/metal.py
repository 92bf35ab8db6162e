"""Metal (specular reflective) material implementation.

Metals mirror the incoming direction about the surface normal:

    R = I - 2(I . N)N

Rough metals push the (normalized) mirror direction by a random unit vector
scaled by ``fuzz``. When the perturbed direction ends up below the surface
the ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered = scatter_metal(albedo, fuzz, ray_in, rec)
"""

import taichi as ti

from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import dot, random_unit_vector, reflect, unit_vector, vec3
from src.pathtracer.scene.hittable import HitRecord


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, ray_in: Ray, rec: HitRecord):
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The fuzz radius in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (did_scatter, attenuation, scattered) where:
        - did_scatter: 1 if the reflected ray leaves the surface, 0 if it
          points into the surface and is absorbed.
        - attenuation: The albedo.
        - scattered: Ray from the hit point along the fuzzed reflection.
    """
    reflected = reflect(ray_in.direction, rec.normal)
    reflected = unit_vector(reflected) + fuzz * random_unit_vector()
    scattered = Ray(origin=rec.point, direction=reflected)

    did_scatter = 0
    if dot(reflected, rec.normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, scattered


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        fuzz: The fuzz radius. Clamped to [0, 1].

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

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz radius into [0, 1]."""
    return min(max(fuzz, 0.0), 1.0)


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(type_index: ti.i32) -> vec3:
    """Get the albedo of a metal material by type-local index."""
    return metal_albedos[type_index]


@ti.func
def get_metal_fuzz(type_index: ti.i32) -> ti.f32:
    """Get the fuzz radius of a metal material by type-local index."""
    return metal_fuzzes[type_index]

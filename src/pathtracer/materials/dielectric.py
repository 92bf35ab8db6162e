"""Dielectric (glass/water) material implementation.

Dielectrics split light between reflection and refraction:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when the refracted sine would exceed 1
    - Otherwise reflection with the probability given by Schlick's
      approximation, refraction the rest of the time

A clear dielectric never tints or absorbs: the attenuation is white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered = scatter_dielectric(ior, ray_in, rec)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import dot, reflect, reflectance, refract, unit_vector, vec3
from src.pathtracer.scene.hittable import HitRecord


@ti.func
def effective_index_ratio(refraction_index: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices across the boundary.

    Entering the material (front face) the ratio is 1 / index; leaving it
    the ratio is the index itself.
    """
    ri = refraction_index
    if front_face == 1:
        ri = 1.0 / refraction_index
    return ri


@ti.func
def cannot_refract(ri: ti.f32, unit_direction: vec3, normal: vec3) -> ti.i32:
    """Check for total internal reflection.

    Args:
        ri: Effective ratio of refractive indices.
        unit_direction: The incoming direction (unit length).
        normal: The surface normal facing against the ray.

    Returns:
        1 if Snell's law has no solution and the ray must reflect.
    """
    cos_theta = tm.min(dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ri * sin_theta > 1.0


@ti.func
def scatter_dielectric(refraction_index: ti.f32, ray_in: Ray, rec: HitRecord):
    """Reflect or refract a ray at a dielectric boundary.

    Args:
        refraction_index: Refractive index of the material.
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (did_scatter, attenuation, scattered) where:
        - did_scatter: Always 1; dielectrics never absorb.
        - attenuation: White (1, 1, 1).
        - scattered: The reflected or refracted ray from the hit point.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ri = effective_index_ratio(refraction_index, rec.front_face)

    unit_direction = unit_vector(ray_in.direction)
    cos_theta = tm.min(dot(-unit_direction, rec.normal), 1.0)

    # The random draw only happens when refraction is geometrically possible
    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(ri, unit_direction, rec.normal):
        direction = reflect(unit_direction, rec.normal)
    elif ti.random(ti.f32) < reflectance(cos_theta, ri):
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, ri)

    scattered = Ray(origin=rec.point, direction=direction)
    return 1, attenuation, scattered


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_indices = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(refraction_index: float = 1.5) -> int:
    """Add a dielectric material to the registry.

    Args:
        refraction_index: Refractive index, or ratio over the enclosing
            medium. Default is 1.5 (typical glass). Values below 1 model a
            bubble of a thinner medium, such as air inside water.

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the refractive index is not positive.
    """
    if refraction_index <= 0.0:
        raise ValueError(f"Refractive index must be positive, got {refraction_index}")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_indices[idx] = refraction_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_index(type_index: ti.i32) -> ti.f32:
    """Get the refractive index of a dielectric material by type-local index."""
    return dielectric_indices[type_index]

"""Unified material table and scattering dispatch.

Materials are a closed set of variants. Each variant keeps its parameters
in its own registry; this module maps a scene-wide material id to
(MaterialType, type-local index) so a hit record can refer to its material
by a plain integer, and ``scatter`` dispatches on the type.

Ids that were never registered fall through to the default behavior: the
ray is absorbed.
"""

from enum import IntEnum

import taichi as ti

from src.pathtracer.core.ray import Ray
from src.pathtracer.core.vector import vec3
from src.pathtracer.materials.dielectric import get_dielectric_index, scatter_dielectric
from src.pathtracer.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from src.pathtracer.materials.metal import get_metal_albedo, get_metal_fuzz, scatter_metal
from src.pathtracer.scene.hittable import HitRecord


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch to determine which scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# material_types[i] stores the MaterialType for material id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material id i
# (e.g., if material id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_table() -> None:
    """Forget every material id."""
    num_materials[None] = 0


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material id to a registered material.

    Args:
        material_type: Which variant the material is.
        type_index: Its index in the variant's own registry.

    Returns:
        The new material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_table_size() -> int:
    """Get the number of registered material ids."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a material id.

    Returns:
        The MaterialType as an integer, or -1 for unregistered ids.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a material id, or -1 if unregistered."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter(material_id: ti.i32, ray_in: Ray, rec: HitRecord):
    """Scatter a ray off the material of a hit.

    Args:
        material_id: The unified material id from the hit record.
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A tuple of (did_scatter, attenuation, scattered) where:
        - did_scatter: 1 if a scattered ray was produced, 0 if absorbed.
        - attenuation: The color factor for this bounce.
        - scattered: The outgoing ray (meaningless when absorbed).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    # Default: absorbed
    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered = Ray(origin=rec.point, direction=rec.normal)

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        did_scatter, attenuation, scattered = scatter_lambertian(albedo, ray_in, rec)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        did_scatter, attenuation, scattered = scatter_metal(albedo, fuzz, ray_in, rec)

    elif mat_type == int(MaterialType.DIELECTRIC):
        refraction_index = get_dielectric_index(type_index)
        did_scatter, attenuation, scattered = scatter_dielectric(refraction_index, ray_in, rec)

    return did_scatter, attenuation, scattered

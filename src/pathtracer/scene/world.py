"""The world: a composite of every surface in the scene.

Surfaces are stored in Taichi fields (structure of arrays) together with
the unified material id of each. ``hit_world`` applies the intersection
contract across all of them: while scanning it narrows ``t_max`` to the
closest hit found so far, so the result is the overall nearest hit
regardless of insertion order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.world import add_sphere, clear_world, hit_world
    >>> clear_world()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use hit_world within a Taichi kernel
"""

import taichi as ti

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import Sphere, hit_sphere
from src.pathtracer.scene.hittable import HitRecord, make_miss_record

# Maximum number of spheres supported in the world
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove every surface from the world.

    Resets the count; stale field data is overwritten by later additions.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the world.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere.
        material_id: The unified material id to associate with the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the world."""
    return int(num_spheres[None])


@ti.func
def _with_material(rec: HitRecord, material_id: ti.i32) -> HitRecord:
    """Copy of a surface hit record stamped with the surface's material."""
    return HitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def hit_world(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the nearest intersection of a ray with the world.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound on t.
        t_max: Inclusive upper bound on t.

    Returns:
        The HitRecord of the closest hit in (t_min, t_max], with the
        material id of the surface that was hit, or a miss record.
    """
    closest_so_far = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = _with_material(rec, sphere_material_ids[i])

    return result

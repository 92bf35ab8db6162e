"""Hit records and the intersection contract shared by all surfaces.

Every surface exposes a Taichi function of the form::

    hit_<surface>(ray, surface, t_min, t_max) -> HitRecord

which reports the nearest intersection with ``t_min < t <= t_max``, or a
record with ``hit == 0``. The stored normal always faces against the
incoming ray; ``set_face_normal`` does the orientation.

The material is referenced by id: the record does not own it, and every
hit on the same surface points at the same registered material.
"""

import taichi as ti

from src.pathtracer.core.vector import dot, vec3

# Material id carried by records that did not hit anything
NO_MATERIAL = -1


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected a surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, oriented against the incoming ray.
            Only valid if hit == 1.
        front_face: 1 if the ray arrived from the side the geometric
            normal points to, 0 if it came from inside the surface.
        material_id: Unified id of the surface's material, or -1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def set_face_normal(direction: vec3, outward_normal: vec3):
    """Orient a surface normal against the incoming ray.

    Args:
        direction: The incoming ray direction.
        outward_normal: The geometric normal, assumed unit length.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray hits the
        outside; otherwise the returned normal is the flipped outward one.
    """
    front_face = 1
    normal = outward_normal
    if dot(direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def make_miss_record() -> HitRecord:
    """A HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=NO_MATERIAL,
    )

"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection is found by solving

    |origin + t * direction - center|^2 = radius^2

for t, a quadratic a*t^2 - 2*h*t + c = 0 with

    oc = center - origin
    a  = direction . direction
    h  = direction . oc
    c  = oc . oc - radius^2

The near root (h - sqrt(h^2 - a*c)) / a is tried first, then the far root.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere, vec3
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from src.pathtracer.core.ray import Ray, ray_at
from src.pathtracer.core.vector import dot, length_squared, vec3
from src.pathtracer.scene.hittable import HitRecord, NO_MATERIAL, set_face_normal


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def _in_interval(t: ti.f32, t_min: ti.f32, t_max: ti.f32) -> ti.i32:
    return t_min < t and t <= t_max


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test; its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Inclusive upper bound on t.

    Returns:
        A HitRecord for the nearest root in (t_min, t_max]. The material
        id is left unset (-1); the world fills it in.
    """
    oc = sphere.center - ray.origin
    a = length_squared(ray.direction)
    h = dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        root = (h - sqrtd) / a
        valid = _in_interval(root, t_min, t_max)
        if not valid:
            root = (h + sqrtd) / a
            valid = _in_interval(root, t_min, t_max)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = set_face_normal(ray.direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=NO_MATERIAL,
    )

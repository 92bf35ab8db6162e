"""Vector algebra and random sampling utilities for the path tracer.

Points and free vectors share one type, ``taichi.math.vec3``; the arithmetic
operators (component-wise ``+ - * /``, scalar scaling, negation) come from
Taichi. This module adds the geometric helpers and the rejection-sampling
primitives the materials and the camera are built on.

All functions are ``@ti.func`` and must be called from Taichi scope. Random
draws come from Taichi's generator, which ``ti.init(random_seed=...)`` seeds.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=7)
    >>> from src.pathtracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> mirror()  # [1., 1., 0.]
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length of a vector."""
    return v.x * v.x + v.y * v.y + v.z * v.z


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Divides by the length without guarding zero vectors; callers that can
    produce degenerate directions check ``near_zero`` first.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Cross product a x b."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Returns:
        1 if every component's magnitude is below 1e-8, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror v about the unit normal n: v - 2 (v . n) n."""
    return v - 2.0 * dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The result is split into the components perpendicular and parallel to
    the normal. It is not normalized.

    Args:
        uv: The incident direction (unit length).
        n: The surface normal (unit length, facing against uv).
        etai_over_etat: Ratio of the incident to the transmitted index.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f32, refraction_index: ti.f32) -> ti.f32:
    """Fresnel reflectance by Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        refraction_index: Ratio of refractive indices at the boundary.

    Returns:
        The probability of reflection, in [0, 1].
    """
    r0 = (1.0 - refraction_index) / (1.0 + refraction_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_range(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Uniform random real in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f32)


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector, uniformly distributed on the sphere.

    Rejection-samples the cube [-1, 1]^3, keeping points inside the unit
    ball but not too close to the center, then scales the accepted point by
    its own length.
    """
    result = vec3(0.0, 0.0, 0.0)
    while True:
        p = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), random_range(-1.0, 1.0))
        lensq = length_squared(p)
        if 1e-160 < lensq and lensq <= 1.0:
            result = p / ti.sqrt(lensq)
            break
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Random point (x, y, 0) strictly inside the unit disk."""
    result = vec3(0.0, 0.0, 0.0)
    while True:
        p = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
        if length_squared(p) < 1.0:
            result = p
            break
    return result


@ti.func
def random_on_hemisphere(normal: vec3) -> vec3:
    """Random unit vector in the hemisphere around normal.

    A sample from the whole sphere is negated when it points away from the
    normal, so the dot product with the normal is never negative.
    """
    on_unit_sphere = random_unit_vector()
    result = on_unit_sphere
    if dot(on_unit_sphere, normal) <= 0.0:
        result = -on_unit_sphere
    return result


@ti.func
def sample_square() -> vec3:
    """Random offset (x, y, 0) in the square [-0.5, 0.5)^2, for pixel jitter."""
    return vec3(ti.random(ti.f32) - 0.5, ti.random(ti.f32) - 0.5, 0.0)

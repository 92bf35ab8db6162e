"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vector: Vector helpers, reflection/refraction and random sampling
    ray: Ray data structure
    integrator: Ray color evaluation and the scanline render loop
    renderer: Host-side facade tying camera, render target and output together

All compute-intensive operations are Taichi functions and kernels.
"""

from .ray import Ray, make_ray, ray_at
from .vector import (
    NEAR_ZERO_EPSILON,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    random_in_unit_disk,
    random_on_hemisphere,
    random_range,
    random_unit_vector,
    reflect,
    reflectance,
    refract,
    sample_square,
    unit_vector,
    vec3,
)

# Note: integrator and renderer declare Taichi fields and are NOT imported here.
# Import them directly once ti.init() has run:
#   from src.pathtracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "NEAR_ZERO_EPSILON",
    "length",
    "length_squared",
    "unit_vector",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "reflectance",
    "random_range",
    "random_unit_vector",
    "random_in_unit_disk",
    "random_on_hemisphere",
    "sample_square",
]

"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) returning a
HitRecord for the nearest intersection inside an open-closed t interval.
"""

from .sphere import Sphere, hit_sphere

__all__ = [
    "Sphere",
    "hit_sphere",
]

"""Taichi path tracer in the style of "Ray Tracing in One Weekend".

This package renders scenes of spheres with diffuse, metal and glass
materials by following randomly sampled camera rays, with support for:
- A positionable camera with depth of field
- Lambertian, metal (fuzzy reflection) and dielectric (refraction) materials
- Anti-aliasing by jittered pixel sampling
- Plain-text PPM and PNG output

Subpackages:
    core: Vector helpers, rays, the integrator and the renderer facade
    geometry: Sphere primitive and intersection
    materials: Material models and the material table
    scene: Hit records, the world, the scene manager and built-in scenes
    camera: Camera configuration and ray generation
    output: Image quantization and file writers

Taichi must be initialized (``ti.init``) before importing any module that
declares fields; the command line entry point in ``cli`` does this first.
"""

__version__ = "0.1.0"

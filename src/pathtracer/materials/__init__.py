"""Materials module for light scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick reflectance)
    material: Material types, the unified material table and scatter dispatch

Each material offers a ``scatter_*`` Taichi function returning
(did_scatter, attenuation, scattered_ray), and a registry of parameters
stored in Taichi fields.

Submodules are not imported here: they depend on the scene hit record,
and the scene manager depends on them. Import them directly, e.g.
``from src.pathtracer.materials.material import scatter``.
"""

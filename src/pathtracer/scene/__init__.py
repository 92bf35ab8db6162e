"""Scene module for scene management and hit records.

Components:
    hittable: Hit record structure and face-normal orientation
    world: Sphere storage and the closest-hit query over all of it
    manager: Scene manager coordinating surfaces and materials
    presets: Built-in scenes with matching camera configurations

Scene data lives in Taichi fields using a Structure-of-Arrays layout.
Submodules are imported directly, e.g.
``from src.pathtracer.scene.manager import SceneManager``.
"""

"""Built-in scenes.

Each factory clears the current scene, builds its surfaces and materials,
and returns the scene together with the camera configuration it is meant
to be viewed with.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.presets import create_material_showcase_scene
    >>> scene, camera_config = create_material_showcase_scene()
    >>> scene.get_sphere_count()
    5
"""

from src.pathtracer.camera.camera import CameraConfig
from src.pathtracer.scene.manager import SceneManager

# =============================================================================
# Material Showcase Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.1, 0.2, 0.5)
GLASS_INDEX = 1.5
# Air bubble inside the glass: ratio of air over glass
BUBBLE_INDEX = 1.0 / 1.5
METAL_ALBEDO = (0.8, 0.6, 0.2)
METAL_FUZZ = 1.0


def create_single_sphere_scene() -> tuple[SceneManager, CameraConfig]:
    """Create the smallest non-trivial scene.

    One grey Lambertian sphere straight ahead of a camera at the origin,
    rendered at 2x2 pixels with one sample and one bounce. Every pixel is
    either the sky gradient or black, which makes it a stable regression
    fixture.

    Returns:
        Tuple of (scene, camera_config).
    """
    scene = SceneManager()
    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.0), radius=0.5, albedo=(0.5, 0.5, 0.5))

    camera_config = CameraConfig(
        aspect_ratio=1.0,
        image_width=2,
        samples_per_pixel=1,
        max_depth=1,
        vfov=90.0,
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
    )
    return scene, camera_config


def create_material_showcase_scene() -> tuple[SceneManager, CameraConfig]:
    """Create the three-material scene on a large ground sphere.

    A diffuse sphere in the middle, a hollow glass sphere on the left and a
    fuzzy metal sphere on the right, viewed from above and to the left with
    a shallow depth of field.

    Returns:
        Tuple of (scene, camera_config).
    """
    scene = SceneManager()

    scene.add_lambertian_sphere(center=(0.0, -100.5, -1.0), radius=100.0, albedo=GROUND_ALBEDO)
    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.2), radius=0.5, albedo=CENTER_ALBEDO)

    scene.add_dielectric_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, refraction_index=GLASS_INDEX)
    scene.add_dielectric_sphere(
        center=(-1.0, 0.0, -1.0), radius=0.4, refraction_index=BUBBLE_INDEX
    )

    scene.add_metal_sphere(
        center=(1.0, 0.0, -1.0), radius=0.5, albedo=METAL_ALBEDO, fuzz=METAL_FUZZ
    )

    camera_config = CameraConfig(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
        vfov=20.0,
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=10.0,
        focus_distance=3.4,
    )
    return scene, camera_config


# Scene names accepted on the command line
SCENES = {
    "single": create_single_sphere_scene,
    "showcase": create_material_showcase_scene,
}

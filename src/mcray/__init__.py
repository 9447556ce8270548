"""Taichi-based Monte Carlo ray tracer for scenes of spheres.

This package renders static scenes of analytic spheres with a thin-lens
camera, supporting:
- Diffuse, metal and glass materials
- Depth of field through a finite lens aperture
- Reproducible renders from an explicit per-sample random stream
- PPM and PNG output

Subpackages:
    core: Vector helpers, rays, intervals, sampling, integrator and renderer
    geometry: Sphere intersection
    materials: Scattering laws for each material variant
    scene: Scene storage, intersection and ready-made scenes
    camera: Thin-lens camera with ray generation
    output: Image file writers
"""

__version__ = "0.1.0"

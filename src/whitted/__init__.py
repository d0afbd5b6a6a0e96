"""Taichi-based Whitted ray tracer.

This package renders scenes of spheres and triangles lit by a single point
light, with hard shadows, mirror reflection and refraction, using Taichi
kernels for parallel evaluation.

Subpackages:
    core: Ray math, render configuration, the integrator and the sampler
    geometry: Primitive intersection, affine transforms and loft meshes
    scene: Scene graph, device storage and the reference room scene
    camera: Fixed pinhole camera with stratified primary rays
    preview: PNG export and image comparison
"""

__version__ = "0.1.0"

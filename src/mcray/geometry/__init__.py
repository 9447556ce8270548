"""Geometry module: analytic surfaces and their ray intersection."""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, set_face_normal

__all__ = ["Sphere", "HitRecord", "hit_sphere", "make_sphere", "set_face_normal"]

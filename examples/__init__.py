"""Example editable types and a walkthrough for bindery.

This package demonstrates library usage but is not part of the core API.
"""

from .components import Color, FollowTarget, Light, LightKind

__all__ = [
    "Color",
    "FollowTarget",
    "Light",
    "LightKind",
]

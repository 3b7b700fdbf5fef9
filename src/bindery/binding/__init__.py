"""Reflection binding layer: property views and typed edits on live objects."""

from bindery.binding.binding import ReflectionBinding
from bindery.binding.models import ObjectState, PropertyNode, PropertyView

__all__ = [
    "ReflectionBinding",
    "PropertyView",
    "PropertyNode",
    "ObjectState",
]

"""Core type definitions for bindery."""

from typing import TypeVar

from typing_extensions import TypeAliasType

T = TypeVar("T")

Copy = TypeAliasType("Copy", T, type_params=(T,))
"""Type alias indicating a value is a copy detached from live host state.

When you see `Copy[T]` in a return type, the returned value is a deep copy.
Mutations to this copy do NOT affect the host object. To persist changes,
explicitly write back via `host.store(handle, obj)` or go through
`ReflectionBinding.apply()`.
"""

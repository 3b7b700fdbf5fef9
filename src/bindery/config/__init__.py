"""Configuration module using Pydantic Settings.

Usage:
    from bindery.config import EditorSettings

    settings = EditorSettings(orphan_grace_seconds=5.0)
"""

from bindery.config.settings import EditorSettings

__all__ = [
    "EditorSettings",
]

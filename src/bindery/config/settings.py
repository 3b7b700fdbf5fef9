"""Configuration settings using Pydantic Settings.

Provides typed editor configuration with environment variable support.

Usage:
    from bindery.config import EditorSettings

    # Load from environment variables (BINDERY_*)
    settings = EditorSettings()

    # Or override with explicit values
    settings = EditorSettings(orphan_grace_seconds=5.0)
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EditorSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for an editor session.

    Attributes:
        orphan_grace_seconds: How long an orphaned id survives before it may
            be garbage collected.
        journal_limit: Maximum undo history length (None for unbounded).
        graph_indent: Indentation of saved graph files.

    Environment Variables:
        BINDERY_ORPHAN_GRACE_SECONDS
        BINDERY_JOURNAL_LIMIT
        BINDERY_GRAPH_INDENT
    """

    model_config = SettingsConfigDict(
        env_prefix="BINDERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    orphan_grace_seconds: float = Field(default=30.0, ge=0.0)
    journal_limit: int | None = Field(default=None, ge=1)
    graph_indent: int = Field(default=2, ge=0)

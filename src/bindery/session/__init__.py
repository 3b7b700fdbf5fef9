"""Session state: the editor-lifetime context object and selection."""

from bindery.session.selection import SelectionState
from bindery.session.session import EditorSession, HostBridge

__all__ = [
    "EditorSession",
    "HostBridge",
    "SelectionState",
]

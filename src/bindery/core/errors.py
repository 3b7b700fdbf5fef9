"""Error taxonomy shared by every bindery service.

None of these errors is meant to abort the editor. Callers decide how loudly
to surface them: ``NotBoundError`` usually just means "unavailable", while
``TypeMismatchError`` is reported back to the editing UI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bindery.core.identity import DurableId


class BinderyError(Exception):
    """Base class for all bindery errors."""

    pass


class ApplyError(BinderyError):
    """Raised when an edit cannot be applied to a live object."""

    pass


class NotBoundError(ApplyError):
    """Raised when a durable id has no live handle."""

    def __init__(self, durable_id: DurableId):
        super().__init__(f"{durable_id} is not bound to a live object")
        self.durable_id = durable_id


class TypeMismatchError(ApplyError):
    """Raised when a value's kind disagrees with the field's declared kind."""

    def __init__(self, path: str, expected: str, value: Any):
        super().__init__(
            f"Field '{path}' expects {expected}, got {type(value).__name__}: {value!r}"
        )
        self.path = path
        self.expected = expected
        self.value = value


class InvalidPathError(ApplyError):
    """Raised when a field path is malformed or names no field."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid field path '{path}': {reason}")
        self.path = path
        self.reason = reason


class ConflictError(BinderyError):
    """Raised when a rebind would break the id/handle bijection."""

    pass


class RegistryBusyError(ConflictError):
    """Raised when a rebind is attempted while a save holds the registry."""

    pass


class EmptyHistoryError(BinderyError):
    """Raised by undo when there is nothing left to undo."""

    pass


class NoRedoAvailableError(BinderyError):
    """Raised by redo when the tip is already at the end of the journal."""

    pass


class DecodeError(BinderyError):
    """Raised when persisted data cannot be decoded."""

    pass


class UnknownTypeError(DecodeError, KeyError):
    """Raised when a type tag is not present in the catalog."""

    def __init__(self, type_tag: str):
        super().__init__(f"Type '{type_tag}' is not registered in the catalog")
        self.type_tag = type_tag

    def __str__(self) -> str:
        return str(self.args[0])

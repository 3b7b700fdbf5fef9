"""Change journal: reversible edit history driving undo and redo."""

from bindery.journal.journal import Applier, ChangeJournal
from bindery.journal.models import JournalEntry

__all__ = [
    "ChangeJournal",
    "JournalEntry",
    "Applier",
]

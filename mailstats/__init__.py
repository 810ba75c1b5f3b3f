"""Outlook mail statistics export."""

from .exporter import export_records
from .models import DateWindow, MailRecord, SkipPolicy
from .pipeline import collect, run
from .walker import FolderWalker, TraversalContext

__version__ = "1.0.0"

__all__ = [
    "DateWindow", "FolderWalker", "MailRecord", "SkipPolicy", "TraversalContext",
    "collect", "export_records", "run",
]

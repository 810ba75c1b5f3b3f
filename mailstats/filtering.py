"""Per-item qualification and the identity-based duplicate guard."""

from datetime import datetime
from typing import Dict, Iterator, Optional, Tuple

from .models import DateWindow

MAIL_CLASS_PREFIX = "ipm.note"

WRONG_CLASS = "wrong-class"
NO_TIMESTAMP = "no-timestamp"
BEFORE_START = "before-start-date"


def is_mail_class(message_class: str) -> bool:
    mc = (message_class or "").strip().lower()
    return mc == MAIL_CLASS_PREFIX or mc.startswith(MAIL_CLASS_PREFIX + ".")


def filter_item(message_class: str, sent_on: Optional[datetime],
                window: DateWindow) -> Tuple[bool, Optional[str]]:
    """Return (accepted, reject_reason). Only the window start is checked here."""
    if sent_on is None:
        return False, NO_TIMESTAMP
    if not is_mail_class(message_class):
        return False, WRONG_CLASS
    if sent_on < window.start:
        return False, BEFORE_START
    return True, None


class DedupTracker:
    """At-most-once admission of item identities."""

    def __init__(self):
        self._seen: Dict[str, None] = {}

    def admit(self, identity: str) -> bool:
        if identity in self._seen:
            return False
        self._seen[identity] = None
        return True

    def __contains__(self, identity: str) -> bool:
        return identity in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        return iter(self._seen)

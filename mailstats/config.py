"""Run configuration assembled by the command line."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from .models import DateWindow, SkipPolicy

DEFAULT_PREFIX = "MailStats"
DEFAULT_TEST_LIMIT = 25


@dataclass
class RunOptions:
    mailboxes: List[str]
    window: DateWindow
    output_dir: str = "."
    template: Optional[str] = None
    prefix: str = DEFAULT_PREFIX
    skip_policy: SkipPolicy = field(default_factory=SkipPolicy)
    test_mode: bool = False
    test_limit: int = DEFAULT_TEST_LIMIT
    show_progress: bool = True
    require_running: bool = False


def split_mailboxes(values: Iterable[str]) -> List[str]:
    """Flatten repeated and comma-separated mailbox names, keeping first-seen order."""
    out: List[str] = []
    for raw in values or ():
        for part in (raw or "").split(","):
            name = part.strip()
            if name and name not in out:
                out.append(name)
    return out


def build_window(start: Optional[str], end: Optional[str], years_back: int = 0,
                 months_back: int = 0, now: Optional[datetime] = None) -> DateWindow:
    if start:
        return DateWindow.from_literals(start, end, now=now)
    window = DateWindow.relative(years_back, months_back, now=now)
    if end:
        return DateWindow.from_literals(window.start.strftime("%d-%m-%Y"), end)
    return window

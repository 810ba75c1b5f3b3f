"""Value types shared by the traversal and export stages."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from dateutil.relativedelta import relativedelta

from .errors import InvalidDateFormatError, InvalidDateRangeError
from .helpers import start_of_day, end_of_day

DATE_FORMAT = "%d-%m-%Y"
NO_SUBJECT = "(no subject)"


@dataclass(frozen=True)
class MailRecord:
    sent_on: datetime
    sender: str
    behalf_of: Optional[str]
    subject: str
    mailbox: str
    folder_path: str
    word_count: int
    store_id: str
    entry_id: str
    recipients: str


@dataclass(frozen=True)
class DateWindow:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise InvalidDateRangeError(f"Window end {self.end} is before start {self.start}")

    @classmethod
    def from_literals(cls, start: str, end: Optional[str] = None,
                      now: Optional[datetime] = None) -> "DateWindow":
        sd = start_of_day(parse_date_literal(start).date())
        ed = end_of_day(parse_date_literal(end).date()) if end else (now or datetime.now())
        return cls(sd, ed)

    @classmethod
    def relative(cls, years_back: int = 0, months_back: int = 0,
                 now: Optional[datetime] = None) -> "DateWindow":
        now = now or datetime.now()
        if not years_back and not months_back:
            years_back = 1
        sd = start_of_day((now - relativedelta(years=years_back, months=months_back)).date())
        return cls(sd, now)

    def describe(self) -> str:
        return f"{self.start.strftime('%d-%m-%Y %H:%M')} -> {self.end.strftime('%d-%m-%Y %H:%M')}"


def parse_date_literal(value: str) -> datetime:
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except (ValueError, AttributeError) as e:
        raise InvalidDateFormatError(value) from e


DEFAULT_SKIP = (
    "Deleted", "Junk", "Spam", "Calendar", "Contacts", "Drafts", "Outbox",
    "Sync Issues", "RSS", "Conversation History", "Conflicts",
    "Local Failures", "Server Failures",
)


@dataclass(frozen=True)
class SkipPolicy:
    """Ordered, case-insensitive substrings; a matching folder path is not walked.

    The walker passes the path below the mailbox root, so the mailbox name
    itself is never matched.
    """
    entries: Tuple[str, ...] = DEFAULT_SKIP

    @classmethod
    def of(cls, entries: Iterable[str]) -> "SkipPolicy":
        return cls(tuple(e for e in (s.strip() for s in entries) if e))

    def matches(self, folder_path: str) -> bool:
        path = (folder_path or "").lower()
        return any(e.lower() in path for e in self.entries)

"""Shared pytest fixtures."""

from datetime import datetime

import pytest

from mailstats.models import DateWindow, MailRecord


@pytest.fixture
def window() -> DateWindow:
    return DateWindow(datetime(2025, 1, 1), datetime(2025, 12, 31, 23, 59, 59))


@pytest.fixture
def make_record():
    def _make(entry_id: str = "E1", sent_on: datetime = datetime(2025, 3, 1, 9, 30),
              subject: str = "Status", sender: str = "Alice", **kw) -> MailRecord:
        fields = dict(
            sent_on=sent_on, sender=sender, behalf_of=None, subject=subject,
            mailbox="Team", folder_path="Team/Inbox", word_count=3,
            store_id="store-1", entry_id=entry_id, recipients="Bob",
        )
        fields.update(kw)
        return MailRecord(**fields)
    return _make

"""Tests for building MailRecords from Outlook items."""

from datetime import datetime

import pytest

from fakes import FakeCollection, FakeMail, FakeRecipient
from mailstats.models import NO_SUBJECT
from mailstats.records import build_record, subject_or_default, to_recipients, word_count

SENT = datetime(2025, 4, 2, 14, 5)


class TestWordCount:
    @pytest.mark.parametrize("body, expected", [
        (None, 0),
        ("", 0),
        ("   \r\n\t ", 0),
        ("one", 1),
        ("one  two\tthree\r\nfour", 4),
        ("  leading and trailing  ", 3),
    ])
    def test_counts_whitespace_tokens(self, body, expected) -> None:
        assert word_count(body) == expected


class TestSubject:
    def test_empty_gets_placeholder(self) -> None:
        assert subject_or_default("") == NO_SUBJECT

    def test_none_gets_placeholder(self) -> None:
        assert subject_or_default(None) == "(no subject)"

    def test_passes_through_unchanged(self) -> None:
        assert subject_or_default("  RE: Budget ") == "  RE: Budget "


class TestRecipients:
    def test_only_to_recipients_in_order(self) -> None:
        recips = FakeCollection([
            FakeRecipient("Zoe", 1),
            FakeRecipient("Carl", 2),
            FakeRecipient("Anna", 1),
            FakeRecipient("Bert", 3),
        ])
        assert to_recipients(recips) == "Zoe; Anna"

    def test_no_recipients_is_empty_string(self) -> None:
        assert to_recipients(FakeCollection()) == ""
        assert to_recipients(None) == ""


class TestBuildRecord:
    def test_maps_fields(self) -> None:
        mail = FakeMail("E1", SENT, subject="Plan", sender="Alice", body="a b c d",
                        recipients=[FakeRecipient("Bob"), FakeRecipient("Cc Person", 2)])
        rec = build_record(mail, SENT, "Team", "Team/Inbox", "store-9")
        assert rec.sent_on == SENT
        assert rec.sender == "Alice"
        assert rec.behalf_of is None
        assert rec.subject == "Plan"
        assert rec.mailbox == "Team"
        assert rec.folder_path == "Team/Inbox"
        assert rec.word_count == 4
        assert rec.store_id == "store-9"
        assert rec.entry_id == "E1"
        assert rec.recipients == "Bob"

    def test_delegated_send_keeps_behalf_of(self) -> None:
        mail = FakeMail("E1", SENT, sender="Assistant", behalf="Boss")
        assert build_record(mail, SENT, "Team", "p", "s").behalf_of == "Boss"

    def test_behalf_of_same_as_sender_is_dropped(self) -> None:
        mail = FakeMail("E1", SENT, sender="Alice", behalf="Alice")
        assert build_record(mail, SENT, "Team", "p", "s").behalf_of is None

    def test_missing_subject_and_body(self) -> None:
        mail = FakeMail("E1", SENT, subject=None, body=None)
        rec = build_record(mail, SENT, "Team", "p", "s")
        assert rec.subject == NO_SUBJECT
        assert rec.word_count == 0

    def test_record_is_immutable(self) -> None:
        rec = build_record(FakeMail("E1", SENT), SENT, "Team", "p", "s")
        with pytest.raises(AttributeError):
            rec.subject = "changed"  # type: ignore[misc]

"""Tests for the item filter and the entry id tracker."""

from datetime import datetime

from mailstats.filtering import (BEFORE_START, NO_TIMESTAMP, WRONG_CLASS, DedupTracker,
                                 filter_item, is_mail_class)


class TestIsMailClass:
    def test_plain_note(self) -> None:
        assert is_mail_class("IPM.Note")

    def test_note_subclass(self) -> None:
        assert is_mail_class("IPM.Note.SMIME.MultipartSigned")

    def test_case_insensitive(self) -> None:
        assert is_mail_class("ipm.note")

    def test_meeting_request_rejected(self) -> None:
        assert not is_mail_class("IPM.Schedule.Meeting.Request")

    def test_appointment_and_task_rejected(self) -> None:
        assert not is_mail_class("IPM.Appointment")
        assert not is_mail_class("IPM.Task")

    def test_lookalike_prefix_rejected(self) -> None:
        assert not is_mail_class("IPM.Notebook")

    def test_empty_rejected(self) -> None:
        assert not is_mail_class("")


class TestFilterItem:
    def test_accepts_mail_inside_window(self, window) -> None:
        assert filter_item("IPM.Note", datetime(2025, 6, 1), window) == (True, None)

    def test_accepts_exactly_at_start(self, window) -> None:
        assert filter_item("IPM.Note", window.start, window) == (True, None)

    def test_rejects_before_start(self, window) -> None:
        assert filter_item("IPM.Note", datetime(2024, 12, 31, 23, 59), window) == (False, BEFORE_START)

    def test_rejects_wrong_class(self, window) -> None:
        assert filter_item("IPM.Appointment", datetime(2025, 6, 1), window) == (False, WRONG_CLASS)

    def test_missing_timestamp_rejects_regardless_of_class(self, window) -> None:
        assert filter_item("IPM.Note", None, window) == (False, NO_TIMESTAMP)
        assert filter_item("IPM.Task", None, window) == (False, NO_TIMESTAMP)

    def test_end_of_window_is_not_a_per_item_cutoff(self, window) -> None:
        assert filter_item("IPM.Note", datetime(2026, 2, 1), window) == (True, None)


class TestDedupTracker:
    def test_admits_once(self) -> None:
        tracker = DedupTracker()
        assert tracker.admit("A") is True
        assert tracker.admit("A") is False
        assert tracker.admit("A") is False

    def test_distinct_ids_all_admitted(self) -> None:
        tracker = DedupTracker()
        assert all(tracker.admit(i) for i in ("A", "B", "C"))
        assert len(tracker) == 3

    def test_keeps_insertion_order(self) -> None:
        tracker = DedupTracker()
        for i in ("C", "A", "B", "A"):
            tracker.admit(i)
        assert list(tracker) == ["C", "A", "B"]
        assert "A" in tracker and "Z" not in tracker

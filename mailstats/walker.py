"""Depth-first folder traversal that collects MailRecords.

The walk uses an explicit stack of pending folders instead of recursion. A
single :class:`TraversalContext` is shared by every mailbox of a run: it owns
the identity tracker, the record list, the counters and the stop flag that
test mode raises once enough records have been collected.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Tuple

from .config import DEFAULT_TEST_LIMIT
from .filtering import DedupTracker, filter_item, WRONG_CLASS, NO_TIMESTAMP, BEFORE_START
from .helpers import (safe_str, safe_get, as_naive_datetime, iter_com_collection,
                      to_us_outlook_datetime)
from .models import DateWindow, MailRecord, SkipPolicy
from .records import build_record

logger = logging.getLogger(__name__)


@dataclass
class TraversalContext:
    window: DateWindow
    skip_policy: SkipPolicy = field(default_factory=SkipPolicy)
    test_mode: bool = False
    test_limit: int = DEFAULT_TEST_LIMIT
    tracker: DedupTracker = field(default_factory=DedupTracker)
    records: List[MailRecord] = field(default_factory=list)
    folders_visited: int = 0
    folders_skipped: int = 0
    rejected_class: int = 0
    rejected_no_timestamp: int = 0
    rejected_before_start: int = 0
    identity_duplicates: int = 0
    read_errors: int = 0
    test_admitted: int = 0
    stop_requested: bool = False

    def reject(self, reason: str) -> None:
        if reason == WRONG_CLASS:
            self.rejected_class += 1
        elif reason == NO_TIMESTAMP:
            self.rejected_no_timestamp += 1
        elif reason == BEFORE_START:
            self.rejected_before_start += 1

    def add(self, record: MailRecord) -> None:
        self.records.append(record)
        if self.test_mode:
            self.test_admitted += 1
            if self.test_admitted >= self.test_limit:
                self.stop_requested = True

    def counters(self) -> Dict[str, int]:
        return {
            "Folders scanned": self.folders_visited,
            "Folders skipped": self.folders_skipped,
            "Rejected (not mail)": self.rejected_class,
            "Rejected (no sent date)": self.rejected_no_timestamp,
            "Rejected (before start)": self.rejected_before_start,
            "Duplicate entry ids": self.identity_duplicates,
            "Read errors": self.read_errors,
            "Records collected": len(self.records),
        }


def folder_path_of(folder: Any, parent_path: str) -> str:
    path = safe_str(safe_get(folder, "FolderPath"))
    if path:
        return path
    name = safe_str(safe_get(folder, "Name"))
    return f"{parent_path}/{name}" if parent_path else name


def path_below_root(path: str, root_path: str) -> str:
    if root_path and path.startswith(root_path):
        return path[len(root_path):]
    return path


def restrict_to_horizon(items: Any, window: DateWindow) -> Any:
    # Restrict compares to the minute; the bound is the minute after the window end
    horizon = window.end.replace(second=0, microsecond=0) + timedelta(minutes=1)
    clause = f"[SentOn] < '{to_us_outlook_datetime(horizon)}'"
    try:
        return items.Restrict(clause)
    except Exception as e:
        logger.debug("Restrict failed (%s), scanning unrestricted items", e)
        return items


class FolderWalker:
    def __init__(self, context: TraversalContext, show_progress: bool = True):
        self.context = context
        self.show_progress = show_progress

    def walk(self, root: Any, mailbox: str) -> bool:
        """Walk one mailbox tree. Returns True when the stop flag ended the walk."""
        ctx = self.context
        root_path = folder_path_of(root, "")
        stack: List[Tuple[Any, str]] = [(root, root_path)]
        while stack and not ctx.stop_requested:
            folder, path = stack.pop()
            if ctx.skip_policy.matches(path_below_root(path, root_path)):
                ctx.folders_skipped += 1
                logger.debug("Skipped: %s", path)
                continue
            ctx.folders_visited += 1
            self._scan_items(folder, path, mailbox)
            if ctx.stop_requested:
                break
            try:
                children = list(iter_com_collection(safe_get(folder, "Folders")))
            except Exception as e:
                ctx.read_errors += 1
                logger.warning("Error reading subfolders of %s: %s", path, e)
                continue
            # reversed so the first child is popped first
            for sub in reversed(children):
                stack.append((sub, folder_path_of(sub, path)))
        return ctx.stop_requested

    def _scan_items(self, folder: Any, path: str, mailbox: str) -> None:
        ctx = self.context
        try:
            items = restrict_to_horizon(folder.Items, ctx.window)
            store_id = safe_str(safe_get(folder, "StoreID"))
            it = items.GetFirst()
        except Exception as e:
            ctx.read_errors += 1
            logger.warning("Error reading folder %s: %s", path, e)
            return

        while it is not None and not ctx.stop_requested:
            try:
                self._process_item(it, mailbox, path, store_id)
            except Exception as e:
                ctx.read_errors += 1
                logger.warning("Error reading item in %s: %s", path, e)
            try:
                it = items.GetNext()
            except Exception as e:
                ctx.read_errors += 1
                logger.warning("Item iteration stopped early in %s: %s", path, e)
                it = None

        msg = f"Scanned: {path} (found so far: {len(ctx.records)})"
        if self.show_progress:
            logger.info(msg)
        else:
            logger.debug(msg)

    def _process_item(self, item: Any, mailbox: str, path: str, store_id: str) -> None:
        ctx = self.context
        sent_on = as_naive_datetime(safe_get(item, "SentOn"))
        ok, reason = filter_item(safe_str(safe_get(item, "MessageClass")), sent_on, ctx.window)
        if not ok:
            ctx.reject(reason)
            return
        entry_id = safe_str(safe_get(item, "EntryID"))
        if entry_id in ctx.tracker:
            ctx.identity_duplicates += 1
            return
        # build before admitting: an item that fails to read must not use up its id
        record = build_record(item, sent_on, mailbox, path, store_id)
        ctx.tracker.admit(entry_id)
        ctx.add(record)

"""Run driver: walk every requested mailbox, then export."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import RunOptions
from .errors import MailboxNotFoundError, NoInboxFoundError
from .exporter import check_template, export_records
from .models import MailRecord
from .outlook import resolve_mailbox
from .walker import FolderWalker, TraversalContext

logger = logging.getLogger(__name__)


def collect(options: RunOptions, ns: Any) -> TraversalContext:
    ctx = TraversalContext(
        window=options.window,
        skip_policy=options.skip_policy,
        test_mode=options.test_mode,
        test_limit=options.test_limit,
    )
    walker = FolderWalker(ctx, show_progress=options.show_progress)
    for name in options.mailboxes:
        if ctx.stop_requested:
            logger.info("Test limit of %d reached; remaining mailboxes not scanned.", ctx.test_limit)
            break
        try:
            root = resolve_mailbox(ns, name)
        except (MailboxNotFoundError, NoInboxFoundError) as e:
            logger.warning("%s Skipping.", e)
            continue
        logger.info("Scanning mailbox: %s", name)
        if walker.walk(root, name):
            logger.info("Test limit of %d reached in %s.", ctx.test_limit, name)
    return ctx


def run_info(options: RunOptions, counters: Dict[str, int], now: datetime) -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "Mailboxes": ", ".join(options.mailboxes),
        "Window": options.window.describe(),
        "Skip Policy": ", ".join(options.skip_policy.entries),
        "Test Mode": f"limit {options.test_limit}" if options.test_mode else "off",
        "Exported At": now.strftime("%d-%m-%Y %H:%M:%S"),
    }
    info.update(counters)
    return info


def run(options: RunOptions, ns: Any, now: Optional[datetime] = None) -> Optional[str]:
    """Collect and export. Returns the workbook path, or None when nothing matched."""
    now = now or datetime.now()
    check_template(options.template)
    logger.info("Window: %s", options.window.describe())

    ctx = collect(options, ns)
    counters = ctx.counters()
    for label, value in counters.items():
        logger.info("%s: %d", label, value)
    records: List[MailRecord] = ctx.records

    return export_records(
        records,
        output_dir=options.output_dir,
        template=options.template,
        prefix=options.prefix,
        run_info=run_info(options, counters, now),
        now=now,
    )

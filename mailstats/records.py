"""Turn an admitted Outlook item into a MailRecord."""

from datetime import datetime
from typing import Any, List, Optional

from .helpers import safe_str, safe_get, iter_com_collection
from .models import MailRecord, NO_SUBJECT

OL_TO = 1  # OlMailRecipientType.olTo
RECIPIENT_SEPARATOR = "; "


def word_count(body: Optional[str]) -> int:
    if not body:
        return 0
    return len(body.split())


def subject_or_default(subject: Optional[str]) -> str:
    return subject if subject else NO_SUBJECT


def to_recipients(recipients: Any) -> str:
    names: List[str] = []
    if recipients is None:
        return ""
    for r in iter_com_collection(recipients):
        if safe_get(r, "Type") == OL_TO:
            names.append(safe_str(safe_get(r, "Name")))
    return RECIPIENT_SEPARATOR.join(names)


def behalf_of(sender: str, on_behalf: str) -> Optional[str]:
    if on_behalf and on_behalf != sender:
        return on_behalf
    return None


def build_record(item: Any, sent_on: datetime, mailbox: str, folder_path: str,
                 store_id: str) -> MailRecord:
    """Build the record for an item that already passed the filter and the dedup guard."""
    sender = safe_str(safe_get(item, "SenderName"))
    return MailRecord(
        sent_on=sent_on,
        sender=sender,
        behalf_of=behalf_of(sender, safe_str(safe_get(item, "SentOnBehalfOfName"))),
        subject=subject_or_default(safe_str(safe_get(item, "Subject"))),
        mailbox=mailbox,
        folder_path=folder_path,
        word_count=word_count(safe_str(safe_get(item, "Body"))),
        store_id=store_id,
        entry_id=safe_str(safe_get(item, "EntryID")),
        recipients=to_recipients(safe_get(item, "Recipients")),
    )

"""Outlook (MAPI over COM) connection and mailbox lookup."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator, List

from .errors import OutlookConnectionError, MailboxNotFoundError, NoInboxFoundError
from .helpers import safe_str, safe_get, iter_com_collection

logger = logging.getLogger(__name__)

OL_FOLDER_INBOX = 6
INBOX_NAMES = ("inbox", "posteingang", "boîte de réception", "bandeja de entrada",
               "posta in arrivo", "postvak in")


def connect_outlook(require_running: bool = False, retries: int = 6, delay: float = 0.8):
    try:
        from win32com.client import gencache, Dispatch, GetActiveObject
    except ImportError as e:
        raise OutlookConnectionError("pywin32 is not installed. Install with: pip install pywin32") from e

    if require_running:
        try:
            app = GetActiveObject("Outlook.Application")
        except Exception as e:
            raise OutlookConnectionError("Outlook is not running. Please open Outlook and try again.") from e
    else:
        try:
            app = GetActiveObject("Outlook.Application")
        except Exception:
            try:
                app = gencache.EnsureDispatch("Outlook.Application")
            except Exception:
                try:
                    app = Dispatch("Outlook.Application")
                except Exception as e:
                    raise OutlookConnectionError(f"Failed to connect to Outlook: {e}") from e
    try:
        ns = app.GetNamespace("MAPI")
    except Exception as e:
        raise OutlookConnectionError(f"Failed to open the MAPI namespace: {e}") from e
    for _ in range(retries):
        try:
            ns.Logon("", "", False, False)
            break
        except Exception:
            time.sleep(delay)
    return ns


@contextmanager
def outlook_session(require_running: bool = False) -> Iterator[Any]:
    """COM-initialised MAPI namespace, uninitialised again on every exit path."""
    try:
        import pythoncom
    except ImportError as e:
        raise OutlookConnectionError("pywin32 is not installed. Install with: pip install pywin32") from e

    pythoncom.CoInitialize()
    try:
        logger.info("Connecting to Outlook...")
        yield connect_outlook(require_running=require_running)
    finally:
        pythoncom.CoUninitialize()


def list_mailbox_names(ns) -> List[str]:
    return [safe_str(safe_get(root, "Name")) for root in iter_com_collection(safe_get(ns, "Folders"))]


def find_mailbox_root(ns, name: str):
    for root in iter_com_collection(safe_get(ns, "Folders")):
        if safe_str(safe_get(root, "Name")).lower() == name.lower():
            return root
    raise MailboxNotFoundError(name)


def has_inbox(root) -> bool:
    for sub in iter_com_collection(safe_get(root, "Folders")):
        if safe_str(safe_get(sub, "Name")).strip().lower() in INBOX_NAMES:
            return True
    try:
        return root.Store.GetDefaultFolder(OL_FOLDER_INBOX) is not None
    except Exception:
        return False


def resolve_mailbox(ns, name: str):
    root = find_mailbox_root(ns, name)
    if not has_inbox(root):
        raise NoInboxFoundError(name)
    return root

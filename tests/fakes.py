"""In-memory stand-ins for the Outlook COM objects the walker touches."""

import re
from datetime import datetime
from typing import Any, List, Optional

_RESTRICT_RE = re.compile(r"\[SentOn\] < '([^']+)'")


class FakeCollection:
    def __init__(self, members: Optional[List[Any]] = None):
        self.members = list(members or [])
        self._pos = 0
        self.restrictions: List[str] = []

    @property
    def Count(self) -> int:
        return len(self.members)

    def Item(self, i: int) -> Any:
        return self.members[i - 1]

    def GetFirst(self) -> Any:
        self._pos = 0
        return self.GetNext()

    def GetNext(self) -> Any:
        if self._pos >= len(self.members):
            return None
        it = self.members[self._pos]
        self._pos += 1
        return it

    def Restrict(self, clause: str) -> "FakeCollection":
        self.restrictions.append(clause)
        m = _RESTRICT_RE.search(clause)
        if not m:
            return self
        horizon = datetime.strptime(m.group(1), "%m/%d/%Y %I:%M %p")
        kept = [it for it in self.members
                if not isinstance(getattr(it, "SentOn", None), datetime)
                or it.SentOn.replace(tzinfo=None) < horizon]
        return FakeCollection(kept)


class FakeRecipient:
    def __init__(self, name: str, type_: int = 1):
        self.Name = name
        self.Type = type_


class FakeMail:
    def __init__(self, entry_id: str, sent_on: Optional[datetime], subject: Optional[str] = "Hello",
                 sender: str = "Alice", body: Optional[str] = "one two three",
                 message_class: str = "IPM.Note", behalf: str = "", recipients=None):
        self.EntryID = entry_id
        self.SentOn = sent_on
        self.Subject = subject
        self.SenderName = sender
        self.SentOnBehalfOfName = behalf
        self.Body = body
        self.MessageClass = message_class
        self.Recipients = FakeCollection(recipients or [FakeRecipient("Bob", 1)])


class FakeFolder:
    def __init__(self, name: str, items=None, folders=None, store_id: str = "store-1",
                 path: Optional[str] = None):
        self.Name = name
        self.FolderPath = path or ""
        self.StoreID = store_id
        self.Items = FakeCollection(items)
        self.Folders = FakeCollection(folders)


class BrokenFolder(FakeFolder):
    @property
    def Items(self):
        raise OSError("folder is not accessible")

    @Items.setter
    def Items(self, value):
        pass


class FakeNamespace:
    def __init__(self, roots: List[FakeFolder]):
        self.Folders = FakeCollection(roots)


def mailbox(name: str, *folders: FakeFolder, with_inbox: bool = True) -> FakeFolder:
    children = list(folders)
    if with_inbox and not any(f.Name.lower() == "inbox" for f in children):
        children.insert(0, FakeFolder("Inbox"))
    return FakeFolder(name, folders=children)

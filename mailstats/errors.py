"""Exceptions raised by the mail statistics run."""


class MailStatsError(RuntimeError):
    """Base class for all run errors."""


# ---------- fatal ----------

class OutlookConnectionError(MailStatsError):
    pass


class TemplateNotFoundError(MailStatsError):
    def __init__(self, path: str):
        super().__init__(f"Template workbook not found: {path}")
        self.path = path


class InvalidDateFormatError(MailStatsError):
    def __init__(self, value: str, expected: str = "DD-MM-YYYY"):
        super().__init__(f"Invalid date '{value}'. Use {expected}.")
        self.value = value


class InvalidDateRangeError(MailStatsError, ValueError):
    pass


# ---------- per mailbox, recoverable ----------

class MailboxNotFoundError(MailStatsError):
    def __init__(self, name: str):
        super().__init__(f"Mailbox '{name}' not found.")
        self.name = name


class NoInboxFoundError(MailStatsError):
    def __init__(self, name: str):
        super().__init__(f"Mailbox '{name}' has no inbox folder.")
        self.name = name

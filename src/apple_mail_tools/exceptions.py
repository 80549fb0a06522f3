"""
Exceptions raised while talking to Apple Mail.
"""


class MailError(Exception):
    """Base exception for Mail operations."""

    pass


class AppleScriptError(MailError):
    """AppleScript execution failed."""

    pass


class MessageNotFoundError(MailError):
    """Message could not be located in any account or mailbox."""

    pass

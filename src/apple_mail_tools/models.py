"""
Pydantic models for the records read from Apple Mail.
"""
from typing import Dict, List, NamedTuple, Optional

from pydantic import BaseModel

from apple_mail_tools.applescript import coerce_bool, coerce_int, split_list


class MessageLocation(NamedTuple):
    """The (account, mailbox) pair a message currently lives in."""
    account: str
    mailbox: str


class Account(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    email_addresses: List[str] = []

    @classmethod
    def from_row(cls, row: Dict[str, Optional[str]]) -> "Account":
        return cls(
            name=row["name"],
            type=row["type"],
            email_addresses=split_list(row["email_addresses"]),
        )


class Mailbox(BaseModel):
    name: Optional[str] = None
    unread_count: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Optional[str]]) -> "Mailbox":
        return cls(name=row["name"], unread_count=coerce_int(row["unread_count"]))


class MessageSummary(BaseModel):
    """
    A search hit: enough to show the message and to address it again
    via its message id, account and mailbox.
    """
    message_id: Optional[str] = None
    subject: Optional[str] = None
    sender: Optional[str] = None
    date: Optional[str] = None
    is_read: bool = False
    mailbox: Optional[str] = None
    account: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Optional[str]]) -> "MessageSummary":
        return cls(**{**row, "is_read": coerce_bool(row["is_read"])})


class MessageDetail(BaseModel):
    """A fully read message, including recipients and body."""
    subject: Optional[str] = None
    sender: Optional[str] = None
    to: List[str] = []
    cc: List[str] = []
    date: Optional[str] = None
    is_read: bool = False
    is_flagged: bool = False
    body: Optional[str] = None
    message_id: str
    account: str
    mailbox: str

    @classmethod
    def from_record(cls, record: Dict[str, Optional[str]], message_id: str,
                    location: MessageLocation) -> "MessageDetail":
        return cls(
            subject=record["subject"],
            sender=record["sender"],
            to=split_list(record["to"]),
            cc=split_list(record["cc"]),
            date=record["date"],
            is_read=coerce_bool(record["is_read"]),
            is_flagged=coerce_bool(record["is_flagged"]),
            body=record["body"],
            message_id=message_id,
            account=location.account,
            mailbox=location.mailbox,
        )


class StatusResult(BaseModel):
    message_id: str
    status: str

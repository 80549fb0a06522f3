"""
Mail operations: each method builds a script, runs it once per message
through the injected script runner, and maps the output onto models.

Failures are raised (MailError, or ValueError for malformed dates); turning
them into tool responses is left to the server layer.
"""

import logging
from typing import Any, Dict, List, Optional

from apple_mail_tools import scripts
from apple_mail_tools.applescript import coerce_int, parse_tsv, run_applescript, split_record
from apple_mail_tools.config import DEFAULT_SEARCH_MAILBOX, SEARCH_RESULT_LIMIT
from apple_mail_tools.locator import MessageLocator, ScriptRunner
from apple_mail_tools.models import (
    Account,
    Mailbox,
    MessageDetail,
    MessageSummary,
    StatusResult,
)

logger = logging.getLogger(__name__)


class MailService:
    """Stateless Apple Mail operations."""

    def __init__(self, run_script: ScriptRunner = run_applescript, locator: Optional[MessageLocator] = None):
        self.run_script = run_script
        self.locator = locator or MessageLocator(run_script)

    async def list_accounts(self) -> Dict[str, Any]:
        result = await self.run_script(scripts.list_accounts_script())
        accounts = [Account.from_row(row) for row in parse_tsv(result, scripts.ACCOUNT_FIELDS)]
        return {"accounts": [a.model_dump() for a in accounts]}

    async def list_mailboxes(self, account: str) -> Dict[str, Any]:
        result = await self.run_script(scripts.list_mailboxes_script(account))
        mailboxes = [Mailbox.from_row(row) for row in parse_tsv(result, scripts.MAILBOX_FIELDS)]
        return {"account": account, "mailboxes": [m.model_dump() for m in mailboxes]}

    async def get_unread_count(self, account: str, mailbox: str) -> Dict[str, Any]:
        result = await self.run_script(scripts.unread_count_script(account, mailbox))
        return {"account": account, "mailbox": mailbox, "unread_count": coerce_int(result)}

    async def search_emails(
        self,
        account: Optional[str] = None,
        mailbox: Optional[str] = None,
        subject_contains: Optional[str] = None,
        sender_contains: Optional[str] = None,
        is_read: Optional[bool] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Search messages, in Mail's own account, mailbox and message order.

        Subject, sender and read status filters go into the whose-clause; the
        date window is checked per message. Without both account and mailbox,
        the mailbox (INBOX by default) is searched across accounts. At most
        SEARCH_RESULT_LIMIT messages come back.
        """
        whose = (
            scripts.WhoseClause()
            .contains("subject", subject_contains)
            .contains("sender", sender_contains)
            .equals("read status", is_read)
        )
        dates = scripts.DateRange(date_from, date_to)

        script = scripts.search_script(
            account, mailbox, whose, dates,
            default_mailbox=DEFAULT_SEARCH_MAILBOX,
            limit=SEARCH_RESULT_LIMIT,
        )
        result = await self.run_script(script)
        messages = [MessageSummary.from_row(row) for row in parse_tsv(result, scripts.SEARCH_FIELDS)]
        return {"messages": [m.model_dump() for m in messages], "count": len(messages)}

    async def read_email(
        self,
        message_id: str,
        account: Optional[str] = None,
        mailbox: Optional[str] = None
    ) -> Dict[str, Any]:
        location = await self.locator.locate(message_id, account, mailbox)
        result = await self.run_script(
            scripts.read_message_script(location.account, location.mailbox, message_id)
        )
        record = split_record(result, scripts.MESSAGE_FIELDS)
        email = MessageDetail.from_record(record, message_id, location)
        return {"email": email.model_dump()}

    async def _set_property(
        self,
        message_ids: List[str],
        prop: str,
        value: bool,
        status: str,
        account: Optional[str],
        mailbox: Optional[str]
    ) -> Dict[str, Any]:
        # Each id is located afresh; the first failure aborts the whole batch
        results = []
        for message_id in message_ids:
            location = await self.locator.locate(message_id, account, mailbox)
            await self.run_script(
                scripts.set_message_property_script(location.account, location.mailbox, message_id, prop, value)
            )
            results.append(StatusResult(message_id=message_id, status=status))
        logger.info(f"Set {prop} to {value} on {len(results)} message(s)")
        return {"results": [r.model_dump() for r in results]}

    async def mark_read(self, message_ids: List[str], account: Optional[str] = None,
                        mailbox: Optional[str] = None) -> Dict[str, Any]:
        return await self._set_property(message_ids, "read status", True, "marked_read", account, mailbox)

    async def mark_unread(self, message_ids: List[str], account: Optional[str] = None,
                          mailbox: Optional[str] = None) -> Dict[str, Any]:
        return await self._set_property(message_ids, "read status", False, "marked_unread", account, mailbox)

    async def mark_flagged(self, message_ids: List[str], flagged: bool, account: Optional[str] = None,
                           mailbox: Optional[str] = None) -> Dict[str, Any]:
        status = "flagged" if flagged else "unflagged"
        return await self._set_property(message_ids, "flagged status", flagged, status, account, mailbox)

    async def move_email(
        self,
        message_id: str,
        to_mailbox: str,
        to_account: str,
        account: Optional[str] = None,
        mailbox: Optional[str] = None
    ) -> Dict[str, Any]:
        # The destination is not checked up front; Mail reports a bad one
        location = await self.locator.locate(message_id, account, mailbox)
        await self.run_script(
            scripts.move_message_script(location.account, location.mailbox, message_id, to_account, to_mailbox)
        )
        logger.info(f"Moved {message_id} from {location.mailbox} of {location.account} to {to_mailbox} of {to_account}")
        return {"message_id": message_id, "moved_to": {"account": to_account, "mailbox": to_mailbox}}

    async def trash_email(
        self,
        message_id: str,
        account: Optional[str] = None,
        mailbox: Optional[str] = None
    ) -> Dict[str, Any]:
        location = await self.locator.locate(message_id, account, mailbox)
        await self.run_script(scripts.delete_message_script(location.account, location.mailbox, message_id))
        logger.info(f"Trashed {message_id} from {location.mailbox} of {location.account}")
        return {"message_id": message_id, "status": "trashed"}

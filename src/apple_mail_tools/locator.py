"""
Resolving a message id to the account and mailbox that hold it.

Mail's scripting interface can only address a message through its mailbox,
so every operation on a single message first needs its location. When the
caller supplies both account and mailbox the location is only verified;
otherwise every mailbox of every account is searched and the first match in
Mail's own ordering wins.
"""

import logging
from typing import Awaitable, Callable, Optional

from apple_mail_tools import scripts
from apple_mail_tools.applescript import parse_tsv
from apple_mail_tools.exceptions import MessageNotFoundError
from apple_mail_tools.models import MessageLocation

logger = logging.getLogger(__name__)

ScriptRunner = Callable[[str], Awaitable[str]]


class MessageLocator:
    """Finds where a message lives. Holds no state between calls."""

    def __init__(self, run_script: ScriptRunner):
        self.run_script = run_script

    async def locate(
        self,
        message_id: str,
        account: Optional[str] = None,
        mailbox: Optional[str] = None
    ) -> MessageLocation:
        """
        Resolve ``message_id`` to a MessageLocation.

        Args:
            message_id: RFC 822 Message-ID of the email
            account: Account hint; only used together with ``mailbox``
            mailbox: Mailbox hint; only used together with ``account``

        Raises:
            MessageNotFoundError: if no matching message exists
        """
        if account is not None and mailbox is not None:
            return await self._verify(message_id, account, mailbox)
        return await self._search(message_id)

    async def _verify(self, message_id: str, account: str, mailbox: str) -> MessageLocation:
        logger.debug(f"Verifying {message_id} in {mailbox} of {account}")
        result = await self.run_script(scripts.verify_message_script(message_id, account, mailbox))
        if result != "found":
            raise MessageNotFoundError(f"Message not found in {mailbox} of {account}")
        return MessageLocation(account, mailbox)

    async def _search(self, message_id: str) -> MessageLocation:
        logger.debug(f"Searching all accounts for {message_id}")
        result = await self.run_script(scripts.find_message_script(message_id))
        rows = parse_tsv(result, scripts.LOCATION_FIELDS)
        if not rows:
            raise MessageNotFoundError("Message not found")
        return MessageLocation(rows[0]["account"], rows[0]["mailbox"])

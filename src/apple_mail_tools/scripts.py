"""
AppleScript generation for every Mail operation.

Scripts are assembled from a few small pieces (quoted literals, mailbox
references, whose-clauses, date ranges and tab-separated row emitters) so
that every caller-supplied value passes through ``sanitize`` in one place.

Scripts that return records print one record per line with fields joined by
tabs; the field order of each layout below is what the parser relies on.
"""

from typing import Any, List, Optional

from apple_mail_tools.applescript import build_date_script, sanitize
from apple_mail_tools.config import SEARCH_RESULT_LIMIT

# AppleScript string literals for the record delimiters
TAB = '"\\t"'
NEWLINE = '"\\n"'

ACCOUNT_FIELDS = ("name", "type", "email_addresses")
MAILBOX_FIELDS = ("name", "unread_count")
SEARCH_FIELDS = ("message_id", "subject", "sender", "date", "is_read", "mailbox", "account")
LOCATION_FIELDS = ("account", "mailbox")
MESSAGE_FIELDS = ("subject", "sender", "to", "cc", "date", "is_read", "is_flagged", "body")


def quote(value: Any) -> str:
    """Render a value as a double-quoted AppleScript string literal."""
    return f'"{sanitize(value)}"'


def literal(value: Any) -> str:
    """Render a Python value as an AppleScript literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return quote(value)


def mailbox_ref(account: str, mailbox: str) -> str:
    return f"mailbox {quote(mailbox)} of account {quote(account)}"


def _joined(*expressions: str) -> str:
    return f" & {TAB} & ".join(expressions)


def tsv_row(*expressions: str) -> str:
    """AppleScript expression joining ``expressions`` with tabs, newline-terminated."""
    return _joined(*expressions) + f" & {NEWLINE}"


def tell_mail(body: str) -> str:
    return f'''
tell application "Mail"
{body}
end tell
'''


class WhoseClause:
    """Conditions for an AppleScript ``whose`` filter, joined with ``and``."""

    def __init__(self):
        self.conditions: List[str] = []

    def contains(self, prop: str, text: Optional[str]) -> "WhoseClause":
        if text is not None:
            self.conditions.append(f"{prop} contains {quote(text)}")
        return self

    def equals(self, prop: str, value: Any) -> "WhoseClause":
        if value is not None:
            self.conditions.append(f"{prop} is {literal(value)}")
        return self

    def render(self) -> str:
        if not self.conditions:
            return ""
        return " whose " + " and ".join(self.conditions)

    def __bool__(self) -> bool:
        return bool(self.conditions)


class DateRange:
    """
    Inclusive date-received window checked inside the message loop.

    The bounds are built as AppleScript date variables up front and compared
    per message, rather than pushed into the whose-clause.
    """

    def __init__(self, date_from: Optional[str] = None, date_to: Optional[str] = None, message_var: str = "msg"):
        self.date_from = date_from
        self.date_to = date_to
        self.message_var = message_var

    def setup(self) -> str:
        statements = ""
        if self.date_from is not None:
            statements += build_date_script(self.date_from, "dateFrom")
        if self.date_to is not None:
            statements += build_date_script(self.date_to, "dateTo", end_of_day=True)
        return statements

    def condition(self) -> str:
        comparisons = []
        if self.date_from is not None:
            comparisons.append(f"date received of {self.message_var} >= dateFrom")
        if self.date_to is not None:
            comparisons.append(f"date received of {self.message_var} <= dateTo")
        return " and ".join(comparisons)

    def guard(self, body: str) -> str:
        """Wrap ``body`` so it only runs for messages inside the window."""
        condition = self.condition()
        if not condition:
            return body
        return f'''
                    if {condition} then
{body}
                    end if'''


def _message_lookup(location_expr: str, message_id: str) -> str:
    return f"(messages of {location_expr} whose message id is {quote(message_id)})"


# Read-only scripts

def list_accounts_script() -> str:
    return tell_mail(f'''
    set output to ""
    set acctList to every account
    repeat with acct in acctList
        set acctName to name of acct
        set acctType to account type of acct as string
        set addrs to email addresses of acct
        set addrStr to ""
        repeat with a in addrs
            if addrStr is not "" then set addrStr to addrStr & ", "
            set addrStr to addrStr & a
        end repeat
        set output to output & {tsv_row("acctName", "acctType", "addrStr")}
    end repeat
    return output''')


def list_mailboxes_script(account: str) -> str:
    return tell_mail(f'''
    set output to ""
    set mboxes to every mailbox of account {quote(account)}
    repeat with mbox in mboxes
        set mboxName to name of mbox
        set unread to unread count of mbox
        set output to output & {tsv_row("mboxName", "unread")}
    end repeat
    return output''')


def unread_count_script(account: str, mailbox: str) -> str:
    return tell_mail(f'''
    return unread count of {mailbox_ref(account, mailbox)}''')


def _search_loop(mailbox_expr: str, mailbox_name: str, account_name: str,
                 whose: WhoseClause, dates: DateRange, limit: int) -> str:
    row = f'''
                    set mid to message id of msg
                    set subj to subject of msg
                    set sndr to sender of msg
                    set isRead to read status of msg
                    set output to output & {tsv_row("mid", "subj", "sndr", "dateStr", "isRead", mailbox_name, account_name)}
                    set msgCount to msgCount + 1'''
    return f'''
            set msgs to (every message of {mailbox_expr}{whose.render()})
            repeat with msg in msgs
                if msgCount >= {limit} then exit repeat
                set dateStr to date received of msg as string
                {dates.guard(row)}
            end repeat'''


def search_script(account: Optional[str], mailbox: Optional[str], whose: WhoseClause,
                  dates: DateRange, default_mailbox: str, limit: int = SEARCH_RESULT_LIMIT) -> str:
    """
    Build the search script.

    With both account and mailbox, only that mailbox is searched. Otherwise the
    mailbox (``default_mailbox`` when not given) is searched in every account,
    or just the named one, skipping accounts where the lookup errors. Results
    stop at ``limit`` in traversal order.
    """
    if account is not None and mailbox is not None:
        body = _search_loop(mailbox_ref(account, mailbox), quote(mailbox), quote(account), whose, dates, limit)
    else:
        target = mailbox if mailbox is not None else default_mailbox
        account_filter = f"if name of acct is {quote(account)} then" if account is not None else ""
        account_filter_end = "end if" if account is not None else ""
        loop = _search_loop("mbox", quote(target), "acctName", whose, dates, limit)
        body = f'''
    set acctList to every account
    repeat with acct in acctList
        {account_filter}
        try
            set mbox to mailbox {quote(target)} of acct
            set acctName to name of acct
            {loop}
        end try
        if msgCount >= {limit} then exit repeat
        {account_filter_end}
    end repeat'''

    return tell_mail(f'''
    {dates.setup()}
    set output to ""
    set msgCount to 0
    {body}
    return output''')


# Locating messages

def verify_message_script(message_id: str, account: str, mailbox: str) -> str:
    return tell_mail(f'''
    set msgs to {_message_lookup(mailbox_ref(account, mailbox), message_id)}
    if (count of msgs) > 0 then
        return "found"
    end if''')


def find_message_script(message_id: str) -> str:
    return tell_mail(f'''
    set acctList to every account
    repeat with acct in acctList
        set mboxes to every mailbox of acct
        repeat with mbox in mboxes
            try
                set msgs to {_message_lookup("mbox", message_id)}
                if (count of msgs) > 0 then
                    return (name of acct) & {TAB} & (name of mbox)
                end if
            end try
        end repeat
    end repeat''')


# Scripts acting on one located message

def read_message_script(account: str, mailbox: str, message_id: str) -> str:
    return tell_mail(f'''
    set msgs to {_message_lookup(mailbox_ref(account, mailbox), message_id)}
    set msg to item 1 of msgs
    set subj to subject of msg
    set sndr to sender of msg
    set dateStr to date received of msg as string
    set isRead to read status of msg
    set isFlagged to flagged status of msg
    set toList to ""
    repeat with r in to recipients of msg
        if toList is not "" then set toList to toList & ", "
        set toList to toList & (address of r as string)
    end repeat
    set ccList to ""
    repeat with r in cc recipients of msg
        if ccList is not "" then set ccList to ccList & ", "
        set ccList to ccList & (address of r as string)
    end repeat
    set msgBody to content of msg
    return {_joined("subj", "sndr", "toList", "ccList", "dateStr", "isRead", "isFlagged", "msgBody")}''')


def set_message_property_script(account: str, mailbox: str, message_id: str, prop: str, value: Any) -> str:
    return tell_mail(f'''
    set msgs to {_message_lookup(mailbox_ref(account, mailbox), message_id)}
    repeat with msg in msgs
        set {prop} of msg to {literal(value)}
    end repeat''')


def move_message_script(account: str, mailbox: str, message_id: str, to_account: str, to_mailbox: str) -> str:
    return tell_mail(f'''
    set msgs to {_message_lookup(mailbox_ref(account, mailbox), message_id)}
    set msg to item 1 of msgs
    move msg to {mailbox_ref(to_account, to_mailbox)}''')


def delete_message_script(account: str, mailbox: str, message_id: str) -> str:
    return tell_mail(f'''
    set msgs to {_message_lookup(mailbox_ref(account, mailbox), message_id)}
    set msg to item 1 of msgs
    delete msg''')

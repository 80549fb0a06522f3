#!/usr/bin/env python3
"""
Apple Mail MCP Server - FastMCP implementation
Exposes Apple Mail accounts, mailboxes and messages as MCP tools
"""

import logging
from typing import Awaitable, Dict, Any, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from apple_mail_tools.config import SERVER_NAME, USER_PREFERENCES
from apple_mail_tools.responses import error_response, success_response
from apple_mail_tools.service import MailService

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP(SERVER_NAME)

service = MailService()


# Decorator to inject user preferences into tool docstrings
def inject_preferences(func):
    """Decorator that appends user preferences to tool docstrings"""
    if USER_PREFERENCES:
        if func.__doc__:
            func.__doc__ = func.__doc__.rstrip() + f"\n\nUser Preferences: {USER_PREFERENCES}"
        else:
            func.__doc__ = f"User Preferences: {USER_PREFERENCES}"
    return func


async def respond(tool_name: str, operation: Awaitable[Dict[str, Any]]) -> CallToolResult:
    """Await an operation and wrap its outcome; any failure becomes an error envelope."""
    try:
        return success_response(await operation)
    except Exception as e:
        logger.warning(f"{tool_name} failed: {e}")
        return error_response(str(e))


@mcp.tool()
@inject_preferences
async def list_accounts() -> CallToolResult:
    """
    List all email accounts configured in Apple Mail.

    Returns:
        JSON with "accounts": name, type and email addresses of each account
    """
    return await respond("list_accounts", service.list_accounts())


@mcp.tool()
@inject_preferences
async def list_mailboxes(account: str) -> CallToolResult:
    """
    List all mailboxes for a given email account.

    Args:
        account: Account name (e.g., "Gmail", "Work")

    Returns:
        JSON with the account and its mailboxes with unread counts
    """
    return await respond("list_mailboxes", service.list_mailboxes(account))


@mcp.tool()
@inject_preferences
async def get_unread_count(account: str, mailbox: str) -> CallToolResult:
    """
    Get the unread message count for a specific mailbox.

    Args:
        account: Account name
        mailbox: Mailbox name
    """
    return await respond("get_unread_count", service.get_unread_count(account, mailbox))


@mcp.tool()
@inject_preferences
async def search_emails(
    account: Optional[str] = None,
    mailbox: Optional[str] = None,
    subject_contains: Optional[str] = None,
    sender_contains: Optional[str] = None,
    is_read: Optional[bool] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None
) -> CallToolResult:
    """
    Search for emails with optional filters. Defaults to INBOX of all accounts. Returns up to 50 results.

    Args:
        account: Account name to search in
        mailbox: Mailbox name to search in
        subject_contains: Filter by subject containing this text
        sender_contains: Filter by sender containing this text
        is_read: Filter by read status
        date_from: Filter emails from this date (YYYY-MM-DD)
        date_to: Filter emails up to this date (YYYY-MM-DD)

    Returns:
        JSON with "messages" (message_id, subject, sender, date, is_read, mailbox, account) and "count"
    """
    return await respond("search_emails", service.search_emails(
        account=account,
        mailbox=mailbox,
        subject_contains=subject_contains,
        sender_contains=sender_contains,
        is_read=is_read,
        date_from=date_from,
        date_to=date_to,
    ))


@mcp.tool()
@inject_preferences
async def read_email(message_id: str, account: Optional[str] = None, mailbox: Optional[str] = None) -> CallToolResult:
    """
    Read the full content of an email by message ID.

    Args:
        message_id: RFC message ID
        account: Account name (speeds up lookup)
        mailbox: Mailbox name (speeds up lookup)
    """
    return await respond("read_email", service.read_email(message_id, account, mailbox))


@mcp.tool()
@inject_preferences
async def mark_read(message_ids: List[str], account: Optional[str] = None, mailbox: Optional[str] = None) -> CallToolResult:
    """
    Mark one or more emails as read.

    Args:
        message_ids: Array of RFC message IDs
        account: Account name (speeds up lookup)
        mailbox: Mailbox name (speeds up lookup)
    """
    return await respond("mark_read", service.mark_read(message_ids, account, mailbox))


@mcp.tool()
@inject_preferences
async def mark_unread(message_ids: List[str], account: Optional[str] = None, mailbox: Optional[str] = None) -> CallToolResult:
    """
    Mark one or more emails as unread.

    Args:
        message_ids: Array of RFC message IDs
        account: Account name (speeds up lookup)
        mailbox: Mailbox name (speeds up lookup)
    """
    return await respond("mark_unread", service.mark_unread(message_ids, account, mailbox))


@mcp.tool()
@inject_preferences
async def mark_flagged(
    message_ids: List[str],
    flagged: bool,
    account: Optional[str] = None,
    mailbox: Optional[str] = None
) -> CallToolResult:
    """
    Flag or unflag one or more emails.

    Args:
        message_ids: Array of RFC message IDs
        flagged: true to flag, false to unflag
        account: Account name (speeds up lookup)
        mailbox: Mailbox name (speeds up lookup)
    """
    return await respond("mark_flagged", service.mark_flagged(message_ids, flagged, account, mailbox))


@mcp.tool()
@inject_preferences
async def move_email(
    message_id: str,
    to_mailbox: str,
    to_account: str,
    account: Optional[str] = None,
    mailbox: Optional[str] = None
) -> CallToolResult:
    """
    Move an email to a different mailbox.

    Args:
        message_id: RFC message ID
        to_mailbox: Destination mailbox name
        to_account: Destination account name
        account: Source account name (speeds up lookup)
        mailbox: Source mailbox name (speeds up lookup)
    """
    return await respond("move_email", service.move_email(message_id, to_mailbox, to_account, account, mailbox))


@mcp.tool()
@inject_preferences
async def trash_email(message_id: str, account: Optional[str] = None, mailbox: Optional[str] = None) -> CallToolResult:
    """
    Move an email to the trash.

    Args:
        message_id: RFC message ID
        account: Account name (speeds up lookup)
        mailbox: Mailbox name (speeds up lookup)
    """
    return await respond("trash_email", service.trash_email(message_id, account, mailbox))


if __name__ == "__main__":
    # Run the MCP server
    mcp.run()

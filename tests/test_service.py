"""
Tests for the Mail operations, with osascript replaced by canned replies.
"""

import pytest

from apple_mail_tools.exceptions import AppleScriptError, MessageNotFoundError


def answer_verifications(script: str) -> str:
    """Treat every hinted lookup as a hit and every other script as silent."""
    return "found" if 'return "found"' in script else ""


class TestReadOnlyOperations:
    @pytest.mark.asyncio
    async def test_list_accounts(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("iCloud\timap\ta@icloud.com, b@icloud.com\nWork\texchange\t")
        result = await service_factory(fake).list_accounts()

        assert result == {"accounts": [
            {"name": "iCloud", "type": "imap", "email_addresses": ["a@icloud.com", "b@icloud.com"]},
            {"name": "Work", "type": "exchange", "email_addresses": []},
        ]}

    @pytest.mark.asyncio
    async def test_list_accounts_empty(self, fake_mail_factory, service_factory):
        result = await service_factory(fake_mail_factory("")).list_accounts()
        assert result == {"accounts": []}

    @pytest.mark.asyncio
    async def test_list_mailboxes(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("INBOX\t3\n")
        result = await service_factory(fake).list_mailboxes(account="Work")

        assert result == {"account": "Work", "mailboxes": [{"name": "INBOX", "unread_count": 3}]}
        assert 'every mailbox of account "Work"' in fake.scripts[0]

    @pytest.mark.asyncio
    async def test_get_unread_count(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("7")
        result = await service_factory(fake).get_unread_count("Work", "INBOX")

        assert result == {"account": "Work", "mailbox": "INBOX", "unread_count": 7}
        assert 'unread count of mailbox "INBOX" of account "Work"' in fake.scripts[0]


class TestSearch:
    @pytest.mark.asyncio
    async def test_rows_become_message_summaries(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory(
            "<1@x>\tHello\tBob <bob@x>\tMonday, 1 January 2024 at 09:00:00\ttrue\tINBOX\tWork\n"
            "<2@x>\tAgain\tAmy <amy@x>\tTuesday, 2 January 2024 at 10:00:00\tfalse\tINBOX\tHome"
        )
        result = await service_factory(fake).search_emails(subject_contains="Hello", is_read=True)

        assert result["count"] == 2
        assert result["messages"][0] == {
            "message_id": "<1@x>",
            "subject": "Hello",
            "sender": "Bob <bob@x>",
            "date": "Monday, 1 January 2024 at 09:00:00",
            "is_read": True,
            "mailbox": "INBOX",
            "account": "Work",
        }
        assert result["messages"][1]["is_read"] is False
        assert 'whose subject contains "Hello" and read status is true' in fake.scripts[0]
        assert 'mailbox "INBOX" of acct' in fake.scripts[0]

    @pytest.mark.asyncio
    async def test_capped_output_is_returned_as_is(self, fake_mail_factory, service_factory):
        rows = "\n".join(f"<{i}@x>\tS{i}\ts@x\tdate\tfalse\tINBOX\tWork" for i in range(50))
        result = await service_factory(fake_mail_factory(rows)).search_emails()

        assert result["count"] == 50
        assert [m["message_id"] for m in result["messages"]][:2] == ["<0@x>", "<1@x>"]

    @pytest.mark.asyncio
    async def test_date_filters(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("")
        result = await service_factory(fake).search_emails(
            account="Work", mailbox="Archive", date_from="2024-01-01", date_to="2024-01-31"
        )

        assert result == {"messages": [], "count": 0}
        script = fake.scripts[0]
        assert "set month of dateTo to 1" in script
        assert "if date received of msg >= dateFrom and date received of msg <= dateTo then" in script

    @pytest.mark.asyncio
    async def test_bad_date_fails_before_running_anything(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory()
        with pytest.raises(ValueError):
            await service_factory(fake).search_emails(date_from="last week")
        fake.run.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bounds", [{"date_from": ""}, {"date_to": ""}])
    async def test_empty_date_is_rejected_not_ignored(self, fake_mail_factory, service_factory, bounds):
        fake = fake_mail_factory("<1@x>\tHello\tbob@x\tMonday\tfalse\tINBOX\tWork")
        with pytest.raises(ValueError):
            await service_factory(fake).search_emails(**bounds)
        fake.run.assert_not_awaited()


class TestReadEmail:
    @pytest.mark.asyncio
    async def test_reads_located_message(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory(
            "found",
            "Hi\tBob <bob@x>\ta@x, c@x\t\tMonday\tfalse\ttrue\tLine one\nLine two\twith a tab",
        )
        result = await service_factory(fake).read_email("<a@x>", account="Work", mailbox="INBOX")

        assert result == {"email": {
            "subject": "Hi",
            "sender": "Bob <bob@x>",
            "to": ["a@x", "c@x"],
            "cc": [],
            "date": "Monday",
            "is_read": False,
            "is_flagged": True,
            "body": "Line one\nLine two\twith a tab",
            "message_id": "<a@x>",
            "account": "Work",
            "mailbox": "INBOX",
        }}
        assert 'mailbox "INBOX" of account "Work" whose message id is "<a@x>"' in fake.scripts[1]

    @pytest.mark.asyncio
    async def test_searches_when_no_hints(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("Home\tArchive", "S\tB\t\t\tD\ttrue\tfalse\t")
        result = await service_factory(fake).read_email("<a@x>")

        assert result["email"]["account"] == "Home"
        assert result["email"]["mailbox"] == "Archive"
        assert 'mailbox "Archive" of account "Home"' in fake.scripts[1]


class TestStatusUpdates:
    @pytest.mark.asyncio
    async def test_mark_flagged(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("Work\tINBOX", "")
        result = await service_factory(fake).mark_flagged(["<abc@x>"], flagged=True)

        assert result == {"results": [{"message_id": "<abc@x>", "status": "flagged"}]}
        assert "set flagged status of msg to true" in fake.scripts[1]

    @pytest.mark.asyncio
    async def test_unflag(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("Work\tINBOX", "")
        result = await service_factory(fake).mark_flagged(["<abc@x>"], flagged=False)

        assert result["results"][0]["status"] == "unflagged"
        assert "set flagged status of msg to false" in fake.scripts[1]

    @pytest.mark.asyncio
    async def test_mark_flagged_unknown_message(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("")
        with pytest.raises(MessageNotFoundError, match="^Message not found$"):
            await service_factory(fake).mark_flagged(["<abc@x>"], flagged=True)

    @pytest.mark.asyncio
    async def test_mark_read_is_repeatable(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory(handler=answer_verifications)
        service = service_factory(fake)

        first = await service.mark_read(["<a@x>"], account="Work", mailbox="INBOX")
        second = await service.mark_read(["<a@x>"], account="Work", mailbox="INBOX")

        assert first == second == {"results": [{"message_id": "<a@x>", "status": "marked_read"}]}
        assert "set read status of msg to true" in fake.scripts[1]

    @pytest.mark.asyncio
    async def test_mark_unread_locates_each_id(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory(handler=answer_verifications)
        result = await service_factory(fake).mark_unread(["<a@x>", "<b@x>"], account="Work", mailbox="INBOX")

        assert [r["status"] for r in result["results"]] == ["marked_unread", "marked_unread"]
        # verify + update for each id
        assert fake.run.await_count == 4
        assert "set read status of msg to false" in fake.scripts[3]
        assert '"<b@x>"' in fake.scripts[2]

    @pytest.mark.asyncio
    async def test_failure_aborts_batch(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("found", "", "")
        with pytest.raises(MessageNotFoundError, match="Message not found in INBOX of Work"):
            await service_factory(fake).mark_read(["<a@x>", "<b@x>"], account="Work", mailbox="INBOX")
        assert fake.run.await_count == 3


class TestMoveAndTrash:
    @pytest.mark.asyncio
    async def test_move_email(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("Work\tINBOX", "")
        result = await service_factory(fake).move_email("<a@x>", to_mailbox="Receipts", to_account="Home")

        assert result == {"message_id": "<a@x>", "moved_to": {"account": "Home", "mailbox": "Receipts"}}
        assert 'messages of mailbox "INBOX" of account "Work"' in fake.scripts[1]
        assert 'move msg to mailbox "Receipts" of account "Home"' in fake.scripts[1]

    @pytest.mark.asyncio
    async def test_move_to_missing_mailbox_surfaces_mail_error(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("found")
        fake.run.side_effect = ["found", AppleScriptError("Mail got an error: Can't get mailbox \"Nope\".")]
        with pytest.raises(AppleScriptError, match="Can't get mailbox"):
            await service_factory(fake).move_email("<a@x>", "Nope", "Home", account="Work", mailbox="INBOX")

    @pytest.mark.asyncio
    async def test_trash_email(self, fake_mail_factory, service_factory):
        fake = fake_mail_factory("found", "")
        result = await service_factory(fake).trash_email("<a@x>", account="Work", mailbox="INBOX")

        assert result == {"message_id": "<a@x>", "status": "trashed"}
        assert "delete msg" in fake.scripts[1]

"""Shared fixtures: a scripted stand-in for osascript."""

from typing import Callable, List, Optional
from unittest.mock import AsyncMock

import pytest

from apple_mail_tools.service import MailService


class FakeMail:
    """Records every script and answers from a list or a handler function."""

    def __init__(self, replies: Optional[List[str]] = None, handler: Optional[Callable[[str], str]] = None):
        self.run = AsyncMock(side_effect=handler if handler else list(replies or []))

    @property
    def scripts(self) -> List[str]:
        return [c.args[0] for c in self.run.call_args_list]


@pytest.fixture
def fake_mail_factory():
    def make(*replies: str, handler: Optional[Callable[[str], str]] = None) -> FakeMail:
        return FakeMail(list(replies), handler)
    return make


@pytest.fixture
def service_factory():
    def make(fake: FakeMail) -> MailService:
        return MailService(fake.run)
    return make

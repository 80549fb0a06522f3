"""Runtime settings, read from the environment at import time."""

import os

SERVER_NAME = "apple-mail"
SERVER_VERSION = "1.0.0"

# Appended to every tool description so the agent sees standing instructions
USER_PREFERENCES = os.environ.get("USER_EMAIL_PREFERENCES", "")

LOG_LEVEL = os.environ.get("APPLE_MAIL_LOG_LEVEL", "WARNING").upper()

OSASCRIPT_COMMAND = ["osascript", "-"]

DEFAULT_SEARCH_MAILBOX = "INBOX"
SEARCH_RESULT_LIMIT = 50

"""
AppleScript plumbing: escaping values, running scripts through osascript,
and turning the tab-delimited text they print back into Python values.
"""

import asyncio
import logging
import re
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from apple_mail_tools.config import OSASCRIPT_COMMAND
from apple_mail_tools.exceptions import AppleScriptError

logger = logging.getLogger(__name__)

# Apple Mail can only handle one operation at a time
_applescript_lock = asyncio.Lock()

FALLBACK_ERROR_MESSAGE = "AppleScript execution failed"

_ERROR_PREFIX = re.compile(r"^.*?execution error: ", re.MULTILINE)
_ERROR_CODE_SUFFIX = re.compile(r"\(-?\d+\)\s*$", re.MULTILINE)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def sanitize(value: Any) -> str:
    """Escape a value for use inside a double-quoted AppleScript string literal.

    Backslashes are escaped before quotes, otherwise the backslash added in
    front of each quote would itself get doubled.
    """
    if value is None:
        return ""
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def extract_error_message(stderr: str) -> str:
    """Strip osascript boilerplate from an error report.

    ``181:190: execution error: Mail got an error: Can't get account "X". (-1728)``
    becomes ``Mail got an error: Can't get account "X".``
    """
    message = (stderr or "").strip()
    message = _ERROR_PREFIX.sub("", message, count=1)
    message = _ERROR_CODE_SUFFIX.sub("", message, count=1)
    return message.strip()


async def run_applescript(script: str) -> str:
    """Execute AppleScript and return its trimmed output.

    The script is fed to osascript on stdin. A non-zero exit raises
    AppleScriptError carrying the cleaned-up stderr message. There is no
    timeout and no retry: a hung Mail.app hangs the call.

    A global lock ensures only one AppleScript runs at a time.
    """
    async with _applescript_lock:
        logger.debug(f"Running AppleScript ({len(script)} chars)")
        try:
            result = await asyncio.to_thread(
                subprocess.run,
                OSASCRIPT_COMMAND,
                input=script,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            raise AppleScriptError("osascript not found. This tool requires macOS with AppleScript support.")

    if result.returncode != 0:
        logger.debug(f"osascript exited with status {result.returncode}: {result.stderr.strip()}")
        message = extract_error_message(result.stderr)
        raise AppleScriptError(message or FALLBACK_ERROR_MESSAGE)

    return result.stdout.strip()


def parse_tsv(output: str, fields: Sequence[str]) -> List[Dict[str, Optional[str]]]:
    """Parse one record per line, tab-separated, into dicts keyed by ``fields``.

    A line is split into at most ``len(fields)`` parts so the last column keeps
    any remaining text. Missing trailing columns come back as None.
    """
    records = []
    if not output:
        return records

    for line in output.split("\n"):
        if not line.strip():
            continue
        values = line.split("\t", len(fields) - 1)
        record = {}
        for i, field in enumerate(fields):
            record[field] = values[i].strip() if i < len(values) else None
        records.append(record)

    return records


def split_record(output: str, fields: Sequence[str]) -> Dict[str, Optional[str]]:
    """Split a single tab-separated record whose last column may span lines."""
    values = output.split("\t", len(fields) - 1)
    return {field: values[i] if i < len(values) else None for i, field in enumerate(fields)}


def split_list(value: Optional[str], separator: str = ", ") -> List[str]:
    """Split a joined AppleScript list back apart; empty input gives []."""
    if not value:
        return []
    return value.split(separator)


def coerce_int(value: Optional[str]) -> int:
    """Read the leading integer of ``value``, 0 when there is none."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def coerce_bool(value: Optional[str]) -> bool:
    return (value or "").strip() == "true"


def build_date_script(date_string: str, var_name: str, end_of_day: bool = False) -> str:
    """
    Returns AppleScript statements that set ``var_name`` to a date.

    Args:
        date_string: Date in YYYY-MM-DD form
        var_name: AppleScript variable to assign
        end_of_day: Use 23:59:59 instead of midnight, for inclusive upper bounds

    Raises:
        ValueError: if the string is not three dash-separated integers
    """
    year, month, day = (int(part) for part in date_string.split("-"))
    hours, minutes, seconds = (23, 59, 59) if end_of_day else (0, 0, 0)

    return f'''
    set {var_name} to current date
    set year of {var_name} to {year}
    set month of {var_name} to {month}
    set day of {var_name} to {day}
    set hours of {var_name} to {hours}
    set minutes of {var_name} to {minutes}
    set seconds of {var_name} to {seconds}
'''

"""
Core Utilities.

Shared utility functions used across the shell.
Server timestamps arrive in two encodings and are both displayed in local
time using DISPLAY_FORMAT:

    OData control entities:  "/Date(1500000000000)/"  (epoch milliseconds)
    WebDAV getlastmodified:  "Fri, 14 Jul 2017 02:40:00 GMT"  (RFC 1123)
"""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from pcui.core.exceptions import MalformedResponseError

DISPLAY_FORMAT = "%Y/%m/%d %H:%M:%S"

_MS_DATE_PATTERN = re.compile(r"/Date\((-?\d+)\)/")


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values kept by the shell are timezone-naive and assumed
    to be UTC. Conversion to local time happens only for display.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def ms_date_to_local(value: str) -> str:
    """
    Convert an OData "/Date(<epoch-millis>)/" value to local display time.

    Raises:
        MalformedResponseError: If value is not in the expected encoding
    """
    match = _MS_DATE_PATTERN.search(value or "")
    if match is None:
        raise MalformedResponseError(f"Unexpected date value: {value!r}")
    millis = int(match.group(1))
    try:
        return datetime.fromtimestamp(millis / 1000).strftime(DISPLAY_FORMAT)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedResponseError(f"Date out of range: {value!r}") from e


def http_date_to_local(value: str) -> str:
    """
    Convert an RFC 1123 HTTP date to local display time.

    Raises:
        MalformedResponseError: If value cannot be parsed
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"Unexpected date value: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone().strftime(DISPLAY_FORMAT)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedResponseError(f"Date out of range: {value!r}") from e

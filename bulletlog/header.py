"""Section headers.

A section starts with a line of the form `## YYYYMMDD`. The date is a plain
calendar day; there is no time-of-day or timezone component.
"""

import re
from datetime import datetime

from bulletlog.errors import HeaderParseError

HEADER_MARKER = "##"
DATE_FORMAT = "%Y%m%d"

_DATE_TOKEN = re.compile(r"\d{8}")


def parse_date_token(token):
    """Parse an 8-digit YYYYMMDD token into a date. Raises ValueError."""
    if not _DATE_TOKEN.fullmatch(token):
        raise ValueError(f"Expected an 8-digit YYYYMMDD date, got {token!r}")
    return datetime.strptime(token, DATE_FORMAT).date()


def parse_header(line):
    """Return the date of a `## YYYYMMDD` header line.

    Raises HeaderParseError if the line is not a header.
    """
    if not line.startswith(HEADER_MARKER):
        raise HeaderParseError(f"The prefix must be {HEADER_MARKER}")
    fields = line.split()
    if len(fields) != 2:
        raise HeaderParseError(f"Invalid header: {line.rstrip()!r}")
    try:
        return parse_date_token(fields[1])
    except ValueError as e:
        raise HeaderParseError(str(e)) from e


def try_parse_header(line):
    """Like parse_header, but returns None for lines that are not headers."""
    try:
        return parse_header(line)
    except HeaderParseError:
        return None


def format_header(day):
    return f"{HEADER_MARKER} {day.strftime(DATE_FORMAT)}\n"

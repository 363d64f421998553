"""Helpers for queries, values, listings and dates."""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from antx.models import FOLDER_MIMETYPE, SMART_FOLDER_MIMETYPE, Node

FILTER_OPERATORS = (
    "==",
    "<=",
    ">=",
    "<",
    ">",
    "!=",
    "in",
    "not-in",
    "match",
    "contains",
    "contains-all",
    "contains-any",
    "not-contains",
    "contains-none",
    "~=",
)

_SPACED_OPERATORS = ("==", ">=", "<=", "!=", "~=", ">", "<")

_INT_RE = re.compile(r"[+-]?\d+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_RFC3339_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(\.\d+)?"
    r"([Zz]|[+-]\d{2}:\d{2})"
)


def extract_single_filter(search_text: str) -> list[tuple[str, str, str]]:
    """Turn "field op value" into one filter, or else a content match."""
    tokens = search_text.split()
    if len(tokens) >= 2 and tokens[1] in FILTER_OPERATORS:
        return [(tokens[0], tokens[1], " ".join(tokens[2:]))]
    return [(":content", "match", search_text)]


def _parse_float(text: str) -> float | None:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isinf(value) and "inf" not in text.lower():
        return None
    return value


def convert_value(value_str: str) -> Any:
    """Convert text to int, float or bool where it reads as one."""
    if _INT_RE.fullmatch(value_str):
        number = int(value_str)
        if _INT64_MIN <= number <= _INT64_MAX:
            return number
    as_float = _parse_float(value_str)
    if as_float is not None:
        return as_float
    if value_str in _TRUE_WORDS:
        return True
    if value_str in _FALSE_WORDS:
        return False
    return value_str


def _inside_longer_operator(text: str, index: int, op: str) -> bool:
    for longer in _SPACED_OPERATORS:
        if len(longer) <= len(op):
            continue
        start = max(0, index - len(longer) + len(op))
        stop = min(index, len(text) - len(longer))
        if any(text.startswith(longer, j) for j in range(start, stop + 1)):
            return True
    return False


def _space_operator(text: str, op: str) -> str:
    pieces: list[str] = []
    index = 0
    while index < len(text):
        if not text.startswith(op, index):
            pieces.append(text[index])
            index += 1
            continue
        end = index + len(op)
        if _inside_longer_operator(text, index, op):
            pieces.append(op)
        else:
            if index > 0 and text[index - 1] != " ":
                pieces.append(" ")
            pieces.append(op)
            if end < len(text) and text[end] != " ":
                pieces.append(" ")
        index = end
    return "".join(pieces)


def normalize_operators(text: str) -> str:
    """Put single spaces around comparison operators in a query."""
    result = text
    for op in _SPACED_OPERATORS:
        result = _space_operator(result, op)
    result = re.sub(" {2,}", " ", result)
    return result.strip()


def sort_nodes_for_listing(nodes: Iterable[Node]) -> list[Node]:
    """Folders first, then files, each alphabetically by title."""
    folder_types = (FOLDER_MIMETYPE, SMART_FOLDER_MIMETYPE)
    nodes = list(nodes)
    folders = [n for n in nodes if n.mimetype in folder_types]
    files = [n for n in nodes if n.mimetype not in folder_types]
    by_title = lambda node: node.title.lower()  # noqa: E731
    return sorted(folders, key=by_title) + sorted(files, key=by_title)


def _parse_rfc3339(text: str) -> datetime | None:
    match = _RFC3339_RE.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours > 23 or minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    try:
        return datetime(int(year), int(month), int(day), int(hour),
                        int(minute), int(second), micro, tzinfo=tz)
    except ValueError:
        return None


def format_modified_date(date_str: str, now: datetime | None = None) -> str:
    """Local time as "Jan 02 15:04" this year, "Jan 02  2006" otherwise."""
    if not date_str:
        return "N/A"
    parsed = _parse_rfc3339(date_str)
    if parsed is None:
        return "N/A"
    local = parsed.astimezone()
    current_year = (now or datetime.now()).year
    month = _MONTHS[local.month - 1]
    if local.year == current_year:
        return f"{month} {local.day:02d} {local.hour:02d}:{local.minute:02d}"
    return f"{month} {local.day:02d}  {local.year}"
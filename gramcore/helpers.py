"""Small helpers for error parsing, formatting and value checks."""

from __future__ import annotations

import os
import random
import re
from typing import Any
from urllib.parse import urlparse

_RE_DATA_CENTER = re.compile(r"DC (\d+)")
_RE_CODE = re.compile(r"code (\d+)")

_RE_FLOOD_WAIT = re.compile(r"A wait of (\d+) seconds is required")
_RE_FLOOD_WAIT_BASIC = re.compile(r"FLOOD_WAIT_(\d+)")
_RE_FLOOD_WAIT_PREMIUM = re.compile(r"FLOOD_PREMIUM_WAIT_(\d+)")

_RE_PHONE = re.compile(r"\+?[0-9]{10,13}")


def _error_text(err: Any) -> str | None:
    if err is None:
        return None
    return str(err)


def get_error_code(err: Any) -> tuple[int, int]:
    """Return the datacenter and the error code mentioned in an error."""
    text = _error_text(err)
    if text is None:
        return 0, 0
    dc_match = _RE_DATA_CENTER.search(text)
    code_match = _RE_CODE.search(text)
    datacenter = int(dc_match.group(1)) if dc_match else 0
    code = int(code_match.group(1)) if code_match else 0
    return datacenter, code


def get_flood_wait(err: Any) -> int:
    """Return the number of seconds a flood-wait error asks for, or 0."""
    text = _error_text(err)
    if text is None:
        return 0
    for pattern in (_RE_FLOOD_WAIT, _RE_FLOOD_WAIT_BASIC, _RE_FLOOD_WAIT_PREMIUM):
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return 0


def match_error(err: Any, text: str) -> bool:
    """Tell whether the error message contains the given text."""
    message = _error_text(err)
    return message is not None and text in message


def generate_random_long() -> int:
    """Return a random non-negative 64-bit identifier built of two 31-bit halves."""
    return random.getrandbits(31) << 32 | random.getrandbits(31)


def is_url(value: str) -> bool:
    """Tell whether the string parses as a URL with a scheme and a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_phone(phone: str) -> bool:
    """Tell whether the string looks like a phone number of 10 to 13 digits."""
    return _RE_PHONE.fullmatch(phone) is not None


def size_to_human(size: int) -> str:
    """Format a byte count with B, KB, MB or GB."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / 1024 / 1024:.2f} MB"
    return f"{size / 1024 / 1024 / 1024:.2f} GB"


def path_is_dir(path: str) -> bool:
    """Tell whether the path ends with a directory separator."""
    return path.endswith("/") or path.endswith("\\")


def sanitize_path(path: str, filename: str) -> str:
    """Join the file name onto the path when the path names a directory."""
    if path_is_dir(path):
        return os.path.normpath(os.path.join(path, filename))
    return path


def log_prefix(logger_name: str, session_name: str) -> str:
    """Build the prefix used for a logger's lines."""
    if not session_name:
        return f"[{logger_name}]"
    return f"[{logger_name}] {{{session_name}}}"


def parse_int32(value: Any) -> int:
    """Convert an integer to a wrapped signed 32-bit value; anything else gives 0."""
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return (value + 2**31) % 2**32 - 2**31
"""String, truthiness and conversion helpers."""

from __future__ import annotations

import hashlib
import re
import sys
from collections.abc import Callable, Iterable

_TRUTHY_VALUES = frozenset({"1", "YES", "TRUE", "OK"})
_FALSY_VALUES = frozenset({"0", "NO", "FALSE", "BLANK"})
_STATE_STATUS = {True: "enable", False: "disable"}

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def contains(items: Iterable[str], key: str) -> bool:
    """Return True if ``key`` is one of ``items``."""
    return key in items


def contains_ignored_case(items: Iterable[str], key: str) -> bool:
    """Return True if ``key`` is one of ``items``, ignoring case."""
    lowered = key.lower()
    return any(item.lower() == lowered for item in items)


def match_ignored_case(keys: Iterable[str], s: str) -> bool:
    """Return True if any of ``keys`` occurs within ``s``, ignoring case."""
    lowered = s.lower()
    return any(key.lower() in lowered for key in keys)


def remove_string(items: Iterable[str], s: str) -> list[str]:
    """Return ``items`` without any occurrence of ``s``."""
    return [item for item in items if item != s]


def is_match_regex(regex: str, s: str) -> bool:
    """Return True if ``regex`` matches anywhere in ``s``."""
    return re.search(regex, s) is not None


def check_truthy(value: str) -> bool:
    """Return True if ``value`` is one of the accepted true spellings."""
    return value.upper() in _TRUTHY_VALUES


def check_falsy(value: str) -> bool:
    """Return True if ``value`` is one of the accepted false spellings or empty."""
    if not value:
        value = "blank"
    return value.upper() in _FALSY_VALUES


def check_err(err: BaseException | None, handler: Callable[[str], object]) -> None:
    """Pass the message of ``err`` to ``handler`` if there is an error."""
    if err is None:
        return
    handler(str(err))


def fatal(msg: str) -> None:
    """Write ``msg`` to standard error, if any, and exit with status 1."""
    if msg:
        if not msg.endswith("\n"):
            msg += "\n"
        sys.stderr.write(msg)
        sys.stderr.flush()
    sys.exit(1)


def string_to_int32(value: str) -> int:
    """Parse a decimal string into a 32-bit signed integer.

    Raises ValueError for empty, malformed or out-of-range input.
    """
    if not value:
        raise ValueError("Nil value to convert")
    if _INT_PATTERN.fullmatch(value) is None:
        raise ValueError(f"invalid syntax: {value!r}")
    number = int(value, 10)
    if not _INT32_MIN <= number <= _INT32_MAX:
        raise ValueError(f"value out of range: {value!r}")
    return number


def str_to_int32(value: str) -> int | None:
    """Parse a decimal string into a 32-bit integer, or None on failure."""
    try:
        return string_to_int32(value)
    except ValueError:
        return None


def hash_string(s: str) -> str:
    """Return the hexadecimal MD5 digest of ``s``."""
    return hashlib.md5(s.encode("utf-8")).hexdigest()


def state_status(state: bool) -> str:
    """Return "enable" for a true state and "disable" otherwise."""
    status = _STATE_STATUS[bool(state)]
    return status
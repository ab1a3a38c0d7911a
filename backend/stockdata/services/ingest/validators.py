from __future__ import annotations

import math
import re
from datetime import date

_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def is_valid_date(value) -> bool:
    """
    Strict YYYY-MM-DD check. The value must be a real calendar day: '2024-02-30' fails.
    No surrounding whitespace, no time component.
    """
    if not isinstance(value, str):
        return False
    match = _ISO_DATE.fullmatch(value)
    if not match:
        return False
    year, month, day = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def is_numeric(value) -> bool:
    """
    True when the trimmed value is a finite decimal literal ('150', '-1.5', '.5', '1e6').
    Rejects blanks, NaN/Infinity, hex and underscore separators.
    """
    if not isinstance(value, str):
        return False
    text = value.strip()
    if not _DECIMAL.fullmatch(text):
        return False
    return math.isfinite(float(text))

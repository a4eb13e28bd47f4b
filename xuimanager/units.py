# -*- coding: utf-8 -*-
"""
Byte quantity helpers.

docker stats reports NetIO as "1.5MB / 300kB"; each half is parsed here.
Units step by 1024: B, kB, MB, GB, TB, PB.
"""

import re
from typing import Optional

UNITS = ("B", "kB", "MB", "GB", "TB", "PB")
GB = 1024 ** 3

_QUANTITY = re.compile(r"^([0-9]*\.?[0-9]+)([A-Za-z]+)$")


def safe_int(v, default=0):
    try:
        return int(v)
    except Exception:
        try:
            return int(float(v))
        except Exception:
            return default


def parse_quantity(text) -> Optional[int]:
    """Return the byte count for "<number><unit>", or None if malformed."""
    if not isinstance(text, str):
        return None
    s = "".join(text.split())
    m = _QUANTITY.match(s)
    if not m:
        return None
    num, unit = m.groups()
    if unit not in UNITS:
        return None
    power = UNITS.index(unit)
    # round half up, like printf "%.0f" on the values docker prints
    return int(float(num) * (1024 ** power) + 0.5)


def human_to_bytes(text) -> int:
    """Permissive variant of parse_quantity: anything unparsable is 0."""
    n = parse_quantity(text)
    return n if n is not None else 0


def bytes_to_human(n: int, unit: Optional[str] = None) -> str:
    n = max(0, safe_int(n))
    if unit is None:
        unit = "B"
        for u in reversed(UNITS):
            if n >= 1024 ** UNITS.index(u):
                unit = u
                break
    power = UNITS.index(unit)
    if power == 0:
        return f"{n}B"
    return f"{n / (1024 ** power):.2f}{unit}"


def bytes_to_gb(n: int) -> float:
    return round(safe_int(n) / GB, 2)


def percent_used(used_bytes: int, quota_gb: int) -> float:
    if not quota_gb or quota_gb <= 0:
        return 0.0
    return (float(used_bytes) / float(quota_gb * GB)) * 100.0

import re
from typing import Optional
from urllib.parse import urlencode

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_leading_int(value) -> Optional[int]:
    """Integer at the start of ``value`` ("1500abc" -> 1500), or None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def clean_params(params: dict) -> dict:
    clean = {}
    for k, v in params.items():
        if v is None:
            continue
        if isinstance(v, (list, tuple)) and len(v) == 0:
            continue
        clean[k] = v
    return clean


def qs(params: dict) -> str:
    return urlencode(clean_params(params), doseq=True)

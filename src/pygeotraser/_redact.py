"""Helpers for safe debug logging.

Submissions carry user identifiers and precise positions.  Each sensitive
key maps to a masking rule: identifiers are hidden, coordinates are
coarsened to roughly one kilometre.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

_MAX_DEPTH = 20


def _hide(_value: Any) -> str:
    return "<redacted>"


def _coarsen(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _hide(value)
    return round(float(value), 2)


_KEY_RULES: dict[str, Callable[[Any], Any]] = {
    "usuarioid": _hide,
    "usuario_id": _hide,
    "user_id": _hide,
    "authorization": _hide,
    "cookie": _hide,
    "nadadorlat": _coarsen,
    "nadadorlng": _coarsen,
    "latitude": _coarsen,
    "longitude": _coarsen,
    "lat": _coarsen,
    "lon": _coarsen,
    "lng": _coarsen,
}


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with identifiers and positions masked."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, Mapping):
        out: dict[str, Any] = {}
        for key, item in value.items():
            rule = _KEY_RULES.get(str(key).lower())
            if rule is not None:
                out[str(key)] = rule(item)
            else:
                out[str(key)] = redact_for_log(item, max_string=max_string, _depth=_depth + 1)
        return out
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)

"""
Duration strings in the ``1h2m3.5s`` notation.

``WORKER_INTERVAL`` is written in the compact notation used by the deployment:
a sequence of decimal numbers, each with an optional fraction and a unit
suffix (``ns``, ``us``, ``µs``, ``ms``, ``s``, ``m``, ``h``), with an optional
leading sign. ``"0"`` alone is also accepted.

Example:
    >>> parse_duration("1m30s")
    90.0
    >>> format_duration(90.0)
    '1m30s'
    >>> resolve_interval("bad-value")
    10.0
"""

from __future__ import annotations

import re

DEFAULT_INTERVAL_SECONDS = 10.0

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT_RE = re.compile(
    r"""
    (?P<number>\d+(?:\.\d*)?|\.\d+)   # 10, 1.5, .5
    (?P<unit>ns|us|µs|μs|ms|s|m|h)    # longest units first
    """,
    re.VERBOSE,
)


def parse_duration(value: str) -> float | None:
    """Parse a duration string into seconds.

    Returns ``None`` when the string is empty or malformed.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0
    if not text:
        return None

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT_RE.match(text, pos)
        if match is None:
            return None
        total += float(match.group("number")) * _UNIT_SECONDS[match.group("unit")]
        pos = match.end()

    return sign * total


def resolve_interval(value: str | None, default: float = DEFAULT_INTERVAL_SECONDS) -> float:
    """Parse a loop interval, falling back to ``default`` when unusable.

    Missing, malformed, zero and negative values all fall back.
    """
    parsed = parse_duration(value or "")
    if parsed is None or parsed <= 0:
        return default
    return parsed


def _with_fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = str(frac).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(seconds: float) -> str:
    """Render seconds in the same notation, e.g. ``10s``, ``1m30s``, ``500ms``."""
    nanos = round(abs(seconds) * 1_000_000_000)
    if nanos == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""

    if nanos < 1_000:
        return f"{sign}{nanos}ns"
    if nanos < 1_000_000:
        return f"{sign}{_with_fraction(nanos, 1_000)}µs"
    if nanos < 1_000_000_000:
        return f"{sign}{_with_fraction(nanos, 1_000_000)}ms"

    hours, rem = divmod(nanos, 3_600 * 1_000_000_000)
    minutes, rem = divmod(rem, 60 * 1_000_000_000)
    secs = f"{_with_fraction(rem, 1_000_000_000)}s"

    if hours:
        return f"{sign}{hours}h{minutes}m{secs}"
    if minutes:
        return f"{sign}{minutes}m{secs}"
    return f"{sign}{secs}"


__all__ = [
    "DEFAULT_INTERVAL_SECONDS",
    "parse_duration",
    "resolve_interval",
    "format_duration",
]

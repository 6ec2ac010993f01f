"""
Duration parsing and formatting.

Durations are integer milliseconds. ``0`` means disabled.
"""
import re
from typing import Optional

_DURATION_RE = re.compile(r"^(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$")
_ZERO_UNIT_RE = re.compile(r"^0[hms]$")


def parse_duration(text: str) -> Optional[int]:
    """
    Parse a duration string to milliseconds.

    Supports formats: "0", "30s", "30m", "1h", "2h30m", "1h15m30s"

    Args:
        text: Duration string (case-insensitive, surrounding whitespace ignored)

    Returns:
        Milliseconds, or None if invalid format

    Examples:
        "30m" -> 1800000
        "2h30m" -> 9000000
        "abc" -> None
    """
    trimmed = text.strip().lower()
    if trimmed == "0":
        return 0

    match = _DURATION_RE.match(trimmed)
    if not match:
        return None

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    if hours == 0 and minutes == 0 and seconds == 0 and not _ZERO_UNIT_RE.match(trimmed):
        return None

    return (hours * 3600 + minutes * 60 + seconds) * 1000


def _split(ms: int):
    seconds = ms // 1000
    minutes = seconds // 60
    hours = minutes // 60
    return hours, minutes % 60, seconds % 60, minutes


def format_duration(ms: int) -> str:
    """Compact form: "2h30m", "1m30s", "0" for zero"""
    if ms == 0:
        return "0"

    hours, minutes, seconds, _ = _split(ms)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    # Seconds are noise once a duration reaches an hour
    if seconds > 0 and hours == 0:
        parts.append(f"{seconds}s")
    return "".join(parts) or "0s"


def format_duration_verbose(ms: int) -> str:
    """Long form: "2 hours 34 minutes", "disabled" for zero"""
    if ms == 0:
        return "disabled"

    hours, minutes, seconds, total_minutes = _split(ms)
    parts = []
    if hours > 0:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes > 0:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    if seconds > 0 and hours == 0 and total_minutes < 5:
        parts.append(f"{seconds} second{'s' if seconds != 1 else ''}")
    return " ".join(parts) or "0 seconds"

import re

# e.g., "10", "10s", "500ms", "1m30s", "  2s  ", "1.5s"
DURATION_RE = re.compile(
    r"(?i)^\s*(?:(\d+(?:\.\d+)?)\s*m(?!s))?\s*(?:(\d+(?:\.\d+)?)\s*s)?\s*(?:(\d+)\s*ms)?\s*$"
)
PLAIN_NUMBER_RE = re.compile(r"^\s*\d+(?:\.\d+)?\s*$")


def parse_duration(s: str) -> float:
    """
    Parse duration strings like '10', '10s', '500ms', '1m30s', '1.5s'.
    A bare number means seconds. Returns total seconds (float).
    Raises ValueError on bad input or zero.
    """
    if s is None or not str(s).strip():
        raise ValueError("duration string is empty")
    s = str(s)
    if PLAIN_NUMBER_RE.match(s):
        total = float(s)
    else:
        m = DURATION_RE.match(s)
        if not m or not any(m.groups()):
            raise ValueError(f"Invalid duration format: {s!r}")
        mins, secs, millis = m.groups()
        total = 0.0
        if mins:   total += float(mins) * 60
        if secs:   total += float(secs)
        if millis: total += int(millis) / 1000
    if total <= 0:
        raise ValueError("duration must be > 0 seconds")
    return total


def parse_positive_int(s, name: str) -> int:
    try:
        value = int(str(s).strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {s!r}")
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value

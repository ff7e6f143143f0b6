"""Pure schedule arithmetic for the speaker timeline.

Times are "HH:MM" strings in 24-hour venue-local time, compared as minutes
since midnight. No overnight spans: a window always has start < end.

Two conventions coexist on purpose:
- Overlap uses half-open windows, so back-to-back slots (09:00-10:00 and
  10:00-11:00) never conflict.
- is_live is inclusive at both ends, so a speaker is still live during the
  final minute of their slot.
"""

import re
from collections.abc import Iterable
from typing import Protocol, TypeVar

from kiosk.errors import ApiErrorCode, InvalidRequestError

HHMM_PATTERN = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")
MINUTES_PER_DAY = 24 * 60


class TimeWindow(Protocol):
    start_time: str
    end_time: str


W = TypeVar("W", bound=TimeWindow)


def parse_hhmm(value: str | None) -> int:
    """Parse "H:MM" or "HH:MM" into minutes since midnight.

    Raises:
        InvalidRequestError: If the value is not a valid 24-hour time.
    """
    match = HHMM_PATTERN.match((value or "").strip())
    if match is None:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_TIME, f"Invalid time '{value}'. Expected HH:MM"
        )

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if hour > 23 or minute > 59:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_TIME, f"Invalid time '{value}'. Expected HH:MM"
        )
    return hour * 60 + minute


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_hhmm(value: str | None) -> str:
    """Validate a time and return it zero-padded, e.g. "9:05" -> "09:05"."""
    return format_minutes(parse_hhmm(value))


def validate_window(start_time: str, end_time: str) -> tuple[int, int]:
    """Parse a window and require end strictly after start.

    Raises:
        InvalidRequestError: E_INVALID_TIME for malformed times,
            E_INVALID_TIME_WINDOW when end <= start.
    """
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end <= start:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_TIME_WINDOW, "End time must be after start time"
        )
    return start, end


def windows_overlap(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Whether [start, end) conflicts with [other_start, other_end).

    Conflict when the new start falls inside the other window, the new end
    falls inside it, or the new window encloses it. Touching boundaries do
    not conflict.
    """
    return (
        (other_start <= start < other_end)
        or (other_start < end <= other_end)
        or (start <= other_start and end >= other_end)
    )


def find_conflict(start: int, end: int, existing: Iterable[W]) -> W | None:
    """Return the first window in `existing` that overlaps [start, end), if any."""
    for window in existing:
        if windows_overlap(start, end, parse_hhmm(window.start_time), parse_hhmm(window.end_time)):
            return window
    return None


def is_live(start: int, end: int, at: int) -> bool:
    """Whether a slot is live at minute `at`. Inclusive at both ends."""
    return start <= at <= end


def resolve_live(windows: Iterable[W], at: int) -> W | None:
    """Pick the single live slot at minute `at`.

    At a shared boundary both adjacent slots satisfy is_live; the one that
    starts latest (the incoming slot) wins.
    """
    live = [
        w
        for w in windows
        if is_live(parse_hhmm(w.start_time), parse_hhmm(w.end_time), at)
    ]
    if not live:
        return None
    return max(live, key=lambda w: parse_hhmm(w.start_time))

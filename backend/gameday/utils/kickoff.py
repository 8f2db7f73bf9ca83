"""
Kickoff text helpers shared by the broadcast board

ESPN reports kickoff as free text such as "Sun, September 7th at 4:05 PM EDT".
Everything here is tolerant of malformed input: parsing failures turn into
an infinite sort key, never an exception.
"""
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

UNPARSEABLE = math.inf

MONTHS = {
    'january': 1, 'february': 2, 'march': 3, 'april': 4, 'may': 5, 'june': 6,
    'july': 7, 'august': 8, 'september': 9, 'october': 10, 'november': 11, 'december': 12,
}

# Hours relative to UTC for the US zones used in NFL listings
TZ_OFFSETS_HOURS = {
    'EDT': -4, 'EST': -5,
    'CDT': -5, 'CST': -6,
    'MDT': -6, 'MST': -7,
    'PDT': -7, 'PST': -8,
}

# Generic labels are treated as standard time for ordering purposes
TZ_ALIASES = {'ET': 'EST', 'PT': 'PST', 'CT': 'CST', 'MT': 'MST'}

KICKOFF_RE = re.compile(
    r'^\s*[A-Za-z]{3,9},\s*([A-Za-z]+)\s+(\d{1,2})(?:st|nd|rd|th)?\s+at\s+'
    r'(\d{1,2}):(\d{2})\s*(AM|PM)\s*([A-Za-z]{2,3})?\s*$'
)
CLOCK_RE = re.compile(r'(\d{1,2}):(\d{2})\s*(AM|PM)', re.IGNORECASE)
EVENING_RE = re.compile(r'(\d{1,2}):(\d{2})\s*PM', re.IGNORECASE)

# Slot labels
THURSDAY_NIGHT = 'Thursday Night'
FRIDAY_NIGHT = 'Friday Night'
MONDAY_NIGHT = 'Monday Night'
SATURDAY = 'Saturday'
SUNDAY_NIGHT = 'Sunday Night'
LATE = 'Late'
EARLY = 'Early'
SUNDAY = 'Sunday'
GAMES = 'Games'

_WEEKNIGHT_SLOTS = (
    ('thu', THURSDAY_NIGHT),
    ('fri', FRIDAY_NIGHT),
    ('mon', MONDAY_NIGHT),
    ('sat', SATURDAY),
)

def to_24_hour(hour: int, meridiem: str) -> int:
    meridiem = meridiem.upper()
    if meridiem == 'AM':
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12

def parse_kickoff(time_display: Optional[str], year: Optional[int]) -> float:
    """Parse ESPN kickoff text into UTC epoch seconds, or UNPARSEABLE

    Unknown or missing timezone codes are read as UTC. That is an
    approximation, but every game in a week goes through the same rule so the
    relative order stays usable.
    """
    if not time_display or not year:
        return UNPARSEABLE

    match = KICKOFF_RE.match(time_display)
    if not match:
        return UNPARSEABLE

    month_name, day_str, hour_str, minute_str, meridiem, tz_raw = match.groups()
    month = MONTHS.get(month_name.lower())
    if month is None:
        return UNPARSEABLE

    tz = (tz_raw or '').upper()
    tz = TZ_ALIASES.get(tz, tz)
    offset = TZ_OFFSETS_HOURS.get(tz, 0)

    try:
        hour = to_24_hour(int(hour_str), meridiem)
        local = datetime(int(year), month, int(day_str), hour, int(minute_str), tzinfo=timezone.utc)
        return (local - timedelta(hours=offset)).timestamp()
    except (TypeError, ValueError, OverflowError):
        return UNPARSEABLE

def get_time_slot_context(time_display: Optional[str]) -> str:
    """Bucket kickoff text into a day/time slot label"""
    lower = (time_display or '').lower()

    for needle, slot in _WEEKNIGHT_SLOTS:
        if needle in lower:
            return slot

    if 'sun' in lower:
        match = CLOCK_RE.search(time_display)
        if not match:
            return SUNDAY
        hour24 = to_24_hour(int(match.group(1)), match.group(3))
        if hour24 >= 19:
            return SUNDAY_NIGHT
        if hour24 >= 16:
            return LATE
        return EARLY

    return GAMES

def is_confirmed_slot(time_display: Optional[str]) -> bool:
    """Weeknight games and the Sunday night window are treated as confirmed"""
    lower = (time_display or '').lower()

    if any(needle in lower for needle, _ in _WEEKNIGHT_SLOTS):
        return True

    if 'sun' in lower:
        match = EVENING_RE.search(time_display)
        if match:
            # 12 PM is noon, not evening
            return to_24_hour(int(match.group(1)), 'PM') >= 19

    return False

def is_405_game(time_display: Optional[str]) -> bool:
    return '4:05 PM' in (time_display or '')

# firewood_ops/utils/recurrence.py
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

WEEKLY = "weekly"
BIWEEKLY = "biweekly"
MONTHLY = "monthly"
FREQUENCIES = (WEEKLY, BIWEEKLY, MONTHLY)

# Spellings used by the order-entry forms
_FREQUENCY_ALIASES = {
    "bi-weekly": BIWEEKLY,
    "bi_weekly": BIWEEKLY,
}


def weekday_name(d: date) -> str:
    """Locale independent weekday name, e.g. 'monday'."""
    return WEEKDAYS[d.weekday()]


def normalize_frequency(value: Optional[str]) -> Optional[str]:
    """Lowercase a stored frequency and map aliases. Unknown values return None."""
    if not value:
        return None
    freq = value.strip().lower()
    freq = _FREQUENCY_ALIASES.get(freq, freq)
    return freq if freq in FREQUENCIES else None


def normalize_weekday(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    day = value.strip().lower()
    return day if day in WEEKDAYS else None


def anchor_date(created_at) -> Optional[date]:
    """Calendar day an order was created on. Aware datetimes are read in UTC."""
    if created_at is None:
        return None
    if isinstance(created_at, datetime):
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc)
        return created_at.date()
    return created_at


def weeks_between(start: date, end: date) -> int:
    # Floors toward negative infinity when end < start
    return (end - start).days // 7


def first_weekday_of_month(d: date, weekday: str) -> date:
    """Scan forward from the 1st of d's month to the first given weekday."""
    target = WEEKDAYS.index(weekday)
    day = d.replace(day=1)
    while day.weekday() != target:
        day += timedelta(days=1)
    return day


def frequency_applies(frequency: Optional[str], created_at, target: date) -> bool:
    """
    Frequency half of qualification. The caller has already matched the
    preferred weekday against target.

    - weekly: always
    - biweekly: even number of whole weeks since the creation date
    - monthly: target is the first occurrence of its weekday in its month
    - anything else: treated as weekly
    """
    freq = normalize_frequency(frequency)

    if freq == BIWEEKLY:
        anchor = anchor_date(created_at)
        if anchor is None:
            return True
        return weeks_between(anchor, target) % 2 == 0

    if freq == MONTHLY:
        first = first_weekday_of_month(target, weekday_name(target))
        return first.day == target.day

    return True


def fires_on(frequency: Optional[str], preferred_day: Optional[str], created_at, target: date) -> bool:
    """Full qualification: weekday gate first, then the frequency rule."""
    if normalize_weekday(preferred_day) != weekday_name(target):
        return False
    return frequency_applies(frequency, created_at, target)


def next_occurrences(
    frequency: Optional[str],
    preferred_day: Optional[str],
    created_at,
    start: date,
    count: int,
) -> List[date]:
    """Next `count` dates on or after start on which an order would be synced."""
    day = normalize_weekday(preferred_day)
    if day is None or count <= 0:
        return []

    offset = (WEEKDAYS.index(day) - start.weekday()) % 7
    current = start + timedelta(days=offset)

    occurrences = []
    # monthly needs at most 5 weeks per hit
    for _ in range(count * 6):
        if frequency_applies(frequency, created_at, current):
            occurrences.append(current)
            if len(occurrences) == count:
                break
        current += timedelta(days=7)
    return occurrences

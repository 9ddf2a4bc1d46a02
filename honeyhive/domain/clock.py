from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def load_timezone(name: str) -> ZoneInfo:
    # ZoneInfoNotFoundError is left to propagate: no reset can be scheduled without it
    return ZoneInfo(name)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def civil_date_in(tz: ZoneInfo, instant: datetime) -> date:
    return instant.astimezone(tz).date()


def utc_offset_at(tz: ZoneInfo, instant: datetime) -> timedelta:
    """Local time minus UTC at the given instant."""
    return instant.astimezone(tz).utcoffset()


def next_midnight(tz: ZoneInfo, now: datetime) -> datetime:
    """UTC instant of the next local midnight in ``tz`` strictly after ``now``.

    Tomorrow's 00:00 is first read as if it were UTC, then shifted by the
    offset that holds at that target rather than the offset of ``now``, so a
    DST change between now and the boundary lands on the right instant. The
    offset is checked once more at the corrected instant in case a transition
    falls between the naive guess and the real midnight.
    """
    tomorrow = civil_date_in(tz, now) + timedelta(days=1)
    guess = datetime.combine(tomorrow, time(0, 0), tzinfo=timezone.utc)

    target = guess - utc_offset_at(tz, guess)
    offset = utc_offset_at(tz, target)
    if guess - offset != target:
        target = guess - offset
    return target


def today_str(tz: ZoneInfo, instant: datetime | None = None) -> str:
    return civil_date_in(tz, instant or utc_now()).isoformat()

# src/taskmanagerx/tasks/dates.py

from __future__ import annotations

"""
Date helpers.

Pure functions, no hidden state. Every function that depends on "now" accepts
an explicit `now=` so callers (and tests) control the clock.

Conventions:
- stored dates are ISO-8601 strings;
- in memory they are timezone-aware datetimes;
- a naive value is interpreted as local time;
- calendar-day comparisons happen in local time.
"""

import math
import re
from datetime import date, datetime, timedelta
from enum import StrEnum

from dateutil.parser import isoparse

DEFAULT_PATTERN = "dd/MM/yyyy"
DATETIME_PATTERN = "dd/MM/yyyy HH:mm"
DEFAULT_LOCALE = "pt-BR"

_MONTHS: dict[str, tuple[str, ...]] = {
    "pt-BR": (
        "janeiro", "fevereiro", "março", "abril", "maio", "junho",
        "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
    ),
    "en-US": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
}

_MONTHS_SHORT: dict[str, tuple[str, ...]] = {
    "pt-BR": ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"),
    "en-US": ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
}

# Monday first, matching datetime.weekday().
_WEEKDAYS: dict[str, tuple[str, ...]] = {
    "pt-BR": (
        "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
        "sexta-feira", "sábado", "domingo",
    ),
    "en-US": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
}

_WEEKDAYS_SHORT: dict[str, tuple[str, ...]] = {
    "pt-BR": ("seg", "ter", "qua", "qui", "sex", "sáb", "dom"),
    "en-US": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
}

_RELATIVE_LABELS: dict[str, dict[str, str]] = {
    "pt-BR": {"today": "Hoje", "tomorrow": "Amanhã", "yesterday": "Ontem"},
    "en-US": {"today": "Today", "tomorrow": "Tomorrow", "yesterday": "Yesterday"},
}

_TOKEN_RE = re.compile(r"'[^']*'|yyyy|yy|MMMM|MMM|MM|M|dd|d|EEEE|EEE|HH|H|mm|ss")


class RelativeDay(StrEnum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    YESTERDAY = "yesterday"
    OTHER = "other"


DateLike = str | datetime


def local_now() -> datetime:
    """Current instant as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


def parse_iso(value: DateLike) -> datetime:
    """Parse an ISO-8601 string (or pass a datetime through) into an aware datetime."""
    dt = value if isinstance(value, datetime) else isoparse(value)
    if dt.tzinfo is None:
        # astimezone() on a naive datetime assumes local time.
        dt = dt.astimezone()
    return dt


def to_iso(dt: datetime) -> str:
    return parse_iso(dt).isoformat()


def _local(value: DateLike) -> datetime:
    return parse_iso(value).astimezone()


def _lookup(table: dict[str, tuple[str, ...]], locale: str) -> tuple[str, ...]:
    return table.get(locale) or table[DEFAULT_LOCALE]


def format_date(value: DateLike, pattern: str = DEFAULT_PATTERN, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a date with date-fns/CLDR style tokens.

    Supported: yyyy yy MMMM MMM MM M dd d EEEE EEE HH H mm ss, and 'quoted' literals.
    Anything else is copied through unchanged.
    """
    dt = _local(value)

    def repl(m: re.Match[str]) -> str:
        tok = m.group(0)
        if tok.startswith("'"):
            return tok[1:-1]
        if tok == "yyyy":
            return f"{dt.year:04d}"
        if tok == "yy":
            return f"{dt.year % 100:02d}"
        if tok == "MMMM":
            return _lookup(_MONTHS, locale)[dt.month - 1]
        if tok == "MMM":
            return _lookup(_MONTHS_SHORT, locale)[dt.month - 1]
        if tok == "MM":
            return f"{dt.month:02d}"
        if tok == "M":
            return str(dt.month)
        if tok == "dd":
            return f"{dt.day:02d}"
        if tok == "d":
            return str(dt.day)
        if tok == "EEEE":
            return _lookup(_WEEKDAYS, locale)[dt.weekday()]
        if tok == "EEE":
            return _lookup(_WEEKDAYS_SHORT, locale)[dt.weekday()]
        if tok == "HH":
            return f"{dt.hour:02d}"
        if tok == "H":
            return str(dt.hour)
        if tok == "mm":
            return f"{dt.minute:02d}"
        return f"{dt.second:02d}"

    return _TOKEN_RE.sub(repl, pattern)


def format_datetime(value: DateLike, locale: str = DEFAULT_LOCALE) -> str:
    return format_date(value, DATETIME_PATTERN, locale)


def classify_relative(value: DateLike, *, now: datetime | None = None) -> RelativeDay:
    day = _local(value).date()
    today = _local(now or local_now()).date()
    diff = (day - today).days
    if diff == 0:
        return RelativeDay.TODAY
    if diff == 1:
        return RelativeDay.TOMORROW
    if diff == -1:
        return RelativeDay.YESTERDAY
    return RelativeDay.OTHER


def format_relative(
    value: DateLike,
    *,
    now: datetime | None = None,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Hoje / Amanhã / Ontem, or the absolute date for anything else."""
    rel = classify_relative(value, now=now)
    if rel is RelativeDay.OTHER:
        return format_date(value, DEFAULT_PATTERN, locale)
    labels = _RELATIVE_LABELS.get(locale) or _RELATIVE_LABELS[DEFAULT_LOCALE]
    return labels[rel.value]


def is_overdue(value: DateLike, *, now: datetime | None = None) -> bool:
    """True iff now is strictly after the instant (full instants, not calendar days)."""
    return parse_iso(now or local_now()) > parse_iso(value)


def is_due_today(value: DateLike, *, now: datetime | None = None) -> bool:
    return classify_relative(value, now=now) is RelativeDay.TODAY


def is_due_tomorrow(value: DateLike, *, now: datetime | None = None) -> bool:
    return classify_relative(value, now=now) is RelativeDay.TOMORROW


def days_until(value: DateLike, *, now: datetime | None = None) -> int:
    """Ceiling of (date - now) in days. Negative once the date has passed."""
    delta = parse_iso(value) - parse_iso(now or local_now())
    return math.ceil(delta / timedelta(days=1))


def at_local_time(day: date, hour: int, minute: int = 0) -> datetime:
    """Aware datetime for `hour:minute` local time on the given calendar day."""
    return datetime(day.year, day.month, day.day, hour, minute).astimezone()


def parse_time_of_day(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute). Raises ValueError on anything else."""
    m = re.fullmatch(r"\s*(\d{1,2}):(\d{2})\s*", value or "")
    if not m:
        raise ValueError(f"invalid time of day: {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"invalid time of day: {value!r}")
    return hour, minute

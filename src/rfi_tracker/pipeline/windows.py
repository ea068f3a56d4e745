"""Canonical time windows at day, month, and year granularity.

A window is the half-open UTC interval [start, end) whose start is aligned
to the granularity and whose end is the canonical successor of start.
Anchors on a boundary belong to the window they start.
"""

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

__all__ = ['Granularity', 'TimeWindow', 'canonical_window', 'coerce_anchor']

AnchorLike = Union[date, datetime, str]


class Granularity(str, Enum):
    """Temporal aggregation level. Values double as stable layer ids."""
    DAY = "Day"
    MONTH = "Month"
    YEAR = "Year"

    @property
    def adjective(self) -> str:
        """Label word used in the 'currently viewing' line."""
        return {"Day": "daily", "Month": "monthly", "Year": "yearly"}[self.value]

    @classmethod
    def parse(cls, value) -> "Granularity":
        """Accept enum members, layer ids, or any casing of them."""
        if isinstance(value, Granularity):
            return value
        try:
            return cls(str(value).strip().capitalize())
        except ValueError:
            raise ValueError(
                f"Unknown granularity {value!r}; expected one of Day, Month, Year"
            ) from None


def _utc_midnight(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)


def coerce_anchor(value: AnchorLike) -> date:
    """Normalize an anchor to a UTC calendar date.

    Datetimes are converted to UTC before the date is taken; naive datetimes
    are assumed to already be UTC. Strings are parsed as ISO 8601.
    """
    if isinstance(value, str):
        text = value.strip().replace("Z", "+00:00")
        value = datetime.fromisoformat(text) if "T" in text or " " in text else date.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot use {type(value).__name__} as an anchor date")


def _floor(day: date, granularity: Granularity) -> date:
    if granularity is Granularity.DAY:
        return day
    if granularity is Granularity.MONTH:
        return day.replace(day=1)
    return day.replace(month=1, day=1)


def _successor(start: date, granularity: Granularity) -> date:
    if granularity is Granularity.DAY:
        return start + timedelta(days=1)
    if granularity is Granularity.MONTH:
        if start.month == 12:
            return start.replace(year=start.year + 1, month=1)
        return start.replace(month=start.month + 1)
    return start.replace(year=start.year + 1)


class TimeWindow(BaseModel):
    """Half-open UTC interval aligned to a granularity."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    granularity: Granularity

    @field_validator("start", "end")
    @classmethod
    def require_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_canonical(self):
        """start is aligned and end is its canonical successor."""
        start_day = self.start.date()
        if self.start != _utc_midnight(_floor(start_day, self.granularity)):
            raise ValueError(f"{self.start.isoformat()} is not aligned to {self.granularity.value}")
        if self.end != _utc_midnight(_successor(start_day, self.granularity)):
            raise ValueError(
                f"{self.end.isoformat()} is not the {self.granularity.value} successor of "
                f"{self.start.isoformat()}"
            )
        return self

    def contains(self, instant: datetime) -> bool:
        """True when start <= instant < end (naive instants are UTC)."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return self.start <= instant < self.end

    def contains_date(self, day: date) -> bool:
        return self.contains(_utc_midnight(day))

    def iso_range(self) -> tuple[str, str]:
        """(start, end) as ISO strings, for archive date filters."""
        return self.start.isoformat(), self.end.isoformat()

    def __str__(self) -> str:
        return f"[{self.start.date().isoformat()}, {self.end.date().isoformat()})"


def canonical_window(anchor: AnchorLike, granularity) -> TimeWindow:
    """Return the window at ``granularity`` that contains ``anchor``.

    Parameters
    ----------
    anchor : date, datetime or str
        Any instant inside the wanted window.
    granularity : Granularity or str
        "Day", "Month" or "Year".

    Examples
    --------
    >>> str(canonical_window("2018-06-10", "Year"))
    '[2018-01-01, 2019-01-01)'
    >>> str(canonical_window("2021-01-31", "Month"))
    '[2021-01-01, 2021-02-01)'
    """
    granularity = Granularity.parse(granularity)
    start = _floor(coerce_anchor(anchor), granularity)
    return TimeWindow(
        start=_utc_midnight(start),
        end=_utc_midnight(_successor(start, granularity)),
        granularity=granularity,
    )

"""Resolve temporal phrases into half-open date ranges.

Weeks start on Monday. All arithmetic is done on calendar dates relative
to an injected ``now`` so results are deterministic.
"""

from datetime import date, datetime, timedelta

from querylens.tagging.models import TemporalValue


def _add_months(d: date, months: int) -> date:
    """First day of the month ``months`` away from ``d``'s month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def resolve_day(label: str, offset: int, now: datetime) -> TemporalValue:
    """Resolve today/yesterday/tomorrow style keywords.

    Args:
        label: Normalised phrase
        offset: Day offset from today
        now: Reference time

    Returns:
        TemporalValue covering exactly one day
    """
    start = now.date() + timedelta(days=offset)
    return TemporalValue(label=label, start=start, end=start + timedelta(days=1), single_day=True)


def resolve_period(label: str, offset: int, unit: str, now: datetime) -> TemporalValue:
    """Resolve ``this|last|next week|month|year``.

    Args:
        label: Normalised phrase
        offset: Period offset (0 = current, -1 = previous, 1 = next)
        unit: ``week``, ``month`` or ``year``
        now: Reference time

    Returns:
        TemporalValue spanning the whole period

    Raises:
        ValueError: If unit is not recognised
    """
    today = now.date()
    if unit == "week":
        start = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
        end = start + timedelta(weeks=1)
    elif unit == "month":
        start = _add_months(today, offset)
        end = _add_months(start, 1)
    elif unit == "year":
        start = date(today.year + offset, 1, 1)
        end = date(today.year + offset + 1, 1, 1)
    else:
        raise ValueError(f"Unknown temporal unit: {unit}")
    return TemporalValue(label=label, start=start, end=end, single_day=False)

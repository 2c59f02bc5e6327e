"""Recurring order schedule computations.

Every function takes the reference day explicitly and works on any object
exposing the template attributes (``frequency``, ``day_of_week``,
``day_of_month``, ``start_date``, ``end_date``, ``is_active``,
``next_generation_date``, ``last_generated_at``, ``generated_count`` and,
when present, ``last_occurrence_date``), so the same code serves ORM rows and
plain test doubles.

Weekdays use 0 = Sunday through 6 = Saturday. ``day_of_month`` is capped at 28,
which makes every anchor valid in every month.
"""

from datetime import date, datetime, timedelta

DAILY = "DAILY"
WEEKLY = "WEEKLY"
BIWEEKLY = "BIWEEKLY"
MONTHLY = "MONTHLY"

FREQUENCIES = (DAILY, WEEKLY, BIWEEKLY, MONTHLY)
MAX_DAY_OF_MONTH = 28


def _as_date(value: date | datetime | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def sunday_based_weekday(day: date) -> int:
    """Weekday of ``day`` with Sunday = 0 and Saturday = 6."""
    return day.isoweekday() % 7


def _next_weekday(day: date, day_of_week: int) -> date:
    return day + timedelta(days=(day_of_week - sunday_based_weekday(day)) % 7)


def _add_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def _daily(floor: date, last_generated: date | None) -> date:
    candidate = floor
    if candidate == last_generated:
        candidate += timedelta(days=1)
    return candidate


def _weekly(floor: date, day_of_week: int, last_generated: date | None) -> date:
    candidate = _next_weekday(floor, day_of_week)
    if candidate == last_generated:
        candidate += timedelta(days=7)
    return candidate


def _biweekly(start: date, floor: date, day_of_week: int, last_generated: date | None) -> date:
    first = _next_weekday(start, day_of_week)
    if floor <= first:
        candidate = first
    else:
        cycles = ((floor - first).days + 13) // 14
        candidate = first + timedelta(days=14 * cycles)
    if candidate == last_generated:
        candidate += timedelta(days=14)
    return candidate


def _monthly(floor: date, day_of_month: int, last_generated: date | None) -> date:
    candidate = date(floor.year, floor.month, day_of_month)
    if candidate < floor or candidate == last_generated:
        year, month = _add_month(floor.year, floor.month)
        candidate = date(year, month, day_of_month)
    return candidate


def compute_next_occurrence(template, reference_date: date) -> date | None:
    """Return the first occurrence on or after ``reference_date``, or None once past ``end_date``."""
    start = _as_date(template.start_date)
    floor = max(start, reference_date)
    last_generated = _as_date(template.last_generated_at)
    frequency = template.frequency

    if frequency == DAILY:
        candidate = _daily(floor, last_generated)
    elif frequency == WEEKLY:
        candidate = _weekly(floor, template.day_of_week, last_generated)
    elif frequency == BIWEEKLY:
        candidate = _biweekly(start, floor, template.day_of_week, last_generated)
    elif frequency == MONTHLY:
        candidate = _monthly(floor, template.day_of_month, last_generated)
    else:
        raise ValueError(f"Unsupported frequency: {frequency}")

    end = _as_date(template.end_date)
    if end is not None and candidate > end:
        return None
    return candidate


def should_generate_now(template, reference_date: date) -> bool:
    next_date = _as_date(template.next_generation_date)
    return bool(template.is_active) and next_date is not None and next_date <= reference_date


def mark_generated(template, generated_at: datetime, occurrence_date: date | None = None) -> date | None:
    """Record one generation on ``template`` and advance its cached next occurrence.

    The schedule is recomputed from the day after the generation (or after
    ``occurrence_date`` when a manual run materialized a later occurrence), so a
    second call to :func:`should_generate_now` for the same day returns False.
    Returns the new ``next_generation_date``; ``is_active`` is never touched.
    """
    occurrence = occurrence_date or generated_at.date()
    previous = _as_date(getattr(template, "last_occurrence_date", None))
    if previous is not None and previous > occurrence:
        occurrence = previous
    reference = max(generated_at.date(), occurrence)

    template.generated_count = (template.generated_count or 0) + 1
    template.last_generated_at = generated_at
    template.last_occurrence_date = occurrence
    template.next_generation_date = compute_next_occurrence(template, reference + timedelta(days=1))
    return template.next_generation_date


def resume_reference_date(template, today: date) -> date:
    """Reference day for recomputing a schedule after an edit.

    Never on or before the latest occurrence already materialized, so an edit
    made after generating ahead of schedule cannot bring that occurrence back.
    """
    last_occurrence = _as_date(getattr(template, "last_occurrence_date", None))
    if last_occurrence is not None and last_occurrence >= today:
        return last_occurrence + timedelta(days=1)
    return today

import datetime
from typing import Callable, Iterable

from algorithms.math_tools import MathTools

DAY_MS = 24 * 60 * 60 * 1000

PAIN_DELOAD_LEVEL = 5
PAIN_FREEZE_LEVEL = 3
ACTIVITY_WINDOW_WEEKS = 4


class VolumeAggregator:
    """Derive weekly volume trends and pain flags from a log history.

    Inputs are never filtered by status here; callers decide which logs
    count.
    """

    @staticmethod
    def reps_volume(log) -> float:
        return log.reps or 0

    @staticmethod
    def weighted_volume(log) -> float:
        return (log.reps or 0) * (log.load_kg or 0)

    @staticmethod
    def duration_volume(log) -> float:
        return log.duration_sec or 0

    @staticmethod
    def weekly_volume(
        logs: Iterable, now: int, volume_fn: Callable[[object], float]
    ) -> dict[str, float]:
        """Sum ``volume_fn`` over the current and the previous 7-day window."""
        week_start = now - 7 * DAY_MS
        prev_week_start = now - 14 * DAY_MS
        this_week = 0
        prev_week = 0
        for log in logs:
            if week_start <= log.timestamp < now:
                this_week += volume_fn(log)
            elif prev_week_start <= log.timestamp < week_start:
                prev_week += volume_fn(log)
        return {"volume_this_week": this_week, "volume_prev_week": prev_week}

    @staticmethod
    def summarize_pain_flags(logs: Iterable) -> dict[str, int]:
        """Count pain-flagged logs and estimate active days per week.

        The activity rate assumes the supplied logs span four weeks.
        """
        days: set[datetime.date] = set()
        deload_count = 0
        freeze_days = 0
        for log in logs:
            pain = log.pain or 0
            if pain >= PAIN_DELOAD_LEVEL:
                deload_count += 1
            if pain >= PAIN_FREEZE_LEVEL:
                freeze_days += 1
            days.add(
                datetime.datetime.fromtimestamp(
                    log.timestamp / 1000, tz=datetime.timezone.utc
                ).date()
            )
        return {
            "deload_count": deload_count,
            "freeze_days": freeze_days,
            "active_days_per_week": MathTools.round_half_up(
                len(days) / ACTIVITY_WINDOW_WEEKS * 7
            ),
        }

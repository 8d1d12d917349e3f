from typing import Callable, Iterable, List

from algorithms.aggregation import DAY_MS, VolumeAggregator
from algorithms.math_tools import MathTools


class StatsBuilder:
    """Build per-exercise summary statistics for analytics views.

    Statistics whose source values are empty are left out of the result so
    the display can tell "not computed" from zero. Volume and pain-summary
    keys are always present and cover the full supplied history rather than
    the requested window.
    """

    @staticmethod
    def window(logs: Iterable, window_days: int, now: int) -> List:
        return [log for log in logs if now - log.timestamp <= window_days * DAY_MS]

    @staticmethod
    def _values(logs: Iterable, attr: str) -> list:
        return [getattr(log, attr) for log in logs if getattr(log, attr) is not None]

    @classmethod
    def records(cls, kind: str, logs: List) -> dict:
        """Return the personal records tracked for ``kind``."""
        stats: dict = {}
        if kind in ("reps", "weighted"):
            reps = cls._values(logs, "reps")
            if reps:
                stats["pr_reps"] = max(reps)
        if kind == "weighted":
            loads = cls._values(logs, "load_kg")
            if loads:
                stats["pr_load_kg"] = max(loads)
            estimates = [
                MathTools.estimate_one_rep_max(log.reps, log.load_kg)
                for log in logs
                if log.reps and log.load_kg
            ]
            if estimates:
                stats["best_estimated_1rm"] = max(estimates)
        if kind == "isometric":
            durations = cls._values(logs, "duration_sec")
            if durations:
                stats["pr_duration_sec"] = max(durations)
        return stats

    @classmethod
    def build(
        cls,
        kind: str,
        logs: Iterable,
        window_days: int,
        now: int,
        volume_fn: Callable[[object], float],
    ) -> dict:
        history = list(logs)
        recent = cls.window(history, window_days, now)
        stats = cls.records(kind, recent)

        rir = cls._values(recent, "rir")
        if rir:
            stats["avg_rir"] = MathTools.average(rir)
            stats["median_rir"] = MathTools.median(rir)
        pain = cls._values(recent, "pain")
        if pain:
            stats["avg_pain"] = MathTools.average(pain)

        stats.update(VolumeAggregator.weekly_volume(history, now, volume_fn))
        stats.update(VolumeAggregator.summarize_pain_flags(history))
        return stats

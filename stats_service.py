from __future__ import annotations
from typing import List, Dict

from db import ExerciseRepository, LogRepository
from algorithms.progression import strategy_for
from algorithms.statistics import StatsBuilder
from models import STATUS_COMPLETE, LogEntry, now_ms

WINDOW_CHOICES = (7, 30, 90)


class StatisticsService:
    """Compute exercise statistics and chart series for analysis."""

    def __init__(self, exercise_repo: ExerciseRepository, log_repo: LogRepository) -> None:
        self.exercises = exercise_repo
        self.logs = log_repo

    def _history(self, exercise_id: str, complete_only: bool) -> List[LogEntry]:
        logs = self.logs.fetch_for_exercise(exercise_id)
        if complete_only:
            logs = [log for log in logs if log.status == STATUS_COMPLETE]
        return logs

    @staticmethod
    def _check_window(window_days: int) -> None:
        if window_days not in WINDOW_CHOICES:
            raise ValueError(f"window must be one of {WINDOW_CHOICES}")

    def exercise_stats(
        self,
        exercise_id: str,
        window_days: int = 30,
        complete_only: bool = True,
        now: int | None = None,
    ) -> Dict[str, float]:
        self._check_window(window_days)
        exercise = self.exercises.fetch(exercise_id)
        now = now if now is not None else now_ms()
        history = self._history(exercise_id, complete_only)
        return strategy_for(exercise).compute_stats(history, window_days, now)

    def series(
        self,
        exercise_id: str,
        window_days: int = 30,
        complete_only: bool = True,
        now: int | None = None,
    ) -> Dict[str, List[Dict[str, float]]]:
        """Return chart series over the windowed logs, oldest first."""
        self._check_window(window_days)
        exercise = self.exercises.fetch(exercise_id)
        strategy = strategy_for(exercise)
        now = now if now is not None else now_ms()
        logs = StatsBuilder.window(
            self._history(exercise_id, complete_only), window_days, now
        )
        logs.sort(key=lambda log: log.timestamp)

        def points(values: list) -> List[Dict[str, float]]:
            return [{"x": i, "y": v} for i, v in enumerate(values)]

        if exercise.kind == "isometric":
            metric = [log.duration_sec or 0 for log in logs]
        else:
            metric = [log.reps or 0 for log in logs]
        return {
            "metric": points(metric),
            "load": points([log.load_kg for log in logs if log.load_kg]),
            "rir": points([log.rir for log in logs if log.rir is not None]),
            "pain": points([log.pain for log in logs if log.pain is not None]),
            "volume": points([strategy.volume(log) for log in logs]),
        }

from __future__ import annotations
import datetime
import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from algorithms.aggregation import DAY_MS
from db import LogRepository, SettingsRepository
from models import LogEntry, now_ms
from recommendation_service import RecommendationService

logger = logging.getLogger(__name__)


class LogValidationError(ValueError):
    """Raised when logs fail validation; ``errors`` holds the reasons."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class LogService:
    """Logging actions: quick and detailed logs, undo and daily progress."""

    def __init__(
        self,
        log_repo: LogRepository,
        recommendations: RecommendationService,
        settings_repo: SettingsRepository,
    ) -> None:
        self.logs = log_repo
        self.recommendations = recommendations
        self.settings = settings_repo

    @staticmethod
    def _build(data: dict) -> LogEntry:
        try:
            return LogEntry.model_validate(data)
        except ValidationError as e:
            raise LogValidationError([err["msg"] for err in e.errors()])

    def quick_log(
        self,
        exercise_id: str | None = None,
        template_id: str | None = None,
        now: int | None = None,
        rir: int | None = None,
        pain: int | None = None,
    ) -> list[LogEntry]:
        """Log one complete set per selected exercise at its next target."""
        now = now if now is not None else now_ms()
        entries = []
        for exercise, item in self.recommendations.selection(exercise_id, template_id):
            target = self.recommendations.resolve_target(exercise, item, now)
            entries.append(
                self._build(
                    {
                        "exercise_id": exercise.id,
                        "timestamp": now,
                        "reps": target.get("reps"),
                        "load_kg": target.get("load_kg"),
                        "duration_sec": target.get("duration_sec"),
                        "rir": rir,
                        "pain": pain,
                    }
                )
            )
        for log in entries:
            self.logs.add(log)
        logger.info("quick logged %d set(s)", len(entries))
        return entries

    def detailed_log(self, entries: Iterable[dict], now: int | None = None) -> list[LogEntry]:
        """Validate and save explicitly entered sets.

        Nothing is saved unless every entry is valid.
        """
        now = now if now is not None else now_ms()
        logs = [self._build({"timestamp": now, **entry}) for entry in entries]
        errors: list[str] = []
        for log in logs:
            result = self.recommendations.validate_log(log.exercise_id, log)
            errors.extend(result["errors"])
        if errors:
            raise LogValidationError(errors)
        for log in logs:
            self.logs.add(log)
        logger.info("saved %d detailed set(s)", len(logs))
        return logs

    def undo_last(self) -> Optional[LogEntry]:
        last = self.logs.fetch_latest()
        if last is None:
            return None
        self.logs.delete(last.id)
        logger.info("removed last log %s", last.id)
        return last

    def delete_log(self, log_id: str) -> None:
        self.logs.delete(log_id)

    def today_summary(self, now: int | None = None) -> dict:
        """Return sets done on the UTC day of ``now`` against the daily goal."""
        now = now if now is not None else now_ms()
        day = datetime.datetime.fromtimestamp(now / 1000, tz=datetime.timezone.utc).date()
        start = int(
            datetime.datetime.combine(
                day, datetime.time(), tzinfo=datetime.timezone.utc
            ).timestamp()
            * 1000
        )
        logs = self.logs.fetch_between(start, start + DAY_MS)
        goal = self.settings.app_settings().daily_set_goal
        progress = min(100.0, len(logs) / goal * 100) if goal else 0.0
        return {
            "sets_done": len(logs),
            "daily_goal": goal,
            "progress_pct": progress,
            "logs": [log.to_record() for log in logs],
        }

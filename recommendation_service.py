from __future__ import annotations
import logging
from typing import Optional

from db import ExerciseRepository, LogRepository, TemplateRepository, SettingsRepository
from algorithms.progression import compute_next_target, strategy_for
from models import (
    Exercise,
    LogEntry,
    ProgressionProfile,
    TemplateItem,
    now_ms,
    resolve_profile,
)

logger = logging.getLogger(__name__)

FIXED_TARGET_NOTE = "Fixed target from template."


class RecommendationService:
    """Resolve the next target for exercises and template items."""

    def __init__(
        self,
        exercise_repo: ExerciseRepository,
        log_repo: LogRepository,
        template_repo: TemplateRepository,
        settings_repo: SettingsRepository,
    ) -> None:
        self.exercises = exercise_repo
        self.logs = log_repo
        self.templates = template_repo
        self.settings = settings_repo

    def profile_for(self, exercise: Exercise) -> ProgressionProfile:
        """Return the profile in effect for ``exercise``."""
        return resolve_profile(
            self.settings.progression_defaults(), exercise.progression_profile
        )

    def selection(
        self, exercise_id: str | None = None, template_id: str | None = None
    ) -> list[tuple[Exercise, Optional[TemplateItem]]]:
        """Return the exercises picked by a single id or by a template.

        Template items whose exercise no longer exists are skipped.
        """
        if template_id is not None:
            template = self.templates.fetch(template_id)
            selected = []
            for item in template.items:
                try:
                    exercise = self.exercises.fetch(item.exercise_id)
                except ValueError:
                    logger.debug("template %s skips missing exercise %s", template_id, item.exercise_id)
                    continue
                selected.append((exercise, item))
            return selected
        if exercise_id is None:
            raise ValueError("exercise_id or template_id required")
        return [(self.exercises.fetch(exercise_id), None)]

    def resolve_target(
        self,
        exercise: Exercise,
        item: TemplateItem | None = None,
        now: int | None = None,
    ) -> dict:
        """Return the fixed template target when set, else the engine target."""
        if item is not None and item.target_mode == "fixed" and item.fixed_target:
            target = item.fixed_target.model_dump(exclude_none=True)
            target.setdefault(
                "metric_type", strategy_for(exercise).primary_metric_type()
            )
            target.update(explanation=[FIXED_TARGET_NOTE], frozen=False, deload=False)
            return target
        logs = self.logs.fetch_for_exercise(exercise.id)
        return compute_next_target(
            exercise,
            logs,
            now if now is not None else now_ms(),
            self.profile_for(exercise),
        )

    def next_target(self, exercise_id: str, now: int | None = None) -> dict:
        return self.resolve_target(self.exercises.fetch(exercise_id), None, now)

    def targets_for_template(self, template_id: str, now: int | None = None) -> list[dict]:
        now = now if now is not None else now_ms()
        return [
            {
                "exercise_id": exercise.id,
                "name": exercise.name,
                "target": self.resolve_target(exercise, item, now),
            }
            for exercise, item in self.selection(template_id=template_id)
        ]

    def validate_log(self, exercise_id: str, log: LogEntry) -> dict:
        return strategy_for(self.exercises.fetch(exercise_id)).validate_log(log)

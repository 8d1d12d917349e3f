from __future__ import annotations
import csv
import io
import json
import logging

from pydantic import ValidationError

from db import ExerciseRepository, LogRepository, TemplateRepository, SettingsRepository
from models import LogEntry, Template, parse_exercise
from seed_sample_data import ensure_defaults
from settings_schema import SettingsSchema

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "timestamp",
    "exerciseId",
    "reps",
    "loadKg",
    "durationSec",
    "rir",
    "pain0to10",
    "status",
]


class BackupService:
    """Import and export the full record store."""

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

    def export_data(self) -> dict:
        return {
            "exercises": [e.to_record() for e in self.exercises.fetch_all_exercises()],
            "logs": [log.to_record() for log in self.logs.fetch_all_logs()],
            "templates": [t.to_record() for t in self.templates.fetch_all_templates()],
            "settings": self.settings.app_settings().to_record(),
        }

    def export_json(self) -> str:
        return json.dumps(self.export_data(), indent=2)

    def import_json(self, text: str) -> dict:
        """Restore records from a JSON backup.

        The whole document is parsed and validated before anything is
        written, so a malformed backup leaves the store untouched.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e}")
        if not isinstance(data, dict):
            raise ValueError("backup must be a JSON object")
        try:
            exercises = [parse_exercise(r) for r in data.get("exercises") or []]
            logs = [LogEntry.model_validate(r) for r in data.get("logs") or []]
            templates = [Template.model_validate(r) for r in data.get("templates") or []]
            settings = (
                SettingsSchema.model_validate(data["settings"])
                if data.get("settings")
                else None
            )
        except (ValidationError, AttributeError, TypeError) as e:
            raise ValueError(f"invalid backup: {e}")

        for exercise in exercises:
            self.exercises.save(exercise)
        for log in logs:
            self.logs.put(log)
        for template in templates:
            self.templates.save(template)
        if settings is not None:
            self.settings.save_app_settings(settings)
        counts = {
            "exercises": len(exercises),
            "logs": len(logs),
            "templates": len(templates),
        }
        logger.info("imported backup %s", counts)
        return counts

    def export_csv(self, exercise_id: str | None = None) -> str:
        """Return logs as CSV, for one exercise or for all of them."""
        if exercise_id is None:
            logs = self.logs.fetch_all_logs()
        else:
            logs = self.logs.fetch_for_exercise(exercise_id)
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for log in logs:
            writer.writerow(
                [
                    log.timestamp,
                    log.exercise_id,
                    "" if log.reps is None else log.reps,
                    "" if log.load_kg is None else log.load_kg,
                    "" if log.duration_sec is None else log.duration_sec,
                    "" if log.rir is None else log.rir,
                    "" if log.pain is None else log.pain,
                    log.status,
                ]
            )
        return output.getvalue()

    def reset_all(self) -> None:
        """Clear every record and restore default settings and starter exercises."""
        self.logs.clear()
        self.templates.clear()
        self.exercises.clear()
        self.settings.reset()
        ensure_defaults(self.exercises)
        logger.info("store reset to defaults")

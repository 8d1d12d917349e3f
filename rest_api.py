import json
from typing import List

from fastapi import FastAPI, HTTPException, Response, Body, APIRouter
from pydantic import ValidationError

from config import APP_VERSION
from db import ExerciseRepository, LogRepository, TemplateRepository, SettingsRepository
from backup_service import BackupService
from log_service import LogService, LogValidationError
from recommendation_service import RecommendationService
from seed_sample_data import ensure_defaults
from settings_schema import SettingsSchema
from stats_service import StatisticsService
from models import Template, parse_exercise


def _raise_http(error: ValueError) -> None:
    if isinstance(error, LogValidationError):
        raise HTTPException(status_code=400, detail=error.errors)
    message = str(error)
    status = 404 if message.endswith("not found") else 400
    raise HTTPException(status_code=status, detail=message)


class DojoAPI:
    """Provides REST endpoints for training logs and progression targets."""

    def __init__(
        self,
        db_path: str = "dojo.db",
        yaml_path: str = "settings.yaml",
        seed: bool = True,
    ) -> None:
        self.settings = SettingsRepository(db_path, yaml_path)
        self.exercises = ExerciseRepository(db_path)
        self.logs = LogRepository(db_path)
        self.templates = TemplateRepository(db_path)
        self.recommender = RecommendationService(
            self.exercises, self.logs, self.templates, self.settings
        )
        self.log_service = LogService(self.logs, self.recommender, self.settings)
        self.statistics = StatisticsService(self.exercises, self.logs)
        self.backup = BackupService(
            self.exercises, self.logs, self.templates, self.settings
        )
        if seed:
            ensure_defaults(self.exercises)
        self.app = FastAPI(
            title="Dojo API",
            description="REST API for training logs, progression targets and analytics",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _setup_routes(self) -> None:
        exercises_router = APIRouter(prefix="/exercises", tags=["Exercises"])
        logs_router = APIRouter(prefix="/logs", tags=["Logs"])
        templates_router = APIRouter(prefix="/templates", tags=["Templates"])

        @self.app.get("/health")
        def health():
            return {"status": "ok", "version": APP_VERSION}

        @exercises_router.get("")
        def list_exercises():
            return [e.to_record() for e in self.exercises.fetch_all_exercises()]

        @exercises_router.post("")
        def create_exercise(payload: dict = Body(...)):
            try:
                exercise = parse_exercise(payload)
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": self.exercises.save(exercise)}

        @exercises_router.get("/{exercise_id}")
        def get_exercise(exercise_id: str):
            try:
                return self.exercises.fetch(exercise_id).to_record()
            except ValueError as e:
                _raise_http(e)

        @exercises_router.delete("/{exercise_id}")
        def delete_exercise(exercise_id: str):
            try:
                self.exercises.delete(exercise_id)
            except ValueError as e:
                _raise_http(e)
            return {"status": "deleted"}

        @exercises_router.get("/{exercise_id}/next_target")
        def next_target(exercise_id: str, now: int | None = None):
            try:
                return self.recommender.next_target(exercise_id, now)
            except ValueError as e:
                _raise_http(e)

        @exercises_router.get("/{exercise_id}/stats")
        def exercise_stats(
            exercise_id: str,
            window: int = 30,
            complete_only: bool = True,
            now: int | None = None,
        ):
            try:
                return self.statistics.exercise_stats(
                    exercise_id, window, complete_only, now
                )
            except ValueError as e:
                _raise_http(e)

        @exercises_router.get("/{exercise_id}/series")
        def exercise_series(
            exercise_id: str,
            window: int = 30,
            complete_only: bool = True,
            now: int | None = None,
        ):
            try:
                return self.statistics.series(exercise_id, window, complete_only, now)
            except ValueError as e:
                _raise_http(e)

        @exercises_router.get("/{exercise_id}/logs")
        def exercise_logs(exercise_id: str):
            return [log.to_record() for log in self.logs.fetch_for_exercise(exercise_id)]

        @logs_router.get("")
        def list_logs():
            return [log.to_record() for log in self.logs.fetch_all_logs()]

        @logs_router.post("/quick")
        def quick_log(
            exercise_id: str | None = None,
            template_id: str | None = None,
            rir: int | None = None,
            pain: int | None = None,
            now: int | None = None,
        ):
            try:
                logs = self.log_service.quick_log(
                    exercise_id, template_id, now, rir=rir, pain=pain
                )
            except ValueError as e:
                _raise_http(e)
            return [log.to_record() for log in logs]

        @logs_router.post("/detailed")
        def detailed_log(entries: List[dict] = Body(...), now: int | None = None):
            try:
                logs = self.log_service.detailed_log(entries, now)
            except ValueError as e:
                _raise_http(e)
            return [log.to_record() for log in logs]

        @logs_router.post("/undo")
        def undo_log():
            last = self.log_service.undo_last()
            if last is None:
                raise HTTPException(status_code=404, detail="no logs to undo")
            return last.to_record()

        @logs_router.delete("/{log_id}")
        def delete_log(log_id: str):
            try:
                self.log_service.delete_log(log_id)
            except ValueError as e:
                _raise_http(e)
            return {"status": "deleted"}

        @templates_router.get("")
        def list_templates():
            return [t.to_record() for t in self.templates.fetch_all_templates()]

        @templates_router.post("")
        def create_template(payload: dict = Body(...)):
            try:
                template = Template.model_validate(payload)
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": self.templates.save(template)}

        @templates_router.delete("/{template_id}")
        def delete_template(template_id: str):
            try:
                self.templates.delete(template_id)
            except ValueError as e:
                _raise_http(e)
            return {"status": "deleted"}

        @templates_router.get("/{template_id}/next_targets")
        def template_targets(template_id: str, now: int | None = None):
            try:
                return self.recommender.targets_for_template(template_id, now)
            except ValueError as e:
                _raise_http(e)

        @self.app.get("/settings")
        def get_settings():
            return self.settings.app_settings().to_record()

        @self.app.put("/settings")
        def update_settings(payload: dict = Body(...)):
            try:
                current = self.settings.app_settings().to_record()
                profile = {
                    **current["progressionDefaults"],
                    **payload.get("progressionDefaults", {}),
                }
                current.update(payload)
                current["progressionDefaults"] = profile
                settings = SettingsSchema.model_validate(current)
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            self.settings.save_app_settings(settings)
            return settings.to_record()

        @self.app.get("/today")
        def today(now: int | None = None):
            return self.log_service.today_summary(now)

        @self.app.get("/export/json")
        def export_json():
            return Response(self.backup.export_json(), media_type="application/json")

        @self.app.post("/import/json")
        def import_json(payload: dict = Body(...)):
            try:
                return self.backup.import_json(json.dumps(payload))
            except ValueError as e:
                _raise_http(e)

        @self.app.get("/export/csv")
        def export_csv(exercise_id: str | None = None):
            return Response(self.backup.export_csv(exercise_id), media_type="text/csv")

        @self.app.post("/reset")
        def reset():
            self.backup.reset_all()
            return {"status": "reset"}

        self.app.include_router(exercises_router)
        self.app.include_router(logs_router)
        self.app.include_router(templates_router)


api = DojoAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)

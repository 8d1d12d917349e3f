import sqlite3
import json
from contextlib import contextmanager
from typing import List, Tuple, Optional

from config import YamlConfig
from models import Exercise, LogEntry, Template, ProgressionProfile, parse_exercise
from settings_schema import SettingsSchema, validate_settings


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    data TEXT NOT NULL
                );""",
            ["id", "name", "type", "data"],
        ),
        "logs": (
            """CREATE TABLE logs (
                    id TEXT PRIMARY KEY,
                    exercise_id TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    status TEXT NOT NULL DEFAULT 'complete',
                    data TEXT NOT NULL
                );""",
            ["id", "exercise_id", "timestamp", "status", "data"],
        ),
        "templates": (
            """CREATE TABLE templates (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    data TEXT NOT NULL
                );""",
            ["id", "name", "data"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    _INDEXES = [
        "CREATE INDEX IF NOT EXISTS idx_logs_exercise_time ON logs (exercise_id, timestamp);",
        "CREATE INDEX IF NOT EXISTS idx_logs_time ON logs (timestamp);",
    ]

    def __init__(self, db_path: str = "dojo.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._init_settings()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            for sql in self._INDEXES:
                conn.execute(sql)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(
                f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
            )
        conn.execute(f"DROP TABLE {table}_old;")

    def _init_settings(self) -> None:
        defaults = SettingsSchema().to_flat()
        with self._connection() as conn:
            for key, value in defaults.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, str(value)),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


class ExerciseRepository(BaseRepository):
    """Repository for exercise records."""

    def save(self, exercise: Exercise) -> str:
        self.execute(
            "INSERT INTO exercises (id, name, type, data) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET name=excluded.name, type=excluded.type, data=excluded.data;",
            (
                exercise.id,
                exercise.name,
                exercise.kind,
                json.dumps(exercise.to_record()),
            ),
        )
        return exercise.id

    def fetch(self, exercise_id: str) -> Exercise:
        rows = self.fetch_all(
            "SELECT data FROM exercises WHERE id = ?;", (exercise_id,)
        )
        if not rows:
            raise ValueError("exercise not found")
        return parse_exercise(json.loads(rows[0][0]))

    def fetch_all_exercises(self) -> List[Exercise]:
        rows = self.fetch_all("SELECT data FROM exercises ORDER BY rowid;")
        return [parse_exercise(json.loads(data)) for (data,) in rows]

    def delete(self, exercise_id: str) -> None:
        self.fetch(exercise_id)
        self.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))

    def clear(self) -> None:
        self._delete_all("exercises")


class LogRepository(BaseRepository):
    """Repository for logged sets. Logs are appended or deleted, never updated."""

    @staticmethod
    def _params(log: LogEntry) -> tuple:
        return (
            log.id,
            log.exercise_id,
            log.timestamp,
            log.status,
            json.dumps(log.to_record()),
        )

    @staticmethod
    def _hydrate(rows: List[Tuple]) -> List[LogEntry]:
        return [LogEntry.model_validate(json.loads(data)) for (data,) in rows]

    def add(self, log: LogEntry) -> str:
        try:
            self.execute(
                "INSERT INTO logs (id, exercise_id, timestamp, status, data) VALUES (?, ?, ?, ?, ?);",
                self._params(log),
            )
        except sqlite3.IntegrityError:
            raise ValueError("log exists")
        return log.id

    def put(self, log: LogEntry) -> str:
        """Insert or replace ``log``; used when restoring a backup."""
        self.execute(
            "INSERT OR REPLACE INTO logs (id, exercise_id, timestamp, status, data) VALUES (?, ?, ?, ?, ?);",
            self._params(log),
        )
        return log.id

    def fetch(self, log_id: str) -> LogEntry:
        rows = self.fetch_all("SELECT data FROM logs WHERE id = ?;", (log_id,))
        if not rows:
            raise ValueError("log not found")
        return self._hydrate(rows)[0]

    def fetch_for_exercise(self, exercise_id: str) -> List[LogEntry]:
        rows = self.fetch_all(
            "SELECT data FROM logs WHERE exercise_id = ? ORDER BY timestamp DESC, rowid DESC;",
            (exercise_id,),
        )
        return self._hydrate(rows)

    def fetch_all_logs(self) -> List[LogEntry]:
        rows = self.fetch_all(
            "SELECT data FROM logs ORDER BY timestamp DESC, rowid DESC;"
        )
        return self._hydrate(rows)

    def fetch_between(self, start: int, end: int) -> List[LogEntry]:
        rows = self.fetch_all(
            "SELECT data FROM logs WHERE timestamp >= ? AND timestamp < ? "
            "ORDER BY timestamp DESC, rowid DESC;",
            (start, end),
        )
        return self._hydrate(rows)

    def fetch_latest(self) -> Optional[LogEntry]:
        rows = self.fetch_all(
            "SELECT data FROM logs ORDER BY timestamp DESC, rowid DESC LIMIT 1;"
        )
        logs = self._hydrate(rows)
        return logs[0] if logs else None

    def delete(self, log_id: str) -> None:
        self.fetch(log_id)
        self.execute("DELETE FROM logs WHERE id = ?;", (log_id,))

    def clear(self) -> None:
        self._delete_all("logs")


class TemplateRepository(BaseRepository):
    """Repository for workout templates."""

    def save(self, template: Template) -> str:
        self.execute(
            "INSERT INTO templates (id, name, data) VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET name=excluded.name, data=excluded.data;",
            (template.id, template.name, json.dumps(template.to_record())),
        )
        return template.id

    def fetch(self, template_id: str) -> Template:
        rows = self.fetch_all(
            "SELECT data FROM templates WHERE id = ?;", (template_id,)
        )
        if not rows:
            raise ValueError("template not found")
        return Template.model_validate(json.loads(rows[0][0]))

    def fetch_all_templates(self) -> List[Template]:
        rows = self.fetch_all("SELECT data FROM templates ORDER BY rowid;")
        return [Template.model_validate(json.loads(data)) for (data,) in rows]

    def delete(self, template_id: str) -> None:
        self.fetch(template_id)
        self.execute("DELETE FROM templates WHERE id = ?;", (template_id,))

    def clear(self) -> None:
        self._delete_all("templates")


class SettingsRepository(BaseRepository):
    """Repository for application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = "dojo.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    @staticmethod
    def _parse(value: str) -> int | float | str:
        for cast in (int, float):
            try:
                return cast(value)
            except ValueError:
                continue
        return value

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        return {k: self._parse(v) for k, v in rows}

    def _write(self, data: dict) -> None:
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        merged = self._raw_all_settings()
        merged.update(data)
        validate_settings(merged)
        self._write(data)

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def get_text(self, key: str, default: str) -> str:
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get_text(key, str(default)))
        except ValueError:
            return default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        merged = self._raw_all_settings()
        merged[key] = value
        validate_settings(merged)
        self._write({key: value})
        self._sync_to_yaml()

    def set_float(self, key: str, value: float) -> None:
        self.set_text(key, str(value))

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(value))

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()

    def app_settings(self) -> SettingsSchema:
        return SettingsSchema.from_flat(self.all_settings())

    def save_app_settings(self, settings: SettingsSchema) -> None:
        self._write(settings.to_flat())
        self._sync_to_yaml()

    def progression_defaults(self) -> ProgressionProfile:
        return self.app_settings().progression_defaults

    def reset(self) -> None:
        self._delete_all("settings")
        self._init_settings()
        self._sync_to_yaml()

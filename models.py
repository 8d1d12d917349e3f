"""Record shapes shared by the store, the services and the progression engine.

Attributes are snake_case in Python; the camelCase aliases are the keys used
by the JSON backup format and are accepted on input as well.
"""
from __future__ import annotations

import time
import uuid
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

Category = Literal["pull", "push", "legs", "core", "cardio", "other"]
LogStatus = Literal["complete", "skipped", "incomplete"]
TargetMode = Literal["auto", "fixed"]

STATUS_COMPLETE = "complete"


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_record(self) -> dict:
        """Return the camelCase dict stored and exported for this record."""
        return self.model_dump(by_alias=True, exclude_none=True)


class IntRange(Record):
    min: int
    max: int

    @model_validator(mode="after")
    def _check_order(self) -> "IntRange":
        if self.min > self.max:
            raise ValueError("range min must not exceed max")
        return self


class ProgressionProfile(Record):
    """Tunable thresholds driving progression and the pain guardrails."""

    target_rir_min: int = Field(3, alias="targetRirMin", ge=0, le=10)
    target_rir_max: int = Field(5, alias="targetRirMax", ge=0, le=10)
    max_weekly_volume_increase_pct: float = Field(
        10, alias="maxWeeklyVolumeIncreasePct", ge=0
    )
    pain_warn: int = Field(3, alias="painWarn", ge=0, le=10)
    pain_reduce: int = Field(5, alias="painReduce", ge=0, le=10)
    deload_days: int = Field(7, alias="deloadDays", ge=0)
    deload_volume_factor: float = Field(0.65, alias="deloadVolumeFactor", gt=0, le=1)
    freeze_days_if_pain: int = Field(2, alias="freezeDaysIfPain", ge=1)

    @model_validator(mode="after")
    def _check_rir_band(self) -> "ProgressionProfile":
        if self.target_rir_min >= self.target_rir_max:
            raise ValueError("targetRirMin must be below targetRirMax")
        return self


def resolve_profile(
    defaults: ProgressionProfile, override: Optional[ProgressionProfile]
) -> ProgressionProfile:
    """Overlay the explicitly set fields of ``override`` on ``defaults``."""
    if override is None:
        return defaults
    data = defaults.model_dump()
    data.update(override.model_dump(include=override.model_fields_set))
    try:
        return ProgressionProfile.model_validate(data)
    except ValidationError:
        # the merged band can be inverted; the override alone is consistent
        return override


class VariantField(Record):
    key: str = ""
    label: str = "Variant"
    type: str = "text"


class ExerciseBase(Record):
    id: str = Field(default_factory=new_id)
    name: str
    category: Category = "pull"
    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    variants_schema: List[VariantField] = Field(
        default_factory=list, alias="variantsSchema"
    )
    progression_profile: Optional[ProgressionProfile] = Field(
        None, alias="progressionProfile"
    )

    def to_record(self) -> dict:
        record = super().to_record()
        if self.progression_profile is not None:
            # unset profile fields keep following the global defaults
            record["progressionProfile"] = self.progression_profile.model_dump(
                by_alias=True, exclude_unset=True
            )
        return record


class RepsExercise(ExerciseBase):
    kind: Literal["reps"] = Field("reps", alias="type")
    rep_range: IntRange = Field(
        default_factory=lambda: IntRange(min=6, max=12), alias="repRange"
    )
    rep_increment: int = Field(1, alias="repIncrement", gt=0)
    min_reps_floor: int = Field(1, alias="minRepsFloor", ge=0)

    @model_validator(mode="after")
    def _check_floor(self) -> "RepsExercise":
        if self.min_reps_floor > self.rep_range.max:
            raise ValueError("minRepsFloor must not exceed repRange.max")
        return self


class WeightedRepsExercise(ExerciseBase):
    kind: Literal["weighted"] = Field("weighted", alias="type")
    rep_range: IntRange = Field(
        default_factory=lambda: IntRange(min=6, max=12), alias="repRange"
    )
    rep_increment: int = Field(1, alias="repIncrement", gt=0)
    load_increment_kg: float = Field(2.5, alias="loadIncrementKg", gt=0)
    # reps are always exhausted before load increases
    progression_priority: str = Field("reps_then_load", alias="progressionPriority")


class IsometricExercise(ExerciseBase):
    kind: Literal["isometric"] = Field("isometric", alias="type")
    duration_range_sec: IntRange = Field(
        default_factory=lambda: IntRange(min=20, max=60), alias="durationRangeSec"
    )
    time_increment_sec: int = Field(5, alias="timeIncrementSec", gt=0)


Exercise = Union[RepsExercise, WeightedRepsExercise, IsometricExercise]

EXERCISE_KINDS = {
    "reps": RepsExercise,
    "weighted": WeightedRepsExercise,
    "isometric": IsometricExercise,
}


def parse_exercise(record: Union[dict, ExerciseBase]) -> Exercise:
    """Hydrate the exercise variant named by the record's ``type``.

    Records with a missing or unknown type hydrate as isometric exercises.
    """
    if isinstance(record, ExerciseBase):
        return record
    kind = record.get("type", record.get("kind"))
    model = EXERCISE_KINDS.get(kind, IsometricExercise)
    data = {k: v for k, v in record.items() if k not in ("type", "kind")}
    return model.model_validate(data)


class LogEntry(Record):
    """A single logged set. Logs are never edited once saved."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_id)
    exercise_id: str = Field(alias="exerciseId")
    timestamp: int
    status: LogStatus = STATUS_COMPLETE
    reps: Optional[int] = None
    load_kg: Optional[float] = Field(None, alias="loadKg")
    duration_sec: Optional[int] = Field(None, alias="durationSec")
    rir: Optional[int] = Field(None, ge=0, le=10)
    pain: Optional[int] = Field(None, alias="pain0to10", ge=0, le=10)


class FixedTarget(Record):
    metric_type: Optional[str] = Field(None, alias="metricType")
    reps: Optional[int] = None
    load_kg: Optional[float] = Field(None, alias="loadKg")
    duration_sec: Optional[int] = Field(None, alias="durationSec")


class TemplateItem(Record):
    exercise_id: str = Field(alias="exerciseId")
    target_mode: TargetMode = Field("auto", alias="targetMode")
    fixed_target: Optional[FixedTarget] = Field(None, alias="fixedTarget")


class Template(Record):
    id: str = Field(default_factory=new_id)
    name: str
    items: List[TemplateItem] = Field(default_factory=list)

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models import ProgressionProfile

PROFILE_KEYS = list(ProgressionProfile.model_fields)


class SettingsSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    progression_defaults: ProgressionProfile = Field(
        default_factory=ProgressionProfile, alias="progressionDefaults"
    )
    theme_override: Literal["system", "light", "dark"] = Field(
        "system", alias="themeOverride"
    )
    daily_set_goal: int = Field(5, alias="dailySetGoal", ge=0)

    @classmethod
    def from_flat(cls, data: dict) -> "SettingsSchema":
        """Build settings from the flat key/value form kept in the store."""
        profile = {k: data[k] for k in PROFILE_KEYS if k in data}
        rest = {k: data[k] for k in ("theme_override", "daily_set_goal") if k in data}
        return cls(progression_defaults=ProgressionProfile(**profile), **rest)

    def to_flat(self) -> dict:
        flat = self.progression_defaults.model_dump()
        flat["theme_override"] = self.theme_override
        flat["daily_set_goal"] = self.daily_set_goal
        return flat

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema.from_flat(data)
    except ValidationError as e:
        raise ValueError(str(e))

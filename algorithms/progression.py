"""Per-kind progression strategies.

The shared control flow (guardrails, effort adjustment, volume cap, deload)
lives in :meth:`ProgressionStrategy.compute_next_target`; each kind only
supplies its metric extraction, bounds and increments through small hooks.
"""
import logging
from typing import Iterable, List, Optional

from algorithms.aggregation import VolumeAggregator
from algorithms.guardrails import GuardrailEvaluator
from algorithms.math_tools import MathTools
from algorithms.statistics import StatsBuilder
from models import STATUS_COMPLETE, Exercise, LogEntry, ProgressionProfile

logger = logging.getLogger(__name__)

EASY_REPS = "Effort was easy; nudging reps up."
HARD_REPS = "Effort was high; reducing reps."
EASY_TIME = "Effort was easy; nudging time up."
HARD_TIME = "Effort was high; reducing time."
TOP_REPS = "Hit top reps; adding load and resetting reps."
VOLUME_CAP = "Volume cap hit; holding steady."
DELOAD = "Deload active; reducing volume."


class ProgressionStrategy:
    """Base strategy holding the algorithm shared by every exercise kind."""

    metric_type = ""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise

    def primary_metric_type(self) -> str:
        return self.metric_type

    def volume(self, log: LogEntry) -> float:
        raise NotImplementedError

    def _errors(self, log: LogEntry) -> List[str]:
        raise NotImplementedError

    def _last_target(self, last: Optional[LogEntry]) -> dict:
        raise NotImplementedError

    def _apply_effort(
        self,
        target: dict,
        median_rir: float,
        profile: ProgressionProfile,
        explanation: List[str],
    ) -> dict:
        raise NotImplementedError

    def _bound(self, target: dict) -> dict:
        return target

    def _deload_target(self, last: dict, profile: ProgressionProfile) -> dict:
        raise NotImplementedError

    def validate_log(self, log: LogEntry) -> dict:
        """Check that a complete log carries the metrics this kind needs."""
        if log.status != STATUS_COMPLETE:
            return {"valid": True, "errors": []}
        errors = self._errors(log)
        return {"valid": not errors, "errors": errors}

    def compute_next_target(
        self, logs: Iterable[LogEntry], now: int, profile: ProgressionProfile
    ) -> dict:
        """Return the next recommended target for this exercise.

        Later steps supersede earlier ones: the weekly volume cap overrides
        the effort-based adjustment and an active deload overrides both.
        """
        history = list(logs)
        guard = GuardrailEvaluator.evaluate(
            history, now, profile, self.exercise.progression_profile
        )
        profile = guard.profile
        explanation = guard.explanation

        rir = [log.rir for log in guard.recent_logs if log.rir is not None]
        median_rir = MathTools.median(rir) if rir else None
        last = self._last_target(guard.recent_logs[0] if guard.recent_logs else None)

        target = dict(last)
        if not guard.frozen and not guard.deload and median_rir is not None:
            target = self._apply_effort(target, median_rir, profile, explanation)
        target = self._bound(target)

        weekly = VolumeAggregator.weekly_volume(history, now, self.volume)
        prev_week = weekly["volume_prev_week"]
        if prev_week > 0:
            increase_pct = (weekly["volume_this_week"] - prev_week) / prev_week * 100
            if increase_pct > profile.max_weekly_volume_increase_pct:
                target = dict(last)
                explanation.append(VOLUME_CAP)

        if guard.deload:
            target = self._deload_target(last, profile)
            explanation.append(DELOAD)

        logger.debug(
            "next target for %s: %s (frozen=%s, deload=%s)",
            self.exercise.id,
            target,
            guard.frozen,
            guard.deload,
        )
        return {
            "metric_type": self.metric_type,
            **target,
            "explanation": explanation,
            "frozen": guard.frozen,
            "deload": guard.deload,
        }

    def compute_stats(self, logs: Iterable[LogEntry], window_days: int, now: int) -> dict:
        return StatsBuilder.build(
            self.exercise.kind, logs, window_days, now, self.volume
        )


class RepsStrategy(ProgressionStrategy):
    metric_type = "reps"

    def volume(self, log: LogEntry) -> float:
        return VolumeAggregator.reps_volume(log)

    def _errors(self, log: LogEntry) -> List[str]:
        if not log.reps or log.reps <= 0:
            return ["Reps are required for a complete set."]
        return []

    def _last_target(self, last: Optional[LogEntry]) -> dict:
        if last is not None and last.reps is not None:
            return {"reps": last.reps}
        return {"reps": self.exercise.rep_range.min}

    def _apply_effort(self, target, median_rir, profile, explanation):
        reps = target["reps"]
        if median_rir > profile.target_rir_max:
            reps += self.exercise.rep_increment
            explanation.append(EASY_REPS)
        elif median_rir < profile.target_rir_min:
            reps -= self.exercise.rep_increment
            explanation.append(HARD_REPS)
        return {"reps": reps}

    def _bound(self, target: dict) -> dict:
        return {
            "reps": MathTools.clamp(
                target["reps"], self.exercise.min_reps_floor, self.exercise.rep_range.max
            )
        }

    def _deload_target(self, last: dict, profile: ProgressionProfile) -> dict:
        reduced = MathTools.round_half_up(last["reps"] * profile.deload_volume_factor)
        return {"reps": max(self.exercise.min_reps_floor, reduced)}


class WeightedRepsStrategy(ProgressionStrategy):
    """Reps climb to the top of the range before load is added."""

    metric_type = "weighted_reps"

    def volume(self, log: LogEntry) -> float:
        return VolumeAggregator.weighted_volume(log)

    def _errors(self, log: LogEntry) -> List[str]:
        errors = []
        if not log.reps or log.reps <= 0:
            errors.append("Reps are required for a complete weighted set.")
        if not log.load_kg or log.load_kg <= 0:
            errors.append("Load is required for a complete weighted set.")
        return errors

    def _last_target(self, last: Optional[LogEntry]) -> dict:
        reps = self.exercise.rep_range.min
        load = self.exercise.load_increment_kg * 4
        if last is not None:
            if last.reps is not None:
                reps = last.reps
            if last.load_kg is not None:
                load = last.load_kg
        return {"reps": reps, "load_kg": load}

    def _apply_effort(self, target, median_rir, profile, explanation):
        reps, load = target["reps"], target["load_kg"]
        rep_range = self.exercise.rep_range
        if median_rir > profile.target_rir_max:
            if reps < rep_range.max:
                reps += self.exercise.rep_increment
                explanation.append(EASY_REPS)
            else:
                load += self.exercise.load_increment_kg
                reps = rep_range.min
                explanation.append(TOP_REPS)
        elif median_rir < profile.target_rir_min:
            reps = max(rep_range.min, reps - self.exercise.rep_increment)
            explanation.append(HARD_REPS)
        return {"reps": reps, "load_kg": load}

    def _deload_target(self, last: dict, profile: ProgressionProfile) -> dict:
        factor = profile.deload_volume_factor
        return {
            "reps": max(
                self.exercise.rep_range.min,
                MathTools.round_half_up(last["reps"] * factor),
            ),
            "load_kg": max(
                self.exercise.load_increment_kg,
                MathTools.round_half_up(last["load_kg"] * factor),
            ),
        }


class IsometricStrategy(ProgressionStrategy):
    metric_type = "isometric"

    def volume(self, log: LogEntry) -> float:
        return VolumeAggregator.duration_volume(log)

    def _errors(self, log: LogEntry) -> List[str]:
        if not log.duration_sec or log.duration_sec <= 0:
            return ["Duration is required for a complete isometric set."]
        return []

    def _last_target(self, last: Optional[LogEntry]) -> dict:
        if last is not None and last.duration_sec is not None:
            return {"duration_sec": last.duration_sec}
        return {"duration_sec": self.exercise.duration_range_sec.min}

    def _apply_effort(self, target, median_rir, profile, explanation):
        duration = target["duration_sec"]
        if median_rir > profile.target_rir_max:
            duration += self.exercise.time_increment_sec
            explanation.append(EASY_TIME)
        elif median_rir < profile.target_rir_min:
            duration -= self.exercise.time_increment_sec
            explanation.append(HARD_TIME)
        return {"duration_sec": duration}

    def _bound(self, target: dict) -> dict:
        bounds = self.exercise.duration_range_sec
        return {"duration_sec": MathTools.clamp(target["duration_sec"], bounds.min, bounds.max)}

    def _deload_target(self, last: dict, profile: ProgressionProfile) -> dict:
        reduced = MathTools.round_half_up(
            last["duration_sec"] * profile.deload_volume_factor
        )
        return {"duration_sec": max(self.exercise.duration_range_sec.min, reduced)}


STRATEGIES = {
    "reps": RepsStrategy,
    "weighted": WeightedRepsStrategy,
    "isometric": IsometricStrategy,
}


def strategy_for(exercise: Exercise) -> ProgressionStrategy:
    """Return the progression strategy for the exercise's kind."""
    return STRATEGIES[exercise.kind](exercise)


def compute_next_target(
    exercise: Exercise,
    logs: Iterable[LogEntry],
    now: int,
    profile: Optional[ProgressionProfile] = None,
) -> dict:
    return strategy_for(exercise).compute_next_target(
        logs, now, profile or ProgressionProfile()
    )


def compute_stats(
    exercise: Exercise, logs: Iterable[LogEntry], window_days: int, now: int
) -> dict:
    return strategy_for(exercise).compute_stats(logs, window_days, now)


def validate_log(exercise: Exercise, log: LogEntry) -> dict:
    return strategy_for(exercise).validate_log(log)

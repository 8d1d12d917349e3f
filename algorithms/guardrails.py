import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from algorithms.aggregation import DAY_MS
from models import STATUS_COMPLETE, LogEntry, ProgressionProfile, resolve_profile

logger = logging.getLogger(__name__)

WORKING_SET_DAYS = 14
WORKING_SET_LIMIT = 30


@dataclass
class GuardrailResult:
    recent_logs: List[LogEntry]
    profile: ProgressionProfile
    explanation: List[str] = field(default_factory=list)
    frozen: bool = False
    deload: bool = False


class GuardrailEvaluator:
    """Decide from recent pain signals whether progression must be held."""

    @staticmethod
    def working_set(logs: Iterable[LogEntry], now: int) -> List[LogEntry]:
        """Return complete logs from the last 14 days, newest first, capped at 30."""
        recent = [
            log
            for log in logs
            if log.status == STATUS_COMPLETE
            and now - log.timestamp <= WORKING_SET_DAYS * DAY_MS
        ]
        recent.sort(key=lambda log: log.timestamp, reverse=True)
        return recent[:WORKING_SET_LIMIT]

    @staticmethod
    def pain_window(logs: Iterable[LogEntry], limit: int) -> List[LogEntry]:
        """Return up to ``limit`` most recent logs with a pain value, any status."""
        flagged = [log for log in logs if log.pain is not None]
        flagged.sort(key=lambda log: log.timestamp, reverse=True)
        return flagged[:limit]

    @classmethod
    def evaluate(
        cls,
        logs: Iterable[LogEntry],
        now: int,
        profile: ProgressionProfile,
        override: Optional[ProgressionProfile] = None,
    ) -> GuardrailResult:
        logs = list(logs)
        resolved = resolve_profile(profile, override)
        recent = cls.working_set(logs, now)
        flagged = cls.pain_window(logs, resolved.freeze_days_if_pain)

        pain_high = any(log.pain >= resolved.pain_reduce for log in flagged)
        pain_warn_streak = len(flagged) == resolved.freeze_days_if_pain and all(
            log.pain >= resolved.pain_warn for log in flagged
        )
        deload = pain_high or pain_warn_streak

        result = GuardrailResult(recent, resolved, frozen=deload, deload=deload)
        if deload:
            logger.warning(
                "pain guardrails triggered (high=%s, warn_streak=%s)",
                pain_high,
                pain_warn_streak,
            )
            result.explanation.append("Pain guardrails triggered a deload.")
        return result

import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.aggregation import DAY_MS, VolumeAggregator
from models import LogEntry

NOW = 100 * DAY_MS


def log(days_ago: float, **fields) -> LogEntry:
    return LogEntry(exercise_id="ex", timestamp=int(NOW - days_ago * DAY_MS), **fields)


class VolumeAggregatorTestCase(unittest.TestCase):
    def test_volume_functions(self) -> None:
        entry = log(1, reps=8, load_kg=20.0, duration_sec=30)
        self.assertEqual(VolumeAggregator.reps_volume(entry), 8)
        self.assertEqual(VolumeAggregator.weighted_volume(entry), 160.0)
        self.assertEqual(VolumeAggregator.duration_volume(entry), 30)
        self.assertEqual(VolumeAggregator.weighted_volume(log(1, reps=8)), 0)

    def test_weekly_volume_windows(self) -> None:
        logs = [
            log(1, reps=10),
            log(7, reps=5),
            log(8, reps=20),
            log(14, reps=3),
            log(15, reps=99),
            log(0, reps=50),
        ]
        weekly = VolumeAggregator.weekly_volume(logs, NOW, VolumeAggregator.reps_volume)
        self.assertEqual(weekly["volume_this_week"], 15)
        self.assertEqual(weekly["volume_prev_week"], 23)

    def test_weekly_volume_counts_every_status(self) -> None:
        logs = [log(1, reps=10, status="skipped"), log(2, reps=4)]
        weekly = VolumeAggregator.weekly_volume(logs, NOW, VolumeAggregator.reps_volume)
        self.assertEqual(weekly["volume_this_week"], 14)

    def test_summarize_pain_flags(self) -> None:
        logs = [
            log(1, reps=5, pain=6),
            log(1.1, reps=5, pain=3),
            log(2, reps=5, pain=1),
            log(3, reps=5),
        ]
        summary = VolumeAggregator.summarize_pain_flags(logs)
        self.assertEqual(summary["deload_count"], 1)
        self.assertEqual(summary["freeze_days"], 2)
        # three distinct days over four weeks
        self.assertEqual(summary["active_days_per_week"], 5)

    def test_summarize_pain_flags_empty(self) -> None:
        self.assertEqual(
            VolumeAggregator.summarize_pain_flags([]),
            {"deload_count": 0, "freeze_days": 0, "active_days_per_week": 0},
        )


if __name__ == "__main__":
    unittest.main()

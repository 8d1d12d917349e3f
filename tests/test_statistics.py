import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.aggregation import DAY_MS
from algorithms.progression import compute_stats
from models import IsometricExercise, LogEntry, RepsExercise, WeightedRepsExercise

NOW = 400 * DAY_MS


def log(exercise, days_ago: float, **fields) -> LogEntry:
    return LogEntry(
        exercise_id=exercise.id, timestamp=int(NOW - days_ago * DAY_MS), **fields
    )


class StatisticsTestCase(unittest.TestCase):
    def test_reps_stats(self) -> None:
        exercise = RepsExercise(name="Push-ups")
        logs = [
            log(exercise, 1, reps=10, rir=4, pain=2),
            log(exercise, 2, reps=12, rir=2, pain=0),
            log(exercise, 40, reps=15, rir=9),
        ]
        stats = compute_stats(exercise, logs, 30, NOW)
        self.assertEqual(stats["pr_reps"], 12)
        self.assertAlmostEqual(stats["avg_rir"], 3.0)
        self.assertAlmostEqual(stats["median_rir"], 3.0)
        self.assertAlmostEqual(stats["avg_pain"], 1.0)
        self.assertEqual(stats["volume_this_week"], 22)
        self.assertEqual(stats["volume_prev_week"], 0)
        self.assertEqual(stats["deload_count"], 0)
        self.assertEqual(stats["freeze_days"], 0)
        self.assertEqual(stats["active_days_per_week"], 5)
        self.assertNotIn("pr_load_kg", stats)

    def test_empty_window_omits_computed_stats(self) -> None:
        exercise = RepsExercise(name="Push-ups")
        stats = compute_stats(exercise, [log(exercise, 40, reps=15, rir=9)], 7, NOW)
        for key in ("pr_reps", "avg_rir", "median_rir", "avg_pain"):
            self.assertNotIn(key, stats)
        self.assertEqual(stats["volume_this_week"], 0)
        self.assertEqual(stats["volume_prev_week"], 0)
        self.assertIn("deload_count", stats)

    def test_no_logs(self) -> None:
        exercise = IsometricExercise(name="Wall Sit")
        stats = compute_stats(exercise, [], 90, NOW)
        self.assertEqual(
            stats,
            {
                "volume_this_week": 0,
                "volume_prev_week": 0,
                "deload_count": 0,
                "freeze_days": 0,
                "active_days_per_week": 0,
            },
        )

    def test_weighted_records(self) -> None:
        exercise = WeightedRepsExercise(name="Bench Press")
        logs = [
            log(exercise, 1, reps=5, load_kg=100.0),
            log(exercise, 3, reps=10, load_kg=80.0),
        ]
        stats = compute_stats(exercise, logs, 7, NOW)
        self.assertEqual(stats["pr_reps"], 10)
        self.assertEqual(stats["pr_load_kg"], 100.0)
        self.assertAlmostEqual(stats["best_estimated_1rm"], 100 * (1 + 5 / 30))
        self.assertEqual(stats["volume_this_week"], 1300.0)

    def test_weighted_empty_window_omits_computed_stats(self) -> None:
        exercise = WeightedRepsExercise(name="Bench Press")
        stats = compute_stats(exercise, [], 30, NOW)
        for key in ("pr_reps", "pr_load_kg", "best_estimated_1rm", "avg_rir", "median_rir"):
            self.assertNotIn(key, stats)
        for key in (
            "volume_this_week",
            "volume_prev_week",
            "deload_count",
            "freeze_days",
            "active_days_per_week",
        ):
            self.assertIn(key, stats)
            self.assertEqual(stats[key], 0)

    def test_isometric_records(self) -> None:
        exercise = IsometricExercise(name="Plank")
        logs = [log(exercise, 1, duration_sec=45), log(exercise, 2, duration_sec=50)]
        stats = compute_stats(exercise, logs, 7, NOW)
        self.assertEqual(stats["pr_duration_sec"], 50)
        self.assertNotIn("pr_reps", stats)
        self.assertEqual(stats["volume_this_week"], 95)

    def test_window_boundary_is_inclusive(self) -> None:
        exercise = RepsExercise(name="Push-ups")
        stats = compute_stats(exercise, [log(exercise, 7, reps=9)], 7, NOW)
        self.assertEqual(stats["pr_reps"], 9)


if __name__ == "__main__":
    unittest.main()

from db import ExerciseRepository
from models import IsometricExercise, RepsExercise, WeightedRepsExercise


def starter_exercises() -> list:
    return [
        RepsExercise(
            name="Push-ups",
            category="push",
            rep_range={"min": 6, "max": 15},
            rep_increment=1,
            min_reps_floor=1,
        ),
        WeightedRepsExercise(
            name="Bench Press",
            category="push",
            rep_range={"min": 6, "max": 10},
            rep_increment=1,
            load_increment_kg=2.5,
        ),
        IsometricExercise(
            name="Wall Sit",
            category="legs",
            duration_range_sec={"min": 20, "max": 60},
            time_increment_sec=5,
        ),
    ]


def ensure_defaults(exercise_repo: ExerciseRepository) -> list:
    """Add the starter exercises when the store has none."""
    if exercise_repo.fetch_all_exercises():
        return []
    created = starter_exercises()
    for exercise in created:
        exercise_repo.save(exercise)
    return created


if __name__ == "__main__":
    ensure_defaults(ExerciseRepository("dojo.db"))
    print("Starter exercises inserted")

import argparse
import datetime
import json
import logging

from rest_api import DojoAPI


def _api(db_path: str, yaml_path: str) -> DojoAPI:
    return DojoAPI(db_path=db_path, yaml_path=yaml_path, seed=False)


def export_json(db_path: str, yaml_path: str, out_path: str) -> None:
    api = _api(db_path, yaml_path)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(api.backup.export_json())


def import_json(db_path: str, yaml_path: str, src_path: str) -> dict:
    api = _api(db_path, yaml_path)
    with open(src_path, "r", encoding="utf-8") as f:
        return api.backup.import_json(f.read())


def export_csv(
    db_path: str, yaml_path: str, out_path: str, exercise_id: str | None = None
) -> None:
    api = _api(db_path, yaml_path)
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        f.write(api.backup.export_csv(exercise_id))


def next_target(db_path: str, yaml_path: str, exercise_id: str) -> dict:
    return _api(db_path, yaml_path).recommender.next_target(exercise_id)


def exercise_stats(
    db_path: str, yaml_path: str, exercise_id: str, window: int = 30
) -> dict:
    return _api(db_path, yaml_path).statistics.exercise_stats(exercise_id, window)


def demo_data(db_path: str, yaml_path: str) -> None:
    """Populate the store with starter exercises and a few logged sets if empty."""
    api = DojoAPI(db_path=db_path, yaml_path=yaml_path)
    if api.logs.fetch_all_logs():
        print("Database already contains logs")
        return
    now = datetime.datetime.now(datetime.timezone.utc)
    for exercise in api.exercises.fetch_all_exercises():
        for days_ago in (3, 1):
            ts = int((now - datetime.timedelta(days=days_ago)).timestamp() * 1000)
            api.log_service.quick_log(exercise_id=exercise.id, now=ts, rir=4, pain=0)
    print("Demo data inserted")


def main() -> None:
    parser = argparse.ArgumentParser(description="Dojo utility commands")
    parser.add_argument("--db", default="dojo.db")
    parser.add_argument("--yaml", default="settings.yaml")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export-json")
    exp.add_argument("--out", default="dojo-backup.json")

    imp = sub.add_parser("import-json")
    imp.add_argument("--in", dest="src", required=True)

    csv_exp = sub.add_parser("export-csv")
    csv_exp.add_argument("--out", default="dojo-logs.csv")
    csv_exp.add_argument("--exercise")

    nxt = sub.add_parser("next-target")
    nxt.add_argument("--exercise", required=True)

    st = sub.add_parser("stats")
    st.add_argument("--exercise", required=True)
    st.add_argument("--window", type=int, choices=[7, 30, 90], default=30)

    sub.add_parser("demo")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "export-json":
        export_json(args.db, args.yaml, args.out)
    elif args.cmd == "import-json":
        print(json.dumps(import_json(args.db, args.yaml, args.src)))
    elif args.cmd == "export-csv":
        export_csv(args.db, args.yaml, args.out, args.exercise)
    elif args.cmd == "next-target":
        print(json.dumps(next_target(args.db, args.yaml, args.exercise), indent=2))
    elif args.cmd == "stats":
        print(json.dumps(exercise_stats(args.db, args.yaml, args.exercise, args.window), indent=2))
    elif args.cmd == "demo":
        demo_data(args.db, args.yaml)


if __name__ == "__main__":
    main()

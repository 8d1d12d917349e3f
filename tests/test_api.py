import os
import sys
import unittest

from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.aggregation import DAY_MS
from rest_api import DojoAPI

NOW = 600 * DAY_MS


class APITestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_dojo.db"
        self.yaml_path = "test_settings.yaml"
        self._cleanup()
        self.api = DojoAPI(db_path=self.db_path, yaml_path=self.yaml_path)
        self.client = TestClient(self.api.app)

    def tearDown(self) -> None:
        self._cleanup()

    def _cleanup(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def _exercise_id(self, name: str) -> str:
        for exercise in self.client.get("/exercises").json():
            if exercise["name"] == name:
                return exercise["id"]
        raise AssertionError(name)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_starter_exercises_seeded(self) -> None:
        response = self.client.get("/exercises")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [(e["name"], e["type"]) for e in response.json()],
            [("Push-ups", "reps"), ("Bench Press", "weighted"), ("Wall Sit", "isometric")],
        )

    def test_full_workflow(self) -> None:
        response = self.client.post(
            "/exercises",
            json={
                "name": "Pull-ups",
                "type": "reps",
                "category": "pull",
                "repRange": {"min": 4, "max": 10},
            },
        )
        self.assertEqual(response.status_code, 200)
        ex_id = response.json()["id"]

        response = self.client.get(f"/exercises/{ex_id}/next_target", params={"now": NOW})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["reps"], 4)
        self.assertEqual(response.json()["metric_type"], "reps")

        response = self.client.post(
            "/logs/detailed",
            params={"now": NOW - DAY_MS},
            json=[{"exerciseId": ex_id, "reps": 6, "rir": 7}],
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["reps"], 6)

        response = self.client.get(f"/exercises/{ex_id}/next_target", params={"now": NOW})
        self.assertEqual(response.json()["reps"], 7)

        response = self.client.post(
            "/logs/quick", params={"exercise_id": ex_id, "now": NOW, "rir": 4}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["reps"], 7)

        response = self.client.get(f"/exercises/{ex_id}/logs")
        self.assertEqual([log["reps"] for log in response.json()], [7, 6])

        response = self.client.get(
            f"/exercises/{ex_id}/stats", params={"window": 7, "now": NOW}
        )
        self.assertEqual(response.status_code, 200)
        stats = response.json()
        self.assertEqual(stats["pr_reps"], 7)
        self.assertEqual(stats["volume_this_week"], 6)

        response = self.client.get(
            f"/exercises/{ex_id}/series", params={"window": 7, "now": NOW}
        )
        self.assertEqual(response.json()["metric"], [{"x": 0, "y": 6}, {"x": 1, "y": 7}])

        response = self.client.get("/today", params={"now": NOW})
        self.assertEqual(response.json()["sets_done"], 1)

        response = self.client.post("/logs/undo")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["reps"], 7)

    def test_pain_deload_through_api(self) -> None:
        ex_id = self._exercise_id("Push-ups")
        self.client.post(
            "/logs/detailed",
            params={"now": NOW - DAY_MS},
            json=[{"exerciseId": ex_id, "reps": 10, "rir": 5, "pain0to10": 7}],
        )
        target = self.client.get(
            f"/exercises/{ex_id}/next_target", params={"now": NOW}
        ).json()
        self.assertTrue(target["deload"])
        self.assertEqual(target["reps"], 7)

    def test_errors(self) -> None:
        response = self.client.get("/exercises/missing")
        self.assertEqual(response.status_code, 404)
        response = self.client.get("/exercises/missing/next_target")
        self.assertEqual(response.status_code, 404)

        ex_id = self._exercise_id("Bench Press")
        response = self.client.post(
            "/logs/detailed", json=[{"exerciseId": ex_id, "reps": 5}]
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["detail"], ["Load is required for a complete weighted set."]
        )
        self.assertEqual(self.client.get("/logs").json(), [])

        response = self.client.get(f"/exercises/{ex_id}/stats", params={"window": 14})
        self.assertEqual(response.status_code, 400)

        response = self.client.post("/exercises", json={"name": "Bad", "type": "reps", "repIncrement": 0})
        self.assertEqual(response.status_code, 400)

        response = self.client.post("/logs/undo")
        self.assertEqual(response.status_code, 404)

        response = self.client.delete("/logs/missing")
        self.assertEqual(response.status_code, 404)

    def test_templates(self) -> None:
        push_id = self._exercise_id("Push-ups")
        sit_id = self._exercise_id("Wall Sit")
        response = self.client.post(
            "/templates",
            json={
                "name": "Quick",
                "items": [
                    {"exerciseId": push_id},
                    {
                        "exerciseId": sit_id,
                        "targetMode": "fixed",
                        "fixedTarget": {"durationSec": 30},
                    },
                ],
            },
        )
        self.assertEqual(response.status_code, 200)
        template_id = response.json()["id"]

        response = self.client.get(
            f"/templates/{template_id}/next_targets", params={"now": NOW}
        )
        targets = response.json()
        self.assertEqual(targets[0]["target"]["reps"], 6)
        self.assertEqual(targets[1]["target"]["duration_sec"], 30)

        response = self.client.post(
            "/logs/quick", params={"template_id": template_id, "now": NOW}
        )
        self.assertEqual(len(response.json()), 2)

        self.assertEqual(self.client.delete(f"/templates/{template_id}").status_code, 200)
        self.assertEqual(self.client.get("/templates").json(), [])

    def test_settings(self) -> None:
        response = self.client.get("/settings")
        self.assertEqual(response.json()["dailySetGoal"], 5)
        self.assertEqual(response.json()["progressionDefaults"]["targetRirMin"], 3)

        response = self.client.put(
            "/settings",
            json={"dailySetGoal": 3, "progressionDefaults": {"painReduce": 6}},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["dailySetGoal"], 3)
        self.assertEqual(body["progressionDefaults"]["painReduce"], 6)
        self.assertEqual(body["progressionDefaults"]["targetRirMax"], 5)
        self.assertEqual(self.api.settings.get_int("daily_set_goal", 0), 3)

        response = self.client.put(
            "/settings", json={"progressionDefaults": {"targetRirMin": 9}}
        )
        self.assertEqual(response.status_code, 400)

    def test_export_import_reset(self) -> None:
        ex_id = self._exercise_id("Push-ups")
        self.client.post("/logs/quick", params={"exercise_id": ex_id, "now": NOW})
        backup = self.client.get("/export/json").json()
        self.assertEqual(len(backup["logs"]), 1)

        csv_text = self.client.get("/export/csv").text
        self.assertTrue(csv_text.startswith("timestamp,exerciseId"))

        self.assertEqual(self.client.post("/reset").status_code, 200)
        self.assertEqual(self.client.get("/logs").json(), [])

        response = self.client.post("/import/json", json=backup)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["logs"], 1)
        self.assertEqual(len(self.client.get("/logs").json()), 1)

        response = self.client.post("/import/json", json={"logs": [{"timestamp": 1}]})
        self.assertEqual(response.status_code, 400)

    def test_delete_exercise(self) -> None:
        ex_id = self._exercise_id("Wall Sit")
        self.assertEqual(self.client.delete(f"/exercises/{ex_id}").status_code, 200)
        self.assertEqual(self.client.get(f"/exercises/{ex_id}").status_code, 404)


if __name__ == "__main__":
    unittest.main()

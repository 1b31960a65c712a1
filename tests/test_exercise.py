# -*- coding: utf-8 -*-

from __future__ import annotations

import support


class TestExercise(support.AppTestCase):
    def setUp(self) -> None:
        self.admin = self.make_user("admin")
        self.coach = self.make_user("coach")

    def _name(self, name: str) -> int:
        resp = self.client.post("/v1/exercises/name/add", json={"name": name}, headers=self.admin["headers"])
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["ex_name"]["id"]

    def _exercise(self, name_id: int, sets: int = 3, reps: int = 8, weight: int = 80) -> int:
        resp = self.client.post(
            "/v1/exercises/exercise/add",
            json={"name": name_id, "sets": sets, "reps": reps, "weight": weight},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["exercise"]["id"]

    def test_catalog_names(self) -> None:
        name_id = self._name("Squat")

        resp = self.client.post("/v1/exercises/name/add", json={"name": "Squat"}, headers=self.admin["headers"])
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json(), {"error": {"name": "an exercise with this name already exists"}})

        resp = self.client.get(f"/v1/exercises/name/get/{name_id}", headers=self.coach["headers"])
        self.assertEqual(resp.json()["ex_name"], {"id": name_id, "name": "Squat"})

        resp = self.client.get("/v1/exercises/name/get", headers=self.coach["headers"])
        self.assertIn(name_id, [n["id"] for n in resp.json()["ex_names"]])

        resp = self.client.delete(f"/v1/exercises/name/delete/{name_id}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 403)

        self._exercise(name_id)
        resp = self.client.delete(f"/v1/exercises/name/delete/{name_id}", headers=self.admin["headers"])
        self.assertEqual(resp.status_code, 409)

    def test_exercise_crud(self) -> None:
        name_id = self._name("Overhead press")
        other_name = self._name("Push press")
        exercise_id = self._exercise(name_id, weight=40)

        resp = self.client.get(f"/v1/exercises/exercise/get/{exercise_id}", headers=self.coach["headers"])
        self.assertEqual(
            resp.json()["exercise"],
            {"id": exercise_id, "name": "Overhead press", "name_id": name_id, "sets": 3, "reps": 8, "weight": 40},
        )

        resp = self.client.patch(
            f"/v1/exercises/exercise/update/{exercise_id}",
            json={"name": other_name, "reps": 5},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["exercise"]["name"], "Push press")
        self.assertEqual(resp.json()["exercise"]["reps"], 5)
        self.assertEqual(resp.json()["exercise"]["weight"], 40)

        resp = self.client.patch(
            f"/v1/exercises/exercise/update/{exercise_id}",
            json={"name": 999999},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 404)

        resp = self.client.post(
            "/v1/exercises/exercise/add",
            json={"name": name_id, "sets": 0, "reps": 0, "weight": 0},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(set(resp.json()["error"]), {"sets", "reps", "weight"})

        other_coach = self.make_user("coach")
        resp = self.client.get(f"/v1/exercises/exercise/get/{exercise_id}", headers=other_coach["headers"])
        self.assertEqual(resp.status_code, 404)

        resp = self.client.delete(f"/v1/exercises/exercise/delete/{exercise_id}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 204)

    def test_exercise_day_replace_and_listing(self) -> None:
        bench = self._exercise(self._name("Bench"))
        row = self._exercise(self._name("Row"))
        curl = self._exercise(self._name("Curl"))

        resp = self.client.post(
            "/v1/exercises/day/add",
            json={"name": "Upper A", "exercises": [bench, row]},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 201)
        day = resp.json()["exercise_day"]
        self.assertEqual([e["id"] for e in day["exercises"]], [bench, row])

        for _ in range(2):
            resp = self.client.put(
                f"/v1/exercises/day/update/{day['id']}",
                json={"name": "Upper B", "exercises": [curl, bench]},
                headers=self.coach["headers"],
            )
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json()["exercise_day"]["name"], "Upper B")
            self.assertEqual([e["id"] for e in resp.json()["exercise_day"]["exercises"]], [curl, bench])

        resp = self.client.post(
            "/v1/exercises/day/add",
            json={"name": "Arms", "exercises": [curl]},
            headers=self.coach["headers"],
        )
        second = resp.json()["exercise_day"]["id"]

        resp = self.client.get("/v1/exercises/day/get?page_size=1&page_number=2", headers=self.coach["headers"])
        body = resp.json()
        self.assertEqual([d["id"] for d in body["exercise_days"]], [second])
        self.assertEqual(body["metadata"]["total_records"], 2)

        resp = self.client.post(
            "/v1/exercises/day/add",
            json={"name": "Twice", "exercises": [curl, curl]},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json(), {"error": {"exercises": "must not send the same exercise twice"}})

        resp = self.client.delete(f"/v1/exercises/exercise/delete/{curl}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 409)

    def test_day_used_by_a_plan_cannot_be_deleted(self) -> None:
        squat = self._exercise(self._name("Front squat"))
        resp = self.client.post(
            "/v1/exercises/day/add",
            json={"name": "Legs", "exercises": [squat]},
            headers=self.coach["headers"],
        )
        day_id = resp.json()["exercise_day"]["id"]

        resp = self.client.post(
            "/v1/exercises/plan/add",
            json={"name": "Leg focus", "how_to": "Warm up first", "days": [day_id]},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 201)
        plan = resp.json()["exercise_plan"]
        self.assertEqual(plan["days"][0]["exercises"][0]["id"], squat)
        self.assertEqual(plan["how_to"], "Warm up first")

        resp = self.client.delete(f"/v1/exercises/day/delete/{day_id}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 409)

        # Nothing was removed by the failed delete.
        resp = self.client.get(f"/v1/exercises/day/get/{day_id}", headers=self.coach["headers"])
        self.assertEqual([e["id"] for e in resp.json()["exercise_day"]["exercises"]], [squat])

        resp = self.client.delete("/v1/exercises/day/delete/987654", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 404)

        resp = self.client.delete(f"/v1/exercises/plan/delete/{plan['id']}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 204)
        resp = self.client.delete(f"/v1/exercises/day/delete/{day_id}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 204)
        resp = self.client.get(f"/v1/exercises/day/get/{day_id}", headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 404)

    def test_plan_replace_and_list(self) -> None:
        lunge = self._exercise(self._name("Lunge"))
        days = []
        for name in ("Day 1", "Day 2"):
            resp = self.client.post(
                "/v1/exercises/day/add",
                json={"name": name, "exercises": [lunge]},
                headers=self.coach["headers"],
            )
            days.append(resp.json()["exercise_day"]["id"])

        plan_id = self.client.post(
            "/v1/exercises/plan/add",
            json={"name": "Split", "days": [days[0]]},
            headers=self.coach["headers"],
        ).json()["exercise_plan"]["id"]

        resp = self.client.put(
            f"/v1/exercises/plan/update/{plan_id}",
            json={"name": "Split v2", "how_to": "", "days": [days[1], days[0]]},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([d["id"] for d in resp.json()["exercise_plan"]["days"]], [days[1], days[0]])

        resp = self.client.get("/v1/exercises/plan/get", headers=self.coach["headers"])
        plans = resp.json()["exercise_plans"]
        self.assertEqual([p["id"] for p in plans], [plan_id])
        self.assertEqual(len(plans[0]["days"]), 2)

        resp = self.client.put(
            "/v1/exercises/plan/update/424242",
            json={"name": "Ghost", "days": [days[0]]},
            headers=self.coach["headers"],
        )
        self.assertEqual(resp.status_code, 404)

        resp = self.client.post("/v1/exercises/plan/add", json={"name": "Empty"}, headers=self.coach["headers"])
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json(), {"error": {"days": "must send at least one day"}})

# -*- coding: utf-8 -*-

from __future__ import annotations

import itertools
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.testclient import TestClient

_emails = itertools.count(1)


class AppTestCase(unittest.TestCase):
    """Fresh app + SQLite file per test class; users are seeded straight through storage."""

    client: TestClient

    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="fitcoach-test-"))
        data_root = cls._tmp / "data"
        os.environ["FITCOACH_DATA_ROOT"] = str(data_root)
        os.environ["FITCOACH_DB_PATH"] = str(data_root / "fitcoach.db")
        os.environ["FITCOACH_JWT_SECRET"] = "test-secret"
        # Cheap hashes keep the suite fast.
        os.environ["FITCOACH_BCRYPT_ROUNDS"] = "4"
        os.environ["FITCOACH_LOG_LEVEL"] = "WARNING"
        os.environ.pop("FITCOACH_MAILER_URL", None)

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "fitcoach" or name.startswith("fitcoach."):
                sys.modules.pop(name, None)

        from fitcoach.api import app  # noqa: WPS433 (import inside test for env control)

        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        try:
            cls.client.close()
        except Exception:
            pass
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def make_user(self, role: str = "coach", *, name: Optional[str] = None, password: str = "pa55word123") -> Dict[str, Any]:
        from fitcoach.auth.security import create_access_token, hash_password
        from fitcoach.auth.storage import insert_user

        n = next(_emails)
        user = insert_user(
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@example.com",
            password_hash=hash_password(password),
            role=role,
            activated=True,
        )
        token = create_access_token(user_id=user["id"], role=role)["token"]
        user["headers"] = {"Authorization": f"Bearer {token}"}
        user["password"] = password
        return user

    def make_trainee(self, coach: Dict[str, Any]) -> Dict[str, Any]:
        from fitcoach.users.storage import create_user_card

        trainee = self.make_user("trainee")
        create_user_card(owner=trainee["id"], coach=coach["id"])
        return trainee

    def add_food(self, coach: Dict[str, Any], name: str, calories: int, serving: str = "100g") -> int:
        resp = self.client.post(
            "/v1/meals/food/add",
            json={"food_name": name, "serving": serving, "calories": calories},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["food"]["id"]

    def add_meal(self, coach: Dict[str, Any], kind: str, food_ids) -> Dict[str, Any]:
        resp = self.client.post(
            f"/v1/meals/{kind}/add",
            json={"food": [{"id": i} for i in food_ids]},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def add_day(self, coach: Dict[str, Any], name: str = "Training day") -> int:
        food = self.add_food(coach, f"Rice {next(_emails)}", 200)
        body = {"name": name}
        for kind, path in (("breakfast", "breakfast"), ("lunch", "lunch"), ("dinner", "dinner")):
            body[kind] = self.add_meal(coach, path, [food])[kind]["id"]
        resp = self.client.post("/v1/plans/day/add", json=body, headers=coach["headers"])
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["day"]["id"]

    def add_week(self, coach: Dict[str, Any], name: str = "Cutting week") -> int:
        day_id = self.add_day(coach)
        body = {"name": name}
        for weekday in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"):
            body[weekday] = day_id
        resp = self.client.post("/v1/plans/week/add", json=body, headers=coach["headers"])
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["plan_meal"]["id"]

    def add_exercise_plan(self, coach: Dict[str, Any], admin: Dict[str, Any], name: str = "Push/Pull") -> int:
        n = next(_emails)
        resp = self.client.post("/v1/exercises/name/add", json={"name": f"Bench press {n}"}, headers=admin["headers"])
        self.assertEqual(resp.status_code, 201, resp.text)
        name_id = resp.json()["ex_name"]["id"]
        resp = self.client.post(
            "/v1/exercises/exercise/add",
            json={"name": name_id, "sets": 3, "reps": 10, "weight": 60},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        exercise_id = resp.json()["exercise"]["id"]
        resp = self.client.post(
            "/v1/exercises/day/add",
            json={"name": "Upper", "exercises": [exercise_id]},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        day_id = resp.json()["exercise_day"]["id"]
        resp = self.client.post(
            "/v1/exercises/plan/add",
            json={"name": name, "how_to": "Rest 90s between sets", "days": [day_id]},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["exercise_plan"]["id"]

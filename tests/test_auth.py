# -*- coding: utf-8 -*-

from __future__ import annotations

import support


class TestAuth(support.AppTestCase):
    def test_healthcheck_is_public(self) -> None:
        resp = self.client.get("/v1/healthcheck")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "available")

    def test_anonymous_request_is_rejected(self) -> None:
        resp = self.client.get("/v1/meals/food/get")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers.get("www-authenticate"), "Bearer")
        self.assertIn("error", resp.json())

    def test_garbage_token_is_rejected_by_the_gate(self) -> None:
        resp = self.client.get("/v1/users/me", headers={"Authorization": "Bearer not.a.token"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "invalid or missing authentication token"})

        resp = self.client.get("/v1/users/me", headers={"Authorization": "Basic abc"})
        self.assertEqual(resp.status_code, 401)

    def test_login_issues_a_token(self) -> None:
        coach = self.make_user("coach")

        resp = self.client.post(
            "/v1/tokens/authentication",
            json={"email": coach["email"], "password": coach["password"]},
        )
        self.assertEqual(resp.status_code, 201)
        token = resp.json()["authentication_token"]
        self.assertTrue(token["token"])
        self.assertTrue(token["expiry"].endswith("Z"))

        resp = self.client.get("/v1/users/me", headers={"Authorization": f"Bearer {token['token']}"})
        self.assertEqual(resp.status_code, 200)
        me = resp.json()["user"]
        self.assertEqual(me["id"], coach["id"])
        self.assertEqual(me["role"], "coach")
        self.assertNotIn("password_hash", me)

    def test_login_failures(self) -> None:
        coach = self.make_user("coach")

        resp = self.client.post(
            "/v1/tokens/authentication",
            json={"email": coach["email"], "password": "wrong-password"},
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "invalid authentication credentials"})

        resp = self.client.post(
            "/v1/tokens/authentication",
            json={"email": "nobody@example.com", "password": "whatever123"},
        )
        self.assertEqual(resp.status_code, 401)

        resp = self.client.post("/v1/tokens/authentication", json={"email": "not-an-email", "password": "short"})
        self.assertEqual(resp.status_code, 422)
        errors = resp.json()["error"]
        self.assertEqual(errors["email"], "must be a valid email address")
        self.assertEqual(errors["password"], "must be at least 8 bytes long")

    def test_update_me(self) -> None:
        coach = self.make_user("coach")

        resp = self.client.patch("/v1/users/me", json={"name": "Renamed Coach"}, headers=coach["headers"])
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["name"], "Renamed Coach")

        resp = self.client.patch("/v1/users/me", json={"password": "brand-new-pass"}, headers=coach["headers"])
        self.assertEqual(resp.status_code, 200)
        resp = self.client.post(
            "/v1/tokens/authentication",
            json={"email": coach["email"], "password": "brand-new-pass"},
        )
        self.assertEqual(resp.status_code, 201)

        other = self.make_user("coach")
        resp = self.client.patch("/v1/users/me", json={"email": other["email"]}, headers=coach["headers"])
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json(), {"error": {"email": "a user with this email address already exists"}})

    def test_stale_version_is_an_edit_conflict(self) -> None:
        from fitcoach.auth.storage import get_user_by_id, update_user
        from fitcoach.errors import EditConflict

        coach = self.make_user("coach")
        loaded = get_user_by_id(coach["id"])
        update_user(dict(loaded, name="First writer"))

        with self.assertRaises(EditConflict):
            update_user(dict(loaded, name="Second writer"))

    def test_role_gates(self) -> None:
        coach = self.make_user("coach")
        trainee = self.make_trainee(coach)

        resp = self.client.get("/v1/meals/food/get", headers=trainee["headers"])
        self.assertEqual(resp.status_code, 403)

        resp = self.client.get("/v1/users/card", headers=coach["headers"])
        self.assertEqual(resp.status_code, 403)

        resp = self.client.post("/v1/exercises/name/add", json={"name": "Deadlift"}, headers=coach["headers"])
        self.assertEqual(resp.status_code, 403)

        admin = self.make_user("admin")
        resp = self.client.get("/v1/meals/food/get", headers=admin["headers"])
        self.assertEqual(resp.status_code, 200)

    def test_inactive_accounts_are_gated(self) -> None:
        from fitcoach.auth.security import create_access_token, hash_password
        from fitcoach.auth.storage import insert_user

        user = insert_user(
            name="Dormant Coach",
            email="dormant@example.com",
            password_hash=hash_password("pa55word123"),
            role="coach",
            activated=False,
        )
        token = create_access_token(user_id=user["id"], role="coach")["token"]
        headers = {"Authorization": f"Bearer {token}"}

        resp = self.client.get("/v1/users/me", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["user"]["activated"])

        resp = self.client.get("/v1/meals/food/get", headers=headers)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(
            resp.json(),
            {"error": "your user account must be activated to access this resource"},
        )

    def test_bad_request_bodies(self) -> None:
        coach = self.make_user("coach")

        resp = self.client.post(
            "/v1/meals/food/add",
            content=b'{"food_name": "Oatmeal",',
            headers={**coach["headers"], "Content-Type": "application/json"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("badly-formed JSON", resp.json()["error"])

        resp = self.client.post(
            "/v1/meals/food/add",
            json={"food_name": "Oatmeal", "serving": "100g", "calories": 150, "sugar": 1},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": 'body contains unknown key "sugar"'})

        resp = self.client.post(
            "/v1/meals/food/add",
            json={"food_name": "Oatmeal", "serving": "100g", "calories": "lots"},
            headers=coach["headers"],
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": 'body contains incorrect JSON type for field "calories"'})

        resp = self.client.get("/v1/meals/food/get/abc", headers=coach["headers"])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "invalid id parameter"})

        resp = self.client.get("/v1/no/such/route", headers=coach["headers"])
        self.assertEqual(resp.status_code, 404)

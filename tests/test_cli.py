# -*- coding: utf-8 -*-

from __future__ import annotations

import contextlib
import io
import sys
from unittest import mock

import support


class TestCli(support.AppTestCase):
    def _run(self, *argv: str) -> tuple[int, str]:
        from fitcoach import cli
        from fitcoach.config import settings

        out = io.StringIO()
        args = ["fitcoach-admin", "--db-path", str(settings.db_path), *argv]
        with mock.patch.object(sys, "argv", args), contextlib.redirect_stdout(out):
            code = cli.main()
        return code, out.getvalue()

    def test_init_db_is_idempotent(self) -> None:
        for _ in range(2):
            code, out = self._run("init-db")
            self.assertEqual(code, 0)
            self.assertIn("Database ready", out)

    def test_create_admin_then_sign_in(self) -> None:
        code, out = self._run(
            "create-user", "--name", "Root", "--email", "root@example.com", "--password", "bootstrap-pass"
        )
        self.assertEqual(code, 0, out)
        self.assertIn("Created admin root@example.com", out)

        resp = self.client.post(
            "/v1/tokens/authentication",
            json={"email": "root@example.com", "password": "bootstrap-pass"},
        )
        self.assertEqual(resp.status_code, 201)

        code, out = self._run(
            "create-user", "--name", "Root", "--email", "root@example.com", "--password", "bootstrap-pass"
        )
        self.assertEqual(code, 1)
        self.assertIn("email: a user with this email address already exists", out)

        code, out = self._run("create-user", "--name", "", "--email", "bad", "--password", "x")
        self.assertEqual(code, 1)
        self.assertIn("Error: name: must be provided", out)

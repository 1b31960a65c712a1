# -*- coding: utf-8 -*-
"""Users — user card, history and plan assignment storage (SQLite)."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Tuple

from ..app_db import db_conn
from ..errors import RecordNotFound, WrongCredentials
from ..exercise.storage import exercise_plan_owned
from ..pagination import Filters, calculate_metadata
from ..plans.storage import plan_meal_owned
from .models import Trainee, UserCard, UserHistory

logger = logging.getLogger(__name__)

_CARD_COLUMNS = "id, owner, coach, current_plan, current_exercise_plan, current_weight"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _card_from_row(row: sqlite3.Row) -> UserCard:
    return UserCard(
        id=row["id"],
        owner=row["owner"],
        coach=row["coach"],
        current_plan=row["current_plan"],
        current_exercise_plan=row["current_exercise_plan"],
        weight=row["current_weight"],
    )


def _history_from_row(row: sqlite3.Row) -> UserHistory:
    return UserHistory(
        id=row["id"],
        plan_meal=row["plan_meal"],
        exercise_plan=row["exercise_plan"],
        start_at=row["start_at"],
        end_at=row["end_at"],
        start_weight=row["start_weight"],
        finish_weight=row["finish_weight"],
        is_current=bool(row["is_current"]),
    )


def _fetch_card(conn: sqlite3.Connection, owner: int) -> UserCard:
    row = conn.execute(f"SELECT {_CARD_COLUMNS} FROM user_card WHERE owner = ?", (owner,)).fetchone()
    if not row:
        raise RecordNotFound()
    return _card_from_row(row)


def create_user_card(*, owner: int, coach: int) -> UserCard:
    with db_conn() as conn:
        cur = conn.execute("INSERT INTO user_card (owner, coach) VALUES (?, ?)", (owner, coach))
        card_id = cur.lastrowid
    return UserCard(id=card_id, owner=owner, coach=coach)


def get_user_card(owner: int) -> UserCard:
    with db_conn() as conn:
        return _fetch_card(conn, owner)


def update_card_weight(*, owner: int, weight: int) -> None:
    with db_conn() as conn:
        cur = conn.execute("UPDATE user_card SET current_weight = ? WHERE owner = ?", (weight, owner))
        if cur.rowcount == 0:
            raise RecordNotFound()


def coach_permitted(*, trainee_id: int, coach: int) -> bool:
    with db_conn() as conn:
        row = conn.execute(
            "SELECT 1 FROM user_card WHERE owner = ? AND coach = ?",
            (trainee_id, coach),
        ).fetchone()
    return row is not None


def list_trainees(*, coach: int, filters: Filters) -> Tuple[List[Trainee], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            """
            SELECT count(*) OVER() AS total, u.id, u.name, u.email
            FROM user_card c JOIN users u ON u.id = c.owner
            WHERE c.coach = ?
            ORDER BY u.id
            LIMIT ? OFFSET ?
            """,
            (coach, filters.limit, filters.offset),
        ).fetchall()
    total = rows[0]["total"] if rows else 0
    trainees = [Trainee(id=r["id"], name=r["name"], email=r["email"]) for r in rows]
    return trainees, calculate_metadata(total, filters.page, filters.page_size)


def list_history(*, owner: int, filters: Filters) -> Tuple[List[UserHistory], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            """
            SELECT count(*) OVER() AS total, id, plan_meal, exercise_plan, start_at, end_at,
                   start_weight, finish_weight, is_current
            FROM user_history
            WHERE owner = ?
            ORDER BY start_at DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (owner, filters.limit, filters.offset),
        ).fetchall()
    total = rows[0]["total"] if rows else 0
    return [_history_from_row(r) for r in rows], calculate_metadata(total, filters.page, filters.page_size)


def _assign(
    *,
    trainee_id: int,
    coach: int,
    plan_id: int,
    column: str,
    owned: Callable[[sqlite3.Connection, int, int], bool],
) -> UserCard:
    """Point the trainee's card at a new plan and roll the history over in one transaction."""
    with db_conn() as conn:
        card = _fetch_card(conn, trainee_id)
        if card.coach != coach:
            raise WrongCredentials()
        if not owned(conn, plan_id, coach):
            raise RecordNotFound()

        now = _utc_now()
        conn.execute(
            """
            UPDATE user_history
            SET end_at = ?, finish_weight = ?, is_current = 0
            WHERE owner = ? AND is_current = 1
            """,
            (now, card.weight, trainee_id),
        )
        cur = conn.execute(
            f"UPDATE user_card SET {column} = ? WHERE owner = ? AND coach = ?",
            (plan_id, trainee_id, coach),
        )
        if cur.rowcount == 0:
            raise WrongCredentials()
        card = _fetch_card(conn, trainee_id)
        conn.execute(
            """
            INSERT INTO user_history (owner, plan_meal, exercise_plan, start_at, start_weight, is_current)
            VALUES (?, ?, ?, ?, ?, 1)
            """,
            (trainee_id, card.current_plan, card.current_exercise_plan, now, card.weight),
        )
    logger.info("coach %s assigned %s %s to trainee %s", coach, column, plan_id, trainee_id)
    return card


def assign_meal_plan(*, trainee_id: int, coach: int, plan_id: int) -> UserCard:
    return _assign(trainee_id=trainee_id, coach=coach, plan_id=plan_id, column="current_plan", owned=plan_meal_owned)


def assign_exercise_plan(*, trainee_id: int, coach: int, plan_id: int) -> UserCard:
    return _assign(
        trainee_id=trainee_id,
        coach=coach,
        plan_id=plan_id,
        column="current_exercise_plan",
        owned=exercise_plan_owned,
    )

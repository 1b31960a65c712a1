# -*- coding: utf-8 -*-
"""Plans — day and weekly meal plan storage helpers (SQLite)."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..app_db import FOREIGN_KEY_VIOLATION, WEEKDAYS, constraint_violation, db_conn, placeholders
from ..errors import ForeignKeyConflict, RecordNotFound, WrongForeignKey
from ..meals.storage import MEAL_STORES
from ..pagination import Filters, calculate_metadata
from .models import DayFull, DayRequest, DaySummary, PlanMeal, PlanMealRequest

_DAY_MEALS = ("breakfast", "am_snack", "lunch", "pm_snack", "dinner")
_WEEKDAY_COLUMNS = ", ".join(f"{d}_id" for d in WEEKDAYS)


def _nullable(meal_id: int) -> Optional[int]:
    return meal_id or None


def _check_meals(conn: sqlite3.Connection, coach: int, day: DayRequest) -> None:
    for table in _DAY_MEALS:
        meal_id = _nullable(getattr(day, table))
        if meal_id is None:
            continue
        row = conn.execute(f"SELECT 1 FROM {table} WHERE id = ? AND coach = ?", (meal_id, coach)).fetchone()
        if not row:
            raise WrongForeignKey()


def _day_params(day: DayRequest) -> Tuple[Any, ...]:
    return (
        day.name,
        day.breakfast,
        _nullable(day.am_snack),
        day.lunch,
        _nullable(day.pm_snack),
        day.dinner,
    )


def _fetch_day(conn: sqlite3.Connection, day_id: int, coach: int) -> Optional[DayFull]:
    row = conn.execute(
        """
        SELECT id, name, breakfast_id, am_snack_id, lunch_id, pm_snack_id, dinner_id
        FROM day WHERE id = ? AND coach = ?
        """,
        (day_id, coach),
    ).fetchone()
    if not row:
        return None
    day: Dict[str, Any] = {"id": row["id"], "name": row["name"]}
    for table in _DAY_MEALS:
        meal_id = row[f"{table}_id"]
        day[table] = MEAL_STORES[table].fetch(conn, meal_id, coach) if meal_id else None
    return DayFull.model_validate(day)


def insert_day(*, coach: int, day: DayRequest) -> DayFull:
    try:
        with db_conn() as conn:
            _check_meals(conn, coach, day)
            cur = conn.execute(
                """
                INSERT INTO day (name, breakfast_id, am_snack_id, lunch_id, pm_snack_id, dinner_id, coach)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (*_day_params(day), coach),
            )
            created = _fetch_day(conn, cur.lastrowid, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return created


def get_day(day_id: int, coach: int) -> DayFull:
    with db_conn() as conn:
        day = _fetch_day(conn, day_id, coach)
    if day is None:
        raise RecordNotFound()
    return day


def get_day_refs(day_id: int, coach: int) -> DayRequest:
    """The stored day as an editable body; absent snacks come back as 0."""
    with db_conn() as conn:
        row = conn.execute(
            """
            SELECT name, breakfast_id, am_snack_id, lunch_id, pm_snack_id, dinner_id
            FROM day WHERE id = ? AND coach = ?
            """,
            (day_id, coach),
        ).fetchone()
    if not row:
        raise RecordNotFound()
    return DayRequest(name=row["name"], **{t: row[f"{t}_id"] or 0 for t in _DAY_MEALS})


def list_days(*, coach: int, filters: Filters) -> Tuple[List[DaySummary], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            "SELECT count(*) OVER() AS total, id, name FROM day WHERE coach = ? ORDER BY id LIMIT ? OFFSET ?",
            (coach, filters.limit, filters.offset),
        ).fetchall()
    total = rows[0]["total"] if rows else 0
    days = [DaySummary(id=r["id"], name=r["name"]) for r in rows]
    return days, calculate_metadata(total, filters.page, filters.page_size)


def update_day(*, day_id: int, coach: int, day: DayRequest) -> DayFull:
    try:
        with db_conn() as conn:
            _check_meals(conn, coach, day)
            cur = conn.execute(
                """
                UPDATE day
                SET name = ?, breakfast_id = ?, am_snack_id = ?, lunch_id = ?, pm_snack_id = ?, dinner_id = ?
                WHERE id = ? AND coach = ?
                """,
                (*_day_params(day), day_id, coach),
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            updated = _fetch_day(conn, day_id, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return updated


def delete_day(day_id: int, coach: int) -> None:
    try:
        with db_conn() as conn:
            cur = conn.execute("DELETE FROM day WHERE id = ? AND coach = ?", (day_id, coach))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise


def _plan_day_ids(plan: PlanMealRequest) -> List[int]:
    return [getattr(plan, d) for d in WEEKDAYS]


def _check_days(conn: sqlite3.Connection, coach: int, day_ids: Iterable[int]) -> None:
    wanted = set(day_ids)
    rows = conn.execute(
        f"SELECT id FROM day WHERE coach = ? AND id IN ({placeholders(list(wanted))})",
        (coach, *wanted),
    ).fetchall()
    if len(rows) != len(wanted):
        raise WrongForeignKey()


def _build_plans(conn: sqlite3.Connection, rows: List[sqlite3.Row]) -> List[PlanMeal]:
    day_ids = {row[f"{d}_id"] for row in rows for d in WEEKDAYS}
    names: Dict[int, str] = {}
    if day_ids:
        for r in conn.execute(
            f"SELECT id, name FROM day WHERE id IN ({placeholders(list(day_ids))})",
            tuple(day_ids),
        ):
            names[r["id"]] = r["name"]
    plans = []
    for row in rows:
        plan: Dict[str, Any] = {"id": row["id"], "name": row["name"]}
        for d in WEEKDAYS:
            day_id = row[f"{d}_id"]
            plan[d] = {"id": day_id, "name": names.get(day_id, "")}
        plans.append(PlanMeal.model_validate(plan))
    return plans


def _fetch_plan_meal(conn: sqlite3.Connection, plan_id: int, coach: int) -> Optional[PlanMeal]:
    rows = conn.execute(
        f"SELECT id, name, {_WEEKDAY_COLUMNS} FROM plan_meal WHERE id = ? AND coach = ?",
        (plan_id, coach),
    ).fetchall()
    plans = _build_plans(conn, rows)
    return plans[0] if plans else None


def plan_meal_owned(conn: sqlite3.Connection, plan_id: int, coach: int) -> bool:
    return conn.execute("SELECT 1 FROM plan_meal WHERE id = ? AND coach = ?", (plan_id, coach)).fetchone() is not None


def insert_plan_meal(*, coach: int, plan: PlanMealRequest) -> PlanMeal:
    day_ids = _plan_day_ids(plan)
    try:
        with db_conn() as conn:
            _check_days(conn, coach, day_ids)
            cur = conn.execute(
                f"""
                INSERT INTO plan_meal (name, coach, {_WEEKDAY_COLUMNS})
                VALUES (?, ?, {placeholders(day_ids)})
                """,
                (plan.name, coach, *day_ids),
            )
            created = _fetch_plan_meal(conn, cur.lastrowid, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return created


def get_plan_meal(plan_id: int, coach: int) -> PlanMeal:
    with db_conn() as conn:
        plan = _fetch_plan_meal(conn, plan_id, coach)
    if plan is None:
        raise RecordNotFound()
    return plan


def list_plan_meals(*, coach: int, filters: Filters) -> Tuple[List[PlanMeal], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            f"""
            SELECT count(*) OVER() AS total, id, name, {_WEEKDAY_COLUMNS}
            FROM plan_meal WHERE coach = ?
            ORDER BY id LIMIT ? OFFSET ?
            """,
            (coach, filters.limit, filters.offset),
        ).fetchall()
        plans = _build_plans(conn, rows)
    total = rows[0]["total"] if rows else 0
    return plans, calculate_metadata(total, filters.page, filters.page_size)


def replace_plan_meal(*, plan_id: int, coach: int, plan: PlanMealRequest) -> PlanMeal:
    day_ids = _plan_day_ids(plan)
    assignments = ", ".join(f"{d}_id = ?" for d in WEEKDAYS)
    try:
        with db_conn() as conn:
            _check_days(conn, coach, day_ids)
            cur = conn.execute(
                f"UPDATE plan_meal SET name = ?, {assignments} WHERE id = ? AND coach = ?",
                (plan.name, *day_ids, plan_id, coach),
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            updated = _fetch_plan_meal(conn, plan_id, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return updated


def delete_plan_meal(plan_id: int, coach: int) -> None:
    """Plans that were ever assigned stay referenced by user history and cannot be removed."""
    try:
        with db_conn() as conn:
            cur = conn.execute("DELETE FROM plan_meal WHERE id = ? AND coach = ?", (plan_id, coach))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise

# -*- coding: utf-8 -*-
"""Exercise storage helpers (SQLite).

Exercise names form a global catalog maintained by admins. Exercises, exercise
days and exercise plans are owned by a coach and every query is scoped by the
coach id, so rows of another coach behave as if they did not exist.

Days link exercises and plans link days through join tables. Their child sets
are replaced wholesale on update (drop every link, insert the new ones) inside
the same transaction as the parent row.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..app_db import (
    FOREIGN_KEY_VIOLATION,
    UNIQUE_VIOLATION,
    constraint_violation,
    db_conn,
    group_rows,
    placeholders,
)
from ..errors import DuplicateRecord, ForeignKeyConflict, RecordNotFound, WrongForeignKey
from ..pagination import Filters, calculate_metadata
from .models import (
    Exercise,
    ExerciseDay,
    ExerciseDayRequest,
    ExerciseName,
    ExercisePlan,
    ExercisePlanRequest,
    ExerciseRequest,
)

logger = logging.getLogger(__name__)

_EXERCISE_SELECT = """
    SELECT e.id, e.name AS name_id, n.name, e.sets, e.reps, e.weight
    FROM exercise e JOIN exercise_name n ON n.id = e.name
"""


def _metadata(rows: List[sqlite3.Row], filters: Filters) -> Dict[str, Any]:
    total = rows[0]["total"] if rows else 0
    return calculate_metadata(total, filters.page, filters.page_size)


def _exercise_from_row(row: sqlite3.Row) -> Exercise:
    return Exercise(
        id=row["id"],
        name=row["name"],
        name_id=row["name_id"],
        sets=row["sets"],
        reps=row["reps"],
        weight=row["weight"],
    )


# Exercise names

def insert_exercise_name(name: str) -> ExerciseName:
    try:
        with db_conn() as conn:
            cur = conn.execute("INSERT INTO exercise_name (name) VALUES (?)", (name,))
            name_id = cur.lastrowid
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            raise DuplicateRecord("name", "an exercise with this name already exists") from exc
        raise
    return ExerciseName(id=name_id, name=name)


def list_exercise_names(filters: Filters) -> Tuple[List[ExerciseName], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            "SELECT count(*) OVER() AS total, id, name FROM exercise_name ORDER BY id LIMIT ? OFFSET ?",
            (filters.limit, filters.offset),
        ).fetchall()
    return [ExerciseName(id=r["id"], name=r["name"]) for r in rows], _metadata(rows, filters)


def get_exercise_name(name_id: int) -> ExerciseName:
    with db_conn() as conn:
        row = conn.execute("SELECT id, name FROM exercise_name WHERE id = ?", (name_id,)).fetchone()
    if not row:
        raise RecordNotFound()
    return ExerciseName(id=row["id"], name=row["name"])


def delete_exercise_name(name_id: int) -> None:
    try:
        with db_conn() as conn:
            cur = conn.execute("DELETE FROM exercise_name WHERE id = ?", (name_id,))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise


# Exercises

def _fetch_exercise(conn: sqlite3.Connection, exercise_id: int, coach: int) -> Optional[Exercise]:
    row = conn.execute(f"{_EXERCISE_SELECT} WHERE e.id = ? AND e.coach = ?", (exercise_id, coach)).fetchone()
    return _exercise_from_row(row) if row else None


def _check_exercise_name(conn: sqlite3.Connection, name_id: int) -> None:
    if conn.execute("SELECT 1 FROM exercise_name WHERE id = ?", (name_id,)).fetchone() is None:
        raise WrongForeignKey()


def insert_exercise(*, coach: int, exercise: ExerciseRequest) -> Exercise:
    try:
        with db_conn() as conn:
            _check_exercise_name(conn, exercise.name)
            cur = conn.execute(
                "INSERT INTO exercise (name, sets, reps, weight, coach) VALUES (?, ?, ?, ?, ?)",
                (exercise.name, exercise.sets, exercise.reps, exercise.weight, coach),
            )
            created = _fetch_exercise(conn, cur.lastrowid, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return created


def get_exercise(exercise_id: int, coach: int) -> Exercise:
    with db_conn() as conn:
        exercise = _fetch_exercise(conn, exercise_id, coach)
    if exercise is None:
        raise RecordNotFound()
    return exercise


def list_exercises(*, coach: int, filters: Filters) -> Tuple[List[Exercise], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            """
            SELECT count(*) OVER() AS total, e.id, e.name AS name_id, n.name, e.sets, e.reps, e.weight
            FROM exercise e JOIN exercise_name n ON n.id = e.name
            WHERE e.coach = ?
            ORDER BY e.id
            LIMIT ? OFFSET ?
            """,
            (coach, filters.limit, filters.offset),
        ).fetchall()
    return [_exercise_from_row(r) for r in rows], _metadata(rows, filters)


def update_exercise(*, exercise_id: int, coach: int, exercise: ExerciseRequest) -> Exercise:
    try:
        with db_conn() as conn:
            _check_exercise_name(conn, exercise.name)
            cur = conn.execute(
                "UPDATE exercise SET name = ?, sets = ?, reps = ?, weight = ? WHERE id = ? AND coach = ?",
                (exercise.name, exercise.sets, exercise.reps, exercise.weight, exercise_id, coach),
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            updated = _fetch_exercise(conn, exercise_id, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return updated


def delete_exercise(exercise_id: int, coach: int) -> None:
    try:
        with db_conn() as conn:
            cur = conn.execute("DELETE FROM exercise WHERE id = ? AND coach = ?", (exercise_id, coach))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise


# Exercise days

def _day_head(row: sqlite3.Row) -> Dict[str, Any]:
    return {"id": row["id"], "name": row["name"]}


def _day_exercise(row: sqlite3.Row) -> Optional[Dict[str, Any]]:
    if row["exercise_id"] is None:
        return None
    return {
        "id": row["exercise_id"],
        "name": row["exercise_name"],
        "name_id": row["name_id"],
        "sets": row["sets"],
        "reps": row["reps"],
        "weight": row["weight"],
    }


_DAY_CHILDREN = """
    LEFT JOIN exercises_to_day x ON x.day_id = d.id
    LEFT JOIN exercise e ON e.id = x.exercise_id
    LEFT JOIN exercise_name n ON n.id = e.name
"""

_DAY_CHILD_COLUMNS = "e.id AS exercise_id, e.name AS name_id, n.name AS exercise_name, e.sets, e.reps, e.weight"


def _group_days(rows: Iterable[sqlite3.Row]) -> List[ExerciseDay]:
    days = group_rows(
        rows,
        parent_key="id",
        build_parent=_day_head,
        child_field="exercises",
        build_child=_day_exercise,
    )
    return [ExerciseDay.model_validate(d) for d in days]


def _fetch_days(conn: sqlite3.Connection, coach: int, day_ids: Sequence[int]) -> Dict[int, ExerciseDay]:
    if not day_ids:
        return {}
    rows = conn.execute(
        f"""
        SELECT d.id, d.name, {_DAY_CHILD_COLUMNS}
        FROM exercise_day d
        {_DAY_CHILDREN}
        WHERE d.coach = ? AND d.id IN ({placeholders(day_ids)})
        ORDER BY d.id, x.rowid
        """,
        (coach, *day_ids),
    ).fetchall()
    return {day.id: day for day in _group_days(rows)}


def _check_exercises(conn: sqlite3.Connection, coach: int, exercise_ids: Sequence[int]) -> None:
    rows = conn.execute(
        f"SELECT id FROM exercise WHERE coach = ? AND id IN ({placeholders(exercise_ids)})",
        (coach, *exercise_ids),
    ).fetchall()
    if len(rows) != len(set(exercise_ids)):
        raise WrongForeignKey()


def _link_exercises(conn: sqlite3.Connection, day_id: int, exercise_ids: Sequence[int]) -> None:
    conn.executemany(
        "INSERT INTO exercises_to_day (exercise_id, day_id) VALUES (?, ?)",
        [(exercise_id, day_id) for exercise_id in exercise_ids],
    )


def insert_exercise_day(*, coach: int, day: ExerciseDayRequest) -> ExerciseDay:
    try:
        with db_conn() as conn:
            _check_exercises(conn, coach, day.exercises)
            cur = conn.execute("INSERT INTO exercise_day (name, coach) VALUES (?, ?)", (day.name, coach))
            day_id = cur.lastrowid
            _link_exercises(conn, day_id, day.exercises)
            created = _fetch_days(conn, coach, [day_id])[day_id]
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return created


def get_exercise_day(day_id: int, coach: int) -> ExerciseDay:
    with db_conn() as conn:
        days = _fetch_days(conn, coach, [day_id])
    if day_id not in days:
        raise RecordNotFound()
    return days[day_id]


def list_exercise_days(*, coach: int, filters: Filters) -> Tuple[List[ExerciseDay], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            f"""
            WITH d AS (
                SELECT id, name, count(*) OVER() AS total
                FROM exercise_day
                WHERE coach = ?
                ORDER BY id
                LIMIT ? OFFSET ?
            )
            SELECT d.id, d.name, d.total, {_DAY_CHILD_COLUMNS}
            FROM d
            {_DAY_CHILDREN}
            ORDER BY d.id, x.rowid
            """,
            (coach, filters.limit, filters.offset),
        ).fetchall()
    return _group_days(rows), _metadata(rows, filters)


def replace_exercise_day(*, day_id: int, coach: int, day: ExerciseDayRequest) -> ExerciseDay:
    try:
        with db_conn() as conn:
            _check_exercises(conn, coach, day.exercises)
            cur = conn.execute(
                "UPDATE exercise_day SET name = ? WHERE id = ? AND coach = ?",
                (day.name, day_id, coach),
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            cur = conn.execute("DELETE FROM exercises_to_day WHERE day_id = ?", (day_id,))
            if cur.rowcount == 0:
                raise RecordNotFound()
            _link_exercises(conn, day_id, day.exercises)
            updated = _fetch_days(conn, coach, [day_id])[day_id]
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return updated


def delete_exercise_day(day_id: int, coach: int) -> None:
    """Links go first, then the day; a plan still using the day blocks the whole delete."""
    try:
        with db_conn() as conn:
            conn.execute(
                """
                DELETE FROM exercises_to_day
                WHERE day_id IN (SELECT id FROM exercise_day WHERE id = ? AND coach = ?)
                """,
                (day_id, coach),
            )
            cur = conn.execute("DELETE FROM exercise_day WHERE id = ? AND coach = ?", (day_id, coach))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise


# Exercise plans

def _plan_head(row: sqlite3.Row) -> Dict[str, Any]:
    return {"id": row["id"], "name": row["name"], "how_to": row["how_to"]}


def _plan_day_ref(row: sqlite3.Row) -> Optional[int]:
    return row["day_id"]


def _build_plans(conn: sqlite3.Connection, coach: int, rows: List[sqlite3.Row]) -> List[ExercisePlan]:
    heads = group_rows(
        rows,
        parent_key="id",
        build_parent=_plan_head,
        child_field="days",
        build_child=_plan_day_ref,
    )
    day_ids = sorted({day_id for head in heads for day_id in head["days"]})
    days = _fetch_days(conn, coach, day_ids)
    plans = []
    for head in heads:
        head["days"] = [days[day_id] for day_id in head["days"] if day_id in days]
        plans.append(ExercisePlan.model_validate(head))
    return plans


def _fetch_plan(conn: sqlite3.Connection, plan_id: int, coach: int) -> Optional[ExercisePlan]:
    rows = conn.execute(
        """
        SELECT p.id, p.name, p.how_to, pd.day_id
        FROM exercise_plan p
        LEFT JOIN exercise_plan_day pd ON pd.plan_id = p.id
        WHERE p.id = ? AND p.coach = ?
        ORDER BY pd.rowid
        """,
        (plan_id, coach),
    ).fetchall()
    plans = _build_plans(conn, coach, rows)
    return plans[0] if plans else None


def exercise_plan_owned(conn: sqlite3.Connection, plan_id: int, coach: int) -> bool:
    row = conn.execute("SELECT 1 FROM exercise_plan WHERE id = ? AND coach = ?", (plan_id, coach)).fetchone()
    return row is not None


def _check_days(conn: sqlite3.Connection, coach: int, day_ids: Sequence[int]) -> None:
    rows = conn.execute(
        f"SELECT id FROM exercise_day WHERE coach = ? AND id IN ({placeholders(day_ids)})",
        (coach, *day_ids),
    ).fetchall()
    if len(rows) != len(set(day_ids)):
        raise WrongForeignKey()


def _link_days(conn: sqlite3.Connection, plan_id: int, day_ids: Sequence[int]) -> None:
    conn.executemany(
        "INSERT INTO exercise_plan_day (plan_id, day_id) VALUES (?, ?)",
        [(plan_id, day_id) for day_id in day_ids],
    )


def insert_exercise_plan(*, coach: int, plan: ExercisePlanRequest) -> ExercisePlan:
    try:
        with db_conn() as conn:
            _check_days(conn, coach, plan.days)
            cur = conn.execute(
                "INSERT INTO exercise_plan (name, how_to, coach) VALUES (?, ?, ?)",
                (plan.name, plan.how_to, coach),
            )
            plan_id = cur.lastrowid
            _link_days(conn, plan_id, plan.days)
            created = _fetch_plan(conn, plan_id, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    logger.debug("created exercise plan %s for coach %s", plan_id, coach)
    return created


def get_exercise_plan(plan_id: int, coach: int) -> ExercisePlan:
    with db_conn() as conn:
        plan = _fetch_plan(conn, plan_id, coach)
    if plan is None:
        raise RecordNotFound()
    return plan


def list_exercise_plans(*, coach: int, filters: Filters) -> Tuple[List[ExercisePlan], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            """
            WITH p AS (
                SELECT id, name, how_to, count(*) OVER() AS total
                FROM exercise_plan
                WHERE coach = ?
                ORDER BY id
                LIMIT ? OFFSET ?
            )
            SELECT p.id, p.name, p.how_to, p.total, pd.day_id
            FROM p
            LEFT JOIN exercise_plan_day pd ON pd.plan_id = p.id
            ORDER BY p.id, pd.rowid
            """,
            (coach, filters.limit, filters.offset),
        ).fetchall()
        plans = _build_plans(conn, coach, rows)
    return plans, _metadata(rows, filters)


def replace_exercise_plan(*, plan_id: int, coach: int, plan: ExercisePlanRequest) -> ExercisePlan:
    try:
        with db_conn() as conn:
            _check_days(conn, coach, plan.days)
            cur = conn.execute(
                "UPDATE exercise_plan SET name = ?, how_to = ? WHERE id = ? AND coach = ?",
                (plan.name, plan.how_to, plan_id, coach),
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            cur = conn.execute("DELETE FROM exercise_plan_day WHERE plan_id = ?", (plan_id,))
            if cur.rowcount == 0:
                raise RecordNotFound()
            _link_days(conn, plan_id, plan.days)
            updated = _fetch_plan(conn, plan_id, coach)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise WrongForeignKey() from exc
        raise
    return updated


def delete_exercise_plan(plan_id: int, coach: int) -> None:
    try:
        with db_conn() as conn:
            conn.execute(
                """
                DELETE FROM exercise_plan_day
                WHERE plan_id IN (SELECT id FROM exercise_plan WHERE id = ? AND coach = ?)
                """,
                (plan_id, coach),
            )
            cur = conn.execute("DELETE FROM exercise_plan WHERE id = ? AND coach = ?", (plan_id, coach))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise

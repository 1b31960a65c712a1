# -*- coding: utf-8 -*-
"""Meals — food and composite meal storage helpers (SQLite)."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..app_db import (
    FOREIGN_KEY_VIOLATION,
    MEAL_TABLES,
    UNIQUE_VIOLATION,
    constraint_violation,
    db_conn,
    group_rows,
    placeholders,
)
from ..errors import DuplicateRecord, ForeignKeyConflict, RecordNotFound, WrongForeignKey
from ..pagination import Filters, calculate_metadata
from .models import MEAL_KINDS, Food, Meal, MealKind, food_from_row

logger = logging.getLogger(__name__)


def _duplicate_food() -> DuplicateRecord:
    return DuplicateRecord("food", "food name and serving must be unique")


def create_food(*, coach: int, food_name: str, serving: str, calories: int) -> Food:
    try:
        with db_conn() as conn:
            cur = conn.execute(
                "INSERT INTO food (food_name, serving, calories, coach) VALUES (?, ?, ?, ?)",
                (food_name, serving, calories, coach),
            )
            food_id = cur.lastrowid
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            raise _duplicate_food() from exc
        raise
    return Food(id=food_id, food_name=food_name, serving=serving, calories=calories)


def get_food(food_id: int, coach: int) -> Food:
    with db_conn() as conn:
        row = conn.execute(
            "SELECT id, food_name, serving, calories FROM food WHERE id = ? AND coach = ?",
            (food_id, coach),
        ).fetchone()
    if not row:
        raise RecordNotFound()
    return food_from_row(row)


def list_foods(*, coach: int, food_name: str, serving: str, filters: Filters) -> Tuple[List[Food], Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            """
            SELECT count(*) OVER() AS total, id, food_name, serving, calories
            FROM food
            WHERE coach = ? AND ts_match(food_name, ?) AND ts_match(serving, ?)
            ORDER BY id
            LIMIT ? OFFSET ?
            """,
            (coach, food_name, serving, filters.limit, filters.offset),
        ).fetchall()
    total = rows[0]["total"] if rows else 0
    return [food_from_row(r) for r in rows], calculate_metadata(total, filters.page, filters.page_size)


def _refresh_meal_calories(conn: sqlite3.Connection, food_id: int) -> None:
    for table in MEAL_TABLES:
        conn.execute(
            f"""
            UPDATE {table}
            SET calories = (
                SELECT COALESCE(SUM(f.calories), 0)
                FROM {table}_food j JOIN food f ON f.id = j.food_id
                WHERE j.{table}_id = {table}.id
            )
            WHERE id IN (SELECT {table}_id FROM {table}_food WHERE food_id = ?)
            """,
            (food_id,),
        )


def update_food(food: Food, coach: int) -> Food:
    """Write the food back and recompute every meal that contains it."""
    try:
        with db_conn() as conn:
            cur = conn.execute(
                "UPDATE food SET food_name = ?, serving = ?, calories = ? WHERE id = ? AND coach = ?",
                (food.food_name, food.serving, food.calories, food.id, coach),
            )
            if cur.rowcount == 0:
                raise RecordNotFound()
            _refresh_meal_calories(conn, food.id)
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            raise _duplicate_food() from exc
        raise
    return food


def delete_food(food_id: int, coach: int) -> None:
    try:
        with db_conn() as conn:
            cur = conn.execute("DELETE FROM food WHERE id = ? AND coach = ?", (food_id, coach))
            if cur.rowcount == 0:
                raise RecordNotFound()
    except sqlite3.IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            raise ForeignKeyConflict() from exc
        raise


def _meal_food(row: sqlite3.Row) -> Optional[Dict[str, Any]]:
    if row["food_id"] is None:
        return None
    return {
        "id": row["food_id"],
        "food_name": row["food_name"],
        "serving": row["serving"],
        "calories": row["food_calories"],
    }


def _meal_head(row: sqlite3.Row) -> Dict[str, Any]:
    return {"id": row["id"], "calories": row["calories"]}


class MealStore:
    """CRUD for one composite meal table and its `<table>_food` join table."""

    def __init__(self, kind: MealKind) -> None:
        self.kind = kind
        self.table = kind.table
        self.join_table = f"{kind.table}_food"
        self.parent_col = f"{kind.table}_id"

    def _resolve_foods(self, conn: sqlite3.Connection, coach: int, food_ids: Sequence[int]) -> int:
        """Check every id is a food of this coach; return the calorie total."""
        rows = conn.execute(
            f"SELECT id, calories FROM food WHERE coach = ? AND id IN ({placeholders(food_ids)})",
            (coach, *food_ids),
        ).fetchall()
        if len(rows) != len(set(food_ids)):
            raise WrongForeignKey()
        return sum(r["calories"] for r in rows)

    def _insert_links(self, conn: sqlite3.Connection, meal_id: int, food_ids: Sequence[int]) -> None:
        conn.executemany(
            f"INSERT INTO {self.join_table} ({self.parent_col}, food_id) VALUES (?, ?)",
            [(meal_id, food_id) for food_id in food_ids],
        )

    def fetch(self, conn: sqlite3.Connection, meal_id: int, coach: int) -> Optional[Meal]:
        rows = conn.execute(
            f"""
            SELECT m.id, m.calories, f.id AS food_id, f.food_name, f.serving, f.calories AS food_calories
            FROM {self.table} m
            LEFT JOIN {self.join_table} j ON j.{self.parent_col} = m.id
            LEFT JOIN food f ON f.id = j.food_id
            WHERE m.id = ? AND m.coach = ?
            ORDER BY j.rowid
            """,
            (meal_id, coach),
        ).fetchall()
        meals = group_rows(rows, parent_key="id", build_parent=_meal_head, child_field="food", build_child=_meal_food)
        return Meal.model_validate(meals[0]) if meals else None

    def create(self, *, coach: int, food_ids: Sequence[int]) -> Meal:
        try:
            with db_conn() as conn:
                calories = self._resolve_foods(conn, coach, food_ids)
                cur = conn.execute(
                    f"INSERT INTO {self.table} (calories, coach) VALUES (?, ?)",
                    (calories, coach),
                )
                meal_id = cur.lastrowid
                self._insert_links(conn, meal_id, food_ids)
                meal = self.fetch(conn, meal_id, coach)
        except sqlite3.IntegrityError as exc:
            if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
                raise WrongForeignKey() from exc
            raise
        logger.debug("created %s %s for coach %s", self.table, meal_id, coach)
        return meal

    def update(self, *, meal_id: int, coach: int, food_ids: Sequence[int]) -> Meal:
        """Replace the food set: update the parent, drop every link, re-insert."""
        try:
            with db_conn() as conn:
                calories = self._resolve_foods(conn, coach, food_ids)
                cur = conn.execute(
                    f"UPDATE {self.table} SET calories = ? WHERE id = ? AND coach = ?",
                    (calories, meal_id, coach),
                )
                if cur.rowcount == 0:
                    raise RecordNotFound()
                cur = conn.execute(f"DELETE FROM {self.join_table} WHERE {self.parent_col} = ?", (meal_id,))
                if cur.rowcount == 0:
                    raise RecordNotFound()
                self._insert_links(conn, meal_id, food_ids)
                meal = self.fetch(conn, meal_id, coach)
        except sqlite3.IntegrityError as exc:
            if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
                raise WrongForeignKey() from exc
            raise
        return meal

    def get(self, meal_id: int, coach: int) -> Meal:
        with db_conn() as conn:
            meal = self.fetch(conn, meal_id, coach)
        if meal is None:
            raise RecordNotFound()
        return meal

    def list(self, *, coach: int, filters: Filters) -> Tuple[List[Meal], Dict[str, Any]]:
        with db_conn() as conn:
            rows = conn.execute(
                f"""
                WITH page AS (
                    SELECT id, calories, count(*) OVER() AS total
                    FROM {self.table}
                    WHERE coach = ?
                    ORDER BY id
                    LIMIT ? OFFSET ?
                )
                SELECT page.id, page.calories, page.total,
                       f.id AS food_id, f.food_name, f.serving, f.calories AS food_calories
                FROM page
                LEFT JOIN {self.join_table} j ON j.{self.parent_col} = page.id
                LEFT JOIN food f ON f.id = j.food_id
                ORDER BY page.id, j.rowid
                """,
                (coach, filters.limit, filters.offset),
            ).fetchall()
        total = rows[0]["total"] if rows else 0
        meals = group_rows(rows, parent_key="id", build_parent=_meal_head, child_field="food", build_child=_meal_food)
        return [Meal.model_validate(m) for m in meals], calculate_metadata(total, filters.page, filters.page_size)

    def delete(self, meal_id: int, coach: int) -> None:
        try:
            with db_conn() as conn:
                conn.execute(
                    f"""
                    DELETE FROM {self.join_table}
                    WHERE {self.parent_col} IN (SELECT id FROM {self.table} WHERE id = ? AND coach = ?)
                    """,
                    (meal_id, coach),
                )
                cur = conn.execute(f"DELETE FROM {self.table} WHERE id = ? AND coach = ?", (meal_id, coach))
                if cur.rowcount == 0:
                    raise RecordNotFound()
        except sqlite3.IntegrityError as exc:
            if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
                raise ForeignKeyConflict() from exc
            raise


MEAL_STORES = {kind.table: MealStore(kind) for kind in MEAL_KINDS}

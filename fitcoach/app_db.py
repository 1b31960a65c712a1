# -*- coding: utf-8 -*-
"""App database — SQLite schema, connections and transaction scope."""

from __future__ import annotations

import re
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from .config import settings

# Composite meal tables; each one has a `<table>_food` join table.
MEAL_TABLES = ("breakfast", "am_snack", "lunch", "pm_snack", "dinner")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

UNIQUE_VIOLATION = "SQLITE_CONSTRAINT_UNIQUE"
FOREIGN_KEY_VIOLATION = "SQLITE_CONSTRAINT_FOREIGNKEY"

_WORD_RX = re.compile(r"\w+", re.UNICODE)

# Check the statement deadline every N virtual machine instructions.
_PROGRESS_STEPS = 1000


def _words(value: Optional[str]) -> list[str]:
    return _WORD_RX.findall((value or "").lower())


def _ts_match(document: Optional[str], query: Optional[str]) -> int:
    """Simple full-text match: every word of `query` occurs as a word of `document`."""
    wanted = _words(query)
    if not wanted:
        return 1
    present = set(_words(document))
    return int(all(word in present for word in wanted))


def connect(db_path: Path, timeout_s: Optional[float] = None) -> sqlite3.Connection:
    timeout = settings.db_timeout_s if timeout_s is None else timeout_s
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.create_function("ts_match", 2, _ts_match, deterministic=True)

    deadline = time.monotonic() + timeout
    # A non-zero return aborts the running statement with OperationalError("interrupted").
    conn.set_progress_handler(lambda: int(time.monotonic() > deadline), _PROGRESS_STEPS)
    return conn


def constraint_violation(exc: sqlite3.IntegrityError) -> str:
    """Name of the violated constraint class (e.g. SQLITE_CONSTRAINT_UNIQUE)."""
    return getattr(exc, "sqlite_errorname", "") or ""


def placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


def _meal_tables_sql() -> Iterable[str]:
    for table in MEAL_TABLES:
        yield f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                calories INTEGER NOT NULL DEFAULT 0,
                coach INTEGER NOT NULL,
                FOREIGN KEY(coach) REFERENCES users(id)
            );
            """
        yield f"""
            CREATE TABLE IF NOT EXISTS {table}_food (
                {table}_id INTEGER NOT NULL,
                food_id INTEGER NOT NULL,
                PRIMARY KEY ({table}_id, food_id),
                FOREIGN KEY({table}_id) REFERENCES {table}(id),
                FOREIGN KEY(food_id) REFERENCES food(id)
            );
            """
        yield f"CREATE INDEX IF NOT EXISTS idx_{table}_food_food ON {table}_food(food_id);"
        yield f"CREATE INDEX IF NOT EXISTS idx_{table}_coach ON {table}(coach, id);"


def _weekday_columns_sql() -> str:
    cols = ",\n".join(f"                {d}_id INTEGER NOT NULL" for d in WEEKDAYS)
    fks = ",\n".join(f"                FOREIGN KEY({d}_id) REFERENCES day(id)" for d in WEEKDAYS)
    return f"{cols},\n{fks}"


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path, timeout_s=30)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password_hash BLOB NOT NULL,
                role TEXT NOT NULL,
                activated INTEGER NOT NULL DEFAULT 0,
                version INTEGER NOT NULL DEFAULT 1
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS food (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                food_name TEXT NOT NULL,
                serving TEXT NOT NULL,
                calories INTEGER NOT NULL,
                coach INTEGER NOT NULL,
                FOREIGN KEY(coach) REFERENCES users(id),
                CONSTRAINT unique_food_serving UNIQUE (coach, food_name, serving)
            );
            """
        )
        for stmt in _meal_tables_sql():
            cur.execute(stmt)
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS day (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                coach INTEGER NOT NULL,
                breakfast_id INTEGER NOT NULL,
                am_snack_id INTEGER,
                lunch_id INTEGER NOT NULL,
                pm_snack_id INTEGER,
                dinner_id INTEGER NOT NULL,
                FOREIGN KEY(coach) REFERENCES users(id),
                FOREIGN KEY(breakfast_id) REFERENCES breakfast(id),
                FOREIGN KEY(am_snack_id) REFERENCES am_snack(id),
                FOREIGN KEY(lunch_id) REFERENCES lunch(id),
                FOREIGN KEY(pm_snack_id) REFERENCES pm_snack(id),
                FOREIGN KEY(dinner_id) REFERENCES dinner(id)
            );
            """
        )
        cur.execute(
            f"""
            CREATE TABLE IF NOT EXISTS plan_meal (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                coach INTEGER NOT NULL,
{_weekday_columns_sql()},
                FOREIGN KEY(coach) REFERENCES users(id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS exercise_name (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS exercise (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name INTEGER NOT NULL,
                sets INTEGER NOT NULL,
                reps INTEGER NOT NULL,
                weight INTEGER NOT NULL,
                coach INTEGER NOT NULL,
                FOREIGN KEY(name) REFERENCES exercise_name(id),
                FOREIGN KEY(coach) REFERENCES users(id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS exercise_day (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                coach INTEGER NOT NULL,
                FOREIGN KEY(coach) REFERENCES users(id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS exercises_to_day (
                exercise_id INTEGER NOT NULL,
                day_id INTEGER NOT NULL,
                PRIMARY KEY (day_id, exercise_id),
                FOREIGN KEY(exercise_id) REFERENCES exercise(id),
                FOREIGN KEY(day_id) REFERENCES exercise_day(id)
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_exercises_to_day_exercise ON exercises_to_day(exercise_id);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS exercise_plan (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                how_to TEXT NOT NULL DEFAULT '',
                coach INTEGER NOT NULL,
                FOREIGN KEY(coach) REFERENCES users(id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS exercise_plan_day (
                plan_id INTEGER NOT NULL,
                day_id INTEGER NOT NULL,
                PRIMARY KEY (plan_id, day_id),
                FOREIGN KEY(plan_id) REFERENCES exercise_plan(id),
                FOREIGN KEY(day_id) REFERENCES exercise_day(id)
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_exercise_plan_day_day ON exercise_plan_day(day_id);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS user_card (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner INTEGER NOT NULL UNIQUE,
                coach INTEGER,
                current_plan INTEGER,
                current_exercise_plan INTEGER,
                current_weight INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY(owner) REFERENCES users(id),
                FOREIGN KEY(coach) REFERENCES users(id),
                FOREIGN KEY(current_plan) REFERENCES plan_meal(id),
                FOREIGN KEY(current_exercise_plan) REFERENCES exercise_plan(id)
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_user_card_coach ON user_card(coach);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS user_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                owner INTEGER NOT NULL,
                plan_meal INTEGER,
                exercise_plan INTEGER,
                start_at TEXT NOT NULL,
                end_at TEXT,
                start_weight INTEGER NOT NULL DEFAULT 0,
                finish_weight INTEGER,
                is_current INTEGER NOT NULL DEFAULT 1,
                FOREIGN KEY(owner) REFERENCES users(id),
                FOREIGN KEY(plan_meal) REFERENCES plan_meal(id),
                FOREIGN KEY(exercise_plan) REFERENCES exercise_plan(id)
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_user_history_owner_start ON user_history(owner, start_at DESC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    """One unit of work: commit when the block finishes, roll back on any error."""
    conn = connect(db_path or settings.db_path)
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def group_rows(
    rows: Iterable[sqlite3.Row],
    *,
    parent_key: str,
    build_parent: Callable[[sqlite3.Row], Dict[str, Any]],
    child_field: str,
    build_child: Callable[[sqlite3.Row], Any],
) -> List[Dict[str, Any]]:
    """Fold flattened parent/child join rows into parents, keeping first-seen order."""
    grouped: Dict[Any, Dict[str, Any]] = {}
    for row in rows:
        key = row[parent_key]
        parent = grouped.get(key)
        if parent is None:
            parent = build_parent(row)
            parent.setdefault(child_field, [])
            grouped[key] = parent
        child = build_child(row)
        if child is not None:
            parent[child_field].append(child)
    return list(grouped.values())

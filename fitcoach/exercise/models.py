# -*- coding: utf-8 -*-
"""Exercise — catalog names, prescribed exercises, exercise days and plans."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..validator import DbInt, StrictInput, Validator, unique


class ExerciseNameRequest(StrictInput):
    name: str = ""


class ExerciseName(BaseModel):
    id: int
    name: str


class ExerciseRequest(StrictInput):
    name: DbInt = 0
    sets: DbInt = 0
    reps: DbInt = 0
    weight: DbInt = 0


class ExerciseUpdateRequest(StrictInput):
    name: Optional[DbInt] = None
    sets: Optional[DbInt] = None
    reps: Optional[DbInt] = None
    weight: Optional[DbInt] = None


class Exercise(BaseModel):
    """An exercise as read back: `name` is the catalog name, `name_id` its id."""

    id: int
    name: str
    name_id: int
    sets: int
    reps: int
    weight: int


class ExerciseDayRequest(StrictInput):
    name: str = ""
    exercises: List[DbInt] = []


class ExerciseDay(BaseModel):
    id: int
    name: str
    exercises: List[Exercise]


class ExercisePlanRequest(StrictInput):
    name: str = ""
    how_to: str = ""
    days: List[DbInt] = []


class ExercisePlan(BaseModel):
    id: int
    name: str
    how_to: str
    days: List[ExerciseDay]


def validate_exercise_name(v: Validator, name: str) -> None:
    v.check(name.strip() != "", "name", "must be provided")
    v.check(len(name.encode("utf-8")) <= 200, "name", "must not be more than 200 bytes long")


def validate_exercise(v: Validator, exercise: ExerciseRequest) -> None:
    v.check(exercise.name > 0, "name", "must reference a valid exercise name id")
    v.check(exercise.sets > 0, "sets", "must be greater than zero")
    v.check(exercise.reps > 0, "reps", "must be greater than zero")
    v.check(exercise.weight > 0, "weight", "must be greater than zero")


def validate_exercise_day(v: Validator, day: ExerciseDayRequest) -> None:
    v.check(day.name != "", "name", "must send a name")
    v.check(len(day.exercises) > 0, "exercises", "must send at least one exercise")
    v.check(all(i > 0 for i in day.exercises), "exercises", "every exercise id must be greater than zero")
    v.check(unique(day.exercises), "exercises", "must not send the same exercise twice")


def validate_exercise_plan(v: Validator, plan: ExercisePlanRequest) -> None:
    v.check(plan.name != "", "name", "must send a name")
    v.check(len(plan.days) > 0, "days", "must send at least one day")
    v.check(all(i > 0 for i in plan.days), "days", "every day id must be greater than zero")
    v.check(unique(plan.days), "days", "must not send the same day twice")

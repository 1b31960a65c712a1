# -*- coding: utf-8 -*-
"""Users — trainee cards, plan history and coach roster models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..validator import DbInt, StrictInput, Validator


class WeightRequest(StrictInput):
    weight: DbInt = 0


class UserCard(BaseModel):
    id: int
    owner: int
    coach: Optional[int] = None
    current_plan: Optional[int] = None
    current_exercise_plan: Optional[int] = None
    weight: int = 0


class UserHistory(BaseModel):
    id: int
    plan_meal: Optional[int] = None
    exercise_plan: Optional[int] = None
    start_at: str
    end_at: Optional[str] = None
    start_weight: int
    finish_weight: Optional[int] = None
    is_current: bool


class Trainee(BaseModel):
    id: int
    name: str
    email: str


def validate_weight(v: Validator, weight: int) -> None:
    v.check(weight > 0, "weight", "must enter a valid weight")


class AssignPlanRequest(StrictInput):
    plan: DbInt = 0


def validate_assignment(v: Validator, plan_id: int) -> None:
    v.check(plan_id > 0, "plan", "must provide a valid plan id")

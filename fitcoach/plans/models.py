# -*- coding: utf-8 -*-
"""Plans — day and weekly meal plan models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..meals.models import Meal
from ..validator import DbInt, StrictInput, Validator


class DayRequest(StrictInput):
    name: str = ""
    breakfast: DbInt = 0
    am_snack: DbInt = 0
    lunch: DbInt = 0
    pm_snack: DbInt = 0
    dinner: DbInt = 0


class DayUpdateRequest(StrictInput):
    """Partial update. A snack set to 0 is removed from the day."""

    name: Optional[str] = None
    breakfast: Optional[DbInt] = None
    am_snack: Optional[DbInt] = None
    lunch: Optional[DbInt] = None
    pm_snack: Optional[DbInt] = None
    dinner: Optional[DbInt] = None


class DaySummary(BaseModel):
    id: int
    name: str


class DayFull(BaseModel):
    id: int
    name: str
    breakfast: Meal
    am_snack: Optional[Meal] = None
    lunch: Meal
    pm_snack: Optional[Meal] = None
    dinner: Meal


class PlanMealRequest(StrictInput):
    name: str = ""
    monday: DbInt = 0
    tuesday: DbInt = 0
    wednesday: DbInt = 0
    thursday: DbInt = 0
    friday: DbInt = 0
    saturday: DbInt = 0
    sunday: DbInt = 0


class PlanMeal(BaseModel):
    id: int
    name: str
    monday: DaySummary
    tuesday: DaySummary
    wednesday: DaySummary
    thursday: DaySummary
    friday: DaySummary
    saturday: DaySummary
    sunday: DaySummary


def validate_day(v: Validator, day: DayRequest) -> None:
    v.check(day.name != "", "name", "must provide a valid name")
    v.check(day.breakfast > 0, "breakfast", "must provide a valid breakfast id")
    v.check(day.am_snack >= 0, "am_snack", "must provide a valid am_snack id")
    v.check(day.lunch > 0, "lunch", "must provide a valid lunch id")
    v.check(day.pm_snack >= 0, "pm_snack", "must provide a valid pm_snack id")
    v.check(day.dinner > 0, "dinner", "must provide a valid dinner id")


def validate_plan_meal(v: Validator, plan: PlanMealRequest) -> None:
    v.check(plan.name != "", "name", "must provide a valid name")
    for weekday, day_id in plan.model_dump(exclude={"name"}).items():
        v.check(day_id > 0, weekday, f"must provide a valid {weekday} day id")

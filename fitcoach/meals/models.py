# -*- coding: utf-8 -*-
"""Meals — food and composite meal models plus their validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel

from ..validator import DbInt, StrictInput, Validator, unique


@dataclass(frozen=True)
class MealKind:
    """One composite meal flavour: its table, URL segment and envelope keys."""

    table: str
    path: str
    single: str
    plural: str


MEAL_KINDS = (
    MealKind("breakfast", "breakfast", "breakfast", "breakfasts"),
    MealKind("am_snack", "amsnack", "am_snack", "am_snacks"),
    MealKind("lunch", "lunch", "lunch", "lunches"),
    MealKind("pm_snack", "pmsnack", "pm_snack", "pm_snacks"),
    MealKind("dinner", "dinner", "dinner", "dinners"),
)

MEAL_KIND_BY_TABLE = {kind.table: kind for kind in MEAL_KINDS}


class FoodCreateRequest(StrictInput):
    food_name: str = ""
    serving: str = ""
    calories: DbInt = 0


class FoodUpdateRequest(StrictInput):
    food_name: Optional[str] = None
    serving: Optional[str] = None
    calories: Optional[DbInt] = None


class FoodRef(StrictInput):
    """A food inside a meal body. Only `id` is used; the stored food is authoritative."""

    id: DbInt = 0
    food_name: Optional[str] = None
    serving: Optional[str] = None
    calories: Optional[DbInt] = None


class MealRequest(StrictInput):
    food: List[FoodRef] = []


class Food(BaseModel):
    id: int
    food_name: str
    serving: str
    calories: int


class Meal(BaseModel):
    id: int
    calories: int
    food: List[Food]


def validate_food(v: Validator, *, food_name: str, serving: str, calories: int) -> None:
    v.check(food_name != "", "name", "food name cannot be empty")
    v.check(len(food_name.encode("utf-8")) <= 500, "name", "must not be more than 500 bytes long")
    v.check(serving != "", "serving", "food serving cannot be empty")
    v.check(calories > 0, "calories", "food calories must be greater than zero")


def validate_food_ref(v: Validator, ref: FoodRef) -> None:
    """Only `id` is required; any food fields sent along must still be valid."""
    v.check(ref.id > 0, "food", "every food must reference an existing food id")
    if ref.food_name is not None:
        v.check(ref.food_name != "", "food", "food name cannot be empty")
    if ref.serving is not None:
        v.check(ref.serving != "", "food", "food serving cannot be empty")
    if ref.calories is not None:
        v.check(ref.calories > 0, "food", "food calories must be greater than zero")


def validate_meal(v: Validator, foods: List[FoodRef]) -> None:
    """Shared by all five meal kinds."""
    v.check(len(foods) > 0, "food", "must send more than 0 foods")
    for ref in foods:
        validate_food_ref(v, ref)
    v.check(unique(ref.id for ref in foods), "food", "must not send the same food twice")


def food_from_row(row) -> Food:
    return Food(id=row["id"], food_name=row["food_name"], serving=row["serving"], calories=row["calories"])

# -*- coding: utf-8 -*-
"""Meals endpoints: food items and the five composite meal kinds."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, Response

from ..auth.security import require_coach_or_admin
from ..pagination import read_filters, read_str
from ..validator import MAX_DB_INT, Validator
from .models import (
    MEAL_KINDS,
    FoodCreateRequest,
    FoodUpdateRequest,
    MealKind,
    MealRequest,
    validate_food,
    validate_meal,
)
from .storage import MEAL_STORES, create_food, delete_food, get_food, list_foods, update_food

router = APIRouter(prefix="/v1/meals", tags=["Meals"])


@router.post("/food/add", status_code=201, summary="Create a food item")
def add_food(request: FoodCreateRequest, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    validate_food(v, food_name=request.food_name, serving=request.serving, calories=request.calories)
    v.raise_if_invalid()

    food = create_food(
        coach=user["id"],
        food_name=request.food_name,
        serving=request.serving,
        calories=request.calories,
    )
    return {"food": food}


@router.get("/food/get/{food_id}", summary="Get one food item")
def retrieve_food(food_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"food": get_food(food_id, user["id"])}


@router.get("/food/get", summary="List food items (food_name/serving word search)")
def list_food(request: Request, user: dict = Depends(require_coach_or_admin)):
    params = request.query_params
    v = Validator()
    filters = read_filters(params, v)
    v.raise_if_invalid()

    foods, metadata = list_foods(
        coach=user["id"],
        food_name=read_str(params, "food_name"),
        serving=read_str(params, "serving"),
        filters=filters,
    )
    return {"foods": foods, "metadata": metadata}


@router.patch("/food/update/{food_id}", summary="Partially update a food item")
def patch_food(
    request: FoodUpdateRequest,
    food_id: int = Path(ge=1, le=MAX_DB_INT),
    user: dict = Depends(require_coach_or_admin),
):
    food = get_food(food_id, user["id"])
    if request.food_name is not None:
        food.food_name = request.food_name
    if request.serving is not None:
        food.serving = request.serving
    if request.calories is not None:
        food.calories = request.calories

    v = Validator()
    validate_food(v, food_name=food.food_name, serving=food.serving, calories=food.calories)
    v.raise_if_invalid()

    return {"food": update_food(food, user["id"])}


@router.delete("/food/delete/{food_id}", status_code=204, summary="Delete a food item")
def remove_food(food_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    delete_food(food_id, user["id"])
    return Response(status_code=204)


def build_meal_router(kind: MealKind) -> APIRouter:
    """Same five endpoints for every meal kind, wired to that kind's store."""
    store = MEAL_STORES[kind.table]
    meal_router = APIRouter(prefix=f"/{kind.path}")

    @meal_router.post("/add", status_code=201, summary=f"Create a {kind.single}")
    def add_meal(request: MealRequest, user: dict = Depends(require_coach_or_admin)):
        v = Validator()
        validate_meal(v, request.food)
        v.raise_if_invalid()
        meal = store.create(coach=user["id"], food_ids=[ref.id for ref in request.food])
        return {kind.single: meal}

    @meal_router.get("/get/{meal_id}", summary=f"Get one {kind.single}")
    def retrieve_meal(meal_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
        return {kind.single: store.get(meal_id, user["id"])}

    @meal_router.get("/get", summary=f"List {kind.plural}")
    def list_meals(request: Request, user: dict = Depends(require_coach_or_admin)):
        v = Validator()
        filters = read_filters(request.query_params, v)
        v.raise_if_invalid()
        meals, metadata = store.list(coach=user["id"], filters=filters)
        return {kind.plural: meals, "metadata": metadata}

    @meal_router.patch("/update/{meal_id}", summary=f"Replace the food set of a {kind.single}")
    def update_meal(
        request: MealRequest,
        meal_id: int = Path(ge=1, le=MAX_DB_INT),
        user: dict = Depends(require_coach_or_admin),
    ):
        v = Validator()
        validate_meal(v, request.food)
        v.raise_if_invalid()
        meal = store.update(meal_id=meal_id, coach=user["id"], food_ids=[ref.id for ref in request.food])
        return {kind.single: meal}

    @meal_router.delete("/delete/{meal_id}", status_code=204, summary=f"Delete a {kind.single}")
    def delete_meal(meal_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
        store.delete(meal_id, user["id"])
        return Response(status_code=204)

    return meal_router


for _kind in MEAL_KINDS:
    router.include_router(build_meal_router(_kind))

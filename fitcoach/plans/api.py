# -*- coding: utf-8 -*-
"""Plan endpoints: days (one meal of each kind) and weekly meal plans."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, Response

from ..auth.security import require_coach_or_admin
from ..pagination import read_filters
from ..validator import MAX_DB_INT, Validator
from .models import DayRequest, DayUpdateRequest, PlanMealRequest, validate_day, validate_plan_meal
from .storage import (
    delete_day,
    delete_plan_meal,
    get_day,
    get_day_refs,
    get_plan_meal,
    insert_day,
    insert_plan_meal,
    list_days,
    list_plan_meals,
    replace_plan_meal,
    update_day,
)

router = APIRouter(prefix="/v1/plans", tags=["Plans"])


@router.post("/day/add", status_code=201, summary="Create a day from one meal of each kind")
def add_day(request: DayRequest, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    validate_day(v, request)
    v.raise_if_invalid()
    return {"day": insert_day(coach=user["id"], day=request)}


@router.get("/day/get/{day_id}", summary="Get a day with its meals")
def retrieve_day(day_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"day": get_day(day_id, user["id"])}


@router.get("/day/get", summary="List days")
def list_day(request: Request, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    filters = read_filters(request.query_params, v)
    v.raise_if_invalid()
    days, metadata = list_days(coach=user["id"], filters=filters)
    return {"days": days, "metadata": metadata}


@router.patch("/day/update/{day_id}", summary="Partially update a day")
def patch_day(
    request: DayUpdateRequest,
    day_id: int = Path(ge=1, le=MAX_DB_INT),
    user: dict = Depends(require_coach_or_admin),
):
    day = get_day_refs(day_id, user["id"])
    for field, value in request.model_dump(exclude_none=True).items():
        setattr(day, field, value)

    v = Validator()
    validate_day(v, day)
    v.raise_if_invalid()
    return {"day": update_day(day_id=day_id, coach=user["id"], day=day)}


@router.delete("/day/delete/{day_id}", status_code=204, summary="Delete a day")
def remove_day(day_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    delete_day(day_id, user["id"])
    return Response(status_code=204)


@router.post("/week/add", status_code=201, summary="Create a weekly meal plan")
def add_plan_meal(request: PlanMealRequest, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    validate_plan_meal(v, request)
    v.raise_if_invalid()
    return {"plan_meal": insert_plan_meal(coach=user["id"], plan=request)}


@router.get("/week/get/{plan_id}", summary="Get a weekly meal plan")
def retrieve_plan_meal(plan_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"plan_meal": get_plan_meal(plan_id, user["id"])}


@router.get("/week/get", summary="List weekly meal plans")
def list_plan_meal(request: Request, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    filters = read_filters(request.query_params, v)
    v.raise_if_invalid()
    plans, metadata = list_plan_meals(coach=user["id"], filters=filters)
    return {"plan_meals": plans, "metadata": metadata}


@router.put("/week/update/{plan_id}", summary="Replace a weekly meal plan")
def put_plan_meal(
    request: PlanMealRequest,
    plan_id: int = Path(ge=1, le=MAX_DB_INT),
    user: dict = Depends(require_coach_or_admin),
):
    v = Validator()
    validate_plan_meal(v, request)
    v.raise_if_invalid()
    return {"plan_meal": replace_plan_meal(plan_id=plan_id, coach=user["id"], plan=request)}


@router.delete("/week/delete/{plan_id}", status_code=204, summary="Delete a weekly meal plan")
def remove_plan_meal(plan_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    delete_plan_meal(plan_id, user["id"])
    return Response(status_code=204)

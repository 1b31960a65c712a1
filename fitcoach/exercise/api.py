# -*- coding: utf-8 -*-
"""Exercise endpoints: catalog names, exercises, exercise days and plans."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request, Response

from ..auth.security import require_admin, require_coach_or_admin
from ..pagination import read_filters
from ..validator import MAX_DB_INT, Validator
from .models import (
    ExerciseDayRequest,
    ExerciseNameRequest,
    ExercisePlanRequest,
    ExerciseRequest,
    ExerciseUpdateRequest,
    validate_exercise,
    validate_exercise_day,
    validate_exercise_name,
    validate_exercise_plan,
)
from .storage import (
    delete_exercise,
    delete_exercise_day,
    delete_exercise_name,
    delete_exercise_plan,
    get_exercise,
    get_exercise_day,
    get_exercise_name,
    get_exercise_plan,
    insert_exercise,
    insert_exercise_day,
    insert_exercise_name,
    insert_exercise_plan,
    list_exercise_days,
    list_exercise_names,
    list_exercise_plans,
    list_exercises,
    replace_exercise_day,
    replace_exercise_plan,
    update_exercise,
)

router = APIRouter(prefix="/v1/exercises", tags=["Exercise"])


def _filters(request: Request):
    v = Validator()
    filters = read_filters(request.query_params, v)
    v.raise_if_invalid()
    return filters


@router.post("/name/add", status_code=201, summary="Add an exercise to the catalog")
def add_exercise_name(request: ExerciseNameRequest, user: dict = Depends(require_admin)):
    name = request.name.strip()
    v = Validator()
    validate_exercise_name(v, name)
    v.raise_if_invalid()
    return {"ex_name": insert_exercise_name(name)}


@router.get("/name/get/{name_id}", summary="Get a catalog exercise")
def retrieve_exercise_name(name_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"ex_name": get_exercise_name(name_id)}


@router.get("/name/get", summary="List the exercise catalog")
def list_exercise_name(request: Request, user: dict = Depends(require_coach_or_admin)):
    names, metadata = list_exercise_names(_filters(request))
    return {"ex_names": names, "metadata": metadata}


@router.delete("/name/delete/{name_id}", status_code=204, summary="Remove a catalog exercise")
def remove_exercise_name(name_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_admin)):
    delete_exercise_name(name_id)
    return Response(status_code=204)


@router.post("/exercise/add", status_code=201, summary="Prescribe an exercise (sets/reps/weight)")
def add_exercise(request: ExerciseRequest, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    validate_exercise(v, request)
    v.raise_if_invalid()
    return {"exercise": insert_exercise(coach=user["id"], exercise=request)}


@router.get("/exercise/get/{exercise_id}", summary="Get an exercise")
def retrieve_exercise(exercise_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"exercise": get_exercise(exercise_id, user["id"])}


@router.get("/exercise/get", summary="List exercises")
def list_exercise(request: Request, user: dict = Depends(require_coach_or_admin)):
    exercises, metadata = list_exercises(coach=user["id"], filters=_filters(request))
    return {"exercises": exercises, "metadata": metadata}


@router.patch("/exercise/update/{exercise_id}", summary="Partially update an exercise")
def patch_exercise(
    request: ExerciseUpdateRequest,
    exercise_id: int = Path(ge=1, le=MAX_DB_INT),
    user: dict = Depends(require_coach_or_admin),
):
    current = get_exercise(exercise_id, user["id"])
    exercise = ExerciseRequest(
        name=current.name_id,
        sets=current.sets,
        reps=current.reps,
        weight=current.weight,
    )
    for field, value in request.model_dump(exclude_none=True).items():
        setattr(exercise, field, value)

    v = Validator()
    validate_exercise(v, exercise)
    v.raise_if_invalid()
    return {"exercise": update_exercise(exercise_id=exercise_id, coach=user["id"], exercise=exercise)}


@router.delete("/exercise/delete/{exercise_id}", status_code=204, summary="Delete an exercise")
def remove_exercise(exercise_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    delete_exercise(exercise_id, user["id"])
    return Response(status_code=204)


@router.post("/day/add", status_code=201, summary="Create an exercise day")
def add_exercise_day(request: ExerciseDayRequest, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    validate_exercise_day(v, request)
    v.raise_if_invalid()
    return {"exercise_day": insert_exercise_day(coach=user["id"], day=request)}


@router.get("/day/get/{day_id}", summary="Get an exercise day with its exercises")
def retrieve_exercise_day(day_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"exercise_day": get_exercise_day(day_id, user["id"])}


@router.get("/day/get", summary="List exercise days")
def list_exercise_day(request: Request, user: dict = Depends(require_coach_or_admin)):
    days, metadata = list_exercise_days(coach=user["id"], filters=_filters(request))
    return {"exercise_days": days, "metadata": metadata}


@router.put("/day/update/{day_id}", summary="Replace an exercise day")
def put_exercise_day(
    request: ExerciseDayRequest,
    day_id: int = Path(ge=1, le=MAX_DB_INT),
    user: dict = Depends(require_coach_or_admin),
):
    v = Validator()
    validate_exercise_day(v, request)
    v.raise_if_invalid()
    return {"exercise_day": replace_exercise_day(day_id=day_id, coach=user["id"], day=request)}


@router.delete("/day/delete/{day_id}", status_code=204, summary="Delete an exercise day")
def remove_exercise_day(day_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    delete_exercise_day(day_id, user["id"])
    return Response(status_code=204)


@router.post("/plan/add", status_code=201, summary="Create an exercise plan")
def add_exercise_plan(request: ExercisePlanRequest, user: dict = Depends(require_coach_or_admin)):
    v = Validator()
    validate_exercise_plan(v, request)
    v.raise_if_invalid()
    return {"exercise_plan": insert_exercise_plan(coach=user["id"], plan=request)}


@router.get("/plan/get/{plan_id}", summary="Get an exercise plan with nested days")
def retrieve_exercise_plan(plan_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    return {"exercise_plan": get_exercise_plan(plan_id, user["id"])}


@router.get("/plan/get", summary="List exercise plans")
def list_exercise_plan(request: Request, user: dict = Depends(require_coach_or_admin)):
    plans, metadata = list_exercise_plans(coach=user["id"], filters=_filters(request))
    return {"exercise_plans": plans, "metadata": metadata}


@router.put("/plan/update/{plan_id}", summary="Replace an exercise plan")
def put_exercise_plan(
    request: ExercisePlanRequest,
    plan_id: int = Path(ge=1, le=MAX_DB_INT),
    user: dict = Depends(require_coach_or_admin),
):
    v = Validator()
    validate_exercise_plan(v, request)
    v.raise_if_invalid()
    return {"exercise_plan": replace_exercise_plan(plan_id=plan_id, coach=user["id"], plan=request)}


@router.delete("/plan/delete/{plan_id}", status_code=204, summary="Delete an exercise plan")
def remove_exercise_plan(plan_id: int = Path(ge=1, le=MAX_DB_INT), user: dict = Depends(require_coach_or_admin)):
    delete_exercise_plan(plan_id, user["id"])
    return Response(status_code=204)

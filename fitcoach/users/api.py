# -*- coding: utf-8 -*-
"""Users endpoints: registration, trainee card, history and plan assignment."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Request, Response

from ..auth.models import UserRegisterRequest, user_public, validate_user
from ..auth.security import (
    ROLE_COACH,
    ROLE_TRAINEE,
    hash_password,
    require_admin,
    require_coach_or_admin,
    require_trainee,
)
from ..auth.storage import insert_user
from ..config import settings
from ..errors import WrongCredentials
from ..mailer import mailer
from ..pagination import read_filters
from ..validator import MAX_DB_INT, Validator
from .models import AssignPlanRequest, WeightRequest, validate_assignment, validate_weight
from .storage import (
    assign_exercise_plan,
    assign_meal_plan,
    coach_permitted,
    create_user_card,
    get_user_card,
    list_history,
    list_trainees,
    update_card_weight,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["Users"])


def _provision_trainee(*, user_id: int, name: str, email: str, password: str, coach_id: int) -> None:
    """Runs after the 202 is sent. Failures are logged; the user row stays committed."""
    try:
        create_user_card(owner=user_id, coach=coach_id)
    except Exception:
        logger.exception("user %s created but failed to create the user card", user_id)
        try:
            mailer.send(settings.admin_email, "user_card_failure.html", {"user_id": user_id, "coach_id": coach_id})
        except Exception:
            logger.exception("could not notify admin about the missing card of user %s", user_id)

    try:
        mailer.send(email, "user_welcome.html", {"name": name, "userPassword": password})
    except Exception:
        logger.exception("could not send the welcome email to user %s", user_id)


def _register(request: UserRegisterRequest, role: str):
    v = Validator()
    validate_user(v, name=request.name, email=request.email, role=role, password=request.password)
    v.raise_if_invalid()

    return insert_user(
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
        role=role,
        activated=True,
    )


@router.post("", status_code=202, summary="Register a trainee of the calling coach")
def register_trainee(
    request: UserRegisterRequest,
    background_tasks: BackgroundTasks,
    coach: dict = Depends(require_coach_or_admin),
):
    user = _register(request, ROLE_TRAINEE)
    background_tasks.add_task(
        _provision_trainee,
        user_id=user["id"],
        name=user["name"],
        email=user["email"],
        password=request.password,
        coach_id=coach["id"],
    )
    return {"user": user_public(user)}


@router.post("/coach", status_code=201, summary="Register a coach")
def register_coach(request: UserRegisterRequest, admin: dict = Depends(require_admin)):
    user = _register(request, ROLE_COACH)
    logger.info("admin %s registered coach %s", admin["id"], user["id"])
    return {"user": user_public(user)}


@router.get("/trainees", summary="List the trainees of the calling coach")
def list_coach_trainees(request: Request, coach: dict = Depends(require_coach_or_admin)):
    v = Validator()
    filters = read_filters(request.query_params, v)
    v.raise_if_invalid()
    users, metadata = list_trainees(coach=coach["id"], filters=filters)
    return {"users": users, "metadata": metadata}


@router.get("/card", summary="Get the calling trainee's card")
def retrieve_user_card(user: dict = Depends(require_trainee)):
    return {"card": get_user_card(user["id"])}


@router.patch("/card/weight", status_code=204, summary="Record the calling trainee's current weight")
def patch_user_weight(request: WeightRequest, user: dict = Depends(require_trainee)):
    v = Validator()
    validate_weight(v, request.weight)
    v.raise_if_invalid()
    update_card_weight(owner=user["id"], weight=request.weight)
    return Response(status_code=204)


@router.get("/history", summary="List the calling trainee's plan history")
def list_own_history(request: Request, user: dict = Depends(require_trainee)):
    v = Validator()
    filters = read_filters(request.query_params, v)
    v.raise_if_invalid()
    histories, metadata = list_history(owner=user["id"], filters=filters)
    return {"histories": histories, "metadata": metadata}


@router.get("/history/{trainee_id}", summary="List a trainee's plan history (their coach only)")
def list_trainee_history(
    request: Request,
    trainee_id: int = Path(ge=1, le=MAX_DB_INT),
    coach: dict = Depends(require_coach_or_admin),
):
    if not coach_permitted(trainee_id=trainee_id, coach=coach["id"]):
        raise WrongCredentials()

    v = Validator()
    filters = read_filters(request.query_params, v)
    v.raise_if_invalid()
    histories, metadata = list_history(owner=trainee_id, filters=filters)
    return {"histories": histories, "metadata": metadata}


@router.post("/plan/meal/{trainee_id}", summary="Assign a weekly meal plan to a trainee")
def assign_trainee_meal_plan(
    request: AssignPlanRequest,
    trainee_id: int = Path(ge=1, le=MAX_DB_INT),
    coach: dict = Depends(require_coach_or_admin),
):
    v = Validator()
    validate_assignment(v, request.plan)
    v.raise_if_invalid()
    return {"card": assign_meal_plan(trainee_id=trainee_id, coach=coach["id"], plan_id=request.plan)}


@router.post("/plan/exercise/{trainee_id}", summary="Assign an exercise plan to a trainee")
def assign_trainee_exercise_plan(
    request: AssignPlanRequest,
    trainee_id: int = Path(ge=1, le=MAX_DB_INT),
    coach: dict = Depends(require_coach_or_admin),
):
    v = Validator()
    validate_assignment(v, request.plan)
    v.raise_if_invalid()
    return {"card": assign_exercise_plan(trainee_id=trainee_id, coach=coach["id"], plan_id=request.plan)}

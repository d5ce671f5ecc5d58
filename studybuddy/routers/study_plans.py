from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studybuddy.core.config import settings
from studybuddy.models.db import get_db
from studybuddy.models.entities import User
from studybuddy.models.schemas import StudyPlanList, StudyPlanOut
from studybuddy.routers.auth import get_current_user
from studybuddy.services.completion import CompletionClient, build_completion_client
from studybuddy.services.plan import StudyPlanService
from studybuddy.services.store import RecordStore

router = APIRouter(prefix="/study-plans", tags=["study-plans"])


@lru_cache(maxsize=1)
def get_completion_client() -> Optional[CompletionClient]:
    return build_completion_client(settings)


def get_plan_service(
    db: Session = Depends(get_db),
    client: Optional[CompletionClient] = Depends(get_completion_client),
) -> StudyPlanService:
    return StudyPlanService(RecordStore(db), client, list_limit=settings.PLAN_LIST_LIMIT)


@router.post("/generate", response_model=StudyPlanOut, status_code=201)
def generate_plan(user: User = Depends(get_current_user), svc: StudyPlanService = Depends(get_plan_service)):
    return svc.generate(user.id)


@router.get("", response_model=StudyPlanList)
def list_plans(user: User = Depends(get_current_user), svc: StudyPlanService = Depends(get_plan_service)):
    plans = svc.list_recent(user.id)
    return {"study_plans": plans, "count": len(plans)}


@router.get("/{plan_id}", response_model=StudyPlanOut)
def get_plan(plan_id: int, user: User = Depends(get_current_user), svc: StudyPlanService = Depends(get_plan_service)):
    return svc.get(user.id, plan_id)


@router.delete("/{plan_id}")
def delete_plan(plan_id: int, user: User = Depends(get_current_user), svc: StudyPlanService = Depends(get_plan_service)):
    svc.delete(user.id, plan_id)
    return {"ok": True}

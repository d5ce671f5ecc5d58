from fastapi import APIRouter, Depends
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from studybuddy.models.db import get_db
from studybuddy.models.entities import Assignment, Subject, User
from studybuddy.models.schemas import DashboardSummary
from studybuddy.routers.auth import get_current_user
from studybuddy.services.store import RecordStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

UPCOMING_LIMIT = 5


@router.get("/summary", response_model=DashboardSummary)
def summary(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    subjects = db.scalar(select(func.count(Subject.id)).where(Subject.user_id == user.id)) or 0
    total, completed = db.execute(
        select(
            func.count(Assignment.id),
            func.coalesce(func.sum(case((Assignment.is_completed.is_(True), 1), else_=0)), 0),
        ).where(Assignment.user_id == user.id)
    ).one()
    upcoming = RecordStore(db).find_owned(
        Assignment, user.id,
        Assignment.is_completed.is_(False),
        order_by=(Assignment.due_date, Assignment.id),
        limit=UPCOMING_LIMIT,
    )
    return {
        "subjects": int(subjects),
        "total": int(total or 0),
        "pending": int((total or 0) - (completed or 0)),
        "completed": int(completed or 0),
        "upcoming": upcoming,
    }

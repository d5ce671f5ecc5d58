from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from studybuddy.core.errors import NotFound
from studybuddy.models.db import get_db
from studybuddy.models.entities import Assignment, Subject, User
from studybuddy.models.schemas import AssignmentIn, AssignmentOut, ProgressIn
from studybuddy.routers.auth import get_current_user
from studybuddy.services.store import RecordStore

router = APIRouter(prefix="/assignments", tags=["assignments"])


def _ensure_subject(store: RecordStore, user_id: int, subject_id: int) -> None:
    if store.find_one_owned(Subject, user_id, subject_id) is None:
        raise NotFound("Subject not found")


@router.get("", response_model=List[AssignmentOut])
def list_assignments(
    status: Optional[Literal["pending", "completed"]] = Query(None),
    subject_id: Optional[int] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    criteria = []
    if status == "completed":
        criteria.append(Assignment.is_completed.is_(True))
    elif status == "pending":
        criteria.append(Assignment.is_completed.is_(False))
    if subject_id is not None:
        criteria.append(Assignment.subject_id == subject_id)
    return RecordStore(db).find_owned(
        Assignment, user.id, *criteria, order_by=(Assignment.due_date, Assignment.id)
    )


@router.post("", response_model=AssignmentOut, status_code=201)
def create_assignment(payload: AssignmentIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    store = RecordStore(db)
    _ensure_subject(store, user.id, payload.subject_id)
    return store.insert(Assignment(user_id=user.id, **payload.model_dump()))


@router.get("/{assignment_id}", response_model=AssignmentOut)
def get_assignment(assignment_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    a = RecordStore(db).find_one_owned(Assignment, user.id, assignment_id)
    if a is None:
        raise NotFound("Assignment not found")
    return a


@router.put("/{assignment_id}", response_model=AssignmentOut)
def update_assignment(
    assignment_id: int,
    payload: AssignmentIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    store = RecordStore(db)
    _ensure_subject(store, user.id, payload.subject_id)
    a = store.update_owned(Assignment, user.id, assignment_id, payload.model_dump())
    if a is None:
        raise NotFound("Assignment not found")
    return a


@router.patch("/{assignment_id}/progress", response_model=AssignmentOut)
def update_progress(
    assignment_id: int,
    payload: ProgressIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    a = RecordStore(db).update_owned(Assignment, user.id, assignment_id, {"progress": payload.progress})
    if a is None:
        raise NotFound("Assignment not found")
    return a


@router.delete("/{assignment_id}")
def delete_assignment(assignment_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not RecordStore(db).delete_owned(Assignment, user.id, assignment_id):
        raise NotFound("Assignment not found")
    return {"ok": True}

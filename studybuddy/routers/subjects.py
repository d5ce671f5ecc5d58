import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studybuddy.core.errors import NotFound
from studybuddy.models.db import get_db
from studybuddy.models.entities import Subject, User
from studybuddy.models.schemas import SubjectIn, SubjectOut
from studybuddy.routers.auth import get_current_user
from studybuddy.services.store import RecordStore

log = logging.getLogger(__name__)

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("", response_model=List[SubjectOut])
def list_subjects(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return RecordStore(db).find_owned(
        Subject, user.id, order_by=(Subject.created_at.desc(), Subject.id.desc())
    )


@router.post("", response_model=SubjectOut, status_code=201)
def create_subject(payload: SubjectIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return RecordStore(db).insert(Subject(user_id=user.id, **payload.model_dump()))


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    subject = RecordStore(db).find_one_owned(Subject, user.id, subject_id)
    if subject is None:
        raise NotFound("Subject not found")
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: int,
    payload: SubjectIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    subject = RecordStore(db).update_owned(Subject, user.id, subject_id, payload.model_dump())
    if subject is None:
        raise NotFound("Subject not found")
    return subject


@router.delete("/{subject_id}")
def delete_subject(subject_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    store = RecordStore(db)
    if not store.delete_owned(Subject, user.id, subject_id):
        raise NotFound("Subject not found")
    # Two separate writes: a crash here leaves orphaned assignments behind.
    removed = store.delete_all_owned_by(user.id, subject_id)
    return {"ok": True, "deleted_assignments": removed}

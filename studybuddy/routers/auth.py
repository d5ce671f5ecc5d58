from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Optional

from studybuddy.core.errors import Conflict, NotFound, Unauthenticated
from studybuddy.models.db import get_db
from studybuddy.models.entities import User
from studybuddy.models.schemas import UserLogin, UserOut, UserRegister

router = APIRouter(prefix="/auth", tags=["auth"])


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the X-User-Id header to a known user."""
    if not x_user_id or not x_user_id.strip().isdigit():
        raise Unauthenticated()
    user = db.get(User, int(x_user_id))
    if user is None:
        raise Unauthenticated()
    return user


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if db.scalar(select(User).where(User.email == email)):
        raise Conflict("A user with this email already exists")
    user = User(name=payload.name.strip(), email=email)
    db.add(user); db.commit(); db.refresh(user)
    return user


@router.post("/login")
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user = db.scalar(select(User).where(User.email == payload.email.strip().lower()))
    if not user:
        raise NotFound("user not found")
    return {"ok": True, "user_id": user.id}


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user

# studybuddy/core/config.py
from __future__ import annotations

import os
from typing import Callable, List, Optional, TypeVar

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

Number = TypeVar("Number", int, float)

_FALSY = {"0", "false", "no", "off", ""}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() not in _FALSY


def _env_number(name: str, default: Number, cast: Callable[[str], Number]) -> Number:
    """Parse a numeric env var with ``cast``; malformed or missing values keep ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        return default


def _env_list(name: str) -> List[str]:
    return [part.strip() for part in os.getenv(name, "").split(",") if part.strip()]


class Settings(BaseModel):
    # ------------------------- App -------------------------
    APP_NAME: str = os.getenv("APP_NAME", "StudyBuddy AI")
    DEBUG: bool = _env_flag("DEBUG", False)

    # ------------------------- DB -------------------------
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///studybuddy.db")

    # ------------------------- LLM (Groq) -------------------------
    GROQ_API_KEY: Optional[str] = os.getenv("GROQ_API_KEY")
    GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    LLM_TEMPERATURE: float = _env_number("LLM_TEMPERATURE", 0.2, float)
    LLM_MAX_TOKENS: int = _env_number("LLM_MAX_TOKENS", 2000, int)
    LLM_TIMEOUT_SECONDS: float = _env_number("LLM_TIMEOUT_SECONDS", 60.0, float)

    # ------------------------- Study plans -------------------------
    PLAN_LIST_LIMIT: int = _env_number("PLAN_LIST_LIMIT", 10, int)

    # ------------------------- CORS -------------------------
    # e.g. CORS_ALLOW_ORIGINS="http://localhost:5173,http://127.0.0.1:3000"
    CORS_ALLOW_ORIGINS: List[str] = _env_list("CORS_ALLOW_ORIGINS")

    # ------------------------- Derived flags -------------------------
    @property
    def HAS_GROQ(self) -> bool:
        return bool(self.GROQ_API_KEY and self.GROQ_API_KEY.strip())

    @property
    def DB_IS_SQLITE(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def SQLALCHEMY_ECHO(self) -> bool:
        return self.DEBUG


settings = Settings()

# studybuddy/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studybuddy.core.config import settings
from studybuddy.core.errors import StudyBuddyError
from studybuddy.models.db import engine, Base
from studybuddy.models import entities  # noqa: F401  ensure models are registered
from studybuddy.routers import assignments, auth, dashboard, study_plans, subjects

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# CORS for local dev (frontend may be on a different port)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- ERRORS ----------
@app.exception_handler(StudyBuddyError)
def handle_app_error(request: Request, exc: StudyBuddyError):
    body = {"detail": exc.message, "code": exc.code}
    if exc.retryable:
        body["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception):
    log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


# ---------- DB BOOTSTRAP ----------
def _init_db():
    Base.metadata.create_all(bind=engine)
    log.info("[DB] schema ready (%s)", "sqlite" if settings.DB_IS_SQLITE else "external")

_init_db()

# ---------- API ROUTERS ----------
app.include_router(auth.router)
app.include_router(subjects.router)
app.include_router(assignments.router)
app.include_router(dashboard.router)
app.include_router(study_plans.router)

# ---------- HEALTH ----------
@app.get("/healthz")
def health():
    return {"ok": True, "app": settings.APP_NAME}


@app.get("/debug/llm")
def debug_llm():
    return {
        "has_key": settings.HAS_GROQ,
        "model": settings.GROQ_MODEL,
        "client_ready": study_plans.get_completion_client() is not None,
    }

# ---------- ROOT ----------
@app.get("/")
def root_ok():
    return {"ok": True, "docs": "/docs"}

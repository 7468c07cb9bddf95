from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from dishdisplay.db.base import get_db
from dishdisplay.core.config import settings
from dishdisplay.core.logging import configure_logging
from dishdisplay.routers import visits as visits_router
from dishdisplay.routers import reviews as reviews_router
from dishdisplay.routers import profile as profile_router
from dishdisplay.routers import leaderboard as leaderboard_router
from dishdisplay.routers import periods as periods_router
from dishdisplay.routers import competition as competition_router
from dishdisplay.core.errors import (
    DishDisplayException,
    dishdisplay_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

configure_logging()

app = FastAPI(
    title="DishDisplay Rewards API",
    description=(
        "**Diner engagement rules engine**\n\n"
        "Logs visits and reviews behind anti-spam rules, awards quality-weighted "
        "points and visit streak bonuses, and ranks diners on a weekly leaderboard.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(DishDisplayException, dishdisplay_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(visits_router.router)
app.include_router(reviews_router.router)
app.include_router(profile_router.router)
app.include_router(leaderboard_router.router)
app.include_router(periods_router.router)
app.include_router(competition_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}

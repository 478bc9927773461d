"""
Daylog API entry point.

    gunicorn -c gunicorn.conf.py daylog.main:app
"""
import logging

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from daylog.core.config import settings
from daylog.core.errors import register_exception_handlers
from daylog.core.logging import setup_logging
from daylog.db.base import get_db
from daylog.routers import config as config_router
from daylog.routers import log as log_router
from daylog.routers import stats as stats_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Daylog API",
    description=(
        "**Personal daily metrics tracker**\n\n"
        "One value per metric per day, with calculated metrics, completion "
        "hints, checkbox streaks and rolling statistics.\n\n"
        "Every endpoint except `/health` requires the `X-Owner-Id` header. "
        "Errors use the `{code, message, details}` envelope."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

for module in (config_router, log_router, stats_router):
    app.include_router(module.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """`{"status": "ok", "db": "ok"}`, or HTTP 503 when the database cannot be reached."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("health check: database unreachable: %s", exc)
        return JSONResponse(status_code=503, content={"status": "error", "db": "unreachable"})
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}

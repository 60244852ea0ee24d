"""
Factory Digital Twin - Prediction Data API

Serves the model predictions the dashboard polls.

- `GET  /data/`        recent predictions in the dashboard envelope
- `POST /data/`        batch ingestion
- `GET  /data/status`  server-side severity per equipment
- `POST /data/demo/setup` synthetic data seeding

Run locally with `python -m api.main` and open http://localhost:8000/docs.
"""

import os
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.database import check_database_health, init_database
from api.routes import data_router
from api.models import ErrorResponse, SystemHealth

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

DASHBOARD_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "DASHBOARD_ORIGINS", "http://localhost:8501,http://127.0.0.1:8501"
    ).split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the predictions table on startup; a missing database is not fatal."""
    try:
        init_database()
    except Exception as e:
        logger.error(f"Could not initialize the prediction store: {e}")
    else:
        health = check_database_health()
        logger.info(
            f"Prediction store {health['status']} "
            f"({health.get('prediction_count', 0)} predictions)"
        )
    yield
    logger.info("Prediction API stopped")


app = FastAPI(
    title="Factory Digital Twin API",
    description="""
Stores the plant's predictive maintenance output and serves it to the
factory digital twin dashboard.

Labels: `0` normal, `1` critical, `2` warning. Per equipment, a critical
share above 50% is **Critical** and above 30% is **Warning**.

Seed data with `POST /data/demo/setup`, then poll `GET /data/`.
    """,
    version=API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=DASHBOARD_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(data_router)


def error_content(message: str, status_code: int, detail: Optional[str] = None) -> dict:
    """Error body shared by every failure the API reports."""
    body = ErrorResponse(message=message, detail=detail, status_code=status_code)
    return body.model_dump(mode="json")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    debug = os.getenv("DEBUG", "false").lower() == "true"
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=code,
        content=error_content("Internal server error", code, str(exc) if debug else None),
    )


@app.get("/", tags=["System"], summary="Service index")
async def root():
    return {
        "name": "Factory Digital Twin API",
        "version": API_VERSION,
        "documentation": "/docs",
        "health_check": "/health",
        "data": "/data/"
    }


@app.get("/health", response_model=SystemHealth, tags=["System"], summary="Database health")
async def health_check():
    db_status = check_database_health()["status"]
    return SystemHealth(
        status="ok" if db_status == "healthy" else "degraded",
        version=API_VERSION,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        components={"api": "ok", "database": db_status},
    )


@app.get("/live", tags=["System"], summary="Liveness")
async def liveness_check():
    return {"alive": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=os.getenv("API_HOST", "127.0.0.1"),
        port=int(os.getenv("API_PORT", 8000)),
        reload=os.getenv("API_RELOAD", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "info").lower()
    )

"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    cd backend
    uvicorn api.server:app --reload --port 8000

Endpoints:
    GET   /v1/health
    POST  /v1/collections/{collection_id}/days/auto-schedule
    GET   /v1/collections/{collection_id}/days
    PATCH /v1/collections/{collection_id}/days
    GET   /v1/collections/{collection_id}/days/metrics
    POST  /v1/collections/{collection_id}/days/{day_id}/optimize

Error bodies:
    400  {"status": "error", "errors": [...]}     request schema violations
    4xx  {"status": "error", "message": "..."}    everything raised as HTTPException
    500  {"status": "error", "message": "..."}
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from api.deps import close_event_logger
from api.routes import days, health
from db import connection

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("day planner API starting (collections: %s)", config.COLLECTION_BACKEND)
    yield
    close_event_logger()
    # no-op unless the postgres store opened the pool
    connection.close_pool()
    logger.info("day planner API stopped")


app = FastAPI(
    lifespan=lifespan,
    title="Day Planner API",
    version="1.0.0",
    description=(
        "Splits a collection of saved places into day-sized groups using "
        "straight-line travel distance, and stores the resulting day plan."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow the web frontend (any origin during development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"status": "error", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.include_router(health.router, prefix="/v1",             tags=["Health"])
app.include_router(days.router,   prefix="/v1/collections", tags=["Day Planner"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)

import json
import logging
from pathlib import Path

from .utils.config import LOG_LEVEL, AUTO_CREATE_TABLES

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

from contextlib import asynccontextmanager
from typing import AsyncIterator
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .db_init import init_db
from .routers.locations import router as locations_router
from .utils.errors import HierarchyError
from .utils.response import error_response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if AUTO_CREATE_TABLES:
        logger.info("[Startup] Ensuring database tables exist.")
        init_db()
    else:
        logger.info("[Startup] AUTO_CREATE_TABLES disabled, leaving schema to Alembic.")
    yield


app = FastAPI(lifespan=lifespan)


@app.exception_handler(HierarchyError)
async def hierarchy_error_handler(request: Request, exc: HierarchyError):
    return error_response(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return error_response("Validation failed", 400, details=details)


app.include_router(locations_router)


@app.get("/health")
def health():
    return {"ok": True, "service": "Sortr API"}


_version_path = Path(__file__).with_name("version.json")
try:
    with open(_version_path, "r", encoding="utf-8") as f:
        _version_info = json.load(f)
except (OSError, ValueError):
    _version_info = {
        "app_name": "Sortr API",
        "version": "unknown",
        "build_name": "unknown",
        "build_time": 0,
    }


@app.get("/")
def read_root():
    return _version_info

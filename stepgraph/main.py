# Step Graph API Main Entry Point
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .db import create_tables
from .errors import (
    DeletionBlocked,
    NotFound,
    ReorderBlocked,
    StepValidationError,
    StoreFailure,
)
from .routers.ready import router as ready_router
from .routers.steps import router as steps_router
from .settings import settings

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("stepgraph")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        create_tables()
        logger.info("Database tables checked/created")
    yield


# Rate limiter (per-IP)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)

app = FastAPI(title="Step Graph API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(StepValidationError)
async def validation_error_handler(request: Request, exc: StepValidationError):
    return JSONResponse(status_code=400, content={"errors": exc.errors})


@app.exception_handler(DeletionBlocked)
async def deletion_blocked_handler(request: Request, exc: DeletionBlocked):
    return JSONResponse(
        status_code=400,
        content={
            "errors": {"stepDeletion": exc.message},
            "step_num": exc.deleted_step_num,
            "blocking_step_nums": exc.blocking_step_nums,
        },
    )


@app.exception_handler(ReorderBlocked)
async def reorder_blocked_handler(request: Request, exc: ReorderBlocked):
    return JSONResponse(
        status_code=400,
        content={
            "errors": {"reorder": exc.message},
            "step_num": exc.step_num,
            "blocking_step_nums": exc.blocking_step_nums,
        },
    )


@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"errors": {"general": "Failed to save step changes. Please try again."}},
    )


app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(steps_router, prefix="/api", tags=["steps"])

"""Reconstruct API - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from reconstruct.core.config import get_settings
from reconstruct.core.errors import APIError, PersistenceFailure, ValidationFailure
from reconstruct.core.logging_config import configure_logging
from reconstruct.db.base import Base
from reconstruct.db.session import engine, ping, wait_for_database
from reconstruct.routers import auth, calendar, email, mind_tools, tasks
from reconstruct.schemas.common import describe_errors

settings = get_settings()
logger = configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if await wait_for_database():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        logger.error("Starting without a database connection; /health will report the failure")

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    description="Vision board, calendar, planner and mind tools storage for the Reconstruct app",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
    allow_credentials=True,
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    failure = ValidationFailure("Invalid request", describe_errors(exc))
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    failure = PersistenceFailure("Database error", str(exc))
    return JSONResponse(status_code=failure.status_code, content=failure.to_dict())


app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(calendar.router)
app.include_router(mind_tools.router)
app.include_router(email.router)


@app.get("/health")
async def health():
    try:
        await ping()
    except (SQLAlchemyError, OSError) as exc:
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "status": "ERROR",
                "message": "API is running but database connection failed",
                "error": str(exc),
            },
        )
    return {"success": True, "status": "OK", "message": "API is running", "database": "Connected"}


@app.get("/db-test")
async def db_test():
    try:
        solution = await ping()
    except (SQLAlchemyError, OSError) as exc:
        failure = PersistenceFailure("Database connection failed", str(exc), connected=False)
        return JSONResponse(status_code=failure.status_code, content=failure.to_dict())
    return {
        "success": True,
        "connected": True,
        "result": solution,
        "message": "Database connection successful",
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("reconstruct.main:app", host="0.0.0.0", port=settings.port)

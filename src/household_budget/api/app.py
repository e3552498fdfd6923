"""FastAPI application factory for the household budget API."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from household_budget.api.routes import (
    auth_router,
    health_router,
    household_router,
    invitation_router,
    recurring_router,
    savings_router,
    transaction_router,
    user_router,
)
from household_budget.config import get_settings
from household_budget.container import get_container, get_database, reset_container
from household_budget.exceptions import HouseholdBudgetError
from household_budget.logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from household_budget.repositories.sqlite import SQLiteDatabase

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    auth_router,
    user_router,
    household_router,
    invitation_router,
    transaction_router,
    recurring_router,
    savings_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging(settings)

    # Open and migrate the database before the first request arrives.
    database = get_container().database
    logger.info(
        "api_started",
        version=settings.app_version,
        environment=settings.environment.value,
        database=database.path,
    )

    yield

    reset_container()
    logger.info("api_stopped")


def get_db() -> SQLiteDatabase:
    """Shared database handle; tests override this dependency."""
    return get_database()


async def log_request_middleware(request: Request, call_next):
    bind_context(
        request_id=uuid.uuid4().hex[:8],
        method=request.method,
        path=request.url.path,
    )
    try:
        response = await call_next(request)
        logger.debug("request_completed", status_code=response.status_code)
        return response
    finally:
        clear_context()


async def household_budget_error_handler(
    request: Request, exc: HouseholdBudgetError
) -> JSONResponse:
    """Render a domain error as ``{error, message, context}``."""
    logger.warning(
        "request_rejected",
        error_code=exc.error_code,
        status_code=exc.status_code,
        context=exc.context,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Shared household budget: members, ledger, recurring bills and savings",
        version=settings.app_version,
        debug=settings.debug,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.middleware("http")(log_request_middleware)
    app.add_exception_handler(HouseholdBudgetError, household_budget_error_handler)

    # Routes depend on SQLiteDatabase directly; resolve it through the container.
    app.dependency_overrides[SQLiteDatabase] = get_db

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()

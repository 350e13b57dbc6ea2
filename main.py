from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transactions.transaction_routes import router as transaction_router
from analysis_service.analysis_routes import router as analysis_router
from db.postgres import init_postgres, close_postgres
import logging
from settings.config import settings
from budgets.budget_routes import router as budget_router
from goals.goal_routes import router as goal_router
from users.user_routes import router as user_router, profile_router
from repositories.errors import StoreUnavailable
from settings.logging_config import configure_logging

logger = logging.getLogger(__name__)


def get_app() -> FastAPI:
    configure_logging()
    logger.info("Starting PocketLedger API")
    app = FastAPI(title="PocketLedger API")

    # CORS: enable permissive defaults for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # DB lifecycle
    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("Initializing database")
        await init_postgres()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("Closing database")
        await close_postgres()

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
        logger.error("Record store unavailable during %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"message": "Server Error"})

    # Routers
    app.include_router(transaction_router)
    app.include_router(analysis_router)
    app.include_router(user_router)
    app.include_router(profile_router)
    if settings.ENABLE_BUDGETS:
        app.include_router(budget_router)
    if settings.ENABLE_GOALS:
        app.include_router(goal_router)
    logger.info("Routers initialized successfully")

    # Health
    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "ok"}

    logger.info("API started")
    return app


# ASGI app instance
app = get_app()

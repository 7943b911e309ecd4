"""MedVault — Main application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from medvault.clock import Clock, now
from medvault.config import DATABASE_URL, LOG_LEVEL
from medvault.database import Database
from medvault.api.download_requests.controllers.download_requests_controller import (
    router as download_requests_router,
)
from medvault.api.files.controllers.files_controller import router as files_router

logger = logging.getLogger(__name__)


def run_migrations(database: Database) -> None:
    """Run Alembic migrations, falling back to create_all."""
    try:
        alembic_ini = Path(__file__).parent / "alembic.ini"
        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option(
            "script_location", str(Path(__file__).parent / "db_migrations")
        )
        alembic_cfg.set_main_option("sqlalchemy.url", database.url.replace("%", "%%"))
        command.upgrade(alembic_cfg, "head")
    except Exception:
        logger.warning("Migration failed, creating tables directly", exc_info=True)
        database.create_all()


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.open()
    if app.state.migrate:
        run_migrations(database)
    else:
        database.create_all()
    try:
        yield
    finally:
        database.close()


async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Persistence failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "reason": "persistence_error"},
    )


def create_app(
    database: Database | None = None,
    clock: Clock = now,
    migrate: bool = True,
) -> FastAPI:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(title="MedVault", version="0.1.0", lifespan=lifespan)
    app.state.database = database or Database(DATABASE_URL)
    app.state.clock = clock
    app.state.migrate = migrate

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    app.include_router(files_router)
    app.include_router(download_requests_router)
    return app


app = create_app()

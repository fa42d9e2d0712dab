"""FinKan API Server"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from .api import auth, columns, health, profiles, projects, tasks, workspaces
from .config import Settings, ensure_jwt_secret
from .core.database import create_db_engine, init_db, wait_for_db

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(message)s"


def _describe_validation_errors(exc: RequestValidationError) -> tuple[str, list[dict]]:
    errors = []
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", []) if part != "body"]
        msg = str(err.get("msg", ""))
        errors.append({"type": str(err.get("type", "unknown")), "loc": loc, "msg": msg})
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "Invalid request: " + "; ".join(messages), errors


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    settings = ensure_jwt_secret(settings or Settings())

    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)

    if engine is None:
        engine = create_db_engine(
            settings.database_url,
            echo=settings.sql_echo,
            **(
                {}
                if settings.database_url.startswith("sqlite")
                else {"pool_size": settings.db_pool_size, "max_overflow": settings.db_max_overflow}
            ),
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not wait_for_db(app.state.engine):
            raise RuntimeError("Database is not reachable")
        init_db(app.state.engine)
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title="FinKan",
        description="Kanban boards for workspaces and their projects",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({duration_ms:.1f}ms) [{request_id}]"
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        detail, errors = _describe_validation_errors(exc)
        return JSONResponse(status_code=400, content={"detail": detail, "errors": errors})

    # Session routes
    app.include_router(auth.router)

    # Workspace-scoped routes
    app.include_router(workspaces.router)
    app.include_router(projects.router)
    app.include_router(columns.router)
    app.include_router(tasks.router)
    app.include_router(profiles.router)

    # System routes
    app.include_router(health.router)

    return app


app = create_app()

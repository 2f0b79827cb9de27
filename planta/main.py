import os

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from sqlalchemy import inspect

from .config import settings
from .db import Base, SessionLocal, engine
from .errors import PlantaError
from .logging import RequestIdMiddleware, setup_logging
from .models.models import TareaCatalogo
from .routes.auth import router as auth_router
from .routes.catalog import router as catalog_router
from .routes.search import router as search_router
from .routes.stations import router as stations_router
from .routes.tasks import router as tasks_router
from .routes.users import router as users_router
from .services.catalog import seed_catalog_from_areas


logger = structlog.get_logger(__name__)


async def planta_error_handler(request: Request, exc: PlantaError):
    logger.warning(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error=type(exc).__name__,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"status": "error", "message": "Internal server error"})


def init_database() -> None:
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("var", exist_ok=True)
    existing_tables = set(inspect(engine).get_table_names())
    missing = set(Base.metadata.tables.keys()) - existing_tables
    if missing:
        logger.info("creating_tables", tables=sorted(missing))
        Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(TareaCatalogo.id).first() is None:
            seed_catalog_from_areas(db)
    finally:
        db.close()


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Errors
    app.add_exception_handler(PlantaError, planta_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(tasks_router)
    app.include_router(catalog_router)
    app.include_router(stations_router)
    app.include_router(search_router)

    @app.get("/ping")
    def ping():
        return {"ok": True}

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def _startup():
        logger.info("startup", app=settings.app_name, environment=settings.environment)
        if settings.auto_create_db:
            init_database()

    return app


app = create_app()

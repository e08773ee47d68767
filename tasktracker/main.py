from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from .api.errors import register_exception_handlers
from .api.v1.api import router as api_router
from .core.config import Settings, settings
from .core.logger import setup_logger
from .db.session import check_db_connection, create_db_engine, init_db
from .services.bootstrap import run_bootstrap

logger = setup_logger("main")


def create_app(app_settings: Settings = settings, engine: Optional[Engine] = None) -> FastAPI:
    """Build the API. Tests pass their own ``engine``; otherwise one is created from settings."""
    owns_engine = engine is None
    if engine is None:
        engine = create_db_engine(app_settings.DATABASE_URL, echo=app_settings.DB_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables and seed statuses/admin on startup
        init_db(engine)
        run_bootstrap(engine, app_settings)
        logger.info(f"{app_settings.PROJECT_NAME} started")
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        description="Multi-tenant task tracking API with admin-managed statuses",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routers
    app.include_router(api_router, prefix=app_settings.API_V1_STR)

    @app.get("/")
    def read_root():
        return {"message": app_settings.PROJECT_NAME}

    @app.get("/health")
    def health_check():
        if not check_db_connection(engine):
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "database": "unreachable"},
            )
        return {"status": "healthy", "database": "ok"}

    return app


app = create_app()

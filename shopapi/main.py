# shopapi/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from shopapi.core.config import Settings, get_settings
from shopapi.core.identity import IdentityVerifier, build_identity_verifier
from shopapi.database import create_db_and_tables, create_db_engine

# Routers
from shopapi.routers.admin_orders import router as admin_orders_router
from shopapi.routers.admin_products import router as admin_products_router
from shopapi.routers.admin_riders import router as admin_riders_router
from shopapi.routers.auth import router as auth_router
from shopapi.routers.orders import router as orders_router
from shopapi.routers.products import router as products_router

logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Build the identity verifier unless one was injected.

    Shutdown:
      - Dispose the engine's connection pool.
    """
    settings: Settings = app.state.settings

    logger.info("🔄 Startup: connecting to the database...")
    try:
        create_db_and_tables(app.state.engine)
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise

    if app.state.identity_verifier is None:
        app.state.identity_verifier = build_identity_verifier(settings)
        logger.info(f"✅ Startup: identity provider '{settings.IDENTITY_PROVIDER}' ready.")

    yield

    app.state.engine.dispose()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies / params are client errors (400)."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    identity_verifier: IdentityVerifier | None = None,
) -> FastAPI:
    """
    Build the API application.

    The database engine and the identity verifier are owned by the app
    (`app.state`) and reach handlers through dependencies; tests inject
    their own.
    """
    settings = settings or get_settings()

    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine or create_db_engine(settings)
    app.state.identity_verifier = identity_verifier

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    # --- CORS configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    prefix = settings.API_PREFIX
    app.include_router(products_router, prefix=prefix)
    app.include_router(orders_router, prefix=prefix)
    app.include_router(auth_router, prefix=prefix)
    app.include_router(admin_orders_router, prefix=prefix)
    app.include_router(admin_riders_router, prefix=prefix)
    app.include_router(admin_products_router, prefix=prefix)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "shopapi"}

    return app


app = create_app()

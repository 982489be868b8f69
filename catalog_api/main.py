from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
import argparse
import logging

from catalog_api.config import Settings
from catalog_api.database import Database, open_database
from catalog_api.exceptions import CatalogError
from catalog_api.routes import movies, ratings
from catalog_api.services.boxoffice_service import BoxOfficeClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": code, "message": message})


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application (composition root)

    Args:
        settings: Configuration, read from the environment when omitted
        database: Already-open database; when omitted the lifespan opens one
            from settings.db_url and closes it on shutdown
    """
    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    # ============================================
    # Application Lifespan Management
    # ============================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: open and migrate the database, build the box office client
        Shutdown: close the database if this app opened it
        """
        logger.info("=" * 60)
        logger.info("Movie Catalogue API Starting...")
        owns_database = database is None
        app.state.database = open_database(settings.db_url, echo=settings.db_echo) if owns_database else database
        app.state.box_office_client = BoxOfficeClient.from_settings(settings)
        logger.info(f"   Auth token: {'configured' if settings.auth_token else 'disabled'}")
        logger.info(f"   Box office enrichment: {'enabled' if app.state.box_office_client else 'disabled'}")
        logger.info("=" * 60)

        yield

        logger.info("Movie Catalogue API Shutting Down...")
        if owns_database:
            app.state.database.close()

    app = FastAPI(
        title="Movie Catalogue API",
        description="Movies catalogue and rating API with box office enrichment",
        version="1.0.0",
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
        openapi_url="/openapi.json" if settings.enable_docs else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ============================================
    # Exception Handlers - one error envelope for every failure
    # ============================================

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, "ERROR")
        return error_response(exc.status_code, code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return error_response(422, "VALIDATION_ERROR", f"Invalid request body: {message}")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return error_response(500, "INTERNAL", "Internal server error")

    # ============================================
    # Routes
    # ============================================

    @app.get("/healthz", tags=["System"])
    async def health_check():
        """Service is up"""
        return {"status": "ok"}

    app.include_router(movies.router)
    app.include_router(ratings.router)

    return app


def run(argv=None):
    """Command line entry point: serve the API with uvicorn"""
    import uvicorn

    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Movie catalogue API server")
    parser.add_argument("-p", "--port", type=int, default=settings.port, help="listen port")
    parser.add_argument("-a", "--address", default=settings.address, help="listen address")
    parser.add_argument("--docs", action="store_true", help="serve OpenAPI docs at /docs")
    args = parser.parse_args(argv)

    if args.docs:
        settings.enable_docs = True
        logger.info(f"Docs enabled at http://{args.address}:{args.port}/docs")

    uvicorn.run(create_app(settings), host=args.address, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()

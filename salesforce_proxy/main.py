"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salesforce_proxy.api import router as api_router
from salesforce_proxy.api.schemas.common import ErrorResponse, HealthResponse
from salesforce_proxy.config import get_settings
from salesforce_proxy.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()

    logger.info(
        "Starting application",
        version=settings.app_version,
        frontend_url=settings.frontend_url,
        login_url=settings.salesforce_login_url,
    )
    yield
    logger.info("Shutting down application")


def _validation_error_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "Invalid request: " + "; ".join(parts)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=not settings.debug)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _validation_error_message(exc)
        logger.warning("Rejected invalid request", path=request.url.path, error=message)
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=message).model_dump(),
        )

    app.include_router(api_router, prefix="/api")

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Liveness check."""
        return HealthResponse(status="ok", message="Salesforce proxy server is running")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "salesforce_proxy.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

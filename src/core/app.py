"""
ContractLens - Core Application

This module builds the FastAPI application: lifespan-managed shared clients,
middleware, the JSON error boundary and the API routes.
"""

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cache import create_redis_client
from .config import Settings, get_settings
from .database import init_db, close_db
from .exceptions import BaseAPIException

logger = logging.getLogger(__name__)

HTTP_ERROR_KINDS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    415: "invalid_file_type",
}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    """Build the JSON body every error is returned as."""
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": details or {}},
    )


class ContractLensApp:
    """Application builder."""

    def __init__(self, settings: Settings = None):
        """Initialize the application."""
        self.settings = settings or get_settings()
        self.app = None
        self._create_app()

    def _create_app(self):
        """Create the FastAPI application instance."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Application lifespan manager."""
            # Startup
            logger.info(f"Starting {self.settings.PROJECT_NAME} v{self.settings.VERSION}")

            await init_db()
            logger.info("Database initialized")

            try:
                app.state.redis = await create_redis_client(self.settings)
            except Exception as e:
                # Requests needing Redis answer 503 until it is reachable
                logger.error(f"Failed to connect to Redis: {e}")
                app.state.redis = None

            from llm.client import GeminiClient
            app.state.llm_client = GeminiClient.from_settings(self.settings)
            logger.info(f"Language model client ready ({self.settings.GEMINI_MODEL})")

            yield

            # Shutdown
            await app.state.llm_client.close()
            if app.state.redis is not None:
                await app.state.redis.aclose()
                logger.info("Disconnected from Redis")
            await close_db()
            logger.info("Database connections closed")

        self.app = FastAPI(
            title=self.settings.PROJECT_NAME,
            description="Contract type detection and AI risk/opportunity analysis",
            version=self.settings.VERSION,
            openapi_url=f"{self.settings.API_PREFIX}/openapi.json",
            docs_url=f"{self.settings.API_PREFIX}/docs",
            redoc_url=f"{self.settings.API_PREFIX}/redoc",
            lifespan=lifespan,
        )
        self.app.state.redis = None
        self.app.state.llm_client = None

        self._add_middleware()
        self._add_exception_handlers()
        self._add_routes()

    def _add_middleware(self):
        """Add middleware to the application."""
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.get_cors_origins(),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Request logging, timing, security headers and the last-resort error boundary
        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            start_time = time.time()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(f"Unhandled error on {request.method} {request.url.path}")
                response = error_response(500, "internal_error", "An unexpected error occurred")
            process_time = time.time() - start_time
            response.headers["X-Process-Time"] = str(process_time)
            for header, value in SECURITY_HEADERS.items():
                response.headers.setdefault(header, value)
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} "
                f"{process_time * 1000:.1f}ms"
            )
            return response

    def _add_exception_handlers(self):
        """Map exceptions onto JSON error responses."""

        @self.app.exception_handler(BaseAPIException)
        async def api_exception_handler(request: Request, exc: BaseAPIException):
            if exc.status_code >= 500:
                logger.error(
                    f"{request.method} {request.url.path} failed: {exc.error}: {exc.message}",
                    exc_info=exc.__cause__ or exc,
                )
            else:
                logger.warning(f"{request.method} {request.url.path} rejected: {exc.error}: {exc.message}")
            return error_response(exc.status_code, exc.error, exc.message, exc.details)

        @self.app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            logger.warning(f"{request.method} {request.url.path} HTTP {exc.status_code}: {exc.detail}")
            error = HTTP_ERROR_KINDS.get(exc.status_code, "internal_error" if exc.status_code >= 500 else "http_error")
            response = error_response(exc.status_code, error, str(exc.detail))
            if exc.headers:
                response.headers.update(exc.headers)
            return response

        @self.app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
            logger.warning(f"{request.method} {request.url.path} invalid request: {fields}")
            return error_response(400, "bad_request", "Invalid request", {"fields": fields})

    def _add_routes(self):
        """Add routes to the application."""
        @self.app.get("/")
        async def root():
            return {
                "name": self.settings.PROJECT_NAME,
                "version": self.settings.VERSION,
                "docs": f"{self.settings.API_PREFIX}/docs",
            }

        from api.v1 import api_router
        from api.v1.endpoints import health

        self.app.include_router(health.router, tags=["health"])
        self.app.include_router(api_router, prefix=self.settings.API_PREFIX)

    def get_app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self.app


def create_app(settings: Settings = None) -> FastAPI:
    """Create and return the FastAPI application."""
    app_instance = ContractLensApp(settings)
    return app_instance.get_app()

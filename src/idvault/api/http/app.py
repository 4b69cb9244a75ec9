"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.idvault.api.http.app_data import ApplicationDependencies
from src.idvault.api.http.middleware.limiter import build_rate_limiter
from src.idvault.api.http.routers.auth import router as auth_router
from src.idvault.api.http.routers.health import router as health_router
from src.idvault.api.http.routers.profile import router as profile_router
from src.idvault.api.utils.app_startup import configure_logging
from src.idvault.core.exceptions import IdentityError, ValidationError
from src.idvault.core.services import (
    DbSessionService,
    FieldEncryptionService,
    PasswordHasher,
    TokenService,
    derive_key,
)
from src.idvault.core.validation import ValidationPolicy
from src.idvault.runtime.config.config_data import ConfigData
from src.idvault.runtime.context import get_config


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, environment: str = "development"):
        super().__init__(app)
        self._environment = environment

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        response.headers.setdefault("Cache-Control", "no-store")
        # HSTS only in prod
        if self._environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def build_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Construct every process-wide component from configuration.

    Raises:
        ConfigurationError: A required secret is missing.
    """
    security = config.security
    encryptor = FieldEncryptionService(
        derive_key(security.encryption_key),
        security.associated_data.encode("utf-8"),
    )
    token_service = TokenService(
        security.jwt_secret,
        expires_in_seconds=security.token_ttl_seconds,
        algorithm=security.jwt_algorithm,
        issuer=security.jwt_issuer,
    )
    return ApplicationDependencies(
        database_service=DbSessionService(config.database),
        field_encryption_service=encryptor,
        password_hasher=PasswordHasher(security.bcrypt_rounds),
        token_service=token_service,
        validation_policy=ValidationPolicy.from_config(config.validation),
        rate_limiter=build_rate_limiter(config.rate_limiter),
    )


def _error_response(
    request: Request, status_code: int, detail: str, error: str, **extra
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "-")
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error": error, "request_id": request_id, **extra},
        headers={"X-Request-ID": request_id},
    )


async def identity_error_handler(request: Request, exc: IdentityError) -> JSONResponse:
    error = type(exc).__name__
    if exc.status_code >= 500:
        logger.bind(error_type=error).error("request.internal_error: {}", exc.message)
    extra = {"errors": exc.errors} if isinstance(exc, ValidationError) else {}
    return _error_response(request, exc.status_code, exc.public_message, error, **extra)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return _error_response(
        request, 400, "Validation failed", "ValidationError", errors=errors
    )


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the application. Secrets are checked when the lifespan starts."""
    main_config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(main_config)
        logger.info(
            "Starting up application in {} environment", main_config.app.environment
        )
        deps = build_dependencies(main_config)
        if main_config.database.auto_create:
            deps.database_service.create_all()
        app.state.app_dependencies = deps
        app.state.rate_limiter = deps.rate_limiter
        try:
            yield
        finally:
            logger.info("Shutting down application")
            if deps.rate_limiter is not None:
                await deps.rate_limiter.cleanup()
            deps.database_service.dispose()

    is_production = main_config.app.environment == "production"
    app = FastAPI(
        title="idvault",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    # --- CORS configuration ---
    cors = main_config.app.cors
    if is_production and "*" in cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )
    app.add_middleware(
        SecurityHeadersMiddleware, environment=main_config.app.environment
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )

    # --- Request logging middleware ---
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        xff = request.headers.get("x-forwarded-for")
        client_ip = (
            xff.split(",")[0].strip()
            if xff
            else request.client.host
            if request.client
            else "unknown"
        )

        # query strings may carry secrets and are not logged
        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
            "user_agent": request.headers.get("user-agent", "unknown"),
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")
                response.headers.setdefault("X-Request-ID", request_id)
                return response
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return JSONResponse(
                    status_code=500,
                    content={
                        "detail": "Internal server error",
                        "error": "InternalError",
                        "request_id": request_id,
                    },
                    headers={"X-Request-ID": request_id},
                )

    app.add_exception_handler(IdentityError, identity_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # --- Router registration ---
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(profile_router, prefix="/api/profile")
    app.include_router(health_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )

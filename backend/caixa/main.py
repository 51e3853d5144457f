"""
FastAPI application entry point.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from caixa.api.router import api_router
from caixa.config import Settings, configure_logging, settings as default_settings
from caixa.database import build_engine, build_session_factory, init_db
from caixa.errors import register_exception_handlers
from caixa.ratelimit import RateLimiter, build_policies
from caixa.security import TokenService, resolve_jwt_secret
from caixa.services.cnpj_service import CnpjClient
from caixa.services.quote_service import QuoteNumberLocks

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(config: Optional[Settings] = None, create_schema: bool = True) -> FastAPI:
    """
    Build the application.

    Process-wide state (engine and session factory, signing secret,
    quote-number locks, CNPJ client, rate limiter) is created here once and
    hung on ``app.state``; request handlers receive it through dependencies.
    """
    config = config or default_settings
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_schema:
            init_db(app.state.engine)
        yield
        app.state.engine.dispose()

    app = FastAPI(
        title=config.app_name,
        version="1.0.0",
        description="Multi-tenant finance tracker: companies, transactions, recurring rules and quotes",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.engine = build_engine(config)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.tokens = TokenService(
        resolve_jwt_secret(config.jwt_secret),
        timedelta(hours=config.access_token_expire_hours),
    )
    app.state.quote_locks = QuoteNumberLocks()
    app.state.cnpj_client = CnpjClient(config.cnpj_api_url, timeout=config.cnpj_timeout_seconds)
    app.state.rate_limiter = RateLimiter(config.rate_limit_window_seconds)
    app.state.rate_limit_policies = build_policies(config)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        started = time.perf_counter()
        # Unhandled errors propagate out of call_next; they are logged as 500
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            logger.info(
                "%s %s %d %.1fms requestId=%s",
                request.method,
                request.url.path,
                status_code,
                (time.perf_counter() - started) * 1000,
                request_id,
            )

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix="/api")

    @app.get("/api/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "app_name": config.app_name,
        }

    return app


app = create_app()

"""
claimcheck API — Main Application

POST   /verify      — Extract claims and verify the factual ones
POST   /extract     — Extract and classify claims only (no search)
GET    /history     — Recent cached verifications
DELETE /cache       — Clear the verdict cache
GET    /rate-limit  — Search throttle status
GET    /health      — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from claimcheck import __version__
from claimcheck.config import settings
from claimcheck.extractor import get_factual_claims
from claimcheck.logging import setup_logging, get_logger
from claimcheck.pipeline import Verifier
from claimcheck.search import SearchProvider
from claimcheck.schemas.verify import (
    VerifyRequest,
    VerifyResponse,
    ExtractResponse,
    HistoryResponse,
    RateLimitResponse,
    HealthResponse,
)

logger = get_logger("api")


# ============================================================
# APP FACTORY
# ============================================================

def create_app(
    verifier: Optional[Verifier] = None,
    provider: Optional[SearchProvider] = None,
) -> FastAPI:
    """
    Build the app. The Verifier is created in the lifespan hook from
    settings unless one is injected.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire up dependencies on startup."""
        setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
        app.state.verifier = verifier or Verifier.from_settings(settings, provider=provider)
        key_set = app.state.verifier.provider.has_credentials
        if not key_set:
            logger.warning(
                "No search API key configured — /verify will return placeholder verdicts. "
                "Set TAVILY_API_KEY to enable verification."
            )
        logger.info("claimcheck API starting")
        yield
        await app.state.verifier.aclose()
        logger.info("claimcheck API shutting down")

    app = FastAPI(
        title="claimcheck API",
        description="Claim extraction and evidence-weighted fact verification",
        version=__version__,
        lifespan=lifespan,
    )

    # Set CLAIMCHECK_CORS_ORIGINS in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=False,
    )

    _register_error_handler(app)
    _register_routes(app)
    _register_middleware(app)
    return app


def _verifier(request: Request) -> Verifier:
    return request.app.state.verifier


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

def _register_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def global_error_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions — return structured error, don't leak internals."""
        logger.error(
            f"Unhandled exception: {type(exc).__name__}",
            extra={
                "error": str(exc),
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            },
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. The verification could not be completed.",
            },
        )


# ============================================================
# ROUTES
# ============================================================

def _register_routes(app: FastAPI) -> None:

    @app.post("/verify", response_model=VerifyResponse)
    async def verify(body: VerifyRequest, request: Request):
        """Extract claims and verify the factual ones against web evidence."""
        start = time.time()
        result = await _verifier(request).verify(body.text)

        duration = int((time.time() - start) * 1000)
        logger.info(
            f"Verification complete: {len(result.verdicts)} verdicts",
            extra={
                "sources_count": len(result.verdicts),
                "duration_ms": duration,
                "error": result.error,
            },
        )
        return result.to_dict()

    @app.post("/extract", response_model=ExtractResponse)
    async def extract(body: VerifyRequest, request: Request):
        """Segment and classify only. Zero search cost."""
        claims = _verifier(request).extract(body.text)
        return {
            "claims": [c.to_dict() for c in claims],
            "factual_count": len(get_factual_claims(claims)),
        }

    @app.get("/history", response_model=HistoryResponse)
    async def history(
        request: Request,
        limit: int = Query(20, ge=1, le=100),
    ):
        """Recent verifications still in the cache, newest first."""
        entries = await _verifier(request).cache.history(limit=limit)
        return {
            "total": len(entries),
            "entries": [e.to_dict() for e in entries],
        }

    @app.delete("/cache")
    async def clear_cache(request: Request):
        """Drop every cached verdict."""
        await _verifier(request).cache.clear()
        logger.info("Verdict cache cleared")
        return {"status": "ok", "message": "Cache cleared"}

    @app.get("/rate-limit", response_model=RateLimitResponse)
    async def rate_limit(request: Request):
        """Remaining search budget in the current window."""
        return _verifier(request).limiter.usage

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        """Health check."""
        verifier = _verifier(request)
        return {
            "status": "operational",
            "version": __version__,
            "search_provider": verifier.provider.name,
            "search_key_configured": verifier.provider.has_credentials,
            "cache_entries": len(verifier.cache),
        }


# ============================================================
# MIDDLEWARE
# ============================================================

# --- Body Size Limit Middleware ---
_MAX_BODY_BYTES = 1_048_576  # 1 MB


def _register_middleware(app: FastAPI) -> None:

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add security and version headers to all responses."""
        response = await call_next(request)
        response.headers["X-Claimcheck-Version"] = __version__
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.middleware("http")
    async def enforce_body_size_limit(request: Request, call_next):
        """Reject requests exceeding 1MB — guards both Content-Length and chunked bodies."""
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > _MAX_BODY_BYTES:
                return JSONResponse(
                    status_code=413,
                    content={"detail": "Request body too large."},
                )

        if request.method in ("POST", "PUT", "PATCH"):
            body = await request.body()
            if len(body) > _MAX_BODY_BYTES:
                return JSONResponse(
                    status_code=413,
                    content={"detail": "Request body too large."},
                )

        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every API request with method, path, status, duration."""
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start) * 1000, 1)

        logger.info(
            f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response


app = create_app()


def run() -> None:
    """Serve the API with uvicorn on CLAIMCHECK_HOST:CLAIMCHECK_PORT."""
    import uvicorn
    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()

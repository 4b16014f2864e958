"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity.
  • On shutdown: dispose the engine cleanly.

Routers:
  • /apikeys — API key console (HTML)
  • /realm — realm selection (HTML)
  • /signout — end the session (HTML)
  • /api/v1/stats — per-app stats for API clients (JSON)
  • /health — shallow liveness probe

Auth failures raised by dependencies (Unauthenticated, NoRealmSelected)
are turned into a flash error plus a 303 redirect here, so handlers
never render for an unauthenticated or realm-less request.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from sqlalchemy import text
from starlette.middleware.sessions import SessionMiddleware

from verifyadmin.auth.errors import NoRealmSelected, Unauthenticated
from verifyadmin.core.config import settings
from verifyadmin.core.database import engine
from verifyadmin.core.logging import configure_logging
from verifyadmin.routers.apikeys import router as apikeys_router
from verifyadmin.routers.realms import router as realms_router
from verifyadmin.routers.session import router as session_router
from verifyadmin.routers.stats_api import router as stats_api_router
from verifyadmin.web.csrf import CSRFError
from verifyadmin.web.flash import flash_from_request

configure_logging()
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    # Startup — verify DB is reachable
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    yield  # ← application runs here

    # Shutdown — clean up connection pool
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── Exception handlers ──────────────────────────────────────
async def _redirect_with_flash(
    request: Request,
    exc: Unauthenticated | NoRealmSelected,
) -> Response:
    flash_from_request(request).error(exc.message)
    return RedirectResponse(exc.redirect_to, status_code=status.HTTP_303_SEE_OTHER)


async def _csrf_failed(_request: Request, _exc: CSRFError) -> Response:
    return PlainTextResponse(
        "Invalid or missing CSRF token.",
        status_code=status.HTTP_403_FORBIDDEN,
    )


# ── App ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        description="Realm administration console for verification API keys.",
        lifespan=lifespan,
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.ENVIRONMENT != "dev",
    )

    app.add_exception_handler(Unauthenticated, _redirect_with_flash)  # type: ignore[arg-type]
    app.add_exception_handler(NoRealmSelected, _redirect_with_flash)  # type: ignore[arg-type]
    app.add_exception_handler(CSRFError, _csrf_failed)  # type: ignore[arg-type]

    # Mount routers
    app.include_router(apikeys_router, prefix="/apikeys")
    app.include_router(realms_router, prefix="/realm")
    app.include_router(session_router)
    app.include_router(stats_api_router, prefix="/api/v1/stats")

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse("/apikeys", status_code=status.HTTP_303_SEE_OTHER)

    # ── Health check ────────────────────────────────────────
    @app.get(
        "/health",
        tags=["System"],
        summary="Liveness probe",
    )
    async def health_check() -> dict[str, str]:
        """Shallow health check — confirms the process is alive."""
        return {"status": "healthy"}

    return app


app = create_app()

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rosterdesk.config import settings
from rosterdesk.errors import DomainError
from rosterdesk.logging_setup import configure_logging
from rosterdesk.routers.contracts import router as contracts_router
from rosterdesk.routers.games import router as games_router
from rosterdesk.routers.health import router as health_router
from rosterdesk.routers.players import router as players_router
from rosterdesk.routers.suspensions import router as suspensions_router
from rosterdesk.routers.teams import router as teams_router

logger = logging.getLogger(__name__)


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("DOMAIN_ERROR path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
    else:
        logger.info("DOMAIN_ERROR path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
    body = {"detail": exc.message, "code": exc.code}
    if exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Roster Desk API")

    allow_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    # In local dev the admin UI may run on any localhost port.
    allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if settings.is_dev else None
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        # Bearer tokens, not cookies.
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainError, _domain_error_handler)

    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(teams_router, prefix=settings.api_prefix)
    app.include_router(players_router, prefix=settings.api_prefix)
    app.include_router(contracts_router, prefix=settings.api_prefix)
    app.include_router(suspensions_router, prefix=settings.api_prefix)
    app.include_router(games_router, prefix=settings.api_prefix)
    return app


app = create_app()

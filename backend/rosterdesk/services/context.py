from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
import jwt
from fastapi import Depends, Header, HTTPException, status

from rosterdesk.config import settings

logger = logging.getLogger(__name__)


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    GAME_MANAGER = "game_manager"
    GAME_REPORTER = "game_reporter"
    TEAM_MANAGER = "team_manager"
    EDITOR = "editor"


class Capability(str, Enum):
    VIEW_ROSTER = "view_roster"
    MANAGE_CONTRACTS = "manage_contracts"
    MANAGE_SUSPENSIONS = "manage_suspensions"
    REPORT_GAMES = "report_games"
    MANAGE_PLAYERS = "manage_players"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.OWNER: frozenset(Capability),
    Role.ADMIN: frozenset(Capability),
    Role.GAME_MANAGER: frozenset(
        {Capability.VIEW_ROSTER, Capability.REPORT_GAMES, Capability.MANAGE_SUSPENSIONS}
    ),
    Role.GAME_REPORTER: frozenset({Capability.VIEW_ROSTER, Capability.REPORT_GAMES}),
    Role.TEAM_MANAGER: frozenset(
        {Capability.VIEW_ROSTER, Capability.MANAGE_CONTRACTS, Capability.MANAGE_PLAYERS}
    ),
    Role.EDITOR: frozenset({Capability.VIEW_ROSTER}),
}


def capabilities_for(roles: Iterable[Role]) -> frozenset[Capability]:
    out: set[Capability] = set()
    for role in roles:
        out |= ROLE_CAPABILITIES[role]
    return frozenset(out)


def parse_roles(raw: Any) -> frozenset[Role]:
    """Accept a single role string, a comma-separated string or a list; unknown roles are dropped."""
    if raw is None:
        return frozenset()
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    roles: set[Role] = set()
    for item in items:
        try:
            roles.add(Role(str(item).strip().lower()))
        except ValueError:
            logger.warning("CONTEXT_UNKNOWN_ROLE role=%r", item)
    return frozenset(roles)


@dataclass(frozen=True)
class RequestContext:
    """Who is calling and on behalf of which organization (tenant)."""

    organization_id: str
    acting_user_id: str
    roles: frozenset[Role] = frozenset()
    capabilities: frozenset[Capability] = field(init=False)

    def __post_init__(self) -> None:
        # Evaluated once per request.
        object.__setattr__(self, "capabilities", capabilities_for(self.roles))

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


@dataclass
class _JwksCache:
    jwks: dict[str, Any] | None = None
    fetched_at: float = 0.0
    ttl_seconds: float = 60.0 * 10

    def fresh(self) -> bool:
        return self.jwks is not None and (time.time() - self.fetched_at) < self.ttl_seconds


_jwks_cache = _JwksCache()


async def _get_jwks() -> dict[str, Any]:
    if _jwks_cache.fresh():
        return _jwks_cache.jwks or {}

    if not settings.jwt_jwks_url:
        raise RuntimeError("JWT_JWKS_URL is not configured.")

    async with httpx.AsyncClient(headers={"User-Agent": "rosterdesk/1.0"}) as client:
        resp = await client.get(settings.jwt_jwks_url, timeout=20)
        resp.raise_for_status()
        jwks = resp.json()

    _jwks_cache.jwks = jwks
    _jwks_cache.fetched_at = time.time()
    return jwks


def _context_from_claims(payload: dict[str, Any]) -> RequestContext:
    user_id = payload.get("sub")
    org_id = payload.get("org_id") or payload.get("active_organization_id")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing subject")
    if not org_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No active organization")
    roles = parse_roles(payload.get("org_roles") or payload.get("org_role"))
    return RequestContext(organization_id=str(org_id), acting_user_id=str(user_id), roles=roles)


async def _verify_token(token: str) -> dict[str, Any]:
    try:
        unverified_header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token header") from e

    kid = unverified_header.get("kid")
    if not kid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing kid")

    jwks = await _get_jwks()
    jwk = next((k for k in jwks.get("keys") or [] if k.get("kid") == kid), None)
    if not jwk:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown signing key")

    try:
        public_key = jwt.algorithms.RSAAlgorithm.from_jwk(jwk)
        return jwt.decode(
            token,
            public_key,
            algorithms=[unverified_header.get("alg", "RS256")],
            issuer=settings.jwt_issuer if settings.jwt_issuer else None,
            options={"verify_aud": False},
        )
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from e


async def get_request_context(
    authorization: str | None = Header(default=None),
    x_organization_id: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> RequestContext:
    """
    Resolve the caller's organization, user and roles once per request.

    With a verified bearer token the claims are authoritative. In dev (and only
    when AUTH_OPTIONAL_IN_DEV is on and no JWKS URL is configured) the
    X-Organization-Id / X-User-Id / X-Role headers stand in for a session.
    """
    dev_fallback = settings.is_dev and settings.auth_optional_in_dev and not settings.jwt_jwks_url

    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if dev_fallback:
            try:
                payload = jwt.decode(token, options={"verify_signature": False})
            except jwt.PyJWTError as e:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from e
        else:
            payload = await _verify_token(token)
        return _context_from_claims(payload)

    if not dev_fallback:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    if not x_organization_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No active organization")
    return RequestContext(
        organization_id=x_organization_id,
        acting_user_id=x_user_id or "dev_user",
        roles=parse_roles(x_role or Role.ADMIN.value),
    )


def require(capability: Capability) -> Callable[..., Any]:
    """FastAPI dependency: the caller's context, or 403 without `capability`."""

    async def _dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if not ctx.can(capability):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
        return ctx

    return _dependency

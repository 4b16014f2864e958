"""
FastAPI dependencies that resolve who is calling.

Two audiences:
  • Browser sessions (HTML console) — user id and selected realm id live
    in the signed session cookie. `require_user` / `require_realm` load
    them and raise Unauthenticated / NoRealmSelected when absent.
  • API clients (stats API) — Bearer API key, hashed and looked up like
    any other credential. Generic 401 for all failure modes.

Handlers receive the resolved User and RealmContext as explicit
parameters; nothing downstream reads the session for identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from verifyadmin.auth.errors import NoRealmSelected, Unauthenticated
from verifyadmin.auth.hashing import hash_api_key
from verifyadmin.core.database import get_db_session
from verifyadmin.models.authorized_app import AuthorizedApp
from verifyadmin.models.realm import Realm
from verifyadmin.models.user import User

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"
SESSION_REALM_KEY = "realm_id"

# Generic 401 — same message for all auth failures to avoid leaking info
_AUTH_FAILED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or missing API key.",
    headers={"WWW-Authenticate": "Bearer"},
)


@dataclass(slots=True)
class RealmContext:
    """The active realm plus its authorized apps as loaded in this request.

    authorized_apps keeps the last successfully loaded list, so a failed
    reload leaves the previous (possibly empty) list in place.
    """

    realm: Realm
    authorized_apps: list[AuthorizedApp] = field(default_factory=list)
    apps_loaded: bool = False


@dataclass(frozen=True, slots=True)
class ApiKeyContext:
    """Authenticated API client: the app behind the key and its realm."""

    app: AuthorizedApp
    realm: Realm


# ── Browser sessions ───────────────────────────────────────
async def get_optional_user(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> User | None:
    """Load the session user with their realms, or None."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None

    stmt = (
        select(User)
        .options(selectinload(User.realms))
        .where(User.id == user_id)
    )
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()
    if user is None:
        logger.info("Session references unknown user %s", user_id)
    return user


async def require_user(
    user: User | None = Depends(get_optional_user),
) -> User:
    if user is None:
        raise Unauthenticated()
    return user


async def require_realm(
    request: Request,
    user: User = Depends(require_user),
) -> RealmContext:
    """
    Resolve the selected realm among the user's memberships.

    A stale realm id (membership revoked) is dropped from the session.
    """
    realm_id = request.session.get(SESSION_REALM_KEY)
    if realm_id is None:
        raise NoRealmSelected()

    realm = next((r for r in user.realms if r.id == realm_id), None)
    if realm is None:
        request.session.pop(SESSION_REALM_KEY, None)
        raise NoRealmSelected()

    return RealmContext(realm=realm)


CurrentUser = Annotated[User, Depends(require_user)]
CurrentRealm = Annotated[RealmContext, Depends(require_realm)]


# ── API keys ────────────────────────────────────────────────
async def get_current_app(
    authorization: str | None = Header(default=None, alias="Authorization"),
    session: AsyncSession = Depends(get_db_session),
) -> ApiKeyContext:
    """
    Resolve a Bearer API key to an ApiKeyContext.

    Raises 401 for:
      - Missing Authorization header
      - Non-Bearer scheme
      - Unknown key hash
      - Disabled key
    """

    # ── 1. Extract token ────────────────────────────────────
    if not authorization:
        raise _AUTH_FAILED

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _AUTH_FAILED

    # ── 2. Hash and look up ─────────────────────────────────
    stmt = select(AuthorizedApp).where(
        AuthorizedApp.key_hash == hash_api_key(parts[1])
    )
    result = await session.execute(stmt)
    app = result.scalar_one_or_none()

    if app is None or not app.is_active:
        raise _AUTH_FAILED

    # ── 3. Load realm ───────────────────────────────────────
    stmt = select(Realm).where(Realm.id == app.realm_id)
    result = await session.execute(stmt)
    realm = result.scalar_one_or_none()

    if realm is None:
        logger.error("Authorized app %s references missing realm %s", app.id, app.realm_id)
        raise _AUTH_FAILED

    return ApiKeyContext(app=app, realm=realm)

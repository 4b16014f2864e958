"""
Realm-scoped loading of authorized apps.

The realm's app list lives on the request's RealmContext. It is loaded
lazily and reloaded only when asked (force_reload=True), so repeated
reads within one request hit the database once.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from verifyadmin.auth.dependencies import RealmContext
from verifyadmin.models.authorized_app import AuthorizedApp

logger = logging.getLogger(__name__)


class AppsLoadError(Exception):
    """The realm's authorized apps could not be (re)loaded."""


async def get_authorized_apps(
    session: AsyncSession,
    realm_ctx: RealmContext,
    *,
    force_reload: bool = False,
) -> list[AuthorizedApp]:
    """
    Return the realm's authorized apps, loading them if needed.

    On failure the context keeps whatever list it held before
    (empty if nothing was loaded yet) and AppsLoadError is raised.
    """
    if realm_ctx.apps_loaded and not force_reload:
        return realm_ctx.authorized_apps

    stmt = (
        select(AuthorizedApp)
        .where(AuthorizedApp.realm_id == realm_ctx.realm.id)
        .order_by(AuthorizedApp.id)
    )
    try:
        async with session.begin_nested():
            result = await session.execute(stmt)
            apps = list(result.scalars().all())
    except SQLAlchemyError as exc:
        logger.warning("Loading apps for realm %s failed: %s", realm_ctx.realm.id, exc)
        raise AppsLoadError(str(exc)) from exc

    realm_ctx.authorized_apps = apps
    realm_ctx.apps_loaded = True
    return apps


async def find_authorized_app(
    session: AsyncSession,
    realm_ctx: RealmContext,
    app_id: int,
) -> AuthorizedApp | None:
    """Look up one app, scoped to the realm. None if absent or foreign."""
    stmt = select(AuthorizedApp).where(
        AuthorizedApp.id == app_id,
        AuthorizedApp.realm_id == realm_ctx.realm.id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()

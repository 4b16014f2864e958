"""
API key console service — context assembly and key lifecycle.

The index page fans out over the realm's apps: one stats-summary query
per app, executed sequentially on the request's session. Failures are
isolated per app: the failing app gets zeros and an inline warning,
every other app keeps its real numbers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from markupsafe import Markup
from sqlalchemy.ext.asyncio import AsyncSession

from verifyadmin.auth.dependencies import RealmContext
from verifyadmin.auth.hashing import display_prefix, generate_api_key
from verifyadmin.models.authorized_app import APIUserType, AuthorizedApp
from verifyadmin.models.realm import Realm
from verifyadmin.models.user import User
from verifyadmin.schemas.apikeys import AppStatsSummary, AuthorizedAppCreate
from verifyadmin.services.realms import AppsLoadError, get_authorized_apps
from verifyadmin.services.stats import StatsQueryError, get_authorized_app_stats_summary
from verifyadmin.web.csrf import TEMPLATE_TAG
from verifyadmin.web.flash import Flash

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppStatsMaps:
    """Per-window app id → codes issued. One entry per app in every map."""

    codes_1d: dict[int, int] = field(default_factory=dict)
    codes_7d: dict[int, int] = field(default_factory=dict)
    codes_30d: dict[int, int] = field(default_factory=dict)

    def add(self, app_id: int, summary: AppStatsSummary) -> None:
        self.codes_1d[app_id] = summary.codes_issued_1d
        self.codes_7d[app_id] = summary.codes_issued_7d
        self.codes_30d[app_id] = summary.codes_issued_30d


async def load_app_stats_summary(
    session: AsyncSession,
    app: AuthorizedApp,
    realm: Realm,
    flash: Flash,
) -> AppStatsSummary:
    """Stats for one app; a zero summary plus an inline error on failure."""
    try:
        return await get_authorized_app_stats_summary(session, app, realm)
    except StatsQueryError as exc:
        flash.error_now("Error loading app stats summary: %s", exc)
        return AppStatsSummary()


async def collect_app_stats(
    session: AsyncSession,
    realm: Realm,
    apps: list[AuthorizedApp],
    flash: Flash,
) -> AppStatsMaps:
    maps = AppStatsMaps()
    for app in apps:
        maps.add(app.id, await load_app_stats_summary(session, app, realm, flash))
    return maps


async def build_index_context(
    session: AsyncSession,
    user: User,
    realm_ctx: RealmContext,
    flash: Flash,
    csrf_field: Markup,
) -> dict[str, Any]:
    """
    Assemble the template context for the API key index.

      1. Force-reload the realm's apps (failure → inline error, keep
         whatever list the context already had)
      2. One stats summary per app, in load order
      3. Everything the template needs, keyed by name
    """

    # ── 1. Reload apps ──────────────────────────────────────
    try:
        await get_authorized_apps(session, realm_ctx, force_reload=True)
    except AppsLoadError as exc:
        flash.error_now("Failed to load API Keys: %s", exc)

    apps = realm_ctx.authorized_apps

    # ── 2. Stats fan-out ────────────────────────────────────
    stats = await collect_app_stats(session, realm_ctx.realm, apps, flash)

    # ── 3. Context ──────────────────────────────────────────
    return {
        "user": user,
        "realm": realm_ctx.realm,
        "apps": apps,
        "codes_generated_1d": stats.codes_1d,
        "codes_generated_7d": stats.codes_7d,
        "codes_generated_30d": stats.codes_30d,
        "flash": flash,
        "type_admin": APIUserType.ADMIN,
        "type_device": APIUserType.DEVICE,
        TEMPLATE_TAG: csrf_field,
    }


async def create_authorized_app(
    session: AsyncSession,
    realm: Realm,
    payload: AuthorizedAppCreate,
) -> tuple[AuthorizedApp, str]:
    """
    Create an app with a fresh API key.

    Returns (app, raw_key). The raw key is never persisted or logged —
    it must be shown to the user now or it is lost.
    """
    raw_key, key_hash = generate_api_key()
    app = AuthorizedApp(
        realm_id=realm.id,
        name=payload.name,
        api_key_type=payload.user_type,
        key_prefix=display_prefix(raw_key),
        key_hash=key_hash,
        is_active=True,
    )
    session.add(app)
    await session.commit()

    logger.info("Created authorized app %s in realm %s", app.id, realm.id)
    return app, raw_key


async def set_app_active(
    session: AsyncSession,
    app: AuthorizedApp,
    active: bool,
) -> bool:
    """Enable or disable an app's key. Returns False if nothing changed."""
    if app.is_active == active:
        return False

    app.is_active = active
    await session.commit()
    logger.info("Authorized app %s %s", app.id, "enabled" if active else "disabled")
    return True

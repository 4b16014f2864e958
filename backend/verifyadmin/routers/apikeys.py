"""
API key console — server-rendered pages for a realm's authorized apps.

Every route requires a signed-in user (→ /signout otherwise) and a
selected realm (→ /realm otherwise); see auth.dependencies.

GET  /apikeys                     — list apps with 1/7/30 day code counts
GET  /apikeys/new                 — creation form
POST /apikeys                     — create app, show raw key once
GET  /apikeys/{app_id}            — one app with its stats summary
POST /apikeys/{app_id}/disable    — revoke key
POST /apikeys/{app_id}/enable     — restore key
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from verifyadmin.auth.dependencies import CurrentRealm, CurrentUser, RealmContext
from verifyadmin.core.database import get_db_session
from verifyadmin.models.authorized_app import APIUserType
from verifyadmin.schemas.apikeys import AuthorizedAppCreate
from verifyadmin.services.apikeys import (
    build_index_context,
    create_authorized_app,
    load_app_stats_summary,
    set_app_active,
)
from verifyadmin.services.realms import find_authorized_app
from verifyadmin.web.csrf import TEMPLATE_TAG, csrf_template_field, verify_csrf
from verifyadmin.web.flash import Flash, flash_from_request
from verifyadmin.web.render import render_html

router = APIRouter(tags=["API Keys"], include_in_schema=False)

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
RequestFlash = Annotated[Flash, Depends(flash_from_request)]


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


# ── Index ───────────────────────────────────────────────────
@router.get("", response_class=HTMLResponse)
async def index(
    request: Request,
    user: CurrentUser,
    realm_ctx: CurrentRealm,
    session: DbSession,
    flash: RequestFlash,
) -> Response:
    context = await build_index_context(
        session, user, realm_ctx, flash, csrf_template_field(request),
    )
    return render_html(request, "apikeys", context)


# ── Create ──────────────────────────────────────────────────
@router.get("/new", response_class=HTMLResponse)
async def new(
    request: Request,
    user: CurrentUser,
    realm_ctx: CurrentRealm,
    flash: RequestFlash,
) -> Response:
    return render_html(request, "apikey_new", {
        "user": user,
        "realm": realm_ctx.realm,
        "flash": flash,
        "form": {"name": "", "api_key_type": "device"},
        TEMPLATE_TAG: csrf_template_field(request),
    })


@router.post(
    "",
    response_class=HTMLResponse,
    dependencies=[Depends(verify_csrf)],
)
async def create(
    request: Request,
    user: CurrentUser,
    realm_ctx: CurrentRealm,
    session: DbSession,
    flash: RequestFlash,
    name: str = Form(""),
    api_key_type: str = Form(""),
) -> Response:
    try:
        payload = AuthorizedAppCreate(name=name, api_key_type=api_key_type)
    except ValidationError as exc:
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            flash.error_now("Invalid %s: %s", field, error["msg"])
        return render_html(request, "apikey_new", {
            "user": user,
            "realm": realm_ctx.realm,
            "flash": flash,
            "form": {"name": name, "api_key_type": api_key_type},
            TEMPLATE_TAG: csrf_template_field(request),
        }, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

    app, raw_key = await create_authorized_app(session, realm_ctx.realm, payload)
    flash.alert_now("Created API key %s.", app.name)
    return render_html(request, "apikey_created", {
        "user": user,
        "realm": realm_ctx.realm,
        "flash": flash,
        "app": app,
        "raw_key": raw_key,
        "type_admin": APIUserType.ADMIN,
        "type_device": APIUserType.DEVICE,
    }, status_code=status.HTTP_201_CREATED)


# ── Show ────────────────────────────────────────────────────
@router.get("/{app_id}", response_class=HTMLResponse)
async def show(
    request: Request,
    app_id: int,
    user: CurrentUser,
    realm_ctx: CurrentRealm,
    session: DbSession,
    flash: RequestFlash,
) -> Response:
    app = await find_authorized_app(session, realm_ctx, app_id)
    if app is None:
        flash.error("API key not found.")
        return _see_other("/apikeys")

    summary = await load_app_stats_summary(session, app, realm_ctx.realm, flash)
    return render_html(request, "apikey_show", {
        "user": user,
        "realm": realm_ctx.realm,
        "flash": flash,
        "app": app,
        "stats": summary,
        "type_admin": APIUserType.ADMIN,
        "type_device": APIUserType.DEVICE,
        TEMPLATE_TAG: csrf_template_field(request),
    })


# ── Disable / enable ────────────────────────────────────────
async def _toggle(
    session: AsyncSession,
    realm_ctx: RealmContext,
    flash: Flash,
    app_id: int,
    active: bool,
) -> Response:
    app = await find_authorized_app(session, realm_ctx, app_id)
    if app is None:
        flash.error("API key not found.")
        return _see_other("/apikeys")

    if await set_app_active(session, app, active):
        flash.alert("%s API key %s.", "Enabled" if active else "Disabled", app.name)
    else:
        flash.warning("API key %s is already %s.", app.name, "enabled" if active else "disabled")
    return _see_other(f"/apikeys/{app.id}")


@router.post("/{app_id}/disable", dependencies=[Depends(verify_csrf)])
async def disable(
    app_id: int,
    realm_ctx: CurrentRealm,
    session: DbSession,
    flash: RequestFlash,
) -> Response:
    return await _toggle(session, realm_ctx, flash, app_id, active=False)


@router.post("/{app_id}/enable", dependencies=[Depends(verify_csrf)])
async def enable(
    app_id: int,
    realm_ctx: CurrentRealm,
    session: DbSession,
    flash: RequestFlash,
) -> Response:
    return await _toggle(session, realm_ctx, flash, app_id, active=True)

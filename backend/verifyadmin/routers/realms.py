"""
Realm selection.

GET  /realm — list the realms the user belongs to
POST /realm — make one of them the session's active realm
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from verifyadmin.auth.dependencies import SESSION_REALM_KEY, CurrentUser
from verifyadmin.web.csrf import TEMPLATE_TAG, csrf_template_field, verify_csrf
from verifyadmin.web.flash import Flash, flash_from_request
from verifyadmin.web.render import render_html

router = APIRouter(tags=["Realms"], include_in_schema=False)

RequestFlash = Annotated[Flash, Depends(flash_from_request)]


@router.get("", response_class=HTMLResponse)
async def select_realm_page(
    request: Request,
    user: CurrentUser,
    flash: RequestFlash,
) -> Response:
    return render_html(request, "realms", {
        "user": user,
        "realms": user.realms,
        "current_realm_id": request.session.get(SESSION_REALM_KEY),
        "flash": flash,
        TEMPLATE_TAG: csrf_template_field(request),
    })


@router.post("", dependencies=[Depends(verify_csrf)])
async def select_realm(
    request: Request,
    user: CurrentUser,
    flash: RequestFlash,
    realm_id: int = Form(...),
) -> Response:
    realm = next((r for r in user.realms if r.id == realm_id), None)
    if realm is None:
        flash.error("Unknown realm.")
        return RedirectResponse("/realm", status_code=status.HTTP_303_SEE_OTHER)

    request.session[SESSION_REALM_KEY] = realm.id
    flash.alert("Now managing %s.", realm.name)
    return RedirectResponse("/apikeys", status_code=status.HTTP_303_SEE_OTHER)

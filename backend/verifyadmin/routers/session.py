"""Sign-out: drop the session but still show any pending flash messages."""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response

from verifyadmin.web.flash import flash_from_request
from verifyadmin.web.render import render_html

router = APIRouter(tags=["Session"], include_in_schema=False)


@router.get("/signout", response_class=HTMLResponse)
async def signout(request: Request) -> Response:
    flash = flash_from_request(request)
    flash.consume()
    request.session.clear()
    return render_html(request, "signout", {"flash": flash})

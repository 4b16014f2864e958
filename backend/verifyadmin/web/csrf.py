"""
CSRF protection for the HTML console.

Synchronizer-token pattern: one random token per session, embedded in
every form as a hidden field and checked on each state-changing request.
The X-CSRF-Token header is accepted as an alternative to the form field.
"""

import logging
import secrets

from fastapi import Request
from markupsafe import Markup

logger = logging.getLogger(__name__)

CSRF_SESSION_KEY = "_csrf_token"
CSRF_FORM_FIELD = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"

# Context key under which templates find the hidden input.
TEMPLATE_TAG = "csrf_field"


class CSRFError(Exception):
    """Missing or mismatched CSRF token."""


def get_csrf_token(request: Request) -> str:
    """Return the session's token, minting one on first use."""
    token = request.session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        request.session[CSRF_SESSION_KEY] = token
    return token


def csrf_template_field(request: Request) -> Markup:
    return Markup('<input type="hidden" name="{}" value="{}">').format(
        CSRF_FORM_FIELD, get_csrf_token(request)
    )


async def verify_csrf(request: Request) -> None:
    """FastAPI dependency for POST routes. Raises CSRFError on failure."""
    expected = request.session.get(CSRF_SESSION_KEY)
    submitted = request.headers.get(CSRF_HEADER_NAME)
    if submitted is None:
        form = await request.form()
        value = form.get(CSRF_FORM_FIELD)
        submitted = value if isinstance(value, str) else None

    if not expected or not submitted or not secrets.compare_digest(expected, submitted):
        logger.warning(
            "CSRF validation failed: method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise CSRFError()

"""
Auth-specific errors.

Both are terminal for the request: app-level exception handlers turn
them into a persisted flash error plus a 303 redirect, so no page is
rendered after they are raised.
"""


class Unauthenticated(Exception):
    """No signed-in user in the session."""

    redirect_to = "/signout"
    message = "Unauthorized."


class NoRealmSelected(Exception):
    """The user has not picked (or no longer belongs to) a realm."""

    redirect_to = "/realm"
    message = "Select a realm to continue."

"""
Flash messages stored in the signed session cookie.

Two lifetimes:
  • error() / alert() / warning()           — persisted in the session,
    shown on the next rendered page (typically after a redirect).
  • error_now() / alert_now() / warning_now() — shown on the current
    render only, never written to the session.

Persisted messages are consumed lazily, the first time a template reads
the collection. A request that ends in a redirect without rendering
leaves them in the session for the next page, so each message is
displayed exactly once.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from fastapi import Request

SESSION_KEY = "_flash"

LEVEL_ERROR = "error"
LEVEL_WARNING = "warning"
LEVEL_ALERT = "alert"
LEVELS = (LEVEL_ERROR, LEVEL_WARNING, LEVEL_ALERT)


def _format(msg: str, args: tuple[Any, ...]) -> str:
    return msg % args if args else msg


class Flash:
    """Request-scoped flash collection bound to a session mapping."""

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self._session = session
        self._now: dict[str, list[str]] = {level: [] for level in LEVELS}
        # Counts per level of what was stored before this request started;
        # messages persisted by this request are appended after them.
        self._pending = {
            level: len(messages)
            for level, messages in (session.get(SESSION_KEY) or {}).items()
        }
        self._consumed = False

    def consume(self) -> None:
        """Move messages stored by earlier requests into this render.

        Called by every template accessor; call it directly before
        clearing the session.
        """
        if self._consumed:
            return
        self._consumed = True

        stored = self._session.get(SESSION_KEY) or {}
        for level, count in self._pending.items():
            messages = stored.get(level, [])
            if level in self._now:
                self._now[level][:0] = messages[:count]
            remaining = messages[count:]
            if remaining:
                stored[level] = remaining
            else:
                stored.pop(level, None)
        if not stored:
            self._session.pop(SESSION_KEY, None)

    def _persist(self, level: str, message: str) -> None:
        stored = self._session.setdefault(SESSION_KEY, {})
        stored.setdefault(level, []).append(message)

    # ── Persisted (next render) ─────────────────────────────
    def error(self, msg: str, *args: Any) -> None:
        self._persist(LEVEL_ERROR, _format(msg, args))

    def warning(self, msg: str, *args: Any) -> None:
        self._persist(LEVEL_WARNING, _format(msg, args))

    def alert(self, msg: str, *args: Any) -> None:
        self._persist(LEVEL_ALERT, _format(msg, args))

    # ── Current render only ─────────────────────────────────
    def error_now(self, msg: str, *args: Any) -> None:
        self._now[LEVEL_ERROR].append(_format(msg, args))

    def warning_now(self, msg: str, *args: Any) -> None:
        self._now[LEVEL_WARNING].append(_format(msg, args))

    def alert_now(self, msg: str, *args: Any) -> None:
        self._now[LEVEL_ALERT].append(_format(msg, args))

    # ── Template accessors ──────────────────────────────────
    def errors(self) -> list[str]:
        self.consume()
        return list(self._now[LEVEL_ERROR])

    def warnings(self) -> list[str]:
        self.consume()
        return list(self._now[LEVEL_WARNING])

    def alerts(self) -> list[str]:
        self.consume()
        return list(self._now[LEVEL_ALERT])

    def __len__(self) -> int:
        self.consume()
        return sum(len(messages) for messages in self._now.values())


def flash_from_request(request: Request) -> Flash:
    """
    Return the request's Flash, creating it on first use.

    Cached on request.state so dependencies, handlers and exception
    handlers all share one collection.
    """
    flash = getattr(request.state, "flash", None)
    if flash is None:
        flash = Flash(request.session)
        request.state.flash = flash
    return flash

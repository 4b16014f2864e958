"""
Code issuance stats for authorized apps.

Reads:
  get_authorized_app_stats_summary() sums the per-day counters in
  authorized_app_stats over three trailing windows in ONE query using
  conditional aggregation. Computed on every call — nothing is cached.

Writes:
  record_codes_issued() bumps today's counter with an atomic
  INSERT … ON CONFLICT DO UPDATE.

Window semantics: a window of N days covers exactly N daily buckets,
today's (UTC) included.
"""

from __future__ import annotations

import datetime
import logging

from sqlalchemy import BigInteger, case, cast, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from verifyadmin.models.authorized_app import AuthorizedApp
from verifyadmin.models.authorized_app_stats import AuthorizedAppStats
from verifyadmin.models.realm import Realm
from verifyadmin.schemas.apikeys import AppStatsSummary

logger = logging.getLogger(__name__)

WINDOW_DAYS = (1, 7, 30)


class StatsQueryError(Exception):
    """A stats summary could not be computed."""


def _window_start(now: datetime.datetime, days: int) -> datetime.date:
    """First daily bucket of an N-day window ending with today's bucket."""
    return (now - datetime.timedelta(days=days - 1)).date()


def _windowed_sum(since: datetime.date):  # type: ignore[no-untyped-def]
    """SUM(codes_issued) restricted to buckets on/after `since`, never NULL."""
    return cast(
        func.coalesce(
            func.sum(
                case(
                    (AuthorizedAppStats.date >= since, AuthorizedAppStats.codes_issued),
                    else_=0,
                )
            ),
            0,
        ),
        BigInteger,
    )


async def get_authorized_app_stats_summary(
    session: AsyncSession,
    app: AuthorizedApp,
    realm: Realm,
    now: datetime.datetime | None = None,
) -> AppStatsSummary:
    """
    Summarize codes issued by `app` within `realm` over 1/7/30 days.

    Apps with no stats rows get a zero-valued summary. Database failures
    raise StatsQueryError; callers decide whether that is fatal.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    since_1d, since_7d, since_30d = (_window_start(now, d) for d in WINDOW_DAYS)

    stmt = select(
        _windowed_sum(since_1d).label("codes_issued_1d"),
        _windowed_sum(since_7d).label("codes_issued_7d"),
        _windowed_sum(since_30d).label("codes_issued_30d"),
    ).where(
        AuthorizedAppStats.authorized_app_id == app.id,
        AuthorizedAppStats.realm_id == realm.id,
        AuthorizedAppStats.date >= since_30d,
    )

    try:
        # Savepoint: a failed lookup must not poison the request transaction.
        async with session.begin_nested():
            row = (await session.execute(stmt)).one()
    except SQLAlchemyError as exc:
        logger.warning("Stats summary for app %s failed: %s", app.id, exc)
        raise StatsQueryError(str(exc)) from exc

    return AppStatsSummary.model_validate(row, from_attributes=True)


async def record_codes_issued(
    session: AsyncSession,
    app: AuthorizedApp,
    count: int = 1,
    day: datetime.date | None = None,
) -> None:
    """
    Atomically add `count` to the app's counter for `day` (default today, UTC).

    The caller owns the transaction and must commit.
    """
    if count < 0:
        raise ValueError("count must be non-negative")

    day = day or datetime.datetime.now(datetime.timezone.utc).date()
    stmt = pg_insert(AuthorizedAppStats).values(
        date=day,
        authorized_app_id=app.id,
        realm_id=app.realm_id,
        codes_issued=count,
    ).on_conflict_do_update(
        index_elements=["date", "authorized_app_id"],
        set_={
            "codes_issued": AuthorizedAppStats.codes_issued + count,
            "updated_at": func.now(),
        },
    )
    await session.execute(stmt)

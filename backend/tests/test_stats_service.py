import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from verifyadmin.models.realm import Realm
from verifyadmin.schemas.apikeys import AppStatsSummary
from verifyadmin.services.stats import (
    WINDOW_DAYS,
    StatsQueryError,
    _window_start,
    get_authorized_app_stats_summary,
    record_codes_issued,
)

from factories import make_app, make_db_session

NOW = datetime.datetime(2026, 10, 19, 15, 30, tzinfo=datetime.timezone.utc)


def _row(d1: int, d7: int, d30: int):
    row = SimpleNamespace(codes_issued_1d=d1, codes_issued_7d=d7, codes_issued_30d=d30)
    return SimpleNamespace(one=lambda: row)


def test_window_start_counts_today_as_day_one() -> None:
    assert _window_start(NOW, 1) == datetime.date(2026, 10, 19)
    assert _window_start(NOW, 7) == datetime.date(2026, 10, 13)
    assert _window_start(NOW, 30) == datetime.date(2026, 9, 20)


@pytest.mark.parametrize("days", WINDOW_DAYS)
@pytest.mark.parametrize(
    "now",
    [
        NOW,
        datetime.datetime(2026, 10, 19, 0, 0, tzinfo=datetime.timezone.utc),
        datetime.datetime(2026, 3, 1, 23, 59, tzinfo=datetime.timezone.utc),
    ],
)
def test_window_spans_exactly_n_daily_buckets(now, days) -> None:
    buckets = (now.date() - _window_start(now, days)).days + 1
    assert buckets == days


@pytest.mark.asyncio
async def test_summary_maps_row_to_schema() -> None:
    session = make_db_session()
    session.execute.return_value = _row(5, 20, 80)

    summary = await get_authorized_app_stats_summary(
        session, make_app(1), Realm(id=1, name="r"), now=NOW,
    )

    assert summary == AppStatsSummary(codes_issued_1d=5, codes_issued_7d=20, codes_issued_30d=80)
    session.begin_nested.assert_called_once()


@pytest.mark.asyncio
async def test_summary_query_is_scoped_to_app_and_realm() -> None:
    session = make_db_session()
    session.execute.return_value = _row(0, 0, 0)

    await get_authorized_app_stats_summary(
        session, make_app(3, realm_id=9), Realm(id=9, name="r"), now=NOW,
    )

    stmt = session.execute.await_args.args[0]
    compiled = stmt.compile(
        dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True},
    )
    sql = str(compiled)
    assert "authorized_app_stats.authorized_app_id = 3" in sql
    assert "authorized_app_stats.realm_id = 9" in sql
    assert "'2026-09-20'" in sql


@pytest.mark.asyncio
async def test_summary_failure_raises_stats_query_error() -> None:
    session = make_db_session()
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

    with pytest.raises(StatsQueryError):
        await get_authorized_app_stats_summary(
            session, make_app(1), Realm(id=1, name="r"), now=NOW,
        )


@pytest.mark.asyncio
async def test_record_codes_issued_upserts_daily_bucket() -> None:
    session = make_db_session()
    app = make_app(4, realm_id=2)

    await record_codes_issued(session, app, count=3, day=datetime.date(2026, 10, 1))

    stmt = session.execute.await_args.args[0]
    sql = str(stmt.compile(dialect=postgresql.dialect()))
    assert "INSERT INTO authorized_app_stats" in sql
    assert "ON CONFLICT" in sql
    assert "DO UPDATE SET codes_issued" in sql
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_record_codes_issued_rejects_negative_counts() -> None:
    with pytest.raises(ValueError):
        await record_codes_issued(make_db_session(), make_app(1), count=-1)

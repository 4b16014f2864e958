import pytest
from sqlalchemy.exc import OperationalError

from verifyadmin.services.realms import AppsLoadError, find_authorized_app, get_authorized_apps

from factories import make_app, make_db_session, result_with_scalar, result_with_scalars


@pytest.mark.asyncio
async def test_first_load_populates_context(realm_ctx) -> None:
    session = make_db_session()
    apps = [make_app(1), make_app(2)]
    session.execute.return_value = result_with_scalars(apps)

    loaded = await get_authorized_apps(session, realm_ctx)

    assert loaded == apps
    assert realm_ctx.authorized_apps == apps
    assert realm_ctx.apps_loaded is True


@pytest.mark.asyncio
async def test_loaded_list_is_reused_without_force(realm_ctx) -> None:
    session = make_db_session()
    session.execute.return_value = result_with_scalars([make_app(1)])

    await get_authorized_apps(session, realm_ctx)
    await get_authorized_apps(session, realm_ctx)

    assert session.execute.await_count == 1


@pytest.mark.asyncio
async def test_force_reload_queries_again(realm_ctx) -> None:
    session = make_db_session()
    session.execute.side_effect = [
        result_with_scalars([make_app(1)]),
        result_with_scalars([make_app(1), make_app(2)]),
    ]

    await get_authorized_apps(session, realm_ctx)
    reloaded = await get_authorized_apps(session, realm_ctx, force_reload=True)

    assert [a.id for a in reloaded] == [1, 2]
    assert session.execute.await_count == 2


@pytest.mark.asyncio
async def test_failed_reload_keeps_stale_list(realm_ctx) -> None:
    session = make_db_session()
    stale = [make_app(1)]
    session.execute.side_effect = [
        result_with_scalars(stale),
        OperationalError("SELECT", {}, Exception("db down")),
    ]

    await get_authorized_apps(session, realm_ctx)
    with pytest.raises(AppsLoadError):
        await get_authorized_apps(session, realm_ctx, force_reload=True)

    assert realm_ctx.authorized_apps == stale


@pytest.mark.asyncio
async def test_failed_first_load_leaves_empty_list(realm_ctx) -> None:
    session = make_db_session()
    session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

    with pytest.raises(AppsLoadError):
        await get_authorized_apps(session, realm_ctx, force_reload=True)

    assert realm_ctx.authorized_apps == []
    assert realm_ctx.apps_loaded is False


@pytest.mark.asyncio
async def test_find_authorized_app_returns_none_when_absent(realm_ctx) -> None:
    session = make_db_session()
    session.execute.return_value = result_with_scalar(None)

    assert await find_authorized_app(session, realm_ctx, 99) is None

from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from verifyadmin.auth.dependencies import (
    SESSION_REALM_KEY,
    get_current_app,
    get_optional_user,
    require_realm,
    require_user,
)
from verifyadmin.auth.errors import NoRealmSelected, Unauthenticated
from verifyadmin.auth.hashing import hash_api_key
from verifyadmin.models.realm import Realm

from factories import make_app, make_db_session, result_with_scalar


@pytest.mark.asyncio
async def test_no_user_id_in_session_skips_the_database() -> None:
    session = make_db_session()
    request = SimpleNamespace(session={})

    assert await get_optional_user(request, session) is None
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_require_user_raises_unauthenticated() -> None:
    with pytest.raises(Unauthenticated):
        await require_user(None)


@pytest.mark.asyncio
async def test_require_realm_without_selection(user) -> None:
    request = SimpleNamespace(session={})
    with pytest.raises(NoRealmSelected):
        await require_realm(request, user)


@pytest.mark.asyncio
async def test_require_realm_drops_stale_membership(user) -> None:
    request = SimpleNamespace(session={SESSION_REALM_KEY: 999})

    with pytest.raises(NoRealmSelected):
        await require_realm(request, user)
    assert SESSION_REALM_KEY not in request.session


@pytest.mark.asyncio
async def test_require_realm_returns_fresh_context(user, realm) -> None:
    request = SimpleNamespace(session={SESSION_REALM_KEY: realm.id})

    ctx = await require_realm(request, user)

    assert ctx.realm is realm
    assert ctx.authorized_apps == []
    assert ctx.apps_loaded is False


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer"])
@pytest.mark.asyncio
async def test_bearer_auth_rejects_malformed_headers(header) -> None:
    with pytest.raises(HTTPException) as exc:
        await get_current_app(header, make_db_session())
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_bearer_auth_rejects_unknown_key() -> None:
    session = make_db_session()
    session.execute.return_value = result_with_scalar(None)

    with pytest.raises(HTTPException) as exc:
        await get_current_app("Bearer vk_nope", session)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_bearer_auth_rejects_disabled_key() -> None:
    session = make_db_session()
    session.execute.return_value = result_with_scalar(make_app(1, is_active=False))

    with pytest.raises(HTTPException) as exc:
        await get_current_app("Bearer vk_disabled", session)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_bearer_auth_resolves_app_and_realm() -> None:
    app = make_app(1, key_hash=hash_api_key("vk_good"))
    realm = Realm(id=1, name="r")
    session = make_db_session()
    session.execute.side_effect = [result_with_scalar(app), result_with_scalar(realm)]

    ctx = await get_current_app("Bearer vk_good", session)

    assert ctx.app is app
    assert ctx.realm is realm

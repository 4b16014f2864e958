import pytest

from verifyadmin.auth.dependencies import ApiKeyContext, get_current_app
from verifyadmin.routers import stats_api
from verifyadmin.schemas.apikeys import AppStatsSummary
from verifyadmin.services.stats import StatsQueryError

from factories import make_app


@pytest.fixture
def api_client(app, client, realm):
    ctx = ApiKeyContext(app=make_app(5, realm_id=realm.id), realm=realm)

    async def _auth():
        return ctx

    app.dependency_overrides[get_current_app] = _auth
    return client


def test_summary_requires_bearer_key(client) -> None:
    response = client.get("/api/v1/stats/summary")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_summary_returns_calling_app_stats(api_client, monkeypatch) -> None:
    async def _summary(session, app, realm):
        assert app.id == 5
        return AppStatsSummary(codes_issued_1d=3, codes_issued_7d=10, codes_issued_30d=42)

    monkeypatch.setattr(stats_api, "get_authorized_app_stats_summary", _summary)

    response = api_client.get("/api/v1/stats/summary")

    assert response.status_code == 200
    assert response.json() == {
        "codes_issued_1d": 3,
        "codes_issued_7d": 10,
        "codes_issued_30d": 42,
        "authorized_app_id": 5,
        "realm_id": 1,
    }


def test_summary_failure_is_503(api_client, monkeypatch) -> None:
    async def _summary(session, app, realm):
        raise StatsQueryError("down")

    monkeypatch.setattr(stats_api, "get_authorized_app_stats_summary", _summary)

    response = api_client.get("/api/v1/stats/summary")

    assert response.status_code == 503

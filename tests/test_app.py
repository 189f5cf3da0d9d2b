import asyncio
from typing import Any, Dict, Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.memory_tree import MockRealtimeDatabase, build_default_tree
from identity.memory import MockIdentityProvider, build_default_identity
from services.paths import resolve, user_path
from services.wiring import Services, build_default_services, build_services
from settings import get_settings

START_MS = 1_704_067_200_000

REGISTRATION = {
    "email": "a@x.com",
    "password": "Secret123!",
    "name": "Ana",
    "accessToken": "dev-1",
}


def _report(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "userId": "a@x.com",
        "accessToken": "dev-1",
        "MS": 1,
        "UA": 2,
        "TP": 3,
        "RL": False,
        "S1": 0,
        "S2": 0,
        "RG": "true",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def services() -> Services:
    ticks: List[int] = [START_MS]

    def clock() -> int:
        ticks[0] += 1_000
        return ticks[0]

    return build_services(
        get_settings(),
        store=MockRealtimeDatabase(),
        identity=MockIdentityProvider(),
        clock=clock,
    )


@pytest.fixture
def api_client(services: Services, monkeypatch) -> Iterator[TestClient]:
    def build_test_services(settings=None) -> Services:
        return services

    build_test_services.cache_clear = lambda: None  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_services", build_test_services)
    monkeypatch.setattr("app.api.build_default_services", build_test_services)

    app = create_app()
    with TestClient(app) as client:
        yield client


def _alert_count(services: Services) -> int:
    path = resolve(_owner(services), "dev-1").alerts
    alerts = asyncio.run(services.store.get(path))
    return len(alerts or {})


def _owner(services: Services) -> str:
    account = asyncio.run(services.identity.lookup_by_email("a@x.com"))
    assert account is not None
    return account.uid


def test_lifespan_builds_and_clears_default_services(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("MOCK_TREE_PERSISTENCE_PATH", str(tmp_path / "tree.json"))
    monkeypatch.setenv("MOCK_IDENTITY_PERSISTENCE_PATH", str(tmp_path / "identity.json"))
    caches = (get_settings, build_default_tree, build_default_identity, build_default_services)
    for cache in caches:
        cache.cache_clear()

    app = create_app()
    try:
        with TestClient(app):
            during = build_default_services()
            assert build_default_services() is during

        after = build_default_services()
        assert after is not during
    finally:
        for cache in caches:
            cache.cache_clear()


def test_health(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_then_login_returns_empty_default_device(api_client: TestClient) -> None:
    response = api_client.post("/api/v1/auth/register", json=REGISTRATION)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Usuário registrado com sucesso"
    assert body["user"]["email"] == "a@x.com"
    assert body["user"]["name"] == "Ana"
    assert body["user"]["createdAt"]

    response = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret123!"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login bem-sucedido"
    assert body["user"]["id"]
    assert len(body["userData"]) == 1
    device = body["userData"][0]
    assert device["device"] == "dev-1"
    telemetry = device["telemetry"]
    assert {key: telemetry[key] for key in ("MS", "UA", "TP", "RL", "S1", "S2", "RG")} == {
        "MS": 0, "UA": 0, "TP": 0, "RL": False, "S1": 0, "S2": 0, "RG": False
    }


def test_data_receive_scenario(api_client: TestClient, services: Services) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    response = api_client.post("/api/v1/realtime/data-receive", json=_report())

    assert response.status_code == 200
    assert response.content == b""
    login = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret123!"}
    ).json()
    telemetry = login["userData"][0]["telemetry"]
    assert telemetry["MS"] == 1
    assert telemetry["UA"] == 2
    assert telemetry["TP"] == 3
    assert telemetry["RL"] is False
    assert telemetry["S1"] == 0
    assert telemetry["S2"] == 0
    assert telemetry["RG"] is True
    assert telemetry["TIME"] > START_MS
    assert _alert_count(services) == 1


def test_data_receive_without_irrigation_adds_no_alert(api_client: TestClient, services) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    response = api_client.post("/api/v1/realtime/data-receive", json=_report(RG=False))

    assert response.status_code == 200
    assert _alert_count(services) == 0


@pytest.mark.parametrize("field", ["userId", "accessToken", "MS", "UA", "TP", "RL", "S1", "S2", "RG"])
def test_data_receive_missing_field_is_bad_request(api_client, services, field) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)
    before = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret123!"}
    ).json()
    payload = _report()
    del payload[field]

    response = api_client.post("/api/v1/realtime/data-receive", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Todos os campos são obrigatórios"}
    after = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret123!"}
    ).json()
    assert after["userData"] == before["userData"]
    assert _alert_count(services) == 0


def test_data_receive_rejects_unknown_flag_literal(api_client: TestClient) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    response = api_client.post("/api/v1/realtime/data-receive", json=_report(RG="yes"))

    assert response.status_code == 400


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_data_receive_rejects_non_finite_readings(api_client, services, literal) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)
    body = (
        '{"userId": "a@x.com", "accessToken": "dev-1", "MS": %s, "UA": 2, "TP": 3,'
        ' "RL": false, "S1": 0, "S2": 0, "RG": "true"}' % literal
    )

    response = api_client.post(
        "/api/v1/realtime/data-receive",
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Todos os campos são obrigatórios"}
    login = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret123!"}
    ).json()
    assert login["userData"][0]["telemetry"]["MS"] == 0
    assert _alert_count(services) == 0


def test_data_receive_unknown_user_is_not_found(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/v1/realtime/data-receive", json=_report(userId="ghost@x.com")
    )

    assert response.status_code == 404
    assert response.json() == {"message": "Usuário não encontrado"}


def test_data_receive_creates_new_device_implicitly(api_client: TestClient) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    api_client.post("/api/v1/realtime/data-receive", json=_report(accessToken="dev-2", RG=False))

    login = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "Secret123!"}
    ).json()
    assert sorted(entry["device"] for entry in login["userData"]) == ["dev-1", "dev-2"]


def test_login_invalid_credentials(api_client: TestClient) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    response = api_client.post(
        "/api/v1/auth/login", json={"email": "a@x.com", "password": "nope"}
    )

    assert response.status_code == 401
    assert response.json() == {"message": "Credenciais inválidas"}


def test_login_missing_fields(api_client: TestClient) -> None:
    response = api_client.post("/api/v1/auth/login", json={"email": "a@x.com"})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"password": "123"}, "A senha fornecida é fraca. Escolha uma senha mais forte."),
        ({"email": "broken"}, "O e-mail fornecido não é válido."),
    ],
)
def test_register_maps_provider_errors(api_client, overrides, message) -> None:
    response = api_client.post("/api/v1/auth/register", json={**REGISTRATION, **overrides})

    assert response.status_code == 500
    assert response.json() == {"message": message}


def test_register_duplicate_email(api_client: TestClient) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    response = api_client.post("/api/v1/auth/register", json=REGISTRATION)

    assert response.status_code == 500
    assert response.json() == {"message": "Este e-mail já está em uso. Por favor, use outro."}


def test_register_requires_device_token(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/v1/auth/register", json={**REGISTRATION, "accessToken": ""}
    )

    assert response.status_code == 400


def test_reset_password_is_success_shaped(api_client: TestClient, services) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    known = api_client.post("/api/v1/auth/reset-password", json={"email": "a@x.com"})
    unknown = api_client.post("/api/v1/auth/reset-password", json={"email": "ghost@x.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert services.identity.password_resets == ["a@x.com"]


def test_alerts_lists_irrigation_events(api_client: TestClient) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)
    api_client.post("/api/v1/realtime/data-receive", json=_report())
    api_client.post("/api/v1/realtime/data-receive", json=_report())

    response = api_client.post(
        "/api/v1/realtime/alerts", json={"email": "a@x.com", "password": "Secret123!"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["userData"][0]["device"] == "dev-1"
    alerts = body["userData"][0]["alerts"]
    assert len(alerts) == 2
    assert all(alert["message"] == "Irrigação realizada" for alert in alerts)
    assert alerts[0]["day"] == "31/12/2023"
    assert alerts[0]["time"] < alerts[1]["time"]


def test_alerts_not_found_without_events(api_client: TestClient) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)

    response = api_client.post(
        "/api/v1/realtime/alerts", json={"email": "a@x.com", "password": "Secret123!"}
    )

    assert response.status_code == 404
    assert response.json() == {"message": "Dados do usuário não encontrados"}


def test_alerts_require_profile_record(api_client: TestClient, services: Services) -> None:
    api_client.post("/api/v1/auth/register", json=REGISTRATION)
    api_client.post("/api/v1/realtime/data-receive", json=_report())
    profile = {"name": None, "email": None, "createdAt": None}
    asyncio.run(services.store.set(user_path(_owner(services)), profile, merge=True))

    response = api_client.post(
        "/api/v1/realtime/alerts", json={"email": "a@x.com", "password": "Secret123!"}
    )

    assert response.status_code == 404
    assert _alert_count(services) == 1

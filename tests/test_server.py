import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from solar_quote.errors import TariffConfigurationError
from solar_quote.server import create_app


@pytest.fixture
def client(scenario_config) -> TestClient:
    return TestClient(create_app(scenario_config))


def test_health(client) -> None:
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_calculate_returns_quote(client) -> None:
    resp = client.post("/api/calculate", json={"gastoMensual": 5000})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["numeroPaneles"] == 7
    assert payload["potenciaSistemaKwp"] == 3.85
    assert payload["inversionEstimada"] == 6160
    assert isinstance(payload["desgloseAhorro"], str)


@pytest.mark.parametrize("body", [{}, {"gastoMensual": "mucho"}, {"gastoMensual": 0}, {"gastoMensual": -10}])
def test_calculate_rejects_invalid_bill(client, body) -> None:
    resp = client.post("/api/calculate", json=body)

    assert resp.status_code == 400
    assert "gastoMensual" in resp.json()["error"]


def test_calculate_rejects_malformed_json(client) -> None:
    resp = client.post(
        "/api/calculate",
        content=b"{gastoMensual: 5000",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert "error" in resp.json()


def test_degenerate_projection_is_internal_error(client) -> None:
    resp = client.post("/api/calculate", json={"gastoMensual": 40})

    assert resp.status_code == 500
    payload = resp.json()
    assert set(payload) == {"error"}
    assert "40" not in payload["error"]


def test_bad_configuration_fails_at_startup(monkeypatch, tmp_path) -> None:
    path = tmp_path / "quote.json"
    path.write_text('{"tariff": [{"threshold_kwh": 300, "price_per_kwh": 9}, {"threshold_kwh": 100, "price_per_kwh": 6}]}')
    monkeypatch.setenv("SOLAR_QUOTE_CONFIG", str(path))

    with pytest.raises(TariffConfigurationError):
        create_app()


def test_overflowing_bill_returns_json_error(client) -> None:
    resp = client.post("/api/calculate", json={"gastoMensual": 1e307})

    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"error": "No se pudo realizar el cálculo. Inténtalo de nuevo."}


def test_bill_below_minimum_residual_logs_cause(client, caplog) -> None:
    with caplog.at_level("WARNING", logger="solar_quote.server"):
        resp = client.post("/api/calculate", json={"gastoMensual": 40})

    assert resp.status_code == 500
    assert any("residual bill" in record.getMessage() for record in caplog.records)

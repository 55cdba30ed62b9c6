"""Integration coverage for configuration metadata endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from nomina.backend.config import year_config
from nomina.backend.version import get_project_version


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {
        "version": get_project_version(),
        "supported_years": [2025, 2026],
        "default_year": 2026,
    }


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert [entry["year"] for entry in payload["years"]] == [2025, 2026]
    assert payload["default_year"] == 2026

    current = payload["years"][-1]
    assert current["meta"]["currency"] == "MXN"
    assert current["rates"]["workday"]["fallback_working_days"] == 15
    assert current["rates"]["deductions"]["income_tax"] == 0.12
    assert current["incidence_limits"]["max_overtime_hours"] == 12
    assert current["warnings"][0]["id"] == "estimated_withholding"


def test_year_rates_endpoint_localises_labels(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2026/rates?locale=es")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2026
    assert payload["locale"] == "es"
    assert payload["rates"] == year_config.load_year_configuration(2026).rates.model_dump(
        mode="json"
    )

    rows = {row["id"]: row for row in payload["labelled_rates"]}
    assert rows["provisions.social_security_employer"] == {
        "id": "provisions.social_security_employer",
        "label": "IMSS patronal",
        "rate": 0.1047,
        "display": "10.47%",
    }
    assert rows["deductions.income_tax"]["display"] == "12%"
    assert payload["warnings"][0]["message"].startswith("El ISR")


def test_year_rates_endpoint_unknown_year(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/1999/rates")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json() == {
        "error": "not_found",
        "message": "No payroll rates are configured for 1999",
    }


def test_incidence_types_endpoint(client: FlaskClient) -> None:
    response = client.get(
        "/api/v1/config/2026/incidence-types", headers={"Accept-Language": "es"}
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["locale"] == "es"

    types = {entry["id"]: entry for entry in payload["incidence_types"]}
    assert list(types) == [
        "ABSENCE",
        "VACATION",
        "OVERTIME",
        "PERMISSION",
        "BONUS",
        "DEDUCTION",
    ]
    assert types["OVERTIME"] == {
        "id": "OVERTIME",
        "label": "Tiempo Extra",
        "description": "Horas extras (pago doble)",
        "unit": "hours",
        "unit_label": "horas",
        "is_deduction": False,
        "default_quantity": 2,
        "max_quantity": 12.0,
    }
    assert types["DEDUCTION"]["max_quantity"] == 999_999.99
    assert "max_quantity" not in types["ABSENCE"]


def test_incidence_types_endpoint_unknown_year(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2040/incidence-types")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["error"] == "not_found"

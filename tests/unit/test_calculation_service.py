"""Unit tests for the calculation service."""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any

import pytest

from nomina.backend.app.models import CalculationRequest
from nomina.backend.app.services.calculation_service import (
    calculate_payroll,
    estimate_incidence,
)


@pytest.fixture()
def payload(half_month_payload: dict[str, Any]) -> dict[str, Any]:
    return deepcopy(half_month_payload)


def test_response_shape(payload: dict[str, Any]) -> None:
    result = calculate_payroll(payload)

    assert set(result) == {"totals", "employee_calculations", "meta"}
    assert result["meta"] == {
        "year": 2026,
        "locale": "en",
        "period_start": "2026-03-02",
        "period_end": "2026-03-20",
        "working_days": 15,
        "warnings": [
            "Income tax is a flat-rate estimate, not the statutory withholding table."
        ],
    }
    calculation = result["employee_calculations"][0]
    assert calculation["employee_id"] == "E001"
    assert calculation["employee_number"] == "0001"
    assert calculation["has_incidences"] is False
    assert set(calculation["perceptions"]) == {
        "base_salary",
        "year_end_bonus",
        "vacation_premium",
        "benefits",
        "incidences",
        "total",
    }


def test_accepts_validated_request_model(payload: dict[str, Any]) -> None:
    request = CalculationRequest.model_validate(payload)

    assert calculate_payroll(request) == calculate_payroll(payload)


def test_totals_labels_follow_locale(payload: dict[str, Any]) -> None:
    payload["locale"] = "es"

    result = calculate_payroll(payload)

    assert result["meta"]["locale"] == "es"
    assert result["totals"]["labels"]["total_net_pay"] == "Neto a pagar"
    assert result["meta"]["warnings"][0].startswith("El ISR")


def test_incidence_labels_are_localised(payload: dict[str, Any]) -> None:
    payload["locale"] = "es-MX"
    payload["incidences"] = [{"employee_id": "E001", "type": "overtime", "quantity": 1}]

    detail = calculate_payroll(payload)["employee_calculations"][0]["incidence_details"][0]

    assert detail == {
        "incidence_id": "E001-1",
        "type": "OVERTIME",
        "quantity": 1.0,
        "amount": 250.0,
        "label": "Tiempo Extra",
    }


def test_explicit_incidence_id_is_kept(payload: dict[str, Any]) -> None:
    payload["incidences"] = [
        {"id": 42, "employee_id": "E001", "type": "BONUS", "quantity": 100}
    ]

    detail = calculate_payroll(payload)["employee_calculations"][0]["incidence_details"][0]

    assert detail["incidence_id"] == "42"


def test_explicit_deduction_amount_wins(payload: dict[str, Any]) -> None:
    payload["incidences"] = [
        {"employee_id": "E001", "type": "DEDUCTION", "quantity": 300, "amount": -120}
    ]

    calculation = calculate_payroll(payload)["employee_calculations"][0]

    assert calculation["deductions"]["incidence_deductions"] == 120.0


def test_year_overrides_period_year(payload: dict[str, Any]) -> None:
    payload["year"] = 2025

    assert calculate_payroll(payload)["meta"]["year"] == 2025


def test_unknown_year_is_rejected(payload: dict[str, Any]) -> None:
    payload["year"] = 2030

    with pytest.raises(ValueError, match="No payroll rates are configured for 2030"):
        calculate_payroll(payload)


def test_unknown_employee_reference_is_rejected(payload: dict[str, Any]) -> None:
    payload["incidences"] = [{"employee_id": "E999", "type": "BONUS", "quantity": 10}]

    with pytest.raises(ValueError, match="incidences.0: unknown employee 'E999'"):
        calculate_payroll(payload)


def test_quantity_limits_are_enforced(payload: dict[str, Any]) -> None:
    payload["incidences"] = [{"employee_id": "E001", "type": "OVERTIME", "quantity": 13}]

    with pytest.raises(ValueError, match="Overtime cannot exceed 12 hours"):
        calculate_payroll(payload)


def test_absence_limited_to_period_working_days(payload: dict[str, Any]) -> None:
    payload["incidences"] = [{"employee_id": "E001", "type": "FALTAS", "quantity": 16}]

    with pytest.raises(ValueError, match="15 working days"):
        calculate_payroll(payload)


@pytest.mark.parametrize(
    ("mutation", "fragment"),
    [
        ({"base_salary": -1}, "value must be positive"),
        ({"base_salary": None}, "Either base_salary or daily_salary"),
        ({"name": "A"}, "employees.0.name"),
        ({"nickname": "Anita"}, "employees.0.nickname"),
    ],
)
def test_invalid_employee_payloads(
    payload: dict[str, Any], mutation: dict[str, Any], fragment: str
) -> None:
    payload["employees"][0].update(mutation)

    with pytest.raises(ValueError) as excinfo:
        calculate_payroll(payload)

    assert str(excinfo.value).startswith("Invalid payroll payload:")
    assert fragment in str(excinfo.value)


def test_duplicate_employee_ids_are_rejected(payload: dict[str, Any]) -> None:
    payload["employees"].append(dict(payload["employees"][0]))

    with pytest.raises(ValueError, match="Duplicate employee id 'E001'"):
        calculate_payroll(payload)


def test_company_defined_incidence_uses_explicit_amount(payload: dict[str, Any]) -> None:
    baseline = calculate_payroll(deepcopy(payload))["employee_calculations"][0]
    payload["incidences"] = [
        {"employee_id": "E001", "type": "meal voucher", "quantity": 1, "amount": 120}
    ]

    calculation = calculate_payroll(payload)["employee_calculations"][0]

    assert calculation["incidence_details"][0] == {
        "incidence_id": "E001-1",
        "type": "MEAL_VOUCHER",
        "quantity": 1.0,
        "amount": 120.0,
        "label": "MEAL_VOUCHER",
    }
    assert calculation["perceptions"]["incidences"] == 120.0
    assert calculation["perceptions"]["total"] == pytest.approx(
        baseline["perceptions"]["total"] + 120
    )


def test_company_defined_incidence_without_amount_is_neutral(
    payload: dict[str, Any]
) -> None:
    baseline = calculate_payroll(deepcopy(payload))["employee_calculations"][0]
    payload["incidences"] = [{"employee_id": "E001", "type": "TRAINING", "quantity": 3}]

    calculation = calculate_payroll(payload)["employee_calculations"][0]

    assert calculation["incidence_details"][0]["amount"] == 0.0
    assert calculation["net_pay"] == baseline["net_pay"]


def test_blank_incidence_type_is_rejected(payload: dict[str, Any]) -> None:
    payload["incidences"] = [{"employee_id": "E001", "type": "  ", "quantity": 1}]

    with pytest.raises(ValueError, match="Incidence type must be a non-empty string"):
        calculate_payroll(payload)


def test_estimate_rejects_company_defined_type() -> None:
    with pytest.raises(ValueError, match="Unknown incidence type 'HOLIDAY'"):
        estimate_incidence({"type": "HOLIDAY", "quantity": 1, "base_salary": 15000})


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValueError, match="Payload must be a mapping"):
        calculate_payroll(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_batch_summary_is_logged(payload: dict[str, Any], caplog) -> None:
    with caplog.at_level(logging.INFO, logger="nomina.backend.app.services.calculation_service"):
        calculate_payroll(payload)

    assert "Calculated payroll for 1 employee(s)" in caplog.text


def test_profiling_timings_logged_when_enabled(
    payload: dict[str, Any], monkeypatch: pytest.MonkeyPatch, caplog
) -> None:
    monkeypatch.setenv("NOMINA_PROFILE_CALCULATIONS", "true")

    with caplog.at_level(logging.DEBUG, logger="nomina.backend.app.services.calculation_service"):
        calculate_payroll(payload)

    assert "calculate_payroll timings (ms)" in caplog.text
    assert "compute_batch" in caplog.text


def test_estimate_overtime_preview() -> None:
    result = estimate_incidence(
        {"type": "TIEMPO_EXTRA", "quantity": 1, "base_salary": 15000, "working_days": 15}
    )

    assert result == {
        "type": "OVERTIME",
        "label": "Overtime",
        "unit": "hours",
        "is_deduction": False,
        "quantity": 1.0,
        "amount": 250.0,
        "working_days": 15,
        "year": 2026,
        "locale": "en",
    }


def test_estimate_derives_working_days_from_period() -> None:
    result = estimate_incidence(
        {
            "type": "FALTAS",
            "quantity": 2,
            "base_salary": 11000,
            "period_start": "2026-01-01",
            "period_end": "2026-01-15",
            "locale": "es",
        }
    )

    assert result["working_days"] == 11
    assert result["amount"] == -2000.0
    assert result["label"] == "Faltas"
    assert result["unit"] == "días"
    assert result["is_deduction"] is True
    assert result["year"] == 2026


def test_estimate_uses_fallback_without_period() -> None:
    result = estimate_incidence(
        {"type": "DESCUENTOS", "quantity": 500, "base_salary": 15000, "year": 2026}
    )

    assert result["working_days"] == 15
    assert result["amount"] == -500.0


def test_estimate_rejects_out_of_range_quantity() -> None:
    with pytest.raises(ValueError, match="Overtime cannot exceed 12 hours"):
        estimate_incidence(
            {"type": "OVERTIME", "quantity": 20, "base_salary": 15000, "year": 2026}
        )


def test_estimate_requires_complete_period() -> None:
    with pytest.raises(ValueError, match="must be provided together"):
        estimate_incidence(
            {
                "type": "OVERTIME",
                "quantity": 1,
                "base_salary": 15000,
                "period_start": "2026-01-01",
            }
        )

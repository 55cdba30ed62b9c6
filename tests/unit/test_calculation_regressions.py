"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from nomina.backend.app.services.calculation_service import calculate_payroll

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _lookup(payload: dict[str, Any], dotted: str) -> Any:
    value: Any = payload
    for part in dotted.split("."):
        value = value[part]
    return value


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculate_payroll_matches_regression_scenario(scenario: dict[str, Any]) -> None:
    """The calculation service returns the expected results for known payloads."""

    result = calculate_payroll(scenario["payload"])
    expectations = scenario["expectations"]

    for key, value in expectations["meta"].items():
        assert result["meta"][key] == value

    for key, value in expectations["totals"].items():
        assert result["totals"][key] == pytest.approx(value)

    employees = {item["employee_id"]: item for item in result["employee_calculations"]}
    for employee_id, fields in expectations["employees"].items():
        assert employee_id in employees, f"Missing calculation for {employee_id}"
        for field, value in fields.items():
            assert _lookup(employees[employee_id], field) == pytest.approx(value)

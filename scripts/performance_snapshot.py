#!/usr/bin/env python3
"""Time repeated payroll calculations for a synthetic batch."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from nomina.backend.app.services.calculation_service import calculate_payroll  # noqa: E402

_INCIDENCE_CYCLE = (
    ("OVERTIME", 2),
    ("ABSENCE", 1),
    ("BONUS", 750),
    ("VACATION", 2),
    ("DEDUCTION", 300),
)


def build_payload(employee_count: int) -> dict[str, object]:
    """Return a half-month batch where every employee has one incidence."""

    employees = []
    incidences = []
    for index in range(employee_count):
        employee_id = f"E{index + 1:04d}"
        employees.append(
            {
                "id": employee_id,
                "name": f"Employee {index + 1}",
                "base_salary": 12000 + 250 * (index % 20),
            }
        )
        incidence_type, quantity = _INCIDENCE_CYCLE[index % len(_INCIDENCE_CYCLE)]
        incidences.append(
            {"employee_id": employee_id, "type": incidence_type, "quantity": quantity}
        )

    return {
        "period_start": "2026-01-01",
        "period_end": "2026-01-15",
        "locale": "es",
        "employees": employees,
        "incidences": incidences,
    }


def measure_backend(iterations: int, employee_count: int) -> dict[str, float]:
    """Return timing statistics for repeated batch calculations."""

    payload = build_payload(employee_count)
    calculate_payroll(payload)  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        calculate_payroll(payload)
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "employees": employee_count,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
        "per_employee_us": (elapsed / (iterations * employee_count)) * 1_000_000,
    }


def main() -> None:
    iterations = int(os.getenv("NOMINA_PROFILE_ITERATIONS", "75"))
    employee_count = int(os.getenv("NOMINA_PROFILE_EMPLOYEES", "200"))
    report = {"backend": measure_backend(iterations, employee_count)}
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()

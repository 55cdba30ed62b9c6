"""Orchestrate request validation, normalisation, and payroll calculations.

The calculation service coordinates the request models, translation layer and
year-based rate tables so that the calculator itself stays a pure function of
its inputs. Profiling hooks and request-level validation live here to give the
rest of the application simple ``calculate_payroll`` and ``estimate_incidence``
entry points.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from nomina.backend.app.localization import Translator, get_translator
from nomina.backend.app.models import (
    CalculationRequest,
    CalculationResponse,
    Employee,
    Incidence,
    IncidenceEstimateRequest,
    IncidenceEstimateResponse,
    IncidenceType,
    PayrollBatch,
    format_validation_error,
)
from nomina.backend.config.year_config import (
    YearConfiguration,
    default_year,
    load_year_configuration,
)

from .calculators import (
    INCIDENCE_CATALOGUE,
    compute_batch,
    compute_working_days,
    describe_incidence,
    estimate_incidence_amount,
    round_currency,
    validate_incidence_quantity,
)

_LOGGER = logging.getLogger(__name__)

_TOTAL_FIELDS = (
    "total_perceptions",
    "total_deductions",
    "total_provisions",
    "total_net_pay",
    "total_employees",
    "total_incidences",
    "employees_with_incidences",
    "total_company_cost",
)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("NOMINA_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate_payload(
    payload: Mapping[str, Any] | BaseModel, model: type[_ModelT]
) -> _ModelT:
    if isinstance(payload, model):
        data: Any = payload.model_dump(mode="python")
    elif isinstance(payload, Mapping):
        data = payload
    else:
        raise ValueError("Payload must be a mapping")

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _load_rates(year: int) -> YearConfiguration:
    try:
        return load_year_configuration(year)
    except FileNotFoundError as exc:
        raise ValueError(f"No payroll rates are configured for {year}") from exc


def _normalise_employees(
    request: CalculationRequest, working_days: int
) -> list[Employee]:
    employees: list[Employee] = []
    for entry in request.employees:
        if entry.base_salary is not None:
            base_salary = entry.base_salary
        else:
            # Contracts expressed as a daily wage are paid for each working day.
            base_salary = round_currency(entry.daily_salary * working_days)

        employees.append(
            Employee(
                id=entry.id,
                name=entry.name,
                employee_number=entry.employee_number,
                base_salary=base_salary,
                hire_date=entry.hire_date,
            )
        )
    return employees


def _normalise_incidences(
    request: CalculationRequest,
    employees: Mapping[str, Employee],
    working_days: int,
    config: YearConfiguration,
) -> list[Incidence]:
    incidences: list[Incidence] = []
    for index, entry in enumerate(request.incidences):
        scope = f"incidences.{index}"
        employee = employees.get(entry.employee_id)
        if employee is None:
            raise ValueError(f"{scope}: unknown employee '{entry.employee_id}'")

        problem = validate_incidence_quantity(
            entry.type, entry.quantity, working_days, config.incidence_limits
        )
        if problem:
            raise ValueError(f"{scope}: {problem}")

        amount = entry.amount
        if amount is None and entry.type is IncidenceType.DEDUCTION:
            amount = estimate_incidence_amount(
                entry.type,
                employee.base_salary,
                entry.quantity,
                working_days,
                config.rates.workday,
            )

        incidences.append(
            Incidence(
                id=entry.id or f"{entry.employee_id}-{index + 1}",
                employee_id=entry.employee_id,
                type=entry.type,
                quantity=entry.quantity,
                amount=amount,
                period_start=entry.period_start,
                period_end=entry.period_end,
                comment=entry.comment,
            )
        )
    return incidences


def _build_response(
    batch: PayrollBatch,
    config: YearConfiguration,
    translator: Translator,
) -> dict[str, Any]:
    totals = batch.totals.as_dict()
    totals["labels"] = translator.labels("totals", _TOTAL_FIELDS)

    meta: dict[str, Any] = {
        "year": config.year,
        "locale": translator.locale,
        "period_start": batch.period_start,
        "period_end": batch.period_end,
        "working_days": batch.working_days,
    }
    if config.warnings:
        meta["warnings"] = [translator(warning.message_key) for warning in config.warnings]

    response_model = CalculationResponse.model_validate(
        {
            "totals": totals,
            "employee_calculations": [
                calculation.as_dict() for calculation in batch.employee_calculations
            ],
            "meta": meta,
        }
    )
    return response_model.model_dump(mode="json", exclude_none=True)


def calculate_payroll(
    payload: Mapping[str, Any] | CalculationRequest,
) -> dict[str, Any]:
    """Compute the payroll batch described by ``payload``."""

    request = _validate_payload(payload, CalculationRequest)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    year = request.year or request.period_start.year
    config = _load_rates(year)
    translator = get_translator(request.locale)

    with _profile_section("normalise_payload", timings):
        working_days = compute_working_days(
            request.period_start, request.period_end, config.rates
        )
        employees = _normalise_employees(request, working_days)
        incidences = _normalise_incidences(
            request,
            {employee.id: employee for employee in employees},
            working_days,
            config,
        )

    with _profile_section("compute_batch", timings):
        batch = compute_batch(
            employees,
            incidences,
            request.period_start,
            request.period_end,
            config.rates,
            translator,
        )

    with _profile_section("build_response", timings):
        result = _build_response(batch, config, translator)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_payroll timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    _LOGGER.info(
        "Calculated payroll for %d employee(s), %s to %s (%d working days)",
        batch.totals.total_employees,
        batch.period_start.isoformat(),
        batch.period_end.isoformat(),
        batch.working_days,
    )

    return result


def _resolve_estimate_working_days(
    request: IncidenceEstimateRequest, config: YearConfiguration
) -> int:
    if request.working_days is not None:
        return request.working_days
    if request.period_start is not None and request.period_end is not None:
        return compute_working_days(request.period_start, request.period_end, config.rates)
    return config.rates.workday.fallback_working_days


def estimate_incidence(
    payload: Mapping[str, Any] | IncidenceEstimateRequest,
) -> dict[str, Any]:
    """Preview the amount an incidence will contribute when it is captured."""

    request = _validate_payload(payload, IncidenceEstimateRequest)

    if request.year is not None:
        year = request.year
    elif request.period_start is not None:
        year = request.period_start.year
    else:
        year = default_year()
    config = _load_rates(year)
    translator = get_translator(request.locale)
    working_days = _resolve_estimate_working_days(request, config)

    problem = validate_incidence_quantity(
        request.type, request.quantity, working_days, config.incidence_limits
    )
    if problem:
        raise ValueError(problem)

    info = INCIDENCE_CATALOGUE[request.type]
    amount = estimate_incidence_amount(
        request.type,
        request.base_salary,
        request.quantity,
        working_days,
        config.rates.workday,
    )

    response_model = IncidenceEstimateResponse(
        type=request.type.value,
        label=describe_incidence(request.type.value, translator),
        unit=translator(f"units.{info.unit}"),
        is_deduction=info.is_deduction,
        quantity=request.quantity,
        amount=amount,
        working_days=working_days,
        year=config.year,
        locale=translator.locale,
    )
    return response_model.model_dump(mode="json")


__all__ = ["calculate_payroll", "estimate_incidence"]

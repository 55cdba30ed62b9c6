"""Utilities for validating rate tables and surfacing issues."""

from __future__ import annotations

import argparse
from typing import Iterable, Mapping, Sequence

from .year_config import (
    IncidenceLimits,
    PayrollRates,
    WorkdayConfig,
    YearConfiguration,
    YearWarning,
    available_years,
    load_year_configuration,
)

# A payroll period never spans more than a calendar month.
_MAX_PERIOD_WORKING_DAYS = 23


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rate_group(scope: str, rates: Mapping[str, float]) -> list[str]:
    errors: list[str] = []

    for label, value in rates.items():
        if value < 0 or value > 1:
            errors.append(
                _format_scope(
                    scope,
                    f"{label} rate {value} must be between 0 and 1",
                )
            )

    return errors


def _validate_workday(workday: WorkdayConfig) -> list[str]:
    errors: list[str] = []

    if workday.hours_per_day <= 0 or workday.hours_per_day > 24:
        errors.append(
            _format_scope(
                "rates.workday",
                f"hours per day {workday.hours_per_day} must be between 0 and 24",
            )
        )

    fallback = workday.fallback_working_days
    if fallback <= 0 or fallback > _MAX_PERIOD_WORKING_DAYS:
        errors.append(
            _format_scope(
                "rates.workday",
                (
                    "fallback working days "
                    f"{fallback} must be between 1 and {_MAX_PERIOD_WORKING_DAYS}"
                ),
            )
        )

    if workday.overtime_multiplier < 1:
        errors.append(
            _format_scope(
                "rates.workday",
                "overtime multiplier should not pay less than the regular rate",
            )
        )

    return errors


def _validate_employee_share(rates: PayrollRates) -> list[str]:
    deductions = rates.deductions
    salary_share = deductions.social_security_employee + deductions.housing_fund_employee
    if deductions.income_tax + salary_share >= 1:
        return [
            _format_scope(
                "rates.deductions",
                "combined employee deductions would consume the entire salary",
            )
        ]
    return []


def _validate_incidence_limits(limits: IncidenceLimits) -> list[str]:
    errors: list[str] = []

    if limits.max_overtime_hours > 24:
        errors.append(
            _format_scope(
                "incidence_limits",
                "overtime hours cannot exceed the length of a day",
            )
        )
    if limits.max_amount <= 0:
        errors.append(
            _format_scope("incidence_limits", "maximum amount must be positive"),
        )

    return errors


def _validate_warnings(warnings: Iterable[YearWarning]) -> list[str]:
    errors: list[str] = []
    seen_ids: set[str] = set()
    valid_severities = {"info", "warning", "error"}

    for warning in warnings:
        if warning.id in seen_ids:
            errors.append(
                _format_scope(
                    "warnings",
                    f"duplicate warning identifier '{warning.id}' detected",
                )
            )
        else:
            seen_ids.add(warning.id)

        if warning.severity not in valid_severities:
            errors.append(
                _format_scope(
                    f"warnings.{warning.id}",
                    f"severity '{warning.severity}' is not recognised",
                )
            )

        for target in warning.applies_to:
            if not target.strip():
                errors.append(
                    _format_scope(
                        f"warnings.{warning.id}",
                        "applies_to entries must be non-empty strings",
                    )
                )

        if warning.documentation_url and not warning.documentation_url.startswith(
            ("http://", "https://")
        ):
            errors.append(
                _format_scope(
                    f"warnings.{warning.id}",
                    "documentation URL must be absolute",
                )
            )

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []
    rates = config.rates

    errors.extend(_validate_workday(rates.workday))
    errors.extend(_validate_rate_group("rates.accruals", rates.accruals.model_dump()))
    errors.extend(
        _validate_rate_group("rates.deductions", rates.deductions.model_dump())
    )
    errors.extend(
        _validate_rate_group("rates.provisions", rates.provisions.model_dump())
    )
    errors.extend(_validate_employee_share(rates))
    errors.extend(_validate_incidence_limits(config.incidence_limits))
    errors.extend(_validate_warnings(config.warnings))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured payroll rate tables and report issues."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())

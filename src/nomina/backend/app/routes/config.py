"""Expose rate tables and incidence metadata consumed by the front-end.

These endpoints bridge the YAML-backed year configuration and the capture
screens so that forms can show units, limits and rates without duplicating
business rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import Blueprint, jsonify, request

from nomina.backend.app.http import ProblemResponse, not_found
from nomina.backend.app.localization import Translator, get_translator
from nomina.backend.app.services.calculators import (
    INCIDENCE_CATALOGUE,
    format_percentage,
)
from nomina.backend.config.year_config import (
    YearConfiguration,
    available_years,
    default_year,
    load_year_configuration,
)
from nomina.backend.services.request_parser import resolve_locale
from nomina.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


@dataclass(frozen=True)
class YearRouteContext:
    """Common context shared by year-scoped configuration endpoints."""

    year: int
    translator: Translator
    configuration: YearConfiguration

    @property
    def locale(self) -> str:
        return self.translator.locale


def _build_year_context(year: int) -> YearRouteContext | ProblemResponse:
    try:
        configuration = load_year_configuration(year)
    except FileNotFoundError:
        return not_found(f"No payroll rates are configured for {year}")

    return YearRouteContext(
        year=year,
        translator=get_translator(resolve_locale(request)),
        configuration=configuration,
    )


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    return {
        "version": get_project_version(),
        "supported_years": list(available_years()),
        "default_year": default_year(),
    }


def _serialise_year(config: YearConfiguration) -> dict[str, Any]:
    rates = config.rates.model_dump(mode="json")
    return {
        "year": config.year,
        "meta": dict(config.meta),
        "rates": rates,
        "incidence_limits": config.incidence_limits.model_dump(mode="json"),
        "warnings": [
            warning.model_dump(mode="json", exclude_none=True)
            for warning in config.warnings
        ],
    }


def _describe_rates(config: YearConfiguration, translator: Translator) -> list[dict[str, Any]]:
    """Flatten percentage rates into labelled rows keyed ``<section>.<name>``."""

    rows: list[dict[str, Any]] = []
    for section in ("accruals", "deductions", "provisions"):
        values = getattr(config.rates, section).model_dump()
        for name, rate in values.items():
            rows.append(
                {
                    "id": f"{section}.{name}",
                    "label": translator(f"rates.{section}.{name}"),
                    "rate": rate,
                    "display": format_percentage(rate),
                }
            )
    return rows


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    return jsonify(get_configuration_metadata()), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return every configured rate table with manifest metadata."""

    metadata = get_configuration_metadata()
    payload = {
        "years": [_serialise_year(load_year_configuration(year)) for year in available_years()],
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/rates")
def get_year_rates(year: int) -> tuple[Any, int]:
    """Return one year's rate table with localized rate labels."""

    context = _build_year_context(year)
    if isinstance(context, ProblemResponse):
        return context.to_response()

    payload = _serialise_year(context.configuration)
    payload["locale"] = context.locale
    payload["labelled_rates"] = _describe_rates(context.configuration, context.translator)
    if context.configuration.warnings:
        payload["warnings"] = [
            {**entry, "message": context.translator(entry["message_key"])}
            for entry in payload["warnings"]
        ]
    return jsonify(payload), 200


@blueprint.get("/<int:year>/incidence-types")
def get_incidence_types(year: int) -> tuple[Any, int]:
    """Expose the incidence catalogue with units, defaults and limits."""

    context = _build_year_context(year)
    if isinstance(context, ProblemResponse):
        return context.to_response()

    limits = context.configuration.incidence_limits
    translator = context.translator
    incidence_types = []
    for info in INCIDENCE_CATALOGUE.values():
        entry: dict[str, Any] = {
            "id": info.type.value,
            "label": translator(info.label_key),
            "description": translator(info.description_key),
            "unit": info.unit,
            "unit_label": translator(f"units.{info.unit}"),
            "is_deduction": info.is_deduction,
            "default_quantity": info.default_quantity,
        }
        if info.unit == "hours":
            entry["max_quantity"] = limits.max_overtime_hours
        elif info.unit == "amount":
            entry["max_quantity"] = limits.max_amount
        incidence_types.append(entry)

    payload = {
        "year": context.year,
        "locale": context.locale,
        "incidence_types": incidence_types,
    }
    return jsonify(payload), 200

"""REST endpoint for payroll batch calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from nomina.backend.services import (
    build_json_response,
    calculate_payroll,
    parse_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1/payroll")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Calculate the payroll batch described by the submitted JSON payload."""

    payload = parse_payload(request)
    result = calculate_payroll(payload)

    return build_json_response(result)

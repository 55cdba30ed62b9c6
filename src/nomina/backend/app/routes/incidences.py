"""REST endpoint previewing incidence amounts before they are captured."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from nomina.backend.services import (
    build_json_response,
    estimate_incidence,
    parse_payload,
)

blueprint = Blueprint("incidences", __name__, url_prefix="/api/v1/incidences")


@blueprint.post("/estimate")
def create_estimate() -> tuple[Any, int]:
    payload = parse_payload(request)
    return build_json_response(estimate_incidence(payload))

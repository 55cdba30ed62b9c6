"""Service-layer helpers for the payroll backend."""

from nomina.backend.app.services import calculate_payroll, estimate_incidence

from .request_parser import parse_payload
from .response_builder import build_json_response

__all__ = [
    "build_json_response",
    "calculate_payroll",
    "estimate_incidence",
    "parse_payload",
]

"""JSON problem payloads shared by the blueprints and error handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from flask import jsonify


@dataclass(frozen=True)
class ProblemResponse:
    """Machine-readable error code with an optional human message."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`; keyword extras are merged into the body."""

    return ProblemResponse(error=error, status=status, message=message, extra=extra)


def bad_request(message: str) -> ProblemResponse:
    return problem_response("bad_request", status=400, message=message)


def validation_error(message: str) -> ProblemResponse:
    return problem_response("validation_error", status=400, message=message)


def not_found(message: str) -> ProblemResponse:
    return problem_response("not_found", status=404, message=message)


__all__ = [
    "ProblemResponse",
    "bad_request",
    "not_found",
    "problem_response",
    "validation_error",
]

"""Helpers for normalising incoming JSON requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

from nomina.backend.app.localization import normalise_locale


def resolve_locale(req: Request, payload: Mapping[str, Any] | None = None) -> str | None:
    """Return the locale hinted by ``payload``, the query string or headers.

    An explicit ``locale`` field wins over ``?locale=`` which wins over the
    first ``Accept-Language`` entry. ``None`` means no hint was supplied.
    """

    if payload is not None:
        locale = payload.get("locale")
        if isinstance(locale, str) and locale.strip():
            return normalise_locale(locale)

    locale_param = req.args.get("locale")
    if locale_param:
        return normalise_locale(locale_param)

    accept_language = req.headers.get("Accept-Language")
    if accept_language:
        primary = accept_language.split(",")[0].split(";")[0].strip()
        if primary:
            return normalise_locale(primary)

    return None


def parse_payload(req: Request) -> dict[str, Any]:
    """Extract a JSON object from ``req`` and fill in the locale hint."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    locale = resolve_locale(req, payload)
    if locale is not None:
        payload["locale"] = locale

    return payload


__all__ = ["parse_payload", "resolve_locale"]

"""Discover and load the per-year payroll rate tables.

``manifest.yaml`` lists every payroll year the service can calculate. Each
entry points at a YAML rate table (``<year>.yaml`` unless a ``filename`` is
given) and carries a ``status``; the newest ``active`` year is the default
for requests that do not name one. Both the manifest and the rate tables are
cached, so tests that rewrite the files must clear the caches.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    AccrualRates,
    ConfigurationError,
    DeductionRates,
    IncidenceLimits,
    PayrollRates,
    ProvisionRates,
    RateYearManifest,
    RateYearManifestEntry,
    WorkdayConfig,
    YearConfiguration,
    YearWarning,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"

ACTIVE_STATUS = "active"


def _read_mapping(path: Path, *, label: str) -> dict[str, Any]:
    """Parse ``path`` as YAML and require a top-level mapping."""

    document = yaml.safe_load(path.read_text(encoding="utf-8"))
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"{label} ({path.name}) must contain a mapping")
    return document


def _resolve_rate_file(entry: RateYearManifestEntry) -> Path:
    # Module attributes are read on each call so tests can point them elsewhere.
    path = CONFIG_DIRECTORY / entry.resolved_filename
    if not path.is_file():
        raise FileNotFoundError(
            f"Rate table for {entry.year} is declared but {path.name} does not exist"
        )
    return path


@lru_cache(maxsize=1)
def load_manifest() -> RateYearManifest:
    """Return the parsed rate-year manifest."""

    if not MANIFEST_FILE.is_file():
        raise FileNotFoundError(f"Rate-year manifest not found at {MANIFEST_FILE}")

    document = _read_mapping(MANIFEST_FILE, label="Rate-year manifest")
    try:
        return RateYearManifest.model_validate(document)
    except ValidationError as error:
        raise ConfigurationError(f"Invalid rate-year manifest: {error}") from error


def manifest_entries() -> Sequence[RateYearManifestEntry]:
    return load_manifest().years


def available_years() -> Sequence[int]:
    """Return every payroll year declared in the manifest, oldest first."""

    return load_manifest().supported_years


def default_year() -> int | None:
    """Return the newest ``active`` payroll year.

    Manifests without any active entry fall back to the newest declared
    year, and an empty manifest yields ``None``.
    """

    entries = sorted(manifest_entries(), key=lambda entry: entry.year)
    active = [entry.year for entry in entries if entry.status == ACTIVE_STATUS]
    if active:
        return active[-1]
    return entries[-1].year if entries else None


@lru_cache(maxsize=8)
def load_year_configuration(year: int) -> YearConfiguration:
    """Return the validated rate table for ``year``.

    Raises ``FileNotFoundError`` when the year is not declared or its file is
    absent, and ``ConfigurationError`` when the file does not validate or
    describes a different year.
    """

    try:
        entry = load_manifest().get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(
            f"Payroll year {year} is not declared in the rate-year manifest"
        ) from exc

    path = _resolve_rate_file(entry)
    document = _read_mapping(path, label=f"Rate table for {year}")
    document.setdefault("year", year)

    try:
        configuration = YearConfiguration.model_validate(document)
    except ValidationError as error:
        raise ConfigurationError(f"Invalid rate table for {year}: {error}") from error

    if configuration.year != year:
        raise ConfigurationError(
            f"Rate table year mismatch in {path.name}: "
            f"manifest declares {year}, file declares {configuration.year}"
        )
    return configuration


__all__ = [
    "ACTIVE_STATUS",
    "AccrualRates",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DeductionRates",
    "IncidenceLimits",
    "MANIFEST_FILE",
    "PayrollRates",
    "ProvisionRates",
    "RateYearManifest",
    "RateYearManifestEntry",
    "WorkdayConfig",
    "YearConfiguration",
    "YearWarning",
    "available_years",
    "default_year",
    "load_manifest",
    "load_year_configuration",
    "manifest_entries",
]

"""Unit coverage for rate table discovery and parsing."""

from __future__ import annotations

from pathlib import Path
from shutil import copy2

import pytest
import yaml

from nomina.backend.config import year_config
from nomina.backend.config.year_config import ConfigurationError, PayrollRates


@pytest.fixture()
def isolated_config_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return a temporary configuration directory patched into ``year_config``."""

    original_directory = year_config.CONFIG_DIRECTORY
    for filename in ("2025.yaml", "2026.yaml", "manifest.yaml"):
        copy2(original_directory / filename, tmp_path / filename)

    monkeypatch.setattr(year_config, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(year_config, "MANIFEST_FILE", tmp_path / "manifest.yaml")
    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()

    yield tmp_path

    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()


def _declare_year(directory: Path, year: int, **entry: object) -> None:
    manifest_path = directory / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    manifest["years"].append({"year": year, **entry})
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8")
    year_config.load_manifest.cache_clear()


def test_packaged_years_are_declared() -> None:
    assert tuple(year_config.available_years()) == (2025, 2026)


def test_packaged_rates_match_calculator_defaults() -> None:
    config = year_config.load_year_configuration(2026)

    assert config.rates == PayrollRates()
    assert config.meta["currency"] == "MXN"
    assert config.incidence_limits.max_overtime_hours == 12
    assert [warning.id for warning in config.warnings] == ["estimated_withholding"]


def test_configuration_is_cached() -> None:
    assert year_config.load_year_configuration(2026) is year_config.load_year_configuration(
        2026
    )


def test_unknown_year_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError, match="1999"):
        year_config.load_year_configuration(1999)


def test_new_year_is_discovered_through_manifest(isolated_config_directory: Path) -> None:
    source = (isolated_config_directory / "2026.yaml").read_text(encoding="utf-8")
    (isolated_config_directory / "2030.yaml").write_text(
        source.replace("year: 2026", "year: 2030"), encoding="utf-8"
    )
    _declare_year(isolated_config_directory, 2030)

    assert tuple(year_config.available_years()) == (2025, 2026, 2030)
    assert year_config.load_year_configuration(2030).year == 2030


def test_manifest_filename_override(isolated_config_directory: Path) -> None:
    source = (isolated_config_directory / "2026.yaml").read_text(encoding="utf-8")
    (isolated_config_directory / "draft-2027.yaml").write_text(
        source.replace("year: 2026", "year: 2027"), encoding="utf-8"
    )
    _declare_year(isolated_config_directory, 2027, filename="draft-2027.yaml")

    assert year_config.load_year_configuration(2027).year == 2027


def test_declared_year_without_file_is_reported(isolated_config_directory: Path) -> None:
    _declare_year(isolated_config_directory, 2031)

    with pytest.raises(FileNotFoundError, match="2031.yaml"):
        year_config.load_year_configuration(2031)


def test_year_mismatch_is_rejected(isolated_config_directory: Path) -> None:
    copy2(isolated_config_directory / "2026.yaml", isolated_config_directory / "2032.yaml")
    _declare_year(isolated_config_directory, 2032)

    with pytest.raises(ConfigurationError, match="year mismatch"):
        year_config.load_year_configuration(2032)


def test_missing_rates_section_is_rejected(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2033.yaml").write_text(
        "year: 2033\nmeta: {}\n", encoding="utf-8"
    )
    _declare_year(isolated_config_directory, 2033)

    with pytest.raises(ConfigurationError):
        year_config.load_year_configuration(2033)


def test_out_of_range_rate_is_rejected(isolated_config_directory: Path) -> None:
    source = (isolated_config_directory / "2026.yaml").read_text(encoding="utf-8")
    (isolated_config_directory / "2034.yaml").write_text(
        source.replace("year: 2026", "year: 2034").replace(
            "income_tax: 0.12", "income_tax: 1.2"
        ),
        encoding="utf-8",
    )
    _declare_year(isolated_config_directory, 2034)

    with pytest.raises(ConfigurationError, match="2034"):
        year_config.load_year_configuration(2034)


def test_duplicate_manifest_years_are_rejected(isolated_config_directory: Path) -> None:
    _declare_year(isolated_config_directory, 2026)

    with pytest.raises(ConfigurationError, match="Duplicate year 2026"):
        year_config.load_manifest()


def test_default_year_is_newest_active_entry() -> None:
    statuses = {entry.year: entry.status for entry in year_config.manifest_entries()}

    assert statuses == {2025: "archived", 2026: "active"}
    assert year_config.default_year() == 2026


def test_draft_year_does_not_become_default(isolated_config_directory: Path) -> None:
    source = (isolated_config_directory / "2026.yaml").read_text(encoding="utf-8")
    (isolated_config_directory / "2030.yaml").write_text(
        source.replace("year: 2026", "year: 2030"), encoding="utf-8"
    )
    _declare_year(isolated_config_directory, 2030, status="draft")

    assert year_config.available_years()[-1] == 2030
    assert year_config.default_year() == 2026


def test_default_year_without_active_entries(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "manifest.yaml").write_text(
        "years:\n  - year: 2025\n    status: archived\n  - year: 2026\n    status: archived\n",
        encoding="utf-8",
    )
    year_config.load_manifest.cache_clear()

    assert year_config.default_year() == 2026


def test_empty_rate_table_reports_the_file(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2035.yaml").write_text("- not\n- a mapping\n", encoding="utf-8")
    _declare_year(isolated_config_directory, 2035)

    with pytest.raises(ConfigurationError, match="2035.yaml"):
        year_config.load_year_configuration(2035)

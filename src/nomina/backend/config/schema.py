"""Pydantic models describing the payroll rate table schema."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _ensure_rate(value: float, label: str) -> None:
    if value < 0 or value > 1:
        raise ConfigurationError(f"{label} must be between 0 and 1")


class WorkdayConfig(ImmutableModel):
    """Working time assumptions used to derive daily and hourly rates."""

    hours_per_day: float = 8.0
    fallback_working_days: int = 15
    overtime_multiplier: float = 2.0

    @model_validator(mode="after")
    def _validate_values(self) -> WorkdayConfig:
        if self.hours_per_day <= 0:
            raise ConfigurationError("'hours_per_day' must be a positive number")
        if self.fallback_working_days <= 0:
            raise ConfigurationError("'fallback_working_days' must be a positive integer")
        if self.overtime_multiplier < 0:
            raise ConfigurationError("'overtime_multiplier' must be non-negative")
        return self


class AccrualRates(ImmutableModel):
    """Prorated perceptions accrued on top of the base salary."""

    year_end_bonus: float = 0.0833
    vacation_premium: float = 0.0208
    benefits: float = 0.10

    @model_validator(mode="after")
    def _validate_rates(self) -> AccrualRates:
        _ensure_rate(self.year_end_bonus, "Year-end bonus accrual rate")
        _ensure_rate(self.vacation_premium, "Vacation premium accrual rate")
        _ensure_rate(self.benefits, "Benefits accrual rate")
        return self


class DeductionRates(ImmutableModel):
    """Employee-side statutory deduction estimates."""

    income_tax: float = 0.12
    social_security_employee: float = 0.0275
    housing_fund_employee: float = 0.05

    @model_validator(mode="after")
    def _validate_rates(self) -> DeductionRates:
        _ensure_rate(self.income_tax, "Income tax rate")
        _ensure_rate(self.social_security_employee, "Social security employee rate")
        _ensure_rate(self.housing_fund_employee, "Housing fund employee rate")
        return self


class ProvisionRates(ImmutableModel):
    """Employer-side cost provisions that do not reduce net pay."""

    social_security_employer: float = 0.1047
    housing_fund_employer: float = 0.05
    retirement_fund: float = 0.02
    payroll_tax: float = 0.025

    @model_validator(mode="after")
    def _validate_rates(self) -> ProvisionRates:
        _ensure_rate(self.social_security_employer, "Social security employer rate")
        _ensure_rate(self.housing_fund_employer, "Housing fund employer rate")
        _ensure_rate(self.retirement_fund, "Retirement fund rate")
        _ensure_rate(self.payroll_tax, "Payroll tax rate")
        return self


class PayrollRates(ImmutableModel):
    """Complete set of constants consumed by the payroll calculator."""

    workday: WorkdayConfig = Field(default_factory=WorkdayConfig)
    accruals: AccrualRates = Field(default_factory=AccrualRates)
    deductions: DeductionRates = Field(default_factory=DeductionRates)
    provisions: ProvisionRates = Field(default_factory=ProvisionRates)


class IncidenceLimits(ImmutableModel):
    """Upper bounds applied to incidence quantities by the request layer."""

    max_overtime_hours: float = 12.0
    max_amount: float = 999_999.99

    @model_validator(mode="after")
    def _validate_limits(self) -> IncidenceLimits:
        if self.max_overtime_hours <= 0:
            raise ConfigurationError("'max_overtime_hours' must be positive")
        if self.max_amount <= 0:
            raise ConfigurationError("'max_amount' must be positive")
        return self


class YearWarning(ImmutableModel):
    """Informational notices attached to a rate table."""

    id: str
    message_key: str
    severity: str = "info"
    documentation_url: str | None = None
    applies_to: Sequence[str] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _validate_severity(self) -> Self:
        if self.severity not in {"info", "warning", "error"}:
            raise ConfigurationError("Warning 'severity' must be one of: info, warning, error")
        return self


class YearConfiguration(ImmutableModel):
    """Rate table for a single payroll year."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    rates: PayrollRates
    incidence_limits: IncidenceLimits = Field(default_factory=IncidenceLimits)
    warnings: Sequence[YearWarning] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _prepare_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        rates = prepared.get("rates")
        if not isinstance(rates, Mapping):
            raise ConfigurationError("Configuration must include a 'rates' section")

        if prepared.get("incidence_limits") is None:
            prepared["incidence_limits"] = {}

        if prepared.get("warnings") is None:
            prepared["warnings"] = []

        return prepared


class RateYearManifestEntry(ImmutableModel):
    """Entry describing a supported rate year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class RateYearManifest(ImmutableModel):
    """Manifest describing the available rate table files."""

    years: Sequence[RateYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> RateYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> RateYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "AccrualRates",
    "ConfigurationError",
    "DeductionRates",
    "ImmutableModel",
    "IncidenceLimits",
    "PayrollRates",
    "ProvisionRates",
    "RateYearManifest",
    "RateYearManifestEntry",
    "ValidationError",
    "WorkdayConfig",
    "YearConfiguration",
    "YearWarning",
]

"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

__all__ = [
    "INCIDENCE_TYPE_ALIASES",
    "IncidenceType",
    "EmployeeInput",
    "IncidenceInput",
    "CalculationRequest",
    "IncidenceEstimateRequest",
    "TotalsLabels",
    "Totals",
    "IncidenceDetailEntry",
    "EmployeeCalculationEntry",
    "ResponseMeta",
    "CalculationResponse",
    "IncidenceEstimateResponse",
    "format_validation_error",
    "coerce_incidence_type",
    "normalise_incidence_type",
]


class IncidenceType(str, Enum):
    """Payroll-period events that adjust an employee's pay."""

    ABSENCE = "ABSENCE"
    VACATION = "VACATION"
    OVERTIME = "OVERTIME"
    PERMISSION = "PERMISSION"
    BONUS = "BONUS"
    DEDUCTION = "DEDUCTION"


# Identifiers used by the incidence capture screens of the HR system.
INCIDENCE_TYPE_ALIASES: Mapping[str, IncidenceType] = {
    "FALTAS": IncidenceType.ABSENCE,
    "VACACIONES": IncidenceType.VACATION,
    "TIEMPO_EXTRA": IncidenceType.OVERTIME,
    "PERMISOS": IncidenceType.PERMISSION,
    "BONOS": IncidenceType.BONUS,
    "DESCUENTOS": IncidenceType.DEDUCTION,
}


def coerce_incidence_type(value: Any) -> IncidenceType | str:
    """Resolve ``value`` to an :class:`IncidenceType` where one matches.

    Codes outside the catalogue (company-defined incidences) are returned as
    upper-case strings and settled through their explicit amount.
    """

    if isinstance(value, IncidenceType):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Incidence type must be a non-empty string")

    code = value.strip().upper().replace("-", "_").replace(" ", "_")
    if code in INCIDENCE_TYPE_ALIASES:
        return INCIDENCE_TYPE_ALIASES[code]
    if code in IncidenceType.__members__:
        return IncidenceType(code)
    return code


def normalise_incidence_type(value: Any) -> IncidenceType:
    """Resolve ``value`` to an :class:`IncidenceType`, accepting aliases."""

    resolved = coerce_incidence_type(value)
    if not isinstance(resolved, IncidenceType):
        raise ValueError(f"Unknown incidence type '{value}'")
    return resolved


def _coerce_identifier(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value


class EmployeeInput(BaseModel):
    """Employee record submitted for a payroll run."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=2, max_length=100)
    employee_number: str | None = Field(default=None, max_length=50)
    base_salary: float | None = Field(default=None, gt=0)
    daily_salary: float | None = Field(default=None, gt=0)
    hire_date: date | None = None

    @field_validator("id", "employee_number", mode="before")
    @classmethod
    def _stringify_identifiers(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return " ".join(value.split())
        return value

    @model_validator(mode="after")
    def _require_salary(self) -> "EmployeeInput":
        if self.base_salary is None and self.daily_salary is None:
            raise ValueError("Either base_salary or daily_salary must be provided")
        return self


class IncidenceInput(BaseModel):
    """Incidence recorded against an employee for the pay period."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = None
    employee_id: str = Field(..., min_length=1)
    type: IncidenceType | str = Field(..., union_mode="left_to_right")
    quantity: float = Field(default=0.0, ge=0)
    amount: float | None = None
    period_start: date | None = None
    period_end: date | None = None
    comment: str | None = Field(default=None, max_length=500)

    @field_validator("id", "employee_id", mode="before")
    @classmethod
    def _stringify_identifiers(cls, value: Any) -> Any:
        return _coerce_identifier(value)

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> IncidenceType | str:
        return coerce_incidence_type(value)


class CalculationRequest(BaseModel):
    """Top-level payload accepted by the payroll calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    period_start: date
    period_end: date
    year: int | None = Field(default=None, ge=2000, le=2100)
    locale: str | None = None
    employees: list[EmployeeInput] = Field(default_factory=list)
    incidences: list[IncidenceInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_employees(self) -> "CalculationRequest":
        seen: set[str] = set()
        for employee in self.employees:
            if employee.id in seen:
                raise ValueError(f"Duplicate employee id '{employee.id}'")
            seen.add(employee.id)
        return self


class IncidenceEstimateRequest(BaseModel):
    """Payload used to preview the amount an incidence will produce."""

    model_config = ConfigDict(extra="forbid")

    type: IncidenceType
    quantity: float = Field(..., ge=0)
    base_salary: float = Field(..., gt=0)
    working_days: int | None = Field(default=None, gt=0)
    period_start: date | None = None
    period_end: date | None = None
    year: int | None = Field(default=None, ge=2000, le=2100)
    locale: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> IncidenceType:
        return normalise_incidence_type(value)

    @model_validator(mode="after")
    def _validate_period(self) -> "IncidenceEstimateRequest":
        if (self.period_start is None) != (self.period_end is None):
            raise ValueError("period_start and period_end must be provided together")
        return self


class TotalsLabels(BaseModel):
    """Localized labels for batch totals."""

    model_config = ConfigDict(extra="forbid")

    total_perceptions: str
    total_deductions: str
    total_provisions: str
    total_net_pay: str
    total_employees: str
    total_incidences: str
    employees_with_incidences: str
    total_company_cost: str


class Totals(BaseModel):
    """Aggregated payroll figures for the batch."""

    model_config = ConfigDict(extra="forbid")

    total_perceptions: float
    total_deductions: float
    total_provisions: float
    total_net_pay: float
    total_employees: int
    total_incidences: int
    employees_with_incidences: int
    total_company_cost: float
    labels: TotalsLabels


class IncidenceDetailEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    incidence_id: str
    type: str
    quantity: float
    amount: float
    label: str


class EmployeeCalculationEntry(BaseModel):
    """Per-employee breakdown returned by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    employee_id: str
    employee_name: str
    employee_number: str | None = None
    daily_salary: float
    hourly_rate: float
    perceptions: dict[str, float]
    deductions: dict[str, float]
    provisions: dict[str, float]
    net_pay: float
    incidence_details: list[IncidenceDetailEntry]
    has_incidences: bool


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    year: int
    locale: str
    period_start: date
    period_end: date
    working_days: int
    warnings: list[str] | None = None


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    totals: Totals
    employee_calculations: list[EmployeeCalculationEntry]
    meta: ResponseMeta


class IncidenceEstimateResponse(BaseModel):
    """Preview of the amount an incidence contributes to pay."""

    model_config = ConfigDict(extra="forbid")

    type: str
    label: str
    unit: str
    is_deduction: bool
    quantity: float
    amount: float
    working_days: int
    year: int
    locale: str


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        elif "greater than 0" in message.lower():
            message = "value must be positive"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid payroll payload: {details}"

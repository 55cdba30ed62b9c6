"""Typed domain models shared across the payroll calculation services.

Inputs to the calculator are frozen Pydantic models so that callers cannot
mutate an employee or incidence once a run has started. Derived results are
lightweight slotted dataclasses that serialise through ``as_dict`` into the
JSON-ready structures returned by the API.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .api import (
    CalculationRequest,
    CalculationResponse,
    EmployeeCalculationEntry,
    EmployeeInput,
    IncidenceEstimateRequest,
    IncidenceEstimateResponse,
    IncidenceInput,
    IncidenceType,
    ResponseMeta,
    Totals,
    TotalsLabels,
    format_validation_error,
)

__all__ = [
    "BatchTotals",
    "CalculationRequest",
    "CalculationResponse",
    "DeductionsBreakdown",
    "Employee",
    "EmployeeCalculationEntry",
    "EmployeeInput",
    "EmployeePayroll",
    "Incidence",
    "IncidenceDetail",
    "IncidenceEstimateRequest",
    "IncidenceEstimateResponse",
    "IncidenceInput",
    "IncidenceType",
    "PayrollBatch",
    "PerceptionsBreakdown",
    "ProvisionsBreakdown",
    "ResponseMeta",
    "Totals",
    "TotalsLabels",
    "format_validation_error",
]


class Employee(BaseModel):
    """Employee attributes relevant to a payroll calculation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    employee_number: str | None = None
    base_salary: float
    hire_date: date | None = None


class Incidence(BaseModel):
    """An event recorded against one employee for a pay period.

    ``type`` is usually an :class:`IncidenceType` but plain strings are
    accepted so that records created by other systems still flow through the
    calculator; unknown types are settled through ``amount``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    employee_id: str
    type: IncidenceType | str = Field(..., union_mode="left_to_right")
    quantity: float = 0.0
    amount: float | None = None
    period_start: date | None = None
    period_end: date | None = None
    comment: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_known_type(cls, value: Any) -> Any:
        if isinstance(value, str) and value in {member.value for member in IncidenceType}:
            return IncidenceType(value)
        return value

    @property
    def type_code(self) -> str:
        if isinstance(self.type, IncidenceType):
            return self.type.value
        return str(self.type)


@dataclass(slots=True)
class PerceptionsBreakdown:
    """Gross additions to an employee's pay."""

    base_salary: float
    year_end_bonus: float
    vacation_premium: float
    benefits: float
    incidences: float
    total: float


@dataclass(slots=True)
class DeductionsBreakdown:
    """Amounts withheld from an employee's pay."""

    income_tax: float
    social_security: float
    housing_fund: float
    incidence_deductions: float
    total: float


@dataclass(slots=True)
class ProvisionsBreakdown:
    """Employer cost accruals that do not reduce net pay."""

    social_security_employer: float
    housing_fund_employer: float
    retirement_fund: float
    payroll_tax: float
    total: float


@dataclass(slots=True)
class IncidenceDetail:
    incidence_id: str
    type: str
    quantity: float
    amount: float
    label: str


@dataclass(slots=True)
class EmployeePayroll:
    """Calculated payroll figures for a single employee."""

    employee_id: str
    employee_name: str
    employee_number: str | None
    daily_salary: float
    hourly_rate: float
    perceptions: PerceptionsBreakdown
    deductions: DeductionsBreakdown
    provisions: ProvisionsBreakdown
    net_pay: float
    incidence_details: list[IncidenceDetail] = field(default_factory=list)

    @property
    def has_incidences(self) -> bool:
        return bool(self.incidence_details)

    def as_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["has_incidences"] = self.has_incidences
        return payload


@dataclass(slots=True)
class BatchTotals:
    """Tracks cumulative totals across a payroll batch."""

    total_perceptions: float = 0.0
    total_deductions: float = 0.0
    total_provisions: float = 0.0
    total_net_pay: float = 0.0
    total_employees: int = 0
    total_incidences: int = 0
    employees_with_incidences: int = 0
    total_company_cost: float = 0.0

    def add(self, calculation: EmployeePayroll) -> None:
        self.total_perceptions += calculation.perceptions.total
        self.total_deductions += calculation.deductions.total
        self.total_provisions += calculation.provisions.total
        self.total_net_pay += calculation.net_pay
        if calculation.has_incidences:
            self.employees_with_incidences += 1

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PayrollBatch:
    """Result of running the calculator over a whole pay period."""

    period_start: date
    period_end: date
    working_days: int
    totals: BatchTotals
    employee_calculations: list[EmployeePayroll] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "working_days": self.working_days,
            "totals": self.totals.as_dict(),
            "employee_calculations": [
                calculation.as_dict() for calculation in self.employee_calculations
            ],
        }

"""Incidence catalogue, amount rules and quantity limits."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from nomina.backend.app.models import Incidence, IncidenceType
from nomina.backend.config.year_config import IncidenceLimits, WorkdayConfig

from .utils import round_currency

Labeler = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class IncidenceTypeInfo:
    """Static metadata describing how an incidence type is captured."""

    type: IncidenceType
    label: str
    unit: str
    is_deduction: bool
    default_quantity: float

    @property
    def label_key(self) -> str:
        return f"incidences.{self.type.value.lower()}.label"

    @property
    def description_key(self) -> str:
        return f"incidences.{self.type.value.lower()}.description"


INCIDENCE_CATALOGUE: Mapping[IncidenceType, IncidenceTypeInfo] = {
    IncidenceType.ABSENCE: IncidenceTypeInfo(
        IncidenceType.ABSENCE, "Absences", "days", True, 1
    ),
    IncidenceType.VACATION: IncidenceTypeInfo(
        IncidenceType.VACATION, "Vacation", "days", False, 1
    ),
    IncidenceType.OVERTIME: IncidenceTypeInfo(
        IncidenceType.OVERTIME, "Overtime", "hours", False, 2
    ),
    IncidenceType.PERMISSION: IncidenceTypeInfo(
        IncidenceType.PERMISSION, "Permissions", "days", False, 1
    ),
    IncidenceType.BONUS: IncidenceTypeInfo(
        IncidenceType.BONUS, "Bonuses and commissions", "amount", False, 1000
    ),
    IncidenceType.DEDUCTION: IncidenceTypeInfo(
        IncidenceType.DEDUCTION, "Deductions", "amount", True, 500
    ),
}

_DAY_BASED_TYPES = frozenset({IncidenceType.ABSENCE, IncidenceType.VACATION})
_AMOUNT_BASED_TYPES = frozenset({IncidenceType.BONUS, IncidenceType.DEDUCTION})


@dataclass(frozen=True, slots=True)
class SalaryRates:
    """Daily and hourly salary derived for one employee and period."""

    daily: float
    hourly: float
    overtime_multiplier: float

    @classmethod
    def derive(
        cls, base_salary: float, working_days: int, workday: WorkdayConfig
    ) -> SalaryRates:
        daily = base_salary / working_days
        return cls(
            daily=daily,
            hourly=daily / workday.hours_per_day,
            overtime_multiplier=workday.overtime_multiplier,
        )


_AMOUNT_RULES: Mapping[IncidenceType, Callable[[float, SalaryRates], float]] = {
    IncidenceType.ABSENCE: lambda quantity, rates: -(rates.daily * quantity),
    IncidenceType.VACATION: lambda quantity, rates: rates.daily * quantity,
    IncidenceType.OVERTIME: lambda quantity, rates: (
        rates.hourly * quantity * rates.overtime_multiplier
    ),
    IncidenceType.BONUS: lambda quantity, rates: quantity,
    # Permissions are informational only.
    IncidenceType.PERMISSION: lambda quantity, rates: 0.0,
}


def describe_incidence(type_code: str, labeler: Labeler | None = None) -> str:
    """Return the human label for ``type_code``.

    Types outside the catalogue are labelled with their raw code.
    """

    info = INCIDENCE_CATALOGUE.get(type_code)  # type: ignore[call-overload]
    if info is None:
        return type_code
    if labeler is None:
        return info.label
    return labeler(info.label_key)


def calculate_incidence_amount(incidence: Incidence, rates: SalaryRates) -> float:
    """Return the signed amount ``incidence`` contributes to pay.

    Types without a rule (deductions and anything unrecognised) are settled
    through the explicit ``amount`` override.
    """

    rule = _AMOUNT_RULES.get(incidence.type)  # type: ignore[call-overload]
    if rule is None:
        return round_currency(incidence.amount or 0.0)
    return round_currency(rule(incidence.quantity, rates))


def estimate_incidence_amount(
    incidence_type: IncidenceType,
    base_salary: float,
    quantity: float,
    working_days: int,
    workday: WorkdayConfig,
) -> float:
    """Return the amount stored on an incidence when it is first captured.

    Deductions are recorded as the negated quantity so that the calculator can
    later apply them through the amount override.
    """

    if quantity <= 0 or base_salary <= 0:
        return 0.0

    if incidence_type is IncidenceType.DEDUCTION:
        return round_currency(-abs(quantity))

    rates = SalaryRates.derive(base_salary, working_days, workday)
    return round_currency(_AMOUNT_RULES[incidence_type](quantity, rates))


def validate_incidence_quantity(
    incidence_type: IncidenceType | str,
    quantity: float,
    working_days: int,
    limits: IncidenceLimits,
) -> str | None:
    """Return an error message when ``quantity`` is out of range, else ``None``."""

    if quantity < 0:
        return "Quantity cannot be negative"

    if incidence_type is IncidenceType.OVERTIME and quantity > limits.max_overtime_hours:
        return f"Overtime cannot exceed {limits.max_overtime_hours:g} hours"

    if incidence_type in _DAY_BASED_TYPES and quantity > working_days:
        return f"Days cannot exceed the {working_days} working days of the period"

    if incidence_type in _AMOUNT_BASED_TYPES and quantity > limits.max_amount:
        return f"Amount cannot exceed {limits.max_amount:,.2f}"

    return None


__all__ = [
    "INCIDENCE_CATALOGUE",
    "IncidenceTypeInfo",
    "Labeler",
    "SalaryRates",
    "calculate_incidence_amount",
    "describe_incidence",
    "estimate_incidence_amount",
    "validate_incidence_quantity",
]

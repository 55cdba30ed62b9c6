"""Domain-specific calculation helpers."""

from .incidences import (
    INCIDENCE_CATALOGUE,
    IncidenceTypeInfo,
    SalaryRates,
    calculate_incidence_amount,
    describe_incidence,
    estimate_incidence_amount,
    validate_incidence_quantity,
)
from .payroll import (
    DEFAULT_RATES,
    compute_batch,
    compute_employee_payroll,
    compute_working_days,
)
from .utils import format_percentage, round_currency, sum_currency

__all__ = [
    "DEFAULT_RATES",
    "INCIDENCE_CATALOGUE",
    "IncidenceTypeInfo",
    "SalaryRates",
    "calculate_incidence_amount",
    "compute_batch",
    "compute_employee_payroll",
    "compute_working_days",
    "describe_incidence",
    "estimate_incidence_amount",
    "format_percentage",
    "round_currency",
    "sum_currency",
    "validate_incidence_quantity",
]

"""Payroll calculator: pro-rated salary, incidences and statutory estimates.

Every function in this module is pure. Figures are rounded to two decimals as
soon as they are derived and totals are built from the rounded parts, so the
net pay always equals perceptions minus deductions to the cent.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date

from nomina.backend.app.models import (
    BatchTotals,
    DeductionsBreakdown,
    Employee,
    EmployeePayroll,
    Incidence,
    IncidenceDetail,
    PayrollBatch,
    PerceptionsBreakdown,
    ProvisionsBreakdown,
)
from nomina.backend.config.year_config import PayrollRates

from .incidences import (
    Labeler,
    SalaryRates,
    calculate_incidence_amount,
    describe_incidence,
)
from .utils import round_currency, sum_currency

DEFAULT_RATES = PayrollRates()

_SATURDAY = 5


def compute_working_days(
    period_start: date, period_end: date, rates: PayrollRates = DEFAULT_RATES
) -> int:
    """Count Monday-to-Friday days in the inclusive range.

    An empty count, including an inverted range, falls back to the configured
    number of working days.
    """

    working_days = 0
    if period_end >= period_start:
        full_weeks, remainder = divmod((period_end - period_start).days + 1, 7)
        working_days = full_weeks * 5
        # The trailing partial week starts on the same weekday as the period.
        first_weekday = period_start.weekday()
        working_days += sum(
            1 for offset in range(remainder) if (first_weekday + offset) % 7 < _SATURDAY
        )

    return working_days or rates.workday.fallback_working_days


def compute_employee_payroll(
    employee: Employee,
    incidences: Iterable[Incidence],
    working_days: int,
    rates: PayrollRates = DEFAULT_RATES,
    labeler: Labeler | None = None,
) -> EmployeePayroll:
    """Calculate perceptions, deductions and provisions for one employee."""

    base_salary = round_currency(employee.base_salary)
    salary_rates = SalaryRates.derive(employee.base_salary, working_days, rates.workday)

    accruals = rates.accruals
    year_end_bonus = round_currency(employee.base_salary * accruals.year_end_bonus)
    vacation_premium = round_currency(employee.base_salary * accruals.vacation_premium)
    benefits = round_currency(employee.base_salary * accruals.benefits)

    details: list[IncidenceDetail] = []
    for incidence in incidences:
        amount = calculate_incidence_amount(incidence, salary_rates)
        details.append(
            IncidenceDetail(
                incidence_id=incidence.id,
                type=incidence.type_code,
                quantity=incidence.quantity,
                amount=amount,
                label=describe_incidence(incidence.type_code, labeler),
            )
        )

    incidence_amount = sum_currency(detail.amount for detail in details)
    incidence_additions = max(0.0, incidence_amount)
    incidence_deductions = max(0.0, -incidence_amount)

    total_perceptions = sum_currency(
        (base_salary, year_end_bonus, vacation_premium, benefits, incidence_additions)
    )
    perceptions = PerceptionsBreakdown(
        base_salary=base_salary,
        year_end_bonus=year_end_bonus,
        vacation_premium=vacation_premium,
        benefits=benefits,
        incidences=incidence_additions,
        total=total_perceptions,
    )

    deduction_rates = rates.deductions
    income_tax = round_currency(total_perceptions * deduction_rates.income_tax)
    social_security = round_currency(
        employee.base_salary * deduction_rates.social_security_employee
    )
    housing_fund = round_currency(
        employee.base_salary * deduction_rates.housing_fund_employee
    )
    deductions = DeductionsBreakdown(
        income_tax=income_tax,
        social_security=social_security,
        housing_fund=housing_fund,
        incidence_deductions=incidence_deductions,
        total=sum_currency(
            (income_tax, social_security, housing_fund, incidence_deductions)
        ),
    )

    provision_rates = rates.provisions
    social_security_employer = round_currency(
        employee.base_salary * provision_rates.social_security_employer
    )
    housing_fund_employer = round_currency(
        employee.base_salary * provision_rates.housing_fund_employer
    )
    retirement_fund = round_currency(employee.base_salary * provision_rates.retirement_fund)
    payroll_tax = round_currency(total_perceptions * provision_rates.payroll_tax)
    provisions = ProvisionsBreakdown(
        social_security_employer=social_security_employer,
        housing_fund_employer=housing_fund_employer,
        retirement_fund=retirement_fund,
        payroll_tax=payroll_tax,
        total=sum_currency(
            (social_security_employer, housing_fund_employer, retirement_fund, payroll_tax)
        ),
    )

    return EmployeePayroll(
        employee_id=employee.id,
        employee_name=employee.name,
        employee_number=employee.employee_number,
        daily_salary=round_currency(salary_rates.daily),
        hourly_rate=round_currency(salary_rates.hourly),
        perceptions=perceptions,
        deductions=deductions,
        provisions=provisions,
        net_pay=round_currency(perceptions.total - deductions.total),
        incidence_details=details,
    )


def compute_batch(
    employees: Sequence[Employee],
    incidences: Sequence[Incidence],
    period_start: date,
    period_end: date,
    rates: PayrollRates = DEFAULT_RATES,
    labeler: Labeler | None = None,
) -> PayrollBatch:
    """Calculate payroll for every employee and aggregate the batch totals.

    Employee order is preserved. Incidences that reference no employee in the
    batch still count towards ``total_incidences`` but affect no one's pay.
    """

    working_days = compute_working_days(period_start, period_end, rates)

    incidences_by_employee: dict[str, list[Incidence]] = defaultdict(list)
    for incidence in incidences:
        incidences_by_employee[incidence.employee_id].append(incidence)

    totals = BatchTotals(
        total_employees=len(employees),
        total_incidences=len(incidences),
    )
    calculations: list[EmployeePayroll] = []
    for employee in employees:
        calculation = compute_employee_payroll(
            employee,
            incidences_by_employee.get(employee.id, ()),
            working_days,
            rates,
            labeler,
        )
        calculations.append(calculation)
        totals.add(calculation)

    totals.total_perceptions = round_currency(totals.total_perceptions)
    totals.total_deductions = round_currency(totals.total_deductions)
    totals.total_provisions = round_currency(totals.total_provisions)
    totals.total_net_pay = round_currency(totals.total_net_pay)
    totals.total_company_cost = round_currency(
        totals.total_perceptions + totals.total_provisions
    )

    return PayrollBatch(
        period_start=period_start,
        period_end=period_end,
        working_days=working_days,
        totals=totals,
        employee_calculations=calculations,
    )


__all__ = [
    "DEFAULT_RATES",
    "compute_batch",
    "compute_employee_payroll",
    "compute_working_days",
]

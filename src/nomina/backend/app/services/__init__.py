"""Domain services used by the HTTP layer."""

from .calculation_service import calculate_payroll, estimate_incidence

__all__ = ["calculate_payroll", "estimate_incidence"]

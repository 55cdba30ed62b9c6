"""Backend package for the payroll calculation service."""

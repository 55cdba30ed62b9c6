"""Payroll calculation service for periodic payroll runs."""

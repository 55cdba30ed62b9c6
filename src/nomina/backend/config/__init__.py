"""Year-based payroll rate tables and their validation helpers."""

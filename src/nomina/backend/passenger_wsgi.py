"""WSGI entrypoint for Passenger-style hosting of the payroll backend."""

from nomina.backend.app import create_app

# Passenger looks up a module-level callable named ``application``.
application = create_app()

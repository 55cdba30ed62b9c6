"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from nomina.backend.app import create_app  # noqa: E402


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def half_month_payload() -> dict[str, object]:
    """Fifteen working days (2026-03-02 to 2026-03-20) for a 15,000 salary."""

    return {
        "period_start": "2026-03-02",
        "period_end": "2026-03-20",
        "employees": [
            {
                "id": "E001",
                "name": "Ana López",
                "employee_number": "0001",
                "base_salary": 15000,
            }
        ],
        "incidences": [],
    }

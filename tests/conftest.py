from __future__ import annotations

from datetime import datetime

import pytest

from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.main import create_app


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 15, 9, 0)


@pytest.fixture
def container():
    return build_container(storage_backend="memory", project_future_attendance=False)


@pytest.fixture
def make_employee(container):
    def _make(fullname: str = "Nguyen Van A", **fields):
        data = {"fullname": fullname, "salary": 20_000_000, "dependents": 1, "probation": "no"}
        data.update(fields)
        return container.employee_service.create_employee(data)

    return _make


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(
        {
            "STORAGE_BACKEND": "memory",
            "AUTO_INIT_DB": False,
            "AUTO_SEED_DB": False,
            "PROJECT_FUTURE_ATTENDANCE": False,
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()

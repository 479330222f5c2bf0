from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import parse_bool, require_non_empty, require_non_negative, require_non_negative_int
from ..core.constants import ALLOWANCE_FIELDS, DEFAULT_CONTRACT_STATUS, DEFAULT_NATIONALITY
from ..core.exceptions import NotFoundError
from .model import Allowances, EmployeeProfile
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_TEXT_FIELDS = (
    "department",
    "id_number",
    "job_title",
    "email",
    "contract_status",
    "bank_name",
    "bank_account_name",
    "bank_account_number",
)

# camelCase aliases accepted from the web client
_ALIASES = {
    "houseRent": "house_rent",
    "idNumber": "id_number",
    "jobTitle": "job_title",
    "contractStatus": "contract_status",
    "bankName": "bank_name",
    "bankAccountName": "bank_account_name",
    "bankAccountNumber": "bank_account_number",
}


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(k, k): v for k, v in data.items()}


def parse_allowances(data: Optional[Mapping[str, Any]], *, base: Optional[Allowances] = None) -> Allowances:
    base = base or Allowances()
    if not data:
        return base
    data = _normalize_keys(data)
    values = {}
    for name in ALLOWANCE_FIELDS:
        if name in data:
            values[name] = require_non_negative(data[name], name)
    return replace(base, **values)


class EmployeeService:
    """Use case: manage the employee directory (HR)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self) -> Sequence[EmployeeProfile]:
        return self._employees.list_all()

    def get_employee(self, employee_id: int) -> EmployeeProfile:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def create_employee(self, data: Mapping[str, Any], *, now: Optional[datetime] = None) -> EmployeeProfile:
        data = _normalize_keys(data)
        profile = EmployeeProfile(
            employee_id=0,
            fullname=require_non_empty(data.get("fullname"), "fullname"),
            salary=require_non_negative(data.get("salary"), "salary"),
            dependents=require_non_negative_int(data.get("dependents"), "dependents"),
            probation=parse_bool(data.get("probation"), "probation"),
            nationality=str(data.get("nationality") or DEFAULT_NATIONALITY).strip().lower(),
            allowances=parse_allowances(data.get("allowances")),
            department=data.get("department"),
            id_number=str(data.get("id_number") or ""),
            job_title=str(data.get("job_title") or ""),
            email=str(data.get("email") or ""),
            contract_status=str(data.get("contract_status") or DEFAULT_CONTRACT_STATUS),
            bank_name=str(data.get("bank_name") or ""),
            bank_account_name=str(data.get("bank_account_name") or ""),
            bank_account_number=str(data.get("bank_account_number") or ""),
            created_at=now or now_local(),
        )
        created = self._employees.create(profile)
        logger.info("[employees] created employee_id=%s", created.employee_id)
        return created

    def update_employee(
        self,
        employee_id: int,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> EmployeeProfile:
        """Partial update: fields absent from ``data`` keep their current value."""
        current = self.get_employee(employee_id)
        data = _normalize_keys(data)

        changes: dict[str, Any] = {}
        if data.get("fullname"):
            changes["fullname"] = require_non_empty(data["fullname"], "fullname")
        if data.get("salary") is not None:
            changes["salary"] = require_non_negative(data["salary"], "salary")
        if data.get("dependents") is not None:
            changes["dependents"] = require_non_negative_int(data["dependents"], "dependents")
        if data.get("probation") is not None:
            changes["probation"] = parse_bool(data["probation"], "probation")
        if data.get("nationality"):
            changes["nationality"] = str(data["nationality"]).strip().lower()
        if data.get("allowances") is not None:
            changes["allowances"] = parse_allowances(data["allowances"], base=current.allowances)
        for name in _TEXT_FIELDS:
            if data.get(name) is not None:
                changes[name] = str(data[name])

        updated = replace(current, updated_at=now or now_local(), **changes)
        if not self._employees.update(updated):
            raise NotFoundError("Employee not found")
        return updated

    def delete_employee(self, employee_id: int) -> None:
        if not self._employees.delete_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")
        logger.info("[employees] deleted employee_id=%s", employee_id)

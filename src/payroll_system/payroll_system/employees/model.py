from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.numbers import ZERO, as_float
from ..core.constants import DEFAULT_CONTRACT_STATUS, DEFAULT_NATIONALITY


@dataclass(frozen=True)
class Allowances:
    """The six fixed monthly stipends of an employee profile."""

    food: Decimal = ZERO
    clothes: Decimal = ZERO
    parking: Decimal = ZERO
    fuel: Decimal = ZERO
    house_rent: Decimal = ZERO
    phone: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.food + self.clothes + self.parking + self.fuel + self.house_rent + self.phone

    def to_dict(self) -> dict[str, float]:
        return {k: as_float(v) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class EmployeeProfile:
    """Domain entity: employee with salary and allowance profile.

    Single source of truth for base salary and allowances; salary records
    copy what they need at calculation time.
    """

    employee_id: int
    fullname: str
    salary: Decimal = ZERO
    dependents: int = 0
    probation: bool = False
    nationality: str = DEFAULT_NATIONALITY
    allowances: Allowances = field(default_factory=Allowances)
    department: Optional[str] = None
    id_number: str = ""
    job_title: str = ""
    email: str = ""
    contract_status: str = DEFAULT_CONTRACT_STATUS
    bank_name: str = ""
    bank_account_name: str = ""
    bank_account_number: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_vietnamese(self) -> bool:
        return (self.nationality or "").strip().lower() == DEFAULT_NATIONALITY

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.employee_id,
            "fullname": self.fullname,
            "salary": as_float(self.salary),
            "dependents": self.dependents,
            "probation": "yes" if self.probation else "no",
            "nationality": self.nationality,
            "allowances": self.allowances.to_dict(),
            "department": self.department,
            "id_number": self.id_number,
            "job_title": self.job_title,
            "email": self.email,
            "contract_status": self.contract_status,
            "bank_name": self.bank_name,
            "bank_account_name": self.bank_account_name,
            "bank_account_number": self.bank_account_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

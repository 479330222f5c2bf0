from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..model import SalaryCalculation, SalaryInput


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll).

    Implementations are pure: no I/O and no exceptions over the numeric domain.
    """

    @abstractmethod
    def calculate(self, inputs: SalaryInput, *, now: Optional[datetime] = None) -> SalaryCalculation:
        raise NotImplementedError

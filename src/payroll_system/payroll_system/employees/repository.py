from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EmployeeProfile


class EmployeeRepository(Protocol):
    """Repository interface for the employee directory.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_by_id(self, employee_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def list_all(self) -> Sequence[EmployeeProfile]:
        raise NotImplementedError

    def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        """Persist a new profile; ``employee_id`` of the argument is ignored."""
        raise NotImplementedError

    def update(self, profile: EmployeeProfile) -> bool:
        raise NotImplementedError

    def delete_by_id(self, employee_id: int) -> bool:
        raise NotImplementedError

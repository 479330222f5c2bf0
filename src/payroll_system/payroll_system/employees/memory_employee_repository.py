from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from .model import EmployeeProfile
from .repository import EmployeeRepository


class InMemoryEmployeeRepository(EmployeeRepository):
    def __init__(self, employees: Iterable[EmployeeProfile] = ()):
        self._lock = threading.Lock()
        self._by_id: dict[int, EmployeeProfile] = {}
        for e in employees:
            self._by_id[e.employee_id] = e
        self._next_id = max(self._by_id, default=0) + 1

    def get_by_id(self, employee_id: int) -> Optional[EmployeeProfile]:
        return self._by_id.get(int(employee_id))

    def list_all(self) -> Sequence[EmployeeProfile]:
        return sorted(self._by_id.values(), key=lambda e: e.employee_id)

    def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        with self._lock:
            stored = replace(profile, employee_id=self._next_id)
            self._by_id[stored.employee_id] = stored
            self._next_id += 1
            return stored

    def update(self, profile: EmployeeProfile) -> bool:
        with self._lock:
            if profile.employee_id not in self._by_id:
                return False
            self._by_id[profile.employee_id] = profile
            return True

    def delete_by_id(self, employee_id: int) -> bool:
        with self._lock:
            return self._by_id.pop(int(employee_id), None) is not None

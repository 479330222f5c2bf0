from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ProjectionDecision:
    projected_days: int
    note: Optional[str] = None


class ProjectionStrategy(ABC):
    """Strategy Pattern: how not-yet-elapsed days of a period count towards attendance."""

    @abstractmethod
    def project(self, *, month: int, year: int, today: date) -> ProjectionDecision:
        raise NotImplementedError

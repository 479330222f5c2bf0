from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .strategies.base import ProjectionStrategy
from .strategies.historical_strategy import HistoricalProjection
from .strategies.optimistic_strategy import OptimisticProjection


@dataclass
class ProjectionStrategyFactory:
    """Factory Pattern: choose the projection for a period.

    ``project_future_attendance`` is the PROJECT_FUTURE_ATTENDANCE setting.
    """

    project_future_attendance: bool = True

    def for_period(self, *, month: int, year: int, today: date) -> ProjectionStrategy:
        if not self.project_future_attendance:
            return HistoricalProjection()
        if (today.month, today.year) == (month, year):
            return OptimisticProjection()
        return HistoricalProjection()

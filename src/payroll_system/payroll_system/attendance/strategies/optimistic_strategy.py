from __future__ import annotations

from datetime import date, timedelta

from ...common.datetime_utils import count_weekdays, month_bounds
from .base import ProjectionDecision, ProjectionStrategy


class OptimisticProjection(ProjectionStrategy):
    """Count every weekday after today through month end as a full day worked.

    Only meaningful for the month containing ``today``; other months get 0.
    """

    def project(self, *, month: int, year: int, today: date) -> ProjectionDecision:
        if (today.month, today.year) != (month, year):
            return ProjectionDecision(projected_days=0)

        _, last_day = month_bounds(month, year)
        days = count_weekdays(today + timedelta(days=1), last_day)
        return ProjectionDecision(
            projected_days=days,
            note=f"{days} remaining weekdays assumed fully worked",
        )

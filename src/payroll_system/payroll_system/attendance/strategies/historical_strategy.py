from __future__ import annotations

from datetime import date

from .base import ProjectionDecision, ProjectionStrategy


class HistoricalProjection(ProjectionStrategy):
    """Only recorded attendance counts."""

    def project(self, *, month: int, year: int, today: date) -> ProjectionDecision:
        return ProjectionDecision(projected_days=0)

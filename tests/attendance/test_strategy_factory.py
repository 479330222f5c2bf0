from datetime import date

from src.payroll_system.payroll_system.attendance.factory import ProjectionStrategyFactory
from src.payroll_system.payroll_system.attendance.strategies.historical_strategy import HistoricalProjection
from src.payroll_system.payroll_system.attendance.strategies.optimistic_strategy import OptimisticProjection


def test_factory_projects_current_month_when_enabled():
    factory = ProjectionStrategyFactory(project_future_attendance=True)
    strategy = factory.for_period(month=3, year=2024, today=date(2024, 3, 27))

    assert isinstance(strategy, OptimisticProjection)


def test_factory_uses_history_for_past_months():
    factory = ProjectionStrategyFactory(project_future_attendance=True)
    strategy = factory.for_period(month=2, year=2024, today=date(2024, 3, 27))

    assert isinstance(strategy, HistoricalProjection)


def test_factory_uses_history_when_projection_disabled():
    factory = ProjectionStrategyFactory(project_future_attendance=False)
    strategy = factory.for_period(month=3, year=2024, today=date(2024, 3, 27))

    assert isinstance(strategy, HistoricalProjection)


def test_optimistic_projection_counts_weekdays_after_today():
    # Wed 27 March 2024 -> Thu 28 and Fri 29 remain
    decision = OptimisticProjection().project(month=3, year=2024, today=date(2024, 3, 27))

    assert decision.projected_days == 2


def test_optimistic_projection_on_last_day_adds_nothing():
    decision = OptimisticProjection().project(month=3, year=2024, today=date(2024, 3, 31))

    assert decision.projected_days == 0

import pytest

from orchestrator import BreakdownStrategy, DayPlannerStrategy, TaskBoard

from .fakes import FakeAdvisor, FakeBreakdownGateway, FakePlanningGateway, FakeTaskStore


@pytest.fixture()
def store() -> FakeTaskStore:
    return FakeTaskStore()


@pytest.fixture()
def planning() -> FakePlanningGateway:
    return FakePlanningGateway()


@pytest.fixture()
def breakdown() -> FakeBreakdownGateway:
    return FakeBreakdownGateway()


@pytest.fixture()
def advisor() -> FakeAdvisor:
    return FakeAdvisor()


@pytest.fixture()
def board(store, planning, breakdown, advisor) -> TaskBoard:
    """TaskBoard wired to in-memory fakes"""
    return TaskBoard(store, advisor, [DayPlannerStrategy(planning), BreakdownStrategy(breakdown)])

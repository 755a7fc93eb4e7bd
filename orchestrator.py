"""
Task board controller

Owns the board state and runs each user intent (add, expand with AI, advise,
toggle, delete) against the store and the Claude gateways. The task list is
never patched locally: after every successful write the whole list is read
back from the store.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from errors import EmptyResultError, StoreError, TransportError, ValidationError
from models import BREAKDOWN_CATEGORY, NewTask, Priority, Task
from utils import active_titles, completed_count, progress_percent

logger = logging.getLogger(__name__)

ADD_NEEDS_INPUT = "Enter a task title first."
ADD_FAILED = "Could not add the task. Please check the database connection."
EXPAND_NEEDS_INPUT = "Enter a theme or goal first and the AI will plan your day!"
EXPAND_EMPTY = "The AI could not come up with any tasks. Try a more specific theme."
EXPAND_NOT_SAVED = "The plan was generated but could not be saved."
EXPAND_FAILED = "Something went wrong talking to the AI service. Please try again later."
NOTHING_IN_PROGRESS = "Nothing is in progress right now. How about setting a new goal?"
UPDATE_FAILED = "Could not update the task. Please try again."
DELETE_FAILED = "Could not delete the task. Please try again."
REFRESH_FAILED = "Could not load the task list."


class TaskStore(Protocol):
    async def list(self) -> List[Task]: ...

    async def insert(self, rows: Sequence[NewTask]) -> None: ...

    async def set_completion(self, task_id: str, completed: bool) -> None: ...

    async def delete(self, task_id: str) -> None: ...


class Advisor(Protocol):
    async def advise(self, titles: Sequence[str], style: str = "coaching") -> str: ...


class ExpansionStrategy(Protocol):
    """Expands one line of user text into task rows through an AI call"""

    name: str

    async def expand(self, text: str) -> List[NewTask]: ...


class DayPlannerStrategy:
    """Theme -> timetable slots, tagged 'AI Timetable'"""

    name = "planner"

    def __init__(self, planning_gateway):
        self.gateway = planning_gateway

    async def expand(self, text: str) -> List[NewTask]:
        items = await self.gateway.plan(text)
        # Inserted last-first so the newest-first list reads in schedule order
        return [item.to_new_task() for item in reversed(items)]


class BreakdownStrategy:
    """Goal -> a few task titles, tagged 'AI Breakdown'"""

    name = "breakdown"

    def __init__(self, breakdown_gateway):
        self.gateway = breakdown_gateway

    async def expand(self, text: str) -> List[NewTask]:
        titles = await self.gateway.breakdown(text)
        return [NewTask(title=title, category=BREAKDOWN_CATEGORY) for title in reversed(titles)]


class Outcome(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    BUSY = "busy"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class FlowResult:
    outcome: Outcome
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS


@dataclass
class BoardState:
    tasks: List[Task] = field(default_factory=list)
    input_text: str = ""
    advice: Optional[str] = None
    notice: Optional[str] = None
    is_loading: bool = False
    is_adding: bool = False
    is_expanding: bool = False
    is_advising: bool = False

    @property
    def completed_count(self) -> int:
        return completed_count(self.tasks)

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    @property
    def progress_percent(self) -> int:
        return progress_percent(self.completed_count, self.total_count)


class TaskBoard:
    def __init__(self, store: TaskStore, advisor: Advisor, strategies: Sequence[ExpansionStrategy]):
        self.store = store
        self.advisor = advisor
        self.strategies = {strategy.name: strategy for strategy in strategies}
        self.state = BoardState()

    def _fail(self, message: str) -> FlowResult:
        self.state.notice = message
        return FlowResult(Outcome.FAILED, message)

    def set_input(self, text: str) -> None:
        self.state.input_text = text

    def dismiss_advice(self) -> None:
        self.state.advice = None

    def dismiss_notice(self) -> None:
        self.state.notice = None

    def task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.state.tasks if t.id == task_id), None)

    async def refresh(self) -> FlowResult:
        """Replace the cached list with a fresh snapshot from the store"""
        self.state.is_loading = True
        try:
            self.state.tasks = await self.store.list()
        except StoreError as e:
            logger.error("❌ Error fetching tasks: %s", e)
            return self._fail(REFRESH_FAILED)
        finally:
            self.state.is_loading = False
        return FlowResult(Outcome.SUCCESS)

    async def add(self, title: Optional[str] = None) -> FlowResult:
        """Add one task; without a title the input box is used, and cleared on success"""
        from_input = title is None
        if from_input:
            title = self.state.input_text
        title = title.strip()
        if not title:
            return FlowResult(Outcome.REJECTED, ADD_NEEDS_INPUT)
        if self.state.is_adding:
            return FlowResult(Outcome.BUSY)

        self.state.is_adding = True
        try:
            await self.store.insert([NewTask(title=title, priority=Priority.MEDIUM)])
        except StoreError as e:
            logger.error("❌ Error adding task %r: %s", title, e)
            return self._fail(ADD_FAILED)
        finally:
            self.state.is_adding = False

        if from_input:
            self.state.input_text = ""
        self.state.notice = None
        await self.refresh()
        return FlowResult(Outcome.SUCCESS)

    async def expand(self, text: Optional[str] = None, mode: str = "planner") -> FlowResult:
        """Expand the input into several tasks with the named strategy"""
        strategy = self.strategies.get(mode)
        if strategy is None:
            raise ValueError(f"Unknown expansion mode: {mode}")
        from_input = text is None
        if from_input:
            text = self.state.input_text
        text = text.strip()
        if not text:
            return FlowResult(Outcome.REJECTED, EXPAND_NEEDS_INPUT)
        if self.state.is_expanding:
            return FlowResult(Outcome.BUSY)

        self.state.is_expanding = True
        try:
            try:
                rows = await strategy.expand(text)
            except EmptyResultError:
                rows = []
            except (TransportError, ValidationError) as e:
                logger.error("❌ %s expansion failed: %s", strategy.name, e)
                return self._fail(EXPAND_FAILED)

            if not rows:
                logger.info("ℹ️  %s produced nothing for %r", strategy.name, text)
                self.state.notice = EXPAND_EMPTY
                return FlowResult(Outcome.EMPTY, EXPAND_EMPTY)

            try:
                await self.store.insert(rows)
            except StoreError as e:
                logger.error("❌ Generated %d task(s) but could not save them: %s", len(rows), e)
                return self._fail(EXPAND_NOT_SAVED)
        finally:
            self.state.is_expanding = False

        if from_input:
            self.state.input_text = ""
        self.state.notice = None
        await self.refresh()
        return FlowResult(Outcome.SUCCESS)

    async def advise(self, style: str = "coaching") -> FlowResult:
        titles = active_titles(self.state.tasks)
        if not titles:
            self.state.advice = NOTHING_IN_PROGRESS
            return FlowResult(Outcome.SUCCESS, NOTHING_IN_PROGRESS)
        if self.state.is_advising:
            return FlowResult(Outcome.BUSY)

        self.state.is_advising = True
        try:
            self.state.advice = await self.advisor.advise(titles, style)
        finally:
            self.state.is_advising = False
        return FlowResult(Outcome.SUCCESS, self.state.advice)

    async def set_completion(self, task_id: str, completed: bool) -> FlowResult:
        try:
            await self.store.set_completion(task_id, completed)
        except StoreError as e:
            logger.error("❌ Error updating task %s: %s", task_id, e)
            return self._fail(UPDATE_FAILED)
        await self.refresh()
        return FlowResult(Outcome.SUCCESS)

    async def toggle(self, task_id: str) -> FlowResult:
        task = self.task(task_id)
        if task is None:
            return FlowResult(Outcome.REJECTED, f"Unknown task: {task_id}")
        return await self.set_completion(task_id, not task.is_completed)

    async def delete(self, task_id: str) -> FlowResult:
        try:
            await self.store.delete(task_id)
        except StoreError as e:
            logger.error("❌ Error deleting task %s: %s", task_id, e)
            return self._fail(DELETE_FAILED)
        await self.refresh()
        return FlowResult(Outcome.SUCCESS)

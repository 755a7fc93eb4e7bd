from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_CATEGORY = "General"
TIMETABLE_CATEGORY = "AI Timetable"
BREAKDOWN_CATEGORY = "AI Breakdown"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(BaseModel):
    id: str
    title: str = Field(min_length=1)
    is_completed: bool = False
    priority: Priority = Priority.MEDIUM
    category: str = DEFAULT_CATEGORY
    created_at: Optional[datetime] = None
    description: Optional[str] = None
    due_date: Optional[str] = None


class NewTask(BaseModel):
    title: str = Field(min_length=1)
    priority: Priority = Priority.MEDIUM
    category: str = DEFAULT_CATEGORY


class PlannerItem(BaseModel):
    time: str = Field(
        min_length=1,
        description="Time range, e.g. '09:00 - 10:00'"
    )
    task: str = Field(
        min_length=1,
        description="Concrete thing to do in that slot"
    )

    def to_new_task(self) -> NewTask:
        return NewTask(title=f"[{self.time}] {self.task}", category=TIMETABLE_CATEGORY)


class DayPlan(BaseModel):
    schedule: List[PlannerItem] = Field(
        description="Timetable for the day in chronological order"
    )


class GoalBreakdown(BaseModel):
    tasks: List[str] = Field(
        description="3-5 short, action-oriented task titles"
    )

import math
from datetime import datetime
from typing import Iterable, Optional

import pytz

from models import Task


def get_formatted_date(timezone: str = "America/Detroit", now: Optional[datetime] = None) -> str:
    """Returns the date for prompts, e.g. 'Sunday, October 27, 2025'"""
    tz = pytz.timezone(timezone)
    if now is None:
        now = datetime.now(tz)
    else:
        now = now.astimezone(tz)
    return now.strftime("%A, %B %d, %Y")


def progress_percent(completed: int, total: int) -> int:
    """Share of completed tasks, rounded half up like the browser's Math.round"""
    if total <= 0:
        return 0
    return int(math.floor(100 * completed / total + 0.5))


def completed_count(tasks: Iterable[Task]) -> int:
    return sum(1 for task in tasks if task.is_completed)


def active_titles(tasks: Iterable[Task]):
    """Titles of the tasks still in progress, in list order"""
    return [task.title for task in tasks if not task.is_completed]

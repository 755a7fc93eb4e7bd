import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
from notion_client import APIErrorCode, APIResponseError, AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from pydantic import ValidationError as PydanticValidationError

from config import NotionProperties
from errors import StoreError, StoreValidationError
from models import DEFAULT_CATEGORY, NewTask, Priority, Task

logger = logging.getLogger(__name__)

# Everything notion-client (or the httpx transport under it) raises on failure
NOTION_ERRORS = (HTTPResponseError, RequestTimeoutError, httpx.HTTPError)


def extract_plain_text(prop: Optional[Dict[str, Any]]) -> str:
    """Extract text from a title or rich_text property"""
    if not prop:
        return ""
    prop_type = prop.get("type")
    if prop_type in ("title", "rich_text"):
        return "".join(text.get("plain_text", "") for text in prop.get(prop_type) or [])
    if prop_type == "select":
        select = prop.get("select") or {}
        return select.get("name", "")
    return ""


def page_to_task(page: Dict[str, Any], props: NotionProperties) -> Task:
    """Convert a Notion database page to a Task"""
    try:
        properties = page["properties"]
        page_id = page["id"]
    except KeyError as e:
        raise StoreValidationError(f"Notion page is missing {e}") from e

    priority_prop = properties.get(props.priority) or {}
    priority_name = (priority_prop.get("select") or {}).get("name", Priority.MEDIUM.value)
    try:
        priority = Priority(priority_name.lower())
    except ValueError:
        logger.warning("Unknown priority %r on page %s, using medium", priority_name, page_id)
        priority = Priority.MEDIUM

    completed_prop = properties.get(props.completed) or {}
    due_prop = properties.get(props.due_date) or {}
    due = (due_prop.get("date") or {}).get("start")

    try:
        return Task(
            id=page_id,
            title=extract_plain_text(properties.get(props.title)),
            is_completed=bool(completed_prop.get("checkbox", False)),
            priority=priority,
            category=extract_plain_text(properties.get(props.category)) or DEFAULT_CATEGORY,
            created_at=page.get("created_time"),
            description=extract_plain_text(properties.get(props.description)) or None,
            due_date=due,
        )
    except PydanticValidationError as e:
        raise StoreValidationError(f"Page {page_id} is not a valid task: {e}") from e


def task_to_properties(row: NewTask, props: NotionProperties, stamp: int) -> Dict[str, Any]:
    """Build the property payload for a new task page"""
    return {
        props.title: {
            "title": [{"type": "text", "text": {"content": row.title}}]
        },
        props.completed: {"checkbox": False},
        props.priority: {"select": {"name": row.priority.value}},
        props.category: {"select": {"name": row.category}},
        props.created_stamp: {"number": stamp},
    }


class NotionTaskStore:
    """Task table backed by a Notion database"""

    def __init__(self, notion: AsyncClient, database_id: str, props: Optional[NotionProperties] = None):
        self.notion = notion
        self.database_id = database_id
        self.props = props or NotionProperties()
        self._last_stamp = 0

    def _next_stamp(self) -> int:
        """Microseconds since the epoch, strictly increasing per store"""
        self._last_stamp = max(time.time_ns() // 1000, self._last_stamp + 1)
        return self._last_stamp

    async def list(self) -> List[Task]:
        """All tasks, newest created first"""
        pages = []
        cursor = None
        try:
            while True:
                kwargs = {
                    "database_id": self.database_id,
                    # created_time is rounded to the minute, the stamp breaks ties
                    "sorts": [
                        {
                            "property": self.props.created_stamp,
                            "direction": "descending"
                        },
                        {
                            "timestamp": "created_time",
                            "direction": "descending"
                        }
                    ],
                }
                if cursor:
                    kwargs["start_cursor"] = cursor
                response = await self.notion.databases.query(**kwargs)
                pages.extend(response.get("results", []))
                if not response.get("has_more"):
                    break
                cursor = response.get("next_cursor")
        except NOTION_ERRORS as e:
            raise StoreError(f"Could not list tasks: {e}") from e

        tasks = []
        for page in pages:
            try:
                tasks.append(page_to_task(page, self.props))
            except StoreValidationError as e:
                logger.warning("⚠️  Skipping page that is not a task: %s", e)
        return tasks

    async def insert(self, rows: Sequence[NewTask]) -> None:
        """Create one page per row, in order"""
        for row in rows:
            try:
                await self.notion.pages.create(
                    parent={"database_id": self.database_id},
                    properties=task_to_properties(row, self.props, self._next_stamp()),
                )
            except NOTION_ERRORS as e:
                raise StoreError(f"Could not insert task {row.title!r}: {e}") from e
        logger.info("Inserted %d task(s)", len(rows))

    async def set_completion(self, task_id: str, completed: bool) -> None:
        try:
            await self.notion.pages.update(
                page_id=task_id,
                properties={self.props.completed: {"checkbox": completed}},
            )
        except NOTION_ERRORS as e:
            raise StoreError(f"Could not update task {task_id}: {e}") from e

    async def delete(self, task_id: str) -> None:
        """Archive the page; a page that is already gone counts as deleted"""
        try:
            await self.notion.pages.update(page_id=task_id, archived=True)
        except APIResponseError as e:
            if e.code == APIErrorCode.ObjectNotFound:
                logger.info("Task %s already gone, nothing to delete", task_id)
                return
            raise StoreError(f"Could not delete task {task_id}: {e}") from e
        except NOTION_ERRORS as e:
            raise StoreError(f"Could not delete task {task_id}: {e}") from e

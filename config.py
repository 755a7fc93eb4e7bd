"""
Settings for the task board, read from the environment (and .env if present)
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "claude-sonnet-4-20250514"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class NotionProperties:
    """Column names of the tasks database in Notion"""
    title: str = "Title"
    completed: str = "Completed"
    priority: str = "Priority"
    category: str = "Category"
    description: str = "Description"
    due_date: str = "Due Date"
    created_stamp: str = "Created Stamp"


@dataclass(frozen=True)
class Settings:
    notion_token: Optional[str]
    notion_database_id: Optional[str]
    notion_properties: NotionProperties
    anthropic_api_key: Optional[str]
    anthropic_model: str
    anthropic_advice_model: str
    anthropic_max_tokens: int
    planner_timezone: str
    log_level: str
    port: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    model = os.getenv("ANTHROPIC_MODEL", DEFAULT_MODEL)
    props = NotionProperties(
        title=os.getenv("NOTION_PROP_TITLE", "Title"),
        completed=os.getenv("NOTION_PROP_COMPLETED", "Completed"),
        priority=os.getenv("NOTION_PROP_PRIORITY", "Priority"),
        category=os.getenv("NOTION_PROP_CATEGORY", "Category"),
        description=os.getenv("NOTION_PROP_DESCRIPTION", "Description"),
        due_date=os.getenv("NOTION_PROP_DUE_DATE", "Due Date"),
        created_stamp=os.getenv("NOTION_PROP_CREATED_STAMP", "Created Stamp"),
    )
    return Settings(
        notion_token=os.getenv("NOTION_TOKEN"),
        notion_database_id=os.getenv("NOTION_DATABASE_ID"),
        notion_properties=props,
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
        anthropic_model=model,
        anthropic_advice_model=os.getenv("ANTHROPIC_ADVICE_MODEL", model),
        anthropic_max_tokens=_env_int("ANTHROPIC_MAX_TOKENS", 2048),
        planner_timezone=os.getenv("PLANNER_TIMEZONE", "America/Detroit"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=_env_int("PORT", 8000),
    )

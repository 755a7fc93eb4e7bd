import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Type

import anthropic
from anthropic import AsyncAnthropic
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from errors import EmptyResultError, PreconditionError, TransportError, ValidationError
from models import DayPlan, GoalBreakdown, PlannerItem
from utils import get_formatted_date

logger = logging.getLogger(__name__)

PLANNER_PROMPT = """You are a world-class time management expert.

Write the most effective timetable for a single day built around the theme and goals below.
Start at 09:00, leave proper breaks between focus blocks and keep every slot concrete.

Current date: {date}

Theme: "{theme}"

Record the timetable with the record_day_plan tool: one entry per slot, each with a
time range such as "09:00 - 10:00" and the task for that slot."""

BREAKDOWN_PROMPT = """Break the goal below into 3-5 small, concrete tasks.
Each task is a short title that starts with a verb and fits on one line.

Goal: "{goal}"

Record the tasks with the record_tasks tool."""

COACHING_SYSTEM = """You are an elite productivity partner and an expert in the psychology of strategy.
The user already manages themselves well. Do not question their willpower or lecture them;
focus on strategic advice that lifts an already strong performer a little further.

Output rules:
1. Keep symbols such as #, * and - to a minimum.
2. Use short paragraphs with plain section titles only.
3. No rude guesses and no negative predictions.
4. Stay courteous and professional.

Structure:
Strategic overview: how the current list is laid out
Deeper insight: context switching costs and energy use between the tasks
First move: the one point to hit before anything else"""

TIP_SYSTEM = """You are a friendly productivity coach.
Answer with exactly one short sentence: the single most useful tip for working through the list."""

ADVICE_STYLES = {
    "coaching": (COACHING_SYSTEM, 0.5),
    "tip": (TIP_SYSTEM, 0.7),
}

ADVICE_FALLBACK = ("A temporary error occurred while analysing your tasks. "
                   "Please ask again in a moment.")
ADVICE_EMPTY_REPLY = "Stay focused and work through them one at a time!"


def tool_spec(name: str, description: str, model: Type[BaseModel]) -> Dict[str, Any]:
    """Tool definition whose input schema is the pydantic model's JSON schema"""
    return {
        "name": name,
        "description": description,
        "input_schema": model.model_json_schema(),
    }


def extract_tool_input(response, tool_name: str) -> Any:
    """Return the arguments Claude passed to the forced tool"""
    for block in response.content:
        if block.type == "tool_use" and block.name == tool_name:
            data = block.input
            # Some SDK versions hand back a JSON string instead of a dict
            if isinstance(data, str):
                data = json.loads(data)
            return data
    raise ValidationError(f"Claude did not call {tool_name}")


def extract_text(response) -> str:
    return "".join(block.text for block in response.content if block.type == "text").strip()


async def generate_structured(
    client: AsyncAnthropic,
    model: str,
    max_tokens: int,
    prompt: str,
    tool_name: str,
    description: str,
    output_model: Type[BaseModel],
):
    """Run a prompt with a forced tool call and validate the arguments against output_model"""
    try:
        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            messages=[
                {"role": "user", "content": prompt}
            ],
            tools=[tool_spec(tool_name, description, output_model)],
            tool_choice={"type": "tool", "name": tool_name},
        )
    except anthropic.APIError as e:
        raise TransportError(f"Claude request failed: {e}") from e

    try:
        data = extract_tool_input(response, tool_name)
        return output_model.model_validate(data)
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(f"Claude returned malformed {tool_name} data: {e}") from e


class PlanningGateway:
    """Turns a theme into a validated day timetable"""

    tool_name = "record_day_plan"

    def __init__(self, client: AsyncAnthropic, model: str, max_tokens: int = 2048,
                 timezone: str = "America/Detroit"):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timezone = timezone

    async def plan(self, theme: str) -> List[PlannerItem]:
        """
        Raises PreconditionError for a blank theme, EmptyResultError when the
        schedule comes back empty, TransportError/ValidationError otherwise
        """
        theme = (theme or "").strip()
        if not theme:
            raise PreconditionError("A theme is required to plan the day")

        prompt = PLANNER_PROMPT.format(date=get_formatted_date(self.timezone), theme=theme)
        logger.info("🤖 Asking Claude for a day plan: %r", theme)
        plan = await generate_structured(
            self.client, self.model, self.max_tokens, prompt,
            self.tool_name, "Record the day's timetable", DayPlan,
        )
        if not plan.schedule:
            raise EmptyResultError("Claude produced an empty timetable")
        logger.info("✓ Day plan has %d slot(s)", len(plan.schedule))
        return plan.schedule


class BreakdownGateway:
    """Splits a goal into a few task titles. Never raises: failures come back as []"""

    tool_name = "record_tasks"

    def __init__(self, client: AsyncAnthropic, model: str, max_tokens: int = 1024):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def breakdown(self, goal: str) -> List[str]:
        goal = (goal or "").strip()
        if not goal:
            return []
        try:
            result = await generate_structured(
                self.client, self.model, self.max_tokens, BREAKDOWN_PROMPT.format(goal=goal),
                self.tool_name, "Record the task titles", GoalBreakdown,
            )
        except Exception:
            logger.exception("Goal breakdown failed for %r", goal)
            return []
        return [title.strip() for title in result.tasks if title and title.strip()]


class AdvisoryGateway:
    """Free-form coaching about the tasks still in progress. Never raises"""

    def __init__(self, client: AsyncAnthropic, model: str, max_tokens: int = 2048):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens

    async def advise(self, titles: Sequence[str], style: str = "coaching") -> str:
        system, temperature = ADVICE_STYLES.get(style, ADVICE_STYLES["coaching"])
        prompt = ("Here is my current task list. I would like strategic advice from a "
                  f"professional point of view: {', '.join(titles)}")
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                temperature=temperature,
                messages=[
                    {"role": "user", "content": prompt}
                ],
            )
            text = extract_text(response)
        except Exception:
            logger.exception("Priority advice failed")
            return ADVICE_FALLBACK
        return text or ADVICE_EMPTY_REPLY


def build_gateways(client: AsyncAnthropic, model: str, advice_model: Optional[str] = None,
                   max_tokens: int = 2048, timezone: str = "America/Detroit"):
    """Planning, breakdown and advisory gateways sharing one client"""
    return (
        PlanningGateway(client, model, max_tokens, timezone),
        BreakdownGateway(client, model, max_tokens),
        AdvisoryGateway(client, advice_model or model, max_tokens),
    )

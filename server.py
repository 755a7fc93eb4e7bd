"""
FocusFlow Task Board Server
Serves the task list page and a JSON API for each user action
"""
import logging
from functools import lru_cache
from typing import Literal, Optional

from anthropic import AsyncAnthropic
from fastapi import Depends, FastAPI
from fastapi.responses import HTMLResponse, JSONResponse
from notion_client import AsyncClient as NotionClient
from pydantic import BaseModel

from claude_client import build_gateways
from config import get_settings
from logging_setup import setup_logging
from notion_api import NotionTaskStore
from orchestrator import BreakdownStrategy, DayPlannerStrategy, FlowResult, Outcome, TaskBoard
from presentation import build_view, render_page

logger = logging.getLogger(__name__)

STATUS_CODES = {
    Outcome.SUCCESS: 200,
    Outcome.EMPTY: 200,
    Outcome.REJECTED: 400,
    Outcome.BUSY: 409,
    Outcome.FAILED: 502,
}


class AddTaskRequest(BaseModel):
    # None means "use the page's input box"
    title: Optional[str] = None


class ExpandRequest(BaseModel):
    text: Optional[str] = None
    mode: Literal["planner", "breakdown"] = "planner"


class CompletionRequest(BaseModel):
    is_completed: bool


class AdviceRequest(BaseModel):
    style: Literal["coaching", "tip"] = "coaching"


class InputRequest(BaseModel):
    text: str


@lru_cache(maxsize=1)
def get_board() -> TaskBoard:
    """Single shared board wired to Notion and Claude"""
    settings = get_settings()
    notion = NotionClient(auth=settings.notion_token)
    # No retries: every failure is reported and the user triggers again
    claude = AsyncAnthropic(api_key=settings.anthropic_api_key, max_retries=0)

    store = NotionTaskStore(notion, settings.notion_database_id, settings.notion_properties)
    planning, breakdown, advisory = build_gateways(
        claude,
        settings.anthropic_model,
        settings.anthropic_advice_model,
        settings.anthropic_max_tokens,
        settings.planner_timezone,
    )
    return TaskBoard(store, advisory, [DayPlannerStrategy(planning), BreakdownStrategy(breakdown)])


def respond(board: TaskBoard, result: Optional[FlowResult] = None) -> JSONResponse:
    result = result or FlowResult(Outcome.SUCCESS)
    return JSONResponse(
        status_code=STATUS_CODES[result.outcome],
        content={
            "outcome": result.outcome.value,
            "message": result.message,
            "board": build_view(board.state).model_dump(mode="json"),
        },
    )


app = FastAPI(title="FocusFlow Task Board")


@app.get("/", response_class=HTMLResponse)
async def index(board: TaskBoard = Depends(get_board)):
    """The task list page; loading it re-reads the list like a fresh mount"""
    await board.refresh()
    return HTMLResponse(render_page(build_view(board.state)))


@app.get("/health")
async def health():
    """Detailed health check"""
    settings = get_settings()
    return {
        "status": "healthy",
        "notion_configured": bool(settings.notion_token),
        "claude_configured": bool(settings.anthropic_api_key),
        "database_configured": bool(settings.notion_database_id),
    }


@app.get("/api/board")
async def board_view(board: TaskBoard = Depends(get_board)):
    return respond(board)


@app.post("/api/board/refresh")
async def refresh(board: TaskBoard = Depends(get_board)):
    return respond(board, await board.refresh())


@app.put("/api/board/input")
async def set_input(body: InputRequest, board: TaskBoard = Depends(get_board)):
    board.set_input(body.text)
    return respond(board)


@app.delete("/api/board/notice")
async def dismiss_notice(board: TaskBoard = Depends(get_board)):
    board.dismiss_notice()
    return respond(board)


@app.post("/api/tasks")
async def add_task(body: AddTaskRequest, board: TaskBoard = Depends(get_board)):
    return respond(board, await board.add(body.title))


@app.post("/api/tasks/expand")
async def expand_tasks(body: ExpandRequest, board: TaskBoard = Depends(get_board)):
    logger.info("📨 Expand request (%s)", body.mode)
    return respond(board, await board.expand(body.text, mode=body.mode))


@app.post("/api/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, board: TaskBoard = Depends(get_board)):
    return respond(board, await board.toggle(task_id))


@app.patch("/api/tasks/{task_id}")
async def update_task(task_id: str, body: CompletionRequest, board: TaskBoard = Depends(get_board)):
    return respond(board, await board.set_completion(task_id, body.is_completed))


@app.delete("/api/tasks/{task_id}")
async def delete_task(task_id: str, board: TaskBoard = Depends(get_board)):
    return respond(board, await board.delete(task_id))


@app.post("/api/advice")
async def advice(body: Optional[AdviceRequest] = None, board: TaskBoard = Depends(get_board)):
    style = body.style if body else "coaching"
    return respond(board, await board.advise(style))


@app.delete("/api/advice")
async def dismiss_advice(board: TaskBoard = Depends(get_board)):
    board.dismiss_advice()
    return respond(board)


def main():
    import uvicorn
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("🚀 Starting task board on port %d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()

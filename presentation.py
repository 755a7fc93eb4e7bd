from html import escape
from typing import List, Optional

from pydantic import BaseModel

from models import Task
from orchestrator import BoardState


class BoardView(BaseModel):
    tasks: List[Task]
    completed_count: int
    total_count: int
    progress_percent: int
    input_text: str
    advice: Optional[str] = None
    notice: Optional[str] = None
    is_loading: bool
    is_adding: bool
    is_expanding: bool
    is_advising: bool


def build_view(state: BoardState) -> BoardView:
    """Snapshot of everything the page shows, derived only from the board state"""
    return BoardView(
        tasks=list(state.tasks),
        completed_count=state.completed_count,
        total_count=state.total_count,
        progress_percent=state.progress_percent,
        input_text=state.input_text,
        advice=state.advice,
        notice=state.notice,
        is_loading=state.is_loading,
        is_adding=state.is_adding,
        is_expanding=state.is_expanding,
        is_advising=state.is_advising,
    )


def render_task(task: Task) -> str:
    done = " done" if task.is_completed else ""
    mark = "&#10003;" if task.is_completed else "&nbsp;"
    task_id = escape(task.id, quote=True)
    return (
        f'<li class="task{done}">'
        f'<button class="toggle" onclick="call(\'POST\', \'/api/tasks/{task_id}/toggle\')">{mark}</button>'
        f'<span class="title">{escape(task.title)}</span>'
        f'<span class="badge {task.priority.value}">{task.priority.value}</span>'
        f'<span class="badge">{escape(task.category)}</span>'
        f'<button class="delete" onclick="call(\'DELETE\', \'/api/tasks/{task_id}\')">&#10005;</button>'
        '</li>'
    )


def render_page(view: BoardView) -> str:
    if view.is_loading and not view.tasks:
        body = '<p class="empty">Loading your schedule...</p>'
    elif not view.tasks:
        body = ('<p class="empty">Your timetable is empty. '
                'Enter a theme and press the AI timetable button.</p>')
    else:
        body = '<ul class="tasks">' + "".join(render_task(t) for t in view.tasks) + "</ul>"

    advice = ""
    if view.advice:
        advice = (
            '<section class="advice"><h4>Productivity coaching</h4>'
            '<button onclick="call(\'DELETE\', \'/api/advice\')">&#10005;</button>'
            f'<p>{escape(view.advice)}</p></section>'
        )
    notice = f'<p class="notice">{escape(view.notice)}</p>' if view.notice else ""

    return PAGE.format(
        percent=view.progress_percent,
        completed=view.completed_count,
        total=view.total_count,
        input_text=escape(view.input_text, quote=True),
        advise_disabled=" disabled" if view.is_advising else "",
        add_disabled=" disabled" if view.is_adding else "",
        expand_disabled=" disabled" if view.is_expanding else "",
        advice=advice,
        notice=notice,
        body=body,
    )


PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>FocusFlow</title>
<style>
body {{ font-family: sans-serif; max-width: 40rem; margin: 3rem auto; color: #0f172a; }}
.bar {{ background: #e2e8f0; height: 0.75rem; border-radius: 1rem; }}
.bar div {{ background: #4f46e5; height: 100%; border-radius: 1rem; }}
.tasks {{ list-style: none; padding: 0; }}
.task {{ display: flex; gap: 0.5rem; align-items: center; padding: 0.5rem 0; }}
.task.done .title {{ text-decoration: line-through; color: #94a3b8; }}
.title {{ flex: 1; }}
.badge {{ font-size: 0.7rem; background: #f1f5f9; padding: 0.1rem 0.5rem; border-radius: 1rem; }}
.badge.high {{ background: #fee2e2; }} .badge.low {{ background: #dcfce7; }}
.advice {{ background: #1e1b4b; color: #e2e8f0; padding: 1rem; border-radius: 1rem; white-space: pre-wrap; }}
.notice {{ color: #b91c1c; }}
</style>
</head>
<body>
<h1>FocusFlow</h1>
<p>Professional AI time planner</p>
<button onclick="call('POST', '/api/advice', {{style: 'coaching'}})"{advise_disabled}>Get coaching</button>
<button onclick="call('POST', '/api/advice', {{style: 'tip'}})"{advise_disabled}>Quick tip</button>
<section>
<strong>{percent}%</strong> today &middot; {completed} / {total} done
<div class="bar"><div style="width: {percent}%"></div></div>
</section>
{advice}
{notice}
<input id="text" value="{input_text}" placeholder="Today's theme or goal (e.g. exam study day)">
<button onclick="fromInput('/api/tasks', {{}})"{add_disabled}>Add</button>
<button onclick="fromInput('/api/tasks/expand', {{mode: 'planner'}})"{expand_disabled}>AI timetable</button>
<button onclick="fromInput('/api/tasks/expand', {{mode: 'breakdown'}})"{expand_disabled}>AI breakdown</button>
{body}
<script>
function text() {{ return document.getElementById('text').value; }}
async function fromInput(url, body) {{
  await fetch('/api/board/input', {{
    method: 'PUT',
    headers: {{'Content-Type': 'application/json'}},
    body: JSON.stringify({{text: text()}})
  }});
  await call('POST', url, body);
}}
async function call(method, url, body) {{
  const res = await fetch(url, {{
    method: method,
    headers: {{'Content-Type': 'application/json'}},
    body: body ? JSON.stringify(body) : undefined
  }});
  const data = await res.json();
  if (!res.ok && data.message) alert(data.message);
  location.reload();
}}
</script>
</body>
</html>
"""

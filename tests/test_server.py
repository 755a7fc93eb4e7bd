import pytest
from fastapi.testclient import TestClient

from models import PlannerItem
from orchestrator import EXPAND_NOT_SAVED, NOTHING_IN_PROGRESS
from server import app, get_board


@pytest.fixture()
def client(board):
    app.dependency_overrides[get_board] = lambda: board
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_index_renders_tasks(client, store):
    client.post("/api/tasks", json={"title": "Water <plants>"})

    response = client.get("/")

    assert response.status_code == 200
    assert "Water &lt;plants&gt;" in response.text
    assert "0%" in response.text


def test_index_empty_board(client):
    assert "Your timetable is empty" in client.get("/").text


def test_add_task(client):
    response = client.post("/api/tasks", json={"title": "Buy milk"})

    body = response.json()
    assert response.status_code == 200
    assert body["outcome"] == "success"
    assert body["board"]["tasks"][0]["title"] == "Buy milk"
    assert body["board"]["tasks"][0]["priority"] == "medium"
    assert body["board"]["input_text"] == ""


def test_add_blank_task(client):
    response = client.post("/api/tasks", json={"title": " "})

    assert response.status_code == 400
    assert response.json()["outcome"] == "rejected"


def test_add_failure_keeps_input(client, store):
    store.failing.add("insert")
    client.put("/api/board/input", json={"text": "Buy milk"})

    response = client.post("/api/tasks", json={})

    assert response.status_code == 502
    assert response.json()["board"]["input_text"] == "Buy milk"


def test_expand_planner(client, planning):
    planning.items = [PlannerItem(time="09:00-10:00", task="Study")]

    response = client.post("/api/tasks/expand", json={"text": "Exam", "mode": "planner"})

    tasks = response.json()["board"]["tasks"]
    assert response.status_code == 200
    assert tasks[0]["title"] == "[09:00-10:00] Study"
    assert tasks[0]["category"] == "AI Timetable"


def test_expand_empty_breakdown(client):
    response = client.post("/api/tasks/expand", json={"text": "Piano", "mode": "breakdown"})

    assert response.status_code == 200
    assert response.json()["outcome"] == "empty"


def test_expand_not_saved(client, planning, store):
    planning.items = [PlannerItem(time="09:00", task="Study")]
    store.failing.add("insert")

    response = client.post("/api/tasks/expand", json={"text": "Exam"})

    assert response.status_code == 502
    assert response.json()["message"] == EXPAND_NOT_SAVED


def test_expand_rejects_unknown_mode(client):
    response = client.post("/api/tasks/expand", json={"text": "Exam", "mode": "poem"})

    assert response.status_code == 422


def test_toggle_and_patch(client):
    task_id = client.post("/api/tasks", json={"title": "Run"}).json()["board"]["tasks"][0]["id"]

    toggled = client.post(f"/api/tasks/{task_id}/toggle").json()["board"]
    assert toggled["tasks"][0]["is_completed"] is True
    assert toggled["progress_percent"] == 100

    patched = client.patch(f"/api/tasks/{task_id}", json={"is_completed": False}).json()["board"]
    assert patched["tasks"][0]["is_completed"] is False


def test_delete_missing_task(client):
    response = client.delete("/api/tasks/nope")

    assert response.status_code == 200
    assert response.json()["board"]["tasks"] == []


def test_advice_flow(client, advisor):
    empty = client.post("/api/advice", json={"style": "coaching"}).json()
    assert empty["board"]["advice"] == NOTHING_IN_PROGRESS
    assert advisor.calls == []

    client.post("/api/tasks", json={"title": "Slides"})
    advised = client.post("/api/advice", json={"style": "tip"}).json()
    assert advised["board"]["advice"] == advisor.reply
    assert advisor.calls == [(["Slides"], "tip")]

    dismissed = client.delete("/api/advice").json()
    assert dismissed["board"]["advice"] is None


def test_input_and_notice(client, store):
    client.put("/api/board/input", json={"text": "draft"})
    assert client.get("/api/board").json()["board"]["input_text"] == "draft"

    store.failing.add("list")
    assert client.post("/api/board/refresh").status_code == 502
    assert client.get("/api/board").json()["board"]["notice"]

    cleared = client.delete("/api/board/notice").json()
    assert cleared["board"]["notice"] is None


def test_input_box_flow_clears_only_on_success(client):
    client.put("/api/board/input", json={"text": "Stretch"})

    response = client.post("/api/tasks", json={})

    board = response.json()["board"]
    assert board["tasks"][0]["title"] == "Stretch"
    assert board["input_text"] == ""


def test_api_calls_with_text_leave_input_box_alone(client, planning):
    planning.items = [PlannerItem(time="09:00", task="Run")]
    client.put("/api/board/input", json={"text": "half-typed"})

    client.post("/api/tasks", json={"title": "Buy milk"})
    expanded = client.post("/api/tasks/expand", json={"text": "Fitness"})

    assert expanded.status_code == 200
    assert planning.calls == ["Fitness"]
    assert client.get("/api/board").json()["board"]["input_text"] == "half-typed"

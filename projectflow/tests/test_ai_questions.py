"""Contract tests for POST /api/ai/generate-questions."""

import asyncio
import time

import pytest
from httpx import ASGITransport, AsyncClient

from projectflow.features.ai.completion import get_completion_client
from projectflow.tests.fakes import FakeCompletionClient

USER = {"X-User-Id": "user_questions"}
BODY = {"projectName": "Task Flow", "projectDescription": "A kanban board for small teams"}


def _question(text, **extra):
    return {"questionText": text, "section": "technical", "inputType": "textarea", **extra}


def test_returns_exactly_three_normalized_questions(client, fake_llm):
    fake_llm.queue({"questions": [_question("Who uses it?"), _question("Which platforms?"), _question("Any deadlines?")]})

    resp = client.post("/api/ai/generate-questions", json=BODY, headers=USER)

    assert resp.status_code == 200
    questions = resp.json()["questions"]
    assert len(questions) == 3
    assert [q["orderIndex"] for q in questions] == [1, 2, 3]
    for q in questions:
        assert set(q) == {"questionText", "section", "inputType", "placeholderText", "isRequired", "orderIndex"}
        assert q["isRequired"] is True


def test_accepts_bare_array_in_code_fence(client, fake_llm):
    fake_llm.queue(
        '```json\n[{"questionText": "A?"}, {"questionText": "B?"}, {"questionText": "C?", "section": "weird"}]\n```'
    )

    resp = client.post("/api/ai/generate-questions", json=BODY, headers=USER)

    assert resp.status_code == 200
    questions = resp.json()["questions"]
    assert [q["questionText"] for q in questions] == ["A?", "B?", "C?"]
    assert questions[2]["section"] == "general"
    assert questions[0]["inputType"] == "textarea"


@pytest.mark.parametrize("count", [2, 4])
def test_wrong_question_count_is_an_upstream_error(client, fake_llm, count):
    fake_llm.queue({"questions": [_question(f"Q{i}?") for i in range(count)]})

    resp = client.post("/api/ai/generate-questions", json=BODY, headers=USER)

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "invalid_format"


def test_non_array_questions_rejected(client, fake_llm):
    fake_llm.queue({"questions": "three questions"})

    resp = client.post("/api/ai/generate-questions", json=BODY, headers=USER)

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "invalid_format"


def test_malformed_json_from_provider(client, fake_llm):
    fake_llm.queue("Sure! Here are your questions: 1. ...")

    resp = client.post("/api/ai/generate-questions", json=BODY, headers=USER)

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "invalid_provider_json"


def test_missing_fields_are_a_validation_error(client, fake_llm):
    resp = client.post("/api/ai/generate-questions", json={"projectName": "Task Flow"}, headers=USER)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "validation_error"
    assert "projectDescription" in body["error"]["message"]
    assert fake_llm.requests == []


def test_blank_project_name_is_rejected(client):
    resp = client.post("/api/ai/generate-questions", json={**BODY, "projectName": "   "}, headers=USER)
    assert resp.status_code == 400


def test_requires_a_user(client):
    resp = client.post("/api/ai/generate-questions", json=BODY)
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


def test_prompt_mentions_project_and_requests_json(client, fake_llm):
    fake_llm.queue({"questions": [_question("A?"), _question("B?"), _question("C?")]})

    client.post("/api/ai/generate-questions", json=BODY, headers=USER)

    request = fake_llm.last_request
    assert request.json_mode is True
    assert "Task Flow" in request.user
    assert "A kanban board for small teams" in request.user


@pytest.mark.asyncio
async def test_slow_generation_does_not_stall_other_requests():
    from projectflow.main import app

    slow = FakeCompletionClient({"questions": [_question("A?"), _question("B?"), _question("C?")]}, delay=1.0)
    app.dependency_overrides[get_completion_client] = lambda: slow
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            generation = asyncio.create_task(ac.post("/api/ai/generate-questions", json=BODY, headers=USER))
            await asyncio.sleep(0.1)

            started = time.perf_counter()
            health = await ac.get("/healthz")
            elapsed = time.perf_counter() - started

            generated = await generation
    finally:
        app.dependency_overrides.clear()

    assert health.status_code == 200
    assert elapsed < 0.5
    assert generated.status_code == 200
    assert len(generated.json()["questions"]) == 3

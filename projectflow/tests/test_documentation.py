"""Documentation endpoint and PDF rendering."""

import base64
import re

from projectflow.features.documentation.renderer import render_documentation

USER = {"X-User-Id": "user_docs"}

TASK_FLOW_DOC = """# Task Flow Documentation

Task Flow is a kanban board for small teams.

## Features

### Task Creation
Users create tasks with a title and description.
"""


def pdf_page_count(pdf: bytes) -> int:
    counts = [int(c) for c in re.findall(rb"/Count (\d+)", pdf)]
    return max(counts) if counts else 0


def test_task_flow_documentation_scenario(client, fake_llm):
    fake_llm.queue(TASK_FLOW_DOC)

    resp = client.post(
        "/api/ai/generate-documentation",
        json={
            "projectName": "Task Flow",
            "projectDescription": "A kanban board for small teams",
            "features": [
                {
                    "title": "Task Creation",
                    "description": "Users create tasks",
                    "priority": "High",
                    "effort": "Medium",
                    "category": "Core",
                }
            ],
        },
        headers=USER,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["documentation"]
    assert "Task Flow" in body["documentation"]
    assert body["pdfBase64"]

    pdf = base64.b64decode(body["pdfBase64"])
    assert pdf.startswith(b"%PDF")
    assert pdf_page_count(pdf) >= 1
    assert body["pageCount"] == pdf_page_count(pdf)


def test_documentation_prompt_uses_stack_and_summary(client, fake_llm):
    fake_llm.queue(TASK_FLOW_DOC)

    client.post(
        "/api/ai/generate-documentation",
        json={
            "projectName": "Task Flow",
            "projectDescription": "Kanban",
            "techStack": {"name": "Next.js + Convex"},
            "summary": {"overview": "Boards for agencies"},
        },
        headers=USER,
    )

    prompt = fake_llm.last_request.user
    assert "Next.js + Convex" in prompt
    assert "Boards for agencies" in prompt


def test_documentation_requires_description(client):
    resp = client.post("/api/ai/generate-documentation", json={"projectName": "Task Flow"}, headers=USER)
    assert resp.status_code == 400


def test_long_documentation_renders_multiple_pages():
    body = "\n".join(f"Line {i}" for i in range(80))

    pdf_bytes, pdf_base64, page_count = render_documentation(body, "Task Flow", "Next.js")

    assert page_count == 3
    assert pdf_page_count(pdf_bytes) == 3
    assert base64.b64decode(pdf_base64) == pdf_bytes


def test_empty_documentation_still_renders_one_page():
    pdf_bytes, _, page_count = render_documentation("", "Task Flow")

    assert page_count == 1
    assert pdf_bytes.startswith(b"%PDF")

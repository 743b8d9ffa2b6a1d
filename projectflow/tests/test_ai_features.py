"""Contract tests for POST /api/ai/generate-features."""

USER = {"X-User-Id": "user_features"}
BODY = {
    "projectName": "Task Flow",
    "projectDescription": "A kanban board for small teams",
    "questionAnswers": [{"questionText": "Who uses it?", "answer": "Agencies"}],
}


def _feature(title, **extra):
    return {
        "title": title,
        "description": f"{title} description",
        "priority": "High",
        "effort": "Medium",
        "category": "Core",
        **extra,
    }


def test_returns_exactly_one_feature(client, fake_llm):
    fake_llm.queue({"features": [_feature("Task Creation")]})

    resp = client.post("/api/ai/generate-features", json=BODY, headers=USER)

    assert resp.status_code == 200
    features = resp.json()["features"]
    assert features == [
        {
            "title": "Task Creation",
            "description": "Task Creation description",
            "priority": "High",
            "effort": "Medium",
            "category": "Core",
        }
    ]


def test_extra_items_are_truncated(client, fake_llm):
    fake_llm.queue({"features": [_feature("Boards"), _feature("Labels"), _feature("Due Dates")]})

    resp = client.post("/api/ai/generate-features", json=BODY, headers=USER)

    assert resp.status_code == 200
    assert [f["title"] for f in resp.json()["features"]] == ["Boards"]


def test_skips_titles_already_generated(client, fake_llm):
    fake_llm.queue({"features": [_feature("  task creation "), _feature("Comments")]})
    body = {**BODY, "previousFeatures": ["Task Creation", "Boards"]}

    resp = client.post("/api/ai/generate-features", json=body, headers=USER)

    assert resp.status_code == 200
    features = resp.json()["features"]
    assert len(features) == 1
    assert features[0]["title"] == "Comments"
    assert features[0]["title"].lower() not in {t.lower() for t in body["previousFeatures"]}


def test_only_duplicates_fails(client, fake_llm):
    fake_llm.queue({"features": [_feature("Boards")]})
    body = {**BODY, "previousFeatures": ["Boards"]}

    resp = client.post("/api/ai/generate-features", json=body, headers=USER)

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "duplicate_feature"


def test_previous_features_are_listed_in_prompt(client, fake_llm):
    fake_llm.queue({"features": [_feature("Comments")]})

    client.post("/api/ai/generate-features", json={**BODY, "previousFeatures": ["Boards"]}, headers=USER)

    prompt = fake_llm.last_request.user
    assert "DO NOT DUPLICATE" in prompt
    assert "1. Boards" in prompt
    assert "Agencies" in prompt


def test_missing_values_get_defaults(client, fake_llm):
    fake_llm.queue({"features": [{"title": "", "priority": "urgent", "effort": "xl", "category": "ui/ux"}]})

    resp = client.post("/api/ai/generate-features", json=BODY, headers=USER)

    assert resp.status_code == 200
    feature = resp.json()["features"][0]
    assert feature["title"] == "Untitled Feature"
    assert feature["description"] == ""
    assert feature["priority"] == "Medium"
    assert feature["effort"] == "XL"
    assert feature["category"] == "UI/UX"


def test_empty_feature_list_is_invalid(client, fake_llm):
    fake_llm.queue({"features": []})

    resp = client.post("/api/ai/generate-features", json=BODY, headers=USER)

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "invalid_format"


def test_null_optional_lists_are_accepted(client, fake_llm):
    fake_llm.queue({"features": [_feature("Boards")]})
    body = {**BODY, "questionAnswers": None, "previousFeatures": None}

    resp = client.post("/api/ai/generate-features", json=body, headers=USER)

    assert resp.status_code == 200
    assert "No additional answers provided." in fake_llm.last_request.user

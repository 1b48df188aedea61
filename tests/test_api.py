# tests/test_api.py
from fastapi import status

from conftest import GOOD_ANSWER


def create(client, **config):
    response = client.post("/api/interview/sessions", json=config)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "healthy"
    assert response.json()["oracle_enabled"] is False


# ============================================================================
# INTERVIEW
# ============================================================================

def test_session_lifecycle(client):
    created = create(client, duration_minutes=4, user_id="u1")
    session_id = created["session_id"]
    assert created["status"] == "created"
    assert created["total_questions"] == 2
    assert created["current_question"]["id"]

    started = client.post(f"/api/interview/sessions/{session_id}/start").json()
    assert started["status"] == "active"

    response = client.post(
        f"/api/interview/sessions/{session_id}/respond",
        json={"text": GOOD_ANSWER, "time_spent_seconds": 120},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["question_number"] == 2

    assert client.post(f"/api/interview/sessions/{session_id}/pause").json()["status"] == "paused"
    assert client.post(f"/api/interview/sessions/{session_id}/resume").json()["status"] == "active"

    finished = client.post(f"/api/interview/sessions/{session_id}/skip", json={"time_spent_seconds": 3}).json()
    assert finished["status"] == "completed"
    assert finished["current_question"] is None
    assert finished["overall_score"] is not None

    session = client.get(f"/api/interview/sessions/{session_id}").json()
    assert session["status"] == "completed"
    assert [r["skipped"] for r in session["responses"]] == [False, True]
    assert len(session["evaluation"]["evaluations"]) == 1


def test_create_with_empty_body_uses_defaults(client):
    response = client.post("/api/interview/sessions")
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["total_questions"] == 30


def test_bad_config_is_rejected(client):
    response = client.post("/api/interview/sessions", json={"duration_minutes": 0})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_session_is_404(client):
    assert client.get("/api/interview/sessions/interview_missing").status_code == 404
    assert client.post("/api/interview/sessions/interview_missing/start").status_code == 404


def test_invalid_transition_is_409(client):
    session_id = create(client, duration_minutes=4)["session_id"]
    response = client.post(f"/api/interview/sessions/{session_id}/respond", json={"text": "too early"})
    assert response.status_code == status.HTTP_409_CONFLICT

    client.post(f"/api/interview/sessions/{session_id}/abandon")
    assert client.post(f"/api/interview/sessions/{session_id}/start").status_code == 409


def test_negative_time_is_422(client):
    session_id = create(client, duration_minutes=4)["session_id"]
    client.post(f"/api/interview/sessions/{session_id}/start")
    response = client.post(
        f"/api/interview/sessions/{session_id}/respond",
        json={"text": "answer", "time_spent_seconds": -1},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_history_and_active(client):
    live_id = create(client, duration_minutes=4, user_id="u1")["session_id"]
    done_id = create(client, duration_minutes=4, user_id="u2")["session_id"]
    client.post(f"/api/interview/sessions/{done_id}/complete")

    assert [s["session_id"] for s in client.get("/api/interview/active").json()] == [live_id]
    assert [s["session_id"] for s in client.get("/api/interview/history").json()] == [done_id]
    assert client.get("/api/interview/history", params={"user_id": "u1"}).json() == []
    assert client.get("/api/interview/history", params={"status": "completed"}).json()[0]["session_id"] == done_id


def test_export(client):
    session_id = create(client, duration_minutes=4)["session_id"]

    response = client.get(f"/api/interview/sessions/{session_id}/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json()["session"]["id"] == session_id

    as_dict = client.get(f"/api/interview/sessions/{session_id}/export", params={"format": "dict"})
    assert as_dict.json()["statistics"]["status"] == "created"

    assert client.get(f"/api/interview/sessions/{session_id}/export", params={"format": "xml"}).status_code == 422


def test_follow_ups_and_coaching_fall_back(client):
    session_id = create(client, duration_minutes=4)["session_id"]
    client.post(f"/api/interview/sessions/{session_id}/start")

    assert client.post(f"/api/interview/sessions/{session_id}/follow-ups").status_code == 409

    client.post(f"/api/interview/sessions/{session_id}/respond", json={"text": GOOD_ANSWER})
    follow_ups = client.post(f"/api/interview/sessions/{session_id}/follow-ups").json()
    assert follow_ups["source"] == "fallback"
    assert len(follow_ups["follow_up_questions"]) == 2

    coaching = client.post(
        f"/api/interview/sessions/{session_id}/coaching",
        json={"response_text": "I would start by"},
    ).json()
    assert coaching["source"] == "fallback"


# ============================================================================
# REPORT
# ============================================================================

def test_report_requires_finished_session(client):
    session_id = create(client, duration_minutes=4)["session_id"]
    assert client.get(f"/api/report/{session_id}").status_code == 409
    assert client.get("/api/report/interview_missing").status_code == 404


def test_report_and_summary(client):
    session_id = create(client, duration_minutes=4, user_id="u1")["session_id"]
    client.post(f"/api/interview/sessions/{session_id}/start")
    client.post(f"/api/interview/sessions/{session_id}/respond", json={"text": GOOD_ANSWER, "time_spent_seconds": 90})
    client.post(f"/api/interview/sessions/{session_id}/respond", json={"text": "", "time_spent_seconds": 90})

    report = client.get(f"/api/report/{session_id}").json()
    assert report["session_id"] == session_id
    assert len(report["evaluations"]) == 2
    assert report["performance_tracking"]["current"]["user_id"] == "u1"

    summary = client.get(f"/api/report/{session_id}/summary").json()
    assert summary["overall_score"] == report["overall_score"]
    assert summary["level"] == report["feedback"]["overall"]["level"]
    assert summary["statistics"]["answered_questions"] == 2
    assert len(summary["suggestions"]) <= 5


def test_summary_reads_the_session_once(client, manager, monkeypatch):
    session_id = create(client, duration_minutes=4)["session_id"]
    client.post(f"/api/interview/sessions/{session_id}/abandon")

    original = manager.get_session
    reads = []

    async def evicted_after_first_read(requested_id):
        reads.append(requested_id)
        return await original(requested_id) if len(reads) == 1 else None

    monkeypatch.setattr(manager, "get_session", evicted_after_first_read)

    response = client.get(f"/api/report/{session_id}/summary")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["statistics"]["status"] == "abandoned"
    assert reads == [session_id]


def test_performance_history(client):
    for _ in range(2):
        session_id = create(client, duration_minutes=4, user_id="u7")["session_id"]
        client.post(f"/api/interview/sessions/{session_id}/abandon")

    performance = client.get("/api/report/performance/u7").json()
    assert performance["sessions"] == 2
    assert performance["trends"]["direction"] == "stable"
    assert client.get("/api/report/performance/nobody").json()["sessions"] == 0


# ============================================================================
# METADATA
# ============================================================================

def test_list_questions_with_filters(client):
    response = client.get(
        "/api/metadata/questions",
        params={"type": "general", "difficulty": ["easy"]},
    )
    assert {q["id"] for q in response.json()} == {"gen_001", "gen_002"}

    limited = client.get("/api/metadata/questions", params={"limit": 3}).json()
    assert len(limited) == 3


def test_add_custom_question(client):
    response = client.post("/api/metadata/questions", json={
        "text": "How do you keep on-call sustainable?",
        "type": "situational",
        "difficulty": "medium",
        "tags": ["on-call"],
    })
    assert response.status_code == status.HTTP_201_CREATED
    question = response.json()
    assert question["is_custom"] is True

    found = client.get("/api/metadata/questions", params={"tags": "on-call"}).json()
    assert [q["id"] for q in found] == [question["id"]]

    assert client.post("/api/metadata/questions", json={"text": "", "type": "general", "difficulty": "easy"}).status_code == 422


def test_edit_and_delete_custom_question(client):
    question = client.post("/api/metadata/questions", json={
        "text": "What makes a good code review?",
        "type": "general",
        "difficulty": "easy",
    }).json()
    url = f"/api/metadata/questions/{question['id']}"

    updated = client.patch(url, json={"difficulty": "hard", "tags": ["reviews"]})
    assert updated.status_code == status.HTTP_200_OK
    assert updated.json()["difficulty"] == "hard"
    assert updated.json()["text"] == question["text"]
    assert client.get(url).json()["tags"] == ["reviews"]

    assert client.patch(url, json={"type": None}).status_code == status.HTTP_400_BAD_REQUEST

    assert client.delete(url).json()["id"] == question["id"]
    assert client.get(url).status_code == status.HTTP_404_NOT_FOUND
    assert client.delete(url).status_code == status.HTTP_404_NOT_FOUND


def test_built_in_questions_cannot_be_edited(client):
    assert client.get("/api/metadata/questions/beh_001").status_code == status.HTTP_200_OK
    assert client.patch("/api/metadata/questions/beh_001", json={"text": "x"}).status_code == 404
    assert client.delete("/api/metadata/questions/beh_001").status_code == 404


def test_export_then_import_questions(client):
    exported = client.get("/api/metadata/questions/export", params={"company": "google"})
    assert exported.status_code == status.HTTP_200_OK
    assert exported.headers["content-type"].startswith("application/json")
    document = exported.json()
    assert document["metadata"]["total_questions"] == 2

    result = client.post("/api/metadata/questions/import", json=document).json()
    assert result == {"imported": 2, "total": 2}

    stats = client.get("/api/metadata/stats").json()
    assert stats["custom"] == 2

    assert client.post("/api/metadata/questions/import", json={"items": []}).status_code == 422


def test_reference_data(client):
    filters = client.get("/api/metadata/filters").json()
    assert "company-specific" in filters["types"]
    assert filters["difficulties"] == ["easy", "medium", "hard"]

    stats = client.get("/api/metadata/stats").json()
    assert stats["total"] == sum(stats["by_type"].values())

    assert client.get("/api/metadata/roles/frontend-developer/tags").json() == [
        "frontend", "javascript", "react", "css",
    ]
    assert len(client.get("/api/metadata/tips/behavioral").json()) == 4


def test_star_analysis(client):
    result = client.post("/api/metadata/star-analysis", json={"response_text": ""}).json()
    assert result["score"] == 0
    assert result["missing"] == ["situation", "task", "action", "result"]


def test_personalized_questions_without_oracle(client):
    response = client.post("/api/metadata/questions/personalized", json={"role": "backend-developer"})
    assert response.status_code == 200
    assert response.json() == []

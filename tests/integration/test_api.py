"""
HTTP API tests against the in-process FastAPI app.
"""
import uuid

import pytest
from fastapi.testclient import TestClient

from quizattempts.database import check_connection, get_db
from quizattempts.main import app, drain_outbox
from quizattempts.models import AttemptEvent
from quizattempts.services.event_publisher import EventPublisher
from tests.helpers import FakeRedis, mc_question


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def quiz_id(client):
    response = client.post("/api/quizzes", json={
        "title": "Cell biology",
        "difficulty": "medium",
        "estimated_time_minutes": 10,
        "questions": [
            mc_question("q1", 0, subject_area="factual_recall"),
            {
                "question_id": "q2",
                "type": "true_false",
                "question": "Cells have membranes.",
                "options": ["True", "False"],
                "correct_answer": True,
                "subject_area": "conceptual_understanding",
            },
            {
                "question_id": "q3",
                "type": "fill_in_blank",
                "question": "The ____ stores genetic material.",
                "correct_answer": "nucleus",
            },
        ],
    })
    assert response.status_code == 201
    return response.json()["quiz_id"]


@pytest.fixture
def user_id():
    return str(uuid.uuid4())


def start(client, quiz_id, user_id):
    return client.post(f"/api/quizzes/{quiz_id}/attempts", json={"user_id": user_id})


class TestService:
    def test_health(self, client, engine, monkeypatch):
        monkeypatch.setattr("quizattempts.main.check_connection", lambda: check_connection(engine))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["dependencies"] == {"database": "ok", "redis": "disabled"}
        assert "X-Process-Time" in response.headers

    def test_health_without_database(self, client, monkeypatch):
        monkeypatch.setattr("quizattempts.main.check_connection", lambda: False)

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["dependencies"]["database"] == "unreachable"

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/health"

    def test_startup_drains_pending_events(self, db, session_factory, monkeypatch):
        db.add(AttemptEvent(
            event_type="points_awarded",
            attempt_id=uuid.uuid4(),
            user_id=uuid.uuid4(),
            payload={"amount": 0},
        ))
        db.commit()
        transport = FakeRedis()
        monkeypatch.setattr("quizattempts.main.SessionLocal", session_factory)
        monkeypatch.setattr(
            "quizattempts.main.event_publisher",
            EventPublisher(redis_client=transport, key="test:events"),
        )

        assert drain_outbox() == 1
        assert len(transport.lists["test:events"]) == 1


class TestQuizzes:
    def test_public_view_hides_answer_key(self, client, quiz_id):
        response = client.get(f"/api/quizzes/{quiz_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["total_questions"] == 3
        assert all("correct_answer" not in q for q in body["questions"])

    def test_unknown_quiz(self, client):
        response = client.get(f"/api/quizzes/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "quiz_not_found"

    def test_invalid_answer_key_rejected(self, client):
        response = client.post("/api/quizzes", json={
            "questions": [mc_question("q1", correct=7)],
        })
        assert response.status_code == 422

    def test_unanswerable_text_key_rejected(self, client):
        response = client.post("/api/quizzes", json={
            "questions": [{
                "question_id": "q1",
                "type": "fill_in_blank",
                "question": "Name the ____.",
                "correct_answer": "x" * 150,
            }],
        })
        assert response.status_code == 422

    def test_unknown_difficulty_rejected(self, client):
        response = client.post("/api/quizzes", json={
            "difficulty": "brutal",
            "questions": [mc_question("q1")],
        })
        assert response.status_code == 422


class TestAttemptFlow:
    def test_full_attempt(self, client, quiz_id, user_id):
        response = start(client, quiz_id, user_id)
        assert response.status_code == 201
        attempt_id = response.json()["attempt_id"]

        answers = [("q1", "A"), ("q2", "true"), ("q3", "  Nucleus ")]
        for question_id, answer in answers:
            response = client.put(
                f"/api/attempts/{attempt_id}/answers",
                json={"question_id": question_id, "answer": answer, "time_spent_ms": 5000},
            )
            assert response.status_code == 200
            assert response.json()["is_correct"] is True

        assert response.json()["is_quiz_complete"] is True

        response = client.post(f"/api/attempts/{attempt_id}/complete")
        assert response.status_code == 200
        result = response.json()
        assert result["score"] == 3
        assert result["percentage"] == 100.0
        assert result["performance_level"] == "excellent"
        # 10 * 3 * 1.5 * 1.2
        assert result["points_earned"] == 54
        assert {s["area"] for s in result["strengths"]} == {
            "factual_recall", "conceptual_understanding", "procedural_knowledge"
        }

        results = client.get(f"/api/attempts/{attempt_id}/results").json()
        assert results["has_passed"] is True
        assert results["question_details"][2]["user_answer"] == "Nucleus"

    def test_start_is_idempotent(self, client, quiz_id, user_id):
        first = start(client, quiz_id, user_id)
        second = start(client, quiz_id, user_id)

        assert second.status_code == 200
        assert second.json()["is_existing"] is True
        assert second.json()["attempt_id"] == first.json()["attempt_id"]

    def test_get_attempt(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]

        body = client.get(f"/api/attempts/{attempt_id}").json()

        assert body["status"] == "in_progress"
        assert body["answers"] == []
        assert body["completed_at"] is None

    def test_unknown_question(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]

        response = client.put(
            f"/api/attempts/{attempt_id}/answers",
            json={"question_id": "nope", "answer": 0},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "question_not_found"

    def test_malformed_answer(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]

        response = client.put(
            f"/api/attempts/{attempt_id}/answers",
            json={"question_id": "q2", "answer": "perhaps"},
        )

        assert response.status_code == 422
        assert response.json() == {
            "error": "validation_error",
            "message": "True/false answer must be true, false, 0, or 1",
            "field": "answer",
        }

    def test_non_decimal_digit_answer(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]

        response = client.put(
            f"/api/attempts/{attempt_id}/answers",
            json={"question_id": "q1", "answer": "\u00b2"},
        )

        assert response.status_code == 422
        assert response.json()["field"] == "answer"

    def test_terminal_attempt_rejects_changes(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]
        assert client.post(f"/api/attempts/{attempt_id}/complete").status_code == 200

        response = client.post(f"/api/attempts/{attempt_id}/complete")
        assert response.status_code == 409
        assert response.json()["error"] == "invalid_state"

        response = client.put(
            f"/api/attempts/{attempt_id}/answers",
            json={"question_id": "q1", "answer": 0},
        )
        assert response.status_code == 409

    def test_abandon(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]

        response = client.post(f"/api/attempts/{attempt_id}/abandon")

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["status"] == "abandoned"
        assert client.get(f"/api/attempts/{attempt_id}/results").status_code == 409

    def test_unknown_attempt(self, client):
        response = client.post(f"/api/attempts/{uuid.uuid4()}/complete")
        assert response.status_code == 404
        assert response.json()["error"] == "attempt_not_found"


class TestAnalytics:
    def test_user_stats_and_leaderboard(self, client, quiz_id, user_id):
        attempt_id = start(client, quiz_id, user_id).json()["attempt_id"]
        client.put(f"/api/attempts/{attempt_id}/answers", json={"question_id": "q1", "answer": 0})
        client.put(f"/api/attempts/{attempt_id}/answers", json={"question_id": "q2", "answer": False})
        client.post(f"/api/attempts/{attempt_id}/complete")

        stats = client.get(f"/api/users/{user_id}/quiz-stats").json()
        assert stats["total_attempts"] == 1
        assert stats["best_percentage"] == 50.0

        history = client.get(f"/api/users/{user_id}/attempts").json()
        assert [a["attempt_id"] for a in history] == [attempt_id]

        response = client.get(f"/api/users/{user_id}/attempts", params={"status": "paused"})
        assert response.status_code == 422
        assert response.json()["field"] == "status"

        board = client.get(f"/api/quizzes/{quiz_id}/leaderboard").json()
        assert board[0]["rank"] == 1
        assert board[0]["user_id"] == user_id

        listing = client.get(f"/api/quizzes/{quiz_id}/attempts").json()
        assert [(a["attempt_id"], a["user_id"]) for a in listing] == [(attempt_id, user_id)]
        assert client.get(f"/api/quizzes/{uuid.uuid4()}/attempts").status_code == 404

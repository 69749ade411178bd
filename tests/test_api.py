"""Tests for the HTTP API."""

import json

from fastapi.testclient import TestClient

from life_tracker.api.app import create_app
from life_tracker.containers import AppContainer
from life_tracker.domain.entities import ScheduleItem
from life_tracker.services.executor import DomainHandles
from life_tracker.services.intents import IntentParser
from tests.conftest import FakeIntentModelClient, FakeNutritionClient


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_voice_understand_returns_actions(
    container: AppContainer, model_client: FakeIntentModelClient
) -> None:
    model_client.output_text = json.dumps(
        {"actions": [{"intent": "edit_schedule", "itemTitle": "gym", "endTime": "9"}]}
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/voice/understand",
        json={"transcript": "move gym", "languageHint": "en", "today": "2026-03-01"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "actions": [{"intent": "edit_schedule", "itemTitle": "gym"}]
    }
    assert "today is 2026-03-01" in model_client.prompts[0]


def test_voice_command_applies_actions(
    container: AppContainer,
    model_client: FakeIntentModelClient,
    handles: DomainHandles,
) -> None:
    handles.schedule.records = [
        ScheduleItem(
            id="s1",
            title="Morning workout",
            start_time="06:00",
            end_time="07:00",
            category="Exercise",
        )
    ]
    model_client.output_text = json.dumps(
        {
            "actions": [
                {
                    "intent": "edit_schedule",
                    "itemTitle": "workout",
                    "startTime": "07:00",
                },
                {"intent": "delete_goal", "goalType": "savings"},
            ]
        }
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/voice/command", json={"transcript": "workout at seven", "userId": "u1"}
    )

    body = response.json()
    assert response.status_code == 200
    assert [result["success"] for result in body["results"]] == [True, False]
    assert body["successMessage"] == "Updated Morning workout"
    assert body["failureMessage"] == "Goal not found"
    assert handles.schedule.updated == [("s1", {"start_time": "07:00"})]


def test_foods_search(
    container: AppContainer, nutrition_client: FakeNutritionClient
) -> None:
    nutrition_client.payloads["100g oats"] = [
        {"name": "oats", "calories": 389, "protein_g": 16.9, "serving_size_g": 100}
    ]
    client = TestClient(create_app(container))

    response = client.get("/foods/search", params={"q": "oats", "limit": 5})

    assert response.status_code == 200
    assert response.json() == {
        "items": [
            {
                "name": "oats",
                "calories": 389,
                "protein": 16.9,
                "carbs": 0.0,
                "fats": 0.0,
                "referenceGrams": 100.0,
            }
        ]
    }


def test_errors_map_to_status_codes(
    container: AppContainer,
    model_client: FakeIntentModelClient,
    intent_parser: IntentParser,
) -> None:
    client = TestClient(create_app(container))

    empty = client.post("/voice/understand", json={"transcript": "  "})
    model_client.output_text = "no json"
    malformed = client.post("/voice/understand", json={"transcript": "hello"})
    intent_parser.client = None
    unavailable = client.post("/voice/understand", json={"transcript": "hello"})

    assert empty.status_code == 400
    assert empty.json() == {"error": "Transcript is empty"}
    assert malformed.status_code == 502
    assert unavailable.status_code == 503
    assert "OPENAI_API_KEY" in unavailable.json()["error"]


def test_local_environment_adds_debug_detail(
    container: AppContainer, model_client: FakeIntentModelClient
) -> None:
    container.settings.environment = "local"
    model_client.output_text = '{"actions": [}'
    client = TestClient(create_app(container))

    response = client.post("/voice/understand", json={"transcript": "hello"})

    assert response.status_code == 502
    assert "(debug: JSONDecodeError" in response.json()["error"]


def test_lifespan_closes_resources(container: AppContainer) -> None:
    closed: list[bool] = []

    async def close_resources() -> None:
        closed.append(True)

    container.close_resources = close_resources

    with TestClient(create_app(container)) as client:
        client.get("/health")

    assert closed == [True]

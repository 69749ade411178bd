"""Tests for the voice assistant service."""

import asyncio
import json
from dataclasses import dataclass

import pytest

from life_tracker.domain.entities import DailyCheckIn, Goal
from life_tracker.domain.errors import MalformedResponseError
from life_tracker.services.executor import ActionExecutor, DomainHandles
from life_tracker.services.intents import IntentParser
from life_tracker.services.voice import VoiceAssistant
from tests.conftest import (
    FakeIntentModelClient,
    InMemoryStore,
    all_stores,
    make_handles,
)

SLEEP_AND_GOAL = {
    "actions": [
        {"intent": "log_sleep", "sleepHours": 7},
        {"intent": "add_goal", "type": "savings", "target": 100, "period": "monthly"},
    ]
}


@dataclass
class SlowStore(InMemoryStore):
    """Store whose inserts take a little while."""

    delay_seconds: float = 0.05

    async def add(self, payload: dict[str, object]) -> object:
        await asyncio.sleep(self.delay_seconds)
        return await super().add(payload)


def test_handle_parses_then_executes(
    intent_parser: IntentParser,
    executor: ActionExecutor,
    model_client: FakeIntentModelClient,
    handles: DomainHandles,
) -> None:
    model_client.output_text = json.dumps(SLEEP_AND_GOAL)
    assistant = VoiceAssistant(parser=intent_parser, executor=executor)

    outcome = asyncio.run(assistant.handle("slept 7 hours, save 100 a month", handles))

    payload = outcome.to_payload()
    assert [action["intent"] for action in payload["actions"]] == [
        "log_sleep",
        "add_goal",
    ]
    assert payload["successMessage"] == (
        "Done: Logged 7h sleep, Added monthly savings goal (100)"
    )
    assert payload["failureMessage"] is None
    assert len(handles.goals.added) == 1


def test_understand_never_touches_stores(
    intent_parser: IntentParser,
    executor: ActionExecutor,
    model_client: FakeIntentModelClient,
    handles: DomainHandles,
) -> None:
    model_client.output_text = json.dumps(SLEEP_AND_GOAL)
    assistant = VoiceAssistant(parser=intent_parser, executor=executor)

    result = asyncio.run(assistant.understand("slept 7 hours"))

    assert len(result.actions) == 2
    assert all(store.mutation_count == 0 for store in all_stores(handles))


def test_parse_failure_executes_nothing(
    intent_parser: IntentParser,
    executor: ActionExecutor,
    model_client: FakeIntentModelClient,
    handles: DomainHandles,
) -> None:
    model_client.output_text = "no json here"
    assistant = VoiceAssistant(parser=intent_parser, executor=executor)

    with pytest.raises(MalformedResponseError):
        asyncio.run(assistant.handle("slept 7 hours", handles))
    assert all(store.mutation_count == 0 for store in all_stores(handles))


def test_cancelled_caller_does_not_abort_execution(
    intent_parser: IntentParser,
    executor: ActionExecutor,
    model_client: FakeIntentModelClient,
) -> None:
    model_client.output_text = json.dumps(SLEEP_AND_GOAL)
    assistant = VoiceAssistant(parser=intent_parser, executor=executor)
    handles = make_handles()
    handles.check_ins = SlowStore(DailyCheckIn, "checkin")
    handles.goals = SlowStore(Goal, "goal")

    async def scenario() -> None:
        task = asyncio.create_task(assistant.handle("slept 7 hours", handles))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0.3)

    asyncio.run(scenario())

    assert len(handles.check_ins.added) == 1
    assert len(handles.goals.added) == 1

"""Shared test fixtures."""

import json
from dataclasses import dataclass, field, replace
from datetime import date
from typing import TypeVar

import pytest

from life_tracker.adapters.ninjas_client import NutritionClient
from life_tracker.config import Settings
from life_tracker.containers import AppContainer
from life_tracker.domain.entities import (
    DailyCheckIn,
    FoodEntry,
    Goal,
    ScheduleItem,
    Transaction,
    Workout,
)
from life_tracker.domain.errors import VoiceError
from life_tracker.services.cache import InMemoryCache
from life_tracker.services.executor import ActionExecutor, DomainHandles, DomainStore
from life_tracker.services.intents import IntentModelClient, IntentParser
from life_tracker.services.nutrition import NutritionResolver
from life_tracker.services.voice import VoiceAssistant

TODAY = date(2026, 3, 14)

EntityT = TypeVar("EntityT")


@dataclass
class FakeNutritionClient(NutritionClient):
    """Fake API Ninjas client keyed by query text."""

    payloads: dict[str, object] = field(default_factory=dict)
    default_payload: object = field(default_factory=list)
    errors: list[VoiceError] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)

    async def lookup(self, query: str) -> object:
        self.queries.append(query)
        if self.errors:
            raise self.errors.pop(0)
        return self.payloads.get(query, self.default_payload)


@dataclass
class FakeIntentModelClient(IntentModelClient):
    """Fake language model returning canned text."""

    output_text: str = ""
    prompts: list[str] = field(default_factory=list)

    @classmethod
    def returning(cls, payload: object) -> "FakeIntentModelClient":
        return cls(output_text=json.dumps(payload))

    async def complete(self, *, model: str, store: bool, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.output_text


@dataclass
class InMemoryStore(DomainStore[EntityT]):
    """In-memory domain store that records every mutation."""

    entity_type: type[EntityT]
    prefix: str
    records: list[EntityT] = field(default_factory=list)
    added: list[dict[str, object]] = field(default_factory=list)
    updated: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    fail_on_add: Exception | None = None

    def snapshot(self) -> list[EntityT]:
        return list(self.records)

    async def add(self, payload: dict[str, object]) -> EntityT:
        if self.fail_on_add is not None:
            raise self.fail_on_add
        self.added.append(payload)
        entity = self.entity_type(id=f"{self.prefix}-{len(self.added)}", **payload)
        self.records.append(entity)
        return entity

    async def update(self, entity_id: str, patch: dict[str, object]) -> EntityT:
        self.updated.append((entity_id, patch))
        for index, record in enumerate(self.records):
            if record.id == entity_id:
                self.records[index] = replace(record, **patch)
                return self.records[index]
        raise KeyError(entity_id)

    async def delete(self, entity_id: str) -> None:
        self.deleted.append(entity_id)
        self.records = [record for record in self.records if record.id != entity_id]

    @property
    def mutation_count(self) -> int:
        return len(self.added) + len(self.updated) + len(self.deleted)


def make_handles() -> DomainHandles:
    return DomainHandles(
        schedule=InMemoryStore(ScheduleItem, "sched"),
        transactions=InMemoryStore(Transaction, "txn"),
        food_entries=InMemoryStore(FoodEntry, "food"),
        check_ins=InMemoryStore(DailyCheckIn, "checkin"),
        workouts=InMemoryStore(Workout, "workout"),
        goals=InMemoryStore(Goal, "goal"),
    )


def all_stores(handles: DomainHandles) -> list[InMemoryStore]:
    return [
        handles.schedule,
        handles.transactions,
        handles.food_entries,
        handles.check_ins,
        handles.workouts,
        handles.goals,
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
        api_ninjas_key="ninjas-key",
        environment="test",
    )


@pytest.fixture
def nutrition_client() -> FakeNutritionClient:
    return FakeNutritionClient()


@pytest.fixture
def nutrition_resolver(nutrition_client: FakeNutritionClient) -> NutritionResolver:
    return NutritionResolver(
        client=nutrition_client, cache=InMemoryCache(), retry_delay_seconds=0
    )


@pytest.fixture
def model_client() -> FakeIntentModelClient:
    return FakeIntentModelClient()


@pytest.fixture
def intent_parser(
    model_client: FakeIntentModelClient, nutrition_resolver: NutritionResolver
) -> IntentParser:
    return IntentParser(
        client=model_client,
        model="gpt-test",
        nutrition_resolver=nutrition_resolver,
        today_provider=lambda: TODAY,
    )


@pytest.fixture
def executor() -> ActionExecutor:
    return ActionExecutor(today_provider=lambda: TODAY)


@pytest.fixture
def handles() -> DomainHandles:
    return make_handles()


@pytest.fixture
def container(
    settings: Settings,
    nutrition_resolver: NutritionResolver,
    intent_parser: IntentParser,
    executor: ActionExecutor,
    handles: DomainHandles,
) -> AppContainer:
    closed: list[bool] = []

    async def close_resources() -> None:
        closed.append(True)

    return AppContainer(
        settings=settings,
        nutrition_resolver=nutrition_resolver,
        intent_parser=intent_parser,
        action_executor=executor,
        voice_assistant=VoiceAssistant(parser=intent_parser, executor=executor),
        build_handles=lambda user_id: handles,
        close_resources=close_resources,
    )

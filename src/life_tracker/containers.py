"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from life_tracker.adapters.ninjas_client import HttpxNinjasClient
from life_tracker.adapters.openai_intent_client import OpenAIIntentClient
from life_tracker.adapters.supabase_store import build_supabase_handles
from life_tracker.config import Settings, clean_secret
from life_tracker.services.cache import InMemoryCache
from life_tracker.services.executor import ActionExecutor, DomainHandles
from life_tracker.services.intents import IntentParser
from life_tracker.services.nutrition import NutritionResolver
from life_tracker.services.voice import VoiceAssistant

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_resolver: NutritionResolver
    intent_parser: IntentParser
    action_executor: ActionExecutor
    voice_assistant: VoiceAssistant
    build_handles: Callable[[str | None], DomainHandles]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )

    ninjas_key = clean_secret(resolved_settings.api_ninjas_key)
    ninjas_client = None
    if ninjas_key:
        ninjas_client = HttpxNinjasClient.create(
            api_key=ninjas_key,
            base_url=resolved_settings.nutrition_base_url,
            timeout_seconds=resolved_settings.nutrition_timeout_seconds,
        )
    else:
        _logger.warning("API_NINJAS_KEY is not set; nutrition lookups are disabled")

    openai_key = clean_secret(resolved_settings.openai_api_key)
    openai_client = None
    if openai_key:
        openai_client = OpenAIIntentClient.create(
            openai_key, timeout_seconds=resolved_settings.intent_timeout_seconds
        )
    else:
        _logger.warning("OPENAI_API_KEY is not set; voice parsing is disabled")

    nutrition_resolver = NutritionResolver(client=ninjas_client, cache=InMemoryCache())
    intent_parser = IntentParser(
        client=openai_client,
        model=resolved_settings.openai_model,
        nutrition_resolver=nutrition_resolver,
        store=resolved_settings.openai_store,
    )
    action_executor = ActionExecutor()
    voice_assistant = VoiceAssistant(parser=intent_parser, executor=action_executor)

    def build_handles(user_id: str | None) -> DomainHandles:
        return build_supabase_handles(supabase_client, user_id)

    async def close_resources() -> None:
        if ninjas_client is not None:
            await ninjas_client.close()
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrition_resolver=nutrition_resolver,
        intent_parser=intent_parser,
        action_executor=action_executor,
        voice_assistant=voice_assistant,
        build_handles=build_handles,
        close_resources=close_resources,
    )

"""Nutrition resolver backed by the API Ninjas nutrition endpoint."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from life_tracker.adapters.ninjas_client import NutritionClient
from life_tracker.domain.errors import (
    InvalidInputError,
    MalformedResponseError,
    ServiceUnavailableError,
    UpstreamError,
)
from life_tracker.domain.nutrition import (
    REFERENCE_GRAMS,
    NutritionFacts,
    round_calories,
    round_macro,
)
from life_tracker.services.cache import Cache

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

_MAX_SEARCH_LIMIT = 25
_SINGLE_ITEM_KEYS = ("name", "calories", "protein_g")


@dataclass
class NutritionResolver:
    """Turns free-text ingredient queries into normalized macro values."""

    client: NutritionClient | None
    cache: Cache
    search_ttl_seconds: int = 3600
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def resolve(self, query: str) -> NutritionFacts:
        """Return summed nutrition for every food mentioned in the query."""
        trimmed = query.strip() if isinstance(query, str) else ""
        if not trimmed:
            raise InvalidInputError("Ingredient query is empty")
        client = self._require_client()
        payload = await self._call_with_retry(
            lambda: client.lookup(trimmed), action="resolve"
        )
        return aggregate_items(coerce_items(payload), fallback_name=trimmed)

    async def search(self, query: str, limit: int = 10) -> list[NutritionFacts]:
        """Return up to ``limit`` candidates normalized to 100 g each.

        Upstream failures degrade to an empty list.
        """
        trimmed = query.strip() if isinstance(query, str) else ""
        if not trimmed:
            return []
        client = self._require_client()
        bounded = min(max(1, limit), _MAX_SEARCH_LIMIT)
        cache_key = f"ninjas:search:{trimmed.lower()}:{bounded}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        lookup_query = f"{REFERENCE_GRAMS:.0f}g {trimmed}"
        try:
            payload = await self._call_with_retry(
                lambda: client.lookup(lookup_query), action="search"
            )
        except (ServiceUnavailableError, UpstreamError, MalformedResponseError) as exc:
            _logger.warning("Nutrition search failed for %r: %s", trimmed, exc)
            return []

        results = [
            facts_per_reference(item)
            for item in coerce_items(payload)[:bounded]
            if item.get("name") or item.get("calories") is not None
        ]
        self.cache.set(cache_key, results, ttl_seconds=self.search_ttl_seconds)
        return results

    def _require_client(self) -> NutritionClient:
        if self.client is None:
            raise ServiceUnavailableError(
                "Nutrition API not configured (missing API_NINJAS_KEY)"
            )
        return self.client

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[object]]", *, action: str
    ) -> object:
        """Call the upstream, retrying non-success responses briefly."""
        attempt = 0
        while True:
            try:
                return await func()
            except UpstreamError as exc:
                attempt += 1
                _logger.warning(
                    "Nutrition %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def coerce_items(payload: object) -> list[dict[str, object]]:
    """Normalize the three upstream response shapes to a list of items."""
    if isinstance(payload, list):
        candidates = payload
    elif isinstance(payload, dict) and isinstance(payload.get("items"), list):
        candidates = payload["items"]
    elif isinstance(payload, dict) and any(key in payload for key in _SINGLE_ITEM_KEYS):
        candidates = [payload]
    else:
        candidates = []
    return [item for item in candidates if isinstance(item, dict)]


def aggregate_items(
    items: list[dict[str, object]], fallback_name: str
) -> NutritionFacts:
    """Sum macros across items and join their names."""
    if not items:
        return NutritionFacts(
            name=fallback_name, calories=0, protein=0.0, carbs=0.0, fats=0.0
        )
    calories = protein = carbs = fats = 0.0
    names: list[str] = []
    for item in items:
        calories += safe_number(item.get("calories"))
        protein += safe_number(_first_present(item, "protein_g", "protein"))
        carbs += safe_number(item.get("carbohydrates_total_g"))
        fats += safe_number(item.get("fat_total_g"))
        name = item.get("name")
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    calories = estimate_calories(calories, protein, carbs, fats)
    return NutritionFacts(
        name=", ".join(names) if names else fallback_name,
        calories=round_calories(calories),
        protein=round_macro(protein),
        carbs=round_macro(carbs),
        fats=round_macro(fats),
    )


def facts_per_reference(item: dict[str, object]) -> NutritionFacts:
    """Rescale a single upstream item to the 100 g reference portion."""
    raw_name = item.get("name")
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    serving = item.get("serving_size_g")
    serving_grams = (
        float(serving)
        if isinstance(serving, int | float)
        and not isinstance(serving, bool)
        and serving > 0
        else REFERENCE_GRAMS
    )
    scale = REFERENCE_GRAMS / serving_grams
    calories = round_calories(safe_number(item.get("calories")) * scale)
    protein = round_macro(
        safe_number(_first_present(item, "protein_g", "protein")) * scale
    )
    carbs = round_macro(safe_number(item.get("carbohydrates_total_g")) * scale)
    fats = round_macro(safe_number(item.get("fat_total_g")) * scale)
    return NutritionFacts(
        name=name or "Unknown",
        calories=round_calories(estimate_calories(calories, protein, carbs, fats)),
        protein=protein,
        carbs=carbs,
        fats=fats,
    )


def estimate_calories(
    calories: float, protein: float, carbs: float, fats: float
) -> float:
    """Fill in calories from macros when the upstream withheld them.

    Triggers only when calories are exactly zero and some macro is positive.
    """
    if calories == 0 and (protein > 0 or carbs > 0 or fats > 0):
        return round_calories(protein * 4 + carbs * 4 + fats * 9)
    return calories


def safe_number(value: object) -> float:
    """Coerce an upstream field to a non-negative finite number, else zero."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _first_present(item: dict[str, object], *keys: str) -> object:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None

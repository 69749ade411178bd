"""Voice transcript understanding via an LLM plus strict normalization."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from life_tracker.domain.actions import Action, AddFoodAction, ParseResult
from life_tracker.domain.errors import (
    EmptyResponseError,
    InvalidInputError,
    MalformedResponseError,
    NutritionLookupFailedError,
    ServiceUnavailableError,
    VoiceError,
)
from life_tracker.domain.vocabulary import (
    EXPENSE_CATEGORIES,
    GOAL_PERIODS,
    GOAL_TYPES,
    INCOME_CATEGORIES,
    SCHEDULE_CATEGORIES,
    SCHEDULE_RECURRENCES,
    WORKOUT_TYPES,
)
from life_tracker.services.normalization import food_query, normalize_payload
from life_tracker.services.nutrition import NutritionResolver

_logger = logging.getLogger(__name__)

_INTENT_GUIDE = """\
Intents and fields (camelCase keys, omit fields the user did not mention):
- add_schedule: items[] of {{title, startTime, endTime, category, recurrence?, date?}}
- edit_schedule: itemTitle or itemId, then any of title, startTime, endTime, category
- delete_schedule: itemTitle or itemId
- add_transaction: type (income|expense), amount, category, description?, date?, \
isRecurring?
- edit_transaction: description or transactionId, then any of type, amount, \
category, date
- delete_transaction: description or transactionId, date?
- add_workout: title?, type?, durationMinutes?, date?, notes?, \
exercises[]? of {{name, sets, reps, weight?}}
- edit_workout: workoutTitle or workoutId, then any of title, type, \
durationMinutes, notes, date
- delete_workout: workoutTitle or workoutId, date?
- add_food: food, amount, unit, date?, startTime?, endTime?
- edit_food_entry: foodName or entryId, then any of name, calories, protein, \
carbs, fats, date
- delete_food_entry: foodName or entryId, date?
- log_sleep: sleepHours, date?
- edit_check_in: date, sleepHours
- delete_check_in: date
- add_goal: type, target, period
- edit_goal: goalType or goalId, then any of target, period
- delete_goal: goalType or goalId
- unknown: when nothing above applies

Allowed values:
- schedule category: {schedule_categories}
- schedule recurrence: {recurrences}
- income category: {income_categories}
- expense category: {expense_categories}
- workout type: {workout_types}
- goal type: {goal_types}
- goal period: {goal_periods}

Formatting rules:
- times are HH:MM (24h), dates are YYYY-MM-DD; today is {today}
- relative dates such as "tomorrow" must be converted using today's date
- for add_food never include calories, protein, carbs or fats; give only the \
food, the amount and the unit exactly as spoken (default 100 g)
"""

_PROMPT_HEADER = """\
You are a voice assistant for a life management app. The user speaks in \
Hebrew or English. Parse their message into one action per requested effect. \
Examples: "work 8-18, eat 18-22" -> two add_schedule items. "bought coke for \
10, slept 8 hours" -> add_transaction + log_sleep.
Reply with a single JSON object of the form {"actions": [{"intent": ..., ...}]} \
and nothing else.
"""


class IntentModelClient(Protocol):
    """Interface for the language model used to read transcripts."""

    async def complete(self, *, model: str, store: bool, prompt: str) -> str:
        """Return the raw text answer for a prompt."""


@dataclass
class IntentParser:
    """Turns a transcript into validated, ordered actions."""

    client: IntentModelClient | None
    model: str
    nutrition_resolver: NutritionResolver
    store: bool = False
    today_provider: Callable[[], date] = field(default=date.today)

    async def parse(
        self,
        transcript: str,
        language_hint: str | None = None,
        today: date | None = None,
    ) -> ParseResult:
        """Parse a transcript; failures abort the whole parse."""
        text = transcript.strip() if isinstance(transcript, str) else ""
        if not text:
            raise InvalidInputError("Transcript is empty")
        if self.client is None:
            raise ServiceUnavailableError(
                "Voice service not configured (missing OPENAI_API_KEY)"
            )
        resolved_today = today or self.today_provider()
        prompt = build_prompt(text, language_hint, resolved_today)
        raw_text = await self.client.complete(
            model=self.model, store=self.store, prompt=prompt
        )
        payload = decode_model_output(raw_text)
        actions = normalize_payload(payload, resolved_today)
        actions = [await self._with_nutrition(action) for action in actions]
        _logger.info(
            "Parsed transcript into %s action(s): %s",
            len(actions),
            ", ".join(action.intent for action in actions),
        )
        return ParseResult(actions=actions)

    async def _with_nutrition(self, action: Action) -> Action:
        """Fill an add_food action's macros from the nutrition resolver."""
        if not isinstance(action, AddFoodAction):
            return action
        query = food_query(action)
        try:
            facts = await self.nutrition_resolver.resolve(query)
        except VoiceError as exc:
            raise NutritionLookupFailedError(
                f"Nutrition lookup failed for {query!r}: {exc}"
            ) from exc
        return action.model_copy(
            update={
                "name": facts.name,
                "calories": facts.calories,
                "protein": facts.protein,
                "carbs": facts.carbs,
                "fats": facts.fats,
            }
        )


def build_prompt(transcript: str, language_hint: str | None, today: date) -> str:
    """Compose the fixed instructions followed by the user transcript."""
    guide = _INTENT_GUIDE.format(
        schedule_categories=", ".join(SCHEDULE_CATEGORIES),
        recurrences=", ".join(SCHEDULE_RECURRENCES),
        income_categories=", ".join(INCOME_CATEGORIES),
        expense_categories=", ".join(EXPENSE_CATEGORIES),
        workout_types=", ".join(WORKOUT_TYPES),
        goal_types=", ".join(GOAL_TYPES),
        goal_periods=", ".join(GOAL_PERIODS),
        today=today.isoformat(),
    )
    lang = (language_hint or "").strip() or "auto"
    return f"{_PROMPT_HEADER}\n{guide}\nUser transcript (lang: {lang}):\n{transcript}"


def decode_model_output(raw_text: str | None) -> object:
    """Decode a model answer, falling back to the embedded JSON object.

    A bare JSON document is returned as is, arrays included, so callers see
    the shape the model actually produced.
    """
    if not raw_text or not raw_text.strip():
        raise EmptyResponseError("Empty response from language model")
    text = raw_text.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        candidate = extract_json_object(text)
    if candidate is None:
        raise MalformedResponseError("No JSON object in language model response")
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            "Language model response is not valid JSON"
        ) from exc


def extract_json_object(text: str) -> str | None:
    """Return the substring from the first ``{`` to the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]

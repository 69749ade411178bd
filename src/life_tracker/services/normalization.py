"""Server-side normalization of language-model output into typed actions.

Nothing the model returns is trusted: every field is re-validated here and
either defaulted or dropped. Functions in this module are pure; the only
input besides the decoded JSON is the date used for defaulting.
"""

import math
import re
from collections.abc import Callable
from datetime import date

from pydantic.alias_generators import to_snake

from life_tracker.domain.actions import (
    Action,
    AddFoodAction,
    AddGoalAction,
    AddScheduleAction,
    AddTransactionAction,
    AddWorkoutAction,
    DeleteCheckInAction,
    DeleteFoodEntryAction,
    DeleteGoalAction,
    DeleteScheduleAction,
    DeleteTransactionAction,
    DeleteWorkoutAction,
    EditCheckInAction,
    EditFoodEntryAction,
    EditGoalAction,
    EditScheduleAction,
    EditTransactionAction,
    EditWorkoutAction,
    ExerciseDraft,
    LogSleepAction,
    ScheduleItemDraft,
    UnknownAction,
)
from life_tracker.domain.vocabulary import (
    EXPENSE_CATEGORIES,
    FALLBACK_CATEGORY,
    GOAL_PERIODS,
    GOAL_TYPES,
    INCOME_CATEGORIES,
    SCHEDULE_CATEGORIES,
    SCHEDULE_RECURRENCES,
    TRANSACTION_TYPES,
    WORKOUT_TYPES,
    transaction_categories,
)

TIME_PATTERN = re.compile(r"^\d{1,2}:\d{2}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "10:00"
DEFAULT_FOOD_AMOUNT = 100.0
DEFAULT_FOOD_UNIT = "g"
DEFAULT_WORKOUT_TITLE = "Workout"
DEFAULT_WORKOUT_TYPE = "cardio"
DEFAULT_WORKOUT_MINUTES = 30.0
DEFAULT_GOAL_TYPE = "workouts"
DEFAULT_GOAL_PERIOD = "weekly"

_Raw = dict[str, object]


def normalize_payload(payload: object, today: date) -> list[Action]:
    """Convert decoded model JSON into an ordered list of actions.

    Accepts ``{"actions": [...]}`` or a single flat action object. Always
    returns at least one action; structural problems become ``unknown``.
    """
    if not isinstance(payload, dict):
        return [UnknownAction()]
    if "actions" in payload:
        raw_actions = payload["actions"]
        if not isinstance(raw_actions, list):
            return [UnknownAction()]
    else:
        raw_actions = [payload]

    actions: list[Action] = []
    for raw in raw_actions:
        action = normalize_action(raw, today)
        if action is not None:
            actions.append(action)
    return actions or [UnknownAction()]


def normalize_action(raw: object, today: date) -> Action | None:
    """Normalize one raw action; None means the action carried nothing usable."""
    if not isinstance(raw, dict):
        return UnknownAction()
    intent = raw.get("intent")
    normalizer = _NORMALIZERS.get(intent) if isinstance(intent, str) else None
    if normalizer is None:
        return UnknownAction()
    return normalizer(raw, today)


def food_query(action: AddFoodAction) -> str:
    """Build the composite ``{amount}{unit} {food}`` nutrition query."""
    amount = action.amount or DEFAULT_FOOD_AMOUNT
    unit = action.unit or DEFAULT_FOOD_UNIT
    return f"{format_amount(amount)}{unit} {action.food or ''}".strip()


def format_amount(amount: float) -> str:
    """Render a quantity without a trailing ``.0`` for whole numbers."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def _add_schedule(raw: _Raw, today: date) -> Action | None:
    raw_items = _get(raw, "items")
    if isinstance(raw_items, list):
        candidates = raw_items
    elif "title" in raw:
        candidates = [raw]
    else:
        candidates = []

    items: list[ScheduleItemDraft] = []
    for item in candidates:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            continue
        items.append(
            ScheduleItemDraft(
                title=title.strip(),
                start_time=_time(_get(item, "startTime")) or DEFAULT_START_TIME,
                end_time=_time(_get(item, "endTime")) or DEFAULT_END_TIME,
                category=_choice(item.get("category"), SCHEDULE_CATEGORIES)
                or FALLBACK_CATEGORY,
                recurrence=_choice(item.get("recurrence"), SCHEDULE_RECURRENCES),
                date=_date(item.get("date")),
            )
        )
    if not items:
        return None
    return AddScheduleAction(items=items)


def _edit_schedule(raw: _Raw, today: date) -> Action:
    return EditScheduleAction(
        item_title=_text(_get(raw, "itemTitle")),
        item_id=_identifier(_get(raw, "itemId")),
        title=_text(raw.get("title")),
        start_time=_time(_get(raw, "startTime")),
        end_time=_time(_get(raw, "endTime")),
        category=_choice(raw.get("category"), SCHEDULE_CATEGORIES),
    )


def _delete_schedule(raw: _Raw, today: date) -> Action:
    return DeleteScheduleAction(
        item_title=_text(_get(raw, "itemTitle")),
        item_id=_identifier(_get(raw, "itemId")),
    )


def _add_transaction(raw: _Raw, today: date) -> Action:
    transaction_type = _choice(raw.get("type"), TRANSACTION_TYPES) or "expense"
    amount = _number(raw.get("amount"))
    return AddTransactionAction(
        type=transaction_type,
        amount=amount if amount is not None and amount >= 0 else 0.0,
        category=_choice(
            raw.get("category"), transaction_categories(transaction_type)
        )
        or FALLBACK_CATEGORY,
        description=_text(raw.get("description")),
        date=_date(raw.get("date")) or today.isoformat(),
        is_recurring=_flag(_get(raw, "isRecurring")),
    )


def _edit_transaction(raw: _Raw, today: date) -> Action:
    transaction_type = _choice(raw.get("type"), TRANSACTION_TYPES)
    categories = (
        transaction_categories(transaction_type)
        if transaction_type
        else INCOME_CATEGORIES + EXPENSE_CATEGORIES
    )
    return EditTransactionAction(
        transaction_id=_identifier(_get(raw, "transactionId")),
        description=_text(raw.get("description")),
        type=transaction_type,
        amount=_non_negative(raw.get("amount")),
        category=_choice(raw.get("category"), categories),
        date=_date(raw.get("date")),
    )


def _delete_transaction(raw: _Raw, today: date) -> Action:
    return DeleteTransactionAction(
        transaction_id=_identifier(_get(raw, "transactionId")),
        description=_text(raw.get("description")),
        date=_date(raw.get("date")),
    )


def _add_workout(raw: _Raw, today: date) -> Action:
    duration = _number(_get(raw, "durationMinutes"))
    return AddWorkoutAction(
        title=_text(raw.get("title")) or DEFAULT_WORKOUT_TITLE,
        type=_choice(raw.get("type"), WORKOUT_TYPES) or DEFAULT_WORKOUT_TYPE,
        duration_minutes=(
            duration
            if duration is not None and duration > 0
            else DEFAULT_WORKOUT_MINUTES
        ),
        date=_date(raw.get("date")) or today.isoformat(),
        notes=_text(raw.get("notes")),
        exercises=_exercises(raw.get("exercises")) or [],
    )


def _edit_workout(raw: _Raw, today: date) -> Action:
    duration = _number(_get(raw, "durationMinutes"))
    notes = raw.get("notes")
    return EditWorkoutAction(
        workout_id=_identifier(_get(raw, "workoutId")),
        workout_title=_text(_get(raw, "workoutTitle")),
        title=_text(raw.get("title")),
        type=_choice(raw.get("type"), WORKOUT_TYPES),
        duration_minutes=duration if duration is not None and duration > 0 else None,
        notes=notes.strip() if isinstance(notes, str) else None,
        date=_date(raw.get("date")),
        exercises=_exercises(raw.get("exercises")),
    )


def _delete_workout(raw: _Raw, today: date) -> Action:
    return DeleteWorkoutAction(
        workout_id=_identifier(_get(raw, "workoutId")),
        workout_title=_text(_get(raw, "workoutTitle")),
        date=_date(raw.get("date")),
    )


def _add_food(raw: _Raw, today: date) -> Action | None:
    food = _text(raw.get("food")) or _text(raw.get("name"))
    if not food:
        return None
    amount = _number(raw.get("amount"))
    unit = _text(raw.get("unit"))
    return AddFoodAction(
        food=food,
        amount=amount if amount is not None and amount > 0 else DEFAULT_FOOD_AMOUNT,
        unit=unit.lower() if unit else DEFAULT_FOOD_UNIT,
        date=_date(raw.get("date")) or today.isoformat(),
        start_time=_time(_get(raw, "startTime")),
        end_time=_time(_get(raw, "endTime")),
    )


def _edit_food_entry(raw: _Raw, today: date) -> Action:
    return EditFoodEntryAction(
        entry_id=_identifier(_get(raw, "entryId")),
        food_name=_text(_get(raw, "foodName")),
        name=_text(raw.get("name")),
        calories=_non_negative(raw.get("calories")),
        protein=_non_negative(raw.get("protein")),
        carbs=_non_negative(raw.get("carbs")),
        fats=_non_negative(raw.get("fats")),
        date=_date(raw.get("date")),
    )


def _delete_food_entry(raw: _Raw, today: date) -> Action:
    return DeleteFoodEntryAction(
        entry_id=_identifier(_get(raw, "entryId")),
        food_name=_text(_get(raw, "foodName")),
        date=_date(raw.get("date")),
    )


def _log_sleep(raw: _Raw, today: date) -> Action:
    return LogSleepAction(
        sleep_hours=_non_negative(_get(raw, "sleepHours")) or 0.0,
        date=_date(raw.get("date")) or today.isoformat(),
    )


def _edit_check_in(raw: _Raw, today: date) -> Action:
    return EditCheckInAction(
        date=_date(raw.get("date")),
        sleep_hours=_non_negative(_get(raw, "sleepHours")),
    )


def _delete_check_in(raw: _Raw, today: date) -> Action:
    return DeleteCheckInAction(date=_date(raw.get("date")))


def _add_goal(raw: _Raw, today: date) -> Action:
    return AddGoalAction(
        type=_choice(raw.get("type"), GOAL_TYPES) or DEFAULT_GOAL_TYPE,
        target=_non_negative(raw.get("target")) or 0.0,
        period=_choice(raw.get("period"), GOAL_PERIODS) or DEFAULT_GOAL_PERIOD,
    )


def _edit_goal(raw: _Raw, today: date) -> Action:
    return EditGoalAction(
        goal_id=_identifier(_get(raw, "goalId")),
        goal_type=_choice(_get(raw, "goalType"), GOAL_TYPES),
        target=_non_negative(raw.get("target")),
        period=_choice(raw.get("period"), GOAL_PERIODS),
    )


def _delete_goal(raw: _Raw, today: date) -> Action:
    return DeleteGoalAction(
        goal_id=_identifier(_get(raw, "goalId")),
        goal_type=_choice(_get(raw, "goalType"), GOAL_TYPES),
    )


def _unknown(raw: _Raw, today: date) -> Action:
    return UnknownAction()


_NORMALIZERS: dict[str, Callable[[_Raw, date], Action | None]] = {
    "add_schedule": _add_schedule,
    "edit_schedule": _edit_schedule,
    "delete_schedule": _delete_schedule,
    "add_transaction": _add_transaction,
    "edit_transaction": _edit_transaction,
    "delete_transaction": _delete_transaction,
    "add_workout": _add_workout,
    "edit_workout": _edit_workout,
    "delete_workout": _delete_workout,
    "add_food": _add_food,
    "edit_food_entry": _edit_food_entry,
    "delete_food_entry": _delete_food_entry,
    "log_sleep": _log_sleep,
    "edit_check_in": _edit_check_in,
    "delete_check_in": _delete_check_in,
    "add_goal": _add_goal,
    "edit_goal": _edit_goal,
    "delete_goal": _delete_goal,
    "unknown": _unknown,
}

KNOWN_INTENTS = tuple(_NORMALIZERS)


def _get(raw: _Raw, key: str) -> object:
    """Read a camelCase key, tolerating the snake_case spelling."""
    if key in raw:
        return raw[key]
    return raw.get(to_snake(key))


def _text(value: object) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    return None


def _identifier(value: object) -> str | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _text(value)


def _number(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _non_negative(value: object) -> float | None:
    number = _number(value)
    if number is None or number < 0:
        return None
    return number


def _flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


def _choice(value: object, options: tuple[str, ...]) -> str | None:
    if isinstance(value, str) and value in options:
        return value
    return None


def _time(value: object) -> str | None:
    if isinstance(value, str) and TIME_PATTERN.match(value.strip()):
        return value.strip()
    return None


def _date(value: object) -> str | None:
    if not isinstance(value, str) or not DATE_PATTERN.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


def _exercises(value: object) -> list[ExerciseDraft] | None:
    if not isinstance(value, list):
        return None
    exercises: list[ExerciseDraft] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        name = _text(raw.get("name"))
        if not name:
            continue
        weight = _number(raw.get("weight"))
        exercises.append(
            ExerciseDraft(
                name=name,
                sets=int(_non_negative(raw.get("sets")) or 0),
                reps=int(_non_negative(raw.get("reps")) or 0),
                weight=weight if weight is not None and weight > 0 else None,
                notes=_text(raw.get("notes")),
            )
        )
    return exercises

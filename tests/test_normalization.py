"""Tests for normalization of language-model output."""

from life_tracker.domain.actions import (
    AddFoodAction,
    AddScheduleAction,
    AddTransactionAction,
    AddWorkoutAction,
    EditScheduleAction,
    EditWorkoutAction,
    LogSleepAction,
    UnknownAction,
    action_to_payload,
)
from life_tracker.services.normalization import (
    KNOWN_INTENTS,
    food_query,
    format_amount,
    normalize_action,
    normalize_payload,
)
from tests.conftest import TODAY


def test_structural_malformations_become_unknown() -> None:
    assert normalize_payload([{"intent": "log_sleep"}], TODAY) == [UnknownAction()]
    assert normalize_payload({"actions": "log_sleep"}, TODAY) == [UnknownAction()]
    assert normalize_payload({"actions": []}, TODAY) == [UnknownAction()]
    assert normalize_payload("hello", TODAY) == [UnknownAction()]


def test_bad_entries_become_unknown_in_place() -> None:
    actions = normalize_payload(
        {
            "actions": [
                "not an object",
                {"intent": "teleport"},
                {"sleepHours": 7},
                {"intent": "log_sleep", "sleepHours": 7},
            ]
        },
        TODAY,
    )

    assert [action.intent for action in actions] == [
        "unknown",
        "unknown",
        "unknown",
        "log_sleep",
    ]


def test_flat_object_is_a_single_action() -> None:
    actions = normalize_payload({"intent": "log_sleep", "sleepHours": 6.5}, TODAY)

    assert actions == [LogSleepAction(sleep_hours=6.5, date="2026-03-14")]


def test_add_schedule_sanitizes_items() -> None:
    action = normalize_action(
        {
            "intent": "add_schedule",
            "items": [
                {"title": " Work ", "startTime": "8:00", "endTime": "18:00"},
                {"title": "", "startTime": "18:00"},
                {
                    "title": "Eat",
                    "startTime": "6pm",
                    "endTime": "22:00",
                    "category": "Dinner",
                    "recurrence": "daily",
                    "date": "2026-03-15",
                },
                "junk",
            ],
        },
        TODAY,
    )

    assert isinstance(action, AddScheduleAction)
    assert [item.title for item in action.items] == ["Work", "Eat"]
    assert action.items[0].start_time == "8:00"
    assert action.items[0].category == "Other"
    assert action.items[1].start_time == "09:00"
    assert action.items[1].recurrence == "daily"
    assert action.items[1].date == "2026-03-15"


def test_add_schedule_accepts_flat_item_and_drops_empty() -> None:
    flat = normalize_action(
        {"intent": "add_schedule", "title": "Gym", "start_time": "07:00"}, TODAY
    )
    empty = normalize_action({"intent": "add_schedule", "items": [{}]}, TODAY)

    assert isinstance(flat, AddScheduleAction)
    assert flat.items[0].start_time == "07:00"
    assert flat.items[0].end_time == "10:00"
    assert empty is None
    assert normalize_payload({"intent": "add_schedule"}, TODAY) == [UnknownAction()]


def test_add_transaction_defaults() -> None:
    action = normalize_action(
        {
            "intent": "add_transaction",
            "type": "expense",
            "amount": -10,
            "category": "Salary",
            "description": "coke",
            "isRecurring": "yes",
        },
        TODAY,
    )

    assert action == AddTransactionAction(
        type="expense",
        amount=0.0,
        category="Other",
        description="coke",
        date="2026-03-14",
        is_recurring=True,
    )


def test_add_transaction_keeps_category_for_its_type() -> None:
    action = normalize_action(
        {
            "intent": "add_transaction",
            "type": "income",
            "amount": "2500",
            "category": "Salary",
        },
        TODAY,
    )

    assert isinstance(action, AddTransactionAction)
    assert action.amount == 2500
    assert action.category == "Salary"


def test_add_workout_defaults() -> None:
    action = normalize_action(
        {
            "intent": "add_workout",
            "type": "yoga-ish",
            "durationMinutes": 0,
            "exercises": [
                {"name": "squat", "sets": 3, "reps": 10, "weight": 60},
                {"name": "", "sets": 3},
                {"name": "plank", "sets": -1, "weight": -5},
            ],
        },
        TODAY,
    )

    assert isinstance(action, AddWorkoutAction)
    assert action.title == "Workout"
    assert action.type == "cardio"
    assert action.duration_minutes == 30
    assert action.date == "2026-03-14"
    assert [exercise.name for exercise in action.exercises] == ["squat", "plank"]
    assert action.exercises[1].sets == 0
    assert action.exercises[1].weight is None


def test_edit_schedule_keeps_only_present_valid_fields() -> None:
    action = normalize_action(
        {
            "intent": "edit_schedule",
            "itemTitle": "workout",
            "startTime": "07:00",
            "endTime": "late",
            "category": "Nope",
        },
        TODAY,
    )

    assert action == EditScheduleAction(item_title="workout", start_time="07:00")
    assert action_to_payload(action) == {
        "intent": "edit_schedule",
        "itemTitle": "workout",
        "startTime": "07:00",
    }


def test_edit_workout_empty_notes_clear_notes() -> None:
    action = normalize_action(
        {"intent": "edit_workout", "workoutTitle": "run", "notes": "  "}, TODAY
    )

    assert isinstance(action, EditWorkoutAction)
    assert action.notes == ""
    assert action.exercises is None


def test_add_food_ignores_model_nutrition() -> None:
    action = normalize_action(
        {
            "intent": "add_food",
            "food": "chicken breast",
            "amount": 300,
            "unit": "G",
            "calories": 9999,
            "protein": 1,
        },
        TODAY,
    )

    assert isinstance(action, AddFoodAction)
    assert action.calories is None
    assert action.protein is None
    assert action.unit == "g"
    assert food_query(action) == "300g chicken breast"


def test_add_food_defaults_and_drops_unlabeled() -> None:
    action = normalize_action({"intent": "add_food", "food": "banana"}, TODAY)

    assert isinstance(action, AddFoodAction)
    assert action.amount == 100
    assert action.unit == "g"
    assert action.date == "2026-03-14"
    assert normalize_action({"intent": "add_food", "amount": 2}, TODAY) is None


def test_invalid_dates_are_dropped() -> None:
    action = normalize_action(
        {"intent": "log_sleep", "sleepHours": 8, "date": "2026-02-30"}, TODAY
    )
    edit = normalize_action(
        {"intent": "edit_check_in", "date": "yesterday", "sleepHours": 7}, TODAY
    )

    assert isinstance(action, LogSleepAction)
    assert action.date == "2026-03-14"
    assert edit.date is None
    assert edit.sleep_hours == 7


def test_goal_values_outside_vocabulary_fall_back() -> None:
    action = normalize_action(
        {"intent": "add_goal", "type": "pushups", "target": 5, "period": "hourly"},
        TODAY,
    )

    assert action.type == "workouts"
    assert action.period == "weekly"
    assert action.target == 5


def test_format_amount() -> None:
    assert format_amount(300.0) == "300"
    assert format_amount(1.5) == "1.5"


def test_every_intent_is_known() -> None:
    assert len(KNOWN_INTENTS) == 19
    assert "unknown" in KNOWN_INTENTS

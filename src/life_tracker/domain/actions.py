"""Typed action schema shared by the intent parser and the executor."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


class _ActionModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ScheduleItemDraft(_ActionModel):
    """A schedule item requested by voice, before it is stored."""

    title: str
    start_time: str = "09:00"
    end_time: str = "10:00"
    category: str = "Other"
    recurrence: str | None = None
    date: str | None = None


class ExerciseDraft(_ActionModel):
    """A single exercise inside a workout action."""

    name: str
    sets: int = 0
    reps: int = 0
    weight: float | None = None
    notes: str | None = None


class AddScheduleAction(_ActionModel):
    intent: Literal["add_schedule"] = "add_schedule"
    items: list[ScheduleItemDraft] = Field(default_factory=list)


class EditScheduleAction(_ActionModel):
    intent: Literal["edit_schedule"] = "edit_schedule"
    item_title: str | None = None
    item_id: str | None = None
    title: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    category: str | None = None


class DeleteScheduleAction(_ActionModel):
    intent: Literal["delete_schedule"] = "delete_schedule"
    item_title: str | None = None
    item_id: str | None = None


class AddTransactionAction(_ActionModel):
    intent: Literal["add_transaction"] = "add_transaction"
    type: str = "expense"
    amount: float = 0.0
    category: str = "Other"
    description: str | None = None
    date: str | None = None
    is_recurring: bool = False


class EditTransactionAction(_ActionModel):
    intent: Literal["edit_transaction"] = "edit_transaction"
    transaction_id: str | None = None
    description: str | None = None
    type: str | None = None
    amount: float | None = None
    category: str | None = None
    date: str | None = None


class DeleteTransactionAction(_ActionModel):
    intent: Literal["delete_transaction"] = "delete_transaction"
    transaction_id: str | None = None
    description: str | None = None
    date: str | None = None


class AddWorkoutAction(_ActionModel):
    intent: Literal["add_workout"] = "add_workout"
    title: str = "Workout"
    type: str = "cardio"
    duration_minutes: float = 30
    date: str | None = None
    notes: str | None = None
    exercises: list[ExerciseDraft] = Field(default_factory=list)


class EditWorkoutAction(_ActionModel):
    intent: Literal["edit_workout"] = "edit_workout"
    workout_id: str | None = None
    workout_title: str | None = None
    title: str | None = None
    type: str | None = None
    duration_minutes: float | None = None
    notes: str | None = None
    date: str | None = None
    exercises: list[ExerciseDraft] | None = None


class DeleteWorkoutAction(_ActionModel):
    intent: Literal["delete_workout"] = "delete_workout"
    workout_id: str | None = None
    workout_title: str | None = None
    date: str | None = None


class AddFoodAction(_ActionModel):
    """Food log request; nutrition fields are filled by the resolver."""

    intent: Literal["add_food"] = "add_food"
    food: str | None = None
    amount: float | None = None
    unit: str | None = None
    date: str | None = None
    name: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None
    start_time: str | None = None
    end_time: str | None = None


class EditFoodEntryAction(_ActionModel):
    intent: Literal["edit_food_entry"] = "edit_food_entry"
    entry_id: str | None = None
    food_name: str | None = None
    name: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None
    date: str | None = None


class DeleteFoodEntryAction(_ActionModel):
    intent: Literal["delete_food_entry"] = "delete_food_entry"
    entry_id: str | None = None
    food_name: str | None = None
    date: str | None = None


class LogSleepAction(_ActionModel):
    intent: Literal["log_sleep"] = "log_sleep"
    sleep_hours: float = 0.0
    date: str | None = None


class EditCheckInAction(_ActionModel):
    intent: Literal["edit_check_in"] = "edit_check_in"
    date: str | None = None
    sleep_hours: float | None = None


class DeleteCheckInAction(_ActionModel):
    intent: Literal["delete_check_in"] = "delete_check_in"
    date: str | None = None


class AddGoalAction(_ActionModel):
    intent: Literal["add_goal"] = "add_goal"
    type: str = "workouts"
    target: float = 0.0
    period: str = "weekly"


class EditGoalAction(_ActionModel):
    intent: Literal["edit_goal"] = "edit_goal"
    goal_id: str | None = None
    goal_type: str | None = None
    target: float | None = None
    period: str | None = None


class DeleteGoalAction(_ActionModel):
    intent: Literal["delete_goal"] = "delete_goal"
    goal_id: str | None = None
    goal_type: str | None = None


class UnknownAction(_ActionModel):
    intent: Literal["unknown"] = "unknown"
    message: str | None = None


Action = Annotated[
    AddScheduleAction
    | EditScheduleAction
    | DeleteScheduleAction
    | AddTransactionAction
    | EditTransactionAction
    | DeleteTransactionAction
    | AddWorkoutAction
    | EditWorkoutAction
    | DeleteWorkoutAction
    | AddFoodAction
    | EditFoodEntryAction
    | DeleteFoodEntryAction
    | LogSleepAction
    | EditCheckInAction
    | DeleteCheckInAction
    | AddGoalAction
    | EditGoalAction
    | DeleteGoalAction
    | UnknownAction,
    Field(discriminator="intent"),
]

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


class ParseResult(_ActionModel):
    """Ordered actions produced from one transcript."""

    actions: list[Action] = Field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        """Serialize with camelCase keys and without unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


def coerce_action(raw: object) -> Action:
    """Validate an action coming from outside the parser.

    Anything that does not match one of the known variants becomes an
    ``unknown`` action instead of raising.
    """
    try:
        return _ACTION_ADAPTER.validate_python(raw)
    except ValidationError:
        return UnknownAction()


def action_to_payload(action: Action) -> dict[str, object]:
    """Serialize a single action to its wire shape."""
    return action.model_dump(by_alias=True, exclude_none=True)

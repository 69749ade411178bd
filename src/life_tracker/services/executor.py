"""Applies parsed voice actions to the domain stores."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, TypeVar

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
    coerce_action,
)
from life_tracker.domain.entities import (
    DailyCheckIn,
    Exercise,
    FoodEntry,
    Goal,
    ScheduleItem,
    Transaction,
    Workout,
)
from life_tracker.domain.errors import InvalidInputError, NotFoundError, VoiceError
from life_tracker.domain.execution import ActionResult, ExecutionSummary
from life_tracker.domain.vocabulary import (
    CATEGORY_EMOJIS,
    FALLBACK_CATEGORY,
    GOAL_PERIODS,
    GOAL_TYPES,
    SCHEDULE_CATEGORIES,
    SCHEDULE_RECURRENCES,
    TRANSACTION_TYPES,
    WORKOUT_TYPES,
    transaction_categories,
)
from life_tracker.services.normalization import (
    DATE_PATTERN,
    DEFAULT_END_TIME,
    DEFAULT_GOAL_PERIOD,
    DEFAULT_GOAL_TYPE,
    DEFAULT_START_TIME,
    DEFAULT_WORKOUT_MINUTES,
    DEFAULT_WORKOUT_TITLE,
    DEFAULT_WORKOUT_TYPE,
    TIME_PATTERN,
)

_logger = logging.getLogger(__name__)

NOT_UNDERSTOOD = "Could not understand"

EntityT = TypeVar("EntityT")


class DomainStore(Protocol[EntityT]):
    """Uniform collaborator shape for one domain's records."""

    def snapshot(self) -> Sequence[EntityT]:
        """Return the current records; callers must not mutate the result."""

    async def add(self, payload: dict[str, object]) -> EntityT:
        """Create a record from a partial payload and return it."""

    async def update(self, entity_id: str, patch: dict[str, object]) -> EntityT:
        """Apply a sparse patch to a record and return it."""

    async def delete(self, entity_id: str) -> None:
        """Remove a record."""


@dataclass
class DomainHandles:
    """Stores the executor may read and mutate, one per domain."""

    schedule: DomainStore[ScheduleItem]
    transactions: DomainStore[Transaction]
    food_entries: DomainStore[FoodEntry]
    check_ins: DomainStore[DailyCheckIn]
    workouts: DomainStore[Workout]
    goals: DomainStore[Goal]


_Handler = Callable[[Action, DomainHandles], Awaitable[str]]


@dataclass
class ActionExecutor:
    """Runs actions one at a time and collects a result for each."""

    today_provider: Callable[[], date] = field(default=date.today)
    _handlers: dict[str, _Handler] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._handlers = {
            "add_schedule": self._add_schedule,
            "edit_schedule": self._edit_schedule,
            "delete_schedule": self._delete_schedule,
            "add_transaction": self._add_transaction,
            "edit_transaction": self._edit_transaction,
            "delete_transaction": self._delete_transaction,
            "add_workout": self._add_workout,
            "edit_workout": self._edit_workout,
            "delete_workout": self._delete_workout,
            "add_food": self._add_food,
            "edit_food_entry": self._edit_food_entry,
            "delete_food_entry": self._delete_food_entry,
            "log_sleep": self._log_sleep,
            "edit_check_in": self._edit_check_in,
            "delete_check_in": self._delete_check_in,
            "add_goal": self._add_goal,
            "edit_goal": self._edit_goal,
            "delete_goal": self._delete_goal,
        }

    async def execute(
        self,
        actions: Iterable[Action | dict[str, object]],
        handles: DomainHandles,
    ) -> ExecutionSummary:
        """Execute actions in order; one failure never stops the rest."""
        results: list[ActionResult] = []
        for action in actions:
            results.append(await self.execute_one(action, handles))
        return summarize(results)

    async def execute_one(
        self, action: Action | dict[str, object], handles: DomainHandles
    ) -> ActionResult:
        """Dispatch a single action and convert any failure into a result."""
        if isinstance(action, dict):
            action = coerce_action(action)
        intent = action.intent
        handler = self._handlers.get(intent)
        if handler is None:
            _logger.debug("Action %s not dispatched: no handler", intent)
            return ActionResult(intent=intent, success=False, message=NOT_UNDERSTOOD)

        _logger.debug("Action %s dispatched", intent)
        try:
            message = await handler(action, handles)
        except VoiceError as exc:
            _logger.warning("Action %s failed: %s", intent, exc)
            return ActionResult(intent=intent, success=False, message=str(exc))
        except Exception as exc:
            _logger.exception("Action %s raised unexpectedly", intent)
            return ActionResult(
                intent=intent,
                success=False,
                message=str(exc) or "An error occurred",
            )
        _logger.debug("Action %s succeeded", intent)
        return ActionResult(intent=intent, success=True, message=message)

    def _today(self) -> date:
        return self.today_provider()

    async def _add_schedule(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, AddScheduleAction)
        if not action.items:
            raise InvalidInputError("No schedule items")
        order = len(handles.schedule.snapshot())
        for item in action.items:
            category = _allowed(item.category, SCHEDULE_CATEGORIES) or FALLBACK_CATEGORY
            await handles.schedule.add(
                {
                    "title": item.title,
                    "start_time": _time(item.start_time) or DEFAULT_START_TIME,
                    "end_time": _time(item.end_time) or DEFAULT_END_TIME,
                    "category": category,
                    "emoji": CATEGORY_EMOJIS[category],
                    "order": order,
                    "is_active": True,
                    "recurrence": _allowed(item.recurrence, SCHEDULE_RECURRENCES),
                    "date": _parse_date(item.date) or self._today(),
                }
            )
            order += 1
        return f"Added {len(action.items)} to schedule"

    async def _edit_schedule(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, EditScheduleAction)
        item = find_entity(
            handles.schedule.snapshot(),
            entity_id=action.item_id,
            text=action.item_title,
            display=lambda entity: entity.title,
        )
        if item is None:
            raise NotFoundError("Schedule item not found")
        patch = _sparse(
            title=action.title,
            start_time=_time(action.start_time),
            end_time=_time(action.end_time),
            category=_allowed(action.category, SCHEDULE_CATEGORIES),
        )
        if patch:
            await handles.schedule.update(item.id, patch)
        return f"Updated {item.title}"

    async def _delete_schedule(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, DeleteScheduleAction)
        item = find_entity(
            handles.schedule.snapshot(),
            entity_id=action.item_id,
            text=action.item_title,
            display=lambda entity: entity.title,
        )
        if item is None:
            raise NotFoundError("Schedule item not found")
        await handles.schedule.delete(item.id)
        return f"Removed {item.title} from schedule"

    async def _add_transaction(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, AddTransactionAction)
        transaction_type = _allowed(action.type, TRANSACTION_TYPES) or "expense"
        amount = action.amount if action.amount >= 0 else 0.0
        category = (
            _allowed(action.category, transaction_categories(transaction_type))
            or FALLBACK_CATEGORY
        )
        await handles.transactions.add(
            {
                "type": transaction_type,
                "amount": amount,
                "category": category,
                "description": action.description,
                "date": _parse_date(action.date) or self._today(),
                "is_recurring": action.is_recurring,
            }
        )
        return f"Added {transaction_type} {amount:g} ({category})"

    async def _edit_transaction(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, EditTransactionAction)
        transaction = find_entity(
            handles.transactions.snapshot(),
            entity_id=action.transaction_id,
            text=action.description,
            display=lambda entity: entity.description,
        )
        if transaction is None:
            raise NotFoundError("Transaction not found")
        transaction_type = _allowed(action.type, TRANSACTION_TYPES)
        patch = _sparse(
            type=transaction_type,
            amount=_optional_non_negative(action.amount),
            category=_allowed(
                action.category,
                transaction_categories(transaction_type or transaction.type),
            ),
            date=_parse_date(action.date),
        )
        if patch:
            await handles.transactions.update(transaction.id, patch)
        return "Updated transaction"

    async def _delete_transaction(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, DeleteTransactionAction)
        transaction = find_entity(
            handles.transactions.snapshot(),
            entity_id=action.transaction_id,
            text=action.description,
            display=lambda entity: entity.description,
        )
        if transaction is None:
            raise NotFoundError("Transaction not found")
        await handles.transactions.delete(transaction.id)
        return "Deleted transaction"

    async def _add_workout(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, AddWorkoutAction)
        title = (action.title or "").strip() or DEFAULT_WORKOUT_TITLE
        duration = (
            action.duration_minutes
            if action.duration_minutes and action.duration_minutes > 0
            else DEFAULT_WORKOUT_MINUTES
        )
        await handles.workouts.add(
            {
                "title": title,
                "type": _allowed(action.type, WORKOUT_TYPES) or DEFAULT_WORKOUT_TYPE,
                "duration_minutes": duration,
                "date": _parse_date(action.date) or self._today(),
                "exercises": _exercises(action.exercises),
                "notes": action.notes,
            }
        )
        return f"Logged {title} ({duration:g} min)"

    async def _edit_workout(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, EditWorkoutAction)
        workout = find_entity(
            handles.workouts.snapshot(),
            entity_id=action.workout_id,
            text=action.workout_title,
            display=lambda entity: entity.title,
        )
        if workout is None:
            raise NotFoundError("Workout not found")
        duration = action.duration_minutes
        patch = _sparse(
            title=action.title,
            type=_allowed(action.type, WORKOUT_TYPES),
            duration_minutes=(
                duration if duration is not None and duration > 0 else None
            ),
            notes=action.notes,
            date=_parse_date(action.date),
            exercises=(
                _exercises(action.exercises) if action.exercises is not None else None
            ),
        )
        if patch:
            await handles.workouts.update(workout.id, patch)
        return f"Updated {workout.title}"

    async def _delete_workout(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, DeleteWorkoutAction)
        workout = find_entity(
            handles.workouts.snapshot(),
            entity_id=action.workout_id,
            text=action.workout_title,
            display=lambda entity: entity.title,
        )
        if workout is None:
            raise NotFoundError("Workout not found")
        await handles.workouts.delete(workout.id)
        return f"Deleted {workout.title}"

    async def _add_food(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, AddFoodAction)
        if not action.name and action.calories is None:
            raise NotFoundError("Food not found")
        name = action.name or "Unknown"
        calories = _non_negative(action.calories)
        await handles.food_entries.add(
            {
                "name": name,
                "date": _parse_date(action.date) or self._today(),
                "calories": calories,
                "protein": _non_negative(action.protein),
                "carbs": _non_negative(action.carbs),
                "fats": _non_negative(action.fats),
                "portion_amount": action.amount,
                "portion_unit": action.unit,
                **_sparse(
                    start_time=_time(action.start_time),
                    end_time=_time(action.end_time),
                ),
            }
        )
        return f"Logged {name} ({calories:.0f} kcal)"

    async def _edit_food_entry(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, EditFoodEntryAction)
        entry = find_entity(
            handles.food_entries.snapshot(),
            entity_id=action.entry_id,
            text=action.food_name,
            display=lambda entity: entity.name,
        )
        if entry is None:
            raise NotFoundError("Food entry not found")
        patch = _sparse(
            name=action.name,
            calories=_optional_non_negative(action.calories),
            protein=_optional_non_negative(action.protein),
            carbs=_optional_non_negative(action.carbs),
            fats=_optional_non_negative(action.fats),
            date=_parse_date(action.date),
        )
        if patch:
            await handles.food_entries.update(entry.id, patch)
        return f"Updated {entry.name}"

    async def _delete_food_entry(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, DeleteFoodEntryAction)
        entry = find_entity(
            handles.food_entries.snapshot(),
            entity_id=action.entry_id,
            text=action.food_name,
            display=lambda entity: entity.name,
        )
        if entry is None:
            raise NotFoundError("Food entry not found")
        await handles.food_entries.delete(entry.id)
        return f"Deleted {entry.name}"

    async def _log_sleep(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, LogSleepAction)
        day = _parse_date(action.date) or self._today()
        hours = _non_negative(action.sleep_hours)
        existing = find_check_in(handles.check_ins.snapshot(), day)
        if existing is not None:
            await handles.check_ins.update(existing.id, {"sleep_hours": hours})
        else:
            await handles.check_ins.add({"date": day, "sleep_hours": hours})
        return f"Logged {hours:g}h sleep"

    async def _edit_check_in(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, EditCheckInAction)
        day = _parse_date(action.date)
        if day is None:
            raise InvalidInputError("Date required")
        existing = find_check_in(handles.check_ins.snapshot(), day)
        if existing is None:
            raise NotFoundError("Check-in not found")
        patch = _sparse(sleep_hours=_optional_non_negative(action.sleep_hours))
        if patch:
            await handles.check_ins.update(existing.id, patch)
        return f"Updated check-in for {day.isoformat()}"

    async def _delete_check_in(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, DeleteCheckInAction)
        day = _parse_date(action.date)
        if day is None:
            raise InvalidInputError("Date required")
        existing = find_check_in(handles.check_ins.snapshot(), day)
        if existing is None:
            raise NotFoundError("Check-in not found")
        await handles.check_ins.delete(existing.id)
        return f"Deleted check-in for {day.isoformat()}"

    async def _add_goal(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, AddGoalAction)
        goal_type = _allowed(action.type, GOAL_TYPES) or DEFAULT_GOAL_TYPE
        period = _allowed(action.period, GOAL_PERIODS) or DEFAULT_GOAL_PERIOD
        target = _non_negative(action.target)
        await handles.goals.add(
            {"type": goal_type, "target": target, "period": period}
        )
        return f"Added {period} {goal_type} goal ({target:g})"

    async def _edit_goal(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, EditGoalAction)
        goal = find_goal(handles.goals.snapshot(), action.goal_id, action.goal_type)
        if goal is None:
            raise NotFoundError("Goal not found")
        patch = _sparse(
            target=_optional_non_negative(action.target),
            period=_allowed(action.period, GOAL_PERIODS),
        )
        if patch:
            await handles.goals.update(goal.id, patch)
        return f"Updated {goal.type} goal"

    async def _delete_goal(self, action: Action, handles: DomainHandles) -> str:
        action = _expect(action, DeleteGoalAction)
        goal = find_goal(handles.goals.snapshot(), action.goal_id, action.goal_type)
        if goal is None:
            raise NotFoundError("Goal not found")
        await handles.goals.delete(goal.id)
        return f"Deleted {goal.type} goal"


def find_entity(
    entities: Sequence[EntityT],
    *,
    entity_id: str | None,
    text: str | None,
    display: Callable[[EntityT], str | None],
) -> EntityT | None:
    """Locate an entity by id, else by case-insensitive substring of ``display``.

    The first match in snapshot order wins.
    """
    if entity_id:
        for entity in entities:
            if getattr(entity, "id", None) == entity_id:
                return entity
    if text:
        needle = text.lower()
        for entity in entities:
            label = display(entity)
            if label and needle in label.lower():
                return entity
    return None


def find_check_in(
    check_ins: Sequence[DailyCheckIn], day: date
) -> DailyCheckIn | None:
    """Return the check-in recorded for a calendar day."""
    return next((check_in for check_in in check_ins if check_in.date == day), None)


def find_goal(
    goals: Sequence[Goal], goal_id: str | None, goal_type: str | None
) -> Goal | None:
    """Return a goal by id, else the first goal of the given type."""
    if goal_id:
        for goal in goals:
            if goal.id == goal_id:
                return goal
    if goal_type:
        return next((goal for goal in goals if goal.type == goal_type), None)
    return None


def summarize(results: list[ActionResult]) -> ExecutionSummary:
    """Fold per-action results into user-facing success and failure messages."""
    succeeded = [
        result.message or result.intent for result in results if result.success
    ]
    failed = [
        result.message or "Could not complete action"
        for result in results
        if not result.success
    ]
    success_message = None
    if succeeded:
        success_message = (
            succeeded[0] if len(succeeded) == 1 else f"Done: {', '.join(succeeded)}"
        )
    failure_message = None
    if failed:
        failure_message = "; ".join(failed) if succeeded else failed[0]
    return ExecutionSummary(
        results=results,
        success_message=success_message,
        failure_message=failure_message,
    )


_ActionT = TypeVar("_ActionT")


def _expect(action: Action, expected: type[_ActionT]) -> _ActionT:
    if not isinstance(action, expected):
        raise InvalidInputError(f"Malformed {action.intent} action")
    return action


def _sparse(**fields: object) -> dict[str, object]:
    return {key: value for key, value in fields.items() if value is not None}


def _allowed(value: str | None, options: tuple[str, ...]) -> str | None:
    return value if value in options else None


def _time(value: str | None) -> str | None:
    if value and TIME_PATTERN.match(value):
        return value
    return None


def _parse_date(value: str | None) -> date | None:
    if not value or not DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _non_negative(value: float | None) -> float:
    return value if value is not None and value >= 0 else 0.0


def _optional_non_negative(value: float | None) -> float | None:
    return value if value is not None and value >= 0 else None


def _exercises(drafts: list[ExerciseDraft] | None) -> list[Exercise]:
    exercises: list[Exercise] = []
    for draft in drafts or []:
        name = draft.name.strip()
        if not name:
            continue
        exercises.append(
            Exercise(
                name=name,
                sets=max(0, draft.sets),
                reps=max(0, draft.reps),
                weight=draft.weight if draft.weight and draft.weight > 0 else None,
                notes=draft.notes.strip() if draft.notes else None,
            )
        )
    return exercises

"""Supabase implementation of the per-domain stores used by the executor."""

from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import TypeVar

from supabase import Client

from life_tracker.domain.entities import (
    DailyCheckIn,
    Exercise,
    FoodEntry,
    Goal,
    ScheduleItem,
    Transaction,
    Workout,
)
from life_tracker.services.executor import DomainHandles, DomainStore

EntityT = TypeVar("EntityT")

SCHEDULE_TABLE = "schedule_items"
TRANSACTIONS_TABLE = "transactions"
FOOD_ENTRIES_TABLE = "food_entries"
CHECK_INS_TABLE = "daily_check_ins"
WORKOUTS_TABLE = "workouts"
GOALS_TABLE = "goals"


@dataclass
class SupabaseDomainStore(DomainStore[EntityT]):
    """Supabase-backed store for one table.

    ``snapshot`` serves the rows loaded by ``refresh`` and is kept current
    by every mutation made through this store.
    """

    client: Client
    table: str
    parse_row: Callable[[dict[str, object]], EntityT]
    user_id: str | None = None
    order_by: str | None = None
    _records: list[EntityT] = field(default_factory=list, init=False, repr=False)

    def refresh(self) -> None:
        """Reload every row visible to this store."""
        query = self.client.table(self.table).select("*")
        if self.user_id:
            query = query.eq("user_id", self.user_id)
        if self.order_by:
            query = query.order(self.order_by)
        response = query.execute()
        self._records = [self.parse_row(row) for row in response.data or []]

    def snapshot(self) -> Sequence[EntityT]:
        return tuple(self._records)

    async def add(self, payload: dict[str, object]) -> EntityT:
        """Insert a row and return the stored entity."""
        row = _to_row(payload)
        if self.user_id:
            row["user_id"] = self.user_id
        response = self.client.table(self.table).insert(row).execute()
        if not response.data:
            raise RuntimeError(f"Failed to create {self.table} row")
        entity = self.parse_row(response.data[0])
        self._records.append(entity)
        return entity

    async def update(self, entity_id: str, patch: dict[str, object]) -> EntityT:
        """Apply a sparse patch and return the stored entity."""
        response = (
            self.client.table(self.table)
            .update(_to_row(patch))
            .eq("id", entity_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update {self.table} row")
        entity = self.parse_row(response.data[0])
        self._records = [
            entity if _entity_id(record) == entity_id else record
            for record in self._records
        ]
        return entity

    async def delete(self, entity_id: str) -> None:
        """Delete a row by id."""
        self.client.table(self.table).delete().eq("id", entity_id).execute()
        self._records = [
            record for record in self._records if _entity_id(record) != entity_id
        ]


def build_supabase_handles(client: Client, user_id: str | None = None) -> DomainHandles:
    """Create and load the six stores for one user."""
    handles = DomainHandles(
        schedule=SupabaseDomainStore(
            client, SCHEDULE_TABLE, parse_schedule_item, user_id, order_by="order"
        ),
        transactions=SupabaseDomainStore(
            client, TRANSACTIONS_TABLE, parse_transaction, user_id
        ),
        food_entries=SupabaseDomainStore(
            client, FOOD_ENTRIES_TABLE, parse_food_entry, user_id
        ),
        check_ins=SupabaseDomainStore(client, CHECK_INS_TABLE, parse_check_in, user_id),
        workouts=SupabaseDomainStore(client, WORKOUTS_TABLE, parse_workout, user_id),
        goals=SupabaseDomainStore(client, GOALS_TABLE, parse_goal, user_id),
    )
    for store in (
        handles.schedule,
        handles.transactions,
        handles.food_entries,
        handles.check_ins,
        handles.workouts,
        handles.goals,
    ):
        store.refresh()
    return handles


def parse_schedule_item(row: dict[str, object]) -> ScheduleItem:
    """Parse a schedule row into a domain entity."""
    return ScheduleItem(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        start_time=str(row.get("start_time") or ""),
        end_time=str(row.get("end_time") or ""),
        category=str(row.get("category") or "Other"),
        order=int(row.get("order") or 0),
        is_active=bool(row.get("is_active", True)),
        emoji=row.get("emoji"),
        recurrence=row.get("recurrence"),
        date=_parse_date(row.get("date")),
    )


def parse_transaction(row: dict[str, object]) -> Transaction:
    """Parse a transaction row into a domain entity."""
    return Transaction(
        id=str(row["id"]),
        type=str(row.get("type") or "expense"),
        amount=float(row.get("amount") or 0.0),
        category=str(row.get("category") or "Other"),
        date=_parse_date(row.get("date")) or date.today(),
        description=row.get("description"),
        is_recurring=bool(row.get("is_recurring", False)),
    )


def parse_food_entry(row: dict[str, object]) -> FoodEntry:
    """Parse a food entry row into a domain entity."""
    return FoodEntry(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        date=_parse_date(row.get("date")) or date.today(),
        calories=float(row.get("calories") or 0.0),
        protein=float(row.get("protein") or 0.0),
        carbs=float(row.get("carbs") or 0.0),
        fats=float(row.get("fats") or 0.0),
        portion_amount=_optional_float(row.get("portion_amount")),
        portion_unit=row.get("portion_unit"),
        start_time=row.get("start_time"),
        end_time=row.get("end_time"),
    )


def parse_check_in(row: dict[str, object]) -> DailyCheckIn:
    """Parse a daily check-in row into a domain entity."""
    return DailyCheckIn(
        id=str(row["id"]),
        date=_parse_date(row.get("date")) or date.today(),
        sleep_hours=_optional_float(row.get("sleep_hours")),
    )


def parse_workout(row: dict[str, object]) -> Workout:
    """Parse a workout row, including its JSON exercise list."""
    raw_exercises = row.get("exercises")
    exercises = [
        Exercise(
            name=str(item.get("name") or ""),
            sets=int(item.get("sets") or 0),
            reps=int(item.get("reps") or 0),
            weight=_optional_float(item.get("weight")),
            notes=item.get("notes"),
        )
        for item in (raw_exercises if isinstance(raw_exercises, list) else [])
        if isinstance(item, dict)
    ]
    return Workout(
        id=str(row["id"]),
        title=str(row.get("title") or "Workout"),
        type=str(row.get("type") or "cardio"),
        date=_parse_date(row.get("date")) or date.today(),
        duration_minutes=float(row.get("duration_minutes") or 0.0),
        exercises=exercises,
        notes=row.get("notes"),
    )


def parse_goal(row: dict[str, object]) -> Goal:
    """Parse a goal row into a domain entity."""
    return Goal(
        id=str(row["id"]),
        type=str(row.get("type") or "workouts"),
        target=float(row.get("target") or 0.0),
        period=str(row.get("period") or "weekly"),
    )


def _to_row(payload: dict[str, object]) -> dict[str, object]:
    """Convert a store payload into JSON-friendly column values."""
    row: dict[str, object] = {}
    for key, value in payload.items():
        if isinstance(value, date):
            row[key] = value.isoformat()
        elif isinstance(value, list):
            row[key] = [
                asdict(item) if isinstance(item, Exercise) else item for item in value
            ]
        else:
            row[key] = value
    return row


def _entity_id(entity: object) -> str | None:
    return getattr(entity, "id", None)


def _parse_date(raw: object) -> date | None:
    if isinstance(raw, str) and raw:
        return date.fromisoformat(raw[:10])
    return None


def _optional_float(raw: object) -> float | None:
    if raw is None:
        return None
    return float(raw)

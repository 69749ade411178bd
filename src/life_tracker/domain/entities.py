"""Domain entities owned by the store collaborators."""

import datetime as dt
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScheduleItem:
    """A recurring or one-off block in the daily schedule."""

    id: str
    title: str
    start_time: str
    end_time: str
    category: str
    order: int = 0
    is_active: bool = True
    emoji: str | None = None
    recurrence: str | None = None
    date: dt.date | None = None


@dataclass(frozen=True)
class Transaction:
    """An income or expense record."""

    id: str
    type: str
    amount: float
    category: str
    date: dt.date
    description: str | None = None
    is_recurring: bool = False


@dataclass(frozen=True)
class FoodEntry:
    """A logged food with its macros."""

    id: str
    name: str
    date: dt.date
    calories: float
    protein: float
    carbs: float
    fats: float
    portion_amount: float | None = None
    portion_unit: str | None = None
    start_time: str | None = None
    end_time: str | None = None


@dataclass(frozen=True)
class DailyCheckIn:
    """Per-day wellbeing check-in; currently carries sleep hours."""

    id: str
    date: dt.date
    sleep_hours: float | None = None


@dataclass(frozen=True)
class Exercise:
    name: str
    sets: int
    reps: int
    weight: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Workout:
    """A completed or planned workout session."""

    id: str
    title: str
    type: str
    date: dt.date
    duration_minutes: float
    exercises: list[Exercise] = field(default_factory=list)
    notes: str | None = None


@dataclass(frozen=True)
class Goal:
    """A target the user tracks over a period."""

    id: str
    type: str
    target: float
    period: str

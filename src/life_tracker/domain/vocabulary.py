"""Closed vocabularies shared by the parser and the executor."""

SCHEDULE_CATEGORIES = (
    "Work",
    "Exercise",
    "Meal",
    "Sleep",
    "Personal",
    "Social",
    "Other",
)

SCHEDULE_RECURRENCES = ("daily", "weekdays", "weekends")

INCOME_CATEGORIES = ("Salary", "Freelance", "Investment", "Gift", "Other")

EXPENSE_CATEGORIES = (
    "Food",
    "Housing",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Healthcare",
    "Education",
    "Other",
)

TRANSACTION_TYPES = ("income", "expense")

WORKOUT_TYPES = ("strength", "cardio", "flexibility", "sports")

GOAL_TYPES = ("calories", "workouts", "savings")

GOAL_PERIODS = ("daily", "weekly", "monthly", "yearly")

FALLBACK_CATEGORY = "Other"

CATEGORY_EMOJIS = {
    "Work": "💼",
    "Exercise": "💪",
    "Meal": "🍽️",
    "Sleep": "😴",
    "Personal": "🧘",
    "Social": "👥",
    "Other": "📌",
}


def transaction_categories(transaction_type: str) -> tuple[str, ...]:
    """Return the category list that applies to a transaction type."""
    if transaction_type == "income":
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES

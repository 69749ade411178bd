"""Nutrition domain models."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

REFERENCE_GRAMS = 100.0


@dataclass(frozen=True)
class NutritionFacts:
    """Macro values for a named food at a reference portion size."""

    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    reference_grams: float = REFERENCE_GRAMS

    def to_payload(self) -> dict[str, object]:
        """Serialize to the camelCase shape used on the wire."""
        return {
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "referenceGrams": self.reference_grams,
        }


def round_calories(value: float) -> int:
    """Round calories to the nearest whole number, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round_macro(value: float) -> float:
    """Round a macro gram value to one decimal place, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

"""Domain models for diet log totals."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionTotals:
    """Summed nutrition across diet log entries."""

    calories: float
    protein: float
    carbs: float
    fats: float
    sugar: float
    fiber: float
    salt: float


@dataclass(frozen=True)
class GoalProgress:
    """Progress of the day's totals against the daily goals."""

    totals: NutritionTotals
    calorie_percentage: float
    remaining_calories: float
    remaining_protein: float
    remaining_carbs: float
    remaining_fats: float

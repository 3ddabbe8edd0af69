"""Diet log totals, goal progress and meal logging."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from know_your_bite.domain.diet import GoalProgress, NutritionTotals
from know_your_bite.domain.products import ProductRecord
from know_your_bite.domain.profiles import (
    DailyGoals,
    DietLogEntry,
    UserProfile,
    UserStats,
)
from know_your_bite.services.analysis import ProductAnalysisService
from know_your_bite.services.consistency import backfill_calories
from know_your_bite.services.profiles import ProfileSession

MEAL_ITEM_UNIT = "portion"


def daily_totals(entries: Iterable[DietLogEntry]) -> NutritionTotals:
    """Sum nutrient × quantity across diet log entries."""
    calories = protein = carbs = fats = sugar = fiber = salt = 0.0
    for entry in entries:
        nutrition = entry.product.nutrition
        quantity = entry.quantity
        calories += (nutrition.calories or 0.0) * quantity
        protein += nutrition.protein * quantity
        carbs += nutrition.carbs * quantity
        fats += nutrition.fats * quantity
        sugar += nutrition.sugar * quantity
        fiber += (nutrition.fiber or 0.0) * quantity
        salt += (nutrition.salt or 0.0) * quantity
    return NutritionTotals(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        sugar=sugar,
        fiber=fiber,
        salt=salt,
    )


def goal_progress(totals: NutritionTotals, goals: DailyGoals) -> GoalProgress:
    """Compare totals against daily goals."""
    if goals.calories > 0:
        percentage = min(100.0, totals.calories / goals.calories * 100)
    else:
        # No calorie target to measure against.
        percentage = 0.0
    return GoalProgress(
        totals=totals,
        calorie_percentage=percentage,
        remaining_calories=goals.calories - totals.calories,
        remaining_protein=goals.protein - totals.protein,
        remaining_carbs=goals.carbs - totals.carbs,
        remaining_fats=goals.fats - totals.fats,
    )


@dataclass
class DietService:
    """Diet planning operations that need the model."""

    analysis_service: ProductAnalysisService
    session: ProfileSession

    def progress(self) -> GoalProgress:
        """Return today's progress for the active profile."""
        profile = self.session.profile
        return goal_progress(daily_totals(profile.diet_plan), profile.daily_goals)

    async def log_meal(self, description: str) -> list[DietLogEntry]:
        """Split a meal description into items and log one entry per item."""
        items = await self.analysis_service.analyze_meal(description)
        entries = [
            DietLogEntry(
                product=ProductRecord(
                    id=str(uuid.uuid4()),
                    name=item.item_name,
                    category="Meal item",
                    health_reasoning=item.portion_desc,
                    nutrition=backfill_calories(item.nutrition),
                ),
                quantity=1.0,
                unit=MEAL_ITEM_UNIT,
            )
            for item in items
        ]
        if entries:
            self.session.add_entries(entries)
        return entries

    async def generate_goals(self, stats: UserStats) -> UserProfile:
        """Derive goals from body metrics and store both on the profile."""
        goals = await self.analysis_service.generate_goals(stats)
        return self.session.set_stats(stats, goals)

"""Post-processing rules applied to model nutrition output."""

import re
from collections.abc import Iterable

from know_your_bite.domain.products import NutritionInfo, ProductRecord

KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0

# Caloric sugars only; intense sweeteners carry no sugar grams.
SUGAR_TOKENS = (
    "sugar",
    "syrup",
    "honey",
    "fructose",
    "glucose",
    "sucrose",
    "dextrose",
    "maltose",
    "molasses",
)

MIN_SUGAR_G = 0.5
SUGAR_SHARE_OF_CARBS = 0.25

_SUGAR_PATTERN = re.compile("|".join(SUGAR_TOKENS), re.IGNORECASE)
_NEGATED_SUGAR_PATTERN = re.compile(
    r"\b(?:no|without|zero)\s+(?:added\s+)?(?:sugars?|syrups?)\b"
    r"|\bsugars?[\s-]*free\b",
    re.IGNORECASE,
)


def contains_sugar_ingredient(names: Iterable[str]) -> bool:
    """Return True when any ingredient text mentions a sugar-like token.

    Negated mentions such as "sugar-free" or "no added sugar" do not count.
    """
    return any(
        _SUGAR_PATTERN.search(_NEGATED_SUGAR_PATTERN.sub(" ", name)) for name in names
    )


def estimate_sugar(carbs: float) -> float:
    """Estimate sugar grams when the source reported none, never above carbs."""
    estimate = max(MIN_SUGAR_G, carbs * SUGAR_SHARE_OF_CARBS)
    return round(min(estimate, max(carbs, 0.0)), 1)


def calories_from_macros(protein: float, carbs: float, fats: float) -> float:
    """Return energy in kcal from macronutrient grams."""
    return round(
        protein * KCAL_PER_G_PROTEIN + carbs * KCAL_PER_G_CARBS + fats * KCAL_PER_G_FAT,
        1,
    )


def backfill_calories(nutrition: NutritionInfo) -> NutritionInfo:
    """Compute calories from macros when they are missing."""
    has_macros = nutrition.protein > 0 or nutrition.carbs > 0 or nutrition.fats > 0
    if nutrition.calories is not None and (nutrition.calories > 0 or not has_macros):
        return nutrition
    calories = calories_from_macros(nutrition.protein, nutrition.carbs, nutrition.fats)
    return nutrition.model_copy(update={"calories": calories})


def enforce_sugar_rule(
    record: ProductRecord, grounding_ingredients: str | None = None
) -> ProductRecord:
    """Give a positive sugar value to products with sugar-bearing ingredients.

    Ingredients are taken from the parsed record and from the food database
    text the prompt was grounded in. Products without carbs are left alone.
    """
    if record.nutrition.sugar > 0 or record.nutrition.carbs <= 0:
        return record
    texts = [item.name for item in record.ingredients]
    if grounding_ingredients:
        texts.append(grounding_ingredients)
    if not contains_sugar_ingredient(texts):
        return record
    nutrition = record.nutrition.model_copy(
        update={"sugar": estimate_sugar(record.nutrition.carbs)}
    )
    return record.model_copy(update={"nutrition": nutrition})


def apply_consistency_rules(
    record: ProductRecord, grounding_ingredients: str | None = None
) -> ProductRecord:
    """Run every nutrition consistency rule on a parsed record."""
    record = enforce_sugar_rule(record, grounding_ingredients)
    nutrition = backfill_calories(record.nutrition)
    if nutrition is record.nutrition:
        return record
    return record.model_copy(update={"nutrition": nutrition})

"""Prompt templates and structured output schemas for the nutrition model."""

import json

from know_your_bite.domain.lookup import OffProduct
from know_your_bite.domain.products import NON_FOOD_SENTINEL
from know_your_bite.domain.profiles import UserStats

_NUMBER = {"type": "number"}
_NULLABLE_NUMBER = {"anyOf": [{"type": "number"}, {"type": "null"}]}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}


def _object(properties: dict[str, object]) -> dict[str, object]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


NUTRITION_SCHEMA = _object(
    {
        "calories": {
            "anyOf": [{"type": "number"}, {"type": "null"}],
            "description": "Energy in kcal per 100g",
        },
        "protein": {"type": "number", "description": "Protein in grams per 100g"},
        "carbs": {"type": "number", "description": "Carbohydrates in grams per 100g"},
        "fats": {"type": "number", "description": "Fat in grams per 100g"},
        "sugar": {"type": "number", "description": "Sugars in grams per 100g"},
        "fiber": _NULLABLE_NUMBER,
        "salt": _NULLABLE_NUMBER,
    }
)

PRODUCT_SCHEMA: dict[str, object] = _object(
    {
        "name": {"type": "string"},
        "brand": {"type": "string"},
        "category": {"type": "string"},
        "health_reasoning": {"type": "string"},
        "ingredients": {
            "type": "array",
            "items": _object(
                {
                    "name": {"type": "string"},
                    "status": {"type": "string", "enum": ["good", "bad", "neutral"]},
                    "reason": {"type": "string"},
                }
            ),
        },
        "nutrition": NUTRITION_SCHEMA,
        "certifications": _STRING_LIST,
        "pros": _STRING_LIST,
        "cons": _STRING_LIST,
        "additives": _STRING_LIST,
        "healthier_alternatives": {
            "anyOf": [
                {
                    "type": "array",
                    "items": _object(
                        {
                            "name": {"type": "string"},
                            "brand": {"type": "string"},
                            "reason": {"type": "string"},
                            "calories": _NULLABLE_NUMBER,
                        }
                    ),
                },
                {"type": "null"},
            ]
        },
    }
)

DAILY_GOALS_SCHEMA: dict[str, object] = _object(
    {
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbs": _NUMBER,
        "fats": _NUMBER,
        "sugar": _NUMBER,
        "fiber": _NUMBER,
        "salt": _NUMBER,
    }
)

# Structured outputs need an object at the root, so the item list is wrapped.
MEAL_BREAKDOWN_SCHEMA: dict[str, object] = _object(
    {
        "items": {
            "type": "array",
            "items": _object(
                {
                    "item_name": {
                        "type": "string",
                        "description": "Name of the food item",
                    },
                    "portion_desc": {
                        "type": "string",
                        "description": "Portion size used for the calculation",
                    },
                    "nutrition": _object(
                        {
                            "calories": _NUMBER,
                            "protein": _NUMBER,
                            "carbs": _NUMBER,
                            "fats": _NUMBER,
                            "sugar": _NUMBER,
                            "fiber": _NUMBER,
                            "salt": _NUMBER,
                        }
                    ),
                }
            ),
        }
    }
)

_SUGAR_RULE = (
    "If the ingredients contain sugar, cane sugar, syrup, honey, fructose, "
    "glucose or any sweetener, the 'sugar' value MUST be greater than 0."
)

IMAGE_PROMPT = (
    "Analyze this image. First, determine if it contains a food item, meal, or "
    "beverage. If it does NOT contain food, return a JSON where 'name' is "
    f"'{NON_FOOD_SENTINEL}' and other fields are empty or zero. If it IS food, "
    "identify the product, estimate its nutritional value per 100g (or per "
    "100ml for liquids), and analyze ingredients based on typical formulation "
    "if they are not visible. Suggest 2-3 healthier alternatives if "
    f"applicable. DATA CONSISTENCY RULE: {_SUGAR_RULE}"
)


def grounded_product_prompt(product: OffProduct) -> str:
    """Build the extraction prompt around a food database record."""
    record = json.dumps(product.grounding_payload())
    return (
        "You are a strict data extraction engine. Analyze this product based on "
        f"the provided database record: {record}.\n\n"
        "INSTRUCTIONS:\n"
        "1. Use the provided 'nutrition' values EXACTLY as they appear for the "
        "per 100g fields. Do not invent numbers when real ones are provided.\n"
        "2. If specific nutrition fields are null in the input, estimate them "
        "from the product ingredients and type.\n"
        "3. Categorize each ingredient as good, bad or neutral.\n"
        "4. Suggest 3 specific healthier alternatives.\n\n"
        "CONSISTENCY RULES:\n"
        "- If input nutrition.sugar is 0 but the ingredients list contains "
        "'sugar', 'cane sugar', 'corn syrup', 'honey', 'fructose' or 'glucose', "
        "override the sugar value with a realistic non-zero estimate.\n"
        "- If input nutrition.calories is missing, calculate it as "
        "(Fat*9) + (Carbs*4) + (Protein*4).\n\n"
        "Return JSON strictly matching the schema."
    )


def ungrounded_product_prompt(query: str) -> str:
    """Build the extraction prompt for a bare product name."""
    return (
        f'Analyze the food product query: "{query}".\n\n'
        "INSTRUCTIONS:\n"
        "1. Determine if this is a valid food item. If NOT (e.g. \"laptop\"), "
        f'return name="{NON_FOOD_SENTINEL}".\n'
        "2. If it is food, generate a nutritional profile for 100g of the "
        "product.\n"
        "3. Provide realistic estimates for calories, protein, carbs, fats, "
        "sugar, fiber and salt.\n"
        "4. Suggest 3 specific healthier alternative products.\n\n"
        f"CONSISTENCY RULE: {_SUGAR_RULE}\n\n"
        "Return JSON strictly matching the schema."
    )


def daily_goals_prompt(stats: UserStats) -> str:
    """Build the prompt that derives daily goals from body metrics."""
    return (
        "Calculate the optimal daily nutritional goals for a user with the "
        "following profile:\n"
        f"Age: {stats.age}\n"
        f"Gender: {stats.gender}\n"
        f"Weight: {stats.weight}kg\n"
        f"Height: {stats.height}cm\n"
        f"Activity Level: {stats.activity_level}\n"
        f"Goal: {stats.goal}\n\n"
        "Return the target daily calories, protein (g), carbs (g), fats (g), "
        "sugar (g), fiber (g), and salt (g). Strictly JSON matching the schema."
    )


def meal_breakdown_prompt(description: str) -> str:
    """Build the prompt that splits a meal description into items."""
    return (
        f'Analyze the nutritional content of this meal description: "{description}".\n'
        "Break it down into individual food items. For each item, estimate the "
        "TOTAL nutritional values for the quantity described in the text. If the "
        'quantity is implied (e.g. "an apple"), use that. If it is vague, assume '
        "a standard medium serving. Return the items strictly following the schema."
    )

"""Product records returned by searches and scans."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NON_FOOD_SENTINEL = "NON_FOOD_ITEM"


class NutritionInfo(BaseModel):
    """Nutrition values per 100 g (or 100 ml for liquids)."""

    model_config = ConfigDict(frozen=True)

    calories: float | None = None
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    sugar: float = 0.0
    fiber: float | None = None
    salt: float | None = None


class IngredientAssessment(BaseModel):
    """Health assessment of a single ingredient."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: Literal["good", "bad", "neutral"] = "neutral"
    reason: str = ""


class ProductAlternative(BaseModel):
    """A healthier product suggested in place of the analysed one."""

    model_config = ConfigDict(frozen=True)

    name: str
    brand: str = ""
    reason: str = ""
    calories: float | None = None


class ProductRecord(BaseModel):
    """Normalized food item with nutrition and ingredient assessment."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str
    brand: str = ""
    category: str = ""
    image_url: str | None = None
    health_reasoning: str = ""
    ingredients: list[IngredientAssessment] = Field(default_factory=list)
    nutrition: NutritionInfo
    certifications: list[str] = Field(default_factory=list)
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    additives: list[str] = Field(default_factory=list)
    healthier_alternatives: list[ProductAlternative] | None = None

    @property
    def is_non_food(self) -> bool:
        """Return True when the model flagged the subject as not food."""
        return self.name.strip().upper() == NON_FOOD_SENTINEL


class MealBreakdownItem(BaseModel):
    """One item of a free-text meal, with totals for the described portion."""

    model_config = ConfigDict(frozen=True)

    item_name: str
    portion_desc: str = ""
    nutrition: NutritionInfo

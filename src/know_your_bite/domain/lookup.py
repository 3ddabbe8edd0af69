"""Normalized Open Food Facts product data."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class OffNutriments:
    """Per-100 g nutriments reported by Open Food Facts, each optional."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fats: float | None = None
    sugar: float | None = None
    fiber: float | None = None
    salt: float | None = None


@dataclass(frozen=True)
class OffProduct:
    """Best-match product from an Open Food Facts search."""

    name: str
    brand: str | None
    ingredients_text: str | None
    image_url: str | None
    nutrition: OffNutriments

    def grounding_payload(self) -> dict[str, object]:
        """Return the fields embedded into the model prompt as grounding data."""
        return {
            "name": self.name,
            "brand": self.brand or "Unknown",
            "ingredients": self.ingredients_text or "Not available",
            "nutrition": asdict(self.nutrition),
        }

"""Food database lookup that grounds model prompts in real product data."""

import logging
from dataclasses import dataclass

from know_your_bite.adapters.off_client import OpenFoodFactsClient
from know_your_bite.domain.lookup import OffNutriments, OffProduct

_logger = logging.getLogger(__name__)


@dataclass
class FoodLookupService:
    """Best-effort Open Food Facts lookup; failures mean "no data"."""

    client: OpenFoodFactsClient
    page_size: int = 5

    async def lookup(self, query: str) -> OffProduct | None:
        """Return the best matching product for a query, or None."""
        try:
            payload = await self.client.search_products(query, page_size=self.page_size)
        except Exception as exc:
            _logger.warning("Open Food Facts search failed for %r: %s", query, exc)
            return None

        products = payload.get("products") if isinstance(payload, dict) else None
        if not isinstance(products, list):
            return None
        candidate = select_best_candidate(products)
        if candidate is None:
            return None
        return normalize_product(candidate, fallback_name=query)


def select_best_candidate(products: list[object]) -> dict[str, object] | None:
    """Pick the first product with an energy value and ingredient text.

    Falls back to the first raw candidate when none has both.
    """
    candidates = [product for product in products if isinstance(product, dict)]
    if not candidates:
        return None
    for product in candidates:
        nutriments = product.get("nutriments")
        if not isinstance(nutriments, dict):
            continue
        has_energy = (
            nutriments.get("energy-kcal_100g") is not None
            or nutriments.get("energy-kcal") is not None
        )
        if has_energy and product.get("ingredients_text"):
            return product
    return candidates[0]


def normalize_product(raw: dict[str, object], fallback_name: str) -> OffProduct:
    """Map an untyped Open Food Facts product onto ``OffProduct``."""
    nutriments = raw.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}
    calories = _as_float(nutriments.get("energy-kcal_100g"))
    if calories is None:
        calories = _as_float(nutriments.get("energy-kcal"))
    return OffProduct(
        name=_as_text(raw.get("product_name")) or fallback_name,
        brand=_as_text(raw.get("brands")),
        ingredients_text=_as_text(raw.get("ingredients_text")),
        image_url=(
            _as_text(raw.get("image_front_url")) or _as_text(raw.get("image_url"))
        ),
        nutrition=OffNutriments(
            calories=calories,
            protein=_as_float(nutriments.get("proteins_100g")),
            carbs=_as_float(nutriments.get("carbohydrates_100g")),
            fats=_as_float(nutriments.get("fat_100g")),
            sugar=_as_float(nutriments.get("sugars_100g")),
            fiber=_as_float(nutriments.get("fiber_100g")),
            salt=_as_float(nutriments.get("salt_100g")),
        ),
    )


def _as_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None

"""Structured nutrition extraction using a generative model."""

import base64
import logging
import uuid
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

from pydantic import ValidationError

from know_your_bite.domain.errors import (
    ConfigurationError,
    ProductNotFoundError,
    UpstreamError,
)
from know_your_bite.domain.lookup import OffProduct
from know_your_bite.domain.products import MealBreakdownItem, ProductRecord
from know_your_bite.domain.profiles import DailyGoals, UserStats
from know_your_bite.services.consistency import apply_consistency_rules
from know_your_bite.services.prompts import (
    DAILY_GOALS_SCHEMA,
    IMAGE_PROMPT,
    MEAL_BREAKDOWN_SCHEMA,
    PRODUCT_SCHEMA,
    daily_goals_prompt,
    grounded_product_prompt,
    meal_breakdown_prompt,
    ungrounded_product_prompt,
)

_logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Interface for schema-constrained model completions."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        temperature: float | None,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return the parsed JSON object produced by the model."""


@dataclass
class ProductAnalysisService:
    """Builds prompts, calls the model and validates its structured output."""

    client: CompletionClient | None
    model: str
    temperature: float | None = 0.0
    reasoning_effort: str | None = None
    store: bool = False

    async def analyze_text(
        self, query: str, grounding: OffProduct | None = None
    ) -> ProductRecord:
        """Analyze a product by name, optionally grounded in a database record."""
        if grounding is not None:
            prompt = grounded_product_prompt(grounding)
        else:
            prompt = ungrounded_product_prompt(query)
        raw = await self._complete(
            prompt=prompt,
            schema=PRODUCT_SCHEMA,
            schema_name="product_record",
            failure="Failed to find product information.",
        )
        record = self._parse_product(
            raw,
            not_found="No food item found matching that query.",
            failure="Failed to find product information.",
            grounding_ingredients=grounding.ingredients_text if grounding else None,
        )
        image_url = grounding.image_url if grounding else None
        return record.model_copy(
            update={
                "id": str(uuid.uuid4()),
                "image_url": image_url or _placeholder(record.name),
            }
        )

    async def analyze_image(self, image_bytes: bytes) -> ProductRecord:
        """Analyze a product photo."""
        data_url = to_data_url(image_bytes)
        raw = await self._complete(
            prompt=IMAGE_PROMPT,
            schema=PRODUCT_SCHEMA,
            schema_name="product_record",
            failure="Failed to analyze product image.",
            image_data_url=data_url,
        )
        record = self._parse_product(
            raw,
            not_found="This image does not appear to contain a food item.",
            failure="Failed to analyze product image.",
        )
        return record.model_copy(
            update={"id": str(uuid.uuid4()), "image_url": data_url}
        )

    async def generate_goals(self, stats: UserStats) -> DailyGoals:
        """Derive daily goals from body metrics."""
        raw = await self._complete(
            prompt=daily_goals_prompt(stats),
            schema=DAILY_GOALS_SCHEMA,
            schema_name="daily_goals",
            failure="Failed to generate diet plan.",
        )
        try:
            return DailyGoals.model_validate(raw)
        except ValidationError as exc:
            _logger.exception("Daily goals did not match the schema")
            raise UpstreamError("Failed to generate diet plan.") from exc

    async def analyze_meal(self, description: str) -> list[MealBreakdownItem]:
        """Split a free-text meal into items with per-portion totals."""
        raw = await self._complete(
            prompt=meal_breakdown_prompt(description),
            schema=MEAL_BREAKDOWN_SCHEMA,
            schema_name="meal_breakdown",
            failure="Failed to analyze meal.",
        )
        items = raw.get("items", [])
        try:
            return [MealBreakdownItem.model_validate(item) for item in items]
        except (ValidationError, TypeError) as exc:
            _logger.exception("Meal breakdown did not match the schema")
            raise UpstreamError("Failed to analyze meal.") from exc

    async def _complete(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        failure: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        if self.client is None:
            raise ConfigurationError("Model API key is not configured.")
        try:
            raw = await self.client.complete(
                model=self.model,
                prompt=prompt,
                schema=schema,
                schema_name=schema_name,
                temperature=self.temperature,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=image_data_url,
            )
        except Exception as exc:
            _logger.exception("Model call failed: %s", schema_name)
            raise UpstreamError(failure) from exc
        if not isinstance(raw, dict):
            raise UpstreamError(failure)
        return raw

    @staticmethod
    def _parse_product(
        raw: dict[str, object],
        *,
        not_found: str,
        failure: str,
        grounding_ingredients: str | None = None,
    ) -> ProductRecord:
        try:
            record = ProductRecord.model_validate(raw)
        except ValidationError as exc:
            _logger.exception("Product record did not match the schema")
            raise UpstreamError(failure) from exc
        if record.is_non_food:
            raise ProductNotFoundError(not_found)
        return apply_consistency_rules(record, grounding_ingredients)


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _placeholder(name: str) -> str:
    return f"https://placehold.co/400x400/e2e8f0/1e293b?text={quote(name)}"

"""Tests for model-backed product analysis."""

import asyncio

import pytest

from know_your_bite.domain.errors import (
    ConfigurationError,
    ProductNotFoundError,
    UpstreamError,
)
from know_your_bite.domain.lookup import OffNutriments, OffProduct
from know_your_bite.domain.profiles import UserStats
from know_your_bite.services.analysis import ProductAnalysisService, to_data_url
from tests.conftest import FakeCompletionClient


def _service(client: FakeCompletionClient | None) -> ProductAnalysisService:
    return ProductAnalysisService(client=client, model="gpt-4.1-mini")


def test_analyze_text_without_grounding() -> None:
    client = FakeCompletionClient()

    record = asyncio.run(_service(client).analyze_text("oreo"))

    assert record.name == "Oreo Original Cookies"
    assert record.id
    assert record.image_url is not None
    assert record.image_url.startswith("https://placehold.co/")
    call = client.calls[0]
    assert call["schema_name"] == "product_record"
    assert call["temperature"] == 0.0
    assert call["model"] == "gpt-4.1-mini"


def test_analyze_text_with_grounding_embeds_record() -> None:
    client = FakeCompletionClient()
    grounding = OffProduct(
        name="Oreo Original",
        brand="Oreo",
        ingredients_text="Sugar, flour",
        image_url="https://images.example.org/oreo.jpg",
        nutrition=OffNutriments(calories=480, sugar=38),
    )

    record = asyncio.run(_service(client).analyze_text("oreo", grounding))

    prompt = str(client.calls[0]["prompt"])
    assert '"ingredients": "Sugar, flour"' in prompt
    assert '"calories": 480' in prompt
    assert record.image_url == "https://images.example.org/oreo.jpg"


def test_analyze_text_assigns_fresh_ids() -> None:
    service = _service(FakeCompletionClient())

    first = asyncio.run(service.analyze_text("oreo"))
    second = asyncio.run(service.analyze_text("oreo"))

    assert first.id != second.id


def test_analyze_text_applies_sugar_rule() -> None:
    client = FakeCompletionClient()
    client.responses["product_record"]["nutrition"] = {
        "calories": None,
        "protein": 5,
        "carbs": 69,
        "fats": 20,
        "sugar": 0,
        "fiber": None,
        "salt": None,
    }

    record = asyncio.run(_service(client).analyze_text("oreo"))

    assert record.nutrition.sugar == 17.2
    assert record.nutrition.calories == 476.0


def test_analyze_text_non_food() -> None:
    client = FakeCompletionClient()
    client.responses["product_record"]["name"] = "NON_FOOD_ITEM"

    with pytest.raises(ProductNotFoundError, match="No food item found"):
        asyncio.run(_service(client).analyze_text("laptop"))


def test_analyze_image_non_food() -> None:
    client = FakeCompletionClient()
    client.responses["product_record"]["name"] = "NON_FOOD_ITEM"

    with pytest.raises(ProductNotFoundError, match="does not appear to contain"):
        asyncio.run(_service(client).analyze_image(b"\xff\xd8\xffphoto"))


def test_analyze_image_sends_data_url() -> None:
    client = FakeCompletionClient()

    record = asyncio.run(_service(client).analyze_image(b"\xff\xd8\xffphoto"))

    assert client.calls[0]["image_data_url"] == record.image_url
    assert record.image_url is not None
    assert record.image_url.startswith("data:image/jpeg;base64,")


def test_missing_client_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        asyncio.run(_service(None).analyze_text("oreo"))


def test_model_failure_raises_upstream_error() -> None:
    client = FakeCompletionClient(error=RuntimeError("rate limited"))

    with pytest.raises(UpstreamError, match="Failed to find product information."):
        asyncio.run(_service(client).analyze_text("oreo"))


def test_invalid_product_payload_raises_upstream_error() -> None:
    client = FakeCompletionClient()
    client.responses["product_record"] = {"name": "Oreo"}

    with pytest.raises(UpstreamError):
        asyncio.run(_service(client).analyze_text("oreo"))


def test_generate_goals() -> None:
    client = FakeCompletionClient()
    stats = UserStats(age=30, gender="female", weight=60, height=168)

    goals = asyncio.run(_service(client).generate_goals(stats))

    assert goals.calories == 2000
    assert goals.fiber == 30
    assert "Weight: 60.0kg" in str(client.calls[0]["prompt"])


def test_generate_goals_failure() -> None:
    client = FakeCompletionClient(error=RuntimeError("boom"))
    stats = UserStats(age=30, gender="male", weight=80, height=180)

    with pytest.raises(UpstreamError, match="Failed to generate diet plan."):
        asyncio.run(_service(client).generate_goals(stats))


def test_analyze_meal() -> None:
    client = FakeCompletionClient()

    items = asyncio.run(_service(client).analyze_meal("an apple with peanut butter"))

    assert [item.item_name for item in items] == ["Apple", "Peanut butter"]
    assert items[1].portion_desc == "2 tablespoons"
    assert client.calls[0]["schema_name"] == "meal_breakdown"


def test_analyze_meal_invalid_items() -> None:
    client = FakeCompletionClient()
    client.responses["meal_breakdown"] = {"items": [{"portion_desc": "1 cup"}]}

    with pytest.raises(UpstreamError, match="Failed to analyze meal."):
        asyncio.run(_service(client).analyze_meal("soup"))


def test_to_data_url_detects_mime_type() -> None:
    assert to_data_url(b"\x89PNG\r\n\x1a\n").startswith("data:image/png;base64,")
    assert to_data_url(b"RIFF0000WEBPVP8 ").startswith("data:image/webp;base64,")
    assert to_data_url(b"unknown").startswith("data:image/jpeg;base64,")

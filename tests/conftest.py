"""Shared test fixtures."""

import copy
from dataclasses import dataclass, field

import pytest

from know_your_bite.adapters.local_auth_provider import LocalAuthProvider
from know_your_bite.adapters.local_profile_repository import LocalProfileRepository
from know_your_bite.adapters.off_client import OpenFoodFactsClient
from know_your_bite.config import Settings
from know_your_bite.containers import AppContainer
from know_your_bite.domain.errors import PersistenceError
from know_your_bite.domain.products import NutritionInfo, ProductRecord
from know_your_bite.domain.profiles import UserProfile
from know_your_bite.services.analysis import CompletionClient, ProductAnalysisService
from know_your_bite.services.cache import KeyValueCache
from know_your_bite.services.diet import DietService
from know_your_bite.services.lookup import FoodLookupService
from know_your_bite.services.preferences import PreferencesService
from know_your_bite.services.products import ProductSearchService
from know_your_bite.services.profiles import ProfileRepository, ProfileSession
from know_your_bite.services.store import InMemoryStore
from know_your_bite.services.sync import ProfileSyncQueue

OREO_PRODUCT: dict[str, object] = {
    "name": "Oreo Original Cookies",
    "brand": "Oreo",
    "category": "Biscuits",
    "health_reasoning": "High in added sugar and saturated fat.",
    "ingredients": [
        {"name": "Sugar", "status": "bad", "reason": "Added sugar"},
        {"name": "Unbleached enriched flour", "status": "neutral", "reason": ""},
        {"name": "Palm oil", "status": "bad", "reason": "Saturated fat"},
    ],
    "nutrition": {
        "calories": 480,
        "protein": 5,
        "carbs": 69,
        "fats": 20,
        "sugar": 38,
        "fiber": 3,
        "salt": 0.9,
    },
    "certifications": [],
    "pros": ["Widely available"],
    "cons": ["High sugar"],
    "additives": ["E322"],
    "healthier_alternatives": [
        {
            "name": "Oat biscuits",
            "brand": "Nairn's",
            "reason": "Less sugar, more fiber",
            "calories": 430,
        }
    ],
}

DAILY_GOALS: dict[str, object] = {
    "calories": 2000,
    "protein": 120,
    "carbs": 220,
    "fats": 65,
    "sugar": 40,
    "fiber": 30,
    "salt": 5,
}

MEAL_BREAKDOWN: dict[str, object] = {
    "items": [
        {
            "item_name": "Apple",
            "portion_desc": "1 medium apple",
            "nutrition": {
                "calories": 95,
                "protein": 0.5,
                "carbs": 25,
                "fats": 0.3,
                "sugar": 19,
                "fiber": 4.4,
                "salt": 0,
            },
        },
        {
            "item_name": "Peanut butter",
            "portion_desc": "2 tablespoons",
            "nutrition": {
                "calories": 190,
                "protein": 7,
                "carbs": 7,
                "fats": 16,
                "sugar": 3,
                "fiber": 2,
                "salt": 0.3,
            },
        },
    ]
}

OFF_SEARCH: dict[str, object] = {
    "count": 2,
    "products": [
        {
            "product_name": "Oreo Mini",
            "brands": "Oreo",
            "nutriments": {"energy-kcal_100g": 470},
        },
        {
            "product_name": "Oreo Original",
            "brands": "Oreo, Mondelez",
            "ingredients_text": "Sugar, flour, palm oil, cocoa",
            "image_front_url": "https://images.example.org/oreo.jpg",
            "nutriments": {
                "energy-kcal_100g": 480,
                "proteins_100g": 5,
                "carbohydrates_100g": 69,
                "fat_100g": 20,
                "sugars_100g": 38,
                "salt_100g": 0.9,
            },
        },
    ],
}


@dataclass
class FakeCompletionClient(CompletionClient):
    """Fake completion client returning canned payloads by schema name."""

    responses: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "product_record": copy.deepcopy(OREO_PRODUCT),
            "daily_goals": copy.deepcopy(DAILY_GOALS),
            "meal_breakdown": copy.deepcopy(MEAL_BREAKDOWN),
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

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
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "schema_name": schema_name,
                "temperature": temperature,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.responses[schema_name])


@dataclass
class FakeOffClient(OpenFoodFactsClient):
    """Fake Open Food Facts client with a canned search payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: copy.deepcopy(OFF_SEARCH)
    )
    queries: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def search_products(
        self, query: str, page_size: int = 5
    ) -> dict[str, object]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[str, UserProfile] = field(default_factory=dict)
    updates: list[UserProfile] = field(default_factory=list)
    failures_left: int = 0

    def get(self, user_id: str) -> UserProfile | None:
        return self.profiles.get(user_id)

    def create(self, profile: UserProfile) -> UserProfile:
        self.profiles[profile.id] = profile
        return profile

    def update(self, profile: UserProfile) -> None:
        if self.failures_left > 0:
            self.failures_left -= 1
            raise PersistenceError("storage unavailable")
        self.updates.append(profile)
        self.profiles[profile.id] = profile


def make_product(
    name: str = "Greek yogurt",
    calories: float | None = 100,
    protein: float = 10,
    carbs: float = 4,
    fats: float = 5,
    sugar: float = 4,
    fiber: float | None = None,
    salt: float | None = None,
) -> ProductRecord:
    return ProductRecord(
        id=f"id-{name}",
        name=name,
        nutrition=NutritionInfo(
            calories=calories,
            protein=protein,
            carbs=carbs,
            fats=fats,
            sugar=sugar,
            fiber=fiber,
            salt=salt,
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        environment="test",
        profile_sync_delay_seconds=0.0,
        _env_file=None,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def off_client() -> FakeOffClient:
    return FakeOffClient()


@pytest.fixture
def profile_repository(store: InMemoryStore) -> LocalProfileRepository:
    return LocalProfileRepository(store)


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryStore,
    completion_client: FakeCompletionClient,
    off_client: FakeOffClient,
    profile_repository: LocalProfileRepository,
) -> AppContainer:
    analysis_service = ProductAnalysisService(
        client=completion_client,
        model=settings.openai_model,
        temperature=settings.openai_temperature,
    )
    product_search_service = ProductSearchService(
        lookup_service=FoodLookupService(off_client),
        analysis_service=analysis_service,
        cache=KeyValueCache(store),
    )
    profile_session = ProfileSession(
        repository=profile_repository,
        auth_provider=LocalAuthProvider(store),
        store=store,
        sync_queue=ProfileSyncQueue(
            writer=profile_repository.update,
            delay_seconds=settings.profile_sync_delay_seconds,
        ),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        product_search_service=product_search_service,
        profile_session=profile_session,
        diet_service=DietService(
            analysis_service=analysis_service, session=profile_session
        ),
        preferences_service=PreferencesService(store),
        close_resources=close_resources,
    )

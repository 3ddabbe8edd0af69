"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from know_your_bite.adapters.json_file_store import JsonFileStore
from know_your_bite.adapters.local_auth_provider import LocalAuthProvider
from know_your_bite.adapters.local_profile_repository import LocalProfileRepository
from know_your_bite.adapters.off_client import HttpxOpenFoodFactsClient
from know_your_bite.adapters.openai_completion_client import OpenAICompletionClient
from know_your_bite.adapters.supabase_auth_provider import SupabaseAuthProvider
from know_your_bite.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from know_your_bite.config import Settings
from know_your_bite.domain.errors import ConfigurationError
from know_your_bite.services.analysis import ProductAnalysisService
from know_your_bite.services.auth import AuthProvider
from know_your_bite.services.cache import KeyValueCache
from know_your_bite.services.diet import DietService
from know_your_bite.services.lookup import FoodLookupService
from know_your_bite.services.preferences import PreferencesService
from know_your_bite.services.products import ProductSearchService
from know_your_bite.services.profiles import ProfileRepository, ProfileSession
from know_your_bite.services.sync import ProfileSyncQueue


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    product_search_service: ProductSearchService
    profile_session: ProfileSession
    diet_service: DietService
    preferences_service: PreferencesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = JsonFileStore.open(resolved_settings.local_store_path)

    repository: ProfileRepository
    auth_provider: AuthProvider
    if resolved_settings.storage_backend == "supabase":
        if not resolved_settings.supabase_url or not resolved_settings.supabase_key:
            raise ConfigurationError("Supabase URL and key are required")
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_key
        )
        repository = SupabaseProfileRepository(supabase_client)
        auth_provider = SupabaseAuthProvider(supabase_client)
    else:
        repository = LocalProfileRepository(store)
        auth_provider = LocalAuthProvider(store)

    completion_client = (
        OpenAICompletionClient.create(resolved_settings.openai_api_key)
        if resolved_settings.is_ai_configured
        else None
    )
    analysis_service = ProductAnalysisService(
        client=completion_client,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    off_client = HttpxOpenFoodFactsClient.create(resolved_settings.off_base_url)
    product_search_service = ProductSearchService(
        lookup_service=FoodLookupService(
            client=off_client, page_size=resolved_settings.off_page_size
        ),
        analysis_service=analysis_service,
        cache=KeyValueCache(store),
    )
    sync_queue = ProfileSyncQueue(
        writer=repository.update,
        delay_seconds=resolved_settings.profile_sync_delay_seconds,
        max_attempts=resolved_settings.profile_sync_max_attempts,
    )
    profile_session = ProfileSession(
        repository=repository,
        auth_provider=auth_provider,
        store=store,
        sync_queue=sync_queue,
        history_limit=resolved_settings.history_limit,
    )

    async def close_resources() -> None:
        sync_queue.flush()
        await off_client.close()
        if completion_client is not None:
            await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        product_search_service=product_search_service,
        profile_session=profile_session,
        diet_service=DietService(
            analysis_service=analysis_service, session=profile_session
        ),
        preferences_service=PreferencesService(store),
        close_resources=close_resources,
    )

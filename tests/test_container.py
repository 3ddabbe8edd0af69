"""Tests for container wiring."""

import asyncio
from pathlib import Path

import pytest

from know_your_bite.config import Settings
from know_your_bite.containers import build_container
from know_your_bite.domain.errors import ConfigurationError


def _settings(tmp_path: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "openai_api_key": None,
        "local_store_path": str(tmp_path / "store.json"),
        "environment": "test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_build_container_creates_services(tmp_path: Path) -> None:
    container = build_container(_settings(tmp_path, openai_api_key="openai-key"))

    assert container.product_search_service is not None
    assert container.profile_session.state == "guest"
    assert container.settings.is_ai_configured
    analysis_service = container.product_search_service.analysis_service
    assert analysis_service.client is not None
    assert analysis_service.temperature == 0.0
    asyncio.run(container.close_resources())


def test_build_container_without_model_key(tmp_path: Path) -> None:
    container = build_container(_settings(tmp_path))

    assert not container.settings.is_ai_configured
    assert container.product_search_service.analysis_service.client is None
    asyncio.run(container.close_resources())


def test_build_container_shares_store_between_services(tmp_path: Path) -> None:
    container = build_container(_settings(tmp_path))

    container.preferences_service.set_theme("dark")
    reopened = build_container(_settings(tmp_path))

    assert reopened.preferences_service.get_theme() == "dark"
    asyncio.run(container.close_resources())
    asyncio.run(reopened.close_resources())


def test_supabase_backend_requires_credentials(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        build_container(
            _settings(
                tmp_path,
                storage_backend="supabase",
                supabase_url=None,
                supabase_key=None,
            )
        )

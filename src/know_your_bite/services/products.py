"""Dispatch product searches and scans to the lookup and model adapters."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from know_your_bite.domain.errors import InvalidQueryError
from know_your_bite.domain.products import ProductRecord
from know_your_bite.services.analysis import ProductAnalysisService
from know_your_bite.services.cache import Cache, search_cache_key
from know_your_bite.services.lookup import FoodLookupService

_logger = logging.getLogger(__name__)


@dataclass
class ProductSearchService:
    """Resolve a text query or a photo into a ``ProductRecord``."""

    lookup_service: FoodLookupService
    analysis_service: ProductAnalysisService
    cache: Cache

    async def search(self, query: str) -> ProductRecord:
        """Search a product by name, reusing cached results."""
        cleaned = query.strip()
        if not cleaned:
            raise InvalidQueryError("Search query must not be empty.")

        cache_key = search_cache_key(cleaned)
        cached = self._read_cache(cache_key)
        if cached is not None:
            _logger.info("Returning cached result for %r", cleaned)
            return cached

        grounding = await self.lookup_service.lookup(cleaned)
        record = await self.analysis_service.analyze_text(cleaned, grounding)
        self._write_cache(cache_key, record)
        return record

    async def scan(self, image_bytes: bytes) -> ProductRecord:
        """Analyze a product photo; results are never cached."""
        if not image_bytes:
            raise InvalidQueryError("Image must not be empty.")
        return await self.analysis_service.analyze_image(image_bytes)

    def clear_cache(self) -> int:
        """Drop all cached search results."""
        return self.cache.clear()

    def _read_cache(self, key: str) -> ProductRecord | None:
        try:
            cached = self.cache.get(key)
        except Exception:
            _logger.warning("Cache read error for %s", key, exc_info=True)
            return None
        if cached is None:
            return None
        try:
            return ProductRecord.model_validate(cached)
        except ValidationError:
            _logger.warning("Ignoring unreadable cache entry %s", key)
            return None

    def _write_cache(self, key: str, record: ProductRecord) -> None:
        try:
            self.cache.set(key, record.model_dump(mode="json"))
        except Exception:
            _logger.warning("Cache write error for %s", key, exc_info=True)

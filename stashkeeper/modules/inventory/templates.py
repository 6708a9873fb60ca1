"""
Item template cache.

Read-through cache of the whole template catalog with a fixed freshness
window. Within the window the cached mapping is served without touching
the catalog; once the window has elapsed (or before the first load) the
next caller reloads synchronously.

Reloads are not synchronized: two callers that both observe an
expired cache may both reload, and the last one to finish installs its
mapping. Each reload replaces the whole mapping in one assignment, so
readers always see a complete catalog.
"""

import logging
import time
from typing import Callable, Dict, Mapping, Optional

from stashkeeper.core.errors import CatalogUnavailableError
from stashkeeper.core.models import ItemTemplate

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 60.0

CatalogLoader = Callable[[], Mapping[str, ItemTemplate]]


class TemplateCache:
    """
    Bounded-staleness cache of item templates.

    Usage:
        cache = TemplateCache(storage.list_templates)
        templates = cache.load()
        sword = cache.get('weapon:sword')
    """

    def __init__(self, loader: CatalogLoader,
                 ttl: float = CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            loader: Returns the full catalog; raises on failure
            ttl: Seconds a loaded catalog stays fresh
            clock: Monotonic time source, injectable for tests
        """
        self._loader = loader
        self.ttl = ttl
        self._clock = clock
        self._templates: Optional[Dict[str, ItemTemplate]] = None
        self._loaded_at = 0.0

    def load(self) -> Dict[str, ItemTemplate]:
        """
        Return the catalog, reloading it first if empty or expired.

        Raises:
            CatalogUnavailableError: If a needed reload fails. The previous
                contents are left in place and are not served as fresh.
        """
        templates = self._templates
        if templates is not None and self._clock() - self._loaded_at < self.ttl:
            return templates
        return self.refresh()

    def refresh(self) -> Dict[str, ItemTemplate]:
        """Unconditionally reload the catalog."""
        started = self._clock()
        try:
            templates = dict(self._loader())
        except CatalogUnavailableError:
            logger.error("Item template catalog unavailable", exc_info=True)
            raise
        except Exception as e:
            logger.error("Item template catalog unavailable", exc_info=True)
            raise CatalogUnavailableError(f"Failed to load item templates: {e}") from e

        self._templates = templates
        self._loaded_at = started
        logger.info(f"Loaded {len(templates)} item templates")
        return templates

    def get(self, key: str) -> Optional[ItemTemplate]:
        """Look up one template, reloading the catalog if needed."""
        return self.load().get(key)

    def invalidate(self) -> None:
        """Force the next load() to hit the catalog."""
        self._templates = None
        self._loaded_at = 0.0


__all__ = ['TemplateCache', 'CACHE_TTL_SECONDS']

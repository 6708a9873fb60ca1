"""
Unit tests for the item template cache.
"""

import pytest

from stashkeeper.core.errors import CatalogUnavailableError
from stashkeeper.modules.inventory.templates import TemplateCache


class CountingCatalog:
    """Catalog fake that counts loads and can be told to fail."""

    def __init__(self, templates):
        self.templates = templates
        self.loads = 0
        self.error = None

    def __call__(self):
        self.loads += 1
        if self.error is not None:
            raise self.error
        return dict(self.templates)


@pytest.fixture
def catalog_fake(templates):
    return CountingCatalog(templates)


class TestTemplateCache:
    """Freshness window and reload behaviour."""

    def test_first_use_loads(self, catalog_fake, clock):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        assert catalog_fake.loads == 0

        sword = cache.get('weapon:sword')
        assert sword.item_name == 'Sword'
        assert catalog_fake.loads == 1

    def test_served_from_cache_within_ttl(self, catalog_fake, clock):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        first = cache.load()

        clock.advance(59.9)
        assert cache.load() is first
        assert cache.get('loot:coin') is not None
        assert catalog_fake.loads == 1

    def test_reloads_after_ttl(self, catalog_fake, clock):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        cache.load()

        clock.advance(60)
        cache.load()
        assert catalog_fake.loads == 2

    def test_reload_picks_up_changes(self, catalog_fake, clock, templates):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        assert cache.get('weapon:sword') is not None

        catalog_fake.templates = {k: v for k, v in templates.items() if k != 'weapon:sword'}
        assert cache.get('weapon:sword') is not None

        clock.advance(61)
        assert cache.get('weapon:sword') is None

    def test_unknown_key_is_none(self, catalog_fake, clock):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        assert cache.get('weapon:axe') is None

    def test_failed_first_load_propagates(self, catalog_fake, clock):
        catalog_fake.error = CatalogUnavailableError("store down")
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)

        with pytest.raises(CatalogUnavailableError):
            cache.load()

        # Nothing was cached: the next call tries again
        catalog_fake.error = None
        assert cache.get('weapon:sword') is not None
        assert catalog_fake.loads == 2

    def test_unexpected_loader_error_is_wrapped(self, catalog_fake, clock):
        catalog_fake.error = ConnectionError("timeout")
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)

        with pytest.raises(CatalogUnavailableError) as exc_info:
            cache.load()
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_failed_reload_is_not_replaced_by_empty_catalog(self, catalog_fake, clock):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        cache.load()

        clock.advance(61)
        catalog_fake.error = CatalogUnavailableError("store down")
        with pytest.raises(CatalogUnavailableError):
            cache.load()

        catalog_fake.error = None
        assert cache.get('weapon:sword') is not None

    def test_invalidate_forces_reload(self, catalog_fake, clock):
        cache = TemplateCache(catalog_fake, ttl=60, clock=clock)
        cache.load()
        cache.invalidate()
        cache.load()
        assert catalog_fake.loads == 2

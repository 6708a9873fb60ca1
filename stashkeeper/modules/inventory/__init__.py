"""
Inventory module for Stashkeeper.

Server-side integrity layer for player inventories:

- TemplateCache: bounded-staleness cache of the item template catalog
- validate_item / validate_grid / validate_equipment: placement and
  template constraint checks
- sanitize_item: canonical persisted shape of accepted items
- RateLimiter: per-player submission cooldown
- InventorySystem: sequences the above and commits atomically
"""

from typing import Optional

from stashkeeper.core.auth import TokenVerifier
from stashkeeper.core.config import Config
from stashkeeper.core.storage import InventoryStorage

from .rate_limit import RateLimiter
from .sanitizer import sanitize_item, sanitize_items
from .system import InventorySystem
from .templates import TemplateCache
from .validation import validate_equipment, validate_grid, validate_item


def build_inventory_system(config: Config, storage: InventoryStorage,
                           verifier: Optional[TokenVerifier] = None) -> InventorySystem:
    """
    Wire an InventorySystem from configuration.

    The returned system owns a fresh TemplateCache and RateLimiter; build it
    once per process and share it between requests.
    """
    if verifier is None:
        verifier = TokenVerifier(config.secret_key, max_age=config.token_max_age)
    return InventorySystem(
        storage=storage,
        templates=TemplateCache(storage.list_templates, ttl=config.template_cache_ttl),
        rate_limiter=RateLimiter(cooldown=config.save_cooldown_seconds),
        verifier=verifier,
    )


__all__ = [
    'InventorySystem',
    'RateLimiter',
    'TemplateCache',
    'build_inventory_system',
    'sanitize_item',
    'sanitize_items',
    'validate_equipment',
    'validate_grid',
    'validate_item',
]

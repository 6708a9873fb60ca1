"""
Inventory System: validation and atomic commit of inventory snapshots.

Sequences one upload end to end:

1. identify the caller
2. per-player cooldown
3. request shape check
4. template catalog (may reload)
5. stash grid, expedition grid, equipment slots (first failure stops)
6. sanitize all three sections
7. one unit of work replacing the three snapshots and bumping the
   player's update counter

Nothing is written before step 7 and step 7 is all-or-nothing. Two
concurrent uploads from the same player that both clear the cooldown are
not serialized further; the later commit replaces the earlier one.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from stashkeeper.core.auth import TokenVerifier
from stashkeeper.core.errors import (
    AuthenticationError,
    CatalogUnavailableError,
    StoreUnavailableError,
)
from stashkeeper.core.models import EXPEDITION_GRID, SECTIONS, STASH_GRID, InventorySnapshot
from stashkeeper.core.result import ErrorCode, Result
from stashkeeper.core.storage import InventoryStorage

from .rate_limit import RateLimiter
from .sanitizer import sanitize_items
from .schemas import check_upload_request
from .templates import TemplateCache
from .validation import validate_equipment, validate_grid

logger = logging.getLogger(__name__)


class InventorySystem:
    """
    Orchestrates inventory uploads and read-backs.

    All collaborators are injected so tests can swap in fakes, and the
    cache and limiter are owned by whoever builds the system (normally
    once per process in create_app).

    Usage:
        system = InventorySystem(storage, TemplateCache(storage.list_templates),
                                 RateLimiter(), TokenVerifier(secret))
        result = system.upload_inventory(token, {'stash': [...]})
    """

    def __init__(self, storage: InventoryStorage, templates: TemplateCache,
                 rate_limiter: RateLimiter, verifier: TokenVerifier,
                 clock: Callable[[], float] = time.time):
        self.storage = storage
        self.templates = templates
        self.rate_limiter = rate_limiter
        self.verifier = verifier
        self.clock = clock

    def authenticate(self, credential: Optional[str]) -> Result:
        """Resolve a bearer credential; Result.ok(player_id) or UNAUTHENTICATED."""
        try:
            return Result.ok(self.verifier.verify(credential))
        except AuthenticationError as e:
            return Result.fail(str(e), ErrorCode.UNAUTHENTICATED)

    def upload_inventory(self, credential: Optional[str], payload: Any) -> Result:
        """
        Validate and persist a full inventory snapshot.

        Args:
            credential: Bearer token identifying the player
            payload: Request body with optional stash, expedition and
                     equipment arrays

        Returns:
            Result.ok({'itemCounts': {...}}) or a failure coded
            UNAUTHENTICATED, RATE_LIMITED, INVALID_ARGUMENT, NOT_FOUND or
            INFRASTRUCTURE
        """
        auth = self.authenticate(credential)
        if not auth:
            return auth
        player_id = auth.data

        # Recorded before validation so failing uploads still cool down
        if not self.rate_limiter.check_and_record(player_id, self.clock()):
            return Result.fail("Please wait before saving again", ErrorCode.RATE_LIMITED)

        return self.commit_snapshot(player_id, payload)

    def commit_snapshot(self, player_id: str, payload: Any) -> Result:
        """Validate, sanitize and atomically persist a snapshot for a known player."""
        shape = check_upload_request(payload)
        if not shape:
            logger.warning(f"Upload rejected for {player_id}: {shape.message}")
            return shape
        snapshot = InventorySnapshot.from_dict(payload)

        try:
            templates = self.templates.load()
        except CatalogUnavailableError as e:
            return Result.fail(f"Item templates unavailable: {e}", ErrorCode.INFRASTRUCTURE)

        checks = (
            ('Stash', lambda: validate_grid(
                snapshot.stash, templates, STASH_GRID.width, STASH_GRID.height,
                STASH_GRID.max_items, STASH_GRID.label)),
            ('Expedition', lambda: validate_grid(
                snapshot.expedition, templates, EXPEDITION_GRID.width, EXPEDITION_GRID.height,
                EXPEDITION_GRID.max_items, EXPEDITION_GRID.label)),
            ('Equipment', lambda: validate_equipment(snapshot.equipment, templates)),
        )
        for label, check in checks:
            result = check()
            if not result:
                rejected = result.within(f"{label} validation failed")
                logger.warning(f"Upload rejected for {player_id}: {rejected.message}")
                return rejected

        sanitized: Dict[str, list] = {
            section: sanitize_items(getattr(snapshot, section))
            for section in SECTIONS
        }

        uow = self.storage.unit_of_work()
        for section, items in sanitized.items():
            uow.replace_section(player_id, section, items)
        uow.touch_player(player_id)

        try:
            uow.commit()
        except StoreUnavailableError as e:
            logger.error(f"Inventory commit failed for {player_id}: {e}", exc_info=True)
            return Result.fail(f"Failed to save inventory: {e}", ErrorCode.INFRASTRUCTURE)

        counts = {section: len(items) for section, items in sanitized.items()}
        logger.info(
            f"Saved inventory for {player_id}: "
            + ', '.join(f"{section}={count}" for section, count in counts.items())
        )
        return Result.ok({'itemCounts': counts})

    def get_inventory(self, credential: Optional[str]) -> Result:
        """
        Read back the caller's persisted snapshot.

        Returns:
            Result.ok({'stash': [...], 'expedition': [...], 'equipment': [...],
                       'updateCount': int, 'lastUpdated': str | None})
        """
        auth = self.authenticate(credential)
        if not auth:
            return auth
        player_id = auth.data

        try:
            inventory = self.storage.get_inventory(player_id)
            player = self.storage.get_player(player_id)
        except StoreUnavailableError as e:
            logger.error(f"Inventory read failed for {player_id}: {e}", exc_info=True)
            return Result.fail(f"Failed to load inventory: {e}", ErrorCode.INFRASTRUCTURE)

        inventory['updateCount'] = player['update_count'] if player else 0
        inventory['lastUpdated'] = player['last_updated'] if player else None
        return Result.ok(inventory)

    def get_templates(self, key: Optional[str] = None) -> Result:
        """
        Catalog listing served from the template cache.

        Args:
            key: Optional template key; when given, only that template

        Returns:
            Result.ok(dict or list of dicts), NOT_FOUND or INFRASTRUCTURE
        """
        try:
            templates = self.templates.load()
        except CatalogUnavailableError as e:
            return Result.fail(f"Item templates unavailable: {e}", ErrorCode.INFRASTRUCTURE)

        if key is not None:
            template = templates.get(key)
            if template is None:
                return Result.fail(f'Item not found for id: "{key}"', ErrorCode.NOT_FOUND)
            return Result.ok({'id': key, **template.to_dict()})

        if not templates:
            return Result.fail("No item templates in the catalog", ErrorCode.NOT_FOUND)
        return Result.ok([
            {'id': template_key, **template.to_dict()}
            for template_key, template in sorted(templates.items())
        ])


__all__ = ['InventorySystem']

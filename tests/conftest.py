"""
Shared fixtures: a small item catalog, a controllable clock and an
in-memory storage seeded with the catalog.
"""

import pytest

from stashkeeper.core.models import ItemTemplate
from stashkeeper.core.storage import InventoryStorage


CATALOG = {
    'weapon:sword': {
        'item_name': 'Sword', 'grid_width': 2, 'grid_height': 1,
        'max_stack': 1, 'is_stackable': False, 'equip_slot': 5,
    },
    'armor:iron_helm': {
        'item_name': 'Iron Helm', 'grid_width': 2, 'grid_height': 2,
        'max_stack': 1, 'is_stackable': False, 'equip_slot': 1,
    },
    'armor:iron_chest': {
        'item_name': 'Iron Chestplate', 'grid_width': 2, 'grid_height': 3,
        'max_stack': 1, 'is_stackable': False, 'equip_slot': 2,
    },
    'gear:backpack': {
        'item_name': 'Backpack', 'grid_width': 2, 'grid_height': 2,
        'max_stack': 1, 'is_stackable': False, 'is_container': True,
        'container_grid_width': 4, 'container_grid_height': 4, 'equip_slot': 8,
    },
    'gear:pouch': {
        'item_name': 'Pouch', 'grid_width': 1, 'grid_height': 1,
        'max_stack': 1, 'is_stackable': False, 'is_container': True,
        'container_grid_width': 2, 'container_grid_height': 2, 'equip_slot': 7,
    },
    'loot:coin': {
        'item_name': 'Gold Coin', 'grid_width': 1, 'grid_height': 1,
        'max_stack': 50, 'is_stackable': True, 'equip_slot': 0,
    },
    'loot:relic': {
        'item_name': 'Relic', 'grid_width': 1, 'grid_height': 1,
        'max_stack': 3, 'is_stackable': False, 'equip_slot': 0,
    },
    'loot:strange_slot': {
        'item_name': 'Strange Idol', 'grid_width': 1, 'grid_height': 1,
        'max_stack': 1, 'is_stackable': False, 'equip_slot': 42,
    },
}


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog():
    """Raw catalog documents keyed by template key."""
    return {key: dict(doc) for key, doc in CATALOG.items()}


@pytest.fixture
def templates(catalog):
    """Catalog as ItemTemplate objects."""
    return {key: ItemTemplate.from_dict(key, doc) for key, doc in catalog.items()}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(catalog):
    """In-memory storage seeded with the test catalog."""
    storage = InventoryStorage(':memory:')
    storage.initialize()
    storage.import_templates(catalog)
    yield storage
    storage.close()

"""
Unit tests for InventoryStorage and UnitOfWork.
"""

import pytest

from stashkeeper.core.errors import CatalogUnavailableError, StoreUnavailableError
from stashkeeper.core.storage import InventoryStorage


@pytest.fixture
def empty_storage():
    """In-memory storage without any templates."""
    storage = InventoryStorage(':memory:')
    storage.initialize()
    yield storage
    storage.close()


def section_rows(storage):
    return storage.conn.execute("SELECT COUNT(*) FROM inventory_sections").fetchone()[0]


class TestInventoryStorage:
    """Initialization and catalog access."""

    def test_initialize(self, empty_storage):
        cursor = empty_storage.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        )
        tables = [row[0] for row in cursor.fetchall()]

        assert 'item_templates' in tables
        assert 'players' in tables
        assert 'inventory_sections' in tables

    def test_initialize_twice_is_harmless(self, tmp_path):
        db_path = str(tmp_path / 'stash.db')
        first = InventoryStorage(db_path)
        first.initialize()
        first.import_templates({'loot:coin': {'item_name': 'Coin'}})
        first.close()

        second = InventoryStorage(db_path)
        second.initialize()
        assert 'loot:coin' in second.list_templates()
        second.close()

    def test_import_and_list_templates(self, storage):
        templates = storage.list_templates()
        assert 'weapon:sword' in templates
        sword = templates['weapon:sword']
        assert (sword.grid_width, sword.grid_height) == (2, 1)
        assert sword.slot_name == 'main_hand'

        backpack = templates['gear:backpack']
        assert backpack.is_container
        assert (backpack.container_grid_width, backpack.container_grid_height) == (4, 4)

    def test_import_replaces_existing(self, storage):
        storage.import_templates({'loot:coin': {'item_name': 'Silver Coin', 'max_stack': 20,
                                                'is_stackable': True}})
        coin = storage.list_templates()['loot:coin']
        assert coin.item_name == 'Silver Coin'
        assert coin.max_stack == 20

    def test_missing_template_not_listed(self, storage):
        assert 'weapon:axe' not in storage.list_templates()

    def test_list_templates_when_closed(self, empty_storage):
        empty_storage.close()
        with pytest.raises(CatalogUnavailableError):
            empty_storage.list_templates()

    def test_list_templates_corrupt_document(self, empty_storage):
        empty_storage.conn.execute(
            "INSERT INTO item_templates (key, data, modified_at) VALUES ('bad:doc', 'not json', '')"
        )
        with pytest.raises(CatalogUnavailableError):
            empty_storage.list_templates()

    def test_missing_player_and_section(self, storage):
        assert storage.get_player('nobody') is None
        assert storage.get_section('nobody', 'stash') is None
        assert storage.get_inventory('nobody') == {'stash': [], 'expedition': [], 'equipment': []}


class TestUnitOfWork:
    """Atomic multi-document writes."""

    def test_nothing_written_before_commit(self, storage):
        uow = storage.unit_of_work()
        uow.replace_section('p1', 'stash', [{'t': 'loot:coin', 'n': 1, 'x': 0, 'y': 0}])
        uow.touch_player('p1')

        assert uow.pending == 2
        assert storage.get_player('p1') is None
        assert section_rows(storage) == 0

    def test_commit_writes_sections_and_player(self, storage):
        items = [{'t': 'loot:coin', 'n': 1, 'x': 0, 'y': 0}]
        uow = storage.unit_of_work()
        uow.replace_section('p1', 'stash', items)
        uow.replace_section('p1', 'expedition', [])
        uow.replace_section('p1', 'equipment', [])
        uow.touch_player('p1')
        uow.commit()

        assert storage.get_section('p1', 'stash')['items'] == items
        assert storage.get_section('p1', 'expedition')['items'] == []
        player = storage.get_player('p1')
        assert player['update_count'] == 1
        assert player['last_updated'] == storage.get_section('p1', 'stash')['last_updated']

    def test_update_counter_increments(self, storage):
        for _ in range(3):
            uow = storage.unit_of_work()
            uow.touch_player('p1')
            uow.commit()
        assert storage.get_player('p1')['update_count'] == 3

    def test_replace_overwrites_previous_snapshot(self, storage):
        uow = storage.unit_of_work()
        uow.replace_section('p1', 'stash', [{'t': 'loot:coin', 'n': 1, 'x': 0, 'y': 0}])
        uow.commit()

        uow = storage.unit_of_work()
        uow.replace_section('p1', 'stash', [])
        uow.commit()

        assert storage.get_section('p1', 'stash')['items'] == []

    def test_failed_commit_writes_nothing(self, storage):
        # Break the last write so the earlier ones must roll back
        storage.conn.execute("DROP TABLE players")

        uow = storage.unit_of_work()
        uow.replace_section('p1', 'stash', [{'t': 'loot:coin', 'n': 1, 'x': 0, 'y': 0}])
        uow.replace_section('p1', 'expedition', [])
        uow.touch_player('p1')

        with pytest.raises(StoreUnavailableError):
            uow.commit()

        assert not uow.committed
        assert section_rows(storage) == 0
        assert not storage.conn.in_transaction

    def test_commit_twice_rejected(self, storage):
        uow = storage.unit_of_work()
        uow.touch_player('p1')
        uow.commit()
        with pytest.raises(RuntimeError):
            uow.commit()

    def test_unknown_section_rejected(self, storage):
        with pytest.raises(ValueError):
            storage.unit_of_work().replace_section('p1', 'vault', [])

    def test_commit_on_closed_storage(self, empty_storage):
        uow = empty_storage.unit_of_work()
        uow.touch_player('p1')
        empty_storage.close()
        with pytest.raises(StoreUnavailableError):
            uow.commit()

"""
Core data models for Stashkeeper.

These models represent the fundamental building blocks:
- ItemTemplate: Immutable catalog definition of an item kind
- InventoryItem: One client-submitted item, possibly holding nested items
- GridSpec: Dimensions and capacity of an inventory grid

Fixed contract constants (grid sizes, slot codes, nesting depth) live here
as well so every layer agrees on them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional


# Equipment slot codes as stored on templates
EQUIP_SLOT_MAP: Dict[int, str] = {
    0: "none",
    1: "head",
    2: "chest",
    3: "legs",
    4: "feet",
    5: "main_hand",
    6: "off_hand",
    7: "belt",
    8: "back",
}

VALID_SLOTS = (
    "head",
    "chest",
    "legs",
    "feet",
    "main_hand",
    "off_hand",
    "belt",
    "back",
)

TEMPLATE_KEY_PATTERN = r'^[a-z0-9_]+:[a-z0-9_]+$'

MAX_CONTAINER_DEPTH = 2
MAX_CONDITION = 100

# Snapshot sections, in validation order
SECTIONS = ('stash', 'expedition', 'equipment')


def now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class GridSpec:
    """
    A rectangular inventory grid.

    Attributes:
        label: Section name used in error messages
        width: Number of columns
        height: Number of rows
        max_items: Maximum number of top-level items
    """
    label: str
    width: int
    height: int
    max_items: int


STASH_GRID = GridSpec(label='stash', width=10, height=10, max_items=100)
EXPEDITION_GRID = GridSpec(label='expedition', width=4, height=4, max_items=16)


@dataclass(frozen=True)
class ItemTemplate:
    """
    Catalog definition of an item kind.

    Attributes:
        key: Namespaced template key (``weapon:sword``)
        item_name: Display name
        grid_width: Footprint width when unrotated
        grid_height: Footprint height when unrotated
        max_stack: Largest legal stack count
        is_stackable: Whether more than one may share a stack
        is_container: Whether the item can hold other items
        container_grid_width: Interior width (containers only)
        container_grid_height: Interior height (containers only)
        equip_slot: Slot code, see EQUIP_SLOT_MAP
    """
    key: str
    item_name: str
    grid_width: int = 1
    grid_height: int = 1
    max_stack: int = 1
    is_stackable: bool = False
    is_container: bool = False
    container_grid_width: int = 0
    container_grid_height: int = 0
    equip_slot: int = 0

    @property
    def slot_name(self) -> Optional[str]:
        """Canonical slot name for this template, or None for unknown codes."""
        return EQUIP_SLOT_MAP.get(self.equip_slot)

    def footprint(self, rotated: bool) -> tuple:
        """Effective (width, height); rotation swaps the axes."""
        if rotated:
            return self.grid_height, self.grid_width
        return self.grid_width, self.grid_height

    @staticmethod
    def from_dict(key: str, data: Mapping[str, Any]) -> 'ItemTemplate':
        """Build a template from a catalog document."""
        return ItemTemplate(
            key=key,
            item_name=data.get('item_name', key),
            grid_width=int(data.get('grid_width', 1)),
            grid_height=int(data.get('grid_height', 1)),
            max_stack=int(data.get('max_stack', 1)),
            is_stackable=bool(data.get('is_stackable', False)),
            is_container=bool(data.get('is_container', False)),
            container_grid_width=int(data.get('container_grid_width', 0) or 0),
            container_grid_height=int(data.get('container_grid_height', 0) or 0),
            equip_slot=int(data.get('equip_slot', 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a catalog document (without the key)."""
        return {
            'item_name': self.item_name,
            'grid_width': self.grid_width,
            'grid_height': self.grid_height,
            'max_stack': self.max_stack,
            'is_stackable': self.is_stackable,
            'is_container': self.is_container,
            'container_grid_width': self.container_grid_width,
            'container_grid_height': self.container_grid_height,
            'equip_slot': self.equip_slot,
        }


@dataclass
class InventoryItem:
    """
    One submitted item node.

    Fields hold the raw submitted values (a client may send a string where
    a number belongs); the validators judge them, the sanitizer coerces
    them. Wire keys are short: t, n, x, y, r, c, slot, contents.

    Attributes:
        t: Template key
        n: Stack count
        x: Column of the top-left cell (grid and container items)
        y: Row of the top-left cell
        r: Rotation flag
        c: Condition, 0-100
        slot: Equipment slot name (equipped items)
        contents: Nested items, or None when the key was absent
    """
    t: Any = None
    n: Any = None
    x: Any = None
    y: Any = None
    r: Any = None
    c: Any = None
    slot: Any = None
    contents: Any = None

    @staticmethod
    def from_dict(data: Mapping[str, Any], depth: int = 0) -> 'InventoryItem':
        """
        Deserialize a submitted item tree.

        Unknown keys are dropped. ``contents`` is converted recursively when
        it is a list of mappings; anything else is kept raw so validation can
        reject it with a precise reason. Conversion stops at
        MAX_CONTAINER_DEPTH: contents below that are kept raw, since no
        legal item holds anything there.

        Args:
            data: Submitted item mapping
            depth: Nesting depth of this item; 0 for top-level items
        """
        contents = data.get('contents')
        if (depth < MAX_CONTAINER_DEPTH and isinstance(contents, list)
                and all(isinstance(c, Mapping) for c in contents)):
            contents = [InventoryItem.from_dict(c, depth + 1) for c in contents]
        return InventoryItem(
            t=data.get('t'),
            n=data.get('n'),
            x=data.get('x'),
            y=data.get('y'),
            r=data.get('r'),
            c=data.get('c'),
            slot=data.get('slot'),
            contents=contents,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting absent fields."""
        data: Dict[str, Any] = {}
        for key in ('t', 'n', 'x', 'y', 'r', 'c', 'slot'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.contents is not None:
            data['contents'] = [
                child.to_dict() if isinstance(child, InventoryItem) else child
                for child in self.contents
            ]
        return data


@dataclass
class InventorySnapshot:
    """The three sections of one submission, in submitted order."""
    stash: List[InventoryItem] = field(default_factory=list)
    expedition: List[InventoryItem] = field(default_factory=list)
    equipment: List[InventoryItem] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> 'InventorySnapshot':
        """Deserialize a request body; missing sections default to empty."""
        return InventorySnapshot(**{
            section: [InventoryItem.from_dict(item) for item in data.get(section) or []]
            for section in SECTIONS
        })

    def counts(self) -> Dict[str, int]:
        return {section: len(getattr(self, section)) for section in SECTIONS}


__all__ = [
    'EQUIP_SLOT_MAP',
    'VALID_SLOTS',
    'TEMPLATE_KEY_PATTERN',
    'MAX_CONTAINER_DEPTH',
    'MAX_CONDITION',
    'SECTIONS',
    'STASH_GRID',
    'EXPEDITION_GRID',
    'GridSpec',
    'ItemTemplate',
    'InventoryItem',
    'InventorySnapshot',
    'now',
]

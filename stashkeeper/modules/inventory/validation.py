"""
Structural and semantic validation of submitted inventories.

Three entry points, all returning Result objects:

- validate_item: one item and, recursively, its container contents
- validate_grid: a stash or expedition grid (bounds, overlap, capacity)
- validate_equipment: worn items against the fixed equipment slots

Validation stops at the first violation in submission order. Failures
carry a path (``Item 4``, ``Contents[1]``) so the reported message points
at the offending item. Placement is checked, never computed: the client
declares every position and the first item to claim a cell keeps it.
"""

import re
from typing import Any, List, Mapping, Optional, Set, Tuple

from stashkeeper.core.models import (
    MAX_CONDITION,
    MAX_CONTAINER_DEPTH,
    TEMPLATE_KEY_PATTERN,
    VALID_SLOTS,
    InventoryItem,
    ItemTemplate,
)
from stashkeeper.core.result import ErrorCode, Result

TEMPLATE_KEY_RE = re.compile(TEMPLATE_KEY_PATTERN)

Templates = Mapping[str, ItemTemplate]
Cell = Tuple[int, int]


def _invalid(reason: str) -> Result:
    return Result.fail(reason, ErrorCode.INVALID_ARGUMENT)


def _is_number(value: Any) -> bool:
    # bool is an int subclass; JSON true is not a number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return _is_number(value)


def as_item(value: Any, depth: int = 0) -> Optional[InventoryItem]:
    """Accept an InventoryItem or a raw mapping; anything else is None."""
    if isinstance(value, InventoryItem):
        return value
    if isinstance(value, Mapping):
        return InventoryItem.from_dict(value, depth)
    return None


def _check_position(item: InventoryItem) -> Optional[str]:
    """Reason the item's position is unusable, or None."""
    if item.x is None or item.y is None:
        return "Missing position"
    if not _is_integer(item.x) or not _is_integer(item.y):
        return f"Invalid position ({item.x}, {item.y})"
    if item.x < 0 or item.y < 0:
        return f"Negative position ({item.x}, {item.y})"
    return None


def _claim_cells(x: int, y: int, width: int, height: int,
                 occupied: Set[Cell]) -> Optional[Cell]:
    """
    Mark the rectangle's cells as occupied.

    Returns:
        The first cell that was already claimed, or None if all were free
    """
    for dx in range(width):
        for dy in range(height):
            cell = (x + dx, y + dy)
            if cell in occupied:
                return cell
            occupied.add(cell)
    return None


def validate_item(item: Any, templates: Templates, depth: int = 0) -> Result:
    """
    Validate one item against its template, then its contents.

    Checks run in a fixed order and the first failure wins: template key,
    template lookup, stack count, rotation, condition, container contents.

    Args:
        item: InventoryItem (or raw mapping) to check
        templates: Template catalog keyed by template key
        depth: Nesting depth; 0 for items placed directly in a grid or slot

    Returns:
        Result.ok(item) or a failure. Unknown templates fail with NOT_FOUND,
        everything else with INVALID_ARGUMENT.
    """
    item = as_item(item, depth)
    if item is None:
        return _invalid("Item must be an object")

    if not item.t or not isinstance(item.t, str):
        return _invalid("Missing template ID")

    if not TEMPLATE_KEY_RE.match(item.t):
        return _invalid(f'Invalid template ID format: "{item.t}"')

    template = templates.get(item.t)
    if template is None:
        return Result.fail(f'Unknown item: "{item.t}"', ErrorCode.NOT_FOUND)

    if not _is_integer(item.n) or item.n < 1:
        return _invalid("Invalid stack size")

    if item.n > template.max_stack:
        return _invalid(f"Stack {int(item.n)} exceeds max {template.max_stack}")

    if not template.is_stackable and item.n > 1:
        return _invalid(f'"{template.item_name}" is not stackable')

    if item.r is not None and not isinstance(item.r, bool):
        return _invalid("Invalid rotation value")

    if item.c is not None:
        if not _is_number(item.c) or not 0 <= item.c <= MAX_CONDITION:
            return _invalid(f"Condition must be 0-{MAX_CONDITION}")

    if item.contents is not None:
        return _validate_contents(item, template, templates, depth)

    return Result.ok(item)


def _validate_contents(item: InventoryItem, template: ItemTemplate,
                       templates: Templates, depth: int) -> Result:
    if not template.is_container:
        return _invalid(f'"{template.item_name}" is not a container')

    if not isinstance(item.contents, list):
        return _invalid("Contents must be an array")

    if item.contents and depth >= MAX_CONTAINER_DEPTH:
        return _invalid("Container nesting too deep")

    width = template.container_grid_width
    height = template.container_grid_height
    occupied: Set[Cell] = set()

    for i, raw_child in enumerate(item.contents):
        where = f"Contents[{i}]"

        result = validate_item(raw_child, templates, depth + 1)
        if not result:
            return result.within(where)
        child = result.data
        child_template = templates[child.t]

        reason = _check_position(child)
        if reason:
            return _invalid(reason).within(where)

        child_width, child_height = child_template.footprint(child.r is True)
        if child.x + child_width > width or child.y + child_height > height:
            return _invalid("Outside container bounds").within(where)

        if _claim_cells(int(child.x), int(child.y), child_width, child_height, occupied):
            return _invalid("Overlaps within container").within(where)

    return Result.ok(item)


def validate_grid(items: Any, templates: Templates, width: int, height: int,
                  max_items: int, label: str = 'grid') -> Result:
    """
    Validate the declared placement of items on a rectangular grid.

    Every item must pass validate_item at depth 0, carry a non-negative
    integer position, lie within [0, width) x [0, height) using its
    effective footprint (swapped when rotated), and not share a cell with
    any earlier item.

    Args:
        items: Submitted items, in submission order
        templates: Template catalog
        width: Grid columns
        height: Grid rows
        max_items: Maximum number of top-level items
        label: Grid name, for error messages

    Returns:
        Result.ok(list of InventoryItem) or the first failure
    """
    if not isinstance(items, list):
        return _invalid("Items must be an array")

    if len(items) > max_items:
        return _invalid(f"Too many items in {label} ({len(items)} > {max_items})")

    occupied: Set[Cell] = set()
    accepted: List[InventoryItem] = []

    for i, raw_item in enumerate(items):
        result = validate_item(raw_item, templates, 0)
        if not result:
            return result.within(f"Item {i}")
        item = result.data

        template = templates.get(item.t)
        if template is None:
            return Result.fail(f'Unknown template "{item.t}"', ErrorCode.NOT_FOUND).within(f"Item {i}")
        where = f'Item {i} "{template.item_name}"'

        reason = _check_position(item)
        if reason:
            return _invalid(reason).within(where)

        item_width, item_height = template.footprint(item.r is True)

        if item.x + item_width > width:
            return _invalid("Overflows grid width").within(where)

        if item.y + item_height > height:
            return _invalid("Overflows grid height").within(where)

        conflict = _claim_cells(int(item.x), int(item.y), item_width, item_height, occupied)
        if conflict:
            return _invalid(f"Overlaps at ({conflict[0]},{conflict[1]})").within(where)

        accepted.append(item)

    return Result.ok(accepted)


def validate_equipment(items: Any, templates: Templates) -> Result:
    """
    Validate worn items against the fixed equipment slots.

    Each entry must name a canonical slot not claimed by an earlier entry,
    pass validate_item at depth 0 (equipped containers follow the same
    nesting rule as grid items), and use a template whose slot code maps
    to exactly the declared slot.

    Returns:
        Result.ok(list of InventoryItem) or the first failure
    """
    if not isinstance(items, list):
        return _invalid("Equipment must be an array")

    used_slots: Set[str] = set()
    accepted: List[InventoryItem] = []

    for i, raw_item in enumerate(items):
        where = f"Equipment[{i}]"

        item = as_item(raw_item)
        if item is None:
            return _invalid("Item must be an object").within(where)

        if not item.slot or not isinstance(item.slot, str):
            return _invalid("Missing slot").within(where)

        if item.slot not in VALID_SLOTS:
            return _invalid(f'Invalid slot "{item.slot}"').within(where)

        if item.slot in used_slots:
            return _invalid(f'Duplicate slot "{item.slot}"').within(where)
        used_slots.add(item.slot)

        where = f"Equipment[{i}] ({item.slot})"
        result = validate_item(item, templates, 0)
        if not result:
            return result.within(where)

        template = templates[item.t]
        expected_slot = template.slot_name
        if expected_slot is None or expected_slot == "none":
            return _invalid(f'"{template.item_name}" cannot be equipped').within(where)

        if expected_slot != item.slot:
            return _invalid(
                f'"{template.item_name}" goes in {expected_slot}, not {item.slot}'
            ).within(where)

        accepted.append(item)

    return Result.ok(accepted)


__all__ = [
    'as_item',
    'validate_item',
    'validate_grid',
    'validate_equipment',
]

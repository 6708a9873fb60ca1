"""
JSON schema for inventory upload requests.

The schema checks shape only: the body is an object, each section is an
array of objects, and nested ``contents`` are arrays of objects. Field
values (template keys, counts, positions) are left to the validators,
which report them with item-qualified messages.

Item shape is spelled out for a fixed number of levels (``item0`` for a
top-level item through ``item3`` for the children of a container at the
deepest legal depth). Below that ``contents`` is only required to be an
array; the item validator rejects anything non-empty there as nesting too
deep, so arbitrarily deep payloads never reach a recursive walk.
"""

from typing import Any, Dict

import jsonschema
from jsonschema.exceptions import best_match

from stashkeeper.core.models import MAX_CONTAINER_DEPTH
from stashkeeper.core.result import ErrorCode, Result

# item0 .. item{MAX_CONTAINER_DEPTH + 1}
ITEM_SCHEMA_LEVELS = MAX_CONTAINER_DEPTH + 2


def _item_definitions() -> Dict[str, Any]:
    definitions = {}
    for level in range(ITEM_SCHEMA_LEVELS):
        contents: Dict[str, Any] = {
            "type": "array",
            "description": "Items stored inside a container"
        }
        if level + 1 < ITEM_SCHEMA_LEVELS:
            contents["items"] = {"$ref": f"#/definitions/item{level + 1}"}
        definitions[f"item{level}"] = {
            "type": "object",
            "properties": {"contents": contents}
        }
    return definitions


UPLOAD_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "definitions": {
        **_item_definitions(),
        "section": {
            "type": "array",
            "items": {"$ref": "#/definitions/item0"}
        }
    },
    "properties": {
        "stash": {"$ref": "#/definitions/section"},
        "expedition": {"$ref": "#/definitions/section"},
        "equipment": {"$ref": "#/definitions/section"}
    }
}

_validator = jsonschema.Draft7Validator(UPLOAD_SCHEMA)


def _format_path(path) -> str:
    parts = []
    for part in path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            parts.append(f".{part}" if parts else str(part))
    return ''.join(parts) or 'request'


def check_upload_request(data: Any) -> Result:
    """
    Validate the shape of an upload request body.

    Returns:
        Result.ok(data) or an INVALID_ARGUMENT failure naming the location,
        e.g. ``stash[3].contents: 'x' is not of type 'array'``
    """
    error = best_match(_validator.iter_errors(data))
    if error is None:
        return Result.ok(data)
    return Result.fail(
        f"{_format_path(error.absolute_path)}: {error.message}",
        ErrorCode.INVALID_ARGUMENT
    ).within("Malformed request")


__all__ = ['UPLOAD_SCHEMA', 'ITEM_SCHEMA_LEVELS', 'check_upload_request']

#!/usr/bin/env python3
"""
Command-line interface for Stashkeeper.

Provides commands for setting up the database, loading the item template
catalog, issuing player tokens, inspecting saved inventories and running
the server.
"""

import argparse
import json
import sys

from stashkeeper.core.auth import TokenVerifier
from stashkeeper.core.config import get_config
from stashkeeper.core.errors import StashkeeperError
from stashkeeper.core.logging_config import setup_logging
from stashkeeper.core.storage import InventoryStorage


def _open_storage(args) -> InventoryStorage:
    storage = InventoryStorage(args.db or get_config().database_path)
    storage.initialize()
    return storage


def load_template_file(path: str) -> dict:
    """
    Read a catalog file.

    Accepts either an object keyed by template key, or a list of documents
    each carrying its key under "id".
    """
    with open(path, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        templates = {}
        for document in data:
            document = dict(document)
            key = document.pop('id', None)
            if not key:
                raise ValueError(f"Template document without id: {document}")
            templates[key] = document
        return templates
    raise ValueError("Template file must hold an object or a list")


def cmd_init_db(args):
    """Create the database tables."""
    try:
        storage = _open_storage(args)
        print(f"✓ Database ready at {storage.db_path}")
        storage.close()
    except (OSError, StashkeeperError) as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_templates_import(args):
    """Import item templates from a JSON file."""
    try:
        templates = load_template_file(args.file)
        storage = _open_storage(args)
        count = storage.import_templates(templates)
        storage.close()
        print(f"✓ Imported {count} item templates")
    except (OSError, ValueError, StashkeeperError) as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_templates_list(args):
    """List item templates."""
    try:
        storage = _open_storage(args)
        templates = storage.list_templates()
        storage.close()
    except StashkeeperError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not templates:
        print("No item templates found")
        return

    print(f"Found {len(templates)} item templates:\n")
    for key, template in templates.items():
        flags = []
        if template.is_stackable:
            flags.append(f"stack {template.max_stack}")
        if template.is_container:
            flags.append(f"holds {template.container_grid_width}x{template.container_grid_height}")
        if template.slot_name not in (None, 'none'):
            flags.append(template.slot_name)
        size = f"{template.grid_width}x{template.grid_height}"
        print(f"  {key:30} {size:6} {template.item_name}"
              + (f"  [{', '.join(flags)}]" if flags else ''))


def cmd_token_issue(args):
    """Issue a bearer token for a player."""
    config = get_config()
    print(TokenVerifier(config.secret_key).issue(args.player_id))


def cmd_inventory_show(args):
    """Show a player's saved inventory."""
    try:
        storage = _open_storage(args)
        inventory = storage.get_inventory(args.player_id)
        player = storage.get_player(args.player_id)
        storage.close()
    except StashkeeperError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    if player is None:
        print(f"No saved inventory for {args.player_id}")
        return

    print(f"Player {args.player_id} (saves: {player['update_count']}, "
          f"last: {player['last_updated']})")
    print(json.dumps(inventory, indent=2))


def cmd_serve(args):
    """Run the API server."""
    from stashkeeper.web.server import run_server

    config = get_config()
    if args.db:
        config.database_path = args.db
    if args.port:
        config.port = args.port
    run_server(config)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Stashkeeper - server-side inventory validation'
    )
    parser.add_argument('--db', help='Path to the SQLite database (default: DATABASE_PATH)')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # ========== init-db command ==========
    parser_init = subparsers.add_parser('init-db', help='Create database tables')
    parser_init.set_defaults(func=cmd_init_db)

    # ========== templates commands ==========
    parser_templates = subparsers.add_parser('templates', help='Item template catalog')
    templates_subparsers = parser_templates.add_subparsers(dest='templates_command')

    parser_templates_import = templates_subparsers.add_parser('import', help='Import templates from JSON')
    parser_templates_import.add_argument('file', help='JSON catalog file')
    parser_templates_import.set_defaults(func=cmd_templates_import)

    parser_templates_list = templates_subparsers.add_parser('list', help='List templates')
    parser_templates_list.set_defaults(func=cmd_templates_list)

    # ========== token command ==========
    parser_token = subparsers.add_parser('token', help='Issue a player bearer token')
    parser_token.add_argument('player_id', help='Player ID')
    parser_token.set_defaults(func=cmd_token_issue)

    # ========== inventory command ==========
    parser_inventory = subparsers.add_parser('inventory', help='Show a saved inventory')
    parser_inventory.add_argument('player_id', help='Player ID')
    parser_inventory.set_defaults(func=cmd_inventory_show)

    # ========== serve command ==========
    parser_serve = subparsers.add_parser('serve', help='Run the API server')
    parser_serve.add_argument('--port', type=int, help='Port (default: PORT)')
    parser_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = get_config()
    setup_logging(level=config.log_level, log_file=config.log_file, use_colors=config.log_colors)

    if hasattr(args, 'func'):
        args.func(args)
    else:
        print(f"No subcommand provided for '{args.command}'", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

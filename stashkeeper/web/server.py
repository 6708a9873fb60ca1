"""
Web interface for Stashkeeper.

Flask app exposing the inventory API:
- /api/inventory: Upload and read back inventory snapshots
- /api/items: Item template catalog
- /health: Liveness probe
"""

import logging
from typing import Optional

from flask import Flask, jsonify

from stashkeeper.core.auth import TokenVerifier
from stashkeeper.core.config import Config, get_config
from stashkeeper.core.storage import InventoryStorage
from stashkeeper.modules.inventory import InventorySystem, build_inventory_system
from stashkeeper.modules.inventory.api import inventory_bp

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None,
               storage: Optional[InventoryStorage] = None,
               system: Optional[InventorySystem] = None,
               verifier: Optional[TokenVerifier] = None) -> Flask:
    """
    Create the Flask app.

    The InventorySystem (and with it the template cache and rate limiter)
    is built once here and lives as long as the app.

    Args:
        config: Configuration (defaults to the global config)
        storage: Initialized storage (opened from config.database_path if None)
        system: Prebuilt InventorySystem, mainly for tests
        verifier: Token verifier (built from config.secret_key if None)

    Returns:
        Flask app
    """
    config = config or get_config()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.secret_key
    app.config['STASHKEEPER'] = config

    if system is None:
        if storage is None:
            storage = InventoryStorage(config.database_path)
            storage.initialize()
            logger.info(f"Opened database {config.database_path}")
        system = build_inventory_system(config, storage, verifier)

    app.extensions['stashkeeper.inventory'] = system
    app.register_blueprint(inventory_bp)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    return app


def run_server(config: Optional[Config] = None) -> None:
    """Run the development server."""
    config = config or get_config()
    app = create_app(config)
    logger.info(f"Starting Stashkeeper on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port, debug=config.debug, threaded=True)


__all__ = ['create_app', 'run_server']

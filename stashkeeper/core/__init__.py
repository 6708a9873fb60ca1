"""Core infrastructure: configuration, logging, models, storage, identity."""

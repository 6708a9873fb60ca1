"""
Exceptions raised at collaborator seams.

Domain operations report failures through Result objects. The exceptions
below are reserved for the edges where an external collaborator (identity
provider, template catalog, document store) cannot do its job; the
InventorySystem translates them into Result failures.
"""


class StashkeeperError(Exception):
    """Base class for all Stashkeeper exceptions."""


class AuthenticationError(StashkeeperError):
    """Credential missing, malformed, expired or forged."""


class InfrastructureError(StashkeeperError):
    """A backing service is unavailable. Callers should retry with backoff."""


class CatalogUnavailableError(InfrastructureError):
    """The item template catalog could not be loaded."""


class StoreUnavailableError(InfrastructureError):
    """The player document store could not read or commit."""


__all__ = [
    'StashkeeperError',
    'AuthenticationError',
    'InfrastructureError',
    'CatalogUnavailableError',
    'StoreUnavailableError',
]

"""
Stashkeeper: server-side validation and atomic persistence of player inventories.
"""

__version__ = "0.1.0"

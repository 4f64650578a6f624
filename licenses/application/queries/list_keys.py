"""
ListKeysQuery.
"""

from dataclasses import dataclass


@dataclass
class ListKeysQuery:
    """Query to list every key with its binding summary."""

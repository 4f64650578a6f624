"""
GetLicenseStatsQuery.

Dashboard counters for the admin panel.
"""

from dataclasses import dataclass


@dataclass
class GetLicenseStatsQuery:
    """Query for key counts by status and tier."""

    recent_activity_limit: int = 10

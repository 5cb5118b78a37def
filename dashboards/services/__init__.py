"""
Dashboard services module
"""

from .overview import DashboardService

__all__ = [
    'DashboardService',
]

"""
Services package: backend client, polling and display helpers
"""

from .backend import BetTrackerAPIClient, BackendAPIError
from .poller import DashboardPoller, DashboardState, DashboardView
from . import charts, formatting

__all__ = [
    'BetTrackerAPIClient',
    'BackendAPIError',
    'DashboardPoller',
    'DashboardState',
    'DashboardView',
    'charts',
    'formatting'
]

"""
Polled dashboard state - health, stats and the current match list
"""

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from config import Config
from models import Match, Stats
from .backend import BetTrackerAPIClient, BackendAPIError
from logger import log

TABS = ('live', 'history')


@dataclass(frozen=True)
class DashboardView:
    """What the dashboard is showing: tab, history league filter and page"""
    tab: str = 'live'
    league_id: Optional[int] = None
    page: int = 1

    @classmethod
    def from_args(cls, args) -> 'DashboardView':
        """Build a view from request query args, falling back to defaults on bad input"""
        tab = args.get('tab', 'live')
        if tab not in TABS:
            tab = 'live'

        try:
            league_id = int(args.get('league')) if args.get('league') else None
        except ValueError:
            league_id = None

        try:
            page = max(1, int(args.get('page', 1)))
        except ValueError:
            page = 1

        return cls(tab=tab, league_id=league_id, page=page)

    @property
    def offset(self) -> int:
        return (self.page - 1) * Config.ITEMS_PER_PAGE


@dataclass
class DashboardState:
    matches: List[Match] = field(default_factory=list)
    stats: Optional[Stats] = None
    total_matches: int = 0
    is_tracker_running: bool = False
    refreshed_at: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            'matches': [m.to_dict() for m in self.matches],
            'stats': self.stats.to_dict() if self.stats else None,
            'total_matches': self.total_matches,
            'is_tracker_running': self.is_tracker_running,
            'refreshed_at': self.refreshed_at.isoformat() if self.refreshed_at else None
        }


def fetch_matches(client: BetTrackerAPIClient, view: DashboardView) -> Tuple[List[Match], int]:
    """Live tab lists tracked matches; history tab pages through finished ones"""
    if view.tab == 'live':
        return client.get_tracked_matches()
    return client.get_history(
        status='finished',
        league_id=view.league_id,
        limit=Config.ITEMS_PER_PAGE,
        offset=view.offset
    )


def _log_fetch_failure(what: str, error: BackendAPIError):
    log(f"[ERROR] Failed to fetch {what}: {error}")
    # An expired or revoked token ends the session instead of showing stale data
    if error.is_unauthorized:
        raise error


class DashboardPoller:
    """
    Refreshes dashboard state from the backend at most once per poll interval.

    Health, stats and matches are fetched independently. When one of them
    fails the previous value for that session is kept. A session that has not
    refreshed for `session_idle_seconds` is forgotten.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, session_idle_seconds: Optional[int] = None):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else Config.POLL_INTERVAL_SECONDS
        self.session_idle_seconds = (session_idle_seconds if session_idle_seconds is not None
                                     else Config.SESSION_IDLE_SECONDS)
        self._lock = threading.Lock()
        self._snapshots: Dict[Tuple[str, DashboardView], DashboardState] = {}
        # Last known health/stats per session, shared across views
        self._sessions: Dict[str, DashboardState] = {}

    def _is_fresh(self, state: DashboardState, now: datetime) -> bool:
        if state.refreshed_at is None:
            return False
        return (now - state.refreshed_at).total_seconds() < self.ttl_seconds

    def _prune(self, now: datetime):
        stale = [key for key, state in self._snapshots.items() if not self._is_fresh(state, now)]
        for key in stale:
            del self._snapshots[key]

        idle = [
            token for token, state in self._sessions.items()
            if state.refreshed_at is None
            or (now - state.refreshed_at).total_seconds() >= self.session_idle_seconds
        ]
        for token in idle:
            del self._sessions[token]

    def snapshot(self, client: BetTrackerAPIClient, token: str, view: DashboardView) -> DashboardState:
        now = datetime.now(timezone.utc)
        key = (token, view)

        with self._lock:
            cached = self._snapshots.get(key)
            if cached is not None and self._is_fresh(cached, now):
                return cached
            self._prune(now)
            previous = self._sessions.get(token, DashboardState())
            if cached is not None:
                previous = replace(previous, matches=cached.matches, total_matches=cached.total_matches)

        state = self.refresh(client, view, previous)

        with self._lock:
            self._snapshots[key] = state
            self._sessions[token] = state
        return state

    def refresh(self, client: BetTrackerAPIClient, view: DashboardView,
                previous: Optional[DashboardState] = None) -> DashboardState:
        """Fetch health, stats and matches; keep the previous value of any part that fails"""
        previous = previous or DashboardState()
        state = replace(previous)

        try:
            state.is_tracker_running = client.get_health().tracker_running
        except BackendAPIError as e:
            _log_fetch_failure("health", e)

        try:
            state.stats = client.get_stats()
        except BackendAPIError as e:
            _log_fetch_failure("stats", e)

        try:
            state.matches, state.total_matches = fetch_matches(client, view)
        except BackendAPIError as e:
            _log_fetch_failure("matches", e)

        state.refreshed_at = datetime.now(timezone.utc)
        return state

    def invalidate(self, token: str, forget_session: bool = False):
        """Drop cached snapshots of a session so the next request refetches"""
        with self._lock:
            for key in [k for k in self._snapshots if k[0] == token]:
                del self._snapshots[key]
            if forget_session:
                self._sessions.pop(token, None)

    def cache_status(self) -> Dict:
        with self._lock:
            return {
                'cached_views': len(self._snapshots),
                'sessions': len(self._sessions)
            }

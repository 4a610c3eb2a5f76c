"""
Bet tracker backend API client
"""

import requests
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from config import Config
from models import (
    AuthResponse, HealthStatus, League, LeagueGoalLineStats,
    Match, OddsHistory, Stats
)
from logger import log

T = TypeVar('T')


class BackendAPIError(Exception):
    """Raised when the backend is unreachable or answers with an error"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class BetTrackerAPIClient:
    """
    Handles all API interactions with the bet tracker backend.

    `token_provider` is called before every request; when it returns a token
    the request carries `Authorization: Bearer <token>`.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 token_provider: Optional[Callable[[], Optional[str]]] = None):
        self.base_url = (base_url if base_url is not None else Config.BET_TRACKER_API_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else Config.API_TIMEOUT
        self.token_provider = token_provider
        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

    def _auth_headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        if token:
            return {'Authorization': f'Bearer {token}'}
        return {}

    def _request(self, method: str, path: str, params: Optional[Dict] = None,
                 json_body: Optional[Dict] = None) -> Dict:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self.session.request(
                method,
                url,
                params=params or None,
                json=json_body,
                headers=self._auth_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            log(f"[ERROR] Backend request {method} {path} failed: {e}")
            raise BackendAPIError(f"Backend request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            message = None
            if isinstance(data, dict):
                message = data.get('message') or data.get('error')
            message = message or f"Backend returned status {response.status_code}"
            log(f"[WARNING] {method} {path} -> {response.status_code}: {message}")
            raise BackendAPIError(message, status_code=response.status_code)

        if not isinstance(data, dict):
            raise BackendAPIError(f"Backend returned invalid JSON for {path}", status_code=response.status_code)

        return data

    def _parse(self, path: str, convert: Callable[[], T]) -> T:
        """Run a payload conversion, reporting unexpected shapes as a backend error"""
        try:
            return convert()
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            log(f"[ERROR] Unexpected payload from {path}: {e}")
            raise BackendAPIError(f"Backend returned unexpected data for {path}")

    # Auth

    def sign_up(self, email: str, password: str) -> AuthResponse:
        path = '/api/auth/signup'
        data = self._request('POST', path, json_body={'email': email, 'password': password})
        return self._parse(path, lambda: AuthResponse.from_dict(data))

    def login(self, email: str, password: str) -> AuthResponse:
        """Log in; the caller persists token and user only on a complete success"""
        path = '/api/auth/login'
        data = self._request('POST', path, json_body={'email': email, 'password': password})
        return self._parse(path, lambda: AuthResponse.from_dict(data))

    # Monitoring

    def get_health(self) -> HealthStatus:
        path = '/api/health'
        data = self._request('GET', path)
        return self._parse(path, lambda: HealthStatus.from_dict(data))

    def get_tracked_matches(self) -> Tuple[List[Match], int]:
        """Live matches and their count"""
        path = '/api/tracked'
        data = self._request('GET', path)

        def convert():
            matches = [Match.from_dict(m) for m in data.get('matches') or []]
            return matches, int(data.get('count') or len(matches))

        return self._parse(path, convert)

    def get_history(self, status: Optional[str] = None, league_id: Optional[int] = None,
                    limit: Optional[int] = None, offset: Optional[int] = None) -> Tuple[List[Match], int]:
        """
        Page of historical matches and the total number of matches for the filter.
        Unset filters are not sent.
        """
        path = '/api/history'
        data = self._request('GET', path, params={
            'status': status,
            'league_id': league_id,
            'limit': limit,
            'offset': offset
        })

        def convert():
            matches = [Match.from_dict(m) for m in data.get('matches') or []]
            return matches, int(data.get('total') or 0)

        return self._parse(path, convert)

    def get_stats(self) -> Stats:
        path = '/api/stats'
        data = self._request('GET', path)
        return self._parse(path, lambda: Stats.from_dict(data.get('stats') or {}))

    def get_odds_history(self, match_id: str) -> Tuple[Optional[Match], List[OddsHistory]]:
        path = f'/api/odds-history/{match_id}'
        data = self._request('GET', path)

        def convert():
            match = data.get('match')
            history = [OddsHistory.from_dict(o) for o in data.get('oddsHistory') or []]
            return (Match.from_dict(match) if match else None), history

        return self._parse(path, convert)

    def get_leagues(self) -> List[League]:
        path = '/api/leagues'
        data = self._request('GET', path)
        return self._parse(path, lambda: [League.from_dict(league) for league in data.get('leagues') or []])

    def get_league_stats(self, league_id: int) -> LeagueGoalLineStats:
        path = f'/api/league-stats/{league_id}'
        data = self._request('GET', path)
        return self._parse(path, lambda: LeagueGoalLineStats.from_dict(data))

    # Tracker control

    def start_tracker(self) -> Dict:
        return self._request('POST', '/api/tracker/start')

    def stop_tracker(self) -> Dict:
        return self._request('POST', '/api/tracker/stop')

    def test_telegram(self) -> Dict:
        return self._request('POST', '/api/telegram/test')

import os

# Keep test runs out of logs.txt; must be set before config is imported
os.environ.setdefault('BET_DASHBOARD_LOG_FILE', '')
os.environ.setdefault('SECRET_KEY', 'test-secret-key')

import pytest
from unittest.mock import Mock

from models import HealthStatus, LeagueGoalLineStats, Match, OddsHistory, Stats
from services import BetTrackerAPIClient
from services.poller import DashboardPoller

TOKEN = 'token-abc'

LIVE_MATCH = {
    'id': 1,
    'match_id': '9001',
    'league_id': 23114,
    'home_team': 'Lazio (Boss)',
    'away_team': 'Inter (Kray)',
    'detection_time': '2024-05-01 12:30:00',
    'detected_odds': 2.5,
    'current_goal_line': 3.0,
    'current_score': '2-1',
    'status': 'live',
    'touched_15': 1,
}

FINISHED_MATCH = {
    'id': 2,
    'match_id': '9002',
    'league_id': 37298,
    'home_team': 'Arsenal (Nio)',
    'away_team': 'Chelsea (Pax)',
    'detection_time': '2024-05-01 11:00:00',
    'detected_odds': 1.5,
    'status': 'finished',
    'final_score_home': 3,
    'final_score_away': 0,
    'touched_15': 0,
}

STATS = {
    'totalMatches': 10,
    'liveMatches': 1,
    'finishedMatches': 8,
    'touchedTargetTotal': 3,
    'byLeague': {'23114': 6, '37298': 4},
    'touchedTargetByLeague': {
        '23114': {'total': 5, 'touched': 3, 'ratio': 60.0},
        '37298': {'total': 3, 'touched': 0, 'ratio': 0.0},
    },
    'leagueStats': [{'leagueId': 23114, 'leagueName': 'GT League', 'count': 6}],
}

LEAGUE_STATS = {
    'success': True,
    'leagueId': 23114,
    'leagueName': 'GT League',
    'targetLine': 2.5,
    'totalMatches': 40,
    'goalLineStats': [
        {'goalLine': 2.0, 'timesAvailable': 10, 'overHits': 7, 'hitRate': 70.0, 'roi': 33.0},
        {'goalLine': 2.5, 'timesAvailable': 20, 'overHits': 9, 'hitRate': 45.0, 'roi': -14.5},
        {'goalLine': 3.5, 'timesAvailable': 4, 'overHits': 1, 'hitRate': 25.0, 'roi': -52.5},
    ],
}


@pytest.fixture
def live_match():
    return Match.from_dict(LIVE_MATCH)


@pytest.fixture
def finished_match():
    return Match.from_dict(FINISHED_MATCH)


@pytest.fixture
def stats():
    return Stats.from_dict(STATS)


@pytest.fixture
def league_stats():
    return LeagueGoalLineStats.from_dict(LEAGUE_STATS)


@pytest.fixture
def fake_client(live_match, finished_match, stats, league_stats):
    """Backend client double answering like a healthy backend"""
    client = Mock(spec=BetTrackerAPIClient)
    client.get_health.return_value = HealthStatus(tracker_running=True)
    client.get_stats.return_value = stats
    client.get_tracked_matches.return_value = ([live_match], 1)
    client.get_history.return_value = ([finished_match], 45)
    client.get_odds_history.return_value = (live_match, [
        OddsHistory(id=1, match_id='9001', handicap=2.5, add_time='2024-05-01 12:31:00'),
        OddsHistory(id=2, match_id='9001', handicap=3.0, recorded_at='2024-05-01 12:35:00'),
    ])
    client.get_league_stats.return_value = league_stats
    client.start_tracker.return_value = {'success': True}
    client.stop_tracker.return_value = {'success': True}
    client.test_telegram.return_value = {'success': True, 'message': 'Test message sent!'}
    return client


@pytest.fixture
def dashboard(monkeypatch, fake_client):
    """The dashboard module wired to the fake backend and a fresh poller"""
    import app as dashboard_module

    monkeypatch.setattr(dashboard_module, 'make_client', lambda: fake_client)
    monkeypatch.setattr(dashboard_module, 'poller', DashboardPoller())
    dashboard_module.app.config['TESTING'] = True
    return dashboard_module


@pytest.fixture
def client(dashboard):
    return dashboard.app.test_client()


@pytest.fixture
def logged_in_client(client):
    with client.session_transaction() as sess:
        sess['bet_tracker_token'] = TOKEN
        sess['bet_tracker_user'] = {'id': 7, 'email': 'user@example.com', 'created_at': None}
    return client

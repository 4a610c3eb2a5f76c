"""
Data models for the bet tracker backend responses
"""

from dataclasses import dataclass, asdict, field
from typing import List, Dict, Optional


def _optional_float(value) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_int(value) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class User:
    """Authenticated backend user"""
    id: int
    email: str
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'User':
        return cls(
            id=data.get('id'),
            email=data.get('email', ''),
            created_at=data.get('created_at')
        )

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class AuthResponse:
    """Response of the signup and login endpoints"""
    success: bool
    message: Optional[str] = None
    user: Optional[User] = None
    token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'AuthResponse':
        user = data.get('user')
        return cls(
            success=bool(data.get('success')),
            message=data.get('message'),
            user=User.from_dict(user) if user else None,
            token=data.get('token')
        )


@dataclass
class Match:
    """A tracked match as stored by the backend"""
    id: int
    match_id: str
    league_id: int
    home_team: str
    away_team: str
    detection_time: Optional[str]
    status: str
    bet365_id: Optional[str] = None
    detected_odds: Optional[float] = None  # first detected goal line
    current_goal_line: Optional[float] = None
    current_score: Optional[str] = None
    final_score_home: Optional[int] = None
    final_score_away: Optional[int] = None
    match_end_time: Optional[str] = None
    alert_sent: Optional[int] = None
    result_alert_sent: Optional[int] = None
    touched_15: Optional[int] = None  # 1 if the match ever touched its league's target line
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.status == 'live'

    @property
    def touched_target(self) -> bool:
        return self.touched_15 == 1

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        return cls(
            id=data.get('id'),
            match_id=str(data.get('match_id', '')),
            league_id=_optional_int(data.get('league_id')),
            home_team=data.get('home_team', ''),
            away_team=data.get('away_team', ''),
            detection_time=data.get('detection_time'),
            status=data.get('status', 'live'),
            bet365_id=data.get('bet365_id'),
            detected_odds=_optional_float(data.get('detected_odds')),
            current_goal_line=_optional_float(data.get('current_goal_line')),
            current_score=data.get('current_score'),
            final_score_home=_optional_int(data.get('final_score_home')),
            final_score_away=_optional_int(data.get('final_score_away')),
            match_end_time=data.get('match_end_time'),
            alert_sent=data.get('alert_sent'),
            result_alert_sent=data.get('result_alert_sent'),
            touched_15=_optional_int(data.get('touched_15')),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at')
        )

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class OddsHistory:
    """Single goal line observation for a match"""
    id: Optional[int]
    match_id: str
    odds_value: Optional[float] = None
    handicap: Optional[float] = None
    add_time: Optional[str] = None
    recorded_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> 'OddsHistory':
        return cls(
            id=data.get('id'),
            match_id=str(data.get('match_id', '')),
            odds_value=_optional_float(data.get('odds_value')),
            handicap=_optional_float(data.get('handicap')),
            add_time=data.get('add_time'),
            recorded_at=data.get('recorded_at')
        )

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class League:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict) -> 'League':
        return cls(id=_optional_int(data.get('id')), name=data.get('name', ''))


@dataclass
class LeagueHitRatio:
    """Target hit counters for one league; ratio is already a percentage"""
    total: int
    touched: int
    ratio: float

    @classmethod
    def from_dict(cls, data: Dict) -> 'LeagueHitRatio':
        return cls(
            total=int(data.get('total') or 0),
            touched=int(data.get('touched') or 0),
            ratio=float(data.get('ratio') or 0)
        )


@dataclass
class LeagueCount:
    league_id: int
    league_name: str
    count: int


@dataclass
class Stats:
    """Aggregate statistics computed by the backend"""
    total_matches: int = 0
    live_matches: int = 0
    finished_matches: int = 0
    touched_target_total: int = 0
    by_league: Dict[int, int] = field(default_factory=dict)
    touched_target_by_league: Dict[int, LeagueHitRatio] = field(default_factory=dict)
    league_stats: List[LeagueCount] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Stats':
        # JSON object keys arrive as strings
        by_league = {
            int(league_id): int(count or 0)
            for league_id, count in (data.get('byLeague') or {}).items()
        }
        touched_by_league = {
            int(league_id): LeagueHitRatio.from_dict(ratio)
            for league_id, ratio in (data.get('touchedTargetByLeague') or {}).items()
        }
        league_stats = [
            LeagueCount(
                league_id=_optional_int(entry.get('leagueId')),
                league_name=entry.get('leagueName', ''),
                count=int(entry.get('count') or 0)
            )
            for entry in data.get('leagueStats') or []
        ]
        return cls(
            total_matches=int(data.get('totalMatches') or 0),
            live_matches=int(data.get('liveMatches') or 0),
            finished_matches=int(data.get('finishedMatches') or 0),
            touched_target_total=int(data.get('touchedTargetTotal') or 0),
            by_league=by_league,
            touched_target_by_league=touched_by_league,
            league_stats=league_stats
        )

    def to_dict(self) -> Dict:
        return {
            'totalMatches': self.total_matches,
            'liveMatches': self.live_matches,
            'finishedMatches': self.finished_matches,
            'touchedTargetTotal': self.touched_target_total,
            'byLeague': {str(k): v for k, v in self.by_league.items()},
            'touchedTargetByLeague': {
                str(k): asdict(v) for k, v in self.touched_target_by_league.items()
            },
            'leagueStats': [
                {'leagueId': s.league_id, 'leagueName': s.league_name, 'count': s.count}
                for s in self.league_stats
            ]
        }


@dataclass
class GoalLineStat:
    """Over statistics for one goal line of a league"""
    goal_line: float
    times_available: int
    over_hits: int
    hit_rate: float
    roi: float

    @classmethod
    def from_dict(cls, data: Dict) -> 'GoalLineStat':
        return cls(
            goal_line=float(data.get('goalLine')),
            times_available=int(data.get('timesAvailable') or 0),
            over_hits=int(data.get('overHits') or 0),
            hit_rate=float(data.get('hitRate') or 0),
            roi=float(data.get('roi') or 0)
        )


@dataclass
class LeagueGoalLineStats:
    """Per-league goal line breakdown"""
    success: bool
    league_id: int
    league_name: str
    target_line: float
    total_matches: int
    goal_line_stats: List[GoalLineStat]

    @property
    def target_stats(self) -> Optional[GoalLineStat]:
        for stat in self.goal_line_stats:
            if stat.goal_line == self.target_line:
                return stat
        return None

    @classmethod
    def from_dict(cls, data: Dict) -> 'LeagueGoalLineStats':
        return cls(
            success=bool(data.get('success')),
            league_id=_optional_int(data.get('leagueId')),
            league_name=data.get('leagueName', ''),
            target_line=float(data.get('targetLine') or 0),
            total_matches=int(data.get('totalMatches') or 0),
            goal_line_stats=[GoalLineStat.from_dict(s) for s in data.get('goalLineStats') or []]
        )


@dataclass
class HealthStatus:
    tracker_running: bool
    raw: Dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict) -> 'HealthStatus':
        return cls(tracker_running=bool(data.get('trackerRunning')), raw=data)

"""
Display helpers shared by the templates: labels, colors, scores and pagination
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from config import Config
from models import GoalLineStat, Match, OddsHistory, Stats

GREEN = '#22c55e'
AMBER = '#f59e0b'
RED = '#ef4444'
GREY = '#6b7280'
BLUE = '#3b82f6'


def format_date(value: Optional[str]) -> str:
    """Render a backend timestamp in local time"""
    if not value:
        return 'N/A'
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return str(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime('%Y-%m-%d %H:%M:%S')


def format_number(value) -> str:
    """2.0 -> '2', 2.5 -> '2.5', None -> 'N/A'"""
    if value is None:
        return 'N/A'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round1(value: float) -> float:
    return float(f"{value:.1f}")


def format_roi(roi: float) -> str:
    return f"{'+' if roi >= 0 else ''}{format_number(roi)}%"


def league_name(league_id: Optional[int]) -> str:
    return Config.LEAGUE_NAMES.get(league_id) or f"League {league_id}"


def target_line(league_id: Optional[int]) -> float:
    return Config.TARGET_GOAL_LINES.get(league_id, Config.DEFAULT_TARGET_LINE)


def ratio_color(pct: float) -> str:
    """Color for a league's target hit ratio"""
    if pct >= 50:
        return GREEN
    if pct >= 30:
        return AMBER
    return RED


def hit_rate_color(pct: float) -> str:
    """Color for a goal line hit rate, relative to break-even at standard odds"""
    if pct >= Config.BREAK_EVEN_HIT_RATE:
        return GREEN
    if pct >= 40:
        return AMBER
    return RED


def overall_ratio(stats: Stats) -> str:
    """Target hit rate across finished matches, one decimal"""
    if stats.finished_matches > 0:
        value = stats.touched_target_total / stats.finished_matches * 100
    else:
        value = 0
    return f"{value:.1f}"


@dataclass
class GoalLineBadge:
    text: str
    available: bool
    touched_target: bool
    title: str


def goal_line_badge(match: Match) -> GoalLineBadge:
    goal_line = match.current_goal_line if match.current_goal_line is not None else match.detected_odds
    target = format_number(target_line(match.league_id))

    if goal_line is None:
        return GoalLineBadge(text='N/A', available=False, touched_target=False, title='')

    if match.touched_target:
        return GoalLineBadge(
            text=f"🎯 {format_number(goal_line)} 🎯",
            available=True,
            touched_target=True,
            title=f"Touched target {target}"
        )
    return GoalLineBadge(
        text=format_number(goal_line),
        available=True,
        touched_target=False,
        title=f"Target: {target}"
    )


@dataclass
class ScoreDisplay:
    text: str
    total: Optional[int] = None
    live: bool = False


def _parse_score(score: str) -> Tuple[int, int]:
    parts = []
    for part in score.split('-')[:2]:
        try:
            parts.append(int(part.strip()))
        except ValueError:
            parts.append(0)
    while len(parts) < 2:
        parts.append(0)
    return parts[0], parts[1]


def score_display(match: Match) -> ScoreDisplay:
    if match.is_live:
        if match.current_score:
            home, away = _parse_score(match.current_score)
            return ScoreDisplay(text=match.current_score, total=home + away, live=True)
        return ScoreDisplay(text='-')

    if match.final_score_home is not None and match.final_score_away is not None:
        return ScoreDisplay(
            text=f"{match.final_score_home} - {match.final_score_away}",
            total=match.final_score_home + match.final_score_away
        )

    if match.current_score:
        home, away = _parse_score(match.current_score)
        return ScoreDisplay(text=match.current_score, total=home + away)

    return ScoreDisplay(text='? - ?')


@dataclass
class OddsRow:
    handicap: str
    time: str
    is_target: bool


def odds_rows(history: List[OddsHistory], target: float) -> List[OddsRow]:
    rows = []
    for odds in history:
        rows.append(OddsRow(
            handicap=format_number(odds.handicap),
            time=format_date(odds.add_time) if odds.add_time else format_date(odds.recorded_at),
            is_target=odds.handicap == target
        ))
    return rows


@dataclass
class GoalLineRow:
    goal_line: float
    is_target: bool
    times_available: int
    hits: int
    hit_rate: float
    roi: float

    @property
    def profitable(self) -> bool:
        return self.roi >= 0


def goal_line_rows(stats: List[GoalLineStat], target: float, show_over: bool = True) -> List[GoalLineRow]:
    """
    Table rows for the Over or Under side of each goal line.
    Under figures mirror the backend's Over figures.
    """
    rows = []
    for stat in stats:
        if show_over:
            hits, hit_rate, roi = stat.over_hits, stat.hit_rate, stat.roi
        else:
            hits = stat.times_available - stat.over_hits
            hit_rate = round1(hits / stat.times_available * 100) if stat.times_available > 0 else 0
            roi = round1(hit_rate * Config.STANDARD_ODDS - 100)
        rows.append(GoalLineRow(
            goal_line=stat.goal_line,
            is_target=stat.goal_line == target,
            times_available=stat.times_available,
            hits=hits,
            hit_rate=hit_rate,
            roi=roi
        ))
    return rows


@dataclass
class ReportRow:
    league: str
    match: str
    goal_line: str
    status: str
    score: str
    touched_target: str
    detection_time: str


def report_rows(matches: List[Match]) -> List[ReportRow]:
    """Rows of the printable export"""
    rows = []
    for match in matches:
        if match.final_score_home is not None and match.final_score_away is not None:
            total = match.final_score_home + match.final_score_away
            score = f"{match.final_score_home} - {match.final_score_away} ({total})"
        else:
            score = match.current_score or '-'

        # Touched matches report the line they were detected at
        if match.touched_15:
            goal_line = match.detected_odds
        elif match.current_goal_line is not None:
            goal_line = match.current_goal_line
        else:
            goal_line = match.detected_odds

        rows.append(ReportRow(
            league=league_name(match.league_id),
            match=f"{match.home_team} vs {match.away_team}",
            goal_line=format_number(goal_line) if goal_line is not None else '-',
            status=match.status.upper(),
            score=score,
            touched_target='Yes' if match.touched_15 else 'No',
            detection_time=format_date(match.detection_time) if match.detection_time else '-'
        ))
    return rows


@dataclass
class Pagination:
    page: int
    total_pages: int
    total: int
    visible: bool

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def previous_page(self) -> int:
        return min(max(1, self.total_pages), max(1, self.page - 1))

    @property
    def next_page(self) -> int:
        return min(self.total_pages, self.page + 1)


def pagination(total: int, page: int, tab: str) -> Pagination:
    total_pages = math.ceil(total / Config.ITEMS_PER_PAGE)
    return Pagination(
        page=page,
        total_pages=total_pages,
        total=total,
        visible=tab == 'history' and total > Config.ITEMS_PER_PAGE
    )


def register_filters(app):
    """Register the helpers as Jinja2 filters and globals on *app*."""
    app.add_template_filter(format_date, 'local_datetime')
    app.add_template_filter(format_number, 'num')
    app.add_template_filter(format_roi, 'roi')
    app.add_template_filter(league_name, 'league_name')
    app.add_template_filter(target_line, 'target_line')
    app.add_template_filter(ratio_color, 'ratio_color')
    app.add_template_filter(hit_rate_color, 'hit_rate_color')
    app.jinja_env.globals.update(
        goal_line_badge=goal_line_badge,
        score_display=score_display,
        overall_ratio=overall_ratio,
        league_names=Config.LEAGUE_NAMES,
        target_goal_lines=Config.TARGET_GOAL_LINES,
        poll_interval_seconds=Config.POLL_INTERVAL_SECONDS,
        colors={'green': GREEN, 'amber': AMBER, 'red': RED, 'grey': GREY, 'blue': BLUE},
    )

"""
Goal line charts for the league detail page
"""

import plotly.graph_objects as go
from typing import List

from config import Config
from models import GoalLineStat
from .formatting import BLUE, GREEN, GREY, RED, format_number

LAYOUT = dict(
    margin=dict(t=20, r=30, l=40, b=30),
    plot_bgcolor='white',
    paper_bgcolor='white',
    font=dict(size=12),
    showlegend=False,
)


def _x_labels(stats: List[GoalLineStat]) -> List[str]:
    # Categorical axis keeps 2.25 / 2.5 / 2.75 evenly spaced
    return [format_number(s.goal_line) for s in stats]


def hit_rate_colors(stats: List[GoalLineStat], target: float) -> List[str]:
    colors = []
    for s in stats:
        if s.goal_line == target:
            colors.append(RED)
        elif s.hit_rate >= Config.BREAK_EVEN_HIT_RATE:
            colors.append(GREEN)
        else:
            colors.append(GREY)
    return colors


def roi_colors(stats: List[GoalLineStat], target: float) -> List[str]:
    colors = []
    for s in stats:
        if s.goal_line == target:
            colors.append(RED)
        elif s.roi >= 0:
            colors.append(GREEN)
        else:
            colors.append(GREY)
    return colors


def sample_size_colors(stats: List[GoalLineStat], target: float) -> List[str]:
    return [RED if s.goal_line == target else BLUE for s in stats]


def hit_rate_figure(stats: List[GoalLineStat], target: float) -> go.Figure:
    """Percentage of matches where Over hit, against the break-even rate"""
    fig = go.Figure(go.Bar(
        x=_x_labels(stats),
        y=[s.hit_rate for s in stats],
        marker_color=hit_rate_colors(stats, target),
        name='Hit Rate',
        hovertemplate='Goal Line: %{x}<br>Hit Rate: %{y}%<extra></extra>',
    ))
    fig.add_hline(
        y=Config.BREAK_EVEN_HIT_RATE,
        line_dash='dash',
        line_color='#f59e0b',
        annotation_text=f'Break-even ({Config.BREAK_EVEN_HIT_RATE}%)',
        annotation_font_size=10,
        annotation_font_color='#f59e0b',
    )
    fig.update_layout(**LAYOUT)
    fig.update_xaxes(type='category')
    fig.update_yaxes(range=[0, 100], ticksuffix='%', gridcolor='#e5e7eb')
    return fig


def roi_figure(stats: List[GoalLineStat], target: float) -> go.Figure:
    """ROI per goal line at standard odds"""
    fig = go.Figure(go.Bar(
        x=_x_labels(stats),
        y=[s.roi for s in stats],
        marker_color=roi_colors(stats, target),
        name='ROI',
        hovertemplate='Goal Line: %{x}<br>ROI: %{y}%<extra></extra>',
    ))
    fig.add_hline(y=0, line_color='#1f2937', line_width=2)
    fig.update_layout(**LAYOUT)
    fig.update_xaxes(type='category')
    fig.update_yaxes(ticksuffix='%', gridcolor='#e5e7eb')
    return fig


def sample_size_figure(stats: List[GoalLineStat], target: float) -> go.Figure:
    fig = go.Figure(go.Bar(
        x=_x_labels(stats),
        y=[s.times_available for s in stats],
        marker_color=sample_size_colors(stats, target),
        name='Times Available',
        hovertemplate='Goal Line: %{x}<br>Times Available: %{y}<extra></extra>',
    ))
    fig.update_layout(**LAYOUT)
    fig.update_xaxes(type='category')
    fig.update_yaxes(gridcolor='#e5e7eb')
    return fig


def render(fig: go.Figure, height: int = 300) -> str:
    """HTML fragment for a figure; the page loads plotly.js once"""
    fig.update_layout(height=height)
    return fig.to_html(full_html=False, include_plotlyjs=False, config={'displayModeBar': False})


def league_charts(stats: List[GoalLineStat], target: float) -> dict:
    """Rendered charts keyed by name; empty when there is nothing to plot"""
    if not stats:
        return {}
    return {
        'hit_rate': render(hit_rate_figure(stats, target)),
        'roi': render(roi_figure(stats, target)),
        'sample_size': render(sample_size_figure(stats, target), height=250),
    }

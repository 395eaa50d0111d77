"""Plotly chart components for the dashboard."""

import plotly.graph_objects as go
from typing import Optional

from Field_Reference.level_thresholds import LEVEL_THRESHOLDS
from Water_Analysis.core.chart_formatter import ChartSeries
from Water_Analysis.core.distribution import DistributionBins

# Light theme colors (app uses #f8fafc background)
TEXT_COLOR = "#334155"
GRID_COLOR = "rgba(0,0,0,0.08)"
TICK_COLOR = "#64748b"
BORDER_COLOR = "#94a3b8"

STATUS_COLORS = {'safe': "#059669", 'warning': "#d97706", 'danger': "#dc2626"}
SERIES_COLOR = "#10b981"
PREDICTION_COLOR = "#f59e0b"


def create_level_gauge(height: float, status: str) -> go.Figure:
    """Create water height gauge (0 to the instrument maximum)."""
    limits = LEVEL_THRESHOLDS['instrument']
    gauge = LEVEL_THRESHOLDS['gauge']
    max_h = limits.MAX_HEIGHT
    warn_h = max_h * gauge.WARNING_PERCENT / 100
    danger_h = max_h * gauge.DANGER_PERCENT / 100
    color = STATUS_COLORS[status]

    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=height,
        domain={'x': [0, 1], 'y': [0, 1]},
        title={'text': "Ketinggian Air (m)", 'font': {'size': 14, 'color': TEXT_COLOR}},
        number={'font': {'size': 32, 'color': color}, 'suffix': ' m', 'valueformat': '.2f'},
        gauge={
            'axis': {'range': [0, max_h], 'tickcolor': TICK_COLOR},
            'bar': {'color': color},
            'bgcolor': "rgba(0,0,0,0)",
            'bordercolor': BORDER_COLOR,
            'steps': [
                {'range': [0, warn_h], 'color': 'rgba(5,150,105,0.15)'},
                {'range': [warn_h, danger_h], 'color': 'rgba(217,119,6,0.15)'},
                {'range': [danger_h, max_h], 'color': 'rgba(220,38,38,0.15)'}
            ]
        }
    ))

    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)', plot_bgcolor='rgba(0,0,0,0)',
        font={'color': TEXT_COLOR}, height=240, margin=dict(l=20, r=20, t=40, b=20)
    )
    return fig


def create_trend_chart(series: ChartSeries, is_rate: bool = False,
                       height: int = 320) -> go.Figure:
    """Create time-series chart, with the dashed forecast when present."""
    fig = go.Figure()
    x = list(range(len(series.labels)))

    fig.add_trace(go.Scatter(
        x=x, y=series.values, mode='lines+markers', name=series.series_name,
        line=dict(color=SERIES_COLOR, width=2, shape='spline'),
        marker=dict(size=5, color='#ffffff', line=dict(color=SERIES_COLOR, width=1)),
        fill=None if is_rate else 'tozeroy', fillcolor='rgba(16,185,129,0.1)',
        connectgaps=False
    ))

    if series.has_prediction:
        fig.add_trace(go.Scatter(
            x=x, y=series.prediction, mode='lines+markers', name='Prediksi',
            line=dict(color=PREDICTION_COLOR, width=2, dash='dash'),
            marker=dict(size=7, color='#fcd34d', line=dict(color=PREDICTION_COLOR, width=1)),
            connectgaps=False
        ))

    if not is_rate:
        thresholds = LEVEL_THRESHOLDS['prediction']
        fig.add_hline(y=thresholds.WARNING, line_dash="dash", line_color="#d97706",
                      annotation_text="Waspada")
        fig.add_hline(y=thresholds.DANGER, line_dash="dash", line_color="#dc2626",
                      annotation_text="Bahaya")

    y_title = "Laju Perubahan (m/s)" if is_rate else "Ketinggian (meter)"
    yaxis = dict(title=y_title, showgrid=True, gridcolor=GRID_COLOR)
    if is_rate:
        yaxis['tickformat'] = '.4f'
    else:
        yaxis['range'] = [0, LEVEL_THRESHOLDS['instrument'].MAX_HEIGHT]

    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)', plot_bgcolor='rgba(0,0,0,0)',
        font={'color': TEXT_COLOR}, height=height, margin=dict(l=40, r=40, t=20, b=60),
        xaxis=dict(title="Waktu", showgrid=False, tickmode='array', tickvals=x,
                   ticktext=series.labels, tickangle=-45),
        yaxis=yaxis,
        hovermode='x unified',
        legend=dict(orientation="h", y=1.1, x=0.5, xanchor="center")
    )
    return fig


def create_distribution_chart(bins: DistributionBins) -> go.Figure:
    """Create height-frequency bar chart."""
    fig = go.Figure(go.Bar(
        x=bins.labels, y=list(bins.counts), name='Distribusi Ketinggian Air',
        marker=dict(color='rgba(16,185,129,0.5)', line=dict(color=SERIES_COLOR, width=1)),
        text=list(bins.counts), textposition='outside'
    ))

    fig.update_layout(
        paper_bgcolor='rgba(0,0,0,0)', plot_bgcolor='rgba(0,0,0,0)',
        font={'color': TEXT_COLOR}, height=260, showlegend=False,
        margin=dict(l=40, r=20, t=20, b=40),
        xaxis=dict(title="Rentang Ketinggian", showgrid=False),
        yaxis=dict(title="Frekuensi", showgrid=True, gridcolor=GRID_COLOR, rangemode='tozero')
    )
    return fig


def prediction_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or 'safe', STATUS_COLORS['safe'])

"""Plotly figures for the cost forecaster app."""

from __future__ import annotations

from typing import Mapping

import pandas as pd
import plotly.graph_objects as go

from battery_cost_forecaster.chemistry.base_chemistry import BaseChemistry

GRID_COLOR = "rgba(148, 163, 184, 0.08)"


def hex_to_rgb(hex_color: str | None) -> tuple[int, int, int]:
    """Parse '#rrggbb' into an (r, g, b) tuple; empty input gives white."""
    if not hex_color:
        return (255, 255, 255)
    value = int(hex_color.lstrip("#"), 16)
    return ((value >> 16) & 255, (value >> 8) & 255, value & 255)


def mix_with_white(hex_color: str, amount: float = 0.25, alpha: float = 1.0) -> str:
    """
    Lighten a colour by blending it toward white.

    Args:
        hex_color: Base colour as '#rrggbb'
        amount: Blend fraction (0 = unchanged, 1 = white)
        alpha: Opacity; 1 gives an 'rgb(...)' string, otherwise 'rgba(...)'
    """
    r, g, b = (round(c + (255 - c) * amount) for c in hex_to_rgb(hex_color))
    if alpha == 1:
        return f"rgb({r}, {g}, {b})"
    return f"rgba({r}, {g}, {b}, {alpha})"


def with_alpha(hex_color: str, alpha: float = 1.0) -> str:
    """Colour as an 'rgba(...)' string with the given opacity."""
    r, g, b = hex_to_rgb(hex_color)
    return f"rgba({r}, {g}, {b}, {alpha})"


def _style_axes(fig: go.Figure) -> None:
    fig.update_layout(
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    fig.update_xaxes(showgrid=True, gridcolor=GRID_COLOR)
    fig.update_yaxes(showgrid=True, gridcolor=GRID_COLOR)


def create_cost_chart(
    timeline: pd.DataFrame,
    chemistries: Mapping[str, BaseChemistry],
) -> go.Figure:
    """
    Pack cost over time, history dashed and lightened, forecast solid.

    Each chemistry gets two traces. The forecast trace starts at the last
    historical point so the two segments join up.

    Args:
        timeline: Long frame with year, chemistry, cost, is_historical
        chemistries: Profiles supplying names and colours
    """
    fig = go.Figure()

    for chem_id, chemistry in chemistries.items():
        series = timeline[timeline["chemistry"] == chem_id].sort_values("year")
        past = series[series["is_historical"]]
        future = series[~series["is_historical"]]
        if not past.empty and not future.empty:
            future = pd.concat([past.dropna(subset=["cost"]).tail(1), future])

        if not past.empty:
            fig.add_trace(
                go.Scatter(
                    x=past["year"],
                    y=past["cost"],
                    mode="lines",
                    name=f"{chemistry.name} (historical)",
                    legendgroup=chem_id,
                    showlegend=False,
                    connectgaps=True,
                    line=dict(color=mix_with_white(chemistry.color, 0.4), width=3, dash="dash"),
                    hovertemplate=f"{chemistry.name}: $%{{y:.2f}} /kWh (historical)<extra></extra>",
                )
            )
        fig.add_trace(
            go.Scatter(
                x=future["year"],
                y=future["cost"],
                mode="lines",
                name=chemistry.name,
                legendgroup=chem_id,
                connectgaps=True,
                line=dict(color=chemistry.color, width=3, shape="spline", smoothing=0.6),
                hovertemplate=f"{chemistry.name}: $%{{y:.2f}} /kWh (modeled)<extra></extra>",
            )
        )

    fig.update_layout(
        title="Battery Pack Cost Trajectory",
        xaxis_title="Year",
        yaxis_title="Pack cost ($/kWh)",
        hovermode="x unified",
        height=480,
    )
    fig.update_yaxes(tickprefix="$")
    _style_axes(fig)
    return fig


def create_materials_chart(
    breakdown: pd.DataFrame,
    chemistries: Mapping[str, BaseChemistry],
) -> go.Figure:
    """
    Horizontal stacked bar of materials floor vs above-floor baseline cost.

    Args:
        breakdown: Frame with chemistry, name, floor_cost, above_floor
        chemistries: Profiles supplying colours
    """
    colors = [chemistries[chem_id].color for chem_id in breakdown["chemistry"]]

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            y=breakdown["name"],
            x=breakdown["floor_cost"],
            orientation="h",
            name="Materials floor",
            marker_color=[with_alpha(color, 0.75) for color in colors],
            hovertemplate="Materials floor: $%{x:.2f}<extra></extra>",
        )
    )
    fig.add_trace(
        go.Bar(
            y=breakdown["name"],
            x=breakdown["above_floor"],
            orientation="h",
            name="Above-floor portion",
            marker_color=[mix_with_white(color, 0.65, 0.55) for color in colors],
            hovertemplate="Above-floor portion: $%{x:.2f}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Baseline Cost vs Materials Floor",
        barmode="stack",
        height=300,
    )
    fig.update_xaxes(tickprefix="$")
    _style_axes(fig)
    return fig

"""
Streamlit Web Application for the Battery Pack Cost Forecaster.

Run with: streamlit run battery_cost_forecaster/app.py
"""

from __future__ import annotations

from typing import Any, Dict

import pandas as pd
import streamlit as st

from battery_cost_forecaster import __version__
from battery_cost_forecaster.charts import create_cost_chart, create_materials_chart
from battery_cost_forecaster.core.adoption import UptakeShape
from battery_cost_forecaster.core.session import ForecastSession


# =============================================================================
# Page Configuration
# =============================================================================

st.set_page_config(
    page_title="Battery Pack Cost Forecaster",
    page_icon="B",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        text-align: center;
        margin-bottom: 0.5rem;
    }

    .sub-header {
        font-size: 1.1rem;
        text-align: center;
        margin-bottom: 2rem;
        opacity: 0.8;
    }

    .chem-badge {
        font-size: 0.85rem;
        opacity: 0.7;
    }
</style>
""", unsafe_allow_html=True)

SHAPE_LABELS = {
    UptakeShape.LINEAR.value: "Linear",
    UptakeShape.FRONT.value: "Front-loaded",
    UptakeShape.BACK.value: "Back-loaded",
    UptakeShape.S_CURVE.value: "S-curve (logistic)",
}


# =============================================================================
# Session State
# =============================================================================

def get_session() -> ForecastSession:
    """Forecast session for this browser session, created on first use."""
    if "forecast_session" not in st.session_state:
        st.session_state["forecast_session"] = ForecastSession()
    return st.session_state["forecast_session"]


def widget_values(session: ForecastSession) -> Dict[str, Any]:
    """Widget key -> value mirroring the session's current state."""
    params = session.parameters
    values = {
        "start_year": int(params.start_year),
        "forecast_years": int(params.forecast_years),
        "total_doublings": float(params.total_doublings),
        "uptake_shape": params.uptake_shape.value,
    }
    for chem_id, chem in session.chemistries.items():
        values[f"{chem_id}_learning_rate"] = float(chem.learning_rate)
        values[f"{chem_id}_baseline_cost"] = float(chem.baseline_cost)
        values[f"{chem_id}_floor_cost"] = float(chem.floor_cost)
    return values


def sync_widgets(session: ForecastSession, overwrite: bool = True) -> None:
    """Copy session values into widget state."""
    for key, value in widget_values(session).items():
        if overwrite or key not in st.session_state:
            st.session_state[key] = value


def on_parameter_change(name: str) -> None:
    session = get_session()
    session.apply_parameter_change(name, st.session_state[name])
    # Start year may have been clamped to the history cutoff
    st.session_state["start_year"] = int(session.parameters.start_year)


def on_chemistry_change(chem_id: str, field_name: str) -> None:
    get_session().apply_chemistry_change(
        chem_id, field_name, st.session_state[f"{chem_id}_{field_name}"]
    )


def on_reset() -> None:
    session = get_session()
    session.reset()
    sync_widgets(session)


# =============================================================================
# Sidebar
# =============================================================================

def render_controls(session: ForecastSession) -> None:
    """Sidebar forecast controls and per-chemistry parameter editors."""
    with st.sidebar:
        st.header("Forecast Settings")

        st.number_input(
            "Start year",
            min_value=2000,
            max_value=2050,
            step=1,
            help="First projected year. Years before the history cutoff snap to the cutoff.",
            key="start_year",
            on_change=on_parameter_change,
            args=("start_year",),
        )
        st.slider(
            "Forecast horizon (years)",
            min_value=3,
            max_value=25,
            step=1,
            key="forecast_years",
            on_change=on_parameter_change,
            args=("forecast_years",),
        )
        st.slider(
            "Cumulative production doublings",
            min_value=0.0,
            max_value=8.0,
            step=0.25,
            help="Doublings of cumulative production reached by the final year.",
            key="total_doublings",
            on_change=on_parameter_change,
            args=("total_doublings",),
        )
        st.selectbox(
            "Adoption shape",
            options=list(SHAPE_LABELS),
            format_func=lambda value: SHAPE_LABELS[value],
            key="uptake_shape",
            on_change=on_parameter_change,
            args=("uptake_shape",),
        )

        st.button("Reset to defaults", on_click=on_reset, use_container_width=True)

        st.markdown("---")
        st.header("Chemistries")

        for chem_id, chem in session.chemistries.items():
            with st.expander(chem.name, expanded=False):
                st.markdown(f'<span class="chem-badge">{chem.badge}</span>', unsafe_allow_html=True)
                st.slider(
                    "Learning rate",
                    min_value=0.05,
                    max_value=0.35,
                    step=0.01,
                    help="Cost reduction per doubling. Drag to explore literature bounds.",
                    key=f"{chem_id}_learning_rate",
                    on_change=on_chemistry_change,
                    args=(chem_id, "learning_rate"),
                )
                st.number_input(
                    "Baseline cost ($/kWh)",
                    min_value=10.0,
                    max_value=300.0,
                    step=0.5,
                    key=f"{chem_id}_baseline_cost",
                    on_change=on_chemistry_change,
                    args=(chem_id, "baseline_cost"),
                )
                st.number_input(
                    "Materials floor ($/kWh)",
                    min_value=5.0,
                    max_value=200.0,
                    step=0.1,
                    key=f"{chem_id}_floor_cost",
                    on_change=on_chemistry_change,
                    args=(chem_id, "floor_cost"),
                )
                for message in chem.validate():
                    st.warning(message)


# =============================================================================
# Main Area
# =============================================================================

def format_cost_table(frame: pd.DataFrame, session: ForecastSession) -> pd.DataFrame:
    """Rename chemistry columns and format costs as dollars."""
    table = frame.copy()
    for chem_id, chem in session.chemistries.items():
        if chem_id in table.columns:
            table[chem_id] = table[chem_id].map(
                lambda v: "—" if pd.isna(v) else f"${v:.2f}"
            )
    table = table.rename(columns={cid: chem.name for cid, chem in session.chemistries.items()})
    table = table.rename(columns={"year": "Year", "doublings": "Doublings"})
    return table


def render_summary(session: ForecastSession) -> None:
    """One metric per chemistry: final cost and change vs baseline."""
    result = session.result
    columns = st.columns(len(result.summaries))
    for column, (chem_id, summary) in zip(columns, result.summaries.items()):
        chem = session.chemistries[chem_id]
        with column:
            st.metric(
                chem.name,
                f"${summary.final_cost:.2f}",
                delta=f"{summary.arrow} {abs(summary.percent_change):.1f}% vs baseline",
                delta_color="normal" if summary.direction == "down" else "inverse",
            )
            st.caption(f"Floor: ${summary.floor_cost:.2f}/kWh")


def page_forecast() -> None:
    """Main forecast page."""
    st.markdown('<p class="main-header">Battery Pack Cost Forecaster</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Experience-curve projections with a materials floor</p>',
        unsafe_allow_html=True,
    )

    session = get_session()
    sync_widgets(session, overwrite=False)
    render_controls(session)

    result = session.result

    st.plotly_chart(
        create_cost_chart(session.timeline(), session.chemistries),
        use_container_width=True,
    )

    st.subheader(f"Outlook for {result.years[-1]}")
    render_summary(session)

    st.markdown("---")
    col1, col2 = st.columns([3, 2])
    with col1:
        st.subheader("Forecast Table")
        st.dataframe(
            format_cost_table(result.to_dataframe(), session),
            hide_index=True,
            use_container_width=True,
        )
    with col2:
        st.plotly_chart(
            create_materials_chart(session.materials_breakdown(), session.chemistries),
            use_container_width=True,
        )
        if session.history_end_year is not None:
            st.subheader("Historical Prices")
            st.dataframe(
                format_cost_table(session.history_table(), session),
                hide_index=True,
                use_container_width=True,
            )


def main():
    """Main Streamlit application."""
    page_forecast()

    st.markdown("---")
    st.markdown(
        f"""
        <div style="text-align: center; opacity: 0.7; font-size: 0.9rem;">
            Battery Pack Cost Forecaster v{__version__} | Built with Streamlit
        </div>
        """,
        unsafe_allow_html=True,
    )


if __name__ == "__main__":
    main()

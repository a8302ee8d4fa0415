"""Common UI components, sidebar filters and chart builders for the Streamlit dashboard."""

from typing import Any, Dict, List

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from car_suite.config import APP_VERSION, DEFAULT_PRICE_RANGE
from car_suite.export import human_money
from car_suite.filters import CarFilter
from car_suite.state import FilterCoordinator, THEME_DARK_FORCE, THEME_LIGHT_FORCE


def sidebar_filters(coord: FilterCoordinator, brands: List[str], fuel_types: List[str], body_types: List[str]) -> None:
    """
    Renders the filter widgets and pushes changes through the coordinator.

    Every Streamlit rerun is already a settled change, so the pending filter
    is flushed right away.

    Args:
        coord: Session filter coordinator
        brands: Brand options
        fuel_types: Fuel type options
        body_types: Body type options
    """
    current = coord.filters
    with st.sidebar:
        st.header("🔧 Filters")

        sel_brands = st.multiselect("Brands", brands, default=sorted(current.brands & set(brands)))
        sel_fuels = st.multiselect("Fuel types", fuel_types, default=sorted(current.fuel_types & set(fuel_types)))
        sel_bodies = st.multiselect("Body types", body_types, default=sorted(current.body_types & set(body_types)))

        low, high = DEFAULT_PRICE_RANGE
        price_range = st.slider(
            "Price range ($)",
            min_value=int(low),
            max_value=int(high),
            value=(int(current.price_range[0]), int(current.price_range[1])),
            step=10_000,
        )

        wanted = CarFilter(
            brands=sel_brands,
            price_range=price_range,
            fuel_types=sel_fuels,
            body_types=sel_bodies,
        )
        if wanted != current:
            coord.set_filter(
                brands=wanted.brands,
                price_range=wanted.price_range,
                fuel_types=wanted.fuel_types,
                body_types=wanted.body_types,
            )
            coord.flush()

        if st.button("↺ Reset filters", use_container_width=True):
            coord.reset_filter()
            st.rerun()

        st.divider()
        st.subheader("🎨 Theme")
        c1, c2 = st.columns(2)
        with c1:
            if st.button("🌙 Dark", use_container_width=True):
                st.session_state["theme_mode"] = THEME_DARK_FORCE
                st.rerun()
        with c2:
            if st.button("☀️ Light", use_container_width=True):
                st.session_state["theme_mode"] = THEME_LIGHT_FORCE
                st.rerun()

        st.session_state["debug_mode"] = st.toggle("Debug mode", value=st.session_state.get("debug_mode", False))

        st.divider()
        st.caption(f"Car Sales Dashboard {APP_VERSION}")


def kpi_row(kpis: Dict[str, Any]) -> None:
    """Renders the KPI summary as a row of metrics."""
    top = kpis.get("mostExpensiveCar")
    top_label = f"{top['companyName']} {top['modelName']}" if top else "-"
    cols = st.columns(4)
    cols[0].metric("Total vehicles", f"{kpis['totalVehicles']:,}")
    cols[1].metric("Average price", human_money(kpis["averagePrice"]))
    cols[2].metric("Price range", f"{human_money(kpis['minPrice'])} - {human_money(kpis['maxPrice'])}")
    cols[3].metric("Most expensive", human_money(kpis["maxPrice"]), delta=top_label, delta_color="off")


def render_page_header(title: str, description: str = None, icon: str = "🏎️"):
    """
    Renders a standardized page header.

    Args:
        title: Page title
        description: Optional page description
        icon: Emoji or icon for title
    """
    st.title(f"{icon} {title}")
    if description:
        st.markdown(f"*{description}*")
    st.divider()


# ==============================================================================
# FIGURES
# ==============================================================================

def brand_performance_figure(data: List[Dict[str, Any]], top_n: int = 15) -> go.Figure:
    df = pd.DataFrame(data).head(top_n)
    if df.empty:
        return go.Figure()
    fig = px.bar(
        df,
        x="brand",
        y="averagePrice",
        color="averageHorsePower",
        hover_data=["carCount", "averagePerformance"],
        labels={"brand": "Brand", "averagePrice": "Avg price ($)", "averageHorsePower": "Avg HP"},
    )
    fig.update_layout(xaxis_title=None)
    return fig


def price_distribution_figure(data: List[Dict[str, Any]]) -> go.Figure:
    df = pd.DataFrame(data)
    if df.empty:
        return go.Figure()
    fig = px.bar(df, x="label", y="count", hover_data=["percentage"], labels={"label": "Price", "count": "Cars"})
    fig.update_layout(xaxis_title=None)
    return fig


def market_share_figure(data: List[Dict[str, Any]], top_n: int = 10) -> go.Figure:
    """Pie of the top brands; the rest are folded into "Others"."""
    df = pd.DataFrame(data)
    if df.empty:
        return go.Figure()
    if len(df) > top_n:
        rest = df.iloc[top_n:]
        df = pd.concat([
            df.head(top_n),
            pd.DataFrame([{"name": "Others", "value": int(rest["value"].sum()), "percentage": round(float(rest["percentage"].sum()), 2)}]),
        ], ignore_index=True)
    fig = px.pie(df, values="value", names="name", hole=0.4, color_discrete_sequence=px.colors.qualitative.Prism)
    fig.update_traces(textposition="inside", textinfo="percent+label")
    return fig


def feature_scores_figure(data: List[Dict[str, Any]]) -> go.Figure:
    df = pd.DataFrame(data)
    if df.empty:
        return go.Figure()
    fig = px.line_polar(df, r="value", theta="feature", line_close=True, range_r=[0, 100])
    fig.update_traces(fill="toself")
    return fig

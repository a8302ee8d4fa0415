# -*- coding: utf-8 -*-
"""
Car Sales Dashboard | Streamlit App

Loads the car listings table once, normalizes it, and renders KPIs, charts
and the data table for whatever the sidebar filters select.

Deployment notes:
- Put "Cars Datasets 2025.csv" next to the app, or set DATA_PATH.
- Or define a URL in st.secrets / env: DATA_URL = "https://.../cars.csv"
- The user can also upload a CSV or parquet file from the sidebar.
"""

from __future__ import annotations

import logging
import traceback

import streamlit as st

from car_suite.analytics import AggregationEngine
from car_suite.config import PAGE_CONFIG, PRICE_BUCKETS
from car_suite.data import get_unique_brands, get_unique_fuel_types, load_data_flow
from car_suite.export import build_pdf_bytes, to_csv_bytes
from car_suite.filters import get_unique_body_types
from car_suite.state import (
    get_coordinator,
    get_last_error,
    init_session_state,
    inject_custom_css,
    set_last_error,
)
from car_suite.ui import (
    brand_performance_figure,
    feature_scores_figure,
    kpi_row,
    market_share_figure,
    price_distribution_figure,
    render_page_header,
    sidebar_filters,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("car_suite.app")

# ==============================================================================
# 0) PAGE CONFIG (must be first Streamlit command)
# ==============================================================================
st.set_page_config(**PAGE_CONFIG)


@st.cache_resource
def get_engine() -> AggregationEngine:
    return AggregationEngine()


def sidebar_data_source() -> None:
    with st.sidebar:
        st.subheader("📦 Data")
        up = st.file_uploader("Upload cars CSV / parquet", type=["csv", "parquet"])
        if up is not None and (st.session_state.get("uploaded_file") or (None,))[0] != up.name:
            st.session_state["uploaded_file"] = (up.name, up.getvalue())
            st.rerun()

        st.session_state["data_url"] = st.text_input(
            "DATA_URL (optional)",
            value=st.session_state.get("data_url", ""),
            help="Used when there is no local file.",
        )


def sidebar_exports(df, title: str) -> None:
    with st.sidebar:
        st.divider()
        st.markdown("### 📤 Export")

        st.download_button(
            "⬇️ Download CSV (filtered)",
            data=to_csv_bytes(df),
            file_name="car_data.csv",
            mime="text/csv",
            use_container_width=True,
        )

        try:
            pdf_bytes = build_pdf_bytes(df, title, subtitle=f"{len(df):,} vehicles")
            st.download_button(
                "📄 Download PDF report",
                data=pdf_bytes,
                file_name="car_report.pdf",
                mime="application/pdf",
                use_container_width=True,
            )
        except Exception as e:
            logger.exception("PDF export failed")
            st.warning(f"Error generating PDF: {e}")


def main() -> None:
    init_session_state()
    inject_custom_css()
    sidebar_data_source()

    df_cars, source_mode = load_data_flow()

    if df_cars is None:
        st.title("🏎️ Car Sales Dashboard")
        err = get_last_error()
        if err:
            st.error(err)
        else:
            st.error("No data loaded. Upload a CSV in the sidebar or set DATA_URL / DATA_PATH.")
        st.stop()

    engine = get_engine()
    coord = get_coordinator(df_cars)
    coord.engine = engine

    sidebar_filters(
        coord,
        brands=get_unique_brands(df_cars),
        fuel_types=get_unique_fuel_types(df_cars),
        body_types=get_unique_body_types(df_cars),
    )

    df_view = coord.filtered

    render_page_header(
        title="Car Sales Dashboard",
        description=f"{len(df_view):,} of {len(df_cars):,} vehicles | source: {source_mode}",
    )

    kpi_row(coord.kpis)

    if df_view.empty:
        st.warning("⚠️ No vehicles match the current filters.")
        st.stop()

    st.markdown("---")
    col_a, col_b = st.columns([2, 1])
    with col_a:
        st.subheader("🏆 Brand Performance")
        st.plotly_chart(brand_performance_figure(engine.brand_performance(df_view)), use_container_width=True)
    with col_b:
        st.subheader("🥧 Market Share")
        st.plotly_chart(market_share_figure(engine.market_share(df_view)), use_container_width=True)

    col_c, col_d = st.columns([2, 1])
    with col_c:
        st.subheader("💰 Price Distribution")
        st.plotly_chart(price_distribution_figure(engine.price_distribution(df_view, PRICE_BUCKETS)), use_container_width=True)
    with col_d:
        st.subheader("🧭 Feature Analysis")
        st.plotly_chart(feature_scores_figure(engine.feature_scores(df_view)), use_container_width=True)

    st.markdown("---")
    st.subheader("📋 Vehicles")
    st.dataframe(
        df_view[["companyName", "modelName", "engineType", "horsePower", "totalSpeed", "performance", "torque", "fuelType", "price"]],
        column_config={
            "companyName": st.column_config.TextColumn("Brand"),
            "modelName": st.column_config.TextColumn("Model"),
            "engineType": st.column_config.TextColumn("Engine"),
            "horsePower": st.column_config.NumberColumn("HP", format="%d"),
            "totalSpeed": st.column_config.NumberColumn("Top speed", format="%d km/h"),
            "performance": st.column_config.NumberColumn("0-100", format="%.1f s"),
            "torque": st.column_config.NumberColumn("Torque", format="%d Nm"),
            "fuelType": st.column_config.TextColumn("Fuel"),
            "price": st.column_config.NumberColumn("Price", format="$%d"),
        },
        hide_index=True,
        use_container_width=True,
    )

    sidebar_exports(df_view, "Car Market Report")

    if st.session_state.get("debug_mode"):
        with st.expander("🛠️ Debug", expanded=False):
            st.write("Active filter:", coord.filters)
            st.write("Aggregation cache:", engine.cache_info())


# Entrypoint
if __name__ == "__main__":
    try:
        main()
    except Exception as ex:
        # Hard-fail safety
        set_last_error(str(ex))
        logger.exception("Unexpected app error")
        st.error("Unexpected error. Enable debug mode for details.")
        with st.expander("Technical details", expanded=False):
            st.code(traceback.format_exc())

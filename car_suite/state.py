# -*- coding: utf-8 -*-
"""
Car Suite | State Management Module

Owns the active filter and the filtered view (FilterCoordinator) and the
Streamlit session state helpers.
"""

from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, Optional

import pandas as pd
import streamlit as st

from car_suite.analytics import AggregationEngine, content_key
from car_suite.config import FILTER_DEBOUNCE_SECONDS
from car_suite.filters import CarFilter, filter_car_data

logger = logging.getLogger(__name__)

# ==============================================================================
# STATE CONSTANTS
# ==============================================================================

THEME_SYSTEM = "SYSTEM"
THEME_DARK_FORCE = "DARK_FORCE"
THEME_LIGHT_FORCE = "LIGHT_FORCE"


# ==============================================================================
# FILTER COORDINATOR
# ==============================================================================

class FilterCoordinator:
    """
    Single owner of the active filter and the derived filtered view.

    set_filter() only schedules a change; it is applied once the debounce
    window has elapsed (poll) or on demand (flush). A newer change replaces
    the pending one outright, and every change bumps the generation token so
    a stale change can never be applied after a newer one.
    """

    def __init__(
        self,
        records: pd.DataFrame,
        engine: Optional[AggregationEngine] = None,
        debounce_seconds: float = FILTER_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.records = records
        self.engine = engine or AggregationEngine()
        self.debounce_seconds = debounce_seconds
        self._clock = clock

        self._filters = CarFilter()
        self._pending: Optional[CarFilter] = None
        self._deadline: Optional[float] = None
        self._generation = 0
        self._applied_generation = 0

        self._filtered = filter_car_data(records, self._filters)
        self._kpis = self.engine.kpis(self._filtered)

    # --- read side -----------------------------------------------------------

    @property
    def filters(self) -> CarFilter:
        return self._filters

    @property
    def pending(self) -> Optional[CarFilter]:
        return self._pending

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def applied_generation(self) -> int:
        return self._applied_generation

    @property
    def filtered(self) -> pd.DataFrame:
        return self._filtered

    @property
    def kpis(self) -> Dict[str, Any]:
        return self._kpis

    # --- write side ----------------------------------------------------------

    def set_filter(self, **partial) -> int:
        """
        Merge a partial filter (brands, price_range, fuel_types, body_types)
        into the latest requested filter and schedule it.

        Returns:
            Generation token of the scheduled change
        """
        base = self._pending if self._pending is not None else self._filters
        self._pending = base.merged(**partial)
        self._deadline = self._clock() + self.debounce_seconds
        self._generation += 1
        return self._generation

    def poll(self) -> bool:
        """Apply the pending change if its debounce window has elapsed."""
        if self._pending is None or self._clock() < self._deadline:
            return False
        self._apply(self._pending, self._generation)
        return True

    def flush(self) -> bool:
        """Apply the pending change now, ignoring the debounce window."""
        if self._pending is None:
            return False
        self._apply(self._pending, self._generation)
        return True

    def reset_filter(self) -> None:
        """Drop any pending change and restore the default filter immediately."""
        self._generation += 1
        self._apply(CarFilter(), self._generation)

    def _apply(self, car_filter: CarFilter, generation: int) -> None:
        self._pending = None
        self._deadline = None
        self._filters = car_filter
        self._filtered = filter_car_data(self.records, car_filter)
        self._kpis = self.engine.kpis(self._filtered)
        self._applied_generation = generation
        logger.debug("Applied filter generation %d: %d of %d cars", generation, len(self._filtered), len(self.records))


# ==============================================================================
# SESSION STATE INITIALIZATION
# ==============================================================================

def init_session_state() -> None:
    """Initialize all required session state variables."""
    if "theme_mode" not in st.session_state:
        st.session_state["theme_mode"] = THEME_SYSTEM

    if "debug_mode" not in st.session_state:
        st.session_state["debug_mode"] = False

    if "data_url" not in st.session_state:
        st.session_state["data_url"] = ""

    if "last_error" not in st.session_state:
        st.session_state["last_error"] = ""

    if "uploaded_file" not in st.session_state:
        st.session_state["uploaded_file"] = None

    if "compare_ids" not in st.session_state:
        st.session_state["compare_ids"] = []


def get_coordinator(records: pd.DataFrame) -> FilterCoordinator:
    """
    Session-scoped coordinator. A new one is built when the dataset changes
    (different content), otherwise the existing filter state is kept.
    """
    key = content_key(records)
    coord = st.session_state.get("coordinator")
    if coord is None or st.session_state.get("coordinator_key") != key:
        coord = FilterCoordinator(records)
        st.session_state["coordinator"] = coord
        st.session_state["coordinator_key"] = key
    return coord


# ==============================================================================
# ERROR HANDLING
# ==============================================================================

def set_last_error(msg: str) -> None:
    """Set last error message in session state."""
    st.session_state["last_error"] = msg


def get_last_error() -> str:
    """Get last error message."""
    return st.session_state.get("last_error", "")


def clear_last_error() -> None:
    """Clear error message."""
    st.session_state["last_error"] = ""


# ==============================================================================
# THEME HELPERS
# ==============================================================================

def inject_custom_css() -> None:
    """Inject custom CSS for styling."""
    base_css = """
    <style>
    .block-container { padding-top: 1.2rem; padding-bottom: 2rem; }
    div[data-testid="stMetricValue"] { font-size: 1.45rem; }
    .stDataFrame { border-radius: 8px; overflow: hidden; }
    section[data-testid="stSidebar"] { padding-top: 1rem; }
    </style>
    """
    st.markdown(base_css, unsafe_allow_html=True)

    if st.session_state.get("theme_mode") == THEME_DARK_FORCE:
        dark_css = """
        <style>
        html, body, [data-testid="stAppViewContainer"] { background-color: #0e1117 !important; color: #e6e6e6 !important; }
        [data-testid="stSidebar"] { background-color: #0b0f14 !important; }
        </style>
        """
        st.markdown(dark_css, unsafe_allow_html=True)
    elif st.session_state.get("theme_mode") == THEME_LIGHT_FORCE:
        light_css = """
        <style>
        html, body, [data-testid="stAppViewContainer"] { background-color: #ffffff !important; color: #111111 !important; }
        [data-testid="stSidebar"] { background-color: #f7f7f9 !important; }
        </style>
        """
        st.markdown(light_css, unsafe_allow_html=True)

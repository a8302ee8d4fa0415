# -*- coding: utf-8 -*-
"""
Car Suite | Data Layer (ETL)

Parses raw listing strings into numbers, standardizes fuel and engine
vocabularies, and turns the raw table into the normalized record frame.
"""

from __future__ import annotations
import io
import logging
import os
import re
from typing import Iterable, List, Mapping, Optional, Tuple, Union
from urllib.request import urlopen, Request

import numpy as np
import pandas as pd
import streamlit as st

from car_suite.config import (
    COL_COMPANY,
    COL_ENGINE,
    COL_FUEL,
    COL_HORSEPOWER,
    COL_MODEL,
    COL_PERFORMANCE,
    COL_PRICE,
    COL_SPEED,
    COL_TORQUE,
    DEFAULT_LOCAL_CSV,
    REQUIRED_COLS,
)

logger = logging.getLogger(__name__)

Records = Union[pd.DataFrame, Iterable[Mapping]]


class DataLoadError(Exception):
    """The dataset could not be loaded as a whole."""


# ==============================================================================
# CONFIGURATION
# ==============================================================================

FUEL_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("petrol", "gasoline"), "Petrol"),
    (("diesel",), "Diesel"),
    (("electric",), "Electric"),
    (("hybrid",), "Hybrid"),
    (("hydrogen",), "Hydrogen"),
    (("cng",), "CNG"),
    (("plug in hyrbrid",), "Hybrid"),
)

# Evaluated top-down, first match wins. Do not reorder.
ENGINE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("v8",), "V8"),
    (("v6",), "V6"),
    (("v10",), "V10"),
    (("v12",), "V12"),
    (("i4", "inline-4"), "I4"),
    (("i3", "inline-3"), "I3"),
    (("i6", "inline-6"), "I6"),
    (("electric motor",), "Electric Motor"),
)

_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# ==============================================================================
# UTILITIES
# ==============================================================================

def _is_blank(x) -> bool:
    if x is None:
        return True
    if pd.api.types.is_scalar(x) and pd.isna(x):
        return True
    return str(x) == ""


def to_float(text) -> float:
    """Lenient float: leading numeric prefix of the text, 0.0 when there is none."""
    if _is_blank(text):
        return 0.0
    m = _FLOAT_PREFIX.match(str(text).strip())
    if not m:
        return 0.0
    value = float(m.group(0))
    return value if np.isfinite(value) else 0.0


def _strip_unit(text, pattern: str) -> str:
    return re.sub(pattern, "", str(text), flags=re.IGNORECASE).strip()


# ==============================================================================
# FIELD PARSERS
# ==============================================================================

def parse_price(price_string) -> float:
    """Parse "$1,100,000" or a "$12,000-$15,000" range (mean of endpoints)."""
    if _is_blank(price_string):
        return 0.0
    cleaned = re.sub(r"[$,]", "", str(price_string)).strip()
    if "-" in cleaned:
        parts = cleaned.split("-")
        low = to_float(parts[0])
        high = to_float(parts[1])
        return (low + high) / 2
    return to_float(cleaned)


def parse_performance(perf_string) -> float:
    if _is_blank(perf_string):
        return 0.0
    return to_float(_strip_unit(perf_string, r"sec"))


def parse_horsepower(hp_string) -> float:
    if _is_blank(hp_string):
        return 0.0
    return to_float(_strip_unit(hp_string, r"hp").replace(",", ""))


def parse_torque(torque_string) -> float:
    if _is_blank(torque_string):
        return 0.0
    return to_float(_strip_unit(torque_string, r"nm"))


def parse_speed(speed_string) -> float:
    if _is_blank(speed_string):
        return 0.0
    return to_float(_strip_unit(speed_string, r"km/h"))


# ==============================================================================
# COLUMN-WIDE PARSERS
# ==============================================================================

def _text_series(s: pd.Series) -> pd.Series:
    return s.astype(object).where(s.notna(), "").astype(str)


def to_float_series(s: pd.Series) -> pd.Series:
    """Column-wide to_float: leading numeric prefix of each cell, 0 where there is none."""
    num = _text_series(s).str.strip().str.extract(f"({_FLOAT_PREFIX.pattern})", expand=False)
    num = pd.to_numeric(num, errors="coerce")
    return num.replace([np.inf, -np.inf], np.nan).fillna(0).astype(float)


def parse_price_series(s: pd.Series) -> pd.Series:
    cleaned = _text_series(s).str.replace(r"[$,]", "", regex=True).str.strip()
    ranged = cleaned.str.contains("-", regex=False)
    parts = cleaned.str.split("-")
    low = to_float_series(parts.str[0])
    high = to_float_series(parts.str[1])
    return low.where(~ranged, (low + high) / 2)


def parse_measure_series(s: pd.Series, unit: str, thousands: bool = False) -> pd.Series:
    """Strip a unit suffix (case-insensitive) and coerce; thousands=True also drops commas."""
    cleaned = _text_series(s).str.replace(unit, "", case=False, regex=True).str.strip()
    if thousands:
        cleaned = cleaned.str.replace(",", "", regex=False)
    return to_float_series(cleaned)


# ==============================================================================
# CATEGORICAL NORMALIZERS
# ==============================================================================

def _match_rules(value, rules) -> str:
    if _is_blank(value):
        return "Unknown"
    lowered = str(value).lower().strip()
    for keywords, label in rules:
        if any(k in lowered for k in keywords):
            return label
    return value


def standardize_fuel_type(fuel_type) -> str:
    """Map free-text fuel descriptions onto Petrol/Diesel/Electric/Hybrid/Hydrogen/CNG."""
    return _match_rules(fuel_type, FUEL_RULES)


def standardize_engine_type(engine) -> str:
    """Map engine descriptions onto V8/V6/V10/V12/I4/I3/I6/Electric Motor."""
    return _match_rules(engine, ENGINE_RULES)


def _clean_name(x) -> str:
    if _is_blank(x):
        return "Unknown"
    return str(x).strip() or "Unknown"


# ==============================================================================
# ETL FUNCTIONS
# ==============================================================================

def as_frame(records: Records) -> pd.DataFrame:
    """Accept a DataFrame or any iterable of row mappings."""
    if isinstance(records, pd.DataFrame):
        return records
    if records is None:
        return pd.DataFrame()
    return pd.DataFrame(list(records))


def process_car_data(rows: Records) -> pd.DataFrame:
    """
    Normalize raw rows into car records.

    Raw columns are kept as-is; derived columns are added next to them.
    Rows whose parsed price is not positive are dropped.

    Args:
        rows: Raw table (DataFrame or iterable of dicts keyed by source column)

    Returns:
        New DataFrame in source order with a fresh index
    """
    df = as_frame(rows).copy()
    if df.empty and len(df.columns) == 0:
        return df

    def col(name: str) -> pd.Series:
        if name in df.columns:
            return df[name]
        return pd.Series([None] * len(df), index=df.index, dtype=object)

    df["price"] = parse_price_series(col(COL_PRICE))
    df["performance"] = parse_measure_series(col(COL_PERFORMANCE), r"sec")
    df["horsePower"] = parse_measure_series(col(COL_HORSEPOWER), r"hp", thousands=True)
    df["torque"] = parse_measure_series(col(COL_TORQUE), r"nm")
    df["totalSpeed"] = parse_measure_series(col(COL_SPEED), r"km/h")
    df["fuelType"] = col(COL_FUEL).map(standardize_fuel_type)
    df["engineType"] = col(COL_ENGINE).map(standardize_engine_type)
    df["companyName"] = col(COL_COMPANY).map(_clean_name)
    df["modelName"] = col(COL_MODEL).map(_clean_name)

    before = len(df)
    df = df[df["price"] > 0].reset_index(drop=True)
    dropped = before - len(df)
    if dropped:
        logger.debug("Dropped %d rows with non-positive price", dropped)

    return df


def get_unique_brands(records: Records) -> List[str]:
    df = as_frame(records)
    if "companyName" not in df.columns:
        return []
    return sorted(df["companyName"].dropna().unique().tolist())


def get_unique_fuel_types(records: Records) -> List[str]:
    df = as_frame(records)
    if "fuelType" not in df.columns:
        return []
    return sorted(str(v) for v in df["fuelType"].dropna().unique())


# ==============================================================================
# DATA LOADERS (cached)
# ==============================================================================

def _download_bytes(url: str, timeout: int = 30) -> bytes:
    """Download file from URL with basic UA."""
    req = Request(url, headers={"User-Agent": "Mozilla/5.0"})
    with urlopen(req, timeout=timeout) as resp:
        return resp.read()


def read_table(b: bytes, name: str = "") -> pd.DataFrame:
    """Read CSV or parquet bytes into an all-string raw table."""
    bio = io.BytesIO(b)
    try:
        if name.lower().endswith(".parquet"):
            df = pd.read_parquet(bio)
            df = df.where(df.notna(), "").astype(str)
        else:
            df = pd.read_csv(bio, dtype=str, keep_default_na=False, skip_blank_lines=True, encoding_errors="replace")
    except Exception as e:
        raise DataLoadError(f"Could not read table {name or '<bytes>'}: {e}") from e
    return df


def ensure_required_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip header whitespace and fail when a required column is missing."""
    df = df.copy()
    df.columns = df.columns.astype(str).str.strip()
    missing = [c for c in REQUIRED_COLS if c not in df.columns]
    if missing:
        raise DataLoadError(f"Missing required columns: {missing}")
    return df


@st.cache_data(show_spinner=False)
def load_cars_from_bytes(b: bytes, name: str = "") -> pd.DataFrame:
    return process_car_data(ensure_required_columns(read_table(b, name)))


@st.cache_data(show_spinner=False)
def load_cars_from_url(url: str) -> pd.DataFrame:
    try:
        b = _download_bytes(url)
    except Exception as e:
        raise DataLoadError(f"Download failed for {url}: {e}") from e
    return process_car_data(ensure_required_columns(read_table(b, url)))


@st.cache_data(show_spinner=False)
def load_cars_from_local(path: str) -> pd.DataFrame:
    try:
        with open(path, "rb") as f:
            b = f.read()
    except OSError as e:
        raise DataLoadError(f"Could not open {path}: {e}") from e
    return process_car_data(ensure_required_columns(read_table(b, path)))


def load_data_flow() -> Tuple[Optional[pd.DataFrame], str]:
    """
    Unified data flow:
    1) If user uploaded: use it.
    2) Else if local CSV exists: use it.
    3) Else if secrets/url set: download and use it.
    4) Else return None.

    Any failure is terminal for the whole dataset: the message goes to
    last_error and no partial frame is returned.
    """
    from car_suite.state import clear_last_error, set_last_error

    # A) Uploaded file
    uploaded = st.session_state.get("uploaded_file")
    if uploaded is not None:
        name, payload = uploaded
        try:
            df = load_cars_from_bytes(payload, name)
            logger.info("Loaded %d cars from upload %s", len(df), name)
            clear_last_error()
            return df, "UPLOAD"
        except DataLoadError as e:
            logger.error("Upload load failed: %s", e)
            set_last_error(f"Error reading uploaded file: {e}")
            return None, "UPLOAD_ERROR"

    # B) Local file
    local_path = os.getenv("DATA_PATH", DEFAULT_LOCAL_CSV)
    if os.path.exists(local_path):
        try:
            df = load_cars_from_local(local_path)
            logger.info("Loaded %d cars from %s", len(df), local_path)
            clear_last_error()
            return df, "LOCAL"
        except DataLoadError as e:
            logger.error("Local load failed: %s", e)
            set_last_error(f"Error reading local file ({local_path}): {e}")
            return None, "LOCAL_ERROR"

    # C) URL (env, secrets or session)
    url = os.getenv("DATA_URL", "")
    if not url:
        try:
            url = st.secrets.get("DATA_URL", "")
        except Exception:
            url = ""

    if not url:
        url = st.session_state.get("data_url", "")

    if url:
        try:
            df = load_cars_from_url(url)
            logger.info("Loaded %d cars from %s", len(df), url)
            clear_last_error()
            return df, "URL"
        except DataLoadError as e:
            logger.error("URL load failed: %s", e)
            set_last_error(f"Error downloading/reading URL: {e}")
            return None, "URL_ERROR"

    # D) No data
    return None, "NO_DATA"

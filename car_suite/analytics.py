# -*- coding: utf-8 -*-
"""
Car Suite | Analytics Module

KPI summary and chart aggregations (brand performance, price distribution,
market share, feature scores) over a set of car records.
"""

from __future__ import annotations
import copy
import hashlib
import logging
import math
from collections import OrderedDict
from typing import Any, Callable, Dict, List

import numpy as np
import pandas as pd

from car_suite.config import AGG_CACHE_SIZE, PRICE_BUCKETS
from car_suite.data import Records, as_frame

logger = logging.getLogger(__name__)

# Radar scale ceilings
MAX_PERFORMANCE = 10.0
MAX_PRICE = 5_000_000.0
MAX_HORSEPOWER = 1500.0
VARIETY_BRANDS = 20.0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _mean(s: pd.Series) -> float:
    return round(float(s.mean()), 2) if len(s) else 0.0


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return df.to_dict(orient="records")


# ==============================================================================
# ANALYTICS FUNCTIONS
# ==============================================================================

def calculate_kpis(records: Records) -> Dict[str, Any]:
    """Total, average/min/max price and the most expensive car."""
    df = as_frame(records)
    if df.empty:
        return {
            "totalVehicles": 0,
            "averagePrice": 0,
            "minPrice": 0,
            "maxPrice": 0,
            "mostExpensiveCar": None,
        }

    prices = df["price"].to_numpy(dtype=float)
    # argmax returns the first occurrence, so ties keep the earliest record
    top = int(np.argmax(prices))
    return {
        "totalVehicles": int(len(df)),
        "averagePrice": round(float(prices.mean()), 2),
        "minPrice": float(prices.min()),
        "maxPrice": float(prices.max()),
        "mostExpensiveCar": df.iloc[top].to_dict(),
    }


def get_brand_performance_data(records: Records) -> List[Dict[str, Any]]:
    """Per-brand averages, most listed brands first."""
    df = as_frame(records)
    if df.empty:
        return []

    rows = []
    for brand, grp in df.groupby("companyName", sort=False):
        rows.append({
            "brand": brand,
            "averagePrice": _mean(grp["price"]),
            "carCount": int(len(grp)),
            "averagePerformance": _mean(grp["performance"]) if "performance" in grp else 0.0,
            "averageHorsePower": _mean(grp["horsePower"]) if "horsePower" in grp else 0.0,
        })
    # stable: ties keep first-appearance order
    return sorted(rows, key=lambda r: r["carCount"], reverse=True)


def get_price_distribution_data(records: Records, bucket_count: int = PRICE_BUCKETS) -> List[Dict[str, Any]]:
    """
    Equal-width price histogram.

    Buckets are half-open [min + i*w, min + (i+1)*w); the last one also
    takes the maximum price. When every price is the same, all of them
    land in the first bucket.

    Args:
        records: Car records
        bucket_count: Number of buckets

    Returns:
        List of {label, min, max, count, percentage} in ascending order
    """
    df = as_frame(records)
    if df.empty or bucket_count <= 0:
        return []

    prices = df["price"].to_numpy(dtype=float)
    prices = prices[prices > 0]
    if prices.size == 0:
        return []

    min_price = float(prices.min())
    max_price = float(prices.max())
    bucket_width = (max_price - min_price) / bucket_count

    if bucket_width > 0:
        idx = np.floor((prices - min_price) / bucket_width).astype(int)
        idx = np.minimum(idx, bucket_count - 1)
    else:
        idx = np.zeros(prices.size, dtype=int)
    counts = np.bincount(idx, minlength=bucket_count)

    total = prices.size
    buckets = []
    for i in range(bucket_count):
        lo = min_price + i * bucket_width
        hi = min_price + (i + 1) * bucket_width
        count = int(counts[i])
        buckets.append({
            "label": f"${_round_half_up(lo)} - ${_round_half_up(hi)}",
            "min": lo,
            "max": hi,
            "count": count,
            "percentage": round(count / total * 100, 2),
        })
    return buckets


def get_market_share_data(records: Records) -> List[Dict[str, Any]]:
    """Listing count and share per brand, largest first."""
    df = as_frame(records)
    if df.empty:
        return []

    total = len(df)
    counts = df.groupby("companyName", sort=False).size()
    out = pd.DataFrame({"name": counts.index, "value": counts.to_numpy(dtype=int)})
    out["percentage"] = [round(v / total * 100, 2) for v in out["value"]]
    out = out.sort_values("value", ascending=False, kind="stable")
    return _records(out)


def get_feature_scores(records: Records) -> List[Dict[str, Any]]:
    """Radar chart scores (0..100) derived from the brand rollup."""
    brands = get_brand_performance_data(records)

    def avg(key: str) -> float:
        return float(np.mean([b[key] for b in brands])) if brands else 0.0

    def clamp(x: float) -> float:
        return round(max(0.0, min(100.0, x)), 2)

    perf = avg("averagePerformance")
    price = avg("averagePrice")
    hp = avg("averageHorsePower")

    scores = [
        ("Performance", (MAX_PERFORMANCE - perf) / MAX_PERFORMANCE * 100),
        ("Price", price / MAX_PRICE * 100),
        ("Horsepower", hp / MAX_HORSEPOWER * 100),
        ("Efficiency", 100 - (price / MAX_PRICE * 50)),
        ("Variety", len(brands) / VARIETY_BRANDS * 100),
        ("Technology", hp / MAX_HORSEPOWER * 100),
    ]
    return [{"feature": name, "value": clamp(v), "max": 100} for name, v in scores]


# ==============================================================================
# AGGREGATION ENGINE (content-keyed LRU)
# ==============================================================================

def content_key(records: Records) -> str:
    """Digest of the record values; equal content gives equal keys."""
    df = as_frame(records)
    cols = list(df.columns)
    h = hashlib.sha1()
    h.update(repr(cols).encode("utf-8"))
    h.update(str(len(df)).encode("utf-8"))
    if cols and len(df):
        hashed = pd.util.hash_pandas_object(df[cols], index=False)
        h.update(hashed.to_numpy().tobytes())
    return h.hexdigest()


class AggregationEngine:
    """
    Runs the reducers through a bounded LRU cache owned by this instance.

    Keys come from record content (see content_key), never from the
    number of records alone. Results are deep-copied in and out.
    """

    def __init__(self, maxsize: int = AGG_CACHE_SIZE):
        self.maxsize = maxsize
        self._cache: "OrderedDict[tuple, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def _cached(self, name: str, fn: Callable, records: Records, *args) -> Any:
        df = as_frame(records)
        key = (name, content_key(df), args)
        if key in self._cache:
            self._cache.move_to_end(key)
            self.hits += 1
            logger.debug("Aggregation cache hit: %s", name)
            return copy.deepcopy(self._cache[key])

        self.misses += 1
        result = fn(df, *args)
        self._cache[key] = copy.deepcopy(result)
        if len(self._cache) > self.maxsize:
            self._cache.popitem(last=False)
        return result

    def kpis(self, records: Records) -> Dict[str, Any]:
        return self._cached("kpis", calculate_kpis, records)

    def brand_performance(self, records: Records) -> List[Dict[str, Any]]:
        return self._cached("brand_performance", get_brand_performance_data, records)

    def price_distribution(self, records: Records, bucket_count: int = PRICE_BUCKETS) -> List[Dict[str, Any]]:
        return self._cached("price_distribution", get_price_distribution_data, records, bucket_count)

    def market_share(self, records: Records) -> List[Dict[str, Any]]:
        return self._cached("market_share", get_market_share_data, records)

    def feature_scores(self, records: Records) -> List[Dict[str, Any]]:
        return self._cached("feature_scores", get_feature_scores, records)

    def cache_info(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "size": len(self._cache), "maxsize": self.maxsize}

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0

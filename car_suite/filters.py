# -*- coding: utf-8 -*-
"""
Car Suite | Filters

Body type inference from model names and the composite filter
(brand, price range, fuel type, body type) applied to car records.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import FrozenSet, List, Mapping, Tuple, Union

import pandas as pd

from car_suite.config import BODY_TYPE_CACHE_SIZE, DEFAULT_PRICE_RANGE
from car_suite.data import Records, as_frame

# ==============================================================================
# BODY TYPE CLASSIFIER
# ==============================================================================

BODY_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("suv", "x1", "x3", "x5", "x7"), "SUV"),
    (("sedan", "saloon"), "Sedan"),
    (("hatchback", "hb"), "Hatchback"),
    (("coupe", "sports"), "Coupe"),
    (("convertible", "cabriolet", "roadster"), "Convertible"),
    (("wagon", "estate", "touring"), "Wagon"),
    (("van", "mpv", "minivan"), "Van/MPV"),
    (("pickup", "truck"), "Pickup"),
)

BODY_TYPE_OTHER = "Other"


@lru_cache(maxsize=BODY_TYPE_CACHE_SIZE)
def _classify(text: str) -> str:
    for keywords, label in BODY_TYPE_RULES:
        if any(k in text for k in keywords):
            return label
    return BODY_TYPE_OTHER


def classify_body_type(model_name) -> str:
    """Infer SUV/Sedan/Hatchback/... from the model name; Other when nothing matches."""
    if model_name is None or (not isinstance(model_name, str) and pd.isna(model_name)):
        return BODY_TYPE_OTHER
    return _classify(str(model_name).lower())


def body_types_for(records: Records) -> pd.Series:
    """Classify every record once, aligned to the frame's index."""
    df = as_frame(records)
    if "modelName" not in df.columns:
        return pd.Series(BODY_TYPE_OTHER, index=df.index, dtype=object)
    return df["modelName"].map(classify_body_type)


def get_unique_body_types(records: Records) -> List[str]:
    return sorted(body_types_for(records).unique().tolist())


# ==============================================================================
# FILTER
# ==============================================================================

@dataclass(frozen=True)
class CarFilter:
    """
    Active dashboard filter.

    An empty set on a dimension means no constraint on it, not "match nothing".
    """

    brands: FrozenSet[str] = field(default_factory=frozenset)
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
    fuel_types: FrozenSet[str] = field(default_factory=frozenset)
    body_types: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "brands", frozenset(self.brands))
        object.__setattr__(self, "fuel_types", frozenset(self.fuel_types))
        object.__setattr__(self, "body_types", frozenset(self.body_types))
        low, high = self.price_range
        object.__setattr__(self, "price_range", (float(low), float(high)))

    def merged(self, **partial) -> "CarFilter":
        """Return a copy with the given dimensions replaced; others unchanged."""
        return replace(self, **{k: v for k, v in partial.items() if v is not None})

    @classmethod
    def from_mapping(cls, m: Mapping) -> "CarFilter":
        """Build from either snake_case or camelCase keys (brands, priceRange, fuelTypes, bodyTypes)."""
        default = cls()
        return cls(
            brands=m.get("brands", default.brands),
            price_range=tuple(m.get("price_range", m.get("priceRange", default.price_range))),
            fuel_types=m.get("fuel_types", m.get("fuelTypes", default.fuel_types)),
            body_types=m.get("body_types", m.get("bodyTypes", default.body_types)),
        )


# ==============================================================================
# FILTER ENGINE
# ==============================================================================

def filter_car_data(records: Records, car_filter: Union[CarFilter, Mapping]) -> pd.DataFrame:
    """
    Keep the records that satisfy every active filter dimension.

    Body types are computed once for the whole batch before the mask is built.
    Input order is preserved.

    Args:
        records: Normalized car records
        car_filter: CarFilter or a mapping with brands/priceRange/fuelTypes/bodyTypes

    Returns:
        Filtered DataFrame (original index kept)
    """
    df = as_frame(records)
    if not isinstance(car_filter, CarFilter):
        car_filter = CarFilter.from_mapping(car_filter)
    if df.empty:
        return df.copy()

    low, high = car_filter.price_range
    mask = (df["price"] >= low) & (df["price"] <= high)

    if car_filter.brands:
        mask &= df["companyName"].isin(car_filter.brands)

    if car_filter.fuel_types:
        mask &= df["fuelType"].isin(car_filter.fuel_types)

    if car_filter.body_types:
        mask &= body_types_for(df).isin(car_filter.body_types)

    return df[mask].copy()

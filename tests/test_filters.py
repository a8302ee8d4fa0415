import pandas as pd
import pytest

from car_suite.filters import (
    CarFilter,
    body_types_for,
    classify_body_type,
    filter_car_data,
    get_unique_body_types,
)


@pytest.mark.parametrize("model,expected", [
    ("X5 M Competition", "SUV"),
    ("Cayenne Coupe SUV", "SUV"),
    ("A4 Sedan", "Sedan"),
    ("S-Class Saloon", "Sedan"),
    ("Golf Hatchback", "Hatchback"),
    ("911 Coupe", "Coupe"),
    ("Z4 Roadster", "Convertible"),
    ("A6 Avant Estate", "Wagon"),
    ("Transit Van", "Van/MPV"),
    ("F-150 Truck", "Pickup"),
    ("SF90 STRADALE", "Other"),
])
def test_classify_body_type(model, expected):
    assert classify_body_type(model) == expected


def test_classify_body_type_missing():
    assert classify_body_type(None) == "Other"
    assert classify_body_type("") == "Other"
    assert classify_body_type(float("nan")) == "Other"


def test_body_types_for_aligns_with_index(small_cars):
    view = small_cars.iloc[[2, 0]]
    out = body_types_for(view)
    assert list(out.index) == [2, 0]
    assert list(out) == ["SUV", "Other"]


def test_get_unique_body_types(small_cars):
    assert get_unique_body_types(small_cars) == ["Hatchback", "Other", "SUV"]


def test_filter_by_brand(small_cars):
    f = {"brands": ["FERRARI"], "priceRange": [0, 5000000], "fuelTypes": [], "bodyTypes": []}
    out = filter_car_data(small_cars, f)
    assert len(out) == 1
    assert out.iloc[0]["companyName"] == "FERRARI"


def test_filter_by_price_range(small_cars):
    f = {"brands": [], "priceRange": [50000, 200000], "fuelTypes": [], "bodyTypes": []}
    out = filter_car_data(small_cars, f)
    assert list(out["price"]) == [108490]


def test_filter_price_range_is_inclusive(small_cars):
    out = filter_car_data(small_cars, CarFilter(price_range=(26700, 108490)))
    assert list(out["companyName"]) == ["TOYOTA", "TESLA"]


def test_filter_by_fuel_type(small_cars):
    out = filter_car_data(small_cars, CarFilter(fuel_types={"Electric"}))
    assert list(out["companyName"]) == ["TESLA"]


def test_filter_by_body_type_keeps_order(small_cars):
    out = filter_car_data(small_cars, CarFilter(body_types={"SUV", "Hatchback"}))
    assert list(out["companyName"]) == ["TOYOTA", "TESLA"]


def test_empty_sets_mean_no_constraint(small_cars):
    out = filter_car_data(small_cars, CarFilter())
    assert len(out) == 3


def test_non_matching_brand_matches_nothing(small_cars):
    out = filter_car_data(small_cars, CarFilter(brands={"LADA"}))
    assert out.empty


def test_all_dimensions_must_match(small_cars):
    out = filter_car_data(small_cars, CarFilter(brands={"FERRARI"}, fuel_types={"Electric"}))
    assert out.empty


def test_filter_empty_input():
    out = filter_car_data(pd.DataFrame(), CarFilter(brands={"FERRARI"}))
    assert out.empty


def test_filter_does_not_touch_input(small_cars):
    before = small_cars.copy()
    filter_car_data(small_cars, CarFilter(brands={"TESLA"}))
    pd.testing.assert_frame_equal(small_cars, before)


def test_car_filter_merged_keeps_other_dimensions():
    f = CarFilter(brands={"FERRARI"}, price_range=(0, 100))
    g = f.merged(fuel_types=["Petrol"])
    assert g.brands == frozenset({"FERRARI"})
    assert g.price_range == (0.0, 100.0)
    assert g.fuel_types == frozenset({"Petrol"})
    assert f.fuel_types == frozenset()


def test_car_filter_defaults():
    f = CarFilter()
    assert f.brands == frozenset()
    assert f.price_range == (0.0, 5_000_000.0)
    assert f == CarFilter.from_mapping({})

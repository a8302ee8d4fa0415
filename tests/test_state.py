import pandas as pd

from car_suite.analytics import AggregationEngine
from car_suite.filters import CarFilter, filter_car_data
from car_suite.state import FilterCoordinator


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make(cars, debounce=0.3):
    clock = FakeClock()
    coord = FilterCoordinator(cars, engine=AggregationEngine(), debounce_seconds=debounce, clock=clock)
    return coord, clock


def test_initial_view_applies_default_filter(cars):
    coord, _ = make(cars)
    assert coord.filters == CarFilter()
    assert coord.filtered.equals(filter_car_data(cars, CarFilter()))
    assert coord.kpis["totalVehicles"] == 4
    assert coord.pending is None


def test_initial_view_excludes_cars_above_default_price_cap():
    cars = pd.DataFrame([
        {"companyName": "BUGATTI", "modelName": "LA VOITURE NOIRE", "price": 18_000_000.0, "fuelType": "Petrol"},
        {"companyName": "FORD", "modelName": "KA+ Hatchback", "price": 13_500.0, "fuelType": "Petrol"},
    ])
    coord, _ = make(cars)
    assert list(coord.filtered["companyName"]) == ["FORD"]
    assert coord.kpis["totalVehicles"] == 1
    assert coord.kpis["maxPrice"] == 13_500.0

    coord.reset_filter()
    assert list(coord.filtered["companyName"]) == ["FORD"]


def test_set_filter_waits_for_debounce(cars):
    coord, clock = make(cars)
    coord.set_filter(brands={"FERRARI"})
    assert coord.poll() is False
    assert len(coord.filtered) == 4

    clock.now = 0.3
    assert coord.poll() is True
    assert list(coord.filtered["companyName"]) == ["FERRARI"]
    assert coord.kpis["totalVehicles"] == 1
    assert coord.pending is None


def test_newer_change_supersedes_pending(cars):
    coord, clock = make(cars)
    coord.set_filter(brands={"FERRARI"})
    clock.now = 0.2
    coord.set_filter(brands={"TESLA"})

    clock.now = 0.35
    assert coord.poll() is False

    clock.now = 0.5
    assert coord.poll() is True
    assert coord.filters.brands == frozenset({"TESLA"})
    assert list(coord.filtered["companyName"]) == ["TESLA"]
    assert coord.applied_generation == coord.generation == 2


def test_partial_changes_merge(cars):
    coord, _ = make(cars)
    coord.set_filter(brands={"FERRARI", "FORD"})
    coord.set_filter(price_range=(0, 50000))
    assert coord.flush() is True
    assert coord.filters.brands == frozenset({"FERRARI", "FORD"})
    assert list(coord.filtered["companyName"]) == ["FORD"]

    coord.set_filter(fuel_types={"Hybrid"})
    coord.flush()
    assert coord.filters.price_range == (0.0, 50000.0)
    assert coord.filtered.empty
    assert coord.kpis["mostExpensiveCar"] is None


def test_reset_drops_pending_and_restores_default(cars):
    coord, clock = make(cars)
    coord.set_filter(brands={"TESLA"})
    coord.flush()
    coord.set_filter(fuel_types={"Petrol"})

    coord.reset_filter()
    assert coord.pending is None
    assert coord.filters == CarFilter()
    assert len(coord.filtered) == 4

    clock.now = 10
    assert coord.poll() is False
    assert coord.filters == CarFilter()


def test_poll_and_flush_without_pending(cars):
    coord, _ = make(cars)
    assert coord.poll() is False
    assert coord.flush() is False


def test_zero_debounce_applies_on_first_poll(cars):
    coord, _ = make(cars, debounce=0)
    coord.set_filter(body_types={"SUV"})
    assert coord.poll() is True
    assert list(coord.filtered["modelName"]) == ["Model X SUV"]

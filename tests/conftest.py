import pandas as pd
import pytest

from car_suite.data import process_car_data


def raw_row(company, model, engine, capacity, hp, speed, perf, price, fuel, seats, torque):
    return {
        "Company Names": company,
        "Cars Names": model,
        "Engines": engine,
        "CC/Battery Capacity": capacity,
        "HorsePower": hp,
        "Total Speed": speed,
        "Performance(0 - 100 )KM/H": perf,
        "Cars Prices": price,
        "Fuel Types": fuel,
        "Seats": seats,
        "Torque": torque,
    }


@pytest.fixture
def raw_rows():
    return [
        raw_row("FERRARI ", "SF90 STRADALE", "V8", "3990 cc", "963 hp", "340 km/h", "2.5 sec", "$1,100,000", "plug in hyrbrid", "2", "800 Nm"),
        raw_row("ROLLS ROYCE", "PHANTOM", "V12", "6749 cc", "563 hp", "250 km/h", "5.3 sec", "$460,000", "Petrol", "5", "900 Nm"),
        raw_row("FORD", "KA+ Hatchback", "1.2L Petrol", "1,200 cc", "70-85 hp", "160 km/h", "10.5 sec", "$12,000-$15,000", "Petrol", "5", "100 - 140 Nm"),
        raw_row("BROKEN", "NO PRICE", "V6", "", "", "", "", "", "Diesel", "4", ""),
        raw_row("TESLA", "Model X SUV", "Dual Electric Motor", "100 kWh", "1,020 hp", "262 km/h", "2.6 sec", "$108,490", "Electric", "7", "1420 Nm"),
        raw_row("FREEBIE", "ZERO", "I4", "", "", "", "", "$0", "Petrol", "4", ""),
    ]


@pytest.fixture
def cars(raw_rows):
    return process_car_data(raw_rows)


@pytest.fixture
def small_cars():
    return pd.DataFrame([
        {"companyName": "FERRARI", "modelName": "SF90 STRADALE", "price": 1100000, "fuelType": "Hybrid"},
        {"companyName": "TOYOTA", "modelName": "Yaris Hatchback", "price": 26700, "fuelType": "Hybrid"},
        {"companyName": "TESLA", "modelName": "Model X SUV", "price": 108490, "fuelType": "Electric"},
    ])

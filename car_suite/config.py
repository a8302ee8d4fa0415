# Configuration settings for Car Suite

APP_TITLE = "Car Sales Dashboard"
APP_ICON = "🏎️"
APP_VERSION = "v1.2"

# Page configuration
PAGE_CONFIG = {
    "page_title": APP_TITLE,
    "page_icon": APP_ICON,
    "layout": "wide",
    "initial_sidebar_state": "expanded"
}

# Data paths
DEFAULT_LOCAL_CSV = "Cars Datasets 2025.csv"

# Source columns
COL_COMPANY = "Company Names"
COL_MODEL = "Cars Names"
COL_ENGINE = "Engines"
COL_CAPACITY = "CC/Battery Capacity"
COL_HORSEPOWER = "HorsePower"
COL_SPEED = "Total Speed"
COL_PERFORMANCE = "Performance(0 - 100 )KM/H"
COL_PRICE = "Cars Prices"
COL_FUEL = "Fuel Types"
COL_SEATS = "Seats"
COL_TORQUE = "Torque"

REQUIRED_COLS = [
    COL_COMPANY,
    COL_MODEL,
    COL_ENGINE,
    COL_CAPACITY,
    COL_HORSEPOWER,
    COL_SPEED,
    COL_PERFORMANCE,
    COL_PRICE,
    COL_FUEL,
    COL_SEATS,
    COL_TORQUE,
]

# Filters
DEFAULT_PRICE_RANGE = (0.0, 5_000_000.0)
FILTER_DEBOUNCE_SECONDS = 0.3

# Aggregations
PRICE_BUCKETS = 10
AGG_CACHE_SIZE = 64
BODY_TYPE_CACHE_SIZE = 4096
TOP_BRANDS = 15

"""City Mobility backend: AI route optimization for a city-mobility portal."""

__version__ = "0.1.0"

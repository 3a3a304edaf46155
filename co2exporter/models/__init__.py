"""
Models package for the exporter
"""
from .sensor_data import (
    UNKNOWN,
    Advertisement,
    CO2Reading,
    DeviceEntry,
    ThermometerReading,
    normalize_address,
)

__all__ = [
    "UNKNOWN",
    "Advertisement",
    "CO2Reading",
    "DeviceEntry",
    "ThermometerReading",
    "normalize_address",
]

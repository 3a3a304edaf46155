"""
Core package for Bluetooth advertisement delivery
"""
from .radio import AdvertisementQueue, BleakRadioBackend, RadioBackend

__all__ = ["AdvertisementQueue", "BleakRadioBackend", "RadioBackend"]

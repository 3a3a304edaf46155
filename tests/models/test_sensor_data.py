"""
Tests for sensor data models
"""
import math

import pytest

from co2exporter.models.sensor_data import (
    UNKNOWN,
    Advertisement,
    CO2Reading,
    DeviceEntry,
    normalize_address,
)


class TestNormalizeAddress:
    """Test cases for address normalization"""

    def test_lowercase_is_uppercased(self):
        assert normalize_address("aa:bb:cc:dd:ee:ff") == "AA:BB:CC:DD:EE:FF"

    def test_bare_form_gets_colons(self):
        """Test that bare and colon forms normalize to the same key"""
        assert normalize_address(" aabbccddeeff ") == "AA:BB:CC:DD:EE:FF"
        assert normalize_address("AABBCCDDEEFF") == normalize_address("aa:bb:cc:dd:ee:ff")

    def test_dash_form_gets_colons(self):
        assert normalize_address("aa-bb-cc-dd-ee-ff") == "AA:BB:CC:DD:EE:FF"

    def test_non_mac_identifier_is_only_uppercased(self):
        """Test that platform UUID identifiers are kept as they are"""
        uuid = "5e3b1c2a-0d4f-4a7e-9c1b-2f6a8d9e0b13"
        assert normalize_address(uuid) == uuid.upper()


class TestDeviceEntry:
    """Test cases for DeviceEntry"""

    def test_address_is_normalized(self):
        """Test that addresses are stored uppercase"""
        entry = DeviceEntry(address="aa:bb:cc:dd:ee:ff", name="living")
        assert entry.address == "AA:BB:CC:DD:EE:FF"

    def test_from_dict(self):
        """Test creating DeviceEntry from a roster record"""
        entry = DeviceEntry.from_dict({"address": "aabbccddee01", "name": "bedroom"})
        assert entry == DeviceEntry(address="AA:BB:CC:DD:EE:01", name="bedroom")

    def test_from_dict_missing_field_raises(self):
        with pytest.raises(KeyError):
            DeviceEntry.from_dict({"address": "AA:BB:CC:DD:EE:01"})


class TestCO2Reading:
    """Test cases for CO2Reading"""

    def test_from_bytes(self):
        """Test reconstructing ppm from high and low bytes"""
        assert CO2Reading.from_bytes(0x01, 0x2C).co2_ppm == 300
        assert CO2Reading.from_bytes(0x00, 0x2A).co2_ppm == 42
        assert CO2Reading.from_bytes(0xFF, 0xFF).co2_ppm == 65535

    def test_negative_co2_raises_error(self):
        """Test that negative CO2 values raise ValueError"""
        with pytest.raises(ValueError, match="CO2 ppm cannot be negative"):
            CO2Reading(co2_ppm=-10)


class TestAdvertisement:
    """Test cases for Advertisement"""

    def test_raw_data_hex(self):
        advertisement = Advertisement(address="AA", rssi=-60, manufacturer_data=b"\x69\x09")
        assert advertisement.raw_data == "6909"

    def test_defaults(self):
        advertisement = Advertisement(address="AA", rssi=None)
        assert advertisement.manufacturer_data == b""
        assert advertisement.local_name is None


def test_unknown_is_nan():
    assert math.isnan(UNKNOWN)

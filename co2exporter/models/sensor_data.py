"""
Sensor data models for the SwitchBot / MH-Z19C exporter
"""
import math
from dataclasses import dataclass
from typing import Optional


def normalize_address(address: str) -> str:
    """Normalize a hardware address so that roster lookups are case-insensitive.

    Bare 12-digit hex addresses are rewritten to the colon form used by bleak.
    """
    address = address.strip().upper()
    bare = address.replace(":", "").replace("-", "")
    if len(bare) == 12 and all(c in "0123456789ABCDEF" for c in bare):
        return ":".join(bare[i:i + 2] for i in range(0, 12, 2))
    return address


@dataclass(frozen=True)
class DeviceEntry:
    """A device listed in the roster file"""
    address: str
    name: str

    def __post_init__(self):
        """Store the address in normalized form"""
        object.__setattr__(self, "address", normalize_address(self.address))

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceEntry":
        """Create instance from a roster record"""
        return cls(address=str(data["address"]), name=str(data["name"]))


@dataclass(frozen=True)
class Advertisement:
    """A single BLE advertisement, already demultiplexed by source address"""
    address: str
    rssi: Optional[int]
    manufacturer_data: bytes = b""
    local_name: Optional[str] = None

    @property
    def raw_data(self) -> str:
        """Manufacturer data as a hex string for logging"""
        return self.manufacturer_data.hex()


@dataclass(frozen=True)
class ThermometerReading:
    """Temperature and humidity decoded from one advertisement"""
    temperature: float
    humidity: int


@dataclass(frozen=True)
class CO2Reading:
    """CO2 concentration from one successful read cycle"""
    co2_ppm: int

    def __post_init__(self):
        """Validate CO2 data after initialization"""
        if self.co2_ppm < 0:
            raise ValueError("CO2 ppm cannot be negative")

    @classmethod
    def from_bytes(cls, high: int, low: int) -> "CO2Reading":
        """Build a reading from the two payload bytes of a response frame"""
        return cls(co2_ppm=high * 256 + low)


UNKNOWN = math.nan

"""
Exception hierarchy for the exporter
"""
from typing import Optional


class CO2ExporterError(Exception):
    """Base class for all exporter errors"""


class RosterError(CO2ExporterError):
    """The device roster could not be loaded"""


class RadioError(CO2ExporterError):
    """The Bluetooth radio backend could not be started"""


class SensorError(CO2ExporterError):
    """A single exchange with the MH-Z19C failed"""


class SerialIOError(SensorError):
    """The serial port refused a write or a read"""


class ResponseTimeoutError(SensorError):
    """The response frame did not arrive within the retry budget"""

    def __init__(self, received: bytes, attempts: int):
        self.received = bytes(received)
        self.attempts = attempts
        super().__init__(
            f"timeout reading response, read {len(self.received)} bytes "
            f"in {attempts} attempts: {self.received.hex(' ')}"
        )


class ProtocolFormatError(SensorError):
    """A complete frame arrived but its shape is wrong"""

    def __init__(self, message: str, frame: Optional[bytes] = None):
        self.frame = bytes(frame) if frame is not None else None
        if self.frame is not None:
            message = f"{message}: {self.frame.hex(' ').upper()}"
        super().__init__(message)

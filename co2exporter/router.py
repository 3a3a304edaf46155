"""
Routing of decoded readings into the metrics sink
"""
import logging
from typing import Callable, Dict, Optional

from .devices.mhz19c import MHZ19CClient
from .devices.switchbot_meter import SwitchBotMeterDecoder
from .exceptions import SensorError
from .exporters.base import MetricsSinkBase
from .models.sensor_data import UNKNOWN, Advertisement, ThermometerReading, normalize_address

logger = logging.getLogger(__name__)


class TelemetryRouter:
    """Forwards readings from both sensor types to the metrics sink"""

    def __init__(
        self,
        roster: Dict[str, str],
        sink: MetricsSinkBase,
        decoder: Optional[Callable[[bytes], Optional[ThermometerReading]]] = None,
    ):
        """
        Initialize router

        Args:
            roster: Mapping of normalized address to device name
            sink: Metrics sink receiving every published value
            decoder: Advertisement decoder, SwitchBotMeterDecoder by default
        """
        self.roster = {normalize_address(address): name for address, name in roster.items()}
        self.sink = sink
        self.decoder = decoder or SwitchBotMeterDecoder()

    def handle_advertisement(self, advertisement: Advertisement) -> Optional[ThermometerReading]:
        """Decode an advertisement from a roster device and publish it.

        Advertisements from unknown addresses are ignored without touching
        the sink. Roster devices with an undecodable payload get NaN for
        all three series.
        """
        address = normalize_address(advertisement.address)
        name = self.roster.get(address)
        if name is None:
            logger.debug(f"Ignoring non-roster device {address} ({advertisement.local_name})")
            return None

        logger.info(f"Device detected: {name} ({address})")

        reading = self.decoder(advertisement.manufacturer_data)
        if reading is None:
            logger.warning(f"Unsupported data from {name} ({address}): {advertisement.raw_data}")
            self.sink.set_thermometer(address, name, UNKNOWN, UNKNOWN, UNKNOWN)
            return None

        rssi = float(advertisement.rssi) if advertisement.rssi is not None else UNKNOWN
        self.sink.set_thermometer(
            address, name, reading.temperature, float(reading.humidity), rssi
        )
        logger.info(
            f"{name}: {reading.temperature}°C, {reading.humidity}%, RSSI {advertisement.rssi}"
        )
        return reading

    def poll_co2(self, client: MHZ19CClient) -> Optional[int]:
        """Read CO2 once and publish it, or NaN on any sensor failure"""
        try:
            co2_ppm = client.read_co2()
        except SensorError as e:
            logger.error(f"CO2 read failed: {e}")
            self.sink.set_co2(UNKNOWN)
            return None

        logger.info(f"CO2: {co2_ppm} ppm")
        self.sink.set_co2(float(co2_ppm))
        return co2_ppm

    def suppress_auto_calibration(self, client: MHZ19CClient) -> bool:
        """Disable automatic baseline correction, logging the outcome"""
        try:
            client.disable_abc()
        except SensorError as e:
            logger.error(f"Failed to disable automatic baseline correction: {e}")
            return False
        logger.info("Automatic baseline correction disabled")
        return True

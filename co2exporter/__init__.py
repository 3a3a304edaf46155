"""
SwitchBot 温湿度計 / MH-Z19C CO2センサー Prometheus exporter
"""
from .models.sensor_data import Advertisement, CO2Reading, DeviceEntry, ThermometerReading
from .core.radio import AdvertisementQueue, BleakRadioBackend, RadioBackend
from .devices.switchbot_meter import SwitchBotMeterDecoder, parse_switchbot_data
from .devices.mhz19c import MHZ19CClient
from .exporters.base import MetricsSinkBase
from .exporters.prometheus import PrometheusSink
from .exporters.server import MetricsServer
from .router import TelemetryRouter
from .service import ExporterService

__version__ = "0.1.0"
__all__ = [
    "Advertisement",
    "CO2Reading",
    "DeviceEntry",
    "ThermometerReading",
    "AdvertisementQueue",
    "BleakRadioBackend",
    "RadioBackend",
    "SwitchBotMeterDecoder",
    "parse_switchbot_data",
    "MHZ19CClient",
    "MetricsSinkBase",
    "PrometheusSink",
    "MetricsServer",
    "TelemetryRouter",
    "ExporterService",
]

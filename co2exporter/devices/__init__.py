"""
Device-specific decoders and clients
"""
from .switchbot_meter import SwitchBotMeterDecoder, is_meter_payload, parse_switchbot_data
from .mhz19c import MHZ19CClient, build_command, frame_checksum

__all__ = [
    "SwitchBotMeterDecoder",
    "is_meter_payload",
    "parse_switchbot_data",
    "MHZ19CClient",
    "build_command",
    "frame_checksum",
]

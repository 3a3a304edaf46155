"""Configuration and device roster loading."""

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .exceptions import RosterError
from .models.sensor_data import DeviceEntry

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Runtime settings for the exporter."""
    port: int = 8000
    devices_file: str = "devices.json"
    serial_device: str = "/dev/serial0"
    baudrate: int = 9600
    serial_timeout: float = 2.0
    co2_interval: float = 10.0
    abc_interval: float = 3600.0
    adapter: Optional[str] = None
    queue_size: int = 256
    verify_checksum: bool = False
    no_co2: bool = False
    log_level: str = "INFO"


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    defaults = Settings()
    parser = argparse.ArgumentParser(
        prog="co2exporter",
        description="Export SwitchBot thermometer and MH-Z19C CO2 readings to Prometheus",
    )
    parser.add_argument("-p", "--port", type=int, default=defaults.port,
                        help="Prometheus exporterのポート番号")
    parser.add_argument("-d", "--devices", dest="devices_file", default=defaults.devices_file,
                        help="device roster JSON file")
    parser.add_argument("--serial-device", default=defaults.serial_device,
                        help="MH-Z19C serial device")
    parser.add_argument("--baudrate", type=int, default=defaults.baudrate)
    parser.add_argument("--co2-interval", type=float, default=defaults.co2_interval,
                        help="seconds between CO2 reads")
    parser.add_argument("--abc-interval", type=float, default=defaults.abc_interval,
                        help="seconds between automatic baseline correction suppressions")
    parser.add_argument("--adapter", default=defaults.adapter,
                        help="Bluetooth adapter (Linux only, e.g. hci0)")
    parser.add_argument("--verify-checksum", action="store_true",
                        help="reject MH-Z19C responses with a bad checksum")
    parser.add_argument("--no-co2", action="store_true",
                        help="do not poll the MH-Z19C sensor")
    parser.add_argument("--log-level", default=defaults.log_level,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> Settings:
    """Parse command-line arguments into Settings."""
    args = build_parser().parse_args(argv)
    return Settings(
        port=args.port,
        devices_file=args.devices_file,
        serial_device=args.serial_device,
        baudrate=args.baudrate,
        co2_interval=args.co2_interval,
        abc_interval=args.abc_interval,
        adapter=args.adapter,
        verify_checksum=args.verify_checksum,
        no_co2=args.no_co2,
        log_level=args.log_level,
    )


def parse_roster(data) -> List[DeviceEntry]:
    """Validate a decoded roster document.

    Raises:
        RosterError: If the document is not a list of address/name records.
    """
    if not isinstance(data, list):
        raise RosterError("device roster must be a JSON array")

    entries = []
    for index, record in enumerate(data):
        if not isinstance(record, dict) or "address" not in record or "name" not in record:
            raise RosterError(f"device roster entry {index} must have 'address' and 'name'")
        entries.append(DeviceEntry.from_dict(record))
    return entries


def load_roster(path: Union[str, Path]) -> Dict[str, str]:
    """Load the device roster into a normalized address -> name mapping.

    Raises:
        RosterError: If the file is missing or malformed.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise RosterError(f"device roster not found: {path}") from e
    except (json.JSONDecodeError, OSError) as e:
        raise RosterError(f"failed to read device roster {path}: {e}") from e

    roster = {entry.address: entry.name for entry in parse_roster(data)}
    logger.info(f"Loaded {len(roster)} devices from {path}")
    return roster

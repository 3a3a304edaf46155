"""
Bluetooth radio backends delivering advertisements to a bounded queue
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from ..devices.switchbot_meter import is_meter_payload
from ..exceptions import RadioError
from ..models.sensor_data import Advertisement, normalize_address

logger = logging.getLogger(__name__)


class AdvertisementQueue:
    """Bounded FIFO between the radio backend and the router task"""

    def __init__(self, maxsize: int = 256):
        """Initialize queue with the given bound"""
        self._queue: "asyncio.Queue[Advertisement]" = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def put_nowait(self, advertisement: Advertisement) -> bool:
        """Enqueue an advertisement, dropping it when the queue is full"""
        try:
            self._queue.put_nowait(advertisement)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                f"Advertisement queue full, dropping event from {advertisement.address} "
                f"({self.dropped} dropped so far)"
            )
            return False

    async def get(self) -> Advertisement:
        """Wait for the next advertisement"""
        return await self._queue.get()

    def task_done(self):
        self._queue.task_done()

    def qsize(self) -> int:
        return self._queue.qsize()


def select_manufacturer_payload(advertisement_data: AdvertisementData) -> bytes:
    """Pick the manufacturer data entry to decode, company id prefixed.

    bleak strips the 2-byte little-endian company id from each entry; the
    wire layout counts it as bytes 0-1, so it is put back here.
    """
    manufacturer_data = getattr(advertisement_data, "manufacturer_data", None) or {}
    payloads = [
        company_id.to_bytes(2, "little") + bytes(data)
        for company_id, data in manufacturer_data.items()
    ]
    for payload in payloads:
        if is_meter_payload(payload):
            return payload
    return payloads[0] if payloads else b""


def to_advertisement(device: BLEDevice, advertisement_data: AdvertisementData) -> Advertisement:
    """Convert a bleak detection into an Advertisement record"""
    return Advertisement(
        address=normalize_address(device.address),
        rssi=getattr(advertisement_data, "rssi", None),
        manufacturer_data=select_manufacturer_payload(advertisement_data),
        local_name=getattr(advertisement_data, "local_name", None) or device.name,
    )


class RadioBackend(ABC):
    """Source of advertisements"""

    @abstractmethod
    async def start(self, queue: AdvertisementQueue):
        """Start delivering advertisements into the queue"""
        pass

    @abstractmethod
    async def stop(self):
        """Stop delivering advertisements"""
        pass


class BleakRadioBackend(RadioBackend):
    """Passive advertisement listener built on BleakScanner"""

    def __init__(self, adapter: Optional[str] = None):
        """
        Initialize backend

        Args:
            adapter: Bluetooth adapter name (e.g. "hci0"), Linux only
        """
        self.adapter = adapter
        self._scanner: Optional[BleakScanner] = None
        self._queue: Optional[AdvertisementQueue] = None

    @property
    def is_running(self) -> bool:
        return self._scanner is not None

    def _detection_callback(self, device: BLEDevice, advertisement_data: AdvertisementData):
        """Internal detection callback"""
        if self._queue is None:
            return
        self._queue.put_nowait(to_advertisement(device, advertisement_data))

    async def start(self, queue: AdvertisementQueue):
        """Start scanning

        Raises:
            RadioError: If the adapter cannot be initialized
        """
        self._queue = queue
        kwargs = {}
        if self.adapter:
            kwargs["adapter"] = self.adapter

        try:
            scanner = BleakScanner(detection_callback=self._detection_callback, **kwargs)
            await scanner.start()
        except (BleakError, OSError) as e:
            self._queue = None
            raise RadioError(f"failed to init device: {e}") from e

        self._scanner = scanner
        logger.info(f"Scanning started{f' on {self.adapter}' if self.adapter else ''}")

    async def stop(self):
        """Stop scanning"""
        if self._scanner is None:
            return
        try:
            await self._scanner.stop()
            logger.info("Scanning stopped")
        except (BleakError, OSError) as e:
            logger.error(f"Scan stop error: {e}")
        finally:
            self._scanner = None
            self._queue = None

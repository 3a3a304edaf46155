"""
Exporter service: BLE advertisement consumer, CO2 poller and metrics server
"""
import asyncio
import logging
import signal
from typing import Callable, Dict, List, Optional, Sequence

from .config import Settings, load_roster, parse_args
from .core.radio import AdvertisementQueue, BleakRadioBackend, RadioBackend
from .devices.mhz19c import MHZ19CClient
from .exceptions import RadioError, RosterError, SensorError
from .exporters.prometheus import PrometheusSink
from .exporters.server import MetricsServer
from .logging import setup_logging
from .models.sensor_data import UNKNOWN
from .router import TelemetryRouter

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ExporterService:
    """Runs the long-lived tasks that feed the metrics registry"""

    def __init__(
        self,
        settings: Settings,
        roster: Dict[str, str],
        sink: Optional[PrometheusSink] = None,
        backend: Optional[RadioBackend] = None,
        serial_factory: Optional[Callable[[], MHZ19CClient]] = None,
        server: Optional[MetricsServer] = None,
    ):
        """
        Initialize service

        Args:
            settings: Runtime settings
            roster: Mapping of normalized address to device name
            sink: Metrics sink, a fresh PrometheusSink by default
            backend: Radio backend, BleakRadioBackend by default
            serial_factory: Callable opening the MH-Z19C client
            server: Metrics HTTP server
        """
        self.settings = settings
        self.sink = sink or PrometheusSink()
        self.router = TelemetryRouter(roster, self.sink)
        self.backend = backend or BleakRadioBackend(adapter=settings.adapter)
        self.serial_factory = serial_factory or self._open_serial
        self.server = server or MetricsServer(self.sink.registry, port=settings.port)
        self.queue: Optional[AdvertisementQueue] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._tasks: List[asyncio.Task] = []

    def _open_serial(self) -> MHZ19CClient:
        return MHZ19CClient.open(
            self.settings.serial_device,
            baudrate=self.settings.baudrate,
            timeout=self.settings.serial_timeout,
            verify_checksum=self.settings.verify_checksum,
        )

    def stop(self):
        """Request shutdown"""
        if self._stop_event is not None and not self._stop_event.is_set():
            logger.info("Shutdown requested")
            self._stop_event.set()

    def _setup_signal_handlers(self, loop: asyncio.AbstractEventLoop):
        """Set up signal handlers for graceful shutdown"""
        for signum in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(signum, self.stop)
            except (NotImplementedError, RuntimeError):
                signal.signal(signum, lambda s, f: loop.call_soon_threadsafe(self.stop))

    def _remove_signal_handlers(self, loop: asyncio.AbstractEventLoop):
        for signum in SHUTDOWN_SIGNALS:
            try:
                loop.remove_signal_handler(signum)
            except (NotImplementedError, RuntimeError):
                default = signal.default_int_handler if signum == signal.SIGINT else signal.SIG_DFL
                signal.signal(signum, default)

    async def consume_advertisements(self):
        """Process advertisements one at a time in delivery order"""
        while True:
            advertisement = await self.queue.get()
            try:
                self.router.handle_advertisement(advertisement)
            finally:
                self.queue.task_done()

    async def poll_co2(self):
        """Read CO2 every co2_interval and suppress ABC every abc_interval"""
        try:
            client = await asyncio.to_thread(self.serial_factory)
        except SensorError as e:
            logger.error(f"MH-Z19Cへの接続失敗: {e}")
            self.sink.set_co2(UNKNOWN)
            return

        try:
            await asyncio.to_thread(self.router.suppress_auto_calibration, client)

            loop = asyncio.get_running_loop()
            next_read = loop.time() + self.settings.co2_interval
            next_abc = loop.time() + self.settings.abc_interval
            while True:
                await asyncio.sleep(max(0.0, min(next_read, next_abc) - loop.time()))
                now = loop.time()
                if now >= next_read:
                    await asyncio.to_thread(self.router.poll_co2, client)
                    next_read = max(next_read + self.settings.co2_interval, loop.time())
                if now >= next_abc:
                    await asyncio.to_thread(self.router.suppress_auto_calibration, client)
                    next_abc = max(next_abc + self.settings.abc_interval, loop.time())
        finally:
            client.close()

    def _on_co2_task_done(self, task: asyncio.Task):
        if task.cancelled() or task.exception() is None:
            return
        error = task.exception()
        logger.error(f"CO2 polling stopped unexpectedly: {error!r}", exc_info=error)
        self.sink.set_co2(UNKNOWN)

    async def run(self):
        """Run until stop() is called or a signal arrives

        Raises:
            RadioError: If the radio backend cannot be started
        """
        loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        self._setup_signal_handlers(loop)
        self.queue = AdvertisementQueue(maxsize=self.settings.queue_size)

        await self.server.start()
        try:
            await self.backend.start(self.queue)
            logger.info("スキャン開始")

            consumer = asyncio.create_task(self.consume_advertisements())
            self._tasks = [consumer]
            if not self.settings.no_co2:
                co2_task = asyncio.create_task(self.poll_co2())
                co2_task.add_done_callback(self._on_co2_task_done)
                self._tasks.append(co2_task)

            stop_waiter = asyncio.create_task(self._stop_event.wait())
            done, _ = await asyncio.wait(
                [stop_waiter, consumer], return_when=asyncio.FIRST_COMPLETED
            )
            stop_waiter.cancel()
            if consumer in done:
                consumer.result()
        finally:
            await self.shutdown()

    async def shutdown(self):
        """Cancel tasks and release the radio and HTTP server"""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        await self.backend.stop()
        await self.server.stop()
        self._remove_signal_handlers(asyncio.get_running_loop())
        logger.info("Exporter stopped")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the exporter"""
    settings = parse_args(argv)
    setup_logging(settings.log_level)

    try:
        roster = load_roster(settings.devices_file)
    except RosterError as e:
        logger.error(f"devices.jsonの読み込みに失敗: {e}")
        return 1

    service = ExporterService(settings, roster)
    try:
        asyncio.run(service.run())
    except RadioError as e:
        logger.error(f"BLEデバイスの初期化に失敗: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to start metrics server on port {settings.port}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    return 0

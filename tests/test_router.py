"""
Tests for TelemetryRouter
"""
import math

import pytest
from unittest.mock import MagicMock

from co2exporter.devices.mhz19c import MHZ19CClient
from co2exporter.exceptions import (
    ProtocolFormatError,
    ResponseTimeoutError,
    SerialIOError,
)
from co2exporter.exporters.base import MetricsSinkBase
from co2exporter.models.sensor_data import Advertisement, ThermometerReading
from co2exporter.router import TelemetryRouter

METER_PAYLOAD = bytes([0x69, 0x09, 0, 0, 0, 0, 0, 0, 0, 0, 0x01, 0x96, 0x32])


def assert_all_nan(values):
    assert all(math.isnan(value) for value in values)


class TestHandleAdvertisement:
    """Test cases for advertisement routing"""

    @pytest.fixture
    def sink(self):
        return MagicMock(spec=MetricsSinkBase)

    @pytest.fixture
    def router(self, sink):
        return TelemetryRouter({"aa:bb:cc:dd:ee:ff": "living"}, sink)

    def test_roster_device_is_published(self, router, sink):
        """Test that a decoded reading reaches the sink"""
        advertisement = Advertisement(
            address="AA:BB:CC:DD:EE:FF", rssi=-67, manufacturer_data=METER_PAYLOAD
        )

        reading = router.handle_advertisement(advertisement)

        assert reading.humidity == 50
        sink.set_thermometer.assert_called_once()
        address, name, temperature, humidity, rssi = sink.set_thermometer.call_args[0]
        assert (address, name) == ("AA:BB:CC:DD:EE:FF", "living")
        assert temperature == pytest.approx(22.1)
        assert humidity == 50.0
        assert rssi == -67.0

    def test_address_lookup_is_case_insensitive(self, router, sink):
        """Test lowercase advertisement addresses match the roster"""
        advertisement = Advertisement(
            address="aa:bb:cc:dd:ee:ff", rssi=-50, manufacturer_data=METER_PAYLOAD
        )

        router.handle_advertisement(advertisement)

        assert sink.set_thermometer.call_args[0][:2] == ("AA:BB:CC:DD:EE:FF", "living")

    def test_bare_roster_address_matches_colon_form(self, sink):
        """Test that a roster entry without colons matches bleak's address form"""
        router = TelemetryRouter({"aabbccddeeff": "living"}, sink)
        advertisement = Advertisement(
            address="AA:BB:CC:DD:EE:FF", rssi=-50, manufacturer_data=METER_PAYLOAD
        )

        assert router.handle_advertisement(advertisement) is not None
        assert sink.set_thermometer.call_args[0][:2] == ("AA:BB:CC:DD:EE:FF", "living")

    def test_unknown_device_is_ignored(self, router, sink):
        """Test that non-roster devices never touch the sink"""
        decoder = MagicMock()
        router.decoder = decoder
        advertisement = Advertisement(
            address="11:22:33:44:55:66", rssi=-40, manufacturer_data=METER_PAYLOAD
        )

        assert router.handle_advertisement(advertisement) is None
        assert sink.method_calls == []
        decoder.assert_not_called()

    def test_undecodable_payload_publishes_unknown(self, router, sink):
        """Test that NaN is published for all three series"""
        advertisement = Advertisement(
            address="AA:BB:CC:DD:EE:FF", rssi=-70, manufacturer_data=b"\x4c\x00\x10\x05"
        )

        assert router.handle_advertisement(advertisement) is None

        address, name, *values = sink.set_thermometer.call_args[0]
        assert (address, name) == ("AA:BB:CC:DD:EE:FF", "living")
        assert_all_nan(values)

    def test_missing_rssi_is_unknown(self, router, sink):
        advertisement = Advertisement(
            address="AA:BB:CC:DD:EE:FF", rssi=None, manufacturer_data=METER_PAYLOAD
        )

        router.handle_advertisement(advertisement)

        assert math.isnan(sink.set_thermometer.call_args[0][4])

    def test_custom_decoder(self, sink):
        """Test that an injected decoder is used"""
        decoder = MagicMock(return_value=ThermometerReading(temperature=-1.5, humidity=30))
        router = TelemetryRouter({"AA:BB:CC:DD:EE:FF": "living"}, sink, decoder=decoder)

        router.handle_advertisement(
            Advertisement(address="AA:BB:CC:DD:EE:FF", rssi=-60, manufacturer_data=b"\x01")
        )

        decoder.assert_called_once_with(b"\x01")
        sink.set_thermometer.assert_called_once_with(
            "AA:BB:CC:DD:EE:FF", "living", -1.5, 30.0, -60.0
        )


class TestCO2Routing:
    """Test cases for CO2 polling and ABC suppression"""

    @pytest.fixture
    def sink(self):
        return MagicMock(spec=MetricsSinkBase)

    @pytest.fixture
    def router(self, sink):
        return TelemetryRouter({}, sink)

    @pytest.fixture
    def client(self):
        return MagicMock(spec=MHZ19CClient)

    def test_poll_success(self, router, sink, client):
        client.read_co2.return_value = 300

        assert router.poll_co2(client) == 300
        sink.set_co2.assert_called_once_with(300.0)

    @pytest.mark.parametrize(
        "error",
        [
            ResponseTimeoutError(b"\xff\x86", 20),
            ProtocolFormatError("unexpected format", b"\xff\x01" + bytes(7)),
            SerialIOError("read failed"),
        ],
    )
    def test_poll_failure_publishes_unknown(self, router, sink, client, error):
        """Test that every sensor error becomes NaN"""
        client.read_co2.side_effect = error

        assert router.poll_co2(client) is None
        assert math.isnan(sink.set_co2.call_args[0][0])

    def test_poll_failure_does_not_reuse_previous_value(self, router, sink, client):
        client.read_co2.side_effect = [450, ResponseTimeoutError(b"", 20)]

        router.poll_co2(client)
        router.poll_co2(client)

        assert sink.set_co2.call_args_list[0][0][0] == 450.0
        assert math.isnan(sink.set_co2.call_args_list[1][0][0])

    def test_unexpected_error_propagates(self, router, client):
        client.read_co2.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError):
            router.poll_co2(client)

    def test_suppress_auto_calibration(self, router, sink, client):
        assert router.suppress_auto_calibration(client) is True
        client.disable_abc.assert_called_once()
        assert sink.method_calls == []

    def test_suppress_auto_calibration_failure(self, router, sink, client):
        client.disable_abc.side_effect = SerialIOError("write failed")

        assert router.suppress_auto_calibration(client) is False
        assert sink.method_calls == []

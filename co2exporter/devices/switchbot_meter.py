"""
SwitchBot 温湿度計のアドバタイズメントデコーダー
"""
import logging
from typing import Optional

from ..models.sensor_data import ThermometerReading

logger = logging.getLogger(__name__)

# 製造者データの先頭2バイト（SwitchBotの製造者ID 0x0969 をリトルエンディアンで含む）
LEADING_BYTES = (0x48, 0x69)
SECOND_BYTE = 0x09
MIN_PAYLOAD_LENGTH = 13

TEMPERATURE_DECIMAL_OFFSET = 10
TEMPERATURE_INTEGER_OFFSET = 11
HUMIDITY_OFFSET = 12


def is_meter_payload(payload: bytes) -> bool:
    """
    製造者データが温湿度計のフォーマットかどうかを判定

    Args:
        payload: 製造者データ

    Returns:
        デコード可能な場合True
    """
    return (
        len(payload) >= MIN_PAYLOAD_LENGTH
        and payload[0] in LEADING_BYTES
        and payload[1] == SECOND_BYTE
    )


def parse_switchbot_data(payload: bytes) -> Optional[ThermometerReading]:
    """
    製造者データから温度・湿度を解析

    Args:
        payload: 製造者データ

    Returns:
        ThermometerReading、対象外のデータの場合はNone
    """
    if not is_meter_payload(payload):
        return None

    # バイト11のbit7が1なら0℃以上
    is_above_freezing = (payload[TEMPERATURE_INTEGER_OFFSET] & 0b10000000) != 0
    temperature = (
        (payload[TEMPERATURE_DECIMAL_OFFSET] & 0b00001111) / 10.0
        + (payload[TEMPERATURE_INTEGER_OFFSET] & 0b01111111)
    )
    if not is_above_freezing:
        temperature = -temperature

    # 100を超える値もそのまま返す
    humidity = payload[HUMIDITY_OFFSET] & 0b01111111

    return ThermometerReading(temperature=temperature, humidity=humidity)


class SwitchBotMeterDecoder:
    """SwitchBot 温湿度計のデコーダー"""

    def decode(self, payload: bytes) -> Optional[ThermometerReading]:
        """
        製造者データをデコード

        Args:
            payload: 製造者データ

        Returns:
            ThermometerReading、対象外の場合はNone
        """
        reading = parse_switchbot_data(bytes(payload))
        if reading is None:
            logger.debug(f"対象外のデータ: {bytes(payload).hex()}")
        return reading

    def __call__(self, payload: bytes) -> Optional[ThermometerReading]:
        return self.decode(payload)

"""
メトリクス出力先の基底クラス
"""
from abc import ABC, abstractmethod


class MetricsSinkBase(ABC):
    """メトリクス出力先の抽象基底クラス"""

    @abstractmethod
    def set_thermometer(
        self, address: str, name: str, temperature: float, humidity: float, rssi: float
    ):
        """
        温湿度計の値を設定する

        Args:
            address: 正規化済みMACアドレス
            name: デバイス名
            temperature: 温度（℃）、不明な場合はNaN
            humidity: 湿度（%）、不明な場合はNaN
            rssi: RSSI、不明な場合はNaN
        """
        pass

    @abstractmethod
    def set_co2(self, co2_ppm: float):
        """
        CO2濃度を設定する

        Args:
            co2_ppm: CO2濃度（ppm）、不明な場合はNaN
        """
        pass

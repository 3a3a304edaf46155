"""
Prometheus ゲージへの出力
"""
import logging
import math
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge

from .base import MetricsSinkBase

logger = logging.getLogger(__name__)

LABELS = ["address", "name"]


class PrometheusSink(MetricsSinkBase):
    """専用のCollectorRegistryにゲージを登録して値を設定する"""

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "switchbot"):
        """
        Args:
            registry: 登録先レジストリ（省略時は新規作成）
            namespace: 温湿度計メトリクスの接頭辞
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self.temperature = Gauge(
            "temperature_celsius", "SwitchBotの温度 (摂氏)", LABELS,
            namespace=namespace, registry=self.registry,
        )
        self.humidity = Gauge(
            "humidity_percent", "SwitchBotの湿度(%)", LABELS,
            namespace=namespace, registry=self.registry,
        )
        self.rssi = Gauge(
            "rssi", "SwitchBotのRSSI", LABELS,
            namespace=namespace, registry=self.registry,
        )
        self.co2 = Gauge("co2_ppm", "CO2濃度", registry=self.registry)
        # 最初の読み取りまでは不明
        self.co2.set(math.nan)

    def set_thermometer(
        self, address: str, name: str, temperature: float, humidity: float, rssi: float
    ):
        self.temperature.labels(address, name).set(temperature)
        self.humidity.labels(address, name).set(humidity)
        self.rssi.labels(address, name).set(rssi)

    def set_co2(self, co2_ppm: float):
        self.co2.set(co2_ppm)

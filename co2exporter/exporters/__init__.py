"""
メトリクス出力パッケージ
"""
from .base import MetricsSinkBase
from .prometheus import PrometheusSink
from .server import MetricsServer

__all__ = [
    "MetricsSinkBase",
    "PrometheusSink",
    "MetricsServer",
]

"""
メトリクス公開用HTTPサーバー
"""
import logging
from typing import Optional

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

logger = logging.getLogger(__name__)


class MetricsServer:
    """/metrics をPrometheusのテキスト形式で返すHTTPサーバー"""

    def __init__(self, registry: CollectorRegistry, port: int = 8000, host: str = "0.0.0.0"):
        """
        Args:
            registry: 公開するレジストリ
            port: 待ち受けポート
            host: 待ち受けアドレス
        """
        self.registry = registry
        self.port = port
        self.host = host
        self._runner: Optional[web.AppRunner] = None

    def create_app(self) -> web.Application:
        """aiohttpアプリケーションを作成"""
        app = web.Application()
        app.router.add_get("/metrics", self.handle_metrics)
        app.router.add_get("/", self.handle_index)
        return app

    async def handle_metrics(self, request: web.Request) -> web.Response:
        body = generate_latest(self.registry)
        # CONTENT_TYPE_LATEST はcharsetを含むためヘッダーとして直接設定する
        return web.Response(body=body, headers={"Content-Type": CONTENT_TYPE_LATEST})

    async def handle_index(self, request: web.Request) -> web.Response:
        return web.Response(text='<a href="/metrics">metrics</a>', content_type="text/html")

    async def start(self):
        """サーバーを起動"""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Prometheus metrics exporter started: http://localhost:{self.port}/metrics")

    async def stop(self):
        """サーバーを停止"""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Prometheus metrics exporter stopped")

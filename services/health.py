"""
Connection monitoring for the local model server.
"""
import asyncio
import time
from typing import Optional

import httpx
from fastapi import Request

from config import Config
from models.api_models import ConnectionStatus
from utils.http_client import HTTPClientManager
from utils.logger import get_logger

logger = get_logger("health")


def now_ms() -> int:
    return int(time.time() * 1000)


class ConnectionMonitor:
    """Tracks whether the local OpenAI-compatible server answers requests."""

    def __init__(self, url: str = Config.DEFAULT_API_URL,
                 interval: float = Config.HEALTH_CHECK_INTERVAL,
                 request_timeout: float = Config.HEALTH_REQUEST_TIMEOUT):
        self.url = url
        self.interval = interval
        self.request_timeout = request_timeout
        self._status = ConnectionStatus()
        self._monitor_task: Optional[asyncio.Task] = None

    async def check_connection(self, url: Optional[str] = None) -> ConnectionStatus:
        """
        Send a one-token completion request and record the outcome.

        Args:
            url: Endpoint to probe; defaults to the monitor's URL

        Returns:
            The new connection status
        """
        target = url or self.url
        body = {
            "model": "test",
            "messages": [{"role": "user", "content": "test"}],
            "max_tokens": 1
        }

        client = HTTPClientManager.get_llm_client()
        started = time.perf_counter()
        try:
            response = await client.post(target, json=body, timeout=self.request_timeout)
        except httpx.HTTPError as e:
            logger.debug(f"Connection check failed: {e!r}")
            self._status = ConnectionStatus(
                is_connected=False,
                last_checked=now_ms(),
                error=str(e) or e.__class__.__name__
            )
            return self._status

        latency = int((time.perf_counter() - started) * 1000)

        if response.is_success:
            self._status = ConnectionStatus(is_connected=True, last_checked=now_ms(), latency=latency)
        else:
            self._status = ConnectionStatus(
                is_connected=False,
                last_checked=now_ms(),
                latency=latency,
                error=f"HTTP {response.status_code}: {response.reason_phrase}"
            )

        logger.debug(f"Connection check: connected={self._status.is_connected} latency={latency}ms")
        return self._status

    def get_status(self) -> ConnectionStatus:
        return self._status.model_copy()

    def is_stale(self, max_age_ms: Optional[int] = None) -> bool:
        """True when the last check is older than the monitoring interval."""
        max_age = max_age_ms if max_age_ms is not None else int(self.interval * 1000)
        return now_ms() - self._status.last_checked > max_age

    async def get_status_with_refresh(self) -> ConnectionStatus:
        if self.is_stale():
            return await self.check_connection()
        return self.get_status()

    @staticmethod
    def get_recommendations(status: ConnectionStatus) -> list[str]:
        if not status.is_connected:
            return [
                "Start LM Studio and load a model",
                "Enable local server in LM Studio settings",
                "Check that LM Studio is running on port 1234",
            ]

        if status.latency is not None and status.latency > Config.HEALTH_SLOW_LATENCY_MS:
            return ["Consider using a smaller model for better performance"]

        return []

    async def _monitor_loop(self) -> None:
        while True:
            await self.check_connection()
            await asyncio.sleep(self.interval)

    def start_monitoring(self) -> None:
        """Start periodic checks on the running event loop."""
        if self._monitor_task is None or self._monitor_task.done():
            logger.info(f"Starting connection monitoring every {self.interval:.0f}s")
            self._monitor_task = asyncio.create_task(self._monitor_loop())

    async def stop_monitoring(self) -> None:
        if self._monitor_task is None:
            return

        self._monitor_task.cancel()
        try:
            await self._monitor_task
        except asyncio.CancelledError:
            pass
        self._monitor_task = None


def get_connection_monitor(request: Request) -> ConnectionMonitor:
    """FastAPI dependency returning the application's connection monitor."""
    return request.app.state.monitor

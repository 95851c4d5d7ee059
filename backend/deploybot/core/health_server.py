"""HTTP health check server"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from shared.repositories.deploy_queue import DeployQueue

logger = logging.getLogger("deploybot.health_server")


class HealthCheckServer:
    """HTTP health check server"""

    def __init__(
        self,
        bot: Any = None,
        queue: "DeployQueue | None" = None,
        host: str = "0.0.0.0",
        port: int = 8080,
    ) -> None:
        self.bot: Any = bot
        self.queue = queue
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._heartbeat_task: asyncio.Task | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Configure HTTP routes"""
        self.app.router.add_get("/", self.handle_root)
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.app.router.add_get("/ping", self.handle_ping)

    def _ready(self) -> bool:
        return self.bot is not None and self.bot.is_ready()

    async def handle_root(self, request: web.Request) -> web.Response:
        """Root endpoint - minimal service info"""
        return web.json_response({"service": "deploybot", "status": "running"})

    async def handle_health(self, request: web.Request) -> web.Response:
        """Liveness check - always 200"""
        ready = self._ready()
        return web.json_response(
            {"status": "healthy" if ready else "starting", "ready": ready},
        )

    async def handle_status(self, request: web.Request) -> web.Response:
        """Bot and queue status"""
        bot_ready = self._ready()
        current = self.queue.current() if self.queue is not None else None
        return web.json_response(
            {
                "service": "deploybot",
                "bot_id": str(self.bot.user.id) if bot_ready and self.bot.user else None,
                "uptime_seconds": int(time.time() - self._start_time),
                "queue_length": self.queue.length() if self.queue is not None else 0,
                "current_holder": str(current.holder) if current else None,
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        """Ping endpoint"""
        return web.Response(text="pong")

    async def _heartbeat(self) -> None:
        """Periodic heartbeat - log uptime and queue size"""
        while True:
            await asyncio.sleep(300)
            uptime = int(time.time() - self._start_time)
            queued = self.queue.length() if self.queue is not None else 0
            logger.info(f"Heartbeat: uptime={uptime}s, ready={self._ready()}, queued={queued}")

    async def start(self) -> None:
        """Start health check server"""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, self.host, self.port)
            await site.start()

            self._heartbeat_task = asyncio.create_task(self._heartbeat())

            logger.info(f"Health server started on {self.host}:{self.port}")
        except Exception as e:
            logger.exception(f"Failed to start health server: {e}")
            raise

    async def stop(self) -> None:
        """Stop health check server"""
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.exception(f"Error stopping health server: {e}")

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from deploybot.core.health_server import HealthCheckServer
from shared.repositories.deploy_queue import DeployQueue


@pytest.mark.asyncio
async def test_status_reports_queue(queue: DeployQueue) -> None:
    bot = MagicMock()
    bot.is_ready.return_value = True
    bot.user.id = 42
    queue.push(7, "svcA")
    queue.push(8)
    server = HealthCheckServer(bot, queue)

    resp = await server.handle_status(MagicMock())
    data = json.loads(resp.text)

    assert data["bot_id"] == "42"
    assert data["queue_length"] == 2
    assert data["current_holder"] == "7"


@pytest.mark.asyncio
async def test_health_before_ready(queue: DeployQueue) -> None:
    bot = MagicMock()
    bot.is_ready.return_value = False
    server = HealthCheckServer(bot, queue)

    health = json.loads((await server.handle_health(MagicMock())).text)
    status = json.loads((await server.handle_status(MagicMock())).text)

    assert health == {"status": "starting", "ready": False}
    assert status["bot_id"] is None
    assert status["current_holder"] is None

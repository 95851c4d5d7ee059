from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from shared.repositories.deploy_queue import DeployQueue


class FakeUser:
    """Stand-in for discord.User with just what the deploy cog touches."""

    def __init__(self, user_id: int, display_name: str) -> None:
        self.id = user_id
        self.display_name = display_name
        self.send = AsyncMock()

    def __str__(self) -> str:
        return self.display_name


@pytest.fixture()
def queue() -> DeployQueue:
    return DeployQueue()


@pytest.fixture()
def users() -> dict[int, FakeUser]:
    return {
        1: FakeUser(1, "alice"),
        2: FakeUser(2, "bob"),
        3: FakeUser(3, "carol"),
    }


@pytest.fixture()
def bot(users: dict[int, FakeUser]) -> MagicMock:
    b = MagicMock()
    b.get_user.side_effect = lambda user_id: users.get(user_id)
    b.fetch_user = AsyncMock(side_effect=lambda user_id: users[user_id])
    return b


@pytest.fixture()
def make_ctx() -> Callable[[FakeUser], MagicMock]:
    def _make(author: FakeUser) -> MagicMock:
        ctx = MagicMock()
        ctx.author = author
        ctx.guild = None
        ctx.send = AsyncMock()
        ctx.reply = AsyncMock()
        return ctx

    return _make

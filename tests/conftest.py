"""Shared fixtures: fake generative services and an isolated config."""

import asyncio
from collections import deque

import pytest

from codepilot.services.config_manager import ConfigManager


class FakeGateway:
    """Answers prompts from a script; an Exception entry is raised instead."""

    def __init__(self, *responses, default="1. Use const instead of let"):
        self.prompts = []
        self._responses = deque(responses)
        self.default = default

    async def generate(self, prompt):
        self.prompts.append(prompt)
        reply = self._responses.popleft() if self._responses else self.default
        if isinstance(reply, BaseException):
            raise reply
        return reply

    @property
    def calls(self):
        return len(self.prompts)


class ControlledGateway:
    """Every call blocks until the test resolves it, so completion order is chosen by the test."""

    def __init__(self):
        self.pending = []

    async def generate(self, prompt):
        future = asyncio.get_running_loop().create_future()
        self.pending.append((prompt, future))
        return await future

    def resolve(self, index, text):
        self.pending[index][1].set_result(text)

    def fail(self, index, exc):
        self.pending[index][1].set_exception(exc)

    async def wait_for_calls(self, count, timeout=1.0):
        async def _wait():
            while len(self.pending) < count:
                await asyncio.sleep(0)

        await asyncio.wait_for(_wait(), timeout)


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def controlled_gateway():
    return ControlledGateway()


@pytest.fixture
def config_manager(tmp_path):
    return ConfigManager(config_dir=str(tmp_path / "config"))

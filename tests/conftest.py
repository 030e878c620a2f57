from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from consoletap.config import CollectorConfig
from consoletap.connection import Subscription
from consoletap.entries import TabInfo
from consoletap.errors import CloseFailed, ConnectionFailed


class FakeEmitter:
    def __init__(self) -> None:
        self.handlers: dict[str, list[Callable]] = {}

    def on(self, event: str, handler: Callable) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable) -> None:
        handlers = self.handlers.get(event, [])
        if handler not in handlers:
            raise KeyError(event)
        handlers.remove(handler)

    def emit(self, event: str, *args) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(*args)

    def count(self) -> int:
        return sum(len(h) for h in self.handlers.values())


class FakeConnection:
    def __init__(self, browser: "FakeBrowser") -> None:
        self.browser = browser
        self.events = FakeEmitter()
        self.lifecycle = FakeEmitter()
        self.tab: TabInfo | None = None
        self.enabled: list[str] = []
        self.close_started = False
        self.closed = False

    def list_tabs(self) -> list[TabInfo]:
        self.browser.list_calls += 1
        if not self.browser.available:
            raise ConnectionFailed("Connection refused")
        return list(self.browser.tabs)

    async def open(self, tab: TabInfo) -> None:
        self.browser.open_calls += 1
        if self.browser.open_gate is not None:
            await self.browser.open_gate.wait()
        if self.browser.open_error is not None:
            raise self.browser.open_error
        if self.browser.fail_open:
            raise ConnectionFailed("open failed")
        self.tab = tab

    async def enable(self, domains) -> None:
        if self.browser.fail_enable:
            raise ConnectionFailed("Runtime.enable failed")
        self.enabled = list(domains)

    def subscribe(self, event: str, handler: Callable) -> Subscription:
        self.events.on(event, handler)
        return Subscription(self.events, event, handler)

    def on_transport_lost(self, handler: Callable) -> list[Subscription]:
        self.lifecycle.on("disconnected", handler)
        return [Subscription(self.lifecycle, "disconnected", handler)]

    async def close(self) -> None:
        self.close_started = True
        if self.browser.close_gate is not None:
            await self.browser.close_gate.wait()
        self.closed = True
        if self.browser.fail_close:
            raise CloseFailed("socket already closed")

    def emit(self, event: str, payload: dict) -> None:
        self.events.emit(event, payload)

    def lose_transport(self) -> None:
        self.lifecycle.emit("disconnected", object())


class FakeBrowser:
    """Stands in for the debugging endpoint; hands out FakeConnections."""

    def __init__(self, tabs: list[TabInfo] | None = None) -> None:
        self.tabs = tabs if tabs is not None else [
            TabInfo(id="t1", title="Inbox - Mail", url="https://mail.example/"),
            TabInfo(id="t2", title="Dashboard", url="https://app.example/dash"),
        ]
        self.available = True
        self.fail_open = False
        self.fail_enable = False
        self.fail_close = False
        self.open_gate: asyncio.Event | None = None
        self.close_gate: asyncio.Event | None = None
        self.open_error: Exception | None = None
        self.list_calls = 0
        self.open_calls = 0
        self.connections: list[FakeConnection] = []

    def factory(self) -> FakeConnection:
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]


@pytest.fixture
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def config() -> CollectorConfig:
    return CollectorConfig()


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)

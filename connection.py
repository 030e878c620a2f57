"""
Manages a connection to a single tab of an existing browser via CDP.
Tabs are listed over the /json/list HTTP endpoint; the session itself goes
through Playwright's connect_over_cdp and a per-page CDPSession.
"""
import asyncio
import logging
from typing import Callable, Iterable, List, Optional

import requests
from playwright.async_api import Browser, CDPSession, Page, Playwright, async_playwright

from .entries import TabInfo
from .errors import CloseFailed, ConnectionFailed

logger = logging.getLogger("consoletap.connection")


class Subscription:
    """A handler registered on an event emitter, removable exactly once."""

    def __init__(self, emitter, event: str, handler: Callable):
        self.emitter = emitter
        self.event = event
        self.handler = handler
        self.active = True

    def cancel(self):
        if not self.active:
            return
        self.active = False
        try:
            self.emitter.remove_listener(self.event, self.handler)
        except (KeyError, ValueError):
            logger.debug(f"Listener for {self.event} was already removed")


class CDPConnection:
    """Owns the Playwright driver, the browser handle and the CDP session of one tab."""

    def __init__(self, host: str = 'localhost', port: int = 9222, http_timeout: float = 5.0):
        self.host = host
        self.port = port
        self.http_timeout = http_timeout
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.page: Optional[Page] = None
        self.client: Optional[CDPSession] = None

    @property
    def endpoint(self) -> str:
        return f"http://{self.host}:{self.port}"

    def list_tabs(self) -> List[TabInfo]:
        """
        Lists the open tabs. Blocking; run it off the event loop.
        Raises ConnectionFailed if the debugging endpoint cannot be queried.
        """
        try:
            response = requests.get(f"{self.endpoint}/json/list", timeout=self.http_timeout)
            response.raise_for_status()
            records = response.json()
        except requests.ConnectionError as e:
            raise ConnectionFailed(
                f"Connection refused on {self.endpoint}. Is the browser running with "
                f"--remote-debugging-port={self.port}?"
            ) from e
        except (requests.RequestException, ValueError) as e:
            raise ConnectionFailed(f"Failed to list tabs on {self.endpoint}: {e}") from e

        if not isinstance(records, list):
            raise ConnectionFailed(f"Unexpected /json/list payload from {self.endpoint}")
        return [
            TabInfo.from_json(record) for record in records
            if isinstance(record, dict) and record.get('type', 'page') == 'page'
        ]

    async def open(self, tab: TabInfo):
        """Connects to the browser and opens a CDP session on the given tab."""
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.connect_over_cdp(self.endpoint)
            self.page, self.client = await self._attach(tab)
        except ConnectionFailed:
            raise
        except Exception as e:
            raise ConnectionFailed(f"Playwright failed to open a CDP session on {tab.title!r}: {e}") from e
        logger.debug(f"CDP session opened on target {tab.id}")

    async def _attach(self, tab: TabInfo):
        # Playwright pages do not expose their target id, ask each page's session instead.
        for context in self.browser.contexts:
            for page in context.pages:
                session = await context.new_cdp_session(page)
                info = await session.send('Target.getTargetInfo')
                if info.get('targetInfo', {}).get('targetId') == tab.id:
                    return page, session
                await session.detach()
        raise ConnectionFailed(f"Tab {tab.title!r} ({tab.id}) is not reachable over CDP")

    async def enable(self, domains: Iterable[str]):
        """Enables the given CDP domains concurrently."""
        try:
            await asyncio.gather(*(self.client.send(f"{domain}.enable") for domain in domains))
        except Exception as e:
            raise ConnectionFailed(f"Failed to enable CDP domains: {e}") from e

    def subscribe(self, event: str, handler: Callable[[dict], None]) -> Subscription:
        self.client.on(event, handler)
        return Subscription(self.client, event, handler)

    def on_transport_lost(self, handler: Callable[..., None]) -> List[Subscription]:
        """Fires when the browser goes away or the tab is closed."""
        self.browser.on('disconnected', handler)
        self.page.on('close', handler)
        return [Subscription(self.browser, 'disconnected', handler), Subscription(self.page, 'close', handler)]

    async def close(self):
        """Detaches the session and stops Playwright. Raises CloseFailed if either step fails."""
        failures = []
        if self.client:
            try:
                await self.client.detach()
            except Exception as e:
                failures.append(e)
        if self.playwright:
            try:
                await self.playwright.stop()
                logger.info("Playwright connection stopped.")
            except Exception as e:
                failures.append(e)
        self.client = None
        self.page = None
        self.browser = None
        self.playwright = None
        if failures:
            raise CloseFailed(f"Error while disconnecting from {self.endpoint}: {failures[0]}") from failures[0]

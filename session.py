"""
Owns the single live CDP session, wires its event streams into the normalizer
and recovers from transport loss with a bounded number of reconnect attempts.
"""
import asyncio
import enum
import logging
from typing import Callable, List, Optional

from .config import CollectorConfig
from .connection import CDPConnection, Subscription
from .entries import TabInfo
from .errors import CloseFailed, ConsoleTapError, TabNotFound
from .normalizer import EventNormalizer

logger = logging.getLogger("consoletap.session")

REQUIRED_DOMAINS = ('Runtime', 'Log', 'Page', 'Network')


class SessionState(enum.Enum):
    CONNECTED = 'connected'
    RECONNECTING = 'reconnecting'
    DISCONNECTED = 'disconnected'


class ReconnectPolicy:
    """
    Counts consecutive reconnect attempts. Only a successful reconnect, or an
    explicit start/stop, resets the counter.
    """

    def __init__(self, max_attempts: int = 3):
        self.max_attempts = max_attempts
        self.state = SessionState.DISCONNECTED
        self.attempts = 0

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def begin_attempt(self) -> bool:
        if self.exhausted:
            self.state = SessionState.DISCONNECTED
            return False
        self.attempts += 1
        self.state = SessionState.RECONNECTING
        return True

    def attempt_failed(self):
        self.state = SessionState.DISCONNECTED

    def connected(self):
        self.state = SessionState.CONNECTED
        self.attempts = 0

    def reset(self):
        self.state = SessionState.DISCONNECTED
        self.attempts = 0


class SessionManager:
    """Manages at most one live connection to the instrumented tab."""

    def __init__(self, config: CollectorConfig, normalizer: EventNormalizer,
                 connection_factory: Optional[Callable[[], CDPConnection]] = None):
        self.config = config
        self.normalizer = normalizer
        self.policy = ReconnectPolicy(config.max_reconnect_attempts)
        self._connection_factory = connection_factory or (
            lambda: CDPConnection(config.host, config.port, config.http_timeout)
        )
        self._connection = None
        self._subscriptions: List[Subscription] = []
        self._current_tab_title: Optional[str] = None
        self._title_query: Optional[str] = None
        self._generation = 0
        self._lock = asyncio.Lock()
        self._reconnect_task: Optional[asyncio.Task] = None

    @property
    def current_tab_title(self) -> Optional[str]:
        return self._current_tab_title

    @property
    def reconnect_attempts(self) -> int:
        return self.policy.attempts

    @property
    def state(self) -> SessionState:
        return self.policy.state

    @property
    def connected(self) -> bool:
        return self._connection is not None

    async def list_tabs(self) -> List[TabInfo]:
        connection = self._connection_factory()
        return await asyncio.to_thread(connection.list_tabs)

    async def start(self, title: str):
        """
        Replaces any current session with one on the first tab whose title
        contains `title`. Raises TabNotFound or ConnectionFailed; on failure no
        session is left behind.
        """
        await self._cancel_reconnect()
        async with self._lock:
            self.policy.reset()
            self._title_query = None
            await self._teardown()
            await self._open(title)
            self._title_query = title
            self.policy.connected()

    async def stop(self):
        await self._cancel_reconnect()
        async with self._lock:
            self.policy.reset()
            self._title_query = None
            await self._teardown()

    async def handle_transport_lost(self, generation: Optional[int] = None):
        """Runs one step of the reconnect policy after the transport went away."""
        if generation is not None and generation != self._generation:
            return
        if self._title_query is None:
            logger.debug("Transport lost with no session to restore")
            return
        if not self.policy.begin_attempt():
            logger.error("Max reconnect attempts reached.")
            async with self._lock:
                await self._teardown()
            return

        logger.warning(f"Attempting reconnect ({self.policy.attempts})...")
        async with self._lock:
            if self._title_query is None:
                # Stopped while waiting for the lock.
                return
            await self._teardown()
            try:
                await self._open(self._title_query)
            except ConsoleTapError as e:
                logger.error(f"Reconnect failed: {e}")
                self.policy.attempt_failed()
                return
            except Exception:
                logger.exception("Reconnect failed")
                self.policy.attempt_failed()
                return
            self.policy.connected()

    async def _open(self, title: str):
        connection = self._connection_factory()
        tabs = await asyncio.to_thread(connection.list_tabs)
        tab = next((t for t in tabs if title in t.title), None)
        if tab is None:
            raise TabNotFound(title)

        self._generation += 1
        generation = self._generation
        subscriptions: List[Subscription] = []
        try:
            await connection.open(tab)
            subscriptions = [
                connection.subscribe('Runtime.consoleAPICalled',
                                     self._guarded(generation, self.normalizer.handle_console_api)),
                connection.subscribe('Runtime.exceptionThrown',
                                     self._guarded(generation, self.normalizer.handle_exception)),
                connection.subscribe('Log.entryAdded',
                                     self._guarded(generation, self.normalizer.handle_log_entry)),
            ]
            subscriptions.extend(connection.on_transport_lost(lambda *_: self._on_transport_lost(generation)))
            await connection.enable(REQUIRED_DOMAINS)
        except BaseException:
            # Covers cancellation of a pending reconnect as well.
            self._generation += 1
            for subscription in subscriptions:
                subscription.cancel()
            await self._close(connection)
            raise

        self._connection = connection
        self._subscriptions = subscriptions
        self._current_tab_title = tab.title
        logger.info(f'Connected to tab: "{tab.title}"')

    async def _teardown(self):
        # Unsubscribe before closing so no event from the old session reaches the histories.
        self._generation += 1
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        connection, self._connection = self._connection, None
        self._current_tab_title = None
        if connection is None:
            return
        await self._close(connection)
        logger.info("Disconnected previous logging session")

    async def _close(self, connection):
        closing = asyncio.ensure_future(self._close_logged(connection))
        try:
            await asyncio.shield(closing)
        except asyncio.CancelledError:
            # Let the close finish so the Playwright driver is always stopped.
            await closing
            raise

    async def _close_logged(self, connection):
        try:
            await connection.close()
        except CloseFailed as e:
            logger.warning(f"Error while disconnecting: {e}")

    def _guarded(self, generation: int, handler: Callable[[dict], object]) -> Callable[[dict], None]:
        def dispatch(event: dict):
            if generation != self._generation:
                return
            try:
                handler(event)
            except Exception:
                logger.exception("Failed to normalize CDP event")
        return dispatch

    def _on_transport_lost(self, generation: int):
        if generation != self._generation:
            return
        if self._reconnect_task and not self._reconnect_task.done():
            return
        logger.warning("CDP disconnected. Reconnecting...")
        self._reconnect_task = asyncio.get_running_loop().create_task(self.handle_transport_lost(generation))

    async def _cancel_reconnect(self):
        task, self._reconnect_task = self._reconnect_task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

"""
Interactive command loop over a LogCollector: connect to a tab by title,
then page through the captured console logs and errors.
"""
import asyncio
from typing import List, Optional

from .collector import (LogCollector, format_current_tab, format_errors, format_logs,
                        format_tabs)
from .errors import ConsoleTapError

HELP = (
    "\nCommands:\n"
    "  tabs                   - List open tabs.\n"
    "  connect <title>        - Connect to the first tab whose title contains <title>.\n"
    "  current                - Show the connected tab.\n"
    "  logs [count] [from]    - Show console logs, oldest first.\n"
    "  errors [count] [from]  - Show errors, oldest first.\n"
    "  clear                  - Drop captured logs and errors.\n"
    "  quit                   - Exit."
)


def _paging(args: List[str]) -> Optional[tuple]:
    try:
        count = int(args[0]) if args else 10
        start = int(args[1]) if len(args) > 1 else 0
    except ValueError:
        return None
    return count, start


class InteractiveMonitor:
    """Runs the collector until the user quits."""

    def __init__(self, collector: LogCollector):
        self.collector = collector

    async def start(self, title: Optional[str] = None):
        print(f"Using browser debugging endpoint {self.collector.config.endpoint}")
        if title:
            await self._connect(title)
        try:
            await self._interactive_loop()
        finally:
            print("Disconnecting from browser...")
            await self.collector.close()

    async def _connect(self, title: str):
        try:
            await self.collector.connect(title)
        except ConsoleTapError as e:
            print(f"Failed to connect to tab: {e}")
            return
        print(f'Connected to tab with title containing "{title}"')

    async def _interactive_loop(self):
        print(HELP)
        while True:
            command_str = await asyncio.to_thread(input, "\n> ")
            parts = command_str.strip().split()
            if not parts:
                continue
            command, args = parts[0].lower(), parts[1:]
            if command == "quit":
                break
            await self.handle_command(command, args)

    async def handle_command(self, command: str, args: List[str]):
        if command == "tabs":
            try:
                tabs = await self.collector.list_tabs()
            except ConsoleTapError as e:
                print(f"Failed to list tabs: {e}")
                return
            print(format_tabs(tabs))
        elif command == "connect":
            if not args:
                print("Usage: connect <title>")
            else:
                await self._connect(" ".join(args))
        elif command == "current":
            print(format_current_tab(self.collector.current_tab()))
        elif command in ("logs", "errors"):
            paging = _paging(args)
            if paging is None:
                print(f"Usage: {command} [count] [from]")
                return
            count, start = paging
            if command == "logs":
                print(format_logs(self.collector.get_logs(count, start), count))
            else:
                print(format_errors(self.collector.get_errors(count, start), count))
        elif command == "clear":
            self.collector.clear()
            print("Captured logs and errors cleared.")
        else:
            print("Unknown command.")

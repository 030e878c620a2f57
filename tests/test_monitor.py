from __future__ import annotations

import asyncio

from consoletap.collector import LogCollector
from consoletap.config import CollectorConfig
from consoletap.monitor import InteractiveMonitor


def _monitor(browser) -> InteractiveMonitor:  # noqa: ANN001
    return InteractiveMonitor(LogCollector(CollectorConfig(), connection_factory=browser.factory))


def test_connect_and_current(browser, capsys) -> None:  # noqa: ANN001
    monitor = _monitor(browser)

    async def _main() -> None:
        await monitor.handle_command("connect", ["Inbox", "-", "Mail"])
        await monitor.handle_command("current", [])

    asyncio.run(_main())
    out = capsys.readouterr().out
    assert 'Connected to tab with title containing "Inbox - Mail"' in out
    assert 'Currently connected to tab: "Inbox - Mail"' in out


def test_connect_failure_is_printed(browser, capsys) -> None:  # noqa: ANN001
    monitor = _monitor(browser)
    asyncio.run(monitor.handle_command("connect", ["NoSuchTab"]))
    assert 'Failed to connect to tab: Tab with title containing "NoSuchTab" not found' in capsys.readouterr().out


def test_tabs_listing_and_unreachable_endpoint(browser, capsys) -> None:  # noqa: ANN001
    monitor = _monitor(browser)
    asyncio.run(monitor.handle_command("tabs", []))
    assert "Found 2 tab(s):" in capsys.readouterr().out

    browser.available = False
    asyncio.run(monitor.handle_command("tabs", []))
    assert "Failed to list tabs: Connection refused" in capsys.readouterr().out


def test_logs_and_errors_paging(browser, capsys) -> None:  # noqa: ANN001
    monitor = _monitor(browser)
    for i in range(5):
        monitor.collector.normalizer.add_log(f"line {i}")
    monitor.collector.normalizer.add_error("boom", None)

    asyncio.run(monitor.handle_command("logs", ["2", "1"]))
    out = capsys.readouterr().out
    assert "Logs (2 of 2 requested):" in out
    assert "line 1" in out and "line 2" in out and "line 3" not in out

    asyncio.run(monitor.handle_command("errors", []))
    assert "message: boom" in capsys.readouterr().out

    asyncio.run(monitor.handle_command("logs", ["many"]))
    assert "Usage: logs [count] [from]" in capsys.readouterr().out


def test_clear_and_unknown(browser, capsys) -> None:  # noqa: ANN001
    monitor = _monitor(browser)
    monitor.collector.normalizer.add_log("x")
    asyncio.run(monitor.handle_command("clear", []))
    asyncio.run(monitor.handle_command("frobnicate", []))

    out = capsys.readouterr().out
    assert "Captured logs and errors cleared." in out
    assert "Unknown command." in out
    assert monitor.collector.get_logs() == []

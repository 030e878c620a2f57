"""
Command-line interface for consoletap - console log and error collector for a browser tab.
"""
import argparse
import asyncio
import logging
from .collector import LogCollector
from .config import CollectorConfig
from .monitor import InteractiveMonitor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Collect console logs and errors from a tab of a running browser.',
        prog='consoletap'
    )

    parser.add_argument(
        '--title', '-t',
        default='',
        help='Connect on startup to the first tab whose title contains this text.'
    )

    parser.add_argument(
        '--host',
        default=None,
        help='Host of the browser debugging endpoint (default: $CHROME_HOST or localhost).'
    )

    parser.add_argument(
        '--port', '-p',
        type=int,
        default=None,
        help='CDP port of the target browser instance (default: $CHROME_PORT or 9222).'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log every captured record and connection detail.'
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    config = CollectorConfig.from_env(host=args.host, port=args.port)

    async def run():
        monitor = InteractiveMonitor(LogCollector(config))
        await monitor.start(args.title or None)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\n[consoletap] User interrupted the process. Exiting.")
    except Exception as e:
        print(f"\n[consoletap] A critical error occurred: {e}")

if __name__ == "__main__":
    main()

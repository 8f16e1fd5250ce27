"""
Command-line entry point: run the Playwright operation server over MCP stdio.

    python -m mcp_playwright_server [--headless] [--channel CHANNEL]

stdout carries the MCP protocol stream, so all logging goes to stderr (and
optionally to MCP_PLAYWRIGHT_LOG_FILE).
"""

import argparse
import asyncio
import logging
import sys

from dotenv import find_dotenv, load_dotenv

from .config import get_env_config, get_logging_config
from .context import set_session
from .server import build_dispatcher, create_server, serve_stdio
from .session.manager import SessionManager

logger = logging.getLogger(__name__)


_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcp-playwright-server",
        description="Expose Playwright browser automation as MCP tools over stdio.",
    )
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the browser headless (overrides MCP_PLAYWRIGHT_HEADLESS).",
    )
    parser.add_argument(
        "--channel",
        default=None,
        help="Chromium channel, e.g. msedge or chrome; pass an empty string for bundled Chromium "
             "(overrides MCP_PLAYWRIGHT_CHANNEL).",
    )
    return parser.parse_args(argv)


def configure_logging() -> None:
    settings = get_logging_config()
    level = getattr(logging, settings["level"], logging.INFO)

    handlers = [logging.StreamHandler(sys.stderr)]
    if settings["log_file"]:
        handlers.append(logging.FileHandler(settings["log_file"], encoding="utf-8"))

    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers, force=True)


async def _serve(session: SessionManager) -> None:
    dispatcher = build_dispatcher(session)
    try:
        await serve_stdio(create_server(dispatcher))
    finally:
        await session.close()


def main(argv=None) -> None:
    load_dotenv(find_dotenv(usecwd=True))
    args = parse_args(argv)
    configure_logging()

    config = get_env_config(headless=args.headless, channel=args.channel)
    session = set_session(SessionManager(config=config))
    logger.info(
        "Starting MCP Playwright server (headless=%s, channel=%s)",
        config["headless"], config["channel"] or "<bundled>",
    )
    asyncio.run(_serve(session))


if __name__ == "__main__":
    main()

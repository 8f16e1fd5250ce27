# tests/conftest.py
import asyncio

import pytest

from _fakes import make_session

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()
    asyncio.set_event_loop(None)


@pytest.fixture
def session_and_engine(tmp_path):
    return make_session(tmp_path)


@pytest.fixture(autouse=True)
def _no_global_session():
    from mcp_playwright_server.context import reset_session

    reset_session()
    yield
    reset_session()

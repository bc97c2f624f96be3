import asyncio
import contextlib
import json

import pytest
from websockets.asyncio.client import connect

from inspector_relay.hub import create_relay, shutdown


@pytest.fixture(autouse=True)
async def reset_relay():
    """Leaves no relay hub running after a test"""
    yield
    await shutdown()


@pytest.fixture
async def hub():
    hub = await create_relay(0, host="127.0.0.1")
    yield hub
    await shutdown()


@pytest.fixture
def relay_url(hub):
    return f"ws://127.0.0.1:{hub.port}"


@pytest.fixture
async def connect_client(relay_url):
    """Factory connecting clients to the hub; returns (websocket, welcome)"""
    stack = contextlib.AsyncExitStack()

    async def _connect(url=None):
        websocket = await stack.enter_async_context(connect(url or relay_url))
        welcome = json.loads(await asyncio.wait_for(websocket.recv(), timeout=2))
        return websocket, welcome

    yield _connect
    await stack.aclose()

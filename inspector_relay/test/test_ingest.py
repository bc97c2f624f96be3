import pytest

from inspector_relay.hub import get_active_hub, ingest, shutdown

from relay_helpers import assert_silent, recv_text


@pytest.mark.asyncio
async def test_ingest_without_hub_drops_silently():
    assert get_active_hub() is None
    assert ingest({"type": "fetch", "payload": {"id": "lost"}}) is False


@pytest.mark.asyncio
async def test_ingest_reaches_every_client(hub, connect_client):
    clients = [(await connect_client())[0] for _ in range(4)]

    assert ingest({"type": "fetch_error", "payload": {"id": "e1", "error": "timeout"}})

    expected = '{"type":"fetch_error","payload":{"id":"e1","error":"timeout"}}'
    for client in clients:
        assert await recv_text(client) == expected
    for client in clients:
        await assert_silent(client, timeout=0.1)


@pytest.mark.asyncio
async def test_ingest_after_shutdown_is_dropped(hub, connect_client):
    await connect_client()
    await shutdown()

    assert ingest({"type": "fetch"}) is False

import asyncio

import pytest
from fastapi import WebSocketDisconnect

from scada.Core.config import settings
from scada.Core.log_ws import LogWebSocketManager

from conftest import bearer


def test_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/logs"):
            pass
    assert exc.value.code == 1008


def test_rejects_user_token(client, technician):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect(f"/logs?token={technician['token']}"):
            pass
    assert exc.value.code == 1008


def test_admin_ping_pong(client):
    with client.websocket_connect(f"/logs?token={settings.ADMIN_TOKEN}") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"msg_type": "pong"}


def test_denied_request_is_streamed(client, technician):
    with client.websocket_connect(f"/logs?token={settings.ADMIN_TOKEN}") as ws:
        client.get("/api/users", headers=bearer(technician["token"]))
        event = ws.receive_json()
        assert event["msg_type"] == "warning"
        assert "Admin access required" in event["message"]


class _HandshakeSocket:
    """Stands in for a WebSocket and records who was registered during accept()."""

    def __init__(self, manager):
        self.manager = manager
        self.listed_during_accept = None

    async def accept(self):
        self.listed_during_accept = self in self.manager.clients


def test_client_listed_only_after_accept():
    manager = LogWebSocketManager()
    ws = _HandshakeSocket(manager)

    asyncio.run(manager.register(ws))

    assert ws.listed_during_accept is False
    assert manager.clients == [ws]


def test_failed_accept_does_not_register():
    class _Refused:
        async def accept(self):
            raise RuntimeError("handshake failed")

    manager = LogWebSocketManager()
    with pytest.raises(RuntimeError):
        asyncio.run(manager.register(_Refused()))
    assert manager.has_clients is False

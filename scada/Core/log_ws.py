"""
Log WebSocket Management Module
================================

Console logging plus a live log stream for administrators.

Every message passed to log_from_thread() is printed to the console and, when
at least one admin is connected to the /logs WebSocket, broadcast to them as:

    {
        "msg_type": "log" | "error" | "warning",
        "message": "The log message content",
        "timestamp": 1700000000
    }

Security-relevant events go through here: denied requests, storage faults
during token classification, uniqueness conflicts, dropped history records
and bootstrap seeding.

Usage Example:
-------------
    from scada.Core import log_ws

    log_ws.log_from_thread("[AUTH] Admin access required for GET /api/users", "warning")
"""

from typing import Dict, Any
from fastapi import WebSocket
from scada.Core.timeutil import current_timestamp
from .wsBase import WebSocketManager


def log_from_thread(message: str, msg_type: str = "log"):
    """
    Thread-safe entry point for log messages.

    Args:
        message: The log message content
        msg_type: "log" (default), "error" or "warning"
    """
    print(f"[{msg_type.upper()}] {message}")

    if log_ws_manager.has_clients:
        payload: Dict[str, Any] = {
            "msg_type": msg_type,
            "message": str(message),
            "timestamp": current_timestamp(),
        }
        log_ws_manager.send_from_thread(payload)


class LogWebSocketManager(WebSocketManager):
    """
    WebSocket manager for the admin log stream.

    Clients only listen; anything they send is answered with a pong so a
    frontend can use it as a keep-alive.
    """

    async def handle_message(self, ws: WebSocket, message: str):
        if message.strip().lower() == "ping":
            await ws.send_text('{"msg_type": "pong"}')


# ============================================================
# GLOBAL LOG WEBSOCKET MANAGER INSTANCE
# ============================================================
log_ws_manager = LogWebSocketManager()

"""
WebSocket Base Manager Module
==============================

Thread-safe WebSocket connection management used by the live log stream.

Synchronous route handlers run in FastAPI's threadpool, so broadcasts are
requested from worker threads and scheduled onto the main event loop with
send_from_thread(). The client list is protected by a threading.Lock and is
copied before any I/O.

Usage Example:
-------------
    manager = WebSocketManager()
    manager.set_main_loop(asyncio.get_running_loop())   # in lifespan

    await manager.register(ws)                           # in the endpoint
    manager.send_from_thread({"msg_type": "log", ...})   # from any thread
"""

from fastapi import WebSocket
import asyncio
from typing import List, Optional, Dict, Any
import json
import threading


class WebSocketManager:
    """
    Base WebSocket manager for multiple concurrent client connections.

    Attributes:
        clients (List[WebSocket]): Currently active connections
        main_loop (Optional[asyncio.AbstractEventLoop]): FastAPI's event loop
        _lock (threading.Lock): Guards self.clients
    """

    def __init__(self):
        self.clients: List[WebSocket] = []
        self.main_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def set_main_loop(self, loop: asyncio.AbstractEventLoop):
        """Must be called at startup; send_from_thread() is a no-op without it."""
        self.main_loop = loop

    async def register(self, ws: WebSocket):
        """
        Accept and register a client. The client joins the broadcast list
        only after the handshake completes; a failed accept propagates.
        """
        await ws.accept()

        with self._lock:
            if ws not in self.clients:
                self.clients.append(ws)
            total = len(self.clients)

        print(f"[WSBase] Client registered. Total clients: {total}")

    def unregister(self, ws: WebSocket):
        """Idempotent; does not close the socket."""
        with self._lock:
            if ws in self.clients:
                self.clients.remove(ws)
                print(f"[WSBase] Client unregistered. Total clients: {len(self.clients)}")

    @property
    def has_clients(self) -> bool:
        with self._lock:
            return len(self.clients) > 0

    async def broadcast(self, message: Dict[str, Any]):
        """
        Send a JSON message to every client. Clients whose send fails are
        unregistered; the rest still receive the message.
        """
        to_remove = []

        with self._lock:
            current_clients = list(self.clients)

        for ws in current_clients:
            try:
                await ws.send_text(json.dumps(message))
            except Exception:
                to_remove.append(ws)

        for ws in to_remove:
            self.unregister(ws)

    def send_from_thread(self, message: Dict[str, Any]):
        """
        Schedule broadcast() on the main loop from any thread (fire and forget).
        """
        if not self.has_clients:
            return

        if self.main_loop and not self.main_loop.is_closed():
            asyncio.run_coroutine_threadsafe(
                self.broadcast(message), self.main_loop
            )

    async def handle_message(self, ws: WebSocket, message: str):
        """Template method for subclasses; the base only echoes to the console."""
        print(f"[WSBase] Received message from client: {message}")

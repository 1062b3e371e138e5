"""
scada/main.py
============================================
FastAPI Application for SCADA Fleet Telemetry
============================================

Entry point of the telemetry backend. Machines push speed readings over HTTP
with their API key; operators log in, browse the fleet, read history and
leave maintenance comments; the admin manages machines and users.

Architecture Overview:
---------------------
- REST API: every endpoint under /api, guarded by bearer-token capabilities
- WebSocket: admin-only live log stream at /logs
- Storage: SQLAlchemy, tables created and the admin user seeded at startup

Run:
    uvicorn scada.main:app --host 0.0.0.0 --port 8000
"""

# Environment Configuration
from dotenv import load_dotenv
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncio

from scada.Core.config import settings
from scada.Core import log_ws
from scada.Core.errors import ScadaError, scada_error_handler, request_validation_handler
from scada.Controller.Routes import auth, machines, users

# Database
from scada.DB.session import SessionLocal
from scada.DB.database import create_all_tables, seed_bootstrap_admin, test_db_connection

# Authorization
from scada.Services.authorization import Capability, is_allowed
from scada.Services.token_classifier import classify


# ============================================================
# CORS CONFIGURATION
# ============================================================
def _parse_origins(csv_value: str):
    """
    Parse comma-separated origins.

    Examples:
        "*" → (True, ["*"])
        "https://hmi.plant.local,https://ops.plant.local" → (False, [...])
        "" → (False, [])
    """
    if not csv_value:
        return (False, [])

    csv_value = csv_value.strip()

    if csv_value == "*":
        return (True, ["*"])

    origins = [origin.strip() for origin in csv_value.split(",") if origin.strip()]
    return (False, origins)


_http_allow_all, _http_origins = _parse_origins(settings.HTTP_ALLOWED_ORIGINS)


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup Sequence:
        1. Configure event loop for the log WebSocket manager
        2. Create missing tables
        3. Seed the bootstrap admin user
        4. Report database connectivity
    """
    loop = asyncio.get_running_loop()
    log_ws.log_ws_manager.set_main_loop(loop)

    create_all_tables()
    with SessionLocal() as db:
        seed_bootstrap_admin(db)

    if test_db_connection():
        print("[STARTUP] ✅ Database reachable")
    else:
        print("[STARTUP] ❌ Database not reachable")

    print("[STARTUP] ✅ Application initialization complete")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.add_exception_handler(ScadaError, scada_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Credentials are sent in the Authorization header, never as cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=not _http_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# HEALTH CHECK / API INFO
# ============================================================
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api")
def api_info():
    """
    Service information for discovery and monitoring.
    """
    return {
        "status": "online",
        "name": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "features": {
            "websockets": ["/logs"] if settings.LOG_STREAM_ENABLED else [],
            "split_forbidden_status": settings.SPLIT_FORBIDDEN_STATUS,
        },
        "endpoints": {
            "login": "/api/login",
            "machines": "/api/machines/*",
            "users": "/api/users/*",
            "logs": "/logs (WebSocket, admin)",
            "health": "/health"
        }
    }


# ============================================================
# REST API ROUTE REGISTRATION
# ============================================================
app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(machines.router, prefix="/api/machines", tags=["machines"])
app.include_router(users.router, prefix="/api/users", tags=["users"])


# ============================================================
# WEBSOCKET ENDPOINTS
# ============================================================
def _is_admin_token(token: str) -> bool:
    with SessionLocal() as db:
        return is_allowed(classify(db, token), Capability.ADMIN_ONLY)


async def socket_handler(ws: WebSocket, manager):
    """
    Generic WebSocket lifecycle: register, pump incoming messages to the
    manager, unregister on disconnect.
    """
    await manager.register(ws)

    try:
        while True:
            message = await ws.receive_text()
            await manager.handle_message(ws, message)
    except WebSocketDisconnect as e:
        print(f"[WS] Connection closed: {e.code}")
    finally:
        manager.unregister(ws)


if settings.LOG_STREAM_ENABLED:

    @app.websocket("/logs")
    async def websocket_logs(ws: WebSocket):
        """
        Live system log stream for administrators.

        Frontend Connection Example:
            const ws = new WebSocket('ws://localhost:8000/logs?token=admin_token_12345');
            ws.onmessage = (event) => {
                const log = JSON.parse(event.data);
                console.log(`[${log.msg_type}] ${log.message}`);
            };

        Connections without an admin token are closed with code 1008
        (policy violation) before the handshake completes.

        Security Note:
            The token travels in the query string, so it appears in uvicorn's
            access log and in any proxy log that records URLs. Run uvicorn
            with --no-access-log (or filter the query string) in deployments
            where those logs are not as protected as ADMIN_TOKEN itself.
        """
        token = ws.query_params.get("token", "")
        allowed = await asyncio.to_thread(_is_admin_token, token) if token else False

        if not allowed:
            print("[WS] ❌ Log stream connection rejected: admin token required")
            await ws.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await socket_handler(ws, log_ws.log_ws_manager)

# scada/Controller/deps.py

from typing import Callable, Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from scada.Core import log_ws
from scada.Core.errors import UnauthorizedError, ScadaError
from scada.DB.session import SessionLocal
from scada.Services.authorization import Capability, authorize
from scada.Services.token_classifier import Identity, classify


def get_DB() -> Generator:
    DB = SessionLocal()
    try:
        yield DB
    finally:
        DB.close()


bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing token")
    return credentials.credentials


def get_identity(
    token: str = Depends(get_bearer_token),
    DB: Session = Depends(get_DB)
) -> Optional[Identity]:
    return classify(DB, token)


def require(capability: Capability) -> Callable[..., Identity]:
    """
    Dependency factory guarding a route with a capability.

    Usage:
        @router.get("/users")
        def list_users(identity: Identity = Depends(require(Capability.ADMIN_ONLY))):
            ...
    """
    def dependency(
        request: Request,
        identity: Optional[Identity] = Depends(get_identity)
    ) -> Identity:
        try:
            return authorize(identity, capability)
        except ScadaError as e:
            log_ws.log_from_thread(
                f"[AUTH] Denied {request.method} {request.url.path}: {e.message}",
                "warning",
            )
            raise

    return dependency

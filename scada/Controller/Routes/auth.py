# scada/Controller/Routes/auth.py

"""
Login REST API

Endpoints:
- POST /api/login    Exchange username/password for the user's bearer token

The returned token is stable: logging in twice returns the same value until
an admin regenerates it. Logging in as the bootstrap admin returns the
ADMIN_TOKEN sentinel.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scada.Controller.deps import get_DB
from scada.Schemas import user as user_schema
from scada.Services import user_service

router = APIRouter()


@router.post("/login", response_model=user_schema.Login_response)
def login(credentials: user_schema.Login_request, db: Session = Depends(get_DB)):
    """
    Authenticate an operator.

    Example Request:
        POST /api/login
        {"username": "admin", "password": "admin123"}

    Returns:
        {"token": "admin_token_12345", "role": "admin", "username": "admin"}

    Raises:
        401: Invalid credentials (unknown user, wrong password, inactive)
    """
    user = user_service.login(db, credentials.username, credentials.password)
    return {"token": user.token, "role": user.role, "username": user.username}

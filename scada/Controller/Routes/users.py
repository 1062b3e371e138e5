# scada/Controller/Routes/users.py

"""
Operator Account REST API (admin only)

Endpoints:
- GET    /api/users         List users ordered by username
- POST   /api/users         Create user (token generated server-side)
- PUT    /api/users/{id}    Partial update

Passwords are write-only; no endpoint returns them.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from scada.Controller.deps import get_DB, require
from scada.Schemas import user as user_schema
from scada.Services import user_service
from scada.Services.authorization import Capability
from scada.Services.token_classifier import Identity

router = APIRouter()


@router.get("", response_model=user_schema.User_list_response)
def list_users(
    identity: Identity = Depends(require(Capability.ADMIN_ONLY)),
    db: Session = Depends(get_DB)
):
    users = user_service.list_users(db)
    return {"users": [user_schema.User_get.model_validate(u) for u in users]}


@router.post("", response_model=user_schema.User_get, status_code=201)
def create_user(
    user: user_schema.User_create,
    identity: Identity = Depends(require(Capability.ADMIN_ONLY)),
    db: Session = Depends(get_DB)
):
    """
    Create an operator account.

    Example Request:
        POST /api/users
        {"username": "maria", "password": "s3cret", "role": "technician"}

    Raises:
        400: Invalid role
        409: Username already exists
    """
    return user_service.create_user(db, user)


@router.put("/{user_id}", response_model=user_schema.User_get)
def update_user(
    user_id: int,
    changes: Optional[user_schema.User_update] = Body(None),
    identity: Identity = Depends(require(Capability.ADMIN_ONLY)),
    db: Session = Depends(get_DB)
):
    """
    Partial update of an operator.

    Example Requests:
        # Lock an account
        PUT /api/users/4
        {"is_active": false}

        # Revoke the current token
        PUT /api/users/4
        {"regenerate_token": true}

    Raises:
        400: No fields to update / invalid role
        404: User not found
    """
    return user_service.update_user(db, user_id, changes)

# scada/Controller/Routes/machines.py

"""
Machine Fleet REST API

Endpoints:
- GET    /api/machines                    List machines with live state
- POST   /api/machines                    Register machine (admin)
- POST   /api/machines/update             Telemetry report (machine API key)
- GET    /api/machines/{id}               Machine details
- PUT    /api/machines/{id}               Partial update (admin)
- GET    /api/machines/{id}/comments      Maintenance comments, newest first
- POST   /api/machines/{id}/comments      Add maintenance comment
- GET    /api/machines/{id}/history       Speed history, newest first

Security:
- Every endpoint requires a bearer token; see Services/authorization.py
- The telemetry endpoint takes no machine id: the machine is the owner of
  the API key, so a machine can only ever write its own row
- api_key is only returned on registration and on admin update

Usage:
    # In main.py
    from scada.Controller.Routes import machines
    app.include_router(machines.router, prefix="/api/machines", tags=["machines"])
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from scada.Controller.deps import get_DB, require
from scada.Schemas import machine as machine_schema
from scada.Schemas import maintenance_comment as comment_schema
from scada.Schemas import speed_history as history_schema
from scada.Services import comment_service, machine_service, telemetry
from scada.Services.authorization import Capability, comment_author
from scada.Services.token_classifier import Identity, MachineIdentity

router = APIRouter()


# ==========================================================
# 📌 Fleet Registry
# ==========================================================

@router.get("", response_model=machine_schema.Machine_list_response)
def list_machines(
    identity: Identity = Depends(require(Capability.READ_FLEET)),
    db: Session = Depends(get_DB)
):
    """
    Get all machines ordered by name, with their live telemetry state.

    Returns:
        {
            "machines": [
                {
                    "id": 1,
                    "name": "Line1",
                    "code": "L1",
                    "location": "Hall A",
                    "machine_type": "press",
                    "current_speed": 42.5,
                    "status_message": "",
                    "is_online": true,
                    "last_update": 1700000000
                }
            ]
        }
    """
    machines = machine_service.list_machines(db)
    return {
        "machines": [machine_schema.Machine_get.model_validate(m) for m in machines]
    }


@router.post("", response_model=machine_schema.Machine_created, status_code=201)
def register_machine(
    machine: machine_schema.Machine_create,
    identity: Identity = Depends(require(Capability.ADMIN_ONLY)),
    db: Session = Depends(get_DB)
):
    """
    Register a new machine. The API key is generated here and returned once;
    hand it to the machine's controller.

    Example Request:
        POST /api/machines
        {"name": "Line1", "code": "L1", "location": "Hall A"}

    Raises:
        409: Machine name or code already exists
    """
    return machine_service.create_machine(db, machine)


# ==========================================================
# 📌 Telemetry Ingestion
# ==========================================================

@router.post("/update", response_model=machine_schema.Update_response)
def report_speed(
    reading: machine_schema.Speed_update_request,
    identity: MachineIdentity = Depends(require(Capability.WRITE_TELEMETRY)),
    db: Session = Depends(get_DB)
):
    """
    Telemetry report from a machine.

    Example Request:
        POST /api/machines/update
        Authorization: Bearer machine_3f2a...
        {"speed": 42.5, "message": "running"}

    Returns:
        {"success": true, "timestamp": 1700000000}
    """
    ack = telemetry.ingest(db, identity.machine_id, reading.speed, reading.message)
    return {"success": ack.success, "timestamp": ack.timestamp}


# ==========================================================
# 📌 Single Machine
# ==========================================================

@router.get("/{machine_id}", response_model=machine_schema.Machine_get)
def get_machine(
    machine_id: int,
    identity: Identity = Depends(require(Capability.READ_FLEET)),
    db: Session = Depends(get_DB)
):
    return machine_service.get_machine(db, machine_id)


@router.put("/{machine_id}", response_model=machine_schema.Machine_admin_get)
def update_machine(
    machine_id: int,
    changes: Optional[machine_schema.Machine_update] = Body(None),
    identity: Identity = Depends(require(Capability.ADMIN_ONLY)),
    db: Session = Depends(get_DB)
):
    """
    Partial update. Only the fields present in the body are written.

    Example Requests:
        # Move a machine
        PUT /api/machines/3
        {"location": "Hall B"}

        # Revoke the current API key and issue a new one
        PUT /api/machines/3
        {"regenerate_api_key": true}

    Raises:
        400: No fields to update / invalid value
        404: Machine not found
        409: Name or code already used by another machine
    """
    return machine_service.update_machine(db, machine_id, changes)


# ==========================================================
# 📌 Maintenance Comments
# ==========================================================

@router.get("/{machine_id}/comments", response_model=comment_schema.Comment_list_response)
def list_comments(
    machine_id: int,
    identity: Identity = Depends(require(Capability.READ_FLEET)),
    db: Session = Depends(get_DB)
):
    comments = comment_service.list_comments(db, machine_id)
    return {
        "comments": [comment_schema.Comment_get.model_validate(c) for c in comments]
    }


@router.post("/{machine_id}/comments", response_model=comment_schema.Comment_get, status_code=201)
def add_comment(
    machine_id: int,
    comment: comment_schema.Comment_create,
    identity: Identity = Depends(require(Capability.WRITE_COMMENT)),
    db: Session = Depends(get_DB)
):
    """
    Add a maintenance note. The author is taken from the token: "admin" for
    the admin token, the username otherwise.

    Raises:
        400: Unknown priority
        404: Machine not found
    """
    return comment_service.add_comment(db, machine_id, comment_author(identity), comment)


# ==========================================================
# 📌 Speed History
# ==========================================================

@router.get("/{machine_id}/history", response_model=history_schema.History_response)
def get_history(
    machine_id: int,
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of readings (default 100)"),
    identity: Identity = Depends(require(Capability.READ_FLEET)),
    db: Session = Depends(get_DB)
):
    """
    Recorded speed readings, newest first.

    Example Request:
        GET /api/machines/3/history?limit=1

    Returns:
        {"history": [{"speed": 42.5, "message": null, "timestamp": 1700000000}]}
    """
    records = telemetry.get_history(db, machine_id, limit)
    return {
        "history": [history_schema.Speed_history_get.model_validate(r) for r in records]
    }

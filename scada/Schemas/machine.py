# scada/Schemas/machine.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Machine_base(BaseModel):
    """
    Registry fields shared by machine create and read schemas.
    """
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., min_length=1, max_length=200, description="Unique display name (e.g., 'Line1')")
    code: str = Field(..., min_length=1, max_length=100, description="Unique short code (e.g., 'L1')")
    location: Optional[str] = Field(None, max_length=200)
    machine_type: Optional[str] = Field(None, max_length=100)


class Machine_create(Machine_base):
    """
    Schema for registering a machine. The API key is generated server-side.
    """
    pass


class Machine_created(Machine_base):
    """
    Response to a successful registration - the only read that returns the
    freshly generated api_key besides an admin update.
    """
    id: int
    api_key: str


class Machine_update(BaseModel):
    """
    Partial update of a machine. Every field is optional; omitted or null
    fields are left untouched.

    regenerate_api_key is a command rather than a value: when true the
    machine receives a new api_key and the old one stops working immediately.
    Unknown fields (api_key, id, current_speed, is_online, ...) are rejected.
    is_online is live state owned by telemetry ingestion.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, max_length=200)
    code: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    machine_type: Optional[str] = Field(None, max_length=100)
    regenerate_api_key: Optional[bool] = None


class Machine_get(Machine_base):
    """
    Machine with its live state, as shown to operators. Never includes api_key.
    """
    id: int
    current_speed: float
    status_message: str
    is_online: bool
    last_update: int


class Machine_admin_get(Machine_get):
    """Machine as returned to the admin after an update, credential included."""
    api_key: str


class Machine_list_response(BaseModel):
    machines: List[Machine_get]


# ============================================================
# Telemetry
# ============================================================

class Speed_update_request(BaseModel):
    """
    Body of a machine's telemetry report.

    The body carries no machine identifier: the target machine is
    the one owning the API key in the Authorization header. Extra fields are
    rejected so a client cannot believe it addressed another machine.
    """
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    speed: float = Field(..., strict=True, description="Current throughput reading")
    message: Optional[str] = Field(None, max_length=500, description="Optional status text")


class Update_response(BaseModel):
    success: bool
    timestamp: int

# scada/Schemas/user.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class User_create(BaseModel):
    """
    Schema for creating an operator. role is validated by the user service
    (admin / manager / technician) so that a bad value is reported as a
    400 with the same message as on update.
    """
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=256)
    role: str = Field(..., description="admin | manager | technician")


class User_update(BaseModel):
    """
    Partial update of an operator. Omitted or null fields are untouched.
    regenerate_token=true issues a new bearer token and revokes the old one.
    """
    model_config = ConfigDict(extra="forbid")

    password: Optional[str] = Field(None, max_length=256)
    role: Optional[str] = None
    is_active: Optional[bool] = None
    regenerate_token: Optional[bool] = None


class User_get(BaseModel):
    """User as shown to the admin. The password is never returned."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
    token: str
    is_active: bool


class User_list_response(BaseModel):
    users: List[User_get]


# ============================================================
# Login
# ============================================================

class Login_request(BaseModel):
    username: str
    password: str


class Login_response(BaseModel):
    token: str
    role: str
    username: str

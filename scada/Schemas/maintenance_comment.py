# scada/Schemas/maintenance_comment.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Comment_create(BaseModel):
    comment: str = Field(..., min_length=1, description="Maintenance note text")
    priority: Optional[str] = Field(None, description="low | normal | high | critical (default: normal)")


class Comment_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    machine_id: int
    comment: str
    priority: str
    username: str
    created_at: int


class Comment_list_response(BaseModel):
    comments: List[Comment_get]

# scada/Schemas/speed_history.py

from pydantic import BaseModel, ConfigDict
from typing import List, Optional


class Speed_history_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    speed: float
    message: Optional[str] = None
    timestamp: int


class History_response(BaseModel):
    """Readings newest first."""
    history: List[Speed_history_get]

# app/schemas/connection.py
from datetime import datetime
from typing import Optional

from app.schemas.base import CamelModel


class ConnectionCreate(CamelModel):
    requester_id: Optional[int] = None
    receiver_id: Optional[int] = None


class ConnectionStatusUpdate(CamelModel):
    status: Optional[str] = None


class ConnectionResponse(CamelModel):
    id: int
    requester_id: int
    receiver_id: int
    status: str
    created_at: datetime
    updated_at: datetime


class ConnectionDeleteResponse(CamelModel):
    message: str
    connection: ConnectionResponse

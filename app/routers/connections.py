# app/routers/connections.py
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.limiter import limiter
from app.schemas.connection import (
    ConnectionCreate,
    ConnectionDeleteResponse,
    ConnectionResponse,
    ConnectionStatusUpdate,
)
from app.services.connection import ConnectionService

router = APIRouter(
    prefix="/connections",
    tags=["Connections"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Union[ConnectionResponse, List[ConnectionResponse]])
def get_connections(
    connection_id: Optional[int] = Query(None, alias="id"),
    user_id: Optional[int] = Query(None, alias="userId"),
    requester_id: Optional[int] = Query(None, alias="requesterId"),
    receiver_id: Optional[int] = Query(None, alias="receiverId"),
    status: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """
    Get a single connection by `id`, or list connections newest first.
    `userId` matches connections where the user is on either side.
    """
    service = ConnectionService(db)
    if connection_id is not None:
        return service.get_connection(connection_id)
    return service.list_connections(
        user_id=user_id,
        requester_id=requester_id,
        receiver_id=receiver_id,
        status=status,
        limit=limit,
        offset=offset,
    )


@router.get("/{connection_id}", response_model=ConnectionResponse)
def get_connection(connection_id: int, db: Session = Depends(get_db)):
    return ConnectionService(db).get_connection(connection_id)


@router.post("", response_model=ConnectionResponse, status_code=201)
@limiter.limit(settings.rate_limit_write)
def request_connection(
    request: Request,
    connection_in: ConnectionCreate,
    db: Session = Depends(get_db),
):
    """Send a connection request. The new connection starts as PENDING."""
    service = ConnectionService(db)
    return service.request_connection(
        connection_in.requester_id, connection_in.receiver_id
    )


@router.patch("/{connection_id}", response_model=ConnectionResponse)
def update_connection_status(
    connection_id: int,
    status_in: ConnectionStatusUpdate,
    db: Session = Depends(get_db),
):
    """Set the status of a connection (PENDING, ACCEPTED or REJECTED)."""
    return ConnectionService(db).update_connection_status(
        connection_id, status_in.status
    )


@router.put("", response_model=ConnectionResponse)
def update_connection_status_by_query(
    status_in: ConnectionStatusUpdate,
    connection_id: int = Query(..., alias="id"),
    db: Session = Depends(get_db),
):
    """Same as PATCH /connections/{id}, addressed by query string."""
    return ConnectionService(db).update_connection_status(
        connection_id, status_in.status
    )


@router.delete("", response_model=ConnectionDeleteResponse)
def delete_connection(
    connection_id: int = Query(..., alias="id"),
    db: Session = Depends(get_db),
):
    connection = ConnectionService(db).delete_connection(connection_id)
    return {"message": "Connection deleted successfully", "connection": connection}

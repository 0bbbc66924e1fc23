"""
Notification inbox endpoints (polled by the client)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ems.core.deps import get_db, get_current_user
from ems.models.user_account import UserAccount
from ems.schemas.notification import (
    NotificationOut,
    NotificationListResponse,
    UnreadCountOut,
    MarkAllReadOut,
)
from ems.services.notification_service import (
    list_notifications,
    count_unread,
    mark_read,
    mark_all_read,
)

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications_endpoint(
    unread_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """The caller's notifications, newest first"""
    items = list_notifications(db, current_user.id, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        items=[NotificationOut.model_validate(item) for item in items],
        total=len(items),
    )


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count_endpoint(
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    return UnreadCountOut(unread=count_unread(db, current_user.id))


@router.post("/read-all", response_model=MarkAllReadOut)
async def mark_all_read_endpoint(
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    return MarkAllReadOut(updated=mark_all_read(db, current_user.id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """Mark one of the caller's notifications as read"""
    return mark_read(db, notification_id, current_user.id)

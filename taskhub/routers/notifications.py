from typing import List

from fastapi import APIRouter, Depends

from ..core.auth import CurrentUser, get_current_user
from ..schemas.activity import NotificationResponse
from ..services import get_notification_sink
from ..services.sinks import NotificationSink

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    current_user: CurrentUser = Depends(get_current_user),
    notifications: NotificationSink = Depends(get_notification_sink),
):
    """The caller's notifications, newest first"""
    return [
        NotificationResponse.from_notification(n)
        for n in notifications.list_for_user(current_user.user_id)
    ]

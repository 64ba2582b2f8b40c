"""On-demand push notification route."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_push_gateway, require_allowed_origin
from app.api.schemas.notifications import NotificationResult, PushNotificationRequest
from app.services.notification_dispatcher import send_push_notification
from app.services.push_gateway import PushGateway


router = APIRouter()


@router.post(
    "/sendPushNotifications",
    response_model=NotificationResult,
    response_model_exclude_none=True,
    dependencies=[Depends(require_allowed_origin)],
    responses={500: {"model": NotificationResult}},
    tags=["notifications"],
)
def send_push_notifications(
    payload: PushNotificationRequest,
    gateway: PushGateway = Depends(get_push_gateway),
):
    result = send_push_notification(
        gateway,
        title=payload.title,
        body=payload.body,
        tokens=payload.tokens,
        icon=payload.icon,
    )
    if result.success:
        return result
    return JSONResponse(status_code=500, content=result.model_dump(exclude_none=True))

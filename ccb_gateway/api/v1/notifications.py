"""In-app notification log and email notification endpoints"""

import uuid
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ccb_gateway.api.v1.schemas import (
    EmailNotificationRequest,
    MessageResponse,
    NotificationCreateRequest,
    NotificationListResponse,
    NotificationResponse,
    NotificationSchema,
)
from ccb_gateway.api.dependencies import get_mail_client, get_request_id
from ccb_gateway.domain.exceptions import UnexpectedError, UserNotFoundError
from ccb_gateway.infrastructure.clients.mail import MailClient
from ccb_gateway.infrastructure.database.repositories import NotificationRepository, UserRepository
from ccb_gateway.infrastructure.database.session import get_db, unit_of_work
from ccb_gateway.infrastructure.observability.logging import log_operation
from ccb_gateway.infrastructure.observability.metrics import record_operation

router = APIRouter()


@router.post("/notifications", response_model=NotificationResponse)
def add_notification(body: NotificationCreateRequest, request: Request, db: Session = Depends(get_db)):
    with unit_of_work(db, "add_notification"):
        user = UserRepository(db).get_by_id(body.user_id)
        if user is None:
            raise UserNotFoundError(str(body.user_id))
        notification = NotificationRepository(db).append(user, body.message)

    log_operation(get_request_id(request), "add_notification", user.id, notification_id=notification.id)
    return NotificationResponse(
        message="Notification added successfully",
        notification=NotificationSchema.model_validate(notification),
    )


@router.get("/users/{user_id}/notifications", response_model=NotificationListResponse)
def list_notifications(user_id: uuid.UUID, db: Session = Depends(get_db)):
    """Full notification log, oldest first, unfiltered"""
    user = UserRepository(db).get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))
    return NotificationListResponse(notifications=[NotificationSchema.model_validate(n) for n in user.notifications])


@router.post("/notifications/email", response_model=MessageResponse)
async def send_email_notification(
    body: EmailNotificationRequest,
    request: Request,
    mail_client: MailClient = Depends(get_mail_client),
):
    """Send a plain-text email; the relay's refusal is reported as a server error"""
    delivered = await mail_client.send(body.email, body.subject, body.message)
    record_operation("send_email_notification", success=delivered)
    if not delivered:
        raise UnexpectedError("Mail relay did not accept the notification")

    log_operation(get_request_id(request), "send_email_notification")
    return MessageResponse(message="Notification sent successfully")

"""Email module for post-payment notifications via Gmail API."""

from .dispatcher import NotificationDispatcher
from .schemas import EmailRecipient, SendEmailRequest, SendEmailResponse
from .service import EmailService
from .templates import render_workshop_links


__all__ = [
    "EmailRecipient",
    "EmailService",
    "NotificationDispatcher",
    "SendEmailRequest",
    "SendEmailResponse",
    "render_workshop_links",
]

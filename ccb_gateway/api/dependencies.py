"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from ccb_gateway.infrastructure.clients.mail import MailClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_mail_client() -> MailClient:
    """Provide mail relay client instance"""
    return MailClient()

"""Email bodies for registration, account opening and password reset"""

from html import escape
from typing import NamedTuple
from ccb_gateway.config import settings


class EmailContent(NamedTuple):
    subject: str
    text: str
    html: str


def otp_email(first_name: str, otp: str) -> EmailContent:
    support = settings.support_email
    safe_support = escape(support)
    text = (
        f"Dear {first_name},\n\n"
        "We are delighted to assist you in completing your account registration with Central City Bank.\n\n"
        "Please find below your One-Time Password (OTP) required for account registration:\n"
        f"OTP: {otp}\n"
        f"This OTP is valid for {settings.otp_ttl_minutes} minutes. "
        "Please use it promptly to finalize your registration process.\n\n"
        f"If you encounter any difficulties, contact our support team at {support}.\n\n"
        "The Central City Bank Team"
    )
    html = (
        f"<p>Dear {escape(first_name)},</p>"
        "<p>We are delighted to assist you in completing your account registration with Central City Bank.</p>"
        "<p>Please find below your One-Time Password (OTP) required for account registration:</p>"
        f"<p><strong>OTP: {escape(otp)}</strong></p>"
        f"<p>This OTP is valid for {settings.otp_ttl_minutes} minutes. "
        "Please use it promptly to finalize your registration process.</p>"
        f'<p>If you encounter any difficulties, contact our support team at <a href="mailto:{safe_support}">{safe_support}</a>.</p>'
        "<p>The Central City Bank Team</p>"
    )
    return EmailContent("OTP for Account Registration", text, html)


def account_number_email(first_name: str, last_name: str, account_number: str) -> EmailContent:
    support = settings.support_email
    safe_support = escape(support)
    text = (
        f"Dear {first_name} {last_name},\n\n"
        "Your account has been successfully created.\n"
        f"Account Number: {account_number}\n\n"
        "Please keep this information secure and do not share it with anyone.\n\n"
        "Best regards,\nCentral City Bank"
    )
    html = (
        f"<p>Dear {escape(first_name)} {escape(last_name)},</p>"
        "<p>Your account has been successfully created. Your account details are provided below:</p>"
        f"<p><strong>Account Number:</strong> {escape(account_number)}</p>"
        "<p>Please keep this information secure and do not share it with anyone. "
        f'If you need assistance, contact <a href="mailto:{safe_support}">{safe_support}</a>.</p>'
        "<p>Best regards,<br/>Central City Bank</p>"
    )
    return EmailContent("Your New Account Information", text, html)


def password_reset_email(token: str) -> EmailContent:
    reset_url = f"{settings.frontend_url}/password-reset/{token}"
    text = f"You requested a password reset. Click the link below to reset your password:\n\n{reset_url}"
    html = (
        "<p>You requested a password reset. Click the link below to reset your password:</p>"
        f'<p><a href="{escape(reset_url)}">Reset Password</a></p>'
    )
    return EmailContent("Password Reset Request", text, html)

"""User registration, verification, login and password reset endpoints"""

import uuid
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from ccb_gateway.api.v1.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    UserListResponse,
    UserResponse,
    UserSchema,
    VerifyOtpRequest,
)
from ccb_gateway.api.dependencies import get_mail_client, get_request_id
from ccb_gateway.config import settings
from ccb_gateway.domain.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidCredentialError,
    UserNotFoundError,
)
from ccb_gateway.domain.identity import (
    expires_at,
    generate_account_number,
    generate_otp,
    generate_reset_token,
    verify_otp,
)
from ccb_gateway.infrastructure.clients.mail import MailClient
from ccb_gateway.infrastructure.clients.templates import (
    account_number_email,
    otp_email,
    password_reset_email,
)
from ccb_gateway.infrastructure.database.repositories import AccountRepository, UserRepository
from ccb_gateway.infrastructure.database.session import get_db, unit_of_work
from ccb_gateway.infrastructure.observability.logging import log_operation
from ccb_gateway.infrastructure.observability.metrics import record_operation
from ccb_gateway.infrastructure.security import create_access_token, hash_secret, verify_secret
from ccb_gateway.utils.date_utils import utcnow

router = APIRouter()

DEFAULT_ACCOUNT_TYPE = "default"
DEFAULT_ACCOUNT_CURRENCY = "USD"


@router.post("/users/register", response_model=UserResponse, status_code=201)
def register_user(
    body: RegisterRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    mail_client: MailClient = Depends(get_mail_client),
):
    """
    Register a user with an initial account and email a one-time password.

    Flow:
    1. Reject duplicate email
    2. Hash password and PIN, issue OTP
    3. Open the first account under a fresh account number
    4. Send the OTP by email after the response
    """
    users = UserRepository(db)

    with unit_of_work(db, "register"):
        if users.get_by_email(body.email) is not None:
            raise EmailAlreadyRegisteredError(body.email)

        otp = generate_otp()
        user = users.create_user(
            first_name=body.first_name,
            middle_name=body.middle_name,
            last_name=body.last_name,
            email=body.email,
            phone_number=body.phone_number,
            gender=body.gender,
            date_of_birth=body.date_of_birth,
            account_type=body.account_type,
            address=body.address,
            postal_code=body.postal_code,
            state=body.state,
            country=body.country,
            currency=body.currency.upper(),
            password_hash=hash_secret(body.password),
            pin_hash=hash_secret(body.account_pin),
            otp=otp,
            otp_expires=expires_at(utcnow(), settings.otp_ttl_minutes),
        )
        account_number = generate_account_number(users.account_number_exists)
        users.open_account(user, account_number, body.account_type, body.currency.upper())

    email = otp_email(user.first_name, otp)
    background_tasks.add_task(mail_client.send, user.email, email.subject, email.text, email.html)

    log_operation(get_request_id(request), "register", user.id)
    return UserResponse(message="User registered successfully", user=UserSchema.model_validate(user))


@router.post("/users/verify-otp", response_model=UserResponse, status_code=201)
def verify_user_otp(
    body: VerifyOtpRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    mail_client: MailClient = Depends(get_mail_client),
):
    """Check the OTP, open a default account and email its number"""
    users = UserRepository(db)

    with unit_of_work(db, "verify_otp"):
        user = users.get_by_email(body.email)
        if user is None:
            raise InvalidCredentialError("Invalid email or OTP")

        verify_otp(user.otp, user.otp_expires, body.otp, utcnow())

        account_number = generate_account_number(users.account_number_exists)
        users.open_account(user, account_number, DEFAULT_ACCOUNT_TYPE, DEFAULT_ACCOUNT_CURRENCY)
        user.otp = None
        user.otp_expires = None

    email = account_number_email(user.first_name, user.last_name, account_number)
    background_tasks.add_task(mail_client.send, user.email, email.subject, email.text, email.html)

    log_operation(get_request_id(request), "verify_otp", user.id)
    return UserResponse(
        message="OTP verified, account number sent to your email successfully",
        user=UserSchema.model_validate(user),
    )


@router.post("/users/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate by account number and password, issue a session token"""
    account = AccountRepository(db).get_by_number(body.account_number)
    if account is None or not verify_secret(body.password, account.user.password_hash):
        record_operation("login", success=False)
        raise InvalidCredentialError("Invalid account number or password")

    user = account.user
    token = create_access_token(user.id, account.account_number)

    record_operation("login")
    log_operation(get_request_id(request), "login", user.id)
    return LoginResponse(message="Login successful", token=token, user=UserSchema.model_validate(user))


@router.post("/users/logout", response_model=MessageResponse)
def logout():
    """Tokens are not tracked server-side; clients discard them"""
    return MessageResponse(message="Logout successful")


@router.get("/users", response_model=UserListResponse)
def list_users(db: Session = Depends(get_db)):
    users = UserRepository(db).list_all()
    return UserListResponse(
        message="Users retrieved successfully",
        users=[UserSchema.model_validate(u) for u in users],
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: uuid.UUID, request: Request, db: Session = Depends(get_db)):
    """Delete a user and everything the user owns"""
    users = UserRepository(db)

    with unit_of_work(db, "delete_user"):
        user = users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        users.delete(user)

    log_operation(get_request_id(request), "delete_user", user_id)
    return MessageResponse(message="User deleted successfully")


@router.post("/users/password-reset/request", response_model=MessageResponse)
def request_password_reset(
    body: PasswordResetRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    mail_client: MailClient = Depends(get_mail_client),
):
    users = UserRepository(db)

    with unit_of_work(db, "password_reset_request"):
        user = users.get_by_email(body.email)
        if user is None:
            raise UserNotFoundError(body.email)

        token = generate_reset_token()
        user.password_reset_token = token
        user.password_reset_expires = expires_at(utcnow(), settings.password_reset_ttl_minutes)

    email = password_reset_email(token)
    background_tasks.add_task(mail_client.send, user.email, email.subject, email.text, email.html)

    log_operation(get_request_id(request), "password_reset_request", user.id)
    return MessageResponse(message="Password reset email sent")


@router.post("/users/password-reset/{token}", response_model=MessageResponse)
def reset_password(token: str, body: PasswordResetConfirm, request: Request, db: Session = Depends(get_db)):
    users = UserRepository(db)

    with unit_of_work(db, "password_reset"):
        user = users.get_by_reset_token(token, utcnow())
        if user is None:
            raise InvalidCredentialError("Password reset token is invalid or has expired")

        user.password_hash = hash_secret(body.new_password)
        user.password_reset_token = None
        user.password_reset_expires = None

    log_operation(get_request_id(request), "password_reset", user.id)
    return MessageResponse(message="Password has been reset successfully")

"""
Account lifecycle outside the entitlement core: registration, login,
admin listing, deletion and admin bootstrap.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

import pydantic
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rishta.core.exceptions import AuthError, NotFoundError, ValidationError, InvalidTierError
from rishta.core.packages import DEFAULT_TIER, parse_tier
from rishta.models.account import Account, Role
from rishta.schemas.account import RegistrationData
from rishta.services.storage import delete_assets
from rishta.utils.auth import hash_password, verify_password
from rishta.utils.disposable_email import is_disposable_email

logger = logging.getLogger(__name__)

DISPOSABLE_EMAIL_MESSAGE = (
    "Temporary or disposable email addresses are not allowed. "
    "Please use a permanent email address to register."
)

REGISTRATION_RANGES = ("day", "week", "month", "all")
REGISTRATION_STATUSES = ("pending", "approved", "all")


def _format_validation_error(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid registration data"


def parse_registration(raw: dict) -> RegistrationData:
    """Validate raw form fields; empty strings count as missing."""
    cleaned = {key: value for key, value in raw.items() if value not in (None, "")}
    try:
        return RegistrationData.model_validate(cleaned)
    except pydantic.ValidationError as e:
        raise ValidationError(_format_validation_error(e)) from e


def get_account_by_email(db: Session, email: str) -> Optional[Account]:
    return db.query(Account).filter(Account.email.ilike(email.strip().lower())).first()


def ensure_email_available(db: Session, email: str) -> str:
    """Normalized email if it may register; ValidationError otherwise."""
    email = str(email).strip().lower()
    if is_disposable_email(email):
        raise ValidationError(DISPOSABLE_EMAIL_MESSAGE)
    if get_account_by_email(db, email):
        raise ValidationError("Email already registered")
    return email


def register_account(
    db: Session,
    data: RegistrationData,
    images: Optional[List[str]] = None,
    payment_screenshot: Optional[str] = None,
) -> Account:
    """Create a pending account. Approval later assigns credits and expiry."""
    email = ensure_email_available(db, data.email)

    try:
        package = parse_tier(data.selected_package) if data.selected_package else DEFAULT_TIER
    except InvalidTierError as e:
        raise ValidationError(e.message) from e

    images = list(images or [])
    profile = data.model_dump(exclude={"email", "password", "selected_package"}, exclude_none=True)

    account = Account(
        **profile,
        email=email,
        hashed_password=hash_password(data.password),
        role=Role.USER,
        package=package,
        payment_screenshot=payment_screenshot,
        images=images,
        main_image=images[0] if images else None,
        credits=0,
        viewed_count=0,
        is_approved=False,
        is_active=True,
    )

    try:
        db.add(account)
        db.commit()
    except IntegrityError:
        # Same email registered concurrently
        db.rollback()
        raise ValidationError("Email already registered")

    db.refresh(account)
    logger.info("Registered account %s (%s), requested package %s", account.id, account.email, package.value)
    return account


def authenticate(db: Session, email: str, password: str) -> Account:
    account = get_account_by_email(db, email)
    if not account or not verify_password(password, account.hashed_password):
        logger.info("Failed login for %s", email)
        raise AuthError("Invalid credentials")
    if not account.is_active:
        raise AuthError("Account is disabled")
    return account


def get_account(db: Session, account_id: int) -> Account:
    account = db.query(Account).filter(Account.id == account_id).first()
    if not account:
        raise NotFoundError("User not found")
    return account


def list_registrations(
    db: Session,
    range_: str = "all",
    status: str = "all",
    now: Optional[datetime] = None,
) -> List[Account]:
    """Admin registrations view, newest first, filtered by signup window and approval status."""
    if range_ not in REGISTRATION_RANGES:
        raise ValidationError(f"range must be one of: {', '.join(REGISTRATION_RANGES)}")
    if status not in REGISTRATION_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(REGISTRATION_STATUSES)}")

    now = now or datetime.utcnow()
    query = db.query(Account).filter(Account.role == Role.USER)

    if range_ == "day":
        query = query.filter(Account.created_at >= now.replace(hour=0, minute=0, second=0, microsecond=0))
    elif range_ == "week":
        query = query.filter(Account.created_at >= now - timedelta(days=7))
    elif range_ == "month":
        query = query.filter(Account.created_at >= now - timedelta(days=30))

    if status == "pending":
        query = query.filter(Account.is_approved.is_(False))
    elif status == "approved":
        query = query.filter(Account.is_approved.is_(True))

    return query.order_by(Account.created_at.desc(), Account.id.desc()).all()


def delete_account(db: Session, account_id: int) -> None:
    """Delete an account together with its listing and every unlock row touching either."""
    account = get_account(db, account_id)
    assets = list(account.images or []) + [account.payment_screenshot]

    try:
        db.delete(account)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to delete account %s", account_id)
        raise

    delete_assets(assets)

    logger.info("Deleted account %s and its listing", account_id)


def ensure_admin_account(db: Session, email: str, password: str, name: str = "System Admin") -> Account:
    """Create the configured admin, or promote/refresh an existing account with that email."""
    email = email.strip().lower()
    account = get_account_by_email(db, email)

    if account:
        account.role = Role.ADMIN
        account.is_active = True
        if not verify_password(password, account.hashed_password):
            account.hashed_password = hash_password(password)
        db.commit()
        db.refresh(account)
        logger.info("Admin account %s (%s) verified", account.id, email)
        return account

    account = Account(
        name=name,
        email=email,
        phone="",
        hashed_password=hash_password(password),
        role=Role.ADMIN,
        is_approved=False,
        is_active=True,
        credits=0,
        images=[],
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Created admin account %s (%s)", account.id, email)
    return account

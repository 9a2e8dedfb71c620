"""
Entitlement engine: package grants, profile unlocks and privacy redaction.

Credits are only ever spent through a conditional UPDATE
(``credits > 0`` at write time) and the unlock set is guarded by a unique
constraint, so two concurrent unlocks for the same account can neither
overdraw credits nor charge the same listing twice.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional, Union

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from rishta.core.exceptions import InsufficientCreditsError, NotFoundError, PackageExpiredError, ValidationError
from rishta.core.packages import Tier, get_package, is_unlimited, parse_tier
from rishta.models.account import Account, Gender, Role
from rishta.models.listing import Listing
from rishta.models.profile_unlock import ProfileUnlock

logger = logging.getLogger(__name__)

# Stripped from a listing until the viewer unlocks it
SENSITIVE_FIELDS = ("phone", "father_name", "family_details", "payment_screenshot")


@dataclass(frozen=True)
class Viewer:
    """Who is reading: an authenticated account or an anonymous visitor."""
    account_id: Optional[int] = None
    role: Optional[Role] = None
    gender: Optional[Gender] = None
    tier: Optional[Tier] = None
    unlocked: FrozenSet[int] = field(default_factory=frozenset)
    credits: Optional[int] = None
    package_expiry: Optional[datetime] = None
    is_approved: bool = False

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls()

    @classmethod
    def from_account(cls, account: Account) -> "Viewer":
        return cls(
            account_id=account.id,
            role=account.role,
            gender=account.gender,
            tier=account.package,
            unlocked=frozenset(account.unlocked_listing_ids),
            credits=account.credits,
            package_expiry=account.package_expiry,
            is_approved=bool(account.is_approved),
        )

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if not self.package_expiry:
            return False
        return (now or datetime.utcnow()) > self.package_expiry

    def has_unlimited_access(self) -> bool:
        # A requested tier means nothing until an admin approves it. Expiry is
        # enforced when unlocking, not when reading.
        return self.is_approved and is_unlimited(self.tier)


@dataclass
class PackageGrant:
    tier: Tier
    credits: int
    expiry: datetime


@dataclass
class UnlockResult:
    listing_id: int
    credits: int
    already_unlocked: bool = False
    message: str = "Profile Unlocked!"

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "profile_id": self.listing_id,
            "credits": self.credits,
            "already_unlocked": self.already_unlocked,
        }


def assign_package(account: Account, tier: Union[str, Tier], approved_at: datetime) -> PackageGrant:
    """Apply a tier's credit allotment and validity window to an account."""
    tier = parse_tier(tier)
    package = get_package(tier)
    expiry = approved_at + relativedelta(months=package["duration_months"])

    account.package = tier
    account.credits = package["credits"]
    account.package_expiry = expiry
    account.is_approved = True

    return PackageGrant(tier=tier, credits=package["credits"], expiry=expiry)


def _already_unlocked(db: Session, account_id: int, listing_id: int) -> bool:
    return db.query(ProfileUnlock.id).filter(
        ProfileUnlock.account_id == account_id,
        ProfileUnlock.listing_id == listing_id
    ).first() is not None


def _already_unlocked_result(db: Session, account: Account, listing_id: int) -> UnlockResult:
    db.refresh(account)
    return UnlockResult(
        listing_id=listing_id,
        credits=account.credits,
        already_unlocked=True,
        message="Already unlocked",
    )


def unlock(db: Session, account: Account, listing_id: int, now: Optional[datetime] = None) -> UnlockResult:
    """
    Reveal a listing's contact details to ``account``.

    Order of checks:
      1. already unlocked -> success, nothing charged
      2. listing must exist and belong to someone else
      3. expired package -> PackageExpiredError (admins exempt)
      4. unlimited tier or admin -> recorded without spending a credit
      5. otherwise spend one credit, InsufficientCreditsError if none left
    """
    now = now or datetime.utcnow()

    if _already_unlocked(db, account.id, listing_id):
        return _already_unlocked_result(db, account, listing_id)

    listing = db.query(Listing).filter(Listing.id == listing_id).first()
    if not listing:
        raise NotFoundError("Profile not found")
    if listing.account_id == account.id:
        raise ValidationError("You cannot unlock your own profile")

    if not account.is_admin and account.package_expiry and now > account.package_expiry:
        logger.info("Unlock refused for account %s: package expired at %s", account.id, account.package_expiry)
        raise PackageExpiredError()

    bypass_credits = account.is_admin or (account.is_approved and is_unlimited(account.package))

    try:
        if bypass_credits:
            credits_spent = 0
            db.query(Account).filter(Account.id == account.id).update(
                {Account.viewed_count: Account.viewed_count + 1},
                synchronize_session=False
            )
        else:
            # Conditional write: only succeeds while a credit is left at commit time
            updated = db.query(Account).filter(
                Account.id == account.id,
                Account.credits > 0
            ).update(
                {
                    Account.credits: Account.credits - 1,
                    Account.viewed_count: Account.viewed_count + 1,
                },
                synchronize_session=False
            )
            if not updated:
                logger.info("Unlock refused for account %s: no credits left", account.id)
                raise InsufficientCreditsError()
            credits_spent = 1

        db.add(ProfileUnlock(
            account_id=account.id,
            listing_id=listing_id,
            credits_spent=credits_spent,
            unlocked_at=now,
        ))
        db.commit()
    except IntegrityError:
        # A concurrent request recorded the same unlock first; ours is rolled back uncharged
        db.rollback()
        logger.info("Concurrent unlock of listing %s by account %s resolved as already unlocked", listing_id, account.id)
        return _already_unlocked_result(db, account, listing_id)
    except Exception:
        db.rollback()
        raise

    db.refresh(account)
    logger.info(
        "Account %s unlocked listing %s (credits spent: %s, remaining: %s)",
        account.id, listing_id, credits_spent, account.credits
    )
    return UnlockResult(listing_id=listing_id, credits=account.credits)


def is_locked(listing_id: int, viewer: Viewer) -> bool:
    if viewer.is_admin or viewer.has_unlimited_access():
        return False
    return listing_id not in viewer.unlocked


def redact(listing: Union[Listing, dict], viewer: Viewer) -> dict:
    """Serialize a listing for ``viewer``, dropping contact fields while locked."""
    data = dict(listing) if isinstance(listing, dict) else listing.to_dict()
    locked = is_locked(data["id"], viewer)
    if locked:
        for field_name in SENSITIVE_FIELDS:
            data.pop(field_name, None)
    data["is_locked"] = locked
    return data


def match_query(db: Session, viewer: Viewer) -> Query:
    """
    Listings visible to ``viewer``: approved and active owners only, never the
    viewer's own listing. Authenticated non-admins see the opposite gender.
    """
    query = db.query(Listing).join(Account, Listing.account_id == Account.id).filter(
        Account.is_approved.is_(True),
        Account.is_active.is_(True)
    )

    if viewer.is_authenticated:
        query = query.filter(Listing.account_id != viewer.account_id)
        if not viewer.is_admin and viewer.gender is not None:
            query = query.filter(Listing.gender == Gender(viewer.gender).opposite)

    return query.order_by(Listing.created_at.desc(), Listing.id.desc())

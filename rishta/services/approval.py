"""
Admin approval: assigns a package and publishes the account's listing.

The approval flag, the package grant and the listing are committed together;
a failure at any point rolls all of them back.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rishta.core.exceptions import AlreadyApprovedError, NotFoundError
from rishta.core.packages import Tier, parse_tier
from rishta.models.account import Account
from rishta.models.listing import Listing
from rishta.services.entitlements import PackageGrant, assign_package

logger = logging.getLogger(__name__)


@dataclass
class ApprovedResult:
    account: Account
    listing: Listing
    grant: PackageGrant

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": f"User Approved as {self.grant.tier.value}! Profile is now live.",
            "limits": {
                "package": self.grant.tier.value,
                "credits": self.grant.credits,
                "expiry": self.grant.expiry.isoformat(),
            },
            "profile": self.listing.to_dict(),
        }


def build_listing(account: Account) -> Listing:
    """Denormalize the account's current profile into a new listing."""
    images = list(account.images or [])
    main_image = account.main_image or (images[0] if images else "")
    return Listing(
        account_id=account.id,
        title=f"{account.caste or 'New'} Rishta - {account.city or 'Pakistan'}",
        name=account.name,
        father_name=account.father_name,
        phone=account.phone,
        age=account.age,
        gender=account.gender,
        city=account.city,
        caste=account.caste,
        sect=account.sect,
        religion=account.religion,
        nationality=account.nationality or "Pakistani",
        height=account.height,
        weight=account.weight,
        marital_status=account.marital_status,
        education=account.education,
        profession=account.occupation,
        monthly_income=account.income,
        mother_tongue=account.mother_tongue,
        disability=account.disability,
        house_type=account.house_type,
        house_size=account.house_size,
        requirements=account.requirements,
        about=account.about,
        family_details=account.family_details,
        main_image=main_image,
        gallery=images,
    )


def approve(
    db: Session,
    account_id: int,
    tier: Union[str, Tier, None] = None,
    now: Optional[datetime] = None,
) -> ApprovedResult:
    """
    Approve a pending account on ``tier`` (defaults to the package chosen at
    registration). Raises NotFoundError, AlreadyApprovedError or InvalidTierError.
    """
    now = now or datetime.utcnow()

    # Row lock where the backend supports it (ignored by SQLite)
    account = db.query(Account).filter(Account.id == account_id).with_for_update().first()
    if not account:
        raise NotFoundError("User not found")
    if account.is_approved:
        db.rollback()
        raise AlreadyApprovedError("User is already approved")

    tier = parse_tier(tier if tier is not None else account.package)

    try:
        grant = assign_package(account, tier, now)
        listing = build_listing(account)
        db.add(listing)
        db.commit()
    except IntegrityError:
        # Unique account_id on listings: a concurrent approval won
        db.rollback()
        logger.warning("Approval of account %s lost a race with a concurrent approval", account_id)
        raise AlreadyApprovedError("User is already approved")
    except Exception:
        db.rollback()
        logger.exception("Approval of account %s failed; rolled back", account_id)
        raise

    db.refresh(account)
    db.refresh(listing)
    logger.info(
        "Approved account %s as %s (credits=%s, expiry=%s), listing %s created",
        account.id, grant.tier.value, grant.credits, grant.expiry.isoformat(), listing.id
    )
    return ApprovedResult(account=account, listing=listing, grant=grant)

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from rishta.db.session import get_db
from rishta.models.account import Account
from rishta.models.listing import Listing
from rishta.schemas.account import AccountResponse
from rishta.schemas.entitlement import ApproveRequest
from rishta.services import accounts as account_service
from rishta.services.approval import approve
from rishta.services.entitlements import Viewer
from rishta.dependencies.auth import require_admin

router = APIRouter()


def account_response(account: Account) -> dict:
    return {
        "id": account.id,
        "name": account.name,
        "father_name": account.father_name,
        "email": account.email,
        "phone": account.phone,
        "role": account.role.value,
        "age": account.age,
        "gender": account.gender.value,
        "city": account.city,
        "caste": account.caste,
        "sect": account.sect,
        "religion": account.religion,
        "nationality": account.nationality,
        "mother_tongue": account.mother_tongue,
        "height": account.height,
        "weight": account.weight,
        "marital_status": account.marital_status,
        "disability": account.disability,
        "education": account.education,
        "occupation": account.occupation,
        "income": account.income,
        "house_type": account.house_type,
        "house_size": account.house_size,
        "about": account.about,
        "requirements": account.requirements,
        "family_details": account.family_details,
        "package": account.package.value,
        "price": account.price,
        "payment_screenshot": account.payment_screenshot,
        "package_expiry": account.package_expiry.isoformat() if account.package_expiry else None,
        "credits": account.credits,
        "viewed_count": account.viewed_count,
        "images": list(account.images or []),
        "main_image": account.main_image,
        "is_approved": account.is_approved,
        "is_active": account.is_active,
        "created_at": account.created_at.isoformat() if account.created_at else None,
    }


@router.get("/registrations", response_model=List[AccountResponse])
def get_registrations(
    range_: str = Query("all", alias="range", description="day, week, month or all"),
    status: str = Query("all", description="pending, approved or all"),
    db: Session = Depends(get_db),
    admin: Viewer = Depends(require_admin),
):
    """Registrations newest first, filtered by signup window and approval status."""
    accounts = account_service.list_registrations(db, range_=range_, status=status)
    return [account_response(account) for account in accounts]


@router.get("/profiles")
def get_profiles(
    db: Session = Depends(get_db),
    admin: Viewer = Depends(require_admin),
):
    """Every published listing, unredacted."""
    listings = db.query(Listing).order_by(Listing.created_at.desc(), Listing.id.desc()).all()
    return {"success": True, "profiles": [listing.to_dict() for listing in listings]}


@router.put("/approve/{account_id}")
def approve_registration(
    account_id: int,
    payload: Optional[ApproveRequest] = Body(None),
    db: Session = Depends(get_db),
    admin: Viewer = Depends(require_admin),
):
    result = approve(db, account_id, payload.tier if payload else None)
    return result.to_dict()


@router.delete("/registration/{account_id}")
def delete_registration(
    account_id: int,
    db: Session = Depends(get_db),
    admin: Viewer = Depends(require_admin),
):
    account_service.delete_account(db, account_id)
    return {"success": True, "message": "User and profile deleted"}

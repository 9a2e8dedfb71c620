import logging
import re

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from rishta.db.session import get_db
from rishta.core.exceptions import NotFoundError
from rishta.models.account import Account
from rishta.models.listing import Listing
from rishta.schemas.account import LoginRequest, LoginResponse, MeResponse, RegisterResponse
from rishta.schemas.entitlement import UnlockRequest, UnlockResponse
from rishta.services import accounts as account_service
from rishta.services import entitlements
from rishta.services.entitlements import Viewer
from rishta.services.storage import delete_assets, save_registration_assets
from rishta.dependencies.auth import get_optional_viewer, require_account
from rishta.utils.auth import create_account_token

logger = logging.getLogger(__name__)

router = APIRouter()

# Form names used by the web and mobile clients that differ from our field names
FORM_FIELD_ALIASES = {
    "full_name": "name",
    "monthly_income": "income",
    "profession": "occupation",
    "package": "selected_package",
    "package_type": "selected_package",
}
IMAGE_FIELDS = ("images", "image_1", "image_2", "image_3", "image_4")
SCREENSHOT_FIELDS = ("payment_screenshot", "paymentScreenshot")


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def account_summary(account: Account) -> dict:
    return {
        "id": account.id,
        "name": account.name,
        "gender": account.gender.value,
        "package": account.package.value,
        "is_approved": account.is_approved,
        "credits": account.credits,
        "role": account.role.value,
        "package_expiry": account.package_expiry.isoformat() if account.package_expiry else None,
    }


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: Request, db: Session = Depends(get_db)):
    """
    Multipart registration: profile fields plus up to 4 ``images`` and one
    ``payment_screenshot``. Creates a pending account awaiting admin approval.
    """
    form = await request.form()

    fields = {}
    images = []
    payment_screenshot = None
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in IMAGE_FIELDS:
                images.append(value)
            elif key in SCREENSHOT_FIELDS:
                payment_screenshot = value
            continue
        name = _snake_case(key)
        fields[FORM_FIELD_ALIASES.get(name, name)] = value

    data = account_service.parse_registration(fields)
    # Reject duplicates before anything is written to disk
    account_service.ensure_email_available(db, data.email)

    image_urls, screenshot_url = await save_registration_assets(
        images, payment_screenshot, str(request.base_url)
    )
    try:
        account = account_service.register_account(db, data, image_urls, screenshot_url)
    except Exception:
        # No account refers to these files
        delete_assets(image_urls + [screenshot_url])
        raise

    return {
        "success": True,
        "message": "Registration successful! Pending admin approval.",
        "user_id": account.id,
    }


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    account = account_service.authenticate(db, credentials.email, credentials.password)
    token = create_account_token(account.id, account.role.value)
    logger.info("Account %s logged in", account.id)
    return {
        "success": True,
        "token": token,
        "token_type": "bearer",
        "user": account_summary(account),
    }


@router.get("/me", response_model=MeResponse)
def me(account: Account = Depends(require_account)):
    viewer = Viewer.from_account(account)
    return {
        **account_summary(account),
        "email": account.email,
        "viewed_count": account.viewed_count,
        "unlocked_profiles": sorted(viewer.unlocked),
        "is_expired": viewer.is_expired(),
    }


@router.get("/matches")
def get_matches(
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_optional_viewer),
):
    """
    Match listing. Anonymous visitors get every approved profile, locked.
    Signed-in users see the opposite gender, unlocked where they have access.
    """
    if viewer.is_authenticated and not viewer.is_admin and not viewer.is_approved:
        return {
            "success": True,
            "profiles": [],
            "credits": 0,
            "message": "Pending approval",
        }

    listings = entitlements.match_query(db, viewer).all()
    return {
        "success": True,
        "profiles": [entitlements.redact(listing, viewer) for listing in listings],
        "credits": viewer.credits,
    }


@router.get("/profiles/{listing_id}")
def get_profile(
    listing_id: int,
    db: Session = Depends(get_db),
    viewer: Viewer = Depends(get_optional_viewer),
):
    listing = db.query(Listing).join(Account, Listing.account_id == Account.id).filter(
        Listing.id == listing_id,
        Account.is_approved.is_(True),
        Account.is_active.is_(True)
    ).first()
    if not listing:
        raise NotFoundError("Profile not found")
    return {"success": True, "profile": entitlements.redact(listing, viewer)}


@router.post("/unlock-profile", response_model=UnlockResponse)
def unlock_profile(
    payload: UnlockRequest,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
):
    result = entitlements.unlock(db, account, payload.profile_id)
    return result.to_dict()

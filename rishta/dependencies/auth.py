"""
Access gate: resolves the bearer token on a request into a Viewer.

No Authorization header means an anonymous viewer. A header that is present
but malformed, invalid or expired is rejected rather than silently
downgraded to anonymous.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from rishta.core.exceptions import AuthError, ForbiddenError
from rishta.db.session import get_db
from rishta.models.account import Account
from rishta.services.entitlements import Viewer
from rishta.utils.auth import get_account_id_from_token

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str) -> str:
    if not authorization.startswith("Bearer "):
        raise AuthError("Invalid authorization header format. Expected: Bearer <token>")
    token = authorization[len("Bearer "):].strip()
    if not token or token in ("undefined", "null"):
        logger.info("Rejected empty bearer token value: %r", token)
        raise AuthError("Missing or invalid token")
    return token


def get_current_account(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[Account]:
    """The authenticated account, or None for anonymous requests."""
    if not authorization:
        return None

    token = _extract_bearer_token(authorization)
    account_id = get_account_id_from_token(token)
    if account_id is None:
        raise AuthError("Invalid or expired token")

    account = db.query(Account).filter(Account.id == account_id).first()
    if not account or not account.is_active:
        logger.info("Token for missing or inactive account %s rejected", account_id)
        raise AuthError("Account not found or disabled")
    return account


def require_account(account: Optional[Account] = Depends(get_current_account)) -> Account:
    if account is None:
        raise AuthError("Authentication required")
    return account


def get_optional_viewer(account: Optional[Account] = Depends(get_current_account)) -> Viewer:
    if account is None:
        return Viewer.anonymous()
    return Viewer.from_account(account)


def get_current_viewer(account: Account = Depends(require_account)) -> Viewer:
    return Viewer.from_account(account)


def require_admin(account: Account = Depends(require_account)) -> Viewer:
    if not account.is_admin:
        logger.warning("Account %s attempted an admin-only action", account.id)
        raise ForbiddenError()
    return Viewer.from_account(account)

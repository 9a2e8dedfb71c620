from rishta.models.account import Account, Role, Gender
from rishta.models.listing import Listing
from rishta.models.profile_unlock import ProfileUnlock

__all__ = [
    "Account",
    "Role",
    "Gender",
    "Listing",
    "ProfileUnlock",
]

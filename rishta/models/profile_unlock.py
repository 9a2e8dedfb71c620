"""
Model for the per-account set of unlocked listings.
One row per (account, listing); the unique constraint is what keeps a
listing from being charged twice under concurrent unlock requests.
"""
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from rishta.db.base import Base


class ProfileUnlock(Base):
    __tablename__ = "profile_unlocks"
    __table_args__ = (
        UniqueConstraint("account_id", "listing_id", name="uq_profile_unlocks_account_listing"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True)
    credits_spent = Column(Integer, default=0, nullable=False)  # 0 for unlimited tiers and admins
    unlocked_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    account = relationship("Account", back_populates="unlocks")
    listing = relationship("Listing", back_populates="unlocks")

    def __repr__(self):
        return f"<ProfileUnlock(account_id={self.account_id}, listing_id={self.listing_id}, credits_spent={self.credits_spent})>"

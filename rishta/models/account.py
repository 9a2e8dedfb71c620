from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Text, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum
from rishta.db.base import Base
from rishta.core.packages import Tier, DEFAULT_TIER


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"

    @property
    def opposite(self) -> "Gender":
        return Gender.FEMALE if self is Gender.MALE else Gender.MALE


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_accounts_credits_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Identity & credentials
    name = Column(String, nullable=False)
    father_name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)  # Stored lower-case
    phone = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(SQLEnum(Role, name="account_role"), default=Role.USER, nullable=False)

    # Bio details
    age = Column(Integer, nullable=True)
    gender = Column(SQLEnum(Gender, name="account_gender"), default=Gender.MALE, nullable=False, index=True)
    city = Column(String, nullable=True)
    caste = Column(String, nullable=True)
    sect = Column(String, nullable=True)
    religion = Column(String, default="Islam")
    nationality = Column(String, default="Pakistani")
    mother_tongue = Column(String, default="Urdu")

    # Physical & social
    height = Column(String, nullable=True)
    weight = Column(String, nullable=True)
    marital_status = Column(String, nullable=True)
    disability = Column(String, default="None / No")

    # Career & lifestyle
    education = Column(String, nullable=True)
    occupation = Column(String, nullable=True)
    income = Column(String, nullable=True)  # Frontend sends monthlyIncome
    house_type = Column(String, default="Own")
    house_size = Column(String, nullable=True)

    # Requirements & others
    about = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    family_details = Column(Text, nullable=True)

    # Package & payment (package is the requested tier until approval assigns one)
    package = Column(SQLEnum(Tier, name="package_tier"), default=DEFAULT_TIER, nullable=False)
    price = Column(String, nullable=True)
    payment_screenshot = Column(String, nullable=True)  # Public URL of the uploaded file

    # Subscription & credits
    package_expiry = Column(DateTime, nullable=True)
    credits = Column(Integer, default=0, nullable=False)
    viewed_count = Column(Integer, default=0, nullable=False)  # Profiles unlocked so far

    # Images
    images = Column(JSON, default=list, nullable=False)  # Up to 4 URLs
    main_image = Column(String, nullable=True)

    # System status
    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    listing = relationship(
        "Listing",
        back_populates="account",
        uselist=False,
        cascade="all, delete-orphan",
    )
    unlocks = relationship(
        "ProfileUnlock",
        back_populates="account",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def unlocked_listing_ids(self) -> set:
        return {unlock.listing_id for unlock in self.unlocks}

    def __repr__(self):
        return f"<Account(id={self.id}, email={self.email}, package={self.package}, approved={self.is_approved})>"

"""
Published projection of an approved account.

Fields are copied from the account at approval time; a listing exists only
while its owning account is approved.
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from rishta.db.base import Base
from rishta.models.account import Gender


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    title = Column(String, nullable=True)
    name = Column(String, nullable=False)
    father_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(SQLEnum(Gender, name="listing_gender"), nullable=False, index=True)
    city = Column(String, nullable=True)
    caste = Column(String, nullable=True)
    sect = Column(String, nullable=True)
    religion = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    height = Column(String, nullable=True)
    weight = Column(String, nullable=True)
    marital_status = Column(String, nullable=True)
    education = Column(String, nullable=True)
    profession = Column(String, nullable=True)
    monthly_income = Column(String, nullable=True)
    mother_tongue = Column(String, nullable=True)
    disability = Column(String, nullable=True)
    house_type = Column(String, nullable=True)
    house_size = Column(String, nullable=True)
    requirements = Column(Text, nullable=True)
    about = Column(Text, nullable=True)
    family_details = Column(Text, nullable=True)

    main_image = Column(String, nullable=True)
    gallery = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    account = relationship("Account", back_populates="listing")
    unlocks = relationship(
        "ProfileUnlock",
        back_populates="listing",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "title": self.title,
            "name": self.name,
            "father_name": self.father_name,
            "phone": self.phone,
            "age": self.age,
            "gender": self.gender.value if self.gender else None,
            "city": self.city,
            "caste": self.caste,
            "sect": self.sect,
            "religion": self.religion,
            "nationality": self.nationality,
            "height": self.height,
            "weight": self.weight,
            "marital_status": self.marital_status,
            "education": self.education,
            "profession": self.profession,
            "monthly_income": self.monthly_income,
            "mother_tongue": self.mother_tongue,
            "disability": self.disability,
            "house_type": self.house_type,
            "house_size": self.house_size,
            "requirements": self.requirements,
            "about": self.about,
            "family_details": self.family_details,
            "main_image": self.main_image,
            "gallery": list(self.gallery or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Listing(id={self.id}, account_id={self.account_id}, gender={self.gender})>"

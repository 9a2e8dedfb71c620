from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from rishta.models.account import Gender


class RegistrationData(BaseModel):
    name: str = Field(..., min_length=1)
    father_name: Optional[str] = None
    email: EmailStr
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)

    age: Optional[int] = Field(None, ge=18, le=100)
    gender: Gender = Gender.MALE
    city: Optional[str] = None
    caste: Optional[str] = None
    sect: Optional[str] = None
    religion: Optional[str] = None
    nationality: Optional[str] = None
    mother_tongue: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    marital_status: Optional[str] = None
    disability: Optional[str] = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    income: Optional[str] = None
    house_type: Optional[str] = None
    house_size: Optional[str] = None
    about: Optional[str] = None
    requirements: Optional[str] = None
    family_details: Optional[str] = None

    selected_package: Optional[str] = None
    price: Optional[str] = None

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user_id: int


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AccountSummary(BaseModel):
    id: int
    name: str
    gender: str
    package: str
    is_approved: bool
    credits: int
    role: str
    package_expiry: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: AccountSummary


class MeResponse(AccountSummary):
    email: str
    viewed_count: int
    unlocked_profiles: List[int]
    is_expired: bool


class AccountResponse(BaseModel):
    """Admin view of a registration. Never includes the password hash."""
    id: int
    name: str
    father_name: Optional[str] = None
    email: str
    phone: str
    role: str
    age: Optional[int] = None
    gender: str
    city: Optional[str] = None
    caste: Optional[str] = None
    sect: Optional[str] = None
    religion: Optional[str] = None
    nationality: Optional[str] = None
    mother_tongue: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    marital_status: Optional[str] = None
    disability: Optional[str] = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    income: Optional[str] = None
    house_type: Optional[str] = None
    house_size: Optional[str] = None
    about: Optional[str] = None
    requirements: Optional[str] = None
    family_details: Optional[str] = None
    package: str
    price: Optional[str] = None
    payment_screenshot: Optional[str] = None
    package_expiry: Optional[str] = None
    credits: int
    viewed_count: int
    images: List[str] = []
    main_image: Optional[str] = None
    is_approved: bool
    is_active: bool
    created_at: Optional[str] = None

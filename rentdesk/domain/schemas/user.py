"""Pydantic schemas for users, managers and authentication."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from rentdesk.domain.schemas.common import EMAIL_PATTERN
from rentdesk.security.rbac import Role


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class UserRead(BaseModel):
    id: str
    email: str
    role: str
    name: Optional[str] = None
    surname: Optional[str] = None
    phone: Optional[str] = None
    telegram: Optional[str] = None
    passport_number: Optional[str] = None
    citizenship: Optional[str] = None
    city: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Profile fields only. Email and role are not editable here."""

    name: Optional[str] = Field(None, max_length=100)
    surname: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    telegram: Optional[str] = Field(None, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)
    citizenship: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class RoleUpdate(BaseModel):
    role: Role


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class MeResponse(BaseModel):
    user: UserRead
    scope: Dict[str, Any]


class NewAccount(BaseModel):
    """Credentials and profile of an identity created by a provisioning sequence."""

    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)
    surname: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class ManagerCreate(NewAccount):
    company_id: Optional[int] = Field(None, ge=1)


class ManagerUpdate(BaseModel):
    is_active: Optional[bool] = None


class ManagerRead(BaseModel):
    id: int
    user_id: str
    company_id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OwnerCompany(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    location_id: Optional[int] = Field(None, ge=1)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class RegisterOwnerRequest(NewAccount):
    company: OwnerCompany

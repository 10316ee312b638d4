from pydantic import BaseModel, EmailStr, ValidationInfo, field_validator
from datetime import datetime
from typing import Optional

# Repository-level shapes: what may be written to and read from the users table

class UserFields(BaseModel):
    name: str
    email: str
    password_hash: str

    model_config = {"extra": "forbid"}

class UserChanges(BaseModel):
    """Whitelist of user columns that update() may touch."""
    name: Optional[str] = None
    email: Optional[str] = None
    password_hash: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator('name', 'email', 'password_hash')
    @classmethod
    def validate_not_null(cls, v: Optional[str], info: ValidationInfo) -> str:
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v

class UserRecord(UserFields):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}

# API shapes

class UserBase(BaseModel):
    name: str
    email: EmailStr

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Name must not be empty')
        return v.strip()

class UserCreate(UserBase):
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError('Password must be at least 8 characters long')
        if not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one digit')
        return v

class UserRead(UserBase):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}

class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    model_config = {"extra": "forbid"}

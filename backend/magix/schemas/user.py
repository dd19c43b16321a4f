from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from magix.models.user import UserRole


class UserBase(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=255)


class UserCreate(UserBase):
    password: str = Field(min_length=8)


class UserRead(UserBase):
    id: int
    role: UserRole
    activo: bool
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }

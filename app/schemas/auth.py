"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Admin login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminSummary(BaseModel):
    id: int
    name: str
    email: str
    title: str | None = None


class CompanySummary(BaseModel):
    id: int
    name: str
    industry: str | None = None
    size: str | None = None


class LoginResponse(BaseModel):
    """Login response with token, admin and company info."""

    token: str
    token_type: str = "bearer"
    admin: AdminSummary
    company: CompanySummary

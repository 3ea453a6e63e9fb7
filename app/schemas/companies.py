"""Company provisioning schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class AdminUserCreate(BaseModel):
    """First admin of a newly provisioned company."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    title: str | None = Field(None, max_length=200)


class CompanyProvisionRequest(BaseModel):
    """Request body for provisioning a company portal."""

    model_config = ConfigDict(populate_by_name=True)

    company_name: str = Field(..., alias="companyName", min_length=1, max_length=200)
    address: str | None = Field(None, max_length=500)
    industry: str | None = Field(None, max_length=100)
    size: str | None = Field(None, max_length=20, description="Head-count bucket, e.g. 51-200")
    admin_user: AdminUserCreate = Field(..., alias="adminUser")

    @field_validator("company_name")
    @classmethod
    def validate_company_name(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            raise ValueError("Company name must not be blank")
        return v.strip()


class ProvisionedCompany(BaseModel):
    id: int
    name: str


class ProvisionedAdmin(BaseModel):
    id: int
    name: str
    email: str
    title: str | None = None


class TemporaryCredentials(BaseModel):
    """One-time credentials for the first admin login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    temp_password: str = Field(..., alias="tempPassword")


class CompanyProvisionResponse(BaseModel):
    """Result of provisioning a company portal."""

    model_config = ConfigDict(populate_by_name=True)

    company: ProvisionedCompany
    admin: ProvisionedAdmin
    credentials: TemporaryCredentials
    portal_url: str = Field(..., alias="portalUrl")

"""Account domain models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Account(BaseModel):
    """Account record as stored."""

    id: str = Field(..., description="Unique account ID from the document store")
    email: str = Field(..., description="Lowercased, unique email address")
    name: str = Field(..., description="Display name")
    bio: str = Field(default="", description="Short profile text")
    avatar: str = Field(default="", description="Avatar URL")
    password_hash: str | None = Field(
        default=None, description="bcrypt hash; None for externally-authenticated accounts"
    )
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")


class AccountSummary(BaseModel):
    """Public view of an account. Never carries the password hash."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    email: str
    avatar: str = ""
    bio: str = ""
    created_at: str | None = None

    @classmethod
    def from_account(cls, account: Account, *, include_created: bool = False) -> "AccountSummary":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            avatar=account.avatar,
            bio=account.bio,
            created_at=account.created_at if include_created else None,
        )

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

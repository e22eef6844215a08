"""
Pydantic models for user data.

``UserCreate`` and ``UserUpdate`` describe request bodies, ``UserRead``
is the stored record returned by every endpoint and ``UserPage`` wraps
a page of records for the listing endpoint.

``UserUpdate`` has merge-patch semantics: only fields present in the
request body are written.  Presence is tracked by pydantic
(``model_fields_set``), so leaving ``age`` out is different from
sending ``"age": 0``.  Sending an explicit ``null`` is rejected because
every column is required.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator

MAX_EMAIL_LENGTH = 100


def _check_email_length(value: str) -> str:
    if len(value) > MAX_EMAIL_LENGTH:
        raise ValueError(f"must be at most {MAX_EMAIL_LENGTH} characters")
    return value


# Matches the VARCHAR(100) column
Email = Annotated[EmailStr, AfterValidator(_check_email_length)]


class UserCreate(BaseModel):
    """Schema for creating a user.  All fields are required."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Ada Lovelace"])
    email: Email = Field(..., examples=["ada@example.com"])
    age: int = Field(..., ge=0, le=130, examples=[36])

    model_config = {
        "str_strip_whitespace": True,
    }


class UserUpdate(BaseModel):
    """Schema for updating a user.

    All fields are optional; only provided fields will be updated.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[Email] = None
    age: Optional[int] = Field(None, ge=0, le=130)

    model_config = {
        "str_strip_whitespace": True,
    }

    @field_validator("name", "email", "age", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Defaults are not validated, so this only sees explicit values
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> Dict[str, Any]:
        """Return only the fields that were present in the request."""
        return self.model_dump(exclude_unset=True)


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }


class UserPage(BaseModel):
    """One page of users plus the bookkeeping needed to fetch the rest."""

    data: List[UserRead]
    total: int
    page: int
    page_size: int
    total_pages: int

"""
Request bodies, validated before any store round trip
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from resolve.constants import (
    MAX_CLASSIFY_DESCRIPTION_LENGTH,
    MAX_COMMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_FEEDBACK_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TITLE_LENGTH,
    MIN_DESCRIPTION_LENGTH,
    MIN_NAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    MIN_TITLE_LENGTH,
)
from .complaint import ComplaintStatus, Severity
from .profile import AppRole


# Secrets are taken exactly as typed
UNTRIMMED_FIELDS = frozenset({"password"})


class _Trimmed(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, value, info: ValidationInfo):
        if isinstance(value, str) and info.field_name not in UNTRIMMED_FIELDS:
            return value.strip()
        return value


class ComplaintCreate(_Trimmed):
    title: str = Field(min_length=MIN_TITLE_LENGTH, max_length=MAX_TITLE_LENGTH)
    description: str = Field(min_length=MIN_DESCRIPTION_LENGTH, max_length=MAX_DESCRIPTION_LENGTH)
    severity: Severity = Severity.MEDIUM


class StatusUpdate(BaseModel):
    status: ComplaintStatus


class CommentCreate(_Trimmed):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)


class RatingCreate(_Trimmed):
    rating: int = Field(ge=1, le=5)
    feedback: Optional[str] = Field(default=None, max_length=MAX_FEEDBACK_LENGTH)


class RoleUpdate(BaseModel):
    role: AppRole


class SignUpRequest(_Trimmed):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=100)
    full_name: str = Field(min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH)


class SignInRequest(_Trimmed):
    email: EmailStr
    password: str = Field(min_length=1)


class ResendVerificationRequest(_Trimmed):
    email: EmailStr


class WritingAssistRequest(BaseModel):
    action: Literal["improve", "suggest_title", "suggest_category", "chat"]
    text: Optional[str] = None
    description: Optional[str] = None


class ClassifyRequest(_Trimmed):
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str = Field(min_length=1, max_length=MAX_CLASSIFY_DESCRIPTION_LENGTH)
    severity: Severity


class ComplaintDraft(BaseModel):
    title: str
    description: str


class ReplyRequest(BaseModel):
    complaint: ComplaintDraft


class SeedUser(_Trimmed):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    full_name: str = Field(alias="fullName", min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH)
    role: AppRole = AppRole.STUDENT

    model_config = ConfigDict(populate_by_name=True)


class CreateTestUsersRequest(BaseModel):
    users: List[SeedUser] = Field(min_length=1)

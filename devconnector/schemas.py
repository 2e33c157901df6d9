"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MessageResponse(BaseModel):
    msg: str


# ──────────────────────────── Accounts ────────────────────────────────────

class RegisterInput(BaseModel):
    name: NonEmptyStr
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginInput(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    """A user as returned to clients; never includes the password hash."""
    user_id: str
    name: str
    email: str
    avatar: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    user_id: str
    name: str
    avatar: Optional[str]

    class Config:
        from_attributes = True


# ──────────────────────────── Profiles ────────────────────────────────────

SOCIAL_FIELDS = ("youtube", "twitter", "facebook", "linkedin", "instagram")


class ProfileFields(BaseModel):
    """
    Partial profile input. Every field is optional; fields left out (or sent
    empty) are not written. `skills` is a comma-separated string.
    """
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    github_username: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("github_username", "githubusername", "githubUsername"),
    )
    skills: Optional[str] = None

    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


class ProfileInput(ProfileFields):
    """Body of POST /api/profile: status and skills are required."""
    status: NonEmptyStr
    skills: NonEmptyStr


class ProfileResponse(BaseModel):
    profile_id: str
    user_id: str
    user: Optional[UserSummary] = None
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    github_username: Optional[str] = None
    skills: list[str] = []
    social: dict[str, str] = {}
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ──────────────────────────── Posts ───────────────────────────────────────

class PostInput(BaseModel):
    text: NonEmptyStr


class CommentInput(BaseModel):
    text: NonEmptyStr


class LikeResponse(BaseModel):
    user_id: str

    class Config:
        from_attributes = True


class CommentResponse(BaseModel):
    comment_id: str
    user_id: str
    text: str
    name: Optional[str]
    avatar: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class PostResponse(BaseModel):
    post_id: str
    user_id: str
    text: str
    name: Optional[str]
    avatar: Optional[str]
    created_at: datetime
    likes: list[LikeResponse] = []      # newest first
    comments: list[CommentResponse] = []  # newest first

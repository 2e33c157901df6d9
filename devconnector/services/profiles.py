"""
Developer profiles, one per user, created or updated by a single upsert.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.errors import ProfileNotFound
from devconnector.models import Profile
from devconnector.schemas import SOCIAL_FIELDS, ProfileFields, ProfileResponse

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("company", "website", "location", "bio", "status", "github_username")


def split_skills(skills: str) -> list[str]:
    """'js, go , rust' -> ['js', 'go', 'rust']. Empty items are kept."""
    return [skill.strip() for skill in skills.split(",")]


def build_profile_fields(body: ProfileFields) -> dict:
    """
    Sparse update set: only fields that were supplied with a non-empty value.
    Social links are collected under a nested "social" key.
    """
    fields = {}
    for name in SCALAR_FIELDS:
        value = getattr(body, name)
        if value:
            fields[name] = value
    if body.skills:
        fields["skills"] = split_skills(body.skills)

    social = {}
    for name in SOCIAL_FIELDS:
        value = getattr(body, name)
        if value:
            social[name] = value
    if social:
        fields["social"] = social
    return fields


def _apply(profile: Profile, fields: dict) -> None:
    for name, value in fields.items():
        if name == "social":
            # Merge link by link; assigning a new dict marks the column dirty
            profile.social = {**(profile.social or {}), **value}
        else:
            setattr(profile, name, value)


async def _find_by_user(db: AsyncSession, user_id: str) -> Profile | None:
    rows = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return rows.unique().scalar_one_or_none()


async def upsert_profile(
    db: AsyncSession, identity_id: str, body: ProfileFields
) -> ProfileResponse:
    """
    Create the caller's profile, or merge the supplied fields into the
    existing one. Fields not supplied keep their stored values.
    """
    fields = build_profile_fields(body)

    profile = await _find_by_user(db, identity_id)
    if profile is None:
        profile = Profile(user_id=identity_id, skills=[], social={})
        _apply(profile, fields)
        db.add(profile)
        try:
            await db.flush()
            logger.info("Profile created for user %s", identity_id)
        except IntegrityError:
            # Lost a creation race on the user_id unique key; update instead
            await db.rollback()
            profile = await _find_by_user(db, identity_id)
            if profile is None:
                raise
            _apply(profile, fields)
            await db.flush()
            logger.info("Profile updated for user %s", identity_id)
    else:
        _apply(profile, fields)
        await db.flush()
        logger.info("Profile updated for user %s", identity_id)

    await db.refresh(profile)
    return ProfileResponse.model_validate(profile)


async def get_profile_by_user(
    db: AsyncSession, user_id: str, missing_msg: str = "Profile not found"
) -> ProfileResponse:
    profile = await _find_by_user(db, user_id)
    if profile is None:
        raise ProfileNotFound(missing_msg)
    return ProfileResponse.model_validate(profile)


async def list_profiles(db: AsyncSession) -> list[ProfileResponse]:
    rows = await db.execute(select(Profile).order_by(Profile.created_at))
    return [ProfileResponse.model_validate(p) for p in rows.unique().scalars().all()]

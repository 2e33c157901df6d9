"""
Profile endpoints:
  GET  /api/profile/me             — current user's profile (private)
  POST /api/profile                — create or update own profile (private)
  GET  /api/profile                — all profiles (public)
  GET  /api/profile/user/{user_id} — profile by user id (public)
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth.gate import CurrentIdentity
from devconnector.database import get_db
from devconnector.schemas import ProfileInput, ProfileResponse
from devconnector.services import profiles as profile_service

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_profile_by_user(
        db, identity.id, missing_msg="There is no profile for this user"
    )


@router.post("", response_model=ProfileResponse)
async def upsert_profile(
    body: ProfileInput, identity: CurrentIdentity, db: AsyncSession = Depends(get_db)
):
    """
    Create or update the caller's profile.

    Only fields present in the body are written; `skills` is a
    comma-separated string stored as a list of trimmed entries.
    """
    with tracer.start_as_current_span("upsert_profile") as span:
        span.set_attribute("user.id", identity.id)
        return await profile_service.upsert_profile(db, identity.id, body)


@router.get("", response_model=list[ProfileResponse])
async def list_profiles(db: AsyncSession = Depends(get_db)):
    return await profile_service.list_profiles(db)


@router.get("/user/{user_id}", response_model=ProfileResponse)
async def get_profile_by_user(user_id: str, db: AsyncSession = Depends(get_db)):
    return await profile_service.get_profile_by_user(db, user_id)

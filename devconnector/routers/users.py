"""
Account endpoints:
  POST /api/users — register, returns a token
  POST /api/auth  — log in, returns a token
  GET  /api/auth  — the current user (private)
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from devconnector.auth.gate import Codec, CurrentIdentity
from devconnector.database import get_db
from devconnector.schemas import LoginInput, RegisterInput, TokenResponse, UserResponse
from devconnector.services import users as user_service

logger = logging.getLogger(__name__)
users_router = APIRouter()
auth_router = APIRouter()
tracer = trace.get_tracer(__name__)


@users_router.post("", response_model=TokenResponse)
async def register(body: RegisterInput, codec: Codec, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("register_user"):
        return await user_service.register(db, codec, body)


@auth_router.post("", response_model=TokenResponse)
async def login(body: LoginInput, codec: Codec, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("login"):
        return await user_service.login(db, codec, body)


@auth_router.get("", response_model=UserResponse)
async def current_user(identity: CurrentIdentity, db: AsyncSession = Depends(get_db)):
    return await user_service.get_user(db, identity.id)

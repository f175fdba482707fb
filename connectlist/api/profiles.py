# connectlist/api/profiles.py
import re
from typing import Optional

from azure.core.exceptions import AzureError
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator

from connectlist.api.deps import get_reporter
from connectlist.models.profile import ProfileView
from connectlist.security.jwt_utils import current_user
from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.profiles import get_profile_view, update_profile

router = APIRouter(prefix="/profiles", tags=["profiles"])

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]{3,20}$")


class ProfileUpdateIn(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    avatar_url: Optional[str] = None
    avatar_path: Optional[str] = None

    @field_validator("username")
    @classmethod
    def valid_username(cls, v):
        if v is None:
            return v
        v = v.strip().lstrip("@")
        if not USERNAME_RE.match(v):
            raise ValueError("username must be 3-20 letters, digits or underscores")
        return v

    @field_validator("bio")
    @classmethod
    def short_bio(cls, v):
        if v is not None and len(v) > 300:
            raise ValueError("bio must be at most 300 characters")
        return v


@router.get("/me", response_model=ProfileView)
async def my_profile(
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return get_profile_view(current["sub"], auth_user=current, reporter=reporter)


@router.patch("/me", response_model=ProfileView)
async def edit_my_profile(
    body: ProfileUpdateIn,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        profile = update_profile(current["sub"], body.model_dump())
    except AzureError as e:
        reporter.capture_database_error(e, query="update_profile", table="profiles")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not update profile: {e}",
        )
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.get("/{user_id}", response_model=ProfileView)
async def user_profile(
    user_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    profile = get_profile_view(user_id, auth_user=current, reporter=reporter)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

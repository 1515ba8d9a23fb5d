"""
API router for the current user.
"""
from fastapi import APIRouter, Query
from typing import Annotated, Optional

from treemarket.api.dependencies import UserServiceDep
from treemarket.api.v1.models.responses import ERROR_RESPONSES, UserProfileResponse
from treemarket.domain.errors import ValidationError


router = APIRouter(
    prefix="/user",
    tags=["users"],
)


@router.get(
    "/me",
    response_model=UserProfileResponse,
    summary="Get or create the calling user",
    responses=ERROR_RESPONSES,
)
def get_me(
    user_service: UserServiceDep,
    auth0_id: Annotated[Optional[str], Query(alias="auth0Id")] = None,
    email: Optional[str] = None,
    name: Optional[str] = None,
) -> UserProfileResponse:
    """
    Return the caller's profile flags, creating the user on first sight.
    """
    if not auth0_id:
        raise ValidationError("auth0Id required")
    user = user_service.ensure_user(auth0_id, email=email, name=name)
    return UserProfileResponse(is_admin=user.is_admin, name=user.name, email=user.email)

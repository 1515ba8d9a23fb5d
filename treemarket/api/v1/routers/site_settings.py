"""
API router for site settings administration.
"""
from fastapi import APIRouter

from treemarket.api.dependencies import SettingsServiceDep
from treemarket.api.v1.models.requests import UpdateSettingsRequest
from treemarket.api.v1.models.responses import ERROR_RESPONSES, ErrorResponse
from treemarket.domain.models import SiteSettings


router = APIRouter(
    prefix="/admin/settings",
    tags=["settings"],
)


@router.get(
    "",
    response_model=SiteSettings,
    summary="Get site settings",
    responses={500: ERROR_RESPONSES[500]},
)
def get_settings(settings_service: SettingsServiceDep) -> SiteSettings:
    return settings_service.get_settings()


@router.put(
    "",
    response_model=SiteSettings,
    summary="Update site settings",
    description="""
    Update the site logo and landing page copy. Admins only.

    Fields left out of the request keep their current values.
    """,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Admin access required"},
        **ERROR_RESPONSES,
    },
)
def update_settings(
    body: UpdateSettingsRequest,
    settings_service: SettingsServiceDep,
) -> SiteSettings:
    return settings_service.update_settings(body.auth0_id, body.settings_fields())

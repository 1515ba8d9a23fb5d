"""
API router for listing image uploads.
"""
from fastapi import APIRouter, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from typing import Annotated, List, Optional

from treemarket.api.dependencies import ImageStoreDep
from treemarket.api.rate_limit import WRITE_LIMIT, limiter
from treemarket.api.v1.models.responses import ERROR_RESPONSES, UploadResponse
from treemarket.infrastructure.image_storage import ImageUpload


router = APIRouter(
    prefix="/upload",
    tags=["uploads"],
)


@router.post(
    "",
    response_model=UploadResponse,
    summary="Upload listing images",
    description="""
    Store up to 5 JPEG, PNG or WebP images of at most 5MB each and return
    their public URLs. The whole batch is rejected if any file breaks a rule.
    """,
    responses=ERROR_RESPONSES,
)
@limiter.limit(WRITE_LIMIT)
async def upload_images(
    request: Request,
    image_store: ImageStoreDep,
    files: Annotated[Optional[List[UploadFile]], File()] = None,
) -> UploadResponse:
    uploads = []
    for upload in files or []:
        uploads.append(ImageUpload(
            filename=upload.filename or "",
            content_type=upload.content_type,
            data=await upload.read(),
        ))
    urls = await run_in_threadpool(image_store.save_all, uploads)
    return UploadResponse(urls=urls)

"""
Paid image actions

- POST /share-image: publish an image to the gallery (+1 spin ticket)
- POST /generate-group-image: spawn a group render job
- POST /comic-render-panel: spawn a comic panel render job

Job spawning responds as soon as the job is recorded and paid for; the
result is delivered out-of-band by the render worker.
"""

from fastapi import APIRouter, Depends

from auditionapi.core.auth_middleware import get_current_user
from auditionapi.deps import get_job_service, get_share_service
from auditionapi.schemas.images import (
    ComicRenderRequest,
    GroupImageRequest,
    JobCreatedResponse,
    ShareImageRequest,
    ShareImageResponse,
)
from auditionapi.schemas.user import UserProfile
from auditionapi.services.job_service import JobService
from auditionapi.services.share_service import ShareService

router = APIRouter(tags=["images"])


@router.post("/share-image", response_model=ShareImageResponse)
async def share_image(
    request: ShareImageRequest,
    current_user: UserProfile = Depends(get_current_user),
    share_service: ShareService = Depends(get_share_service),
) -> ShareImageResponse:
    """
    HTTP Status:
        400: imageId missing
        402: not enough diamonds
        403: image belongs to someone else
        404: image not found
        409: image already public
    """
    return share_service.share_image(current_user.id, request.image_id)


@router.post("/generate-group-image", response_model=JobCreatedResponse)
async def generate_group_image(
    request: GroupImageRequest,
    current_user: UserProfile = Depends(get_current_user),
    job_service: JobService = Depends(get_job_service),
) -> JobCreatedResponse:
    """Cost is one diamond per character, plus one for the upscaler."""
    return job_service.create_group_image_job(current_user.id, request)


@router.post("/comic-render-panel", response_model=JobCreatedResponse)
async def comic_render_panel(
    request: ComicRenderRequest,
    current_user: UserProfile = Depends(get_current_user),
    job_service: JobService = Depends(get_job_service),
) -> JobCreatedResponse:
    return job_service.create_comic_panel_job(current_user.id, request)

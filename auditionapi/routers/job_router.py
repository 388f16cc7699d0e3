from fastapi import APIRouter, Depends, Path

from auditionapi.core.auth_middleware import get_current_user, require_worker
from auditionapi.deps import get_job_service
from auditionapi.schemas.images import (
    JobCompleteRequest,
    JobFailRequest,
    JobProgressRequest,
    JobResponse,
)
from auditionapi.schemas.user import UserProfile
from auditionapi.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str = Path(..., max_length=64),
    current_user: UserProfile = Depends(get_current_user),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """Job status for its owner (or an admin)"""
    return job_service.get_job(job_id, current_user)


# Worker callbacks, authenticated with WORKER_AUTH_TOKEN


@router.post(
    "/{job_id}/progress",
    response_model=JobResponse,
    dependencies=[Depends(require_worker)],
)
async def report_progress(
    request: JobProgressRequest,
    job_id: str = Path(..., max_length=64),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    return job_service.mark_progress(job_id, request.message)


@router.post(
    "/{job_id}/complete",
    response_model=JobResponse,
    dependencies=[Depends(require_worker)],
)
async def complete_job(
    request: JobCompleteRequest,
    job_id: str = Path(..., max_length=64),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    return job_service.complete_job(job_id, request.image_url)


@router.post(
    "/{job_id}/fail",
    response_model=JobResponse,
    dependencies=[Depends(require_worker)],
)
async def fail_job(
    request: JobFailRequest,
    job_id: str = Path(..., max_length=64),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """Marks the job failed and refunds its cost"""
    return job_service.fail_job(job_id, request.reason)

"""
Paid render jobs.

The API only records the job and charges for it. Rendering happens in an
external worker which reports back through ``mark_progress``,
``complete_job`` and ``fail_job``. A failed job is refunded in full.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from auditionapi.config import Settings
from auditionapi.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from auditionapi.models.generated_image import FAILED_IMAGE_URL_PREFIX, JobKind, JobStatus
from auditionapi.models.ledger import TransactionType
from auditionapi.schemas.images import (
    ComicRenderRequest,
    GroupImageRequest,
    JobCreatedResponse,
    JobResponse,
)
from auditionapi.schemas.user import UserProfile
from auditionapi.services.storage_service import StorageService, is_data_url
from auditionapi.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

FAILURE_REASON_MAX_LENGTH = 200


def sources_for(target: JobStatus):
    return [status for status in JobStatus if status.can_transition_to(target)]


class JobService:
    def __init__(self, db: Session, settings: Settings, storage: StorageService):
        self.settings = settings
        self.storage = storage
        self.wallet = WalletService(db)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def group_image_cost(self, request: GroupImageRequest) -> int:
        upscaler = self.settings.GROUP_IMAGE_UPSCALER_COST if request.use_upscaler else 0
        return len(request.characters) + upscaler

    def comic_panel_cost(self, image_quality: Optional[str]) -> int:
        quality = (image_quality or "").upper()
        surcharge = {
            "2K": self.settings.COMIC_PANEL_2K_SURCHARGE,
            "4K": self.settings.COMIC_PANEL_4K_SURCHARGE,
        }.get(quality, 0)
        return self.settings.COMIC_PANEL_BASE_COST + surcharge

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def _precheck(self, user_id: str, job_id: str, cost: int) -> None:
        # Fail fast before any upload; the debit itself re-checks atomically
        if not self.wallet.check_balance(user_id, cost):
            raise InsufficientBalanceError(
                f"Not enough diamonds. This render costs {cost}.",
                details={"required": cost},
            )
        if self.wallet.job_repo.exists(job_id):
            raise ConflictError("Job already exists", details={"job_id": job_id})

    def _upload_if_inline(self, value: Optional[str], prefix: str) -> Optional[str]:
        if is_data_url(value):
            return self.storage.upload_data_url(value, prefix)
        return value

    def _spawn_and_charge(
        self,
        user_id: str,
        job_id: str,
        kind: JobKind,
        payload: Dict[str, Any],
        cost: int,
        reason: TransactionType,
        description: str,
    ) -> JobCreatedResponse:
        with self.wallet.transaction():
            self.wallet.spawn_job(job_id, user_id, kind, payload, cost=cost)
            new_balance = self.wallet.charge(user_id, cost, reason.value, description)

        logger.info(f"Spawned {kind.value} job {job_id} for {user_id} (cost {cost})")
        return JobCreatedResponse(
            job_id=job_id,
            status=JobStatus.PENDING.value,
            cost=cost,
            new_diamond_count=new_balance,
        )

    def create_group_image_job(
        self, user_id: str, request: GroupImageRequest
    ) -> JobCreatedResponse:
        if not request.job_id:
            raise ValidationError("Missing jobId")
        if not request.characters:
            raise ValidationError("At least one character is required")
        for index, character in enumerate(request.characters, start=1):
            if not character.pose_image:
                raise ValidationError(f"Character {index} is missing a pose image")
        if not request.reference_image:
            raise ValidationError("Missing reference image")

        cost = self.group_image_cost(request)
        self._precheck(user_id, request.job_id, cost)

        prefix = f"{user_id}/group/{request.job_id}"
        payload = request.model_dump(by_alias=True, exclude={"job_id"})
        payload["referenceImage"] = self._upload_if_inline(request.reference_image, prefix)
        for stored, character in zip(payload["characters"], request.characters):
            stored["poseImage"] = self._upload_if_inline(character.pose_image, prefix)
            stored["faceImage"] = self._upload_if_inline(character.face_image, prefix)
        payload["totalCost"] = cost

        return self._spawn_and_charge(
            user_id,
            request.job_id,
            JobKind.GROUP,
            payload,
            cost,
            TransactionType.GROUP_IMAGE,
            f"Group image with {len(request.characters)} character(s)",
        )

    def create_comic_panel_job(
        self, user_id: str, request: ComicRenderRequest
    ) -> JobCreatedResponse:
        if not request.job_id:
            raise ValidationError("Missing jobId")
        if request.panel is None or not request.panel.visual_description:
            raise ValidationError("Panel visual description is required")

        cost = self.comic_panel_cost(request.image_quality)
        self._precheck(user_id, request.job_id, cost)

        payload = request.model_dump(by_alias=True, exclude={"job_id"})
        payload["totalCost"] = cost

        quality = (request.image_quality or "1K").upper()
        panel_label = f"#{request.panel.panel_number} " if request.panel.panel_number is not None else ""
        return self._spawn_and_charge(
            user_id,
            request.job_id,
            JobKind.COMIC_PANEL,
            payload,
            cost,
            TransactionType.COMIC_RENDER,
            f"Comic panel {panel_label}({quality})",
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def get_job(self, job_id: str, user: UserProfile) -> JobResponse:
        job = self.wallet.job_repo.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.user_id != user.id and not user.is_admin:
            raise AuthorizationError("You do not own this job")
        return self.wallet.job_repo.to_response(job)

    def _require_transition(self, job_id: str, target: JobStatus, ok: bool) -> None:
        if ok:
            return
        job = self.wallet.job_repo.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        raise ConflictError(
            f"Job cannot move from {job.status} to {target.value}",
            details={"status": job.status},
        )

    def mark_progress(self, job_id: str, message: str) -> JobResponse:
        with self.wallet.transaction():
            ok = self.wallet.job_repo.set_progress(job_id, message)
            self._require_transition(job_id, JobStatus.PENDING, ok)
        return self.wallet.job_repo.get_response(job_id)

    def complete_job(self, job_id: str, image_url: str) -> JobResponse:
        if not image_url:
            raise ValidationError("imageUrl is required")
        with self.wallet.transaction():
            ok = self.wallet.job_repo.transition(
                job_id, sources_for(JobStatus.DONE), JobStatus.DONE, image_url=image_url
            )
            self._require_transition(job_id, JobStatus.DONE, ok)
        logger.info(f"Job {job_id} completed")
        return self.wallet.job_repo.get_response(job_id)

    def fail_job(self, job_id: str, reason: str) -> JobResponse:
        """Mark the job failed and refund what was charged, in one unit of work"""
        reason = reason or "Unknown error"
        with self.wallet.transaction():
            job = self.wallet.job_repo.get(job_id)
            if job is None:
                raise NotFoundError("Job not found")
            user_id, cost = job.user_id, job.cost or 0

            ok = self.wallet.job_repo.transition(
                job_id,
                sources_for(JobStatus.FAILED),
                JobStatus.FAILED,
                image_url=f"{FAILED_IMAGE_URL_PREFIX}{reason[:FAILURE_REASON_MAX_LENGTH]}",
            )
            self._require_transition(job_id, JobStatus.FAILED, ok)

            if cost > 0:
                self.wallet.reward(
                    user_id,
                    cost,
                    TransactionType.REFUND.value,
                    f"Refund for failed job {job_id}: {reason[:50]}",
                )

        logger.warning(f"Job {job_id} failed, refunded {cost} to {user_id}: {reason}")
        return self.wallet.job_repo.get_response(job_id)

import json
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from auditionapi.models.generated_image import (
    PENDING_IMAGE_URL,
    GeneratedImage,
    JobStatus,
)
from auditionapi.repositories.base import BaseRepository
from auditionapi.schemas.images import JobResponse


def decode_prompt(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        # Rows written by older clients store a plain prompt string
        return {"payload": {"prompt": raw}, "progress": None}
    return decoded if isinstance(decoded, dict) else {"payload": decoded}


class JobRepository(BaseRepository[GeneratedImage, JobResponse]):
    def __init__(self, db: Session):
        super().__init__(GeneratedImage, JobResponse, db)

    def _to_schema(self, model_instance: Any) -> Optional[JobResponse]:
        if model_instance is None:
            return None
        prompt = decode_prompt(model_instance.prompt)
        return JobResponse(
            id=model_instance.id,
            kind=model_instance.kind,
            status=model_instance.status,
            image_url=model_instance.image_url,
            progress=prompt.get("progress"),
            cost=model_instance.cost or 0,
            is_public=bool(model_instance.is_public),
        )

    def exists(self, job_id: str) -> bool:
        stmt = select(GeneratedImage.id).where(GeneratedImage.id == job_id)
        return self.db.execute(stmt).scalar_one_or_none() is not None

    def get(self, job_id: str) -> Optional[GeneratedImage]:
        return self._get_model(job_id, refresh=True)

    def insert(
        self,
        job_id: str,
        user_id: str,
        kind: str,
        payload: Dict[str, Any],
        cost: int,
        status: JobStatus = JobStatus.PENDING,
    ) -> GeneratedImage:
        job = GeneratedImage(
            id=job_id,
            user_id=user_id,
            kind=kind,
            prompt=json.dumps({"payload": payload, "progress": None}),
            status=status.value,
            image_url=PENDING_IMAGE_URL,
            cost=cost,
            is_public=False,
        )
        self.db.add(job)
        self.db.flush()
        return job

    def transition(
        self,
        job_id: str,
        from_statuses: Iterable[JobStatus],
        to_status: JobStatus,
        **values,
    ) -> bool:
        """Conditional status change; False when the row was not in ``from_statuses``"""
        stmt = (
            update(GeneratedImage)
            .where(
                GeneratedImage.id == job_id,
                GeneratedImage.status.in_([s.value for s in from_statuses]),
            )
            .values(status=to_status.value, **values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def set_progress(self, job_id: str, message: str) -> bool:
        job = self.get(job_id)
        if job is None or job.status != JobStatus.PENDING.value:
            return False
        prompt = decode_prompt(job.prompt)
        prompt["progress"] = message
        stmt = (
            update(GeneratedImage)
            .where(
                GeneratedImage.id == job_id,
                GeneratedImage.status == JobStatus.PENDING.value,
            )
            .values(prompt=json.dumps(prompt))
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def publish(self, image_id: str) -> bool:
        """Mark as public; False if it already was"""
        stmt = (
            update(GeneratedImage)
            .where(GeneratedImage.id == image_id, GeneratedImage.is_public.is_(False))
            .values(is_public=True)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def to_response(self, job: GeneratedImage) -> JobResponse:
        return self._to_schema(job)

    def get_response(self, job_id: str) -> Optional[JobResponse]:
        return self._to_schema(self.get(job_id))

from enum import Enum

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text

from auditionapi.models.base import BaseModel

PENDING_IMAGE_URL = "PENDING"
FAILED_IMAGE_URL_PREFIX = "FAILED: "


class JobKind(str, Enum):
    SINGLE = "single"
    GROUP = "group"
    COMIC_PANEL = "comic_panel"


class JobStatus(str, Enum):
    INITIALIZING = "initializing"
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"

    @classmethod
    def allowed_transitions(cls) -> dict:
        return {
            cls.INITIALIZING: {cls.PENDING, cls.FAILED},
            cls.PENDING: {cls.DONE, cls.FAILED},
            cls.DONE: set(),
            cls.FAILED: set(),
        }

    def can_transition_to(self, target: "JobStatus") -> bool:
        return target in self.allowed_transitions()[self]


class GeneratedImage(BaseModel):
    """
    Render job and, once the worker finishes, the resulting image.

    The row is created by the API with ``image_url = PENDING``. The external
    worker reports back through the job callback endpoints which move the
    status forward and fill in the real URL (or the ``FAILED: ...`` marker).
    """

    __tablename__ = "generated_images"
    __table_args__ = (
        Index("idx_generated_images_user", "user_id"),
        Index("idx_generated_images_status", "status"),
    )

    # Caller-supplied job id
    id = Column(String(64), primary_key=True)

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    kind = Column(String(20), nullable=False, default=JobKind.SINGLE.value)

    # JSON text: {"payload": {...}, "progress": "..."}
    prompt = Column(Text, nullable=False, default="{}")

    status = Column(String(20), nullable=False, default=JobStatus.PENDING.value)

    image_url = Column(Text, nullable=False, default=PENDING_IMAGE_URL)

    # Diamonds charged when the job was spawned; refunded on failure
    cost = Column(Integer, nullable=False, default=0)

    is_public = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<GeneratedImage(id={self.id}, kind={self.kind}, status={self.status})>"

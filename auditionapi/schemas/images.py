from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from auditionapi.schemas.base import CamelModel


class ShareImageRequest(CamelModel):
    image_id: Optional[str] = None


class ShareImageResponse(CamelModel):
    message: str
    new_diamond_count: int
    spin_tickets: int


class GroupCharacter(CamelModel):
    """A character slot. Unknown keys (gender, name, ...) are kept as sent."""

    model_config = ConfigDict(extra="allow")

    pose_image: Optional[str] = None
    face_image: Optional[str] = None


class GroupImageRequest(CamelModel):
    model_config = ConfigDict(extra="allow")

    job_id: Optional[str] = Field(None, max_length=64)
    characters: List[GroupCharacter] = []
    use_upscaler: bool = False
    reference_image: Optional[str] = None
    prompt: str = ""
    style: Optional[str] = None
    aspect_ratio: Optional[str] = None
    model: Optional[str] = None
    image_size: Optional[str] = None
    use_search: bool = False
    remove_watermark: bool = False


class ComicPanel(BaseModel):
    model_config = ConfigDict(extra="allow")

    panel_number: Optional[int] = None
    visual_description: Optional[str] = None
    dialogue: Optional[Any] = None


class ComicRenderRequest(CamelModel):
    model_config = ConfigDict(extra="allow")

    job_id: Optional[str] = Field(None, max_length=64)
    panel: Optional[ComicPanel] = None
    characters: List[Dict[str, Any]] = []
    style: Optional[str] = None
    aspect_ratio: Optional[str] = None
    image_quality: str = "1K"
    premise: Optional[str] = None
    genre: Optional[str] = None
    language: Optional[str] = None


class JobCreatedResponse(CamelModel):
    job_id: str
    status: str
    cost: int
    new_diamond_count: int


class JobResponse(CamelModel):
    id: str
    kind: str
    status: str
    image_url: Optional[str] = None
    progress: Optional[str] = None
    cost: int = 0
    is_public: bool = False


class JobProgressRequest(BaseModel):
    message: str


class JobCompleteRequest(CamelModel):
    image_url: str


class JobFailRequest(BaseModel):
    reason: str = "Unknown error"

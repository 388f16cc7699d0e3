import base64
import binascii
import logging
import re
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from auditionapi.config import Settings
from auditionapi.core.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


def is_data_url(value: Optional[str]) -> bool:
    return isinstance(value, str) and value.startswith("data:")


class StorageService:
    """Cloudflare R2 (S3 compatible) uploads for user-supplied images"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.bucket = settings.R2_BUCKET_NAME
        self.public_url = settings.R2_PUBLIC_URL.rstrip("/")
        self._s3 = None

    def _client(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                endpoint_url=self.settings.R2_ENDPOINT,
                aws_access_key_id=self.settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=self.settings.R2_SECRET_ACCESS_KEY,
                region_name="auto",
            )
        return self._s3

    def upload_bytes(self, key: str, body: bytes, content_type: str) -> str:
        if not self.bucket:
            raise StorageError("Object storage is not configured")
        try:
            self._client().put_object(
                Bucket=self.bucket, Key=key, Body=body, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"R2 upload failed for {key}: {e}")
            raise StorageError(f"Failed to upload {key}")
        return f"{self.public_url}/{key}"

    def upload_data_url(self, data_url: str, prefix: str) -> str:
        """Decode a ``data:<mime>;base64,...`` URL, store it, return its public URL"""
        match = DATA_URL_PATTERN.match(data_url)
        if not match:
            raise ValidationError("Malformed data URL")
        mime = match.group("mime")
        try:
            body = base64.b64decode(match.group("data"), validate=False)
        except (binascii.Error, ValueError):
            raise ValidationError("Malformed base64 image data")

        key = f"{prefix.strip('/')}/{uuid.uuid4().hex}.{EXTENSIONS.get(mime, 'bin')}"
        return self.upload_bytes(key, body, mime)

# S3-compatible object store (Cloudflare R2) for uploaded images
import logging
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from slugify import slugify

from medistore.exceptions import StorageError

logger = logging.getLogger(__name__)

UPLOAD_FOLDERS = {"products", "articles", "doctors", "webinars", "partners"}


class ObjectStore:
    def __init__(self, client, bucket: str, public_base: str):
        self.client = client
        self.bucket = bucket
        self.public_base = public_base.rstrip("/")

    @classmethod
    def from_settings(cls, settings):
        client = boto3.client(
            "s3",
            endpoint_url=settings.r2_endpoint_url,
            aws_access_key_id=settings.r2_access_key_id,
            aws_secret_access_key=settings.r2_secret_access_key,
            region_name="auto",
        )
        return cls(client, settings.r2_bucket_name, settings.r2_public_base)

    def upload_image(self, file: UploadFile, folder: str) -> str:
        name, _, ext = (file.filename or "upload").rpartition(".")
        if not name:
            name, ext = ext, "bin"
        key = f"{folder}/{slugify(name) or 'image'}_{int(time.time())}.{ext.lower()}"

        try:
            self.client.upload_fileobj(
                file.file,
                self.bucket,
                key,
                ExtraArgs={"ContentType": file.content_type},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {key} failed: {e}")
            raise StorageError("Upload failed") from e

        logger.info(f"Uploaded {key}")
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base}/{key}"

    def close(self):
        self.client.close()

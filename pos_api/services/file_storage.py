# pos_api/services/file_storage.py
import logging
import os
import random
import time
from typing import Optional

from fastapi import Request, UploadFile

from pos_api.config import Settings
from pos_api.errors import ValidationError

logger = logging.getLogger(__name__)

PAYMENT_PROOF_FOLDER = "payment-proofs"
PRODUCT_IMAGE_FOLDER = "products"

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}
ALLOWED_CONTENT_TYPES = {f"image/{ext}" for ext in ALLOWED_EXTENSIONS}


def _read_image(upload: UploadFile, max_size: int) -> bytes:
    """Return the upload's bytes, rejecting anything that is not a small image."""
    filename = upload.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if ext not in ALLOWED_EXTENSIONS or upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Only image files are allowed!")

    upload.file.seek(0)
    contents = upload.file.read()

    if not contents:
        raise ValidationError("Uploaded file is empty")

    if len(contents) > max_size:
        raise ValidationError(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB")

    return contents


def _unique_name(prefix: str, filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower()
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{prefix}-{unique_suffix}.{ext}"


class LocalFileStorage:
    """Stores uploads on disk below ``base_dir``, served under ``url_prefix``."""

    def __init__(self, base_dir: str, url_prefix: str = "/uploads"):
        self.base_dir = base_dir
        self.url_prefix = url_prefix.rstrip("/")
        os.makedirs(base_dir, exist_ok=True)

    def save_image(self, upload: UploadFile, folder: str, prefix: str, max_size: int) -> str:
        contents = _read_image(upload, max_size)

        target_dir = os.path.join(self.base_dir, folder)
        os.makedirs(target_dir, exist_ok=True)

        filename = _unique_name(prefix, upload.filename)
        with open(os.path.join(target_dir, filename), "wb") as fh:
            fh.write(contents)

        return f"{self.url_prefix}/{folder}/{filename}"

    def path_for(self, file_url: str) -> Optional[str]:
        if not file_url or not file_url.startswith(self.url_prefix + "/"):
            return None
        relative = file_url[len(self.url_prefix) + 1:]
        return os.path.join(self.base_dir, *relative.split("/"))

    def exists(self, file_url: str) -> bool:
        path = self.path_for(file_url)
        return path is not None and os.path.exists(path)

    def delete(self, file_url: str):
        path = self.path_for(file_url)
        if path and os.path.exists(path):
            os.remove(path)
            logger.info(f"Deleted file {file_url}")


class R2FileStorage:
    """Stores uploads in a Cloudflare R2 bucket; ``file_url`` is the object key."""

    def __init__(self, settings: Settings):
        import boto3

        self.bucket = settings.r2_bucket_name
        self.client = boto3.client(
            "s3",
            endpoint_url=f"https://{settings.r2_account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=settings.r2_access_key_id,
            aws_secret_access_key=settings.r2_secret_access_key,
            region_name="auto",
        )

    def save_image(self, upload: UploadFile, folder: str, prefix: str, max_size: int) -> str:
        contents = _read_image(upload, max_size)
        key = f"{folder}/{_unique_name(prefix, upload.filename)}"

        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=contents,
            ContentType=upload.content_type,
        )
        return key

    def exists(self, file_url: str) -> bool:
        from botocore.exceptions import ClientError

        try:
            self.client.head_object(Bucket=self.bucket, Key=file_url)
        except ClientError:
            return False
        return True

    def delete(self, file_url: str):
        from botocore.exceptions import ClientError

        try:
            self.client.delete_object(Bucket=self.bucket, Key=file_url)
            logger.info(f"Deleted R2 object {file_url}")
        except ClientError:
            logger.warning(f"Could not delete R2 object {file_url}")


def build_file_storage(settings: Settings):
    if settings.storage_backend == "r2":
        missing = [
            name for name in (
                "r2_account_id", "r2_access_key_id", "r2_secret_access_key", "r2_bucket_name"
            )
            if not getattr(settings, name)
        ]
        if missing:
            raise ValueError(f"Missing R2 settings: {', '.join(missing)}")
        return R2FileStorage(settings)

    return LocalFileStorage(settings.upload_dir)


def get_file_storage(request: Request):
    return request.app.state.file_storage

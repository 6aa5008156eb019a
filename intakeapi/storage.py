import base64
import io
import json
import logging
from functools import lru_cache
from uuid import uuid4

from minio import Minio
from werkzeug.utils import secure_filename

from intakeapi.config import config
from intakeapi.models.intake import AttachmentFailure, AttachmentResult, StoredAttachment

logger = logging.getLogger(__name__)

DEFAULT_RESUME_FILENAME = "resume.pdf"


@lru_cache()
def get_minio_client() -> Minio:
    logger.info(f"MINIO_ENDPOINT={config.MINIO_ENDPOINT}")
    logger.info(f"MINIO_ROOT_USER={config.MINIO_ROOT_USER}")
    logger.info(f"MINIO_ROOT_PASSWORD={'******' if config.MINIO_ROOT_PASSWORD else 'MISSING'}")
    return Minio(
        endpoint=config.MINIO_ENDPOINT,
        access_key=config.MINIO_ROOT_USER,
        secret_key=config.MINIO_ROOT_PASSWORD,
        secure=config.MINIO_SECURE
    )


def is_data_uri(value) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def decode_data_uri(data_uri: str) -> tuple[str, bytes]:
    """Split `data:<mime>;base64,<payload>` into (mime type, raw bytes)."""
    header, payload = data_uri.split(",", 1)
    mime_type = header.split(";")[0].split(":")[1]
    return mime_type, base64.b64decode(payload)


def public_read_policy(bucket: str) -> str:
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"AWS": ["*"]},
                "Action": ["s3:GetObject"],
                "Resource": [f"arn:aws:s3:::{bucket}/*"],
            }
        ],
    })


def ensure_bucket(minio_client: Minio, bucket: str) -> None:
    # reuse by name, create on first use
    if not minio_client.bucket_exists(bucket):
        minio_client.make_bucket(bucket)
        minio_client.set_bucket_policy(bucket, public_read_policy(bucket))
        logger.info(f"MinIO bucket '{bucket}' created with link-readable policy.")


def object_url(bucket: str, obj_name: str) -> str:
    scheme = "https" if config.MINIO_SECURE else "http"
    return f"{scheme}://{config.MINIO_ENDPOINT}/{bucket}/{obj_name}"


def save_resume(
    data_uri: str,
    filename: str | None = None,
    minio_client: Minio | None = None,
) -> AttachmentResult:
    """
    Store a data-URI encoded resume and return where it can be fetched.

    Never raises: any decode, client setup or storage problem comes back as
    an AttachmentFailure whose `error` is the string recorded in place of the
    URL. Blocking; call it from a worker thread inside request handlers.
    """
    filename = secure_filename(filename or DEFAULT_RESUME_FILENAME) or DEFAULT_RESUME_FILENAME
    bucket = config.MINIO_BUCKET

    try:
        content_type, content = decode_data_uri(data_uri)
        if minio_client is None:
            minio_client = get_minio_client()
        ensure_bucket(minio_client, bucket)

        obj_name = f"{uuid4().hex}_{filename}"
        minio_client.put_object(
            bucket_name=bucket,
            object_name=obj_name,
            data=io.BytesIO(content),
            length=len(content),
            content_type=content_type
        )
    except Exception as e:
        logger.error(f"MinIO upload failed: {e}")
        return AttachmentFailure(error=f"Error saving resume: {e}")

    url = object_url(bucket, obj_name)
    logger.info(f"Stored resume {filename} ({len(content)} bytes) at {url}")
    return StoredAttachment(
        url=url,
        object_name=obj_name,
        content_type=content_type,
        size=len(content)
    )

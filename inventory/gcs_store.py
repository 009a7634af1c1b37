"""
GCS-based image store implementation.
"""

import base64
import binascii
import json
import logging
import os
import tempfile
import time
from typing import Dict, List, Optional

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from inventory.database import ImageStore

logger = logging.getLogger(__name__)


def make_image_key(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Build the object key for an upload: `<millisecond epoch>-<filename>`.

    Two uploads of the same filename within the same millisecond get the same
    key; the later one overwrites the earlier object.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{filename}"


class MockImageStore(ImageStore):
    """In-memory image store for local development."""

    def __init__(self, bucket_name: str = "local"):
        self.bucket_name = bucket_name
        self.objects: Dict[str, bytes] = {}  # object_name -> bytes

    def list_objects(self) -> List[str]:
        """List all object names in the mock store."""
        return list(self.objects.keys())

    def put_object(self, object_name: str, data: bytes) -> None:
        """Upload (or overwrite) an object in the mock store."""
        self.objects[object_name] = data

    def get_object(self, object_name: str) -> bytes:
        """Download an object from the mock store."""
        if object_name not in self.objects:
            raise FileNotFoundError(f"Object {object_name} not found.")
        return self.objects[object_name]

    def delete_object(self, object_name: str) -> None:
        """Delete an object from the mock store."""
        if self.objects.pop(object_name, None) is None:
            logger.warning("Object %s not found in mock store; nothing to delete", object_name)


def _decode_inline_credentials(raw: str) -> Optional[dict]:
    """
    Parse credentials given inline as JSON or base64-encoded JSON.

    Returns None when `raw` is neither, i.e. it is meant as a file path.
    """
    try:
        creds_data = json.loads(raw)
    except json.JSONDecodeError:
        padded = raw.strip()
        padded += "=" * (-len(padded) % 4)
        try:
            creds_data = json.loads(base64.b64decode(padded, validate=True).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
            return None
    return creds_data if isinstance(creds_data, dict) else None


def _materialize_credentials(raw: str) -> Optional[str]:
    """
    Turn inline credentials into a file path.

    GOOGLE_APPLICATION_CREDENTIALS may hold the service-account JSON itself
    (plain or base64) instead of a path, as it does when injected from a
    secret. Returns None when there is nothing inline to write.
    """
    creds_data = _decode_inline_credentials(raw)
    if creds_data is None:
        return None
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(creds_data, f)
    logger.info("📁 Wrote inline storage credentials to %s", f.name)
    return f.name


class GcsImageStore(ImageStore):
    """GCS-based implementation of ImageStore."""

    def __init__(self, bucket_name: str, *, project: Optional[str] = None, check_bucket: bool = False):
        """Initialize GCS store with bucket name."""
        if not bucket_name:
            raise ValueError("Bucket name is required")

        try:
            creds = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            if creds and not os.path.exists(creds):
                creds_path = _materialize_credentials(creds)
                if creds_path is not None:
                    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = creds_path
            self.client = storage.Client(project=project)
            self.bucket = self.client.bucket(bucket_name)
            self.bucket_name = bucket_name
            if check_bucket and not self.bucket.exists():
                raise ValueError(f"GCS bucket {bucket_name} does not exist")
        except (GoogleCloudError, ValueError) as exc:
            raise RuntimeError("Failed to initialize GCS client") from exc
        logger.info("✅ GCS store initialized with bucket: %s", bucket_name)

    def put_object(self, object_name: str, data: bytes) -> None:
        """Upload an object to the bucket, overwriting any object with the same key."""
        try:
            self.bucket.blob(object_name).upload_from_string(data)
        except GoogleCloudError as exc:
            raise RuntimeError(f"Failed to upload object {object_name}: {exc}") from exc

    def get_object(self, object_name: str) -> bytes:
        """Download an object from the bucket."""
        try:
            return self.bucket.blob(object_name).download_as_bytes()
        except NotFound as exc:
            raise FileNotFoundError(f"Object {object_name} not found.") from exc
        except GoogleCloudError as exc:
            raise RuntimeError(f"Failed to download object {object_name}: {exc}") from exc

    def delete_object(self, object_name: str) -> None:
        """Delete an object from the bucket."""
        try:
            self.bucket.blob(object_name).delete()
        except NotFound:
            logger.warning("Object %s not found in bucket %s; nothing to delete", object_name, self.bucket_name)
        except GoogleCloudError as exc:
            raise RuntimeError(f"Failed to delete object {object_name}: {exc}") from exc

    def close(self) -> None:
        self.client.close()


def open_image_store(
    bucket_name: str,
    *,
    project: Optional[str] = None,
    debug: bool = False,
) -> ImageStore:
    """
    Pick the image store for this process.

    With DEBUG on the in-memory mock is used so the app can run locally.
    Otherwise GCS is used with whatever credentials the environment provides
    (key file, inline key, or the runtime's default service account).
    """
    if debug:
        logger.warning("⚠️  Using mock image store for local development")
        return MockImageStore(bucket_name)
    return GcsImageStore(bucket_name, project=project)

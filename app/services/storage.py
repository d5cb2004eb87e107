"""Object storage for uploaded audio: Google Cloud Storage or a local directory."""

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Protocol

from app.config import get_settings

logger = logging.getLogger("voice_signage")


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful write."""

    key: str
    url: str  # retrievable locator handed to admins
    uri: str  # locator handed to the transcription backend


class ObjectStore(Protocol):
    def save(self, key: str, data: bytes, content_type: str | None) -> StoredObject: ...


def load_gcp_credentials():
    """Service account credentials from inline JSON or a key file. None means application default."""
    settings = get_settings()
    from google.oauth2 import service_account

    if settings.GCP_SERVICE_ACCOUNT_KEY:
        return service_account.Credentials.from_service_account_info(json.loads(settings.GCP_SERVICE_ACCOUNT_KEY))
    if settings.GCP_KEY_FILE:
        return service_account.Credentials.from_service_account_file(settings.GCP_KEY_FILE)
    return None


class GCSObjectStore:
    """Uploads to a Cloud Storage bucket and hands out time-limited signed URLs."""

    def __init__(self, bucket_name: str, project_id: str | None = None, url_ttl_hours: int = 24) -> None:
        self.bucket_name = bucket_name
        self.project_id = project_id
        self.url_ttl = timedelta(hours=url_ttl_hours)
        self._bucket = None

    def _get_bucket(self):
        """Lazy-create the storage client."""
        if self._bucket is None:
            from google.cloud import storage

            client = storage.Client(project=self.project_id, credentials=load_gcp_credentials())
            self._bucket = client.bucket(self.bucket_name)
        return self._bucket

    def save(self, key: str, data: bytes, content_type: str | None) -> StoredObject:
        blob = self._get_bucket().blob(key)
        blob.upload_from_string(data, content_type=content_type or "application/octet-stream")
        signed_url = blob.generate_signed_url(version="v4", expiration=self.url_ttl, method="GET")
        logger.info("Stored %s in gs://%s (%d bytes)", key, self.bucket_name, len(data))
        return StoredObject(key=key, url=signed_url, uri=f"gs://{self.bucket_name}/{key}")


class LocalObjectStore:
    """Writes audio under a local directory. For development and tests."""

    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def save(self, key: str, data: bytes, content_type: str | None) -> StoredObject:
        file_path = self.root / key
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data)
        resolved = file_path.resolve()
        return StoredObject(key=key, url=resolved.as_uri(), uri=str(resolved))


_object_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    """Get singleton object store for the configured backend."""
    global _object_store
    if _object_store is None:
        settings = get_settings()
        if settings.STORAGE_BACKEND == "local":
            _object_store = LocalObjectStore(settings.UPLOAD_DIR)
        else:
            _object_store = GCSObjectStore(
                settings.GCS_BUCKET_NAME,
                project_id=settings.GCP_PROJECT_ID,
                url_ttl_hours=settings.SIGNED_URL_TTL_HOURS,
            )
    return _object_store

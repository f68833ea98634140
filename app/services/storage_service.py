# app/services/storage_service.py
from functools import lru_cache
from typing import Iterable, List
import logging

from supabase import create_client, Client

from app.config import settings

logger = logging.getLogger(__name__)

PUBLIC_OBJECT_MARKER = "/storage/v1/object/public/"


class SlideStorage:
    """
    Slide images/PDFs in a Supabase Storage bucket.
    Object paths are session scoped: `{session_id}/{name}`.
    """

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def upload(self, dest_path: str, data: bytes, content_type: str) -> str:
        # returns the object path inside the bucket, not a URL
        self.client.storage.from_(self.bucket).upload(dest_path, data, {
            "content-type": content_type,
            "upsert": "true",
        })
        return dest_path

    def public_url(self, path: str) -> str:
        return self.client.storage.from_(self.bucket).get_public_url(path)

    def list(self, prefix: str) -> List[str]:
        files = self.client.storage.from_(self.bucket).list(prefix) or []
        return [f"{prefix}/{f['name']}" for f in files if f.get("name")]

    def remove(self, paths: Iterable[str]) -> None:
        targets = sorted({p for p in paths if p})
        if not targets:
            return
        self.client.storage.from_(self.bucket).remove(targets)

    def path_from_url(self, url: str | None) -> str | None:
        """Reverse of public_url for objects in this bucket."""
        if not url:
            return None
        marker = f"{PUBLIC_OBJECT_MARKER}{self.bucket}/"
        idx = url.find(marker)
        if idx < 0:
            return None
        return url[idx + len(marker):].split("?", 1)[0] or None


@lru_cache
def get_slide_storage() -> SlideStorage:
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set for slide storage")
    client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    return SlideStorage(client, settings.slides_bucket)

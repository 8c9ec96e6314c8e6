"""
Blob storage for resume files.

Supabase Storage is used in production; files are uploaded with an explicit
Content-Length header and served from the bucket's public URL. Without
Supabase credentials files are written under the local uploads directory.
"""
import asyncio
import logging
import os
import re
import time
import uuid
from functools import lru_cache
from typing import Optional

import aiofiles
import aiofiles.os
import httpx

from ..config import get_settings
from ..errors import StorageFailed

logger = logging.getLogger(__name__)


class BlobStore:
    async def put(self, key: str, content: bytes, content_type: str) -> str:
        """Store content under key and return its public URL."""
        raise NotImplementedError

    async def get(self, key: str) -> bytes:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        """Delete a blob. Deleting a missing blob is not an error."""
        raise NotImplementedError

    def public_url(self, key: str) -> str:
        raise NotImplementedError


class SupabaseStorage(BlobStore):
    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str,
        timeout: float = 120.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _object_url(self, key: str) -> str:
        return f"{self.url}/storage/v1/object/{self.bucket}/{key}"

    def _headers(self, **extra) -> dict:
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        headers.update(extra)
        return headers

    def public_url(self, key: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{key}"

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        headers = self._headers(**{
            "Content-Type": content_type or "application/octet-stream",
            "Content-Length": str(len(content)),
        })

        last_error = "Unknown error"
        for attempt in range(1, self.max_retries + 1):
            try:
                async with self._client() as client:
                    response = await client.post(self._object_url(key), headers=headers, content=content)
            except httpx.TimeoutException:
                last_error = "Upload timeout"
            except httpx.HTTPError as e:
                last_error = str(e)
            else:
                if response.status_code in (200, 201):
                    return self.public_url(key)
                last_error = f"({response.status_code}): {response.text[:500] if response.text else 'Unknown error'}"
                # Client errors won't succeed on retry
                if response.status_code < 500:
                    break

            if attempt < self.max_retries:
                wait_time = self.retry_delay * 2 ** (attempt - 1)
                logger.warning(f"Supabase upload of {key} failed (attempt {attempt}): {last_error}; retrying in {wait_time}s")
                await asyncio.sleep(wait_time)

        raise StorageFailed(f"Supabase upload failed {last_error}", details={"key": key})

    async def get(self, key: str) -> bytes:
        try:
            async with self._client() as client:
                response = await client.get(self._object_url(key), headers=self._headers())
        except httpx.HTTPError as e:
            raise StorageFailed(f"Supabase download failed: {e}", details={"key": key})

        if response.status_code != 200:
            raise StorageFailed(f"Supabase download failed ({response.status_code})", details={"key": key})
        return response.content

    async def delete(self, key: str) -> None:
        try:
            async with self._client() as client:
                response = await client.delete(self._object_url(key), headers=self._headers())
        except httpx.HTTPError as e:
            raise StorageFailed(f"Supabase delete failed: {e}", details={"key": key})

        if response.status_code not in (200, 204, 404):
            raise StorageFailed(f"Supabase delete failed ({response.status_code})", details={"key": key})


class LocalStorage(BlobStore):
    """Writes blobs to a directory that the app serves as static files."""

    def __init__(self, root_dir: str, base_url: str, url_path: str = "/uploads/resumes"):
        self.root_dir = os.path.abspath(root_dir)
        self.base_url = base_url.rstrip("/")
        self.url_path = "/" + url_path.strip("/")

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root_dir, key))
        if os.path.commonpath([path, self.root_dir]) != self.root_dir:
            raise StorageFailed("Invalid storage key", details={"key": key})
        return path

    def public_url(self, key: str) -> str:
        return f"{self.base_url}{self.url_path}/{key}"

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise StorageFailed(f"Failed to save file: {e}", details={"key": key})
        return self.public_url(key)

    async def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageFailed(f"Failed to read file: {e}", details={"key": key})

    async def delete(self, key: str) -> None:
        path = self._path(key)
        if not os.path.exists(path):
            return
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise StorageFailed(f"Failed to delete file: {e}", details={"key": key})


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    base = os.path.basename(filename or "")
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[:100] or "resume"


def build_resume_key(candidate_id: str, filename: str) -> str:
    """Unique storage key: {candidate}/{timestamp_ms}_{random}_{filename}"""
    timestamp = int(time.time() * 1000)
    unique_id = uuid.uuid4().hex[:8]
    return f"{sanitize_filename(candidate_id)}/{timestamp}_{unique_id}_{sanitize_filename(filename)}"


@lru_cache()
def get_blob_store() -> BlobStore:
    settings = get_settings()
    if settings.storage_backend == "supabase":
        if settings.supabase_url and settings.supabase_service_role_key:
            return SupabaseStorage(
                settings.supabase_url,
                settings.supabase_service_role_key,
                settings.resume_bucket,
            )
        logger.warning("Supabase storage selected but not configured - falling back to local uploads")
    return LocalStorage(settings.local_storage_dir, settings.public_base_url)

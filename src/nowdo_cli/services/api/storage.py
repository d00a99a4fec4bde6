"""Object storage endpoints for profile pictures."""

from __future__ import annotations

import uuid
from pathlib import PurePosixPath

from nowdo_cli.services.api.client import APIClient, remote_operation

PROFILE_PICTURES_BUCKET = "profile-pictures"
STORAGE_PREFIX = "/storage/v1/object"


class StorageAPI:
    """Storage API client."""

    def __init__(self, client: APIClient):
        self.client = client

    def public_url(self, object_path: str) -> str:
        """Public URL of an object in the profile-pictures bucket."""
        return (
            f"{self.client.base_url}{STORAGE_PREFIX}/public/"
            f"{PROFILE_PICTURES_BUCKET}/{object_path}"
        )

    @staticmethod
    def object_path(user_id: str, filename: str) -> str:
        """Unique object path for a new picture of ``user_id``."""
        ext = PurePosixPath(filename).suffix.lstrip(".") or "jpg"
        return f"{user_id}/{user_id}-{uuid.uuid4().hex}.{ext}"

    @remote_operation("upload profile picture")
    async def upload_profile_picture(
        self,
        user_id: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload a picture and return its public URL."""
        path = self.object_path(user_id, filename)
        await self.client.post(
            f"{STORAGE_PREFIX}/{PROFILE_PICTURES_BUCKET}/{path}",
            content=content,
            headers={"Content-Type": content_type},
        )
        return self.public_url(path)

    @remote_operation("delete profile picture")
    async def delete_profile_picture(self, picture_url: str) -> None:
        """Delete a previously uploaded picture given its public URL."""
        marker = f"/{PROFILE_PICTURES_BUCKET}/"
        if marker not in picture_url:
            raise ValueError(f"Not a profile picture URL: {picture_url}")
        path = picture_url.split(marker, 1)[1]
        await self.client.delete(
            f"{STORAGE_PREFIX}/{PROFILE_PICTURES_BUCKET}",
            json={"prefixes": [path]},
        )

"""Supabase Storage bucket for sale photos."""

from dataclasses import dataclass

from sales_tracker.adapters.supabase_connection import SupabaseConnection
from sales_tracker.services.sales import PhotoStorage


@dataclass
class SupabasePhotoStorage(PhotoStorage):
    """Stores photo bytes in a private bucket."""

    connection: SupabaseConnection
    bucket: str = "sale_photos"

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        """Upload bytes to the bucket."""
        file_options = {"content-type": content_type} if content_type else None
        self._bucket().upload(path, content, file_options)

    def remove(self, paths: list[str]) -> None:
        """Remove objects from the bucket."""
        self._bucket().remove(paths)

    def create_signed_url(self, path: str, expires_in: int) -> str | None:
        """Return a signed read URL valid for `expires_in` seconds."""
        response = self._bucket().create_signed_url(path, expires_in)
        return response.get("signedURL") or response.get("signedUrl")

    def _bucket(self):  # type: ignore[no-untyped-def]
        return self.connection.client.storage.from_(self.bucket)

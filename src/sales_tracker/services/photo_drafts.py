"""Images attached to a form but not uploaded yet."""

import logging
import secrets
from dataclasses import dataclass, field

from sales_tracker.domain.sales import PhotoUpload

logger = logging.getLogger(__name__)


@dataclass
class PhotoDraft:
    """Holds pending images under preview tokens until they are released."""

    _photos: dict[str, PhotoUpload] = field(default_factory=dict)

    @property
    def live_previews(self) -> int:
        return len(self._photos)

    @property
    def tokens(self) -> list[str]:
        return list(self._photos)

    def attach(self, upload: PhotoUpload) -> str:
        """Stage an image and return its preview token."""
        token = secrets.token_urlsafe(12)
        self._photos[token] = upload
        return token

    def preview(self, token: str) -> PhotoUpload | None:
        return self._photos.get(token)

    def release(self, token: str) -> bool:
        """Drop a staged image; return False when the token is unknown."""
        return self._photos.pop(token, None) is not None

    def release_all(self) -> int:
        """Drop every staged image and return how many were held."""
        released = len(self._photos)
        self._photos.clear()
        if released:
            logger.info("Released %d staged photo(s)", released)
        return released

    def uploads(self) -> list[PhotoUpload]:
        return list(self._photos.values())

"""Lazily created Supabase client."""

import logging
from dataclasses import dataclass

from supabase import Client, create_client

logger = logging.getLogger(__name__)


class MissingConnectionSettingsError(RuntimeError):
    """Raised on first use when the Supabase URL or key is not configured."""


@dataclass
class SupabaseConnection:
    """Creates the Supabase client on first use.

    Startup never fails on missing settings; the first remote call does.
    """

    url: str
    key: str
    _client: Client | None = None

    @property
    def client(self) -> Client:
        if self._client is None:
            if not self.url or not self.key:
                raise MissingConnectionSettingsError(
                    "SUPABASE_URL and SUPABASE_ANON_KEY must be set"
                )
            logger.info("Creating Supabase client")
            self._client = create_client(self.url, self.key)
        return self._client

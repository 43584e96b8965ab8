"""Remote activity sources.

The sync engine only needs two operations from the provider: ``login()`` and
``fetch_page(offset, limit)``. ``ActivitySource`` describes that contract;
``GarminConnectSource`` implements it on top of the ``garminconnect``
library, translating library failures into this project's exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from garminconnect import (
    Garmin,
    GarminConnectAuthenticationError,
    GarminConnectConnectionError,
    GarminConnectTooManyRequestsError,
)

from garmin_cache.config.settings import GarminCredentials
from garmin_cache.constants import GARMIN_LIBRARY_LOGGERS
from garmin_cache.exceptions import AuthError, FetchError

logger = logging.getLogger(__name__)

CREDENTIALS_GUIDANCE = (
    "Garmin authentication failed. Please verify your GARMIN_USERNAME and GARMIN_PASSWORD "
    "are correct. You may also need to log in to Garmin Connect via a web browser first."
)
PROVIDER_BLOCK_GUIDANCE = (
    "Garmin Connect is temporarily blocking login requests (rate limiting or bot "
    "protection). Wait a few minutes and try again."
)


class ActivitySource(Protocol):
    """A paginated, newest-first source of activity records."""

    def login(self) -> None:
        """Authenticate with the provider.

        Raises:
            AuthError: If the provider rejects the login.
        """
        ...

    def fetch_page(self, offset: int, limit: int) -> list[dict[str, Any]]:
        """Fetch one page of activities, newest first.

        Raises:
            FetchError: If the page request fails.
        """
        ...


class GarminConnectSource:
    """ActivitySource backed by the garminconnect library.

    Library diagnostics are kept off the primary output channel: the
    library's own loggers are capped at WARNING and this adapter reports
    through the injected logger.
    """

    def __init__(
        self,
        credentials: GarminCredentials,
        client: Garmin | None = None,
        log: logging.Logger | None = None,
    ):
        """Initialize the source.

        Args:
            credentials: Account credentials.
            client: Pre-built client (tests); built from credentials when omitted.
            log: Logger for diagnostics; defaults to this module's logger.
        """
        self.credentials = credentials
        self.client = client or Garmin(credentials.username, credentials.password)
        self.log = log or logger
        for name in GARMIN_LIBRARY_LOGGERS:
            library_logger = logging.getLogger(name)
            if library_logger.level == logging.NOTSET:
                library_logger.setLevel(logging.WARNING)

    @classmethod
    def from_credentials(cls, credentials: GarminCredentials) -> GarminConnectSource:
        """Factory used by SyncService."""
        return cls(credentials)

    def login(self) -> None:
        """Log in to Garmin Connect."""
        self.log.info(f"Authenticating with Garmin Connect as {self.credentials.username}")
        try:
            self.client.login()
        except GarminConnectAuthenticationError as e:
            raise AuthError(f"{CREDENTIALS_GUIDANCE} ({e})") from e
        except (GarminConnectTooManyRequestsError, GarminConnectConnectionError) as e:
            raise AuthError(f"{PROVIDER_BLOCK_GUIDANCE} ({e})", provider_blocked=True) from e
        except Exception as e:
            # Some library versions surface a bad login as a parse failure of the login page
            message = str(e)
            if "not valid JSON" in message or "login page" in message:
                raise AuthError(f"{CREDENTIALS_GUIDANCE} ({e})") from e
            raise AuthError(f"Garmin login failed: {e}") from e
        self.log.info("Garmin authentication successful")

    def fetch_page(self, offset: int, limit: int) -> list[dict[str, Any]]:
        """Fetch activities ``offset`` to ``offset + limit`` (newest first)."""
        self.log.debug(f"Fetching activities offset={offset} limit={limit}")
        try:
            activities = self.client.get_activities(offset, limit)
        except Exception as e:
            raise FetchError(f"Failed to fetch activities: {e}", offset=offset, limit=limit) from e
        return list(activities or [])

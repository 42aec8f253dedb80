"""Pre-flight reachability probe run before any mutating call."""

import os

from aws_lambda_powertools import Logger
import requests

from core.models.errors import NetworkUnavailableError
from core.utils.constants import (
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    ENV_CONNECTIVITY_PROBE_TIMEOUT,
    ENV_CONNECTIVITY_PROBE_URL,
    ENV_STORAGE_PUBLIC_BASE_URL,
)

logger = Logger(UTC=True)


class ConnectivityProbe:
    """HEAD request against the storage backend.

    Any transport error or 5xx answer means the backend is unreachable.
    A probe without a URL configured always passes.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url or os.getenv(ENV_CONNECTIVITY_PROBE_URL) or os.getenv(ENV_STORAGE_PUBLIC_BASE_URL)
        self.timeout = timeout or float(
            os.getenv(ENV_CONNECTIVITY_PROBE_TIMEOUT, DEFAULT_PROBE_TIMEOUT_SECONDS)
        )
        self._session = session or requests.Session()

    def check(self) -> bool:
        if not self.url:
            logger.debug("No probe URL configured, skipping reachability check")
            return True

        try:
            response = self._session.head(self.url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            logger.warning(
                "Reachability probe failed",
                extra={"url": self.url, "error": str(exc)},
            )
            return False

        if response.status_code >= 500:
            logger.warning(
                "Reachability probe got server error",
                extra={"url": self.url, "status": response.status_code},
            )
            return False

        return True

    def ensure_reachable(self) -> None:
        if not self.check():
            raise NetworkUnavailableError(
                message="Storage service is unreachable. Check your connection and try again.",
                details={"url": self.url},
            )

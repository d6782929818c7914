"""Synchronous HTTP client used by the probe CLI."""

import logging
import time
from typing import Any, Callable, Optional

import httpx

from probes.settings import ProbeSettings

logger = logging.getLogger(__name__)


class ProbeError(Exception):
    """The API could not be reached (after retries)."""


class ProbeConfigError(Exception):
    """The probe is missing configuration it needs."""


class LoginFailed(Exception):
    """The API answered the login request with a non-200 status."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"login failed with HTTP {response.status_code}")


class ApiProbe:
    """Thin wrapper over httpx.Client with bearer auth and transport retries.

    Usage:
        with ApiProbe(settings) as probe:
            session = probe.login()
            response = probe.request("POST", "/api/devices", token=session["token"], json={...})
    """

    def __init__(
        self,
        settings: ProbeSettings,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=settings.BASE_URL.rstrip("/"),
            timeout=settings.TIMEOUT,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "ApiProbe":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request, retrying transport errors up to RETRIES attempts.

        Raises:
            ProbeError: Every attempt failed at the transport level
        """
        headers = {"Authorization": f"Bearer {token}"} if token else None
        attempts = max(1, self.settings.RETRIES)
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                return self._client.request(method.upper(), path, headers=headers, json=json)
            except httpx.TransportError as e:
                last_error = e
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s",
                    method.upper(),
                    path,
                    attempt,
                    attempts,
                    type(e).__name__,
                )
                if attempt < attempts and self.settings.RETRY_DELAY > 0:
                    self._sleep(self.settings.RETRY_DELAY)

        raise ProbeError(
            f"{method.upper()} {self.settings.BASE_URL}{path} unreachable: {type(last_error).__name__}"
        )

    def login(self) -> dict[str, Any]:
        """Log in with PROBE_USERNAME / PROBE_PASSWORD.

        Returns:
            The login response body ({token, token_type, user})

        Raises:
            ProbeConfigError: Credentials are not configured
            LoginFailed: The API rejected the credentials
            ProbeError: Transport failure
        """
        if not self.settings.has_credentials:
            raise ProbeConfigError("PROBE_USERNAME and PROBE_PASSWORD must be set")

        response = self.request(
            "POST",
            "/api/auth/login",
            json={"username": self.settings.USERNAME, "password": self.settings.PASSWORD},
        )
        if response.status_code != 200:
            raise LoginFailed(response)
        return response.json()

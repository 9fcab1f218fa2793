"""Shared configuration classes for solidcli.

This module defines the connection settings used by the HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_API_URL = "https://api.solidnumber.com"


@dataclass
class ServerConfig:
    """Configuration for connecting to the Solid# API.

    Attributes:
        api_url: Base URL of the API (e.g., "https://api.solidnumber.com").
        token: Bearer token (access token or CLI API key), if any.
        company_id: Tenant sent in the X-Company-ID header, if known.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    api_url: str = DEFAULT_API_URL
    token: str | None = None
    company_id: int | None = None
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize API URL."""
        self.api_url = self.api_url.rstrip("/")

    @property
    def headers(self) -> dict[str, str]:
        """Default headers for every request.

        Returns:
            Content type plus the auth and tenant headers when set.
        """
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.company_id:
            headers["X-Company-ID"] = str(self.company_id)
        return headers

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS.

        Returns:
            True if the API uses HTTPS.
        """
        return self.api_url.startswith("https://")

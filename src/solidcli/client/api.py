"""HTTP client for the Solid# API.

This module provides:
- HTTPClient: HTTP client for communicating with the server
- Page, knowledge-base and catalog operations used by pull/push
- Auth, company, health, vibe and agent-chat wrappers used by the CLI

All calls are scoped to the tenant in ServerConfig.company_id via the
X-Company-ID header. Responses are validated with the pydantic models in
solidcli.client.schemas.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from solidcli.client.retry import DEFAULT_MAX_RETRIES, retry_with_backoff
from solidcli.client.schemas import (
    ChatReply,
    CompanyInfo,
    CompanyInfoResponse,
    CompanyList,
    CreatedResource,
    HealthFull,
    HealthMcp,
    HealthQuick,
    KbEntry,
    KbSearchResponse,
    LoginResponse,
    Page,
    PageList,
    PageSummary,
    Product,
    ProductList,
    Service,
    ServiceList,
    SwitchCompanyResponse,
    UserInfo,
    VibeAnalysis,
    VibeApplyResult,
)
from solidcli.core.config import ServerConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Authentication failed or session expired."""


class NotFoundError(APIError):
    """Resource not found."""


class ConnectionFailedError(APIError):
    """The server could not be reached."""


class MalformedResponseError(APIError):
    """The server answered with a payload that does not match its schema."""


def _error_detail(response: httpx.Response, default: str) -> str:
    """Extract the server's error message from a response body."""
    try:
        body = response.json()
    except json.JSONDecodeError:
        return default
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or default)
    return default


class HTTPClient:
    """HTTP client for the Solid# API."""

    def __init__(
        self,
        config: ServerConfig,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            config: Server connection settings (URL, token, tenant).
            max_retries: Retry attempts for idempotent reads.
        """
        self._config = config
        self._max_retries = max_retries
        self._client = httpx.Client(
            base_url=config.api_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers=config.headers,
        )

    @property
    def company_id(self) -> int | None:
        """Tenant this client is scoped to."""
        return self._config.company_id

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === Transport ===

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request, converting transport failures to APIError."""
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ConnectionFailedError(f"Request to {path} timed out") from e
        except httpx.RequestError as e:
            raise ConnectionFailedError(
                f"Could not connect to {self._config.api_url}: {e}"
            ) from e
        logger.debug(f"{method} {path} -> {response.status_code}")
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code == 401:
            raise AuthenticationError(
                _error_detail(response, "Invalid or expired token"), 401
            )
        if response.status_code == 404:
            raise NotFoundError(_error_detail(response, "Resource not found"), 404)
        if response.status_code >= 400:
            raise APIError(
                _error_detail(response, "Unknown error"), response.status_code
            )
        return response

    def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET with retry on connection failures."""
        return retry_with_backoff(
            lambda: self._send("GET", path, params=params),
            retry_on=(ConnectionFailedError,),
            max_retries=self._max_retries,
            description=f"GET {path}",
        )

    @staticmethod
    def _parse(model: type[ModelT], response: httpx.Response) -> ModelT:
        """Validate a response body against a schema."""
        try:
            return model.model_validate(response.json())
        except (json.JSONDecodeError, ValidationError) as e:
            raise MalformedResponseError(
                f"Unexpected response from {response.request.url.path}: {e}",
                response.status_code,
            ) from e

    def _require_company(self) -> int:
        if not self._config.company_id:
            raise APIError("No company selected. Run `solid auth login` first.")
        return self._config.company_id

    # === Auth ===

    def login(self, email: str, password: str) -> LoginResponse:
        """Log in with email and password.

        Returns:
            Tokens and the authenticated user.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        response = self._send(
            "POST", "/api/v1/auth/login", json={"email": email, "password": password}
        )
        return self._parse(LoginResponse, response)

    def auth_me(self) -> UserInfo:
        """Get the user the current token belongs to."""
        return self._parse(UserInfo, self._get("/api/v1/auth/me"))

    # === Health ===

    def health_check(self) -> bool:
        """Check if the server is reachable and healthy.

        Returns:
            True if the quick health check succeeds.
        """
        try:
            return self.health_quick().status == "healthy"
        except APIError:
            return False

    def health_quick(self) -> HealthQuick:
        return self._parse(HealthQuick, self._get("/api/v1/healthcheck/quick"))

    def health_full(self) -> HealthFull:
        return self._parse(HealthFull, self._get("/api/v1/healthcheck/"))

    def health_mcp(self) -> HealthMcp:
        return self._parse(HealthMcp, self._get("/api/v1/healthcheck/mcp"))

    # === Company ===

    def get_company_info(self) -> CompanyInfo:
        """Get the current company's profile and website settings."""
        response = self._send(
            "POST",
            "/api/v1/rpc/Company/info",
            json={"query": {"id": self._config.company_id}},
        )
        return self._parse(CompanyInfoResponse, response).company

    def update_company_settings(self, settings: dict[str, Any]) -> None:
        """Replace the company's website settings.

        Args:
            settings: The complete website_settings object.
        """
        company_id = self._require_company()
        self._send(
            "PATCH",
            f"/api/v1/companies/{company_id}",
            json={"website_settings": settings},
        )

    def list_companies(self) -> CompanyList:
        """List companies linked to the current user."""
        return self._parse(CompanyList, self._get("/api/v1/cli/companies/"))

    def switch_company(self, company_id: int) -> SwitchCompanyResponse:
        """Switch the session to another company.

        Returns:
            New tokens scoped to the target company.
        """
        response = self._send("POST", f"/api/v1/cli/companies/{company_id}/switch")
        return self._parse(SwitchCompanyResponse, response)

    # === CMS pages ===

    def list_pages(self, page_type: str | None = None) -> list[PageSummary]:
        """List CMS pages.

        Args:
            page_type: Optional filter (website, landing, blog, booking).
        """
        params = {"page_type": page_type} if page_type else None
        return self._parse(PageList, self._get("/api/v1/cms/pages", params)).pages

    def get_page(self, page_id: int) -> Page:
        """Get a page with its full layout.

        Raises:
            NotFoundError: If the page does not exist.
        """
        return self._parse(Page, self._get(f"/api/v1/cms/pages/{page_id}"))

    def create_page(self, fields: dict[str, Any]) -> CreatedResource:
        """Create a page.

        Returns:
            The new page's id and slug.
        """
        response = self._send("POST", "/api/v1/cms/pages", json=fields)
        return self._parse(CreatedResource, response)

    def update_page(self, page_id: int, fields: dict[str, Any]) -> None:
        """Patch a page with the given fields only."""
        self._send("PATCH", f"/api/v1/cms/pages/{page_id}", json=fields)

    def publish_page(self, page_id: int) -> None:
        self._send("POST", f"/api/v1/cms/pages/{page_id}/publish")

    def unpublish_page(self, page_id: int) -> None:
        self._send("POST", f"/api/v1/cms/pages/{page_id}/unpublish")

    # === Knowledge base ===

    def search_kb(self, query: str, limit: int = 20) -> list[KbEntry]:
        """Search the company knowledge base.

        Args:
            query: Search text; "*" matches everything.
            limit: Maximum number of entries.
        """
        response = self._get(
            "/api/v1/kb/company", {"search": query, "limit": limit}
        )
        return self._parse(KbSearchResponse, response).results

    def create_kb(self, fields: dict[str, Any]) -> CreatedResource:
        """Create a KB entry from title, content and category."""
        response = self._send("POST", "/api/v1/kb/company", json=fields)
        return self._parse(CreatedResource, response)

    def update_kb(self, entry_id: int, fields: dict[str, Any]) -> None:
        self._send("PUT", f"/api/v1/kb/company/{entry_id}", json=fields)

    def delete_kb(self, entry_id: int) -> None:
        self._send("DELETE", f"/api/v1/kb/company/{entry_id}")

    # === Catalog ===

    def list_services(self) -> list[Service]:
        """List the company's public services."""
        response = self._get(
            "/api/v1/cms/public/services", {"company_id": self._require_company()}
        )
        return self._parse(ServiceList, response).items

    def list_products(self) -> list[Product]:
        """List the company's public products."""
        response = self._get(
            "/api/v1/cms/public/products", {"company_id": self._require_company()}
        )
        return self._parse(ProductList, response).items

    # === Vibe and agents ===

    def vibe_analyze(self, prompt: str) -> VibeAnalysis:
        """Interpret a natural-language request without applying it."""
        response = self._send("POST", "/api/v1/vibe/analyze", json={"prompt": prompt})
        return self._parse(VibeAnalysis, response)

    def vibe_apply(self, preview_id: str) -> VibeApplyResult:
        """Apply a previously analyzed request."""
        response = self._send(
            "POST",
            "/api/v1/vibe/apply",
            json={"preview_id": preview_id, "confirm": True},
        )
        return self._parse(VibeApplyResult, response)

    def agent_chat(self, message: str, agent: str = "sarah") -> ChatReply:
        """Send a message to one of the company's AI agents."""
        response = self._send(
            "POST", "/api/v1/chat/", json={"message": message, "agent": agent}
        )
        return self._parse(ChatReply, response)

"""Pydantic schemas for Solid# API responses.

Every payload the client returns is validated against one of these models,
so callers never check for optional keys of raw JSON. Unknown keys are ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Prices come back as ints, floats or formatted strings depending on the catalog.
Price = int | float | str | None

# === Auth schemas ===


class UserInfo(BaseModel):
    """Authenticated user."""

    id: int
    email: str
    company_id: int


class LoginResponse(BaseModel):
    """Response for password login."""

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    user: UserInfo


# === Company schemas ===


class CompanyInfo(BaseModel):
    """Company profile, including the website settings pushed back by `solid push`."""

    id: int | None = None
    name: str = ""
    slug: str | None = None
    industry: str | None = None
    tier: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    location: str | None = None
    business_hours: Any = None
    website_settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("website_settings", mode="before")
    @classmethod
    def _null_settings(cls, value: Any) -> Any:
        return value or {}


class CompanyInfoResponse(BaseModel):
    """Envelope of the Company/info RPC."""

    status: str | None = None
    company: CompanyInfo


class CompanyMembership(BaseModel):
    """A company the user can switch to."""

    id: int
    name: str
    role: str = ""
    is_active: bool = True


class CompanyList(BaseModel):
    """Companies linked to the current user."""

    companies: list[CompanyMembership] = Field(default_factory=list)
    active_company_id: int | None = None
    count: int = 0


class CompanyRef(BaseModel):
    """Minimal company reference."""

    id: int
    name: str = ""


class SwitchCompanyResponse(BaseModel):
    """Fresh tokens scoped to the newly selected company."""

    company: CompanyRef
    role: str = ""
    access_token: str
    refresh_token: str | None = None
    expires_in: int = 3600


# === CMS page schemas ===


class PageSummary(BaseModel):
    """Page as returned by the list endpoint."""

    id: int
    title: str | None = None
    slug: str | None = None
    page_type: str | None = None
    is_published: bool | None = None


class Page(PageSummary):
    """Full page detail including its layout."""

    is_landing_page: bool | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    layout_json: Any = None
    updated_at: str | None = None


class PageList(BaseModel):
    """Response of the page list endpoint."""

    pages: list[PageSummary] = Field(default_factory=list)
    total: int = 0


class CreatedResource(BaseModel):
    """Identity of a resource created by a POST."""

    id: int
    slug: str | None = None


# === Knowledge base schemas ===


class KbEntry(BaseModel):
    """Knowledge-base entry."""

    id: int
    title: str | None = None
    content: str | None = None
    category: str | None = None


class KbSearchResponse(BaseModel):
    """KB search results; the server names the list `entries` or `items`."""

    entries: list[KbEntry] | None = None
    items: list[KbEntry] | None = None
    total: int = 0

    @property
    def results(self) -> list[KbEntry]:
        """Entries regardless of which key the server used."""
        return self.entries or self.items or []


# === Catalog schemas ===


class Service(BaseModel):
    """Service catalog item."""

    id: int
    title: str | None = None
    slug: str | None = None
    subtitle: str | None = None
    description: str | None = None
    category: str | None = None
    subcategory: str | None = None
    price: Price = None
    currency: str | None = None
    duration_minutes: int | None = None
    requires_on_site: bool | None = None


class ServiceList(BaseModel):
    """Public services listing."""

    items: list[Service] = Field(default_factory=list)
    total: int = 0


class Product(BaseModel):
    """Product catalog item."""

    id: int
    name: str | None = None
    description: str | None = None
    category: str | None = None
    product_type: str | None = None
    price: Price = None
    image_url: str | None = None
    is_featured: bool | None = None
    in_stock: bool | None = None
    tags: list[Any] | None = None


class ProductList(BaseModel):
    """Public products listing."""

    items: list[Product] = Field(default_factory=list)
    total: int = 0


# === Vibe / agent schemas ===


class VibeIntent(BaseModel):
    action: str | None = None
    entity_type: str | None = None


class SafetyCheck(BaseModel):
    passed: bool = True
    blocked: bool = False
    message: str | None = None


class VibeAnalysis(BaseModel):
    """Parsed natural-language request, with a preview to apply."""

    intent: VibeIntent = Field(default_factory=VibeIntent)
    parsed: dict[str, Any] = Field(default_factory=dict)
    safety_check: SafetyCheck = Field(default_factory=SafetyCheck)
    preview_id: str | None = None


class VibeApplyResult(BaseModel):
    success: bool = False
    message: str = ""
    entity_id: int | None = None


class ChatReply(BaseModel):
    response: str


# === Health schemas ===


class HealthQuick(BaseModel):
    status: str
    timestamp: str | None = None


class HealthLayer(BaseModel):
    status: str


class HealthSummary(BaseModel):
    healthy_layers: int = 0
    total_layers: int = 0


class HealthFull(BaseModel):
    status: str
    layers: dict[str, HealthLayer] = Field(default_factory=dict)
    summary: HealthSummary = Field(default_factory=HealthSummary)


class McpAgents(BaseModel):
    total_agents: int = 0


class HealthMcp(BaseModel):
    status: str
    mcp_enabled: bool = False
    agents: McpAgents = Field(default_factory=McpAgents)

from __future__ import annotations

"""Domain registrar tools (``backends.domains``)."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..schemas.domain import DomainResource, ResourceCategory, ToolName
from .backends import DelegatingTool
from .base import NoArgs, ToolArgs, ToolContext
from .gated import ProvisioningTool


class SearchDomainsArgs(ToolArgs):
    keyword: str = Field(min_length=1, description="Keyword or brand name to search for")
    tlds: List[str] = Field(default_factory=lambda: ["com", "io", "co", "app", "dev"], description="TLDs to check")


class DomainArgs(ToolArgs):
    domain: str = Field(min_length=3, description="Fully qualified domain name, e.g. example.com")


class RegisterDomainArgs(DomainArgs):
    years: int = Field(default=1, ge=1, le=10, description="Registration period in years")
    project_id: Optional[str] = Field(default=None, description="Project to link the domain to")


class DnsRecord(BaseModel):
    type: str = Field(description="Record type: A, AAAA, CNAME, MX, TXT")
    host: str = Field(description="Host name, '@' for the apex")
    value: str = Field(description="Record value")
    ttl: int = Field(default=1800, ge=60)


class SetDnsArgs(DomainArgs):
    records: List[DnsRecord] = Field(min_length=1, description="Complete set of records for the domain")


async def _link_domain(ctx: ToolContext, project_id: str, data: Dict[str, Any], args: Any) -> None:
    registered = datetime.now(timezone.utc)
    resource = DomainResource(
        name=args.domain, registered_at=registered, expires_at=registered + timedelta(days=365 * args.years)
    )
    await ctx.deps.projects.link_domain(project_id, resource)


def domain_tools() -> List[DelegatingTool]:
    group = "domains"
    return [
        DelegatingTool(
            ToolName.search_domains,
            "Search for available domain names for a keyword across several TLDs",
            SearchDomainsArgs,
            group,
        ),
        DelegatingTool(ToolName.get_domain_pricing, "Check availability and pricing for a specific domain", DomainArgs, group),
        ProvisioningTool(
            ToolName.register_domain,
            "Register a domain for a project. Costs real money; REQUIRES HUMAN APPROVAL unless domains are approved for the project.",
            RegisterDomainArgs,
            group,
            category=ResourceCategory.domain,
            local_fields=frozenset({"project_id"}),
            prompt=lambda a: (
                f"I'd like to register **{a.domain}** for {a.years} year(s). This will cost real money. "
                "Do you approve this domain registration?"
            ),
            done=lambda a: f"Successfully registered {a.domain}!",
            link=_link_domain,
        ),
        DelegatingTool(ToolName.list_domains, "List domains owned by the account", NoArgs, group),
        DelegatingTool(ToolName.get_domain_info, "Get registration details and status for a domain", DomainArgs, group),
        DelegatingTool(ToolName.get_dns_records, "Get the DNS records of a domain", DomainArgs, group),
        DelegatingTool(ToolName.set_dns_records, "Replace the DNS records of a domain", SetDnsArgs, group),
    ]

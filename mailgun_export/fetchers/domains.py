"""Domains fetcher with per-domain enrichment."""

from __future__ import annotations

from typing import Any

from ..client.urls import path_segment
from ..core.types import ResourceType
from ..observability.logger import get_logger, log_context
from ..processors.domains import (
    mask_password,
    process_domain,
    process_ip_allowlist,
    process_smtp_credential,
    summarize_domains,
)
from .base import BaseFetcher, log_failures, settle

logger = get_logger(__name__)

ENRICHMENTS = ["details", "tracking", "dns", "smtp_credentials", "ip_allowlist"]


class DomainsFetcher(BaseFetcher):
    """Fetches account domains and their settings."""

    resource = ResourceType.DOMAINS

    def _domain_path(self, name: str, *parts: str) -> str:
        return "/".join([self.ctx.base_url, "domains", path_segment(name), *parts])

    async def fetch_domains(self) -> list[dict[str, Any]]:
        raw = await self.paginator.fetch_all(f"{self.ctx.base_url}/domains")
        domains = [process_domain(d) for d in raw]
        logger.info(f"Fetched {len(domains)} domains")
        return domains

    async def fetch_domain_details(self, name: str) -> dict[str, Any]:
        body = await self.requester.fetch(self._domain_path(name))
        return process_domain(body.get("domain") or body)

    async def fetch_domain_tracking(self, name: str) -> dict[str, Any]:
        body = await self.requester.fetch(self._domain_path(name, "tracking"))
        return body.get("tracking") or body

    async def fetch_domain_dns(self, name: str) -> dict[str, Any]:
        """DNS records and verification state (GET /domains/<name>/verify)."""
        body = await self.requester.fetch(self._domain_path(name, "verify"))
        if isinstance(body.get("domain"), dict):
            body = {**body, "domain": mask_password(body["domain"])}
        return body

    async def fetch_smtp_credentials(self, name: str) -> list[dict[str, Any]]:
        raw = await self.paginator.fetch_all(self.ctx.domain_url(name, "credentials"))
        return [process_smtp_credential(c) for c in raw]

    async def fetch_ip_allowlist(self, name: str) -> list[dict[str, Any]]:
        raw = await self.paginator.fetch_all(self.ctx.domain_url(name, "ips"))
        return [process_ip_allowlist(ip) for ip in raw]

    async def enrich_domain(self, domain: dict[str, Any]) -> dict[str, Any]:
        name = domain["name"]
        with log_context(domain=name):
            outcomes = await settle(
                self.fetch_domain_details(name),
                self.fetch_domain_tracking(name),
                self.fetch_domain_dns(name),
                self.fetch_smtp_credentials(name),
                self.fetch_ip_allowlist(name),
            )
            log_failures(f"Domain {name}", outcomes, ENRICHMENTS)

        details, tracking, dns, credentials, ips = outcomes
        return {
            **domain,
            "details": details.value_or(None),
            "tracking_settings": tracking.value_or(None),
            "dns": dns.value_or(None),
            "smtp_credentials": credentials.value_or([]),
            "ip_allowlist": ips.value_or([]),
        }

    async def fetch_all_domain_data(self) -> list[dict[str, Any]]:
        """Every domain enriched with details, tracking, DNS, credentials and IPs."""
        domains = await self.fetch_domains()
        enriched = []
        for domain in domains:
            enriched.append(await self.enrich_domain(domain))
        return enriched

    async def fetch_for_export(self, **options: Any) -> list[dict[str, Any]]:
        return await self.fetch_all_domain_data()

    def summarize(self, data: Any) -> dict[str, Any]:
        return summarize_domains(data)

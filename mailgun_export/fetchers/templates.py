"""Templates fetcher (v4 API)."""

from __future__ import annotations

from typing import Any

from ..client.urls import path_segment
from ..core.types import ResourceType
from ..observability.logger import get_logger, log_context
from ..processors.templates import (
    process_template,
    process_template_details,
    process_template_version,
    summarize_templates,
)
from .base import BaseFetcher, log_failures, settle

logger = get_logger(__name__)


def _unwrap_versions(item: Any) -> list[Any]:
    """Version listings arrive as {"template": {"versions": [...]}} pages."""
    nested = (item.get("template") or {}).get("versions") if isinstance(item, dict) else None
    return nested if isinstance(nested, list) else [item]


class TemplatesFetcher(BaseFetcher):
    resource = ResourceType.TEMPLATES

    def _template_url(self, name: str, *parts: str, domain: str | None = None) -> str:
        return self.ctx.domain_url(domain, "templates", path_segment(name), *parts, v4=True)

    async def fetch_templates(self, domain: str | None = None) -> list[dict[str, Any]]:
        raw = await self.paginator.fetch_all(self.ctx.domain_url(domain, "templates", v4=True))
        templates = [process_template(t) for t in raw]
        logger.info(f"Fetched {len(templates)} templates")
        return templates

    async def fetch_template_details(self, name: str, domain: str | None = None) -> dict[str, Any]:
        body = await self.requester.fetch(self._template_url(name, domain=domain))
        return process_template_details(body.get("template") or body)

    async def fetch_template_versions(self, name: str, domain: str | None = None) -> list[dict[str, Any]]:
        versions = await self.paginator.fetch_all(
            self._template_url(name, "versions", domain=domain),
            unwrap=_unwrap_versions,
        )
        return [process_template_version(v) for v in versions]

    async def fetch_template_version(self, name: str, tag: str, domain: str | None = None) -> dict[str, Any]:
        body = await self.requester.fetch(
            self._template_url(name, "versions", path_segment(tag), domain=domain)
        )
        template = body.get("template") or body
        # The v4 API nests the version under template.version
        version = template.get("version")
        return process_template_version(version if isinstance(version, dict) else template)

    async def _versions_with_content(
        self,
        name: str,
        versions: list[dict[str, Any]],
        domain: str | None,
    ) -> list[dict[str, Any]]:
        tags = [v.get("tag") for v in versions]
        outcomes = await settle(*(self.fetch_template_version(name, tag, domain) for tag in tags))

        result = []
        for stub, outcome in zip(versions, outcomes):
            if outcome.ok:
                result.append(outcome.value)
            else:
                logger.warning(
                    f"Version {stub.get('tag')} of {name} failed: {outcome.error}",
                    extra={"template": name, "tag": stub.get("tag")},
                )
                result.append({**stub, "error": str(outcome.error)})
        return result

    async def fetch_all_templates_with_versions(self, domain: str | None = None) -> list[dict[str, Any]]:
        """Every template with details and full content of every version.

        A version whose content cannot be fetched keeps its listing stub
        plus an `error` message.
        """
        templates = await self.fetch_templates(domain)
        enriched = []
        for template in templates:
            name = template["name"]
            with log_context(operation=f"template:{name}"):
                details, versions = await settle(
                    self.fetch_template_details(name, domain),
                    self.fetch_template_versions(name, domain),
                )
                log_failures(f"Template {name}", [details, versions], ["details", "versions"])
                with_content = (
                    await self._versions_with_content(name, versions.value, domain) if versions.ok else []
                )
            enriched.append({
                **template,
                "details": details.value_or(None),
                "versions": with_content,
                "version_count": len(with_content),
            })
        return enriched

    async def fetch_for_export(self, **options: Any) -> list[dict[str, Any]]:
        return await self.fetch_all_templates_with_versions(options.get("domain"))

    def summarize(self, data: Any) -> dict[str, Any]:
        return summarize_templates(data)

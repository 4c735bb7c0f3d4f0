"""Export pipeline orchestrator.

Pipeline flow:
1. Build one RateGate, one RetryingRequester and one Paginator for the run
2. Fetch each requested resource type in turn
3. Write JSON/CSV files for each resource
4. Record a per-resource result; a failure in one resource never stops
   the others
5. Write the summary report
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiohttp

from .client.paginator import Paginator
from .client.requester import RetryingRequester
from .config.settings import Settings
from .core.types import ExportFormat, ExportStatus, ResourceExportResult, ResourceType
from .fetchers import FETCHERS, BaseFetcher, FetchContext
from .fetchers.domains import DomainsFetcher
from .observability.logger import get_logger, log_context
from .observability.metrics import ExportMetrics, MetricsCollector
from .rate_limit.gate import RateGate
from .storage.file_exporter import FileExporter

logger = get_logger(__name__)

ALL_RESOURCES = list(ResourceType)


@dataclass
class ExportRunResult:
    """Outcome of a full export run."""

    results: dict[ResourceType, ResourceExportResult]
    summary_path: Path | None = None
    metrics: ExportMetrics | None = None

    @property
    def total_records(self) -> int:
        return sum(r.record_count for r in self.results.values())

    @property
    def total_files(self) -> int:
        return sum(len(r.files) for r in self.results.values())

    @property
    def succeeded(self) -> list[ResourceType]:
        return [k for k, r in self.results.items() if r.ok]

    @property
    def failed(self) -> list[ResourceType]:
        return [k for k, r in self.results.items() if not r.ok]


@dataclass
class ExportPipeline:
    """Mailgun export pipeline.

    Usage:
        async with ExportPipeline(get_settings()) as pipeline:
            run = await pipeline.run([ResourceType.EVENTS], ExportFormat.BOTH)
    """

    settings: Settings
    metrics: MetricsCollector = field(default_factory=MetricsCollector)
    session: aiohttp.ClientSession | None = None
    fetcher_classes: dict[ResourceType, type[BaseFetcher]] = field(
        default_factory=lambda: dict(FETCHERS)
    )

    # Components (initialized lazily)
    _gate: RateGate | None = field(default=None, init=False, repr=False)
    _requester: RetryingRequester | None = field(default=None, init=False, repr=False)
    _paginator: Paginator | None = field(default=None, init=False, repr=False)
    _exporter: FileExporter | None = field(default=None, init=False, repr=False)

    @property
    def gate(self) -> RateGate:
        if self._gate is None:
            self._gate = RateGate(
                requests_per_minute=self.settings.rate_limit,
                max_concurrency=self.settings.max_concurrency,
            )
        return self._gate

    @property
    def requester(self) -> RetryingRequester:
        if self._requester is None:
            self._requester = RetryingRequester(
                self.gate,
                self.settings.mailgun_api_key or "",
                timeout=self.settings.request_timeout,
                max_retries=self.settings.max_retries,
                base_delay=self.settings.retry_base_delay,
                session=self.session,
            )
        return self._requester

    @property
    def paginator(self) -> Paginator:
        if self._paginator is None:
            self._paginator = Paginator(self.requester)
        return self._paginator

    @property
    def exporter(self) -> FileExporter:
        if self._exporter is None:
            self._exporter = FileExporter(self.settings.output_dir)
        return self._exporter

    def context(self, domain: str | None = None) -> FetchContext:
        return FetchContext(
            requester=self.requester,
            paginator=self.paginator,
            base_url=self.settings.base_url,
            base_url_v4=self.settings.base_url_v4,
            domain=domain or self.settings.mailgun_domain,
            date_from=self.settings.date_from,
            date_to=self.settings.date_to,
        )

    def fetcher(self, resource: ResourceType, domain: str | None = None) -> BaseFetcher:
        return self.fetcher_classes[resource](self.context(domain))

    async def close(self) -> None:
        if self._requester is not None:
            await self._requester.close()

    async def __aenter__(self) -> "ExportPipeline":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def export_resource(
        self,
        resource: ResourceType,
        fmt: ExportFormat,
        timestamp: str,
        domain: str | None = None,
        **options: Any,
    ) -> ResourceExportResult:
        """Fetch and write one resource type. Errors are recorded, not raised."""
        result = ResourceExportResult(resource=resource)
        start = time.monotonic()

        with log_context(resource=resource.value, domain=domain or self.settings.mailgun_domain):
            try:
                with self.metrics.resource(resource.value) as m:
                    fetcher = self.fetcher(resource, domain)
                    data = await fetcher.fetch_for_export(domain=domain, **options)
                    saved = self.exporter.export(data, resource.value, fmt, timestamp)

                    result.record_count = fetcher.record_count(data)
                    result.files = saved.files
                    result.summary = fetcher.summarize(data)
                    m.record_count = result.record_count

                logger.info(
                    f"{resource.value} exported",
                    extra={"records": result.record_count, "files": len(result.files)},
                )
            except Exception as e:
                result.status = ExportStatus.FAILED
                result.record_count = 0
                result.files = []
                result.errors.append(str(e))
                logger.error(
                    f"Failed to export {resource.value}: {e}",
                    extra={"error_type": type(e).__name__},
                )

        result.duration_seconds = time.monotonic() - start
        return result

    async def run(
        self,
        resources: list[ResourceType] | None = None,
        fmt: ExportFormat | str | None = None,
        domain: str | None = None,
        options: dict[ResourceType, dict[str, Any]] | None = None,
        write_summary: bool = True,
    ) -> ExportRunResult:
        """Export the requested resource types sequentially.

        Args:
            resources: Resource types to export (default: all)
            fmt: Output format (default: settings.export_format)
            domain: Override the configured default domain
            options: Per-resource keyword options passed to the fetcher
            write_summary: Write the summary report file

        Raises:
            ConfigurationError: API key or domain missing
        """
        self.settings.require_credentials()

        resources = resources or ALL_RESOURCES
        fmt = ExportFormat(fmt or self.settings.export_format)
        options = options or {}
        timestamp = self.exporter.make_timestamp()
        results: dict[ResourceType, ResourceExportResult] = {}

        logger.info(
            "Starting export",
            extra={"resources": [r.value for r in resources], "format": fmt.value},
        )

        with self.metrics.run() as run_metrics:
            for resource in resources:
                results[resource] = await self.export_resource(
                    resource, fmt, timestamp, domain=domain, **options.get(resource, {})
                )

            stats = self.requester.stats
            run_metrics.record_requests(stats.requests, stats.retries, stats.rate_limited, stats.failures)

        summary_path = None
        if write_summary:
            summary_path = self.exporter.create_summary_report(
                {r.value: res.to_dict() for r, res in results.items()}, timestamp
            )

        run = ExportRunResult(results=results, summary_path=summary_path, metrics=run_metrics)
        logger.debug(run_metrics.to_summary())
        logger.info(
            "Export finished",
            extra={
                "records": run.total_records,
                "files": run.total_files,
                "failed": [r.value for r in run.failed],
            },
        )
        return run

    async def test_connection(self) -> dict[str, Any]:
        """Fetch the domain list to verify credentials.

        Raises:
            ConfigurationError: API key or domain missing
            ExportError: the request failed
        """
        self.settings.require_credentials()
        domains = await DomainsFetcher(self.context()).fetch_domains()
        return {
            "domains": [d.get("name") for d in domains],
            "domain_count": len(domains),
            "gate": self.gate.status(),
        }

"""Validator balance exporter service.

Wires the aggregation job to the cron scheduler and serves the resulting
gauges over HTTP for Prometheus to scrape.

Processing flow:
1. Load settings from the environment (and .env)
2. Start the metrics HTTP endpoint
3. Start the balance scheduler (if enabled)
4. On SIGINT/SIGTERM: stop the scheduler, wait for the in-flight cycle, exit

Usage:
    python -m balance_exporter.service
"""

import signal
import sys

from wsgiref.simple_server import WSGIServer

import asyncio

from prometheus_client import start_http_server

from balance_exporter.balance.job import BalanceAggregationJob
from balance_exporter.balance.metrics import BalanceMetrics
from balance_exporter.clients.beacon import BeaconNodeClient
from balance_exporter.clients.explorer import ExplorerClient
from balance_exporter.clients.validator_metrics import ValidatorMetricsClient
from balance_exporter.helpers.config import Settings
from balance_exporter.helpers.errors import ConfigInvalidError
from balance_exporter.helpers.http import create_http_client
from balance_exporter.helpers.logging import configure_logging, get_logger
from balance_exporter.scheduler import CycleScheduler, SchedulerState


logger = get_logger(__name__)


class ExporterService:
    """Owns the HTTP client, the metrics registry, the job and its scheduler."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.http_client = create_http_client(timeout=settings.http_timeout)
        self.metrics = BalanceMetrics()
        self.job = BalanceAggregationJob(
            self.http_client,
            BeaconNodeClient(settings.cl_node_url, timeout=settings.http_timeout),
            ValidatorMetricsClient(
                settings.cl_validator_metrics_url, timeout=settings.http_timeout
            ),
            ExplorerClient(settings.scan_url, timeout=settings.http_timeout),
            self.metrics,
            max_concurrent_requests=settings.max_concurrent_requests,
        )
        self.scheduler: CycleScheduler | None = None
        if settings.scheduler_enable:
            self.scheduler = CycleScheduler(
                settings.balance_schedule, self.job, name="balance"
            )

        self._shutdown = asyncio.Event()
        self._metrics_server: WSGIServer | None = None

    def shutdown(self) -> None:
        """Request a graceful shutdown."""
        logger.info("Shutdown signal received, stopping...")
        self._shutdown.set()

    def start_metrics_server(self) -> None:
        """Serve the metrics registry on the configured address and port."""
        server, _ = start_http_server(
            self.settings.metrics_port,
            addr=self.settings.metrics_address,
            registry=self.metrics.registry,
        )
        self._metrics_server = server
        logger.info(
            "Serving metrics on %s:%s",
            self.settings.metrics_address,
            self.settings.metrics_port,
        )

    async def stop(self) -> None:
        """Stop the scheduler, wait for the running cycle and release resources."""
        scheduler = self.scheduler
        if scheduler is not None and scheduler.state is SchedulerState.RUNNING:
            scheduler.stop()
            await scheduler.wait_for_stop()

        if self._metrics_server is not None:
            self._metrics_server.shutdown()
            self._metrics_server = None

        await self.http_client.aclose()

    async def run(self) -> None:
        """Run until a shutdown signal arrives.

        Raises:
            ConfigInvalidError: If the cron expression is rejected at start
        """
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.shutdown)

        try:
            self.start_metrics_server()

            if self.scheduler is not None:
                self.scheduler.start()
            else:
                logger.warning("Balance scheduler is disabled")

            await self._shutdown.wait()
        finally:
            await self.stop()

        logger.info("Exporter stopped")


async def main() -> None:
    """Main entry point."""
    try:
        settings = Settings.from_env()
    except ConfigInvalidError as e:
        logger.error("Invalid configuration: %s", e)  # noqa: TRY400
        sys.exit(1)

    configure_logging(settings.log_level, log_color=settings.log_color)

    try:
        service = ExporterService(settings)
        await service.run()
    except ConfigInvalidError as e:
        logger.error("Invalid configuration: %s", e)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


def cli() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()

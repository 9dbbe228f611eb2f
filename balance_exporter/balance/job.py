"""Validator balance aggregation job.

Each cycle:
1. Resolve the working slot (head slot - 1)
2. Discover validator public keys from the validator client's metrics
3. Look up index and balance of every key at that slot (bounded fan-out,
   individual failures are skipped)
4. Merge total withdrawals from the explorer (failure leaves them at 0)
5. Sort by index, swap in the new snapshot and publish it

A cycle that cannot resolve the slot or the key set leaves the previous
snapshot untouched; the next tick starts from scratch.
"""

from typing import Protocol

import asyncio

import httpx

from balance_exporter.clients.beacon import BeaconNodeClient
from balance_exporter.clients.explorer import ExplorerClient
from balance_exporter.clients.validator_metrics import ValidatorMetricsClient
from balance_exporter.helpers.constants import DEFAULT_MAX_CONCURRENT_REQUESTS
from balance_exporter.helpers.errors import ExporterError
from balance_exporter.helpers.logging import get_logger
from balance_exporter.models import (
    CycleOutcome,
    Snapshot,
    ValidatorRecord,
    ValidatorState,
)


logger = get_logger(__name__)


class SnapshotSink(Protocol):
    """Receives every committed snapshot."""

    def publish(self, snapshot: Snapshot) -> None:
        """Publish the snapshot (e.g. update metric gauges)."""
        ...


class BalanceAggregationJob:
    """Collects validator balances and withdrawals into snapshots."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        beacon: BeaconNodeClient,
        validator_metrics: ValidatorMetricsClient,
        explorer: ExplorerClient,
        sink: SnapshotSink,
        *,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
    ) -> None:
        """Initialize the job.

        Args:
            http_client: Shared HTTP client for all upstream calls
            beacon: Beacon node client
            validator_metrics: Validator client metrics client
            explorer: Explorer client
            sink: Receiver of committed snapshots
            max_concurrent_requests: Bound on parallel validator lookups

        Raises:
            ValueError: If max_concurrent_requests is not positive
        """
        if max_concurrent_requests < 1:
            msg = "max_concurrent_requests must be at least 1"
            raise ValueError(msg)

        self.http_client = http_client
        self.beacon = beacon
        self.validator_metrics = validator_metrics
        self.explorer = explorer
        self.sink = sink
        self.max_concurrent_requests = max_concurrent_requests

        self._snapshot: Snapshot = ()
        self._validator_keys: list[str] = []

    @property
    def snapshot(self) -> Snapshot:
        """Latest committed snapshot, sorted by validator index."""
        return self._snapshot

    @property
    def validator_keys(self) -> list[str]:
        """Public keys discovered by the latest cycle that got that far."""
        return list(self._validator_keys)

    async def execute(self) -> CycleOutcome | None:
        """Scheduler entry point."""
        return await self.run()

    async def run(self) -> CycleOutcome | None:
        """Run one aggregation cycle.

        Never raises; failures are logged and leave the snapshot unchanged.

        Returns:
            Enrichment counters of a committed cycle, or None if it aborted
        """
        try:
            return await self._run_cycle()
        except Exception:
            logger.exception("Failed to execute the balance aggregation cycle")
            return None

    async def _run_cycle(self) -> CycleOutcome | None:
        slot = await self._resolve_slot()
        if slot is None:
            return None

        keys = await self._discover_keys()
        if keys is None:
            return None

        states, outcome = await self._enrich(slot, keys)
        if outcome.failed:
            logger.error("Success: %s, Fail: %s", outcome.succeeded, outcome.failed)

        withdrawals = await self._fetch_withdrawals(slot, states) if states else {}

        records = tuple(
            sorted(
                (
                    ValidatorRecord(
                        public_key=key,
                        chain_index=state.index,
                        balance_gwei=state.balance,
                        withdrawal_gwei=withdrawals.get(state.index, 0),
                    )
                    for key, state in states.items()
                ),
                key=lambda record: record.chain_index,
            )
        )
        self._commit(records)

        logger.info(
            "Committed snapshot of %s validators at slot %s", len(records), slot
        )
        return outcome

    async def _resolve_slot(self) -> int | None:
        try:
            head_slot = await self.beacon.get_head_slot(self.http_client)
        except ExporterError as e:
            logger.error("Failed to get the latest slot: %s", e)  # noqa: TRY400
            return None

        slot = head_slot - 1
        if slot <= 0:
            logger.warning("Head slot %s is too low, skipping cycle", head_slot)
            return None
        return slot

    async def _discover_keys(self) -> list[str] | None:
        try:
            keys = await self.validator_metrics.get_validator_keys(self.http_client)
        except ExporterError as e:
            logger.error("Failed to discover validators: %s", e)  # noqa: TRY400
            return None

        self._validator_keys = keys
        return keys

    async def _enrich(
        self, slot: int, keys: list[str]
    ) -> tuple[dict[str, ValidatorState], CycleOutcome]:
        """Look up every key at ``slot``; failed keys are skipped and counted."""
        semaphore = asyncio.Semaphore(self.max_concurrent_requests)

        async def lookup(key: str) -> ValidatorState | None:
            async with semaphore:
                try:
                    return await self.beacon.get_validator(self.http_client, slot, key)
                except Exception as e:
                    logger.debug("Validator %s lookup failed: %s", key, e)
                    return None

        results = await asyncio.gather(*(lookup(key) for key in keys))

        states: dict[str, ValidatorState] = {}
        seen_indices: set[int] = set()
        outcome = CycleOutcome()
        for key, state in zip(keys, results, strict=True):
            if state is None:
                outcome.failed += 1
                continue
            if state.index in seen_indices:
                logger.debug("Validator %s duplicates index %s", key, state.index)
                outcome.failed += 1
                continue
            seen_indices.add(state.index)
            states[key] = state
            outcome.succeeded += 1

        return states, outcome

    async def _fetch_withdrawals(
        self, slot: int, states: dict[str, ValidatorState]
    ) -> dict[int, int]:
        """Map validator index to total withdrawals; empty on failure."""
        indices = [state.index for state in states.values()]
        try:
            totals = await self.explorer.get_withdrawal_totals(
                self.http_client, indices, slot
            )
        except Exception as e:
            logger.error("Failed to get validator withdrawals: %s", e)  # noqa: TRY400
            return {}

        return {total.index: total.total_withdrawal_gwei for total in totals}

    def _commit(self, records: Snapshot) -> None:
        self._snapshot = records
        self.sink.publish(records)


__all__ = [
    "BalanceAggregationJob",
    "SnapshotSink",
]

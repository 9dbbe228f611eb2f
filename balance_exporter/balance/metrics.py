"""Prometheus gauges fed from balance snapshots."""

from prometheus_client import CollectorRegistry, Gauge

from balance_exporter.helpers.constants import (
    PUBKEY_LABEL,
    VALIDATOR_BALANCE_METRIC,
    VALIDATOR_WITHDRAWAL_METRIC,
)
from balance_exporter.helpers.logging import get_logger
from balance_exporter.helpers.parsers import gwei_to_eth
from balance_exporter.models import Snapshot


logger = get_logger(__name__)


class BalanceMetrics:
    """Snapshot sink that republishes validator balances as gauges.

    Amounts arrive in Gwei and are exported in the display unit. Series of
    public keys that drop out of the snapshot are removed so the scrape reflects
    the latest cycle only.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.balance = Gauge(
            VALIDATOR_BALANCE_METRIC,
            "current validator balance",
            [PUBKEY_LABEL],
            registry=self.registry,
        )
        self.withdrawal = Gauge(
            VALIDATOR_WITHDRAWAL_METRIC,
            "total validator withdrawal",
            [PUBKEY_LABEL],
            registry=self.registry,
        )
        self._published_keys: set[str] = set()

    def publish(self, snapshot: Snapshot) -> None:
        """Set both gauges for every record in the snapshot."""
        keys = {record.public_key for record in snapshot}

        for record in snapshot:
            self.balance.labels(record.public_key).set(
                gwei_to_eth(record.balance_gwei)
            )
            self.withdrawal.labels(record.public_key).set(
                gwei_to_eth(record.withdrawal_gwei)
            )

        for stale in self._published_keys - keys:
            self.balance.remove(stale)
            self.withdrawal.remove(stale)

        self._published_keys = keys
        logger.debug("Published metrics for %s validators", len(snapshot))


__all__ = ["BalanceMetrics"]

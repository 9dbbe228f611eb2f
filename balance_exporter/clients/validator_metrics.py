"""Validator client metrics endpoint client."""

import httpx
from prometheus_client.parser import text_string_to_metric_families

from balance_exporter.helpers.constants import (
    DEFAULT_TIMEOUT,
    PUBKEY_LABEL,
    VALIDATOR_STATUSES_METRIC,
)
from balance_exporter.helpers.errors import UpstreamMalformedError
from balance_exporter.helpers.http import get_text


def _is_header(line: str, name: str) -> bool:
    parts = line.split(maxsplit=3)
    return (
        len(parts) >= 3
        and parts[0] == "#"
        and parts[1] in {"HELP", "TYPE"}
        and parts[2] == name
    )


def extract_metric_family(payload: str, name: str) -> str:
    """Cut the lines of one metric family out of an exposition payload.

    The block starts at the family's ``# HELP`` (or ``# TYPE``) header and keeps
    that header, the matching ``# TYPE`` line and every sample line of the
    family. Lines of other families are dropped.

    Args:
        payload: Full text exposition payload
        name: Metric family name

    Returns:
        The family block terminated by a newline, or ``""`` if the family is absent

    Example:
        >>> extract_metric_family(
        ...     '# HELP up Up\\n# TYPE up gauge\\nup 1\\nother 2\\n', "up"
        ... )
        '# HELP up Up\\n# TYPE up gauge\\nup 1\\n'
    """
    samples = (f"{name}{{", f"{name} ")

    block: list[str] = []
    found = False
    for raw_line in payload.splitlines():
        line = raw_line.strip()
        if not found:
            if _is_header(line, name):
                found = True
                block.append(line)
        elif _is_header(line, name) or line.startswith(samples):
            block.append(line)

    return "\n".join(block) + "\n" if block else ""


def parse_label_values(block: str, name: str, label: str) -> list[str]:
    """Parse a family block and return the distinct values of one label.

    Args:
        block: Exposition text holding the family
        name: Metric family name
        label: Label whose values are collected

    Returns:
        Label values in first-seen order

    Raises:
        UpstreamMalformedError: If the block cannot be parsed
    """
    values: list[str] = []
    seen: set[str] = set()
    try:
        for family in text_string_to_metric_families(block):
            if family.name != name:
                continue
            for sample in family.samples:
                value = sample.labels.get(label)
                if value and value not in seen:
                    seen.add(value)
                    values.append(value)
    except ValueError as e:
        msg = f"Cannot parse {name} metric family: {e}"
        raise UpstreamMalformedError(msg) from e
    return values


class ValidatorMetricsClient:
    """Client for the validator client's Prometheus endpoint."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        if not base_url:
            msg = "Validator metrics URL cannot be empty"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch_metrics(self, client: httpx.AsyncClient) -> str:
        """Fetch the raw exposition payload."""
        return await get_text(client, f"{self.base_url}/metrics", timeout=self.timeout)

    async def get_validator_keys(self, client: httpx.AsyncClient) -> list[str]:
        """Discover the public keys managed by the validator client.

        Args:
            client: HTTP client instance

        Returns:
            Public keys labelled on the ``validator_statuses`` series

        Raises:
            UpstreamUnavailableError: If the endpoint cannot be reached
            UpstreamMalformedError: If the family is absent, empty or unparsable
        """
        payload = await self.fetch_metrics(client)
        block = extract_metric_family(payload, VALIDATOR_STATUSES_METRIC)
        if not block:
            msg = f"No {VALIDATOR_STATUSES_METRIC} metric family found"
            raise UpstreamMalformedError(msg)

        keys = parse_label_values(block, VALIDATOR_STATUSES_METRIC, PUBKEY_LABEL)
        if not keys:
            msg = f"No {VALIDATOR_STATUSES_METRIC} series with a {PUBKEY_LABEL} label"
            raise UpstreamMalformedError(msg)
        return keys


__all__ = [
    "ValidatorMetricsClient",
    "extract_metric_family",
    "parse_label_values",
]

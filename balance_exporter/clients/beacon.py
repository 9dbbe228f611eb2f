"""Consensus-layer (beacon) node REST client."""

from typing import Any

import httpx

from balance_exporter.helpers.constants import DEFAULT_TIMEOUT
from balance_exporter.helpers.errors import UpstreamMalformedError
from balance_exporter.helpers.http import get_json
from balance_exporter.helpers.parsers import parse_uint, prefix_0x
from balance_exporter.models import ValidatorState


class BeaconNodeClient:
    """Beacon node REST API client."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize beacon node client.

        Args:
            base_url: Beacon node base URL (e.g. ``http://agora-cl-node:3500``)
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If base_url is empty or None
        """
        if not base_url:
            msg = "Beacon node URL cannot be empty"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_head_slot(self, client: httpx.AsyncClient) -> int:
        """Get the slot of the current head block.

        Args:
            client: HTTP client instance

        Returns:
            Head slot number

        Raises:
            UpstreamUnavailableError: If the node cannot be reached
            UpstreamMalformedError: If the response carries no slot
        """
        url = f"{self.base_url}/eth/v2/beacon/blocks/head"
        contents = await get_json(client, url, timeout=self.timeout)

        try:
            slot = contents["data"]["message"]["slot"]
            return parse_uint(slot)
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Head block response has no usable slot: {e}"
            raise UpstreamMalformedError(msg) from e

    async def get_validator(
        self, client: httpx.AsyncClient, slot: int, public_key: str
    ) -> ValidatorState:
        """Get a validator's index and balance at a slot.

        Args:
            client: HTTP client instance
            slot: State slot to query
            public_key: Validator public key, with or without ``0x``

        Returns:
            ValidatorState with index and balance in Gwei

        Raises:
            NotFoundError: If the node does not know the validator
            UpstreamUnavailableError: If the node cannot be reached
            UpstreamMalformedError: If index or balance is missing
        """
        url = (
            f"{self.base_url}/eth/v1/beacon/states/{slot}"
            f"/validators/{prefix_0x(public_key)}"
        )
        contents: Any = await get_json(client, url, timeout=self.timeout)

        try:
            data = contents["data"]
            return ValidatorState(
                index=parse_uint(data["index"]),
                balance=parse_uint(data["balance"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            msg = f"Validator {public_key} response is missing index or balance: {e}"
            raise UpstreamMalformedError(msg) from e


__all__ = ["BeaconNodeClient"]

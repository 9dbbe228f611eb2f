"""Block explorer API client (withdrawal totals)."""

from collections.abc import Iterable

import httpx
from pydantic import ValidationError

from balance_exporter.helpers.constants import DEFAULT_TIMEOUT
from balance_exporter.helpers.errors import UpstreamMalformedError
from balance_exporter.helpers.http import get_json
from balance_exporter.models import WithdrawalTotal


class ExplorerClient:
    """Explorer REST API client."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize explorer client.

        Args:
            base_url: Explorer base URL (e.g. ``https://www.agorascan.io``)
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If base_url is empty or None
        """
        if not base_url:
            msg = "Explorer URL cannot be empty"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_withdrawal_totals(
        self, client: httpx.AsyncClient, indices: Iterable[int], slot: int
    ) -> list[WithdrawalTotal]:
        """Fetch total withdrawals of several validators in one request.

        Args:
            client: HTTP client instance
            indices: Validator indices
            slot: Slot the totals are computed at

        Returns:
            One WithdrawalTotal per validator the explorer knows about. A
            ``null`` data field yields an empty list.

        Raises:
            UpstreamUnavailableError: If the explorer cannot be reached
            UpstreamMalformedError: If the payload has an unexpected shape

        Example:
            ```python
            explorer = ExplorerClient("https://www.agorascan.io")
            async with create_http_client() as client:
                totals = await explorer.get_withdrawal_totals(client, [5, 7], 999)
            ```
        """
        joined = ",".join(str(index) for index in indices)
        if not joined:
            return []

        url = f"{self.base_url}/api/v1/validator/{joined}/totalwithdrawals"
        contents = await get_json(
            client, url, params={"slot": slot}, timeout=self.timeout
        )

        if not isinstance(contents, dict):
            msg = "Withdrawal totals response is not an object"
            raise UpstreamMalformedError(msg)

        items = contents.get("data")
        if items is None:
            return []
        if not isinstance(items, list):
            items = [items]

        try:
            return [WithdrawalTotal.model_validate(item) for item in items]
        except ValidationError as e:
            msg = f"Invalid withdrawal totals item: {e}"
            raise UpstreamMalformedError(msg) from e


__all__ = ["ExplorerClient"]
